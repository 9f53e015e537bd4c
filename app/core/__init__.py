# app/core/__init__.py

"""
애플리케이션 전반에서 사용되는 핵심 구성 요소 패키지입니다.

- `config.py`: 환경 변수 및 .env 기반 설정 (Pydantic Settings).
- `database.py`: 데이터베이스 연결 제공자 (SQLAlchemy 비동기 엔진).
- `dependencies.py`: FastAPI 의존성 주입 함수.
- `errors.py`: 공통 에러 응답 형식과 예외 처리기.
- `responses.py`: 공통 성공 응답 형식.
"""

__all__ = []
