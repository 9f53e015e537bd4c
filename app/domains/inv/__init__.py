# app/domains/inv/__init__.py

"""
'inv' (Inventory) 도메인 패키지입니다.

창고, 자재, 자재 그룹, 입출고 이동 기록을 읽어 창고별 재고 집계를 제공합니다.

주요 서브모듈:
- `models.py`: 외부 소유 테이블에 매핑되는 SQLModel 정의.
- `filters.py`: 조회 필터 명세와 기간 해석.
- `crud.py`: 파라미터 바인딩 집계 쿼리 빌더 및 실행.
- `services.py`: 평면 행 → 창고별 중첩 응답 변환.
- `schemas.py`: 응답 Pydantic 모델.
- `routers.py`: API 엔드포인트.
"""
