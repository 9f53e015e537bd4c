# app/__init__.py

"""
창고 재고 조회(Warehouse Inventory) FastAPI 애플리케이션의 메인 패키지입니다.

관계형 데이터베이스의 재고 원장(자재, 창고, 입출고 이동 기록)과
업로드된 엑셀 보고서를 읽기 전용 REST API로 제공합니다.

- `core`: 설정, 데이터베이스 연결 제공자, 의존성, 공통 에러 처리.
- `domains`: 비즈니스 도메인별 모듈 (inv, catalog, excel).
- `utils`: 파일 처리 등 범용 유틸리티.
"""

APP_NAME = "Warehouse Inventory API"
APP_VERSION = "0.1.0"

__version__ = APP_VERSION
__title__ = APP_NAME
__description__ = "Read-only inventory reporting API over the warehouse ledger and uploaded spreadsheet reports."
__all__ = []
