# tests/__init__.py

"""
창고 재고 조회 API의 테스트 스위트 패키지입니다.

- `conftest.py`: 인메모리 SQLite 테스트 DB, 시드 데이터, 비동기 테스트 클라이언트, 엑셀 보고서 픽스처.
- `domains/`: 도메인(inv, catalog, excel)별 API 통합 테스트와 단위 테스트.
- `test_main.py`: 루트/헬스 체크/공통 에러 처리 테스트.
- `test_database.py`, `test_config.py`, `test_check_connection.py`: 핵심 구성 요소 테스트.
"""

__title__ = "Warehouse Inventory API Tests"
__version__ = "0.1.0"
__all__ = []
