# tests/domains/__init__.py

"""
도메인별 테스트 모듈 패키지입니다.

- `test_inv_n.py`, `test_filters_n.py`, `test_services_n.py`: 'inv' 도메인 (창고/자재 재고 집계).
- `test_catalog_n.py`: 'catalog' 도메인 (연결 확인 및 테이블 브라우저).
- `test_excel_n.py`: 'excel' 도메인 (엑셀 보고서 업로드/조회).
"""

__all__ = []
