# app/domains/excel/__init__.py

"""
'excel' 도메인 패키지입니다.

창고별 엑셀 재고 보고서를 업로드받아 창고 코드별 정식 슬롯에 보관하고,
보관된 보고서를 다시 읽어 창고별 자재 목록으로 제공합니다.
데이터베이스를 사용하지 않으며, 라이브 쿼리 경로(inv)와 같은 응답 형태를 씁니다.
"""
