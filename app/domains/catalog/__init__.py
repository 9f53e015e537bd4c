# app/domains/catalog/__init__.py

"""
'catalog' 도메인 패키지입니다.

데이터베이스 카탈로그(시스템 메타데이터)를 통해 테이블 목록, 컬럼 정보, 기본 키, 행 데이터를
조회하는 범용 테이블 브라우저와 연결 확인 엔드포인트를 제공합니다.
"""
