# app/utils/__init__.py

"""
특정 비즈니스 도메인에 속하지 않는 범용 유틸리티 패키지입니다.

주요 서브모듈:
- `files.py`: 업로드 파일의 임시 저장, 교체, 정리.
"""

# flake8: noqa
from . import files

__all__ = ["files"]
