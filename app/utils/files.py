# app/utils/files.py

import os
import time
import uuid
from pathlib import Path

import aiofiles
from fastapi import UploadFile

# 업로드 스트림을 디스크로 옮길 때의 청크 크기
CHUNK_SIZE = 1024 * 1024


def temp_upload_path(upload_dir: Path, suffix: str = ".xlsx") -> Path:
    """
    임시 업로드 파일 경로 (예: <upload_dir>/temp_1718000000000_1a2b3c4d.xlsx)
    디렉토리가 없으면 생성합니다.
    """
    upload_dir.mkdir(parents=True, exist_ok=True)
    return upload_dir / f"temp_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}{suffix}"


async def save_upload(path: Path, upload_file: UploadFile) -> int:
    """
    업로드된 파일을 지정한 경로에 저장하고 저장된 바이트 수를 반환합니다.

    Args:
        path (Path): 저장할 파일 경로
        upload_file (UploadFile): FastAPI를 통해 업로드된 파일 객체
    """
    size = 0
    try:
        async with aiofiles.open(path, "wb") as buffer:
            while chunk := await upload_file.read(CHUNK_SIZE):
                size += len(chunk)
                await buffer.write(chunk)
    finally:
        await upload_file.close()
    return size


async def replace_file(source: Path, target: Path) -> None:
    """
    source의 내용을 target 옆의 임시 파일에 쓴 뒤 os.replace로 target에 덮어씁니다.
    복사 도중 실패하면 target의 기존 내용은 그대로 남습니다.
    같은 target을 동시에 쓰는 요청끼리는 마지막에 교체한 쪽이 남습니다.
    """
    part = target.with_name(f".{target.name}.{uuid.uuid4().hex[:8]}.part")
    try:
        async with aiofiles.open(source, "rb") as src, aiofiles.open(part, "wb") as dst:
            while chunk := await src.read(CHUNK_SIZE):
                await dst.write(chunk)
        os.replace(part, target)
    except BaseException:
        part.unlink(missing_ok=True)
        raise


def remove_file(path: Path) -> None:
    """파일이 있으면 삭제합니다."""
    path.unlink(missing_ok=True)
