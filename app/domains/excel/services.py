# app/domains/excel/services.py

"""
엑셀 창고 보고서 수집(ingestion) 서비스입니다.

업로드: 각 파일의 첫 번째 시트 C2 셀(2행 3열)의 아랍어 창고 문구로 창고를 판별하고,
실패하면 원본 파일명으로, 그래도 실패하면 정식 슬롯이 아닌 대체 이름으로 저장합니다.
판별된 파일은 창고별 정식 슬롯(warehouse_<코드>.xlsx)의 이전 내용을 지우고 새로 씁니다.
이전 업로드 묶음에서 남은 미판별 파일은 새 묶음을 처리하기 전에 지웁니다.
임시 업로드 파일은 성공/실패와 관계없이 항상 삭제됩니다.

파일 형식은 확장자가 아니라 내용으로 구분합니다. ZIP 컨테이너(.xlsx/.xlsm)는 openpyxl,
구형 BIFF 통합 문서(.xls)는 xlrd로 읽으므로, 정식 슬롯 이름은 원본 형식과 관계없이 같습니다.

조회: 세 개의 정식 슬롯을 읽어 라이브 쿼리 경로와 같은 창고별 자재 목록 형태로 돌려줍니다.
"""

import logging
import time
import uuid
import zipfile
from dataclasses import dataclass
from datetime import datetime, UTC
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import xlrd
from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool
from openpyxl import load_workbook

from app.core.responses import utc_timestamp
from app.domains.inv.models import KNOWN_STORES
from app.utils import files

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".xlsx", ".xlsm", ".xls"}
UNCLASSIFIED_PREFIX = "unclassified_"

# 창고 판별 셀 위치 (1부터 시작)
STORE_INFO_ROW = 2
STORE_INFO_COLUMN = 3
# 자재 데이터는 4행부터 시작합니다.
HEADER_ROWS = 3
NAME_HEADER = "اسم المادة"
DEFAULT_UNITY = "وحدة"
TEMP_SUBDIR = "tmp"

# 창고 코드 → 판별 어휘. 순서대로 검사합니다.
STORE_VOCABULARY: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("12", ("الجاهزة", "جاهزة", "جاهز")),
    ("102", ("الفعالة", "فعالة", "فعال")),
    ("101", ("المساعدة", "مساعدة", "مساعد")),
)


@dataclass(frozen=True)
class WarehouseSlot:
    code: str
    name: str

    @property
    def filename(self) -> str:
        return f"warehouse_{self.code}.xlsx"


SLOTS: Tuple[WarehouseSlot, ...] = tuple(WarehouseSlot(code, name) for code, name in KNOWN_STORES.items())
SLOT_BY_CODE: Dict[str, WarehouseSlot] = {slot.code: slot for slot in SLOTS}


# =============================================================================
# 1. 통합 문서 읽기
# =============================================================================
def read_rows(
    path: Path,
    *,
    min_row: int = 1,
    max_row: Optional[int] = None,
    min_col: int = 1,
    max_col: Optional[int] = None,
) -> List[Tuple[Any, ...]]:
    """
    첫 번째 시트의 셀 값을 행 단위로 읽습니다. 행/열 번호는 1부터 시작합니다.
    빈 셀은 형식과 관계없이 None 입니다.
    """
    if zipfile.is_zipfile(path):
        return _read_ooxml_rows(path, min_row, max_row, min_col, max_col)
    return _read_biff_rows(path, min_row, max_row, min_col, max_col)


def _read_ooxml_rows(path, min_row, max_row, min_col, max_col) -> List[Tuple[Any, ...]]:
    # 파일 객체로 열면 openpyxl이 확장자를 검사하지 않습니다 (.xls 이름의 xlsx 내용 허용).
    with open(path, "rb") as handle:
        wb = load_workbook(handle, read_only=True, data_only=True)
        try:
            ws = wb.worksheets[0]
            # 일부 내보내기 도구는 시트 크기(dimension)를 잘못 기록하므로 실제 행을 끝까지 읽습니다.
            ws.reset_dimensions()
            return [
                tuple(row)
                for row in ws.iter_rows(
                    min_row=min_row, max_row=max_row, min_col=min_col, max_col=max_col, values_only=True
                )
            ]
        finally:
            wb.close()


def _read_biff_rows(path, min_row, max_row, min_col, max_col) -> List[Tuple[Any, ...]]:
    book = xlrd.open_workbook(str(path), on_demand=True)
    try:
        sheet = book.sheet_by_index(0)
        last_row = sheet.nrows if max_row is None else min(max_row, sheet.nrows)
        return [
            tuple(
                None if value == "" else value
                for value in sheet.row_values(index, start_colx=min_col - 1, end_colx=max_col)
            )
            for index in range(min_row - 1, last_row)
        ]
    finally:
        book.release_resources()


# =============================================================================
# 2. 창고 판별
# =============================================================================
def classify_text(text: Optional[str]) -> Optional[str]:
    """문구에 포함된 창고 어휘로 창고 코드를 찾습니다. 없으면 None."""
    if not text:
        return None
    for code, words in STORE_VOCABULARY:
        if any(word in text for word in words):
            return code
    return None


def read_store_info(path: Path) -> Optional[str]:
    """첫 번째 시트의 창고 판별 셀 값을 문자열로 읽습니다."""
    rows = read_rows(
        path,
        min_row=STORE_INFO_ROW, max_row=STORE_INFO_ROW,
        min_col=STORE_INFO_COLUMN, max_col=STORE_INFO_COLUMN,
    )
    value = rows[0][0] if rows and rows[0] else None
    return str(value) if value is not None else None


def fallback_filename() -> str:
    """판별 실패 시 쓰는 이름. 정식 슬롯 이름과 겹치지 않습니다."""
    return f"{UNCLASSIFIED_PREFIX}{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}.xlsx"


def purge_unclassified(upload_dir: Path) -> int:
    """이전 업로드에서 남은 미판별 파일을 지우고 지운 개수를 돌려줍니다."""
    removed = 0
    for path in upload_dir.glob(f"{UNCLASSIFIED_PREFIX}*"):
        if path.is_file():
            files.remove_file(path)
            removed += 1
    if removed:
        logger.info("이전 미판별 업로드 파일 %d개 삭제", removed)
    return removed


def resolve_target_name(path: Path, original_name: str) -> Tuple[str, Optional[str]]:
    """
    저장할 파일 이름과 판별된 창고 코드를 돌려줍니다.
    셀 내용 → 원본 파일명 → 대체 이름 순서로 결정합니다.
    """
    code = classify_text(read_store_info(path)) or classify_text(original_name)
    if code is not None:
        return SLOT_BY_CODE[code].filename, code
    return fallback_filename(), None


# =============================================================================
# 3. 업로드 처리
# =============================================================================
async def ingest_uploads(upload_dir: Path, uploads: Sequence[UploadFile]) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """
    업로드 묶음을 처리합니다. 개별 파일의 실패는 기록 후 건너뛰고 묶음 전체는 계속 진행합니다.

    Returns:
        (저장된 파일 정보 목록, 건너뛴 파일 정보 목록)
    """
    upload_dir.mkdir(parents=True, exist_ok=True)
    temp_dir = upload_dir / TEMP_SUBDIR
    purge_unclassified(upload_dir)

    saved: List[Dict[str, Any]] = []
    skipped: List[Dict[str, Any]] = []

    for upload in uploads:
        original_name = upload.filename or ""
        if Path(original_name).suffix.lower() not in ALLOWED_EXTENSIONS:
            await upload.close()
            skipped.append({"original_name": original_name, "reason": "يجب أن يكون الملف من نوع Excel (.xlsx, .xls)"})
            continue

        temp_path = files.temp_upload_path(temp_dir, Path(original_name).suffix.lower())
        try:
            size = await files.save_upload(temp_path, upload)
            target_name, code = await run_in_threadpool(resolve_target_name, temp_path, original_name)
            target_path = upload_dir / target_name
            await files.replace_file(temp_path, target_path)
            logger.info("엑셀 보고서 저장: %s -> %s (창고 %s)", original_name, target_name, code)
            saved.append({
                "original_name": original_name,
                "saved_name": target_name,
                "store_code": code,
                "path": str(target_path),
                "size": size,
                "upload_date": utc_timestamp(),
            })
        except Exception as exc:
            logger.exception("엑셀 파일 처리 실패, 건너뜀: %s", original_name)
            skipped.append({"original_name": original_name, "reason": str(exc) or type(exc).__name__})
        finally:
            files.remove_file(temp_path)

    return saved, skipped


# =============================================================================
# 4. 정식 슬롯 조회
# =============================================================================
def parse_number(value: Any) -> float:
    """셀 값을 수량으로 바꿉니다. 숫자로 읽을 수 없으면 0."""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip().replace(",", "")
    try:
        return float(text)
    except ValueError:
        return 0.0


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def parse_report(path: Path) -> List[Dict[str, Any]]:
    """정식 슬롯 파일 하나를 읽어 자재 항목 목록을 만듭니다. 머리글 행과 이름이 빈 행은 건너뜁니다."""
    materials = []
    for row in read_rows(path, min_row=HEADER_ROWS + 1):
        # 끝쪽 빈 셀이 생략된 행은 None으로 채웁니다.
        code, name, quantity = (tuple(row) + (None, None, None))[:3]
        name = _cell_text(name)
        if not name or name == NAME_HEADER:
            continue
        materials.append({
            "code": _cell_text(code),
            "name": name,
            "quantity": parse_number(quantity),
            "unity": DEFAULT_UNITY,
        })
    return materials


def read_slot(upload_dir: Path, slot: WarehouseSlot) -> Optional[Dict[str, Any]]:
    path = upload_dir / slot.filename
    if not path.is_file():
        logger.info("정식 슬롯 파일 없음: %s", slot.filename)
        return None
    materials = parse_report(path)
    return {
        "code": slot.code,
        "name": slot.name,
        "guid": None,
        "materials_count": len(materials),
        "total_quantity": round(sum(item["quantity"] for item in materials), 4),
        "materials": materials,
        "source_file": slot.filename,
    }


def read_all_slots(upload_dir: Path) -> List[Dict[str, Any]]:
    """
    세 정식 슬롯을 창고 코드 순서대로 읽습니다.
    읽을 수 없는 슬롯은 기록 후 없는 것으로 취급합니다.
    """
    stores = []
    for slot in SLOTS:
        try:
            store = read_slot(upload_dir, slot)
        except Exception:
            logger.exception("정식 슬롯 파일을 읽지 못했습니다: %s", slot.filename)
            continue
        if store is not None:
            stores.append(store)
    return stores


def list_slots(upload_dir: Path) -> List[Dict[str, Any]]:
    """현재 존재하는 정식 슬롯 파일 정보."""
    entries = []
    for slot in SLOTS:
        path = upload_dir / slot.filename
        if path.is_file():
            stat = path.stat()
            entries.append({
                "code": slot.code,
                "name": slot.name,
                "filename": slot.filename,
                "size": stat.st_size,
                "modified_at": datetime.fromtimestamp(stat.st_mtime, UTC).isoformat(timespec="seconds"),
            })
    return entries


def delete_slot(upload_dir: Path, code: str) -> bool:
    """정식 슬롯 파일을 삭제합니다. 파일이 없었으면 False."""
    path = upload_dir / SLOT_BY_CODE[code].filename
    if not path.is_file():
        return False
    files.remove_file(path)
    return True
