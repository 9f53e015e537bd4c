# app/domains/excel/routers.py

"""
엑셀 보고서 업로드/조회 엔드포인트입니다.
"""

from pathlib import Path
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from app.core import dependencies as deps
from app.core.config import settings
from app.core.responses import envelope
from app.domains.excel import schemas as excel_schemas
from app.domains.excel import services as excel_services

router = APIRouter(
    tags=["Excel Reports (엑셀 보고서)"],
    responses={404: {"description": "Not found"}},
)


def upload_directory() -> Path:
    # monkeypatch로 변경된 설정 값을 참조할 수 있도록 런타임에 경로를 읽습니다.
    return Path(settings.UPLOAD_DIR)


@router.post("/upload-reports", response_model=excel_schemas.UploadReportsResponse)
async def upload_reports(files: List[UploadFile] = File(...)):
    """
    창고 엑셀 보고서를 업로드합니다. 판별된 창고의 정식 슬롯 파일은 새 파일로 교체됩니다.
    """
    if not files:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="لم يتم رفع أي ملفات")
    if len(files) > settings.MAX_UPLOAD_FILES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"الحد الأقصى لعدد الملفات هو {settings.MAX_UPLOAD_FILES}",
        )

    saved, skipped = await excel_services.ingest_uploads(upload_directory(), files)
    return envelope(
        "تم رفع الملفات بنجاح واستبدال الملفات القديمة",
        count=len(saved),
        files=saved,
        skipped=skipped,
    )


@router.get("/materials-by-stores", response_model=excel_schemas.ReportMaterialsByStoresResponse)
async def read_report_materials_by_stores():
    """정식 슬롯 파일(warehouse_12/101/102.xlsx)에서 창고별 자재 목록을 읽습니다."""
    upload_dir = upload_directory()
    if not upload_dir.is_dir():
        return envelope("لا توجد ملفات مرفوعة", total_stores=0, total_materials=0, stores=[])

    stores = await run_in_threadpool(excel_services.read_all_slots, upload_dir)
    return envelope(
        "تم جلب المواد من ملفات Excel بنجاح",
        total_stores=len(stores),
        total_materials=sum(store["materials_count"] for store in stores),
        stores=stores,
    )


@router.get("/reports", response_model=excel_schemas.ReportSlotsResponse)
async def read_reports():
    """현재 보관 중인 정식 슬롯 파일 목록을 조회합니다."""
    reports = excel_services.list_slots(upload_directory())
    return envelope("تم جلب قائمة التقارير بنجاح", count=len(reports), reports=reports)


@router.delete("/reports/{storeCode}")
async def delete_report(store_code: str = Depends(deps.valid_store_code)):
    """창고의 정식 슬롯 파일을 삭제합니다."""
    if not excel_services.delete_slot(upload_directory(), store_code):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"لا يوجد تقرير للمستودع {store_code}",
        )
    return envelope(f"تم حذف تقرير المستودع {store_code}")
