# app/domains/excel/schemas.py

from typing import List, Optional
from pydantic import BaseModel, Field

from app.domains.inv.schemas import Envelope


class SavedReport(BaseModel):
    original_name: str = Field(..., description="업로드된 원본 파일명")
    saved_name: str = Field(..., description="저장된 파일명 (정식 슬롯 또는 대체 이름)")
    store_code: Optional[str] = Field(None, description="판별된 창고 코드")
    path: str
    size: int = Field(..., description="바이트 단위 크기")
    upload_date: str


class SkippedReport(BaseModel):
    original_name: str
    reason: str


class UploadReportsResponse(Envelope):
    count: int
    files: List[SavedReport]
    skipped: List[SkippedReport] = []


class ReportMaterial(BaseModel):
    code: str
    name: str
    quantity: float
    unity: str


class ReportStore(BaseModel):
    code: str
    name: str
    guid: Optional[str] = None
    materials_count: int
    total_quantity: float
    materials: List[ReportMaterial]
    source_file: str


class ReportMaterialsByStoresResponse(Envelope):
    total_stores: int
    total_materials: int
    stores: List[ReportStore]


class ReportSlot(BaseModel):
    code: str
    name: str
    filename: str
    size: int
    modified_at: str


class ReportSlotsResponse(Envelope):
    count: int
    reports: List[ReportSlot]
