# tests/conftest.py

import os
from datetime import date, timedelta
from typing import AsyncGenerator, Callable, Iterable, Optional

# 설정 객체는 임포트 시점에 만들어지므로, 앱을 임포트하기 전에 테스트용 DB URL을 지정합니다.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402
import xlwt  # noqa: E402
from openpyxl import Workbook  # noqa: E402

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402

# app.main을 임포트하여 FastAPI 앱 인스턴스에 접근합니다.
from app.main import app as main_app  # noqa: E402
from app.core import dependencies as deps  # noqa: E402
from app.core.config import settings  # noqa: E402

# SQLModel.metadata.create_all()이 테이블을 인식하려면 모델이 한 번 이상 임포트되어야 합니다.
from app.domains.inv import models as inv_models  # noqa: E402


# --- 테스트용 데이터베이스 설정 ---
# 운영 DB와 분리된 인메모리 SQLite를 사용합니다.
# StaticPool로 모든 세션이 같은 연결(같은 메모리 DB)을 공유합니다.
TEST_DATABASE_URL = "sqlite+aiosqlite://"

TODAY = date.today()


@pytest_asyncio.fixture(scope="function")
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    테스트 함수마다 새로운 메모리 DB를 만들고 모든 테이블을 생성합니다.
    테스트가 끝나면 엔진을 닫아 메모리 DB도 함께 사라집니다.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """테스트용 비동기 데이터베이스 세션을 제공합니다."""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with TestingSessionLocal() as session:
        yield session


# --- 재고 시드 데이터 ---
def make_movement(
    guid: str,
    store_guid: str,
    material_guid: str,
    qty: float,
    price: float,
    days_ago: int,
    expire_in: Optional[int] = None,
) -> inv_models.Movement:
    return inv_models.Movement(
        guid=guid,
        bill_guid=f"bill-{guid}",
        store_guid=store_guid,
        material_guid=material_guid,
        qty=qty,
        price=price,
        production_date=TODAY - timedelta(days=days_ago),
        expire_date=TODAY + timedelta(days=expire_in) if expire_in is not None else None,
    )


@pytest_asyncio.fixture(scope="function")
async def seeded_db(db_session: AsyncSession) -> AsyncSession:
    """
    창고 4개(고정 창고 3개 + 목록 밖 창고 1개), 자재 그룹 2개, 자재 5개와 이동 기록을 넣습니다.

    기대 집계:
      창고 12  : B-001 Carton Box 5 (단가 10, 유통기한 지남), B-002 100%_Label 7 (단가 1, 400일 전 생산)
      창고 101 : 없음
      창고 102 : A-001 Paracetamol 120 (단가 2, 4 → 평균 3), A-002 Ibuprofen 40 (단가 1),
                 B-001 Carton Box 0 (+10/-10 → 결과에서 제외)
      창고 999 : A-001 1000 (고정 목록 밖이므로 어떤 집계에도 나타나지 않음)
      C-001 Unused 는 이동 기록이 없습니다.
    """
    db_session.add_all([
        inv_models.Store(guid="s-12", code="12", name="مستودع المواد الجاهزة", keeper="Ali"),
        inv_models.Store(guid="s-101", code="101", name="مستودع المواد الاولية المساعدة"),
        inv_models.Store(guid="s-102", code="102", name="مستودع المواد الاولية الفعالة", address="Block B"),
        inv_models.Store(guid="s-999", code="999", name="Other", is_active=False),
        inv_models.MaterialGroup(guid="g-1", code="G01", name="Raw"),
        inv_models.MaterialGroup(guid="g-2", code="G02", name="Packaging"),
    ])
    await db_session.flush()
    db_session.add_all([
        inv_models.Material(
            guid="m-1", code="A-001", name="Paracetamol", unity="kg", group_guid="g-1",
            price_retail=5.0, price_wholesale=4.5, price_last=4.0, has_expire_date=True,
        ),
        inv_models.Material(guid="m-2", code="A-002", name="Ibuprofen", unity="kg", group_guid="g-1"),
        inv_models.Material(guid="m-3", code="B-001", name="Carton Box", unity="pcs", group_guid="g-2"),
        inv_models.Material(guid="m-4", code="B-002", name="100%_Label", unity="pcs", group_guid="g-2"),
        inv_models.Material(guid="m-5", code="C-001", name="Unused", unity="pcs"),
    ])
    await db_session.flush()
    db_session.add_all([
        make_movement("t-1", "s-102", "m-1", 100, 2.0, days_ago=2, expire_in=300),
        make_movement("t-2", "s-102", "m-1", 20, 4.0, days_ago=60),
        make_movement("t-3", "s-102", "m-2", 40, 1.0, days_ago=3),
        make_movement("t-4", "s-102", "m-3", 10, 1.0, days_ago=5),
        make_movement("t-5", "s-102", "m-3", -10, 1.0, days_ago=4),
        make_movement("t-6", "s-12", "m-3", 5, 10.0, days_ago=1, expire_in=-10),
        make_movement("t-7", "s-12", "m-4", 7, 1.0, days_ago=400),
        make_movement("t-8", "s-999", "m-1", 1000, 1.0, days_ago=1),
    ])
    await db_session.commit()
    return db_session


# --- 비동기 테스트 클라이언트 픽스처 ---
@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    테스트용 DB 세션을 주입한 AsyncClient 입니다.
    lifespan은 실행하지 않으므로 운영 DB 연결 제공자는 만들어지지 않습니다.
    """
    async def override_get_db_session():
        yield db_session

    original_overrides = main_app.dependency_overrides.copy()
    try:
        main_app.dependency_overrides[deps.get_db_session] = override_get_db_session
        async with AsyncClient(transport=ASGITransport(app=main_app), base_url="http://test") as async_client:
            yield async_client
    finally:
        # 픽스처가 끝나면 오버라이드를 반드시 원래대로 복원합니다.
        main_app.dependency_overrides.clear()
        main_app.dependency_overrides.update(original_overrides)


@pytest_asyncio.fixture(scope="function")
async def seeded_client(seeded_db: AsyncSession, client: AsyncClient) -> AsyncClient:
    """시드 데이터가 들어간 DB를 사용하는 클라이언트."""
    return client


# --- 엑셀 보고서 픽스처 ---
@pytest.fixture(scope="function")
def upload_dir(tmp_path, monkeypatch):
    """정식 슬롯 디렉토리를 테스트 임시 경로로 바꿉니다. 디렉토리는 만들지 않습니다."""
    directory = tmp_path / "excel-reports"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(directory))
    return directory


@pytest.fixture(scope="function")
def report_factory(tmp_path) -> Callable[..., bytes]:
    """
    창고 보고서 형식의 워크북을 만들어 바이트로 돌려주는 팩토리입니다.
    1행: 제목, 2행 C열: 창고 정보, 3행: 헤더, 4행부터: 자재 행 (코드, 이름, 수량, 단위, 가격).
    fmt="xls" 이면 구형 BIFF 형식(.xls)으로 저장합니다.
    """
    counter = {"n": 0}
    headers = ["رمز المادة", "اسم المادة", "الكمية", "الوحدة", "السعر"]

    def _make(store_info: Optional[str], rows: Iterable[tuple], fmt: str = "xlsx") -> bytes:
        counter["n"] += 1
        path = tmp_path / f"report_source_{counter['n']}.{fmt}"
        if fmt == "xls":
            # xlwt의 행/열 번호는 0부터 시작합니다.
            book = xlwt.Workbook(encoding="utf-8")
            sheet = book.add_sheet("Sheet1")
            sheet.write(0, 0, "تقرير جرد المواد")
            if store_info is not None:
                sheet.write(1, 2, store_info)
            for col, header in enumerate(headers):
                sheet.write(2, col, header)
            for row_idx, row in enumerate(rows, start=3):
                for col, value in enumerate(row):
                    if value is not None:
                        sheet.write(row_idx, col, value)
            book.save(str(path))
            return path.read_bytes()

        workbook = Workbook()
        sheet = workbook.active
        sheet.cell(row=1, column=1, value="تقرير جرد المواد")
        if store_info is not None:
            sheet.cell(row=2, column=3, value=store_info)
        for col, header in enumerate(headers, start=1):
            sheet.cell(row=3, column=col, value=header)
        for row_idx, row in enumerate(rows, start=4):
            for col, value in enumerate(row, start=1):
                sheet.cell(row=row_idx, column=col, value=value)
        workbook.save(path)
        return path.read_bytes()

    return _make
