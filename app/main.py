# app/main.py

import logging
from typing import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import select
from sqlmodel.ext.asyncio.session import AsyncSession
from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware

# 핵심 설정 및 데이터베이스 모듈 임포트
from app.core.config import settings
from app.core import dependencies as deps
from app.core.database import DatabaseProvider
from app.core.errors import register_error_handlers
from app.core.responses import envelope

# 각 도메인의 라우터
from app.domains.catalog.routers import router as catalog_router
from app.domains.inv.routers import router as inv_router
from app.domains.excel.routers import router as excel_router

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG_MODE else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def build_db_provider() -> DatabaseProvider:
    return DatabaseProvider(
        settings.DATABASE_URL.get_secret_value(),
        echo=settings.DEBUG_MODE,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_recycle=settings.DB_POOL_RECYCLE,
    )


# -- 애플리케이션 수명 주기 이벤트 핸들러 --
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    연결 제공자를 한 번 만들어 `app.state.db`에 둡니다.
    시작 시 연결에 실패하면 예외를 다시 던져, 망가진 백엔드로 요청을 받지 않고 프로세스가 종료되게 합니다.
    """
    provider = build_db_provider()
    logger.info("데이터베이스에 연결하는 중...")
    try:
        await provider.ping()
    except Exception:
        logger.exception("서버 시작 실패: 데이터베이스에 연결할 수 없습니다.")
        await provider.release()
        raise
    app.state.db = provider
    logger.info("%s 시작 완료 (env=%s)", settings.APP_NAME, settings.APP_ENV)

    yield  # 애플리케이션 실행

    logger.info("서버를 종료하는 중...")
    await provider.release()


app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -- 도메인 라우터 포함 --
app.include_router(catalog_router, prefix=f"{settings.API_PREFIX}/database", tags=["Catalog (테이블 조회)"])
app.include_router(inv_router, prefix=f"{settings.API_PREFIX}/database", tags=["Inventory (창고/자재 재고 조회)"])
app.include_router(excel_router, prefix=f"{settings.API_PREFIX}/excel", tags=["Excel Reports (엑셀 보고서)"])


@app.get("/", summary="API Root", response_description="Welcome message and documentation link.")
async def read_root():
    """API의 시작점을 알리고 문서 링크를 제공합니다."""
    return envelope(f"Welcome to {settings.APP_NAME}. Visit /docs for interactive API documentation.")


@app.get("/health-check", summary="Health Check", response_description="Status of the application and database connection.")
async def health_check(session: AsyncSession = Depends(deps.get_db_session)):
    """
    데이터베이스에 간단한 쿼리를 실행하여 서비스의 정상 작동 여부를 확인합니다.
    실패하면 공통 에러 처리 단계에서 500 응답이 됩니다.
    """
    result = await session.execute(select(1))
    result.scalar_one()
    return envelope("ok", status="ok", database_connection="successful")


# -- Uvicorn 서버 직접 실행 (개발용) --
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT, reload=not settings.is_production)
