# app/core/dependencies.py

"""
FastAPI 애플리케이션의 의존성 주입(Dependency Injection)을 정의하는 모듈입니다.

- 연결 제공자 획득 (get_db_provider): lifespan에서 만든 `app.state.db`를 꺼냅니다.
- 데이터베이스 세션 (get_db_session).
- 창고 코드 경로 파라미터 검증 (valid_store_code).
"""

from typing import AsyncGenerator

from fastapi import HTTPException, Path, Request, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.database import DatabaseProvider
from app.domains.inv.models import KNOWN_STORES


def get_db_provider(request: Request) -> DatabaseProvider:
    """애플리케이션 시작 시 등록된 연결 제공자를 반환합니다."""
    provider = getattr(request.app.state, "db", None)
    if provider is None:
        raise RuntimeError("Database provider is not initialised; was the lifespan run?")
    return provider


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI 의존성 주입을 위한 비동기 데이터베이스 세션 제너레이터입니다.
    요청 처리 후 세션은 자동으로 닫힙니다.
    """
    provider = get_db_provider(request)
    async for session in provider.session():
        yield session


def valid_store_code(store_code: str = Path(..., alias="storeCode")) -> str:
    """
    창고 단위 엔드포인트의 경로 파라미터를 검증합니다.
    세션 의존성보다 먼저 선언되어, 잘못된 코드는 데이터 계층에 닿기 전에 400으로 거절됩니다.
    """
    if store_code not in KNOWN_STORES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"رمز المستودع غير صالح: {store_code}. القيم المسموحة: {', '.join(KNOWN_STORES)}",
        )
    return store_code
