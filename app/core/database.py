# app/core/database.py

"""
애플리케이션의 데이터베이스 연결을 담당하는 모듈입니다.

- `DatabaseProvider`는 비동기 엔진(커넥션 풀)을 처음 요청될 때 한 번만 생성하고,
  이후에는 같은 엔진을 돌려줍니다.
- 인스턴스는 애플리케이션 시작 시(lifespan) 한 번 만들어져 `app.state.db`에 보관되고,
  의존성 주입을 통해 각 핸들러로 전달됩니다. (모듈 전역 싱글턴 없음)
"""

import logging
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

logger = logging.getLogger(__name__)


class DatabaseProvider:
    """
    공유 비동기 엔진을 지연 생성(lazy)하고 메모이즈하는 연결 제공자입니다.
    드라이버가 풀 내부의 동시성을 관리하므로 별도의 잠금은 두지 않습니다.
    """

    def __init__(
        self,
        url: str,
        *,
        echo: bool = False,
        pool_size: int = 10,
        max_overflow: int = 20,
        pool_recycle: int = 3600,
    ):
        self.url = url
        self.echo = echo
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.pool_recycle = pool_recycle
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    def _engine_options(self) -> dict:
        options = {"echo": self.echo, "future": True}
        # SQLite(aiosqlite)는 풀 크기 옵션을 받지 않습니다.
        if make_url(self.url).get_backend_name() != "sqlite":
            options.update(
                pool_recycle=self.pool_recycle,
                pool_size=self.pool_size,
                max_overflow=self.max_overflow,
                pool_pre_ping=True,
            )
        return options

    def acquire(self) -> AsyncEngine:
        """공유 엔진을 반환합니다. 최초 호출 시에만 엔진을 생성합니다."""
        if self._engine is None:
            self._engine = create_async_engine(self.url, **self._engine_options())
            self._session_factory = sessionmaker(
                autocommit=False,
                autoflush=False,
                bind=self._engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
            logger.info("데이터베이스 엔진 생성 완료: %s", make_url(self.url).render_as_string(hide_password=True))
        return self._engine

    async def release(self) -> None:
        """엔진을 종료하고 메모이즈된 상태를 비웁니다. 엔진이 없으면 아무 일도 하지 않습니다."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("데이터베이스 연결 풀 종료 완료.")

    async def ping(self) -> None:
        """`SELECT 1`로 연결을 확인합니다. 실패하면 드라이버 예외가 그대로 전파됩니다."""
        engine = self.acquire()
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        요청마다 새로운 세션을 만들고, 처리 후 자동으로 닫습니다.
        """
        self.acquire()
        async with self._session_factory() as session:
            yield session
