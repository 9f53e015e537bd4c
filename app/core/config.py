# app/core/config.py

from typing import Any, List
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict
import os

# 프로젝트의 루트 디렉토리 경로를 계산합니다.
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


class Settings(BaseSettings):
    """
    애플리케이션의 모든 설정을 정의하는 Pydantic BaseSettings 모델입니다.
    환경 변수 및 .env 파일에서 값을 자동으로 로드합니다.
    """

    # --- Pydantic Settings 설정 ---
    model_config = SettingsConfigDict(
        env_file=os.path.join(BASE_DIR, '.env'),  # 프로젝트 루트의 .env 파일을 명시적으로 지정
        env_file_encoding='utf-8',
        extra='ignore',                      # 모델에 없는 변수는 무시
        case_sensitive=True
    )

    # --- 애플리케이션 기본 설정 ---
    APP_NAME: str = "Warehouse Inventory API"
    APP_VERSION: str = "0.1.0"
    APP_DESCRIPTION: str = "Read-only inventory reporting API (materials, warehouses, uploaded reports)"
    # 애플리케이션 환경 (예: "development", "production", "testing")
    APP_ENV: str = Field("development", description="Application environment (development, production, testing)")
    # 디버그 모드일 때 SQL 쿼리를 출력합니다.
    DEBUG_MODE: bool = Field(False, description="Echo SQL statements")

    # --- 서버 설정 ---
    HOST: str = Field("0.0.0.0", description="Listening host")
    PORT: int = Field(3000, description="Listening port")
    API_PREFIX: str = Field("/api", description="Common API path prefix")
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")

    # --- 데이터베이스 설정 ---
    DATABASE_URL: SecretStr = Field(..., description="SQLAlchemy async database URL")
    DB_POOL_SIZE: int = Field(10, description="Connections kept in the pool")
    DB_MAX_OVERFLOW: int = Field(20, description="Extra connections allowed beyond the pool size")
    DB_POOL_RECYCLE: int = Field(3600, description="Seconds before a pooled connection is recycled")

    # --- 조회 설정 ---
    DEFAULT_RESULT_LIMIT: int = Field(1000, description="Row bound applied when no limit and no date filter are given")
    SEARCH_ALLOW_WILDCARDS: bool = Field(False, description="Let '%' and '_' in search text act as LIKE patterns")

    # --- 파일 업로드 설정 ---
    UPLOAD_DIR: str = Field(
        os.path.join(BASE_DIR, "data", "excel-reports"),
        description="Directory holding the canonical warehouse report files."
    )
    MAX_UPLOAD_FILES: int = Field(10, description="Maximum spreadsheet files per upload request")

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    # Post-initialization validation (Pydantic v2 BaseSettings)
    def model_post_init(self, __context: Any) -> None:  # noqa: ANN001
        # 상대 경로가 주어지면 프로젝트 루트를 기준으로 해석합니다.
        if not os.path.isabs(self.UPLOAD_DIR):
            self.UPLOAD_DIR = os.path.join(BASE_DIR, self.UPLOAD_DIR)


settings = Settings()
