from functools import lru_cache
from typing import List, Optional
from urllib.parse import quote_plus

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file="gachaapi/.env",
        env_file_encoding="utf-8",
        extra="allow",
    )
    # Application
    APP_NAME: str = "Haravan Gacha API"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])
    # 앞단 리버스 프록시/로드밸런서 수 (0 이면 X-Forwarded-For 무시)
    TRUSTED_PROXY_COUNT: int = Field(0, ge=0)

    # Database
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USERNAME: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DATABASE: str = "gacha"
    POSTGRES_SCHEMA: str = "public"

    # 값이 있으면 POSTGRES_* 조합보다 우선 (테스트/로컬 sqlite 등)
    DATABASE_URL: Optional[str] = None
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    @property
    def database_url(self) -> str:
        """Construct database URL from individual components"""
        if self.DATABASE_URL:
            return self.DATABASE_URL

        # URL encode the password to handle special characters
        encoded_password = quote_plus(self.POSTGRES_PASSWORD)
        return f"postgresql+psycopg2://{self.POSTGRES_USERNAME}:{encoded_password}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DATABASE}"

    # Haravan
    HARAVAN_ACCESS_TOKEN: str = ""
    HARAVAN_SHOP_DOMAIN: str = ""
    HARAVAN_TIMEOUT_SECONDS: float = 10.0

    @property
    def haravan_admin_base_url(self) -> str:
        return f"https://{self.HARAVAN_SHOP_DOMAIN}/admin"

    # Currency (xu)
    XU_PRODUCT_ID: str = ""  # 충전용 "Xu Gacha" 상품 ID
    XU_EXCHANGE_RATE: int = Field(100, gt=0)  # 1 xu = 100 VND

    # Draw history
    HISTORY_DEFAULT_LIMIT: int = 10
    HISTORY_MAX_LIMIT: int = 100

    # AWS
    AWS_REGION: str = "ap-southeast-1"
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    SQS_ENDPOINT_URL: Optional[str] = None

    # 주문 생성 실패 시 재시도 메시지를 보낼 큐 (없으면 로그/DB 기록만)
    FULFILLMENT_RETRY_QUEUE_URL: Optional[str] = None
    FULFILLMENT_RETRY_DELAY_SECONDS: int = 60


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
