"""Application configuration using pydantic settings with structured sections."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CREDIT_PRICES: dict[str, int] = {
    "REQUEST_CONTACT": 10,
    "MARK_PROPERTY_AS_FEATURED": 10,
    "MARK_ENQUIRY_AS_URGENT": 10,
    "PROPERTY_LISTING": 10,
    "ENQUIRY_LISTING": 10,
    "SUBMIT_PROPERTY_ENQUIRY": 10,
}


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False


class DatabaseSettings(BaseModel):
    url: str = Field(default="sqlite+aiosqlite:///./credit_auction.db", alias="url")
    echo: bool = False
    pool_size: Optional[int] = None
    max_overflow: Optional[int] = None


class SecuritySettings(BaseModel):
    secret_key: str = Field(default="change-me", min_length=8)
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24


class AuctionSettings(BaseModel):
    top_n: int = Field(default=4, ge=1)
    lock_timeout_seconds: float = Field(default=5.0, gt=0)
    cancellation_policy: Literal["retain", "refund"] = "retain"


class CreditSettings(BaseModel):
    signup_bonus: int = Field(default=100, ge=0)
    default_prices: dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_CREDIT_PRICES))
    default_page_size: int = 20
    max_page_size: int = 100


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    project_name: str = "Credit Auction Service"
    api_prefix: str = "/api"

    server: ServerSettings = ServerSettings()
    database: DatabaseSettings = DatabaseSettings()
    security: SecuritySettings = SecuritySettings()
    auction: AuctionSettings = AuctionSettings()
    credits: CreditSettings = CreditSettings()
    logging: LoggingSettings = LoggingSettings()

    @property
    def database_url(self) -> str:
        return self.database.url

    @property
    def host(self) -> str:
        return self.server.host

    @property
    def port(self) -> int:
        return self.server.port

    @property
    def secret_key(self) -> str:
        return self.security.secret_key

    @property
    def algorithm(self) -> str:
        return self.security.algorithm

    @property
    def access_token_expire_minutes(self) -> int:
        return self.security.access_token_expire_minutes


@lru_cache()
def get_settings() -> Settings:
    return Settings()
