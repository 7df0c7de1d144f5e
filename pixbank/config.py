from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str
    PROJECT_NAME: str = "PixBank API"
    VERSION: str = "0.1.0"
    DEBUG: bool = False
    ALLOWED_ORIGINS: list[str] = ["http://localhost:5000", "http://localhost:8000"]

    # Logging configuration
    LOG_DIR: str = "logs"
    LOG_MAX_FILES: int = 5
    LOG_MAX_SIZE_MB: int = 5
    LOG_EXCLUDED_PATHS: list[str] = [
        "/health",
        "/docs",
        "/redoc",
        "/openapi.json",
    ]
    LOG_LEVEL: str = "INFO"

    # JWT Authentication configuration
    JWT_SECRET_KEY: str  # Required, generate with: openssl rand -hex 32
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRY_MINUTES: int = 10080  # 7 days

    # PIX gateway configuration
    PIX_GATEWAY_BASE_URL: str = "https://credpix.finance/api"
    PIX_GATEWAY_TOKEN: str  # Required, issued by the gateway
    PIX_GATEWAY_TIMEOUT_SECONDS: int = 10
    PIX_WEBHOOK_SECRET: str | None = None

    # Money movement rules
    PIX_MIN_AMOUNT: Decimal = Decimal("10.00")
    PIX_FEE_RATE: Decimal = Decimal("0.08")
    PIX_EXPIRY_MINUTES: int = 30
    WITHDRAWAL_FEE: Decimal = Decimal("2.00")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
