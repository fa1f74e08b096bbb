from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"
    APP_NAME: str = "AdventureTime API"
    # Comma-separated origins for CORS (e.g. https://adventuretime.ro,https://www.adventuretime.ro). If empty, uses localhost defaults.
    CORS_ORIGINS: str = ""
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str

    @field_validator("DATABASE_URL", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Render and others give postgres://; SQLAlchemy expects postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[11:]
        return v
    REDIS_URL: str = "redis://localhost:6379/0"

    # "Today" and the same-day booking cutoff are evaluated in this timezone
    TIMEZONE: str = "Europe/Bucharest"

    APP_PUBLIC_URL: str = "http://localhost:3000"  # e.g. https://adventuretime.ro - payment redirect target
    API_PUBLIC_URL: str = "http://localhost:8000"  # e.g. https://api.adventuretime.ro - Netopia notify target

    # Booking / pricing
    DEFAULT_ADVANCE_PAYMENT_PERCENTAGE: int = 30
    PAYMENT_INTENT_EXPIRY_MINUTES: int = 30
    PAYMENT_RESULT_REFRESH_SECONDS: int = 5

    # Gift vouchers (lei)
    VOUCHER_PROCESSING_FEE: int = 20
    VOUCHER_ALLOWED_AMOUNTS: str = "100,200,300,400,500"
    VOUCHER_VALIDITY_DAYS: int = 365

    # Netopia card payments
    NETOPIA_AUTH_TOKEN: str = ""
    NETOPIA_POS_SIGNATURE: str = ""
    NETOPIA_USE_SANDBOX: bool = True
    NETOPIA_SANDBOX_URL: str = "https://secure.sandbox.netopia-payments.com"
    NETOPIA_PRODUCTION_URL: str = "https://secure.mobilpay.ro/pay"
    NETOPIA_TIMEOUT: int = 25
    NETOPIA_SANDBOX_BYPASS: bool = False  # If True, skip Netopia and confirm at once (for dev when gateway not ready)

    @property
    def voucher_amounts(self) -> list[int]:
        return [int(a) for a in self.VOUCHER_ALLOWED_AMOUNTS.split(",") if a.strip().isdigit()]


settings = Settings()
