from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"

    # Supabase settings
    SUPABASE_URL: str
    SUPABASE_JWKS_URL: str | None = None
    SUPABASE_DB_URL: str

    # Public site URL used for absolute links in emails
    SITE_URL: str = "http://localhost:4321"

    # Email delivery (Resend)
    EMAIL_API_URL: str = "https://api.resend.com/emails"
    EMAIL_API_KEY: str | None = None
    FROM_EMAIL: str | None = None
    FROM_NAME: str = "CAPCo"
    EMAIL_REQUEST_TIMEOUT: float = 15.0
    EMAIL_MAX_RETRIES: int = 3
    EMAIL_BACKOFF_BASE: float = 0.5

    # Notification fan-out
    NOTIFY_MAX_CONCURRENCY: int = 10
    DEFAULT_BUTTON_TEXT: str = "Access Your Dashboard"

    # Company information used as placeholder sources
    COMPANY_NAME: str = "CAPCo Fire Protection"
    COMPANY_ADDRESS: str = ""
    COMPANY_PHONE: str = ""
    COMPANY_LOGO_URL: str = ""
    PRIMARY_COLOR: str = "#3b82f6"

    # HTTP edge
    CORS_ALLOWED_ORIGINS: list[str] = ["http://localhost:4321"]

    # =================================================================
    # DATABASE POOL SETTINGS
    # =================================================================
    DB_POOL_MIN_SIZE: int = 3
    DB_POOL_MAX_SIZE: int = 12
    DB_POOL_TIMEOUT: float = 30.0
    DB_POOL_MAX_IDLE: float = 600.0  # 10 minutes
    DB_POOL_MAX_LIFETIME: float = 3600.0  # 1 hour

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # derive sensible defaults if not provided
    def jwks_url(self) -> str:
        if self.SUPABASE_JWKS_URL:
            return self.SUPABASE_JWKS_URL
        base = self.SUPABASE_URL.rstrip("/")
        return f"{base}/auth/v1/.well-known/jwks.json"

    def base_url(self) -> str:
        return self.SITE_URL.rstrip("/")

    def email_configured(self) -> bool:
        """Email delivery needs both an API key and a sender address."""
        return bool(self.EMAIL_API_KEY and self.FROM_EMAIL)

    def get_db_pool_config(self) -> dict:
        """
        Get database pool configuration.
        Adjust environment-specific settings based on self.environment.
        """
        config = {
            "min_size": self.DB_POOL_MIN_SIZE,
            "max_size": self.DB_POOL_MAX_SIZE,
            "timeout": self.DB_POOL_TIMEOUT,
            "max_idle": self.DB_POOL_MAX_IDLE,
            "max_lifetime": self.DB_POOL_MAX_LIFETIME,
        }

        if self.environment == "development":
            config.update(
                {
                    "min_size": 2,
                    "max_size": 6,
                    "timeout": 15.0,
                }
            )

        return config


settings = Settings()
