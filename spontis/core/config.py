from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str

    REDIS_URL: str

    # Tokens are issued by the identity provider, we only verify them
    JWT_SECRET: str
    JWT_AUDIENCE: str = "authenticated"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    ADMIN_EMAILS: str = ""

    GOOGLE_MAPS_API_KEY: str = ""
    GOOGLE_MAPS_BASE_URL: str = "https://maps.googleapis.com/maps/api"
    MAPS_TIMEOUT: int = 10

    RATE_LIMIT: int = 100
    RATE_LIMIT_WINDOW: int = 600  # 10 minutes

    IDEMPOTENCY_TTL: int = 300  # 5 minutes
    QUOTE_CACHE_TTL: int = 60   # 60 seconds

    CELERY_BROKER_URL: str
    CELERY_BACKEND: str

    DEFAULT_CURRENCY: str = "CHF"

    API_TITLE: str = "Spontis Pricing Service"
    API_DESCRIPTION: str = "Quote calculation, pricing sets and mandate pricing for the Spontis marketplace"
    API_VERSION: str = "1.0.0"

    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def admin_email_list(self) -> list[str]:
        return [e.strip().lower() for e in self.ADMIN_EMAILS.split(",") if e.strip()]


settings = Settings()
