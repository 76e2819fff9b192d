from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Election API settings, read from the environment and .env.
    Only DATABASE_URL and SECRET_KEY are required; mail and storage keys
    are checked when first used.
    """

    # ── Database ──────────────────────────────────────────
    DATABASE_URL: str            # async driver URL (asyncpg, aiosqlite in tests)
    DATABASE_SYNC_URL: str = ""  # psycopg2, used only by Alembic

    # ── JWT ───────────────────────────────────────────────
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    VOTER_TOKEN_EXPIRE_MINUTES: int = 30

    # ── CORS ──────────────────────────────────────────────
    ALLOWED_ORIGINS: str = "http://localhost:5173"

    # ── App ───────────────────────────────────────────────
    APP_ENV: str = "production"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ── Mail (Resend) ─────────────────────────────────────
    # Empty key → ConfigurationError when mail is sent, not at startup.
    RESEND_API_KEY: str = ""
    RESEND_API_URL: str = "https://api.resend.com/emails"
    EMAIL_FROM: str = "onboarding@resend.dev"
    EMAIL_FROM_NAME: str = "COHSSA Elections"
    EDITORIAL_FROM_NAME: str = "COHSSA Editorial"
    PUBLIC_SITE_URL: str = "https://cohssa-ahss.lovable.app"
    MAIL_TIMEOUT_SECONDS: float = 20.0

    # ── OTP ───────────────────────────────────────────────
    OTP_MAX_FAILED_ATTEMPTS: int = 5
    OTP_LOCKOUT_MINUTES: int = 15

    # ── Object storage ────────────────────────────────────
    MINIO_ENDPOINT: str = "127.0.0.1:9000"
    MINIO_ACCESS_KEY: str = ""
    MINIO_SECRET_KEY: str = ""
    MINIO_SECURE: bool = False
    MINIO_BUCKET_PHOTOS: str = "aspirant-photos"
    MINIO_BUCKET_PAYMENTS: str = "payment-proofs"
    MINIO_PUBLIC_BASE: str | None = None  # optional (if you want public file links)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def origins_list(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()


# import-time instance; tests set env vars before importing app
settings = get_settings()
