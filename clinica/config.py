from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List
import os


class Settings(BaseSettings):
    """Global app settings loaded from environment.
    - Keep defaults light for dev.
    - Override via .env or real env vars.
    """

    APP_NAME: str = "clinica_api"
    APP_ENV: str = "dev"
    APP_DEBUG: bool = True

    MONGODB_URI: str = "mongodb://localhost:27017/clinica"
    # Upper bound for server selection and single operations against Mongo
    MONGODB_TIMEOUT_MS: int = 5000
    # mongo | memory
    STORE_BACKEND: str = "mongo"

    # JWT settings: one secret/ttl pair per token scope
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_SECRET: str = "clinica_access_secret"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    JWT_REFRESH_SECRET: str = "clinica_refresh_secret"
    REFRESH_TOKEN_EXPIRE_DAYS: int = 365
    # Shared by verify-account and reset-password
    JWT_RESET_SECRET: str = "clinica_reset_secret"
    RESET_TOKEN_EXPIRE_MINUTES: int = 3

    BCRYPT_SALT_ROUNDS: int = 12

    OTP_TTL_SECONDS: int = 180
    # Expiry is stored on every challenge but only compared when this is on
    OTP_ENFORCE_EXPIRY: bool = False

    # Raw CORS string from env (comma-separated); parsed via cors_origins property
    CORS_ORIGINS: str | None = None

    # SMTP (fastapi-mail); without MAIL_SERVER the OTP is only logged
    MAIL_USERNAME: str | None = None
    MAIL_PASSWORD: str | None = None
    MAIL_FROM: str | None = None
    MAIL_FROM_NAME: str = "Clinica"
    MAIL_PORT: int = 587
    MAIL_SERVER: str | None = None
    MAIL_STARTTLS: bool = True
    MAIL_SSL_TLS: bool = False
    MAIL_TEMPLATE_FOLDER: str | None = None

    # Firebase Admin SDK service account
    FIREBASE_CREDENTIALS_FILE: str | None = None
    FIREBASE_APP_NAME: str = "clinica"

    # Upper bound for a single email/push delivery
    DISPATCH_TIMEOUT_SECONDS: float = 10.0

    LOG_DIR: str = "logs"

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def cors_origins(self) -> List[str]:
        """Return CORS origins as a list, parsing comma-separated env string."""
        raw = self.CORS_ORIGINS or os.getenv("CORS_ORIGINS", "") or ""
        return [o.strip() for o in raw.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
