# core/config.py
import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

DEFAULT_JWT_SECRET = "change-me"


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///storefront.db"
    jwt_secret: str = DEFAULT_JWT_SECRET
    app_env: str = "development"
    port: int = 10000
    db_timeout: int = 5
    google_client_id: str = ""
    google_client_secret: str = ""
    google_callback_url: str = "http://localhost:10000/auth/google/callback"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


def load_settings() -> Settings:
    """Build settings from the environment (.env is already loaded).

    Raises ValueError in production when JWT_SECRET is unset or left at the default.
    """
    settings = Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///storefront.db"),
        jwt_secret=os.getenv("JWT_SECRET", DEFAULT_JWT_SECRET),
        app_env=os.getenv("APP_ENV", "development"),
        port=int(os.getenv("PORT", "10000")),
        db_timeout=int(os.getenv("DB_TIMEOUT", "5")),
        google_client_id=os.getenv("GOOGLE_CLIENT_ID", ""),
        google_client_secret=os.getenv("GOOGLE_CLIENT_SECRET", ""),
        google_callback_url=os.getenv(
            "GOOGLE_CALLBACK_URL", "http://localhost:10000/auth/google/callback"
        ),
    )
    if settings.is_production and settings.jwt_secret in ("", DEFAULT_JWT_SECRET):
        raise ValueError("JWT_SECRET must be set when APP_ENV=production")
    return settings
