from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Process configuration. Built once at startup and passed to the collaborators
    that need it (mailer, payments, search client); business logic never reads
    the environment directly.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DATABASE_URL: str = "sqlite:///./nih_scoop.db"

    # NIH RePORTER projects API
    NIH_REPORTER_URL: str = "https://api.reporter.nih.gov/v2/projects/search"
    NIH_REQUEST_TIMEOUT: float = 30.0

    # Email delivery (Resend)
    RESEND_API_KEY: str = ""
    SENDER_EMAIL: str = ""
    SENDER_NAME: str = "NIH RePORTER Scoop"

    # Stripe
    STRIPE_SECRET_KEY: str = ""
    STRIPE_PRICE_ID: str = ""
    STRIPE_WEBHOOK_SECRET: str = ""
    FRONTEND_URL: str = "http://localhost:8788"

    def missing_secrets(self) -> List[str]:
        """Names of collaborator credentials that are not configured."""
        required = {
            "RESEND_API_KEY": self.RESEND_API_KEY,
            "SENDER_EMAIL": self.SENDER_EMAIL,
            "STRIPE_SECRET_KEY": self.STRIPE_SECRET_KEY,
            "STRIPE_PRICE_ID": self.STRIPE_PRICE_ID,
        }
        return [name for name, value in required.items() if not value.strip()]

    @property
    def database_url(self) -> str:
        url = self.DATABASE_URL
        # Normalize postgres:// -> postgresql:// for SQLAlchemy
        if url.startswith("postgres://"):
            url = "postgresql://" + url[10:]
        return url


@lru_cache()
def get_settings() -> Settings:
    return Settings()
