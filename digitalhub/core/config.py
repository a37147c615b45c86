import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv(override=False)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "t")


def _env_list(name: str) -> List[str]:
    raw = os.getenv(name, "")
    return [item.strip().lower() for item in raw.split(",") if item.strip()]


def normalize_database_url(url: str) -> str:
    """Rewrite Heroku/Render style URLs to the asyncpg driver."""
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


@dataclass
class Settings:
    database_url: str
    jwt_secret: str
    environment: str = "development"
    log_level: str = "INFO"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24 * 7
    paystack_secret_key: str = ""
    paystack_base_url: str = "https://api.paystack.co"
    paystack_timeout_seconds: float = 30.0
    paystack_verify_webhooks: bool = True
    admin_emails: List[str] = field(default_factory=list)
    app_base_url: str = "http://localhost:5173"
    record_subscription_referral_commissions: bool = False
    db_echo: bool = False

    @property
    def debug(self) -> bool:
        return self.environment == "development"

    def is_admin_email(self, email: Optional[str]) -> bool:
        return bool(email) and email.strip().lower() in self.admin_emails

    @classmethod
    def from_env(cls) -> "Settings":
        database_url = os.getenv("DATABASE_URL")
        if not database_url:
            raise ValueError("DATABASE_URL environment variable is not set")

        jwt_secret = os.getenv("JWT_SECRET")
        if not jwt_secret:
            raise ValueError("JWT_SECRET environment variable is not set")

        return cls(
            database_url=normalize_database_url(database_url),
            jwt_secret=jwt_secret,
            environment=os.getenv("ENVIRONMENT", "development"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            jwt_expire_minutes=int(os.getenv("JWT_EXPIRE_MINUTES", str(60 * 24 * 7))),
            paystack_secret_key=os.getenv("PAYSTACK_SECRET_KEY", ""),
            paystack_base_url=os.getenv("PAYSTACK_BASE_URL", "https://api.paystack.co"),
            paystack_timeout_seconds=float(os.getenv("PAYSTACK_TIMEOUT_SECONDS", "30")),
            paystack_verify_webhooks=_env_bool("PAYSTACK_VERIFY_WEBHOOKS", "true"),
            admin_emails=_env_list("ADMIN_EMAILS"),
            app_base_url=os.getenv("APP_BASE_URL", "http://localhost:5173"),
            record_subscription_referral_commissions=_env_bool(
                "RECORD_SUBSCRIPTION_REFERRAL_COMMISSIONS", "false"
            ),
            db_echo=_env_bool("DB_ECHO", "false"),
        )
