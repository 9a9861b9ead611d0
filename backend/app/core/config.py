import json

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Database
    DATABASE_URL: str = "mysql+pymysql://heritage:heritage@db:3306/heritage_marketplace?charset=utf8mb4"

    # Redis (sessions + delayed expiry queue)
    REDIS_URL: str = "redis://redis:6379/0"

    # Resend
    RESEND_API_KEY: str = ""
    RESEND_FROM_EMAIL: str = "noreply@heritageenergyglobal.com"

    # Site
    SITE_URL: str = "http://localhost:8000"
    DASHBOARD_URL: str = "http://localhost:8080"
    SITE_NAME: str = "Heritage Oil & Gas"
    ALLOWED_ORIGINS: str = "http://localhost:8080,http://localhost:5173"
    SUPPORT_EMAIL: str = "support@heritageenergyglobal.com"

    # Session
    SESSION_TIMEOUT_MINUTES: int = 120

    # Local time used for every stored timestamp
    TIMEZONE: str = "Africa/Lagos"

    # Promotion slots per plan type. Expired rows still count against the ceiling.
    FEATURED_SLOTS: dict[str, int] = {"basic": 0, "silver": 1, "gold": 2, "platinum": 3}
    HOT_DEAL_SLOTS: dict[str, int] = {"basic": 0, "silver": 1, "gold": 1, "platinum": 3}

    # How long a featured listing runs, per plan type. 0 means never featured.
    FEATURED_DURATION_DAYS: dict[str, int] = {"basic": 0, "silver": 7, "gold": 14, "platinum": 30}

    # Length of an approved subscription period
    SUBSCRIPTION_PERIOD_DAYS: int = 30

    # Scheduler cadence
    PROMOTION_SWEEP_MINUTES: int = 5
    SUBSCRIPTION_SWEEP_MINUTES: int = 15
    CATEGORY_RECONCILE_HOUR: int = 3

    # Worker
    WORKER_POLL_SECONDS: int = 5
    DELAYED_QUEUE_KEY: str = "promotion_expiry"

    # Environment
    ENV: str = "development"
    DEBUG: bool = True

    @field_validator("FEATURED_SLOTS", "HOT_DEAL_SLOTS", "FEATURED_DURATION_DAYS", mode="before")
    @classmethod
    def _parse_plan_table(cls, value):
        if isinstance(value, str):
            return json.loads(value)
        return value

    @property
    def allowed_origins_list(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
