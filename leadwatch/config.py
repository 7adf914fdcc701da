"""Application settings - loaded from environment variables / .env"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ===========================================
    # CORE
    # ===========================================
    database_url: str
    secret_key: str
    access_token_expire_minutes: int = 1440
    debug: bool = False
    log_json: bool = True

    # Comma-separated list of emails allowed into the admin API
    admin_emails: str = ""

    # ===========================================
    # FOLLOW UP BOSS (CRM)
    # ===========================================
    fub_api_key: Optional[str] = None
    fub_base_url: str = "https://api.followupboss.com/v1"
    fub_system_name: Optional[str] = None
    fub_system_key: Optional[str] = None
    crm_timeout_seconds: float = 30.0
    crm_page_limit: int = 100

    # ===========================================
    # ACCOUNTABILITY RULES
    # ===========================================
    pond_id: int = 18
    pond_name: str = "Money Time Pond"
    default_timer_minutes: int = 30
    escalation_mode: str = "tag"  # tag | return_to_pool
    escalation_tag: str = "No Call - Timer Expired"

    # ===========================================
    # RESEND (Email)
    # ===========================================
    resend_api_key: Optional[str] = None
    email_from: str = "alerts@example.com"
    notification_emails: str = ""

    # ===========================================
    # SCHEDULER (seconds)
    # ===========================================
    scheduler_enabled: bool = True
    scheduler_timezone: str = "UTC"
    pond_poll_seconds: int = 30
    source_poll_seconds: int = 60
    resolution_poll_seconds: int = 60

    # ===========================================
    # PROPERTIES
    # ===========================================
    @property
    def admin_email_list(self) -> list[str]:
        return _split_csv(self.admin_emails)

    @property
    def notification_email_list(self) -> list[str]:
        return _split_csv(self.notification_emails)


def _split_csv(value: str) -> list[str]:
    return [item.strip().lower() for item in (value or "").split(",") if item.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
