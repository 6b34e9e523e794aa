"""Runtime configuration loaded from the environment or a ``.env`` file."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from exam_trainer.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from exam_trainer.constants.quiz_constants import (
    ACCESS_CODE_MAX_AGE_DAYS,
    PASSING_PERCENTAGE,
    SELF_SERVICE_EMAIL_LIMIT,
    SELF_SERVICE_IP_LIMIT,
    SELF_SERVICE_WINDOW_SECONDS,
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    host: str = Field(default=DEFAULT_HOST, validation_alias="TRAINER_HOST")
    port: int = Field(default=DEFAULT_PORT, validation_alias="TRAINER_PORT")
    app_url: str = Field(default="", validation_alias="APP_URL")

    # Empty store URL selects the in-memory store (local demo mode).
    store_url: str = Field(default="", validation_alias="STORE_URL")
    store_api_key: str = Field(default="", validation_alias="STORE_API_KEY")
    store_timeout_seconds: float = Field(default=10.0, validation_alias="STORE_TIMEOUT_SECONDS")
    study_guide_bucket: str = Field(default="learning_materials", validation_alias="STUDY_GUIDE_BUCKET")

    passing_percentage: int = Field(default=PASSING_PERCENTAGE, validation_alias="PASSING_PERCENTAGE")
    access_code_max_age_days: int | None = Field(
        default=ACCESS_CODE_MAX_AGE_DAYS, validation_alias="ACCESS_CODE_MAX_AGE_DAYS"
    )
    shuffle_track_by_index: bool = Field(default=False, validation_alias="SHUFFLE_TRACK_BY_INDEX")

    generator_enabled: bool = Field(default=False, validation_alias="GENERATOR_ENABLED")
    generator_base_url: str = Field(default="https://api.openai.com/v1", validation_alias="GENERATOR_BASE_URL")
    generator_model: str = Field(default="gpt-4o-mini", validation_alias="GENERATOR_MODEL")
    generator_api_key: str | None = Field(default=None, validation_alias="GENERATOR_API_KEY")
    generator_temperature: float = Field(default=0.7, validation_alias="GENERATOR_TEMPERATURE")
    generator_timeout_seconds: float = Field(default=60.0, validation_alias="GENERATOR_TIMEOUT_SECONDS")

    mail_api_url: str = Field(default="https://api.resend.com/emails", validation_alias="MAIL_API_URL")
    mail_api_key: str | None = Field(default=None, validation_alias="MAIL_API_KEY")
    mail_sender: str = Field(default="", validation_alias="MAIL_SENDER")

    self_service_email_limit: int = Field(default=SELF_SERVICE_EMAIL_LIMIT, validation_alias="SELF_SERVICE_EMAIL_LIMIT")
    self_service_ip_limit: int = Field(default=SELF_SERVICE_IP_LIMIT, validation_alias="SELF_SERVICE_IP_LIMIT")
    self_service_window_seconds: int = Field(
        default=SELF_SERVICE_WINDOW_SECONDS, validation_alias="SELF_SERVICE_WINDOW_SECONDS"
    )
    trust_proxy_headers: bool = Field(default=False, validation_alias="TRUST_PROXY_HEADERS")

    # Local demo mode only; the REST backend keeps admins in its own table.
    admin_username: str = Field(default="admin", validation_alias="ADMIN_USERNAME")
    admin_password: str | None = Field(default=None, validation_alias="ADMIN_PASSWORD")
    demo_questions_file: str | None = Field(default=None, validation_alias="DEMO_QUESTIONS_FILE")
    demo_access_code: str | None = Field(default=None, validation_alias="DEMO_ACCESS_CODE")
    headless: bool = Field(default=False, validation_alias="HEADLESS")


def load_settings() -> Settings:
    return Settings()
