from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field(..., alias="DATABASE_URL")

    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(15, alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    refresh_token_expire_days: int = Field(7, alias="REFRESH_TOKEN_EXPIRE_DAYS")

    admin_email: Optional[str] = Field(None, alias="ADMIN_EMAIL")
    admin_password: Optional[str] = Field(None, alias="ADMIN_PASSWORD")
    admin_full_name: str = Field("Administrador", alias="ADMIN_FULL_NAME")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    cors_origins: str = Field("*", alias="CORS_ORIGINS")  # comma-separated

    # Dashboard windows
    financial_window_months: int = Field(6, alias="FINANCIAL_WINDOW_MONTHS")
    student_status_window_days: int = Field(30, alias="STUDENT_STATUS_WINDOW_DAYS")
    inactive_recent_days: int = Field(30, alias="INACTIVE_RECENT_DAYS")
    consecutive_absence_alert: int = Field(2, alias="CONSECUTIVE_ABSENCE_ALERT")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
