# clinic_booking/config.py
import os
from pydantic_settings import BaseSettings
from pydantic import Field
from pydantic_settings import SettingsConfigDict
from typing import Optional, List
from functools import lru_cache

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra='ignore')

    # Application Settings
    APP_NAME: str = "Clinic Booking API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    DOCS_ENABLED: bool = True

    # Database Settings
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "sqlite:///./clinic_booking.db")
    # Seconds a SQLite writer waits for the database lock before giving up
    DB_BUSY_TIMEOUT_SECONDS: float = 30.0

    # Security Settings
    SECRET_KEY: str = Field(default="change-me-in-prod", alias="JWT_SECRET_KEY")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    # Token roles allowed to trigger the reminder and no-show sweeps
    JOB_ROLES: str = "admin,system"

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = int(os.environ.get("PORT", 8000))

    # CORS Settings
    ALLOWED_ORIGINS: str = os.environ.get("ALLOWED_ORIGINS", "*")

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Reminder / no-show sweeps
    REMINDER_WINDOW_HOURS: int = 24
    REMINDER_CHANNELS: str = "email,in-app"
    NO_SHOW_GRACE_MINUTES: int = 30

    # Meeting provider: "google", "dev" or "none"
    MEETING_PROVIDER: str = os.environ.get("MEETING_PROVIDER", "dev")
    GOOGLE_CLIENT_ID: str = os.environ.get("GOOGLE_CLIENT_ID", "")
    GOOGLE_CLIENT_SECRET: str = os.environ.get("GOOGLE_CLIENT_SECRET", "")
    GOOGLE_REFRESH_TOKEN: str = os.environ.get("GOOGLE_REFRESH_TOKEN", "")
    GOOGLE_CALENDAR_ID: str = "primary"
    GOOGLE_API_TIMEOUT_SECONDS: float = 5.0
    # IANA zone the HH:MM slot times are expressed in
    CLINIC_TIMEZONE: str = "UTC"

    # Twilio Settings
    TWILIO_ACCOUNT_SID: str = os.environ.get("TWILIO_ACCOUNT_SID", "")
    TWILIO_AUTH_TOKEN: str = os.environ.get("TWILIO_AUTH_TOKEN", "")
    TWILIO_PHONE_NUMBER: str = os.environ.get("TWILIO_PHONE_NUMBER", "")

    # Email Settings
    RESEND_API_KEY: Optional[str] = os.environ.get("RESEND_API_KEY", None)
    EMAIL_FROM_ADDRESS: str = os.environ.get("EMAIL_FROM_ADDRESS", "appointments@clinic.local")

    # Helper methods for list envs
    def _split_csv(self, value: str) -> List[str]:
        if value is None:
            return []
        value = value.strip()
        if value == "":
            return []
        return [item.strip() for item in value.split(",")]

    @property
    def allowed_origins_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_ORIGINS)

    @property
    def job_roles_list(self) -> List[str]:
        return self._split_csv(self.JOB_ROLES)

    @property
    def reminder_channels_list(self) -> List[str]:
        return self._split_csv(self.REMINDER_CHANNELS)

@lru_cache()
def get_settings() -> Settings:
    return Settings()

settings: Settings = get_settings()
