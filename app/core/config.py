from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    PROJECT_NAME: str = "ResGuard Backend"
    API_PREFIX: str = "/api"
    ENVIRONMENT: str = "development"  # local, dev, development, prod (from .env)

    # CORS (from .env, JSON list)
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:5174",
    ]

    # Logging & Sentry
    LOG_LEVEL: str = "INFO"
    SENTRY_DSN: str | None = None

    # SMS channel (from .env); all four must be present for live sends
    TWILIO_ACCOUNT_SID: str | None = None
    TWILIO_AUTH_TOKEN: str | None = None
    TWILIO_PHONE_NUMBER: str | None = None
    DOCTOR_PHONE_NUMBER: str | None = None
    TWILIO_API_BASE_URL: str = "https://api.twilio.com/2010-04-01"
    NOTIFICATION_TIMEOUT_SECONDS: float = 10.0

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=True, extra="ignore"
    )

    @property
    def notifications_configured(self) -> bool:
        return all(
            (
                self.TWILIO_ACCOUNT_SID,
                self.TWILIO_AUTH_TOKEN,
                self.TWILIO_PHONE_NUMBER,
                self.DOCTOR_PHONE_NUMBER,
            )
        )


settings = Settings()
