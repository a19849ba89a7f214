from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str
    REDIS_URL: str = "redis://localhost:6379/0"
    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # Email (Resend). Sends are simulated when no key is configured.
    RESEND_API_KEY: Optional[str] = None
    RESEND_API_URL: str = "https://api.resend.com"
    MAIL_FROM: str = "Helpdesk <noreply@helpdesk.local>"
    APP_URL: str = "http://localhost:3000"

    NOTIFICATION_CHANNEL: str = "helpdesk_notifications"

    CORS_ORIGINS: List[str] = ["*"]
    DB_ECHO: bool = False
    LOG_LEVEL: str = "INFO"

    @property
    def ASYNC_DATABASE_URL(self) -> str:
        url = self.DATABASE_URL
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql+asyncpg://", 1)
        elif url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
