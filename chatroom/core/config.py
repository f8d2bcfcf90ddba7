"""
Application settings.
Loaded from environment variables and an optional .env file.
"""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # Database. DATABASE_URL wins; otherwise a PostgreSQL URL is built from DB_* when DB_HOST is set.
    DATABASE_URL: Optional[str] = None
    DB_HOST: Optional[str] = None
    DB_PORT: int = 5432
    DB_NAME: Optional[str] = None
    DB_USER: Optional[str] = None
    DB_PASS: Optional[str] = None
    DB_ECHO: bool = False

    # Locking
    LOCK_TIMEOUT_SECONDS: float = 5.0  # max wait for a room lock before TransactionConflict
    SQLITE_BUSY_TIMEOUT_SECONDS: float = 5.0

    # Optional
    DEBUG: bool = False
    PROJECT_NAME: str = "Chatroom"
    LOG_LEVEL: str = "INFO"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if self.DB_HOST:
            return (
                f"postgresql+psycopg2://{self.DB_USER}:{self.DB_PASS}"
                f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
            )
        return "sqlite:///./chatroom.db"

    @property
    def use_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
