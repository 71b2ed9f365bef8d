from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from pathlib import Path
from typing import Literal
from functools import lru_cache


def _strip_case(value, upper: bool):
    # raw env strings only; anything else goes to Literal validation unchanged
    if not isinstance(value, str):
        return value
    value = value.strip()
    return value.upper() if upper else value.lower()


class Settings(BaseSettings):
    """
    Application settings loaded from environment.
    """

    # Environment
    ENV: Literal["development", "testing", "staging", "production"] = "development"

    # Database configuration
    DATABASE_URL: str = "sqlite:///./accounts.db"
    SQLALCHEMY_ECHO: bool = False
    CREATE_TABLES: bool = True

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path = Path("/var/log/accounts")
    LOG_MAX_BYTES: int = 10_000_000  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    ENABLE_SQL_LOGGING: bool = False

    # Security
    PASSWORD_HASH_SCHEME: str = "pbkdf2_sha256"

    # --- Derived settings ---
    @property
    def is_sqlite(self) -> bool:
        """
        True when DATABASE_URL points at SQLite.

        SQLite connections are bound to the thread that created them unless
        `check_same_thread` is disabled, which matters because FastAPI runs
        sync route handlers in a threadpool.
        """
        return self.DATABASE_URL.startswith("sqlite")

    # --- Validators ---
    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: str | None) -> str | None:
        """
        Normalize LOG_LEVEL to uppercase before Literal validation runs, so
        `LOG_LEVEL=debug` in the environment is accepted.
        """
        return _strip_case(v, upper=True)

    @field_validator("LOG_FORMAT", mode="before")
    def normalize_log_format(cls, v: str | None) -> str | None:
        """
        Normalize the LOG_FORMAT environment variable value to lowercase.
        """
        return _strip_case(v, upper=False)

    model_config = SettingsConfigDict(
        # .env next to the package root (src/.env) is picked up when present.
        env_file=str(Path(__file__).parent.parent / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

# get_settings() always returns the same settings from the environment,
# so it is cached; tests build their own Settings(...) instead of patching this.
@lru_cache()
def get_settings() -> Settings:
    return Settings()
