from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    database_url: str = "sqlite+pysqlite:///./runclub.db"
    # Echo SQL statements (debugging only)
    sql_echo: bool = False

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"  # "text" or "json"

    # Allow empty env strings for the log format
    @field_validator("log_format", mode="before")
    @classmethod
    def _empty_to_text(cls, v):
        if v in ("", None, "null", "None"):
            return "text"
        return str(v).lower()

    class Config:
        env_file = ".env"


settings = Settings()
