import os
from typing import Optional

from pydantic import ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class ConfigurationError(Exception):
    """Raised when the database settings cannot be loaded."""


class Settings(BaseSettings):
    DATABASE_URL: Optional[str] = None

    # Legacy settings.php style credentials, used when DATABASE_URL is unset
    DB_SERVER: Optional[str] = None
    DB_PORT: Optional[int] = None
    DB_USERNAME: Optional[str] = None
    DB_PASSWORD: Optional[str] = None
    DB_NAME: Optional[str] = None

    DB_ECHO: bool = False
    CREATE_TABLES: bool = True
    LOG_LEVEL: str = "INFO"
    APP_NAME: str = "Chat Gateway"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @model_validator(mode="after")
    def assemble_database_url(self):
        if self.DATABASE_URL:
            return self
        if not (self.DB_SERVER and self.DB_USERNAME and self.DB_NAME):
            raise ValueError("DATABASE_URL or DB_SERVER/DB_USERNAME/DB_NAME must be set")
        self.DATABASE_URL = URL.create(
            "mysql+aiomysql",
            username=self.DB_USERNAME,
            password=self.DB_PASSWORD,
            host=self.DB_SERVER,
            port=self.DB_PORT,
            database=self.DB_NAME,
        ).render_as_string(hide_password=False)
        return self


def load_settings(env_file: str = ".env") -> Settings:
    try:
        return Settings(_env_file=env_file)
    except ValidationError as exc:
        if not os.path.exists(env_file):
            message = f"Fatal Error: Configuration file {env_file} is missing."
        else:
            message = (
                f"Fatal Error: Configuration file {env_file} is incomplete: "
                "DATABASE_URL or DB_SERVER/DB_USERNAME/DB_NAME must be set."
            )
        raise ConfigurationError(message) from exc
