from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL

_DEFAULT_PORTS = {"mysql": 3306, "postgresql": 5432}
_DRIVERS = {"mysql": "mysql+pymysql", "postgresql": "postgresql+psycopg"}


class Settings(BaseSettings):
    app_name: str = "User Accounts API"

    # Which database driver to use; the DB_* values below fill in the URL.
    db_connection: Literal["sqlite", "mysql", "postgresql"] = "sqlite"
    db_database: str = "./app.db"
    db_host: str = "localhost"
    db_port: Optional[int] = None
    db_user: Optional[str] = None
    db_password: Optional[str] = None
    db_name: Optional[str] = None
    db_echo: bool = False
    database_url: Optional[str] = Field(default=None)

    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "INFO"

    host: str = "0.0.0.0"
    port: int = 8080

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value

    @property
    def sqlalchemy_url(self) -> str:
        """Connection URL for SQLAlchemy.

        ``DATABASE_URL`` wins when set; otherwise the URL is assembled from
        ``DB_CONNECTION`` and the matching ``DB_*`` parameters.
        """
        if self.database_url:
            return self.database_url

        if self.db_connection == "sqlite":
            if self.db_database in ("", ":memory:"):
                return "sqlite://"
            return f"sqlite:///{self.db_database}"

        url = URL.create(
            _DRIVERS[self.db_connection],
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port or _DEFAULT_PORTS[self.db_connection],
            database=self.db_name,
        )
        if self.db_connection == "mysql":
            url = url.update_query_dict({"charset": "utf8mb4"})
        return url.render_as_string(hide_password=False)


def get_settings() -> Settings:
    return Settings()
