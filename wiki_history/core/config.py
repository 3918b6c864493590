"""Runtime settings for the wiki history service.

Every field can be overridden by an environment variable of the same name
(``VERSION_WINDOW_SIZE=25``) or by a ``.env`` file in the working directory.
"""

from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_LOG_FORMATS = ("json", "text")


class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Validated service configuration."""

    environment: Environment = Environment.DEVELOPMENT

    # Storage. The pool options only apply to server databases; SQLite
    # gets a single shared connection.
    database_url: str = Field(
        default="sqlite:///./wiki_history.db",
        description="SQLAlchemy URL for pages and archived versions",
    )
    db_pool_size: int = Field(default=5, ge=1)
    db_max_overflow: int = Field(default=10, ge=0)
    db_pool_timeout: int = Field(default=30, ge=1, description="Seconds to wait for a pooled connection")
    db_pool_recycle: int = Field(default=1800, description="Connection lifetime in seconds")

    # Version history. Lowering the window on a live database is safe: pages
    # are trimmed to the new bound on their next edit.
    version_window_size: int = Field(
        default=10,
        ge=1,
        description="Diffs kept inline on the page row before moving to the archive",
    )
    content_summary_length: int = Field(
        default=200,
        ge=0,
        description="Leading characters of a document copied into its summary",
    )

    # Snowflake id components, 5 bits each.
    snowflake_datacenter_id: int = Field(default=0, ge=0, le=31)
    snowflake_worker_id: int = Field(default=0, ge=0, le=31)

    log_level: str = Field(default="INFO", description=f"One of {', '.join(_LOG_LEVELS)}")
    log_format: str = Field(default="json", description="'json' for log shippers, 'text' for terminals")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {_LOG_LEVELS}, got {v!r}")
        return level

    @field_validator("log_format")
    @classmethod
    def _check_log_format(cls, v: str) -> str:
        fmt = v.lower()
        if fmt not in _LOG_FORMATS:
            raise ValueError(f"log_format must be one of {_LOG_FORMATS}, got {v!r}")
        return fmt

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


settings = Settings()
