#update_operator/config.py

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OperatorSettings(BaseSettings):
    """Operator configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="UPDATE_OPERATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Admission control
    max_cluster_active: int = Field(default=1, gt=0)

    # Reconciler
    poll_interval_seconds: float = Field(default=5.0, gt=0)

    # Node intent store (None -> in-memory)
    database_url: Optional[str] = None

    # Connection pool (ignored for sqlite)
    pool_size: int = 10
    max_overflow: int = 20
    pool_timeout: int = 30
    pool_recycle: int = 3600

    # SQLAlchemy
    echo_sql: bool = False

    log_level: str = "INFO"
