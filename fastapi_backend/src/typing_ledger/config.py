"""Runtime configuration for the typing ledger service.

Scores persist to a SQLite file by default; `LEDGER_STORE=memory` keeps
them in process memory only, so they are lost on restart.
"""

from __future__ import annotations

import os
from typing import List, Literal, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_BACKEND_URL = "http://localhost:8080"


class Settings(BaseModel):
    """Service settings with validation."""

    store_backend: Literal["memory", "sqlite"] = Field(
        default="sqlite", description="Score store implementation"
    )
    db_path: str = Field(
        default="typing_ledger.db", description="SQLite database file (sqlite store only)"
    )
    host: str = Field(default="0.0.0.0", description="Interface the server binds to")
    port: int = Field(default=8080, gt=0, lt=65536, description="Port the server listens on")
    log_level: str = Field(default="INFO", description="Root logging level")
    cors_origins: List[str] = Field(
        default_factory=lambda: ["*"], description="Origins allowed by CORS"
    )

    @field_validator("log_level")
    @classmethod
    def log_level_known(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {v}")
        return level

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


_ENV_FIELDS = {
    "LEDGER_STORE": "store_backend",
    "LEDGER_DB_PATH": "db_path",
    "LEDGER_HOST": "host",
    "LEDGER_PORT": "port",
    "LEDGER_LOG_LEVEL": "log_level",
    "LEDGER_CORS_ORIGINS": "cors_origins",
}


# PUBLIC_INTERFACE
def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build settings from ``LEDGER_*`` environment variables.

    Args:
        environ: Mapping to read from; defaults to ``os.environ``.

    Raises:
        pydantic.ValidationError: If a variable holds an invalid value.
    """
    if environ is None:
        environ = os.environ
    values = {field: environ[key] for key, field in _ENV_FIELDS.items() if key in environ}
    return Settings(**values)
