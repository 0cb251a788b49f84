"""Runtime settings for the Products4U API.

Settings come from a ``.env`` file (if present) and the process
environment. The MongoDB connection string is either given whole through
``MONGODB_URI`` or assembled from Atlas credentials.
"""

import os
from functools import lru_cache
from typing import List
from urllib.parse import quote_plus

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_MONGODB_HOST = "cluster0.oyqb2.mongodb.net"
ATLAS_URI_OPTIONS = "retryWrites=true&w=majority&appName=Cluster0"


class Settings(BaseModel):
    """Typed application settings."""

    model_config = ConfigDict(extra="ignore")

    app_name: str = "Products4U API"
    app_version: str = "0.1.0"
    mongodb_uri: str
    database_name: str = "Products4U"
    queries_collection: str = "ProductsDB"
    recommendations_collection: str = "RecommendationsDB"
    mongodb_timeout_ms: int = 5000
    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"
    allowed_origins: List[str] = Field(default_factory=lambda: ["*"])

    @field_validator("port", "mongodb_timeout_ms")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Value must be greater than 0.")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value!r}")
        return level


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def build_atlas_uri(user: str, password: str, host: str = DEFAULT_MONGODB_HOST) -> str:
    """Assemble a ``mongodb+srv`` connection string for an Atlas cluster.

    Credentials are percent-escaped so that reserved characters survive.
    """
    return (
        f"mongodb+srv://{quote_plus(user)}:{quote_plus(password)}@{host}/"
        f"?{ATLAS_URI_OPTIONS}"
    )


def _resolve_mongodb_uri() -> str:
    uri = os.getenv("MONGODB_URI", "").strip()
    if uri:
        return uri

    user = os.getenv("DB_USER", "")
    password = os.getenv("DB_PW", "")
    if not user or not password:
        raise RuntimeError(
            "MongoDB connection is not configured: set MONGODB_URI, "
            "or DB_USER and DB_PW."
        )
    host = os.getenv("MONGODB_HOST", DEFAULT_MONGODB_HOST)
    return build_atlas_uri(user, password, host)


def load_settings(*, load_env: bool = True) -> Settings:
    """Load settings from `.env` and the process environment.

    Raises:
        RuntimeError: If no MongoDB connection details are available.
    """
    if load_env:
        load_dotenv()

    values = {
        "app_name": os.getenv("APP_NAME", "Products4U API"),
        "mongodb_uri": _resolve_mongodb_uri(),
        "database_name": os.getenv("DB_NAME", "Products4U"),
        "queries_collection": os.getenv("QUERIES_COLLECTION", "ProductsDB"),
        "recommendations_collection": os.getenv(
            "RECOMMENDATIONS_COLLECTION", "RecommendationsDB"
        ),
        "mongodb_timeout_ms": _env_int("MONGODB_TIMEOUT_MS", 5000),
        "host": os.getenv("HOST", "0.0.0.0"),
        "port": _env_int("PORT", 5000),
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
        "allowed_origins": _env_list("ALLOWED_ORIGINS", ["*"]),
    }
    return Settings.model_validate(values)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached accessor for settings."""
    return load_settings()
