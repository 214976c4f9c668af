"""Environment-driven storefront configuration."""

import json
import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_BACKEND_URL = "http://localhost:9000"


def _first(env: Mapping[str, str], *names: str) -> Optional[str]:
    for name in names:
        value = env.get(name)
        if value:
            return value
    return None


def load_runtime_overrides(path: Optional[str]) -> dict[str, str]:
    """
    Load deploy-time overrides from a JSON object file.

    A missing or unparsable file yields no overrides.
    """
    if not path:
        return {}
    try:
        with open(path) as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.warning(f"Runtime env file not found: {path}")
        return {}
    except (OSError, ValueError) as e:
        logger.warning(f"Could not load runtime env file {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Runtime env file {path} is not a JSON object")
        return {}
    return {str(k): str(v) for k, v in data.items() if v}


class StorefrontConfig(BaseModel):
    """Settings for talking to the Medusa backend and persisting local state."""

    backend_url: str = Field(DEFAULT_BACKEND_URL, description="Medusa backend base URL")
    publishable_key: Optional[str] = Field(None, description="Store publishable API key")
    region_id: Optional[str] = Field(None, description="Region for price calculation")
    storage_dir: Path = Field(default_factory=lambda: Path.home() / ".medusa_storefront")
    default_currency: str = "usd"
    product_page_size: int = Field(12, gt=0)
    timeout: float = Field(30.0, gt=0)
    max_retries: int = Field(3, ge=0)
    session_cookie_name: str = "auth-session"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "StorefrontConfig":
        """
        Build configuration from environment variables.

        Keys from the file named by STOREFRONT_ENV_FILE override the
        VITE_MEDUSA_* values from the environment.

        Raises:
            ValueError: If a numeric setting is not a number
        """
        if env is None:
            env = os.environ
        overrides = load_runtime_overrides(env.get("STOREFRONT_ENV_FILE"))

        values: dict[str, object] = {}

        backend_url = _first(overrides, "VITE_MEDUSA_BACKEND_URL") or _first(
            env, "MEDUSA_BACKEND_URL", "VITE_MEDUSA_BACKEND_URL"
        )
        if backend_url:
            values["backend_url"] = backend_url.rstrip("/")

        publishable_key = _first(overrides, "VITE_MEDUSA_PUBLISHABLE_KEY") or _first(
            env, "MEDUSA_PUBLISHABLE_KEY", "VITE_MEDUSA_PUBLISHABLE_KEY"
        )
        if publishable_key:
            values["publishable_key"] = publishable_key

        simple = {
            "region_id": "MEDUSA_REGION_ID",
            "storage_dir": "STOREFRONT_STORAGE_DIR",
            "default_currency": "STOREFRONT_DEFAULT_CURRENCY",
            "session_cookie_name": "STOREFRONT_SESSION_COOKIE",
        }
        for field, name in simple.items():
            value = env.get(name)
            if value:
                values[field] = value

        numeric = {
            "product_page_size": ("STOREFRONT_PRODUCT_LIMIT", int),
            "timeout": ("MEDUSA_TIMEOUT", float),
            "max_retries": ("MEDUSA_MAX_RETRIES", int),
        }
        for field, (name, kind) in numeric.items():
            value = env.get(name)
            if value:
                try:
                    values[field] = kind(value)
                except ValueError:
                    raise ValueError(f"{name} must be a number, got {value!r}")

        config = cls(**values)
        logger.info(f"Medusa backend URL: {config.backend_url}")
        if not config.publishable_key:
            logger.warning("No publishable key configured (MEDUSA_PUBLISHABLE_KEY)")
        return config
