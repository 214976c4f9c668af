"""
Tests for environment configuration
"""

import json
from pathlib import Path

import pytest

from medusa_storefront.config import DEFAULT_BACKEND_URL, StorefrontConfig


def test_defaults():
    config = StorefrontConfig.from_env({})

    assert config.backend_url == DEFAULT_BACKEND_URL
    assert config.publishable_key is None
    assert config.product_page_size == 12
    assert config.max_retries == 3
    assert config.session_cookie_name == "auth-session"
    assert config.storage_dir == Path.home() / ".medusa_storefront"


def test_reads_environment():
    config = StorefrontConfig.from_env({
        "MEDUSA_BACKEND_URL": "https://shop.example.com/",
        "MEDUSA_PUBLISHABLE_KEY": "pk_live",
        "MEDUSA_REGION_ID": "reg_01",
        "STOREFRONT_STORAGE_DIR": "/tmp/storefront",
        "STOREFRONT_PRODUCT_LIMIT": "24",
        "MEDUSA_TIMEOUT": "5.5",
    })

    assert config.backend_url == "https://shop.example.com"
    assert config.publishable_key == "pk_live"
    assert config.region_id == "reg_01"
    assert config.storage_dir == Path("/tmp/storefront")
    assert config.product_page_size == 24
    assert config.timeout == 5.5


def test_vite_names_are_accepted():
    config = StorefrontConfig.from_env({
        "VITE_MEDUSA_BACKEND_URL": "https://vite.example.com",
        "VITE_MEDUSA_PUBLISHABLE_KEY": "pk_vite",
    })

    assert config.backend_url == "https://vite.example.com"
    assert config.publishable_key == "pk_vite"


def test_runtime_env_file_overrides(tmp_path):
    env_file = tmp_path / "env-config.json"
    env_file.write_text(json.dumps({"VITE_MEDUSA_BACKEND_URL": "https://runtime.example.com"}))

    config = StorefrontConfig.from_env({
        "MEDUSA_BACKEND_URL": "https://build.example.com",
        "MEDUSA_PUBLISHABLE_KEY": "pk_build",
        "STOREFRONT_ENV_FILE": str(env_file),
    })

    assert config.backend_url == "https://runtime.example.com"
    assert config.publishable_key == "pk_build"


def test_broken_runtime_env_file_is_ignored(tmp_path):
    env_file = tmp_path / "env-config.json"
    env_file.write_text("window.__env = {}")

    config = StorefrontConfig.from_env({"STOREFRONT_ENV_FILE": str(env_file)})

    assert config.backend_url == DEFAULT_BACKEND_URL


def test_invalid_number():
    with pytest.raises(ValueError, match="MEDUSA_MAX_RETRIES"):
        StorefrontConfig.from_env({"MEDUSA_MAX_RETRIES": "three"})


def test_reads_process_environment(monkeypatch):
    monkeypatch.setenv("MEDUSA_BACKEND_URL", "https://env.example.com")

    assert StorefrontConfig.from_env().backend_url == "https://env.example.com"
