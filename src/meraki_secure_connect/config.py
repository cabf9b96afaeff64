from __future__ import annotations

import os
from typing import Optional, Tuple

from dotenv import load_dotenv

from .client import DEFAULT_BASE_URL, RetryConfig, SecureConnectClient


def load_env_config(*, use_dotenv: bool = True) -> Tuple[str, str]:
    """Load Meraki base URL and API key from environment (optional .env)."""
    if use_dotenv:
        load_dotenv()
    base_url = os.getenv("MERAKI_BASE_URL", "").strip() or DEFAULT_BASE_URL
    api_key = os.getenv("MERAKI_API_KEY", "").strip()
    return base_url, api_key


def load_max_retries() -> Optional[int]:
    raw = os.getenv("MERAKI_MAX_RETRIES", "").strip()
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"MERAKI_MAX_RETRIES must be an integer, got {raw!r}") from exc
    if value < 0:
        raise ValueError("MERAKI_MAX_RETRIES must be >= 0")
    return value


def create_client_from_env(**kwargs) -> SecureConnectClient:
    """Create a SecureConnectClient from environment variables."""
    base_url, api_key = load_env_config()
    if not api_key:
        raise ValueError("Missing MERAKI_API_KEY in environment.")
    max_retries = load_max_retries()
    if max_retries is not None and "retry" not in kwargs:
        kwargs["retry"] = RetryConfig(max_retries=max_retries)
    return SecureConnectClient(base_url=base_url, api_key=api_key, **kwargs)


__all__ = ["load_env_config", "load_max_retries", "create_client_from_env"]
