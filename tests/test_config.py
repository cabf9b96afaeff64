import pytest
from meraki_secure_connect import config as config_module
from meraki_secure_connect.client import DEFAULT_BASE_URL, SecureConnectClient
from meraki_secure_connect.config import (
    create_client_from_env,
    load_env_config,
    load_max_retries,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("MERAKI_API_KEY", "MERAKI_BASE_URL", "MERAKI_MAX_RETRIES"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config_module, "load_dotenv", lambda *a, **k: False)


def test_load_env_config_defaults_base_url():
    base_url, api_key = load_env_config(use_dotenv=False)
    assert base_url == DEFAULT_BASE_URL
    assert api_key == ""


def test_load_env_config_reads_and_strips(monkeypatch):
    monkeypatch.setenv("MERAKI_BASE_URL", " https://eu.meraki.example/api/v1 ")
    monkeypatch.setenv("MERAKI_API_KEY", " secret ")
    assert load_env_config(use_dotenv=False) == (
        "https://eu.meraki.example/api/v1",
        "secret",
    )


def test_create_client_from_env_requires_key():
    with pytest.raises(ValueError, match="MERAKI_API_KEY"):
        create_client_from_env()


def test_create_client_from_env_applies_retry_budget(monkeypatch):
    monkeypatch.setenv("MERAKI_API_KEY", "secret")
    monkeypatch.setenv("MERAKI_MAX_RETRIES", "5")

    client = create_client_from_env()

    assert isinstance(client, SecureConnectClient)
    assert client.base_url == DEFAULT_BASE_URL
    assert client.retry.max_retries == 5


def test_default_retry_budget_is_three(monkeypatch):
    monkeypatch.setenv("MERAKI_API_KEY", "secret")
    assert create_client_from_env().retry.max_retries == 3


@pytest.mark.parametrize("raw", ["many", "-1"])
def test_invalid_retry_budget(monkeypatch, raw):
    monkeypatch.setenv("MERAKI_MAX_RETRIES", raw)
    with pytest.raises(ValueError):
        load_max_retries()


def test_client_from_env(monkeypatch):
    monkeypatch.setenv("MERAKI_API_KEY", "secret")
    monkeypatch.setenv("MERAKI_BASE_URL", "https://mock.meraki.com/api/v1/")
    client = SecureConnectClient.from_env()
    assert client.base_url == "https://mock.meraki.com/api/v1"


def test_client_from_env_honours_retry_budget(monkeypatch):
    monkeypatch.setenv("MERAKI_API_KEY", "secret")
    monkeypatch.setenv("MERAKI_MAX_RETRIES", "1")

    assert SecureConnectClient.from_env().retry.max_retries == 1
    assert create_client_from_env().retry == SecureConnectClient.from_env().retry


def test_client_from_env_requires_key():
    with pytest.raises(ValueError, match="MERAKI_API_KEY"):
        SecureConnectClient.from_env()
