from __future__ import annotations

import logging
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from api.config import ConfigurationError, RelayConfig, Settings, load_config, load_credentials
from api.main import create_app
from vision.client import CLOUD_PLATFORM_SCOPE, CloudVisionClient

ENV_VARS = (
    "GOOGLE_CREDENTIALS",
    "GOOGLE_CREDENTIALS_FILE",
    "VISION_ENDPOINT",
    "BASIC_AUTH_USER",
    "BASIC_AUTH_PASSWORD",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def settings(**kw):
    return Settings(_env_file=None, **kw)


def test_gate_needs_both_values(monkeypatch):
    assert settings().basic_auth is None

    monkeypatch.setenv("BASIC_AUTH_USER", "u")
    assert settings().basic_auth is None

    monkeypatch.setenv("BASIC_AUTH_PASSWORD", "p")
    assert settings().basic_auth == ("u", "p")


def test_empty_password_disables_gate(monkeypatch):
    monkeypatch.setenv("BASIC_AUTH_USER", "u")
    monkeypatch.setenv("BASIC_AUTH_PASSWORD", "")
    assert settings().basic_auth is None


@patch("api.config.service_account.Credentials")
def test_inline_json_wins_over_file(mock_creds, monkeypatch):
    monkeypatch.setenv("GOOGLE_CREDENTIALS", '{"type": "service_account"}')
    monkeypatch.setenv("GOOGLE_CREDENTIALS_FILE", "/nowhere.json")

    load_credentials(settings())

    mock_creds.from_service_account_info.assert_called_once_with(
        {"type": "service_account"}, scopes=[CLOUD_PLATFORM_SCOPE]
    )
    mock_creds.from_service_account_file.assert_not_called()


@patch("api.config.service_account.Credentials")
def test_file_is_the_default(mock_creds):
    load_credentials(settings())
    mock_creds.from_service_account_file.assert_called_once_with(
        "google_credentials.json", scopes=[CLOUD_PLATFORM_SCOPE]
    )


def test_missing_file_is_a_configuration_error(tmp_path, monkeypatch):
    monkeypatch.setenv("GOOGLE_CREDENTIALS_FILE", str(tmp_path / "missing.json"))
    with pytest.raises(ConfigurationError):
        load_credentials(settings())


def test_bad_inline_json_is_a_configuration_error(monkeypatch):
    monkeypatch.setenv("GOOGLE_CREDENTIALS", "{not json")
    with pytest.raises(ConfigurationError):
        load_credentials(settings())


@patch("vision.client.AuthorizedSession")
@patch("api.config.load_credentials")
def test_load_config_builds_client(mock_load, mock_session, monkeypatch):
    monkeypatch.setenv("BASIC_AUTH_USER", "u")
    monkeypatch.setenv("BASIC_AUTH_PASSWORD", "p")
    monkeypatch.setenv("VISION_ENDPOINT", "http://localhost/annotate")
    mock_load.return_value = MagicMock(service_account_email="relay@example.iam.gserviceaccount.com")

    config = load_config(settings())

    assert isinstance(config.client, CloudVisionClient)
    assert config.client.endpoint == "http://localhost/annotate"
    assert config.basic_auth == ("u", "p")
    mock_session.assert_called_once_with(mock_load.return_value)


@pytest.fixture
def root_level():
    root = logging.getLogger()
    level = root.level
    yield root
    root.setLevel(level)


def test_log_level_is_case_insensitive(monkeypatch):
    assert settings().log_level == "INFO"
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert settings().log_level == "DEBUG"


def test_unknown_log_level_is_rejected(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    with pytest.raises(ValidationError):
        settings()


@patch("api.main.load_config")
def test_factory_reads_settings_from_env(mock_load, monkeypatch, root_level, fake_client):
    monkeypatch.setenv("LOG_LEVEL", "warning")
    mock_load.return_value = RelayConfig(client=fake_client, basic_auth=("u", "p"))

    app = create_app()

    (loaded,) = mock_load.call_args.args
    assert isinstance(loaded, Settings)
    assert root_level.level == logging.WARNING

    client = TestClient(app)
    assert client.get("/health").status_code == 401
    assert client.get("/health", auth=("u", "p")).status_code == 200


@patch("api.main.load_config")
def test_factory_fails_on_bad_log_level(mock_load, monkeypatch, root_level):
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    with pytest.raises(ValidationError):
        create_app()
    mock_load.assert_not_called()
