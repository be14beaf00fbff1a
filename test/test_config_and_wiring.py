import json
import logging
import os
from pathlib import Path

import pytest

from conftest import FakeSession, make_response

from postes.api.client import TENANT_HEADER
from postes.application.container import build_container
from postes.config import ApiSettings, AppPaths, load_settings
from postes.logging_config import JsonFormatter

ENV_VARS = ("POSTES_API_BASE", "POSTES_API_TIMEOUT", "POSTES_API_COLD_START_TIMEOUT", "POSTES_LEGACY_CLIENT")


@pytest.fixture
def clean_env(monkeypatch):
    # load_dotenv writes into os.environ; give each test its own copy
    monkeypatch.setattr(os, "environ", {k: v for k, v in os.environ.items() if k not in ENV_VARS})


def test_settings_defaults(tmp_path: Path, clean_env):
    settings = load_settings(tmp_path / "missing.env")

    assert settings == ApiSettings()
    assert settings.base_url == "http://localhost:8080/api"


def test_settings_from_env_file(tmp_path: Path, clean_env):
    env = tmp_path / ".env"
    env.write_text(
        "POSTES_API_BASE=https://postes.example.com/api/\n"
        "POSTES_API_TIMEOUT=15\n"
        "POSTES_API_COLD_START_TIMEOUT=abc\n"
        "POSTES_LEGACY_CLIENT=true\n",
        encoding="utf-8",
    )

    settings = load_settings(env)

    assert settings.base_url == "https://postes.example.com/api"
    assert settings.timeout == 15.0
    assert settings.cold_start_timeout == 120.0
    assert settings.legacy_mode is True


def test_json_formatter_emits_one_object_per_record():
    record = logging.LogRecord("postes.api", logging.INFO, __file__, 1, "api_request endpoint=%s", ("/vendas",), None)
    payload = json.loads(JsonFormatter().format(record))
    assert payload["logger"] == "postes.api"
    assert payload["message"] == "api_request endpoint=/vendas"
    assert payload["level"] == "INFO"


def test_container_uses_stored_tenant_for_requests(tmp_path: Path):
    paths = AppPaths(base_dir=tmp_path, session_path=tmp_path / "session.json", logs_dir=tmp_path / "logs")
    session = FakeSession(
        make_response(200, {"tenantId": "branco", "displayName": "Branco"}),
        make_response(200, []),
    )
    container = build_container(ApiSettings(base_url="http://api.test/api"), paths, session=session)

    container.auth.login("branco", "segredo")
    container.postes.listar()

    assert session.calls[0]["url"] == "http://api.test/api/auth/login"
    assert session.calls[1]["headers"][TENANT_HEADER] == "branco"
    assert container.client.policy.retries == 0


def test_legacy_mode_enables_retry_and_cache(tmp_path: Path):
    paths = AppPaths(base_dir=tmp_path, session_path=tmp_path / "session.json", logs_dir=tmp_path / "logs")
    container = build_container(ApiSettings(legacy_mode=True), paths, session=FakeSession())
    assert container.client.policy.retries == 2
    assert container.client.policy.cache_ttl == 300.0
