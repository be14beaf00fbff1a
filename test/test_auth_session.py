from datetime import datetime, timedelta
from pathlib import Path

import pytest

from conftest import RecordingClient

from postes.domain.errors import AuthorizationError, HttpError, SessionExpiredError, ValidationError
from postes.domain.models import Identidade, Tenant
from postes.repositories.session_store import LOGGED_IN_KEY, TENANT_KEY, JsonSessionStore
from postes.services.auth_service import AuthService, resolver_rota


class Clock:
    def __init__(self):
        self.now = datetime(2024, 3, 1, 8, 0, 0)

    def __call__(self):
        return self.now


def _auth(tmp_path: Path, routes=None):
    client = RecordingClient(routes or {("POST", "/auth/login"): {"tenantId": "vermelho", "displayName": "Vermelho"}})
    store = JsonSessionStore(tmp_path / "session.json")
    clock = Clock()
    return AuthService(client, store, now=clock), client, store, clock


def test_login_stores_identity_and_tenant(tmp_path: Path):
    auth, client, store, _clock = _auth(tmp_path)

    ident = auth.login("vermelho", " segredo ")

    assert ident.tenant is Tenant.VERMELHO
    assert ident.display_name == "Vermelho"
    assert client.calls[0][2]["data"] == {"tenantId": "vermelho", "senha": "segredo"}
    assert client.cache_cleared == 1
    assert store.get_item(TENANT_KEY) == "vermelho"
    assert store.get_item(LOGGED_IN_KEY) is True
    assert store.tenant() == "vermelho"

    # persisted across instances
    again = AuthService(client, JsonSessionStore(tmp_path / "session.json"), now=_clock)
    assert again.sessao_atual() == ident


def test_wrong_password_is_an_authorization_error(tmp_path: Path):
    auth, _client, store, _clock = _auth(tmp_path, {("POST", "/auth/login"): HttpError(401, "", "Unauthorized")})

    with pytest.raises(AuthorizationError, match="Senha incorreta"):
        auth.login("branco", "errada")
    assert store.get_item(LOGGED_IN_KEY) is None


def test_other_login_failures_propagate(tmp_path: Path):
    auth, *_ = _auth(tmp_path, {("POST", "/auth/login"): HttpError(500, "boom")})
    with pytest.raises(HttpError):
        auth.login("branco", "x")


def test_login_validates_before_any_request(tmp_path: Path):
    auth, client, *_ = _auth(tmp_path)

    with pytest.raises(ValidationError) as info:
        auth.login("vermelho", "   ")
    assert "senha" in info.value.campos
    with pytest.raises(ValidationError):
        auth.login("azul", "x")
    assert client.calls == []


def test_session_expires_after_eight_hours(tmp_path: Path):
    auth, _client, store, clock = _auth(tmp_path)
    auth.login("vermelho", "segredo")

    clock.now += timedelta(hours=7, minutes=59)
    assert auth.exigir_sessao().tenant is Tenant.VERMELHO

    clock.now += timedelta(minutes=2)
    with pytest.raises(SessionExpiredError):
        auth.exigir_sessao()
    assert store.get_item(LOGGED_IN_KEY) is None
    assert auth.sessao_atual() is None


def test_sessao_atual_clears_expired_session(tmp_path: Path):
    auth, _client, store, clock = _auth(tmp_path)
    auth.login("vermelho", "segredo")
    clock.now += timedelta(hours=9)

    assert auth.sessao_atual() is None
    assert store.get_item(TENANT_KEY) is None


def test_logout_clears_everything(tmp_path: Path):
    auth, client, store, _clock = _auth(tmp_path)
    auth.login("vermelho", "segredo")
    auth.logout()

    assert auth.sessao_atual() is None
    assert store.tenant() is None
    assert client.cache_cleared == 2
    with pytest.raises(AuthorizationError):
        auth.exigir_sessao()


def test_corrupt_session_file_counts_as_logged_out(tmp_path: Path):
    (tmp_path / "session.json").write_text("{not json", encoding="utf-8")
    auth, *_ = _auth(tmp_path)
    assert auth.sessao_atual() is None


def test_route_guard():
    ident = Identidade(tenant=Tenant.BRANCO, display_name="Branco", login_em=datetime(2024, 3, 1))

    assert resolver_rota("/branco/vendas", None) == "/"
    assert resolver_rota("/branco/vendas", ident) == "/branco/vendas"
    assert resolver_rota("/vermelho/vendas", ident) == "/branco/dashboard"
    assert resolver_rota("/", ident) == "/branco/dashboard"
    assert resolver_rota("/branco/nada", ident) == "/"
    assert resolver_rota("/jefferson/estoque-vermelho", ident) == "/branco/dashboard"


def test_route_guard_for_manager():
    ident = Identidade(tenant=Tenant.JEFFERSON, display_name="Jefferson", login_em=datetime(2024, 3, 1))
    assert resolver_rota("/jefferson/estoque-branco", ident) == "/jefferson/estoque-branco"
    assert resolver_rota("/vermelho/dashboard", ident) == "/jefferson/dashboard"
