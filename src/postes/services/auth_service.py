from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
import logging
from typing import Callable, Optional

from postes.domain.errors import AuthorizationError, HttpError, SessionExpiredError, ValidationError
from postes.domain.models import Identidade, Tenant
from postes.repositories.session_store import (
    LOGGED_IN_KEY,
    LOGIN_TIME_KEY,
    TENANT_KEY,
    USER_KEY,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionPolicy:
    max_age_seconds: int = 8 * 60 * 60


LOGIN_ROUTE = "/"

PAGINAS: dict[Tenant, tuple[str, ...]] = {
    Tenant.VERMELHO: ("dashboard", "vendas", "despesas", "postes", "relatorios"),
    Tenant.BRANCO: ("dashboard", "vendas", "despesas", "postes", "relatorios"),
    Tenant.JEFFERSON: ("dashboard", "estoque-consolidado", "estoque-vermelho", "estoque-branco"),
}


def rota_dashboard(tenant: Tenant | str) -> str:
    return f"/{Tenant(tenant).value}/dashboard"


def resolver_rota(rota: str, identidade: Optional[Identidade]) -> str:
    """
    Route guard. Anonymous users always land on the login screen; a route
    owned by another tenant sends the user to their own dashboard.
    """
    if identidade is None:
        return LOGIN_ROUTE

    partes = [p for p in (rota or "").strip().split("/") if p]
    if not partes:
        return rota_dashboard(identidade.tenant)

    try:
        tenant_rota = Tenant(partes[0])
    except ValueError:
        return LOGIN_ROUTE

    if len(partes) != 2 or partes[1] not in PAGINAS[tenant_rota]:
        return LOGIN_ROUTE
    if tenant_rota is not identidade.tenant:
        return rota_dashboard(identidade.tenant)
    return f"/{tenant_rota.value}/{partes[1]}"


class AuthService:
    def __init__(
        self,
        client,
        store,
        policy: SessionPolicy | None = None,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.client = client
        self.store = store
        self.policy = policy or SessionPolicy()
        self._now = now

    def login(self, tenant: Tenant | str, senha: str) -> Identidade:
        try:
            tenant = Tenant(str(getattr(tenant, "value", tenant)).strip().lower())
        except ValueError:
            raise ValidationError("Selecione um caminhão válido.", {"tenant": "Tenant inválido"}) from None

        secret = (senha or "").strip()
        if not secret:
            raise ValidationError("Informe a senha.", {"senha": "Senha obrigatória"})

        try:
            data = self.client.post("/auth/login", {"tenantId": tenant.value, "senha": secret})
        except HttpError as e:
            if e.status == 401:
                log.warning("login_rejected tenant=%s", tenant.value)
                raise AuthorizationError("Senha incorreta") from e
            raise

        data = data if isinstance(data, dict) else {}
        try:
            logged_tenant = Tenant(str(data.get("tenantId") or tenant.value))
        except ValueError:
            raise AuthorizationError("Resposta de login inválida.") from None

        identidade = Identidade(
            tenant=logged_tenant,
            display_name=str(data.get("displayName") or logged_tenant.value.title()),
            login_em=self._now(),
        )
        self.store.set_items({
            USER_KEY: {"displayName": identidade.display_name, "tenant": logged_tenant.value},
            TENANT_KEY: logged_tenant.value,
            LOGGED_IN_KEY: True,
            LOGIN_TIME_KEY: identidade.login_em.isoformat(),
        })
        if hasattr(self.client, "clear_cache"):
            self.client.clear_cache()
        log.info("login_ok tenant=%s", logged_tenant.value)
        return identidade

    def logout(self) -> None:
        self.store.remove_items(USER_KEY, TENANT_KEY, LOGGED_IN_KEY, LOGIN_TIME_KEY)
        if hasattr(self.client, "clear_cache"):
            self.client.clear_cache()
        log.info("logout")

    def _stored(self) -> tuple[Optional[Identidade], bool]:
        """Returns (identity, expired) for whatever the store holds."""
        if self.store.get_item(LOGGED_IN_KEY) is not True:
            return None, False
        user = self.store.get_item(USER_KEY)
        raw_time = self.store.get_item(LOGIN_TIME_KEY)
        if not isinstance(user, dict) or not raw_time:
            return None, False
        try:
            tenant = Tenant(str(user.get("tenant")))
            login_em = datetime.fromisoformat(str(raw_time))
        except ValueError:
            return None, False

        identidade = Identidade(tenant=tenant, display_name=str(user.get("displayName") or ""), login_em=login_em)
        expired = self._now() - login_em > timedelta(seconds=self.policy.max_age_seconds)
        return identidade, expired

    def sessao_atual(self) -> Optional[Identidade]:
        identidade, expired = self._stored()
        if expired:
            log.info("session_expired tenant=%s", identidade.tenant.value)
            self.logout()
            return None
        return identidade

    def exigir_sessao(self) -> Identidade:
        identidade, expired = self._stored()
        if expired:
            self.logout()
            raise SessionExpiredError("Sessão expirada. Faça login novamente.")
        if identidade is None:
            raise AuthorizationError("Faça login para continuar.")
        return identidade

    def renovar(self) -> Identidade:
        """Restarts the session window from now."""
        identidade = self.exigir_sessao()
        agora = self._now()
        self.store.set_item(LOGIN_TIME_KEY, agora.isoformat())
        return Identidade(tenant=identidade.tenant, display_name=identidade.display_name, login_em=agora)

    def tenant_atual(self) -> Tenant:
        raw = self.store.get_item(TENANT_KEY)
        try:
            return Tenant(str(raw))
        except ValueError:
            return Tenant.VERMELHO
