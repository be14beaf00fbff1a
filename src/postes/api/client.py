from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

import requests

from postes.api.cache import CacheConfig, TtlCache, build_request_key
from postes.api.retry import retry_with_backoff
from postes.config import ApiSettings
from postes.domain.errors import ApiConnectionError, ApiError, ApiTimeoutError, HttpError
from postes.domain.models import Tenant

log = logging.getLogger("postes.api")

TENANT_HEADER = "X-Tenant-ID"


@dataclass(frozen=True)
class ClientPolicy:
    retries: int = 0
    backoff_base: float = 1.0
    backoff_max: float = 8.0
    cache_ttl: float = 0.0

    @classmethod
    def legacy(cls) -> "ClientPolicy":
        # 2 retries (1s, 2s) and a 5 minute GET cache
        return cls(retries=2, backoff_base=1.0, backoff_max=8.0, cache_ttl=300.0)


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, HttpError):
        return exc.status >= 500
    return isinstance(exc, (ApiConnectionError, ApiTimeoutError))


def _error_message(response: requests.Response) -> tuple[str, str]:
    body = response.text or ""
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        for key in ("message", "error"):
            if data.get(key):
                return body, str(data[key])
    return body, body.strip() or f"HTTP {response.status_code}"


def _decode(response: requests.Response) -> Any:
    if response.status_code in (204, 205):
        return None
    if response.headers.get("Content-Length") == "0" or not response.content:
        return None
    content_type = response.headers.get("Content-Type") or ""
    if "application/json" in content_type:
        try:
            return response.json()
        except ValueError:
            log.warning("api_invalid_json status=%s", response.status_code)
            return None
    return response.text


class ApiClient:
    """
    Thin wrapper over the poste backend.

    Every call carries the tenant header. The first call of a client gets the
    longer cold-start timeout since the hosted backend may be asleep.
    """

    def __init__(
        self,
        settings: ApiSettings,
        tenant_provider: Optional[Callable[[], Any]] = None,
        policy: ClientPolicy | None = None,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings
        self.base_url = settings.base_url.rstrip("/")
        self.policy = policy or ClientPolicy()
        self.session = session or requests.Session()
        self._tenant_provider = tenant_provider or (lambda: Tenant.VERMELHO)
        self._sleep = sleep
        self._warm = False
        self._cache: TtlCache | None = None
        if self.policy.cache_ttl > 0:
            self._cache = TtlCache(CacheConfig(ttl_seconds=self.policy.cache_ttl), clock=clock)

    @property
    def tenant(self) -> str:
        value = self._tenant_provider() or Tenant.VERMELHO
        return str(getattr(value, "value", value))

    @property
    def warm(self) -> bool:
        return self._warm

    def current_timeout(self) -> float:
        return self.settings.timeout if self._warm else self.settings.cold_start_timeout

    def clear_cache(self) -> None:
        if self._cache is not None:
            self._cache.clear()

    def request(
        self,
        endpoint: str,
        method: str = "GET",
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        skip_cache: bool = False,
        tenant: Any = None,
    ) -> Any:
        method = method.upper()
        # the manager reads other trucks' stock by overriding the tenant
        tenant = str(getattr(tenant, "value", tenant)) if tenant else self.tenant
        query = {k: v for k, v in (params or {}).items() if v is not None and v != ""}

        use_cache = self._cache is not None and method == "GET" and not skip_cache
        key = build_request_key(tenant, endpoint, query) if use_cache else None
        if use_cache:
            cached = self._cache.get(key)
            if cached is not None:
                log.info("api_cache_hit endpoint=%s tenant=%s", endpoint, tenant)
                return cached

        data = retry_with_backoff(
            lambda: self._send(method, endpoint, tenant, query, json, headers),
            attempts=self.policy.retries + 1,
            base_delay=self.policy.backoff_base,
            max_delay=self.policy.backoff_max,
            retry_on=(ApiError,),
            should_retry=_is_transient,
            sleep=self._sleep,
            label=f"{method} {endpoint}",
        )

        if self._cache is not None and method != "GET":
            # writes make every cached listing stale
            self._cache.clear()
        elif use_cache and data is not None:
            self._cache.put(key, data)
        return data

    def _send(
        self,
        method: str,
        endpoint: str,
        tenant: str,
        query: Mapping[str, Any],
        body: Any,
        extra_headers: Optional[Mapping[str, str]],
    ) -> Any:
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            TENANT_HEADER: tenant,
        }
        headers.update(extra_headers or {})
        timeout = self.current_timeout()

        log.info("api_request method=%s endpoint=%s tenant=%s timeout=%.0f", method, endpoint, tenant, timeout)
        try:
            response = self.session.request(
                method,
                url,
                params=dict(query) or None,
                json=body,
                headers=headers,
                timeout=timeout,
            )
        except requests.Timeout as e:
            log.warning("api_timeout method=%s endpoint=%s timeout=%.0f", method, endpoint, timeout)
            raise ApiTimeoutError("Tempo limite excedido. Verifique sua conexão e tente novamente.") from e
        except requests.RequestException as e:
            log.warning("api_connection_failed method=%s endpoint=%s error=%s", method, endpoint, e)
            raise ApiConnectionError("Sem conexão com o servidor. Verifique sua internet.") from e

        log.info("api_response method=%s endpoint=%s status=%s", method, endpoint, response.status_code)
        if not response.ok:
            body_text, message = _error_message(response)
            raise HttpError(response.status_code, body_text, message)

        if not self._warm:
            self._warm = True
            log.info("api_connected base_url=%s", self.base_url)
        return _decode(response)

    def get(
        self,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
        skip_cache: bool = False,
        tenant: Any = None,
    ) -> Any:
        return self.request(endpoint, "GET", params=params, skip_cache=skip_cache, tenant=tenant)

    def post(self, endpoint: str, data: Any = None) -> Any:
        return self.request(endpoint, "POST", json=data)

    def put(self, endpoint: str, data: Any = None) -> Any:
        return self.request(endpoint, "PUT", json=data)

    def delete(self, endpoint: str) -> Any:
        return self.request(endpoint, "DELETE")
