from concurrent.futures import ThreadPoolExecutor

import pytest
import requests

from conftest import FakeClock, FakeSession, make_response

from postes.api.cache import CacheConfig, TtlCache
from postes.api.client import TENANT_HEADER, ApiClient, ClientPolicy
from postes.api.retry import backoff_delay, retry_with_backoff
from postes.config import ApiSettings
from postes.domain.errors import ApiConnectionError, ApiTimeoutError, HttpError
from postes.domain.models import Tenant

SETTINGS = ApiSettings(base_url="http://api.test/api", timeout=30.0, cold_start_timeout=120.0)


def _client(session, tenant="branco", policy=None, sleeps=None, clock=None):
    return ApiClient(
        SETTINGS,
        tenant_provider=lambda: tenant,
        policy=policy,
        session=session,
        sleep=(sleeps.append if sleeps is not None else (lambda _s: None)),
        clock=clock or FakeClock(),
    )


def test_request_sends_tenant_header_url_and_params():
    session = FakeSession(make_response(200, [{"id": 1}]))
    client = _client(session)

    data = client.get("/vendas", params={"dataInicio": "2024-01-01", "dataFim": None, "posteId": ""})

    assert data == [{"id": 1}]
    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "http://api.test/api/vendas"
    assert call["params"] == {"dataInicio": "2024-01-01"}
    assert call["headers"][TENANT_HEADER] == "branco"
    assert call["headers"]["Content-Type"] == "application/json"


def test_tenant_defaults_to_vermelho_and_accepts_enum():
    session = FakeSession(make_response(200, {}), make_response(200, {}))
    _client(session, tenant=None).get("/postes")
    _client(session, tenant=Tenant.JEFFERSON).get("/postes")

    assert session.calls[0]["headers"][TENANT_HEADER] == "vermelho"
    assert session.calls[1]["headers"][TENANT_HEADER] == "jefferson"


def test_tenant_override_per_request():
    session = FakeSession(make_response(200, []))
    _client(session, tenant="jefferson").get("/estoque", tenant=Tenant.VERMELHO)
    assert session.calls[0]["headers"][TENANT_HEADER] == "vermelho"


def test_first_request_uses_cold_start_timeout_then_normal():
    session = FakeSession(make_response(200, []), make_response(200, []))
    client = _client(session)

    assert not client.warm
    client.get("/postes")
    client.get("/postes")

    assert session.calls[0]["timeout"] == 120.0
    assert session.calls[1]["timeout"] == 30.0
    assert client.warm


def test_failed_first_request_keeps_cold_start_timeout():
    session = FakeSession(requests.ConnectionError("down"), make_response(200, []))
    client = _client(session)

    with pytest.raises(ApiConnectionError):
        client.get("/postes")
    client.get("/postes")

    assert session.calls[1]["timeout"] == 120.0


def test_http_error_carries_status_and_body():
    session = FakeSession(make_response(404, {"message": "Poste não encontrado"}))
    client = _client(session)

    with pytest.raises(HttpError) as info:
        client.get("/postes/9")

    assert info.value.status == 404
    assert "Poste não encontrado" in info.value.body
    assert str(info.value) == "Poste não encontrado"


def test_http_error_with_plain_body():
    session = FakeSession(make_response(500, text="boom"))
    with pytest.raises(HttpError, match="boom") as info:
        _client(session).get("/vendas")
    assert info.value.status == 500


def test_connection_and_timeout_errors_are_normalized():
    session = FakeSession(requests.ConnectionError("refused"), requests.Timeout("slow"))
    client = _client(session)

    with pytest.raises(ApiConnectionError, match="Sem conexão"):
        client.get("/vendas")
    with pytest.raises(ApiTimeoutError, match="Tempo limite"):
        client.get("/vendas")


def test_empty_responses_decode_to_none():
    session = FakeSession(
        make_response(204),
        make_response(200, headers={"Content-Length": "0"}),
        make_response(200, text="ok"),
    )
    client = _client(session)

    assert client.delete("/vendas/1") is None
    assert client.post("/estoque/adicionar", {"posteId": 1}) is None
    assert client.get("/health") == "ok"
    assert session.calls[1]["json"] == {"posteId": 1}


def test_default_policy_does_not_retry():
    session = FakeSession(make_response(500, text="down"), make_response(200, []))
    sleeps = []

    with pytest.raises(HttpError):
        _client(session, sleeps=sleeps).get("/vendas")

    assert len(session.calls) == 1
    assert sleeps == []


def test_legacy_policy_retries_transient_failures_with_backoff():
    session = FakeSession(
        make_response(503, text="waking up"),
        requests.ConnectionError("reset"),
        make_response(200, [{"id": 3}]),
    )
    sleeps = []
    client = _client(session, policy=ClientPolicy.legacy(), sleeps=sleeps)

    assert client.get("/vendas") == [{"id": 3}]
    assert len(session.calls) == 3
    assert sleeps == [1.0, 2.0]


def test_legacy_policy_gives_up_after_three_attempts():
    session = FakeSession(*[make_response(502, text="bad gateway") for _ in range(4)])
    client = _client(session, policy=ClientPolicy.legacy(), sleeps=[])

    with pytest.raises(HttpError):
        client.get("/vendas")
    assert len(session.calls) == 3


def test_client_errors_are_never_retried():
    session = FakeSession(make_response(400, {"error": "dataInicio inválida"}))
    client = _client(session, policy=ClientPolicy.legacy(), sleeps=[])

    with pytest.raises(HttpError, match="dataInicio inválida"):
        client.get("/vendas")
    assert len(session.calls) == 1


def test_legacy_cache_serves_gets_until_ttl_expires():
    clock = FakeClock()
    session = FakeSession(make_response(200, [1]), make_response(200, [2]))
    client = _client(session, policy=ClientPolicy.legacy(), clock=clock)

    assert client.get("/postes") == [1]
    assert client.get("/postes") == [1]
    assert len(session.calls) == 1

    clock.advance(301)
    assert client.get("/postes") == [2]
    assert len(session.calls) == 2


def test_cache_is_keyed_by_tenant_and_params():
    session = FakeSession(*[make_response(200, [i]) for i in range(3)])
    client = _client(session, policy=ClientPolicy.legacy())

    client.get("/vendas", params={"dataInicio": "2024-01-01"})
    client.get("/vendas", params={"dataInicio": "2024-02-01"})
    client.get("/vendas", params={"dataInicio": "2024-01-01"}, tenant="vermelho")

    assert len(session.calls) == 3


def test_cache_shared_across_worker_threads():
    cache = TtlCache(CacheConfig(ttl_seconds=60, max_items=50), clock=FakeClock())

    def worker(n):
        for i in range(200):
            cache.put(("t", n, i % 20), i)
            cache.get(("t", n, (i + 1) % 20))

    with ThreadPoolExecutor(max_workers=4) as pool:
        list(pool.map(worker, range(4)))

    assert len(cache) == 50
    kept = [cache.get(("t", n, k)) for n in range(4) for k in range(20)]
    assert sum(v is not None for v in kept) == 50
    assert all(v is None or v % 20 == i % 20 and v >= 180 for i, v in enumerate(kept))


def test_writes_clear_the_cache():
    session = FakeSession(make_response(200, [1]), make_response(201, {"id": 5}), make_response(200, [1, 5]))
    client = _client(session, policy=ClientPolicy.legacy())

    client.get("/postes")
    client.post("/postes", {"codigo": "P5"})
    assert client.get("/postes") == [1, 5]
    assert len(session.calls) == 3


def test_skip_cache_forces_a_request():
    session = FakeSession(make_response(200, [1]), make_response(200, [2]))
    client = _client(session, policy=ClientPolicy.legacy())

    client.get("/postes")
    assert client.get("/postes", skip_cache=True) == [2]


def test_backoff_schedule_is_exponential_and_capped():
    assert [backoff_delay(n, 1.0, 8.0) for n in range(1, 6)] == [1.0, 2.0, 4.0, 8.0, 8.0]


def test_retry_helper_reraises_last_error_and_rejects_zero_attempts():
    calls = []

    def fail():
        calls.append(1)
        raise RuntimeError(f"fail {len(calls)}")

    with pytest.raises(RuntimeError, match="fail 3"):
        retry_with_backoff(fail, attempts=3, base_delay=0.5, sleep=lambda _s: None)
    with pytest.raises(ValueError):
        retry_with_backoff(fail, attempts=0, base_delay=1.0)
