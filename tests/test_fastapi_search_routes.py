"""
FastAPI contract tests for the search, filter, suggestion and session routes.

The search service is rebuilt per test around a scripted MockTransport, so
no request leaves the process.
"""

import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient

from orchestrator.search_service import SearchService
from search_fakes import ScriptedSearchServer, build_orchestrator, json_reply, success_body, web_results
from server.app import create_app
from tools.web.session_registry import SessionStoreRegistry
from tools.web.suggestions import SuggestionService

pytestmark = pytest.mark.integration

HEADERS = {"X-API-Key": "test-key-1", "X-Session-ID": "session-a"}


class FakeSuggestionService:
    def __init__(self):
        self.calls: list[str] = []

    async def suggest(self, text):
        self.calls.append(text)
        return [f"{text} energy"]

    def suggest_debounced(self, text):
        future = asyncio.get_running_loop().create_future()
        future.set_result([f"{text} (debounced)"])
        return future


@pytest.fixture()
def server():
    return ScriptedSearchServer([])


@pytest.fixture()
def service(server):
    return SearchService(build_orchestrator(server), SessionStoreRegistry())


def _build_app(service, suggestion_service=None):
    from config.config import Config
    from server import dependencies as deps

    for dep in (deps.get_config, deps.get_search_service):
        if hasattr(dep, "_instance"):
            delattr(dep, "_instance")
    if hasattr(deps.get_suggestion_service, "_instances"):
        delattr(deps.get_suggestion_service, "_instances")

    app = create_app()
    app.dependency_overrides[deps.get_config] = lambda: Config()
    app.dependency_overrides[deps.get_search_service] = lambda: service
    if suggestion_service is not None:
        app.dependency_overrides[deps.get_suggestion_service] = lambda: suggestion_service
    return app


@pytest.fixture()
def client(mock_env, service):
    with TestClient(_build_app(service, FakeSuggestionService())) as test_client:
        yield test_client


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"
    assert "X-Request-ID" in r.headers


def test_search_requires_api_key(client):
    r = client.post("/v1/search", json={"q": "solar"})
    assert r.status_code == 401


def test_search_returns_blended_result(client, server):
    server.replies.append(json_reply(200, success_body(model="compound-beta")))

    r = client.post("/v1/search", json={"q": "solar power", "category": "news"}, headers=HEADERS)

    assert r.status_code == 200
    body = r.json()
    assert body["ai"]["model"] == "compound-beta"
    assert body["tier"] == "combined"
    assert body["cache_hit"] is False
    assert len(body["traditional"]) == 2
    assert server.params(0)["type"] == "news"


def test_second_search_is_served_from_cache(client, server):
    server.replies.append(json_reply(200, success_body()))

    client.post("/v1/search", json={"q": "solar power"}, headers=HEADERS)
    r = client.post("/v1/search", json={"q": "solar power"}, headers=HEADERS)

    assert r.json()["cache_hit"] is True
    assert server.call_count == 1


def test_degraded_search_returns_fallback_answer(client, server):
    server.replies.extend(
        [
            json_reply(503, {"message": "Groq API service unavailable"}),
            json_reply(503, {"message": "Groq API service unavailable"}),
            json_reply(200, {"traditional": web_results(5)}),
        ]
    )

    r = client.post("/v1/search", json={"q": "renewable energy"}, headers=HEADERS)

    assert r.status_code == 200
    assert r.json()["ai"]["model"] == "error-fallback"
    assert len(r.json()["traditional"]) == 5


def test_exhausted_search_returns_502_with_upstream_details(client, server):
    server.replies.append(json_reply(500, {"message": "Something odd"}))

    r = client.post("/v1/search", json={"q": "solar power"}, headers=HEADERS)

    assert r.status_code == 502
    assert r.json() == {
        "message": "Something odd",
        "status": 500,
        "failure_kind": "Unclassified",
        "tiers": ["combined"],
    }
    cached = client.get("/v1/search/cache/all", headers=HEADERS).json()
    assert cached == {"category": "all", "searched": True, "result": None}


@pytest.mark.parametrize(
    "payload",
    [{"q": ""}, {"q": "x" * 401}, {"q": "solar", "category": "podcasts"}],
)
def test_search_rejects_invalid_input(client, payload):
    r = client.post("/v1/search", json=payload, headers=HEADERS)
    assert r.status_code in (400, 422)


def test_whitespace_query_is_rejected(client, server):
    r = client.post("/v1/search", json={"q": "   "}, headers=HEADERS)
    assert r.status_code == 400
    assert server.call_count == 0


def test_unknown_cache_category_is_rejected(client):
    r = client.get("/v1/search/cache/podcasts", headers=HEADERS)
    assert r.status_code == 400


def test_filter_update_invalidates_cache(client, server):
    server.replies.extend([json_reply(200, success_body()), json_reply(200, success_body())])
    client.post("/v1/search", json={"q": "solar power"}, headers=HEADERS)

    r = client.patch(
        "/v1/filters",
        json={"region": "US", "sources": {"social": False}},
        headers=HEADERS,
    )
    assert r.status_code == 200
    body = r.json()
    assert body["filters"]["region"] == "US"
    assert body["filters"]["sources"]["social"] is False
    assert body["filters"]["sources"]["news"] is True
    assert not any(body["searched"].values())

    r = client.post("/v1/search", json={"q": "solar power"}, headers=HEADERS)
    assert r.json()["cache_hit"] is False
    assert server.params(1)["region"] == "US"


def test_invalid_filter_value_is_rejected(client):
    r = client.patch("/v1/filters", json={"time_range": "lastDecade"}, headers=HEADERS)
    assert r.status_code == 422


def test_reset_filters(client):
    client.patch("/v1/filters", json={"region": "US"}, headers=HEADERS)
    r = client.delete("/v1/filters", headers=HEADERS)
    assert r.json()["filters"]["region"] == "global"


def test_filters_are_per_session(client):
    client.patch("/v1/filters", json={"region": "US"}, headers=HEADERS)
    other = {**HEADERS, "X-Session-ID": "session-b"}
    assert client.get("/v1/filters", headers=other).json()["filters"]["region"] == "global"


def test_suggestions(client):
    r = client.get("/v1/suggestions", params={"q": "solar"}, headers=HEADERS)
    assert r.json() == {"suggestions": ["solar (debounced)"], "superseded": False}

    r = client.get("/v1/suggestions", params={"q": "solar", "debounce": "false"}, headers=HEADERS)
    assert r.json()["suggestions"] == ["solar energy"]


def test_end_session_drops_cache(client, server):
    server.replies.append(json_reply(200, success_body()))
    client.post("/v1/search", json={"q": "solar power"}, headers=HEADERS)

    r = client.delete("/v1/session", headers=HEADERS)
    assert r.json() == {"session_id": "session-a", "dropped": True}
    cached = client.get("/v1/search/cache/all", headers=HEADERS).json()
    assert cached["searched"] is False


def test_end_session_drops_suggestion_service(mock_env, service, monkeypatch):
    from server import dependencies as deps

    monkeypatch.setenv("SUGGESTION_DEBOUNCE_MS", "0")
    with TestClient(_build_app(service)) as client:
        other = {**HEADERS, "X-Session-ID": "session-b"}
        for headers in (HEADERS, other):
            r = client.get(
                "/v1/suggestions", params={"q": "s", "debounce": "false"}, headers=headers
            )
            assert r.json() == {"suggestions": [], "superseded": False}
        assert set(deps.get_suggestion_service._instances) == {"session-a", "session-b"}

        client.delete("/v1/session", headers=HEADERS)

        assert set(deps.get_suggestion_service._instances) == {"session-b"}
        assert deps.drop_suggestion_service("session-a") is False


class RecordingSuggestionClient:
    def __init__(self):
        self.calls: list[str] = []

    async def suggest(self, text):
        self.calls.append(text)
        return [f"{text} energy", f"{text} panels"]


def test_debounced_suggestion_is_superseded_by_newer_request(mock_env, service):
    suggestion_client = RecordingSuggestionClient()
    app = _build_app(service, SuggestionService(suggestion_client, delay_s=0.2))

    async def scenario():
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            older = asyncio.create_task(
                client.get("/v1/suggestions", params={"q": "so"}, headers=HEADERS)
            )
            await asyncio.sleep(0.05)
            newer = await client.get("/v1/suggestions", params={"q": "solar"}, headers=HEADERS)
            return (await older).json(), newer.json()

    older, newer = asyncio.run(scenario())

    assert older == {"suggestions": [], "superseded": True}
    assert newer == {"suggestions": ["solar energy", "solar panels"], "superseded": False}
    assert suggestion_client.calls == ["solar"]
