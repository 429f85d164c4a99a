import asyncio

import httpx

from api.search_client import CombinedSearchClient, SuggestionClient, WebSearchClient
from search_fakes import BASE_URL, json_reply, success_body, text_reply


def _search(client, params):
    return asyncio.run(client.search(params))


def test_success_response_is_parsed(scripted_server):
    server = scripted_server(json_reply(200, success_body()))
    client = CombinedSearchClient(BASE_URL, transport=server.transport())

    response = _search(client, {"q": "tides", "type": "all"})

    assert response.ok
    assert response.payload["ai"]["model"] == "compound-beta"
    assert server.requests[0].url.path == "/api/search"
    assert server.params(0) == {"q": "tides", "type": "all"}


def test_bearer_token_is_sent_when_available(scripted_server):
    server = scripted_server(json_reply(200, {}), json_reply(200, {}))
    with_token = WebSearchClient(
        BASE_URL, transport=server.transport(), credential_provider=lambda: "tok-123"
    )
    without_token = WebSearchClient(
        BASE_URL, transport=server.transport(), credential_provider=lambda: None
    )

    _search(with_token, {"q": "x", "type": "traditional"})
    _search(without_token, {"q": "x", "type": "traditional"})

    assert server.requests[0].headers["Authorization"] == "Bearer tok-123"
    assert "Authorization" not in server.requests[1].headers


def test_http_error_is_returned_not_raised(scripted_server):
    server = scripted_server(json_reply(503, {"message": "Groq API service unavailable"}))
    client = CombinedSearchClient(BASE_URL, transport=server.transport())

    response = _search(client, {"q": "x", "type": "all"})

    assert response.status == 503
    assert not response.ok
    assert response.message == "Groq API service unavailable"


def test_non_json_body_keeps_raw_text(scripted_server):
    server = scripted_server(text_reply(502, "502 Bad Gateway"))
    client = CombinedSearchClient(BASE_URL, transport=server.transport())

    response = _search(client, {"q": "x", "type": "all"})

    assert response.payload is None
    assert response.text == "502 Bad Gateway"
    assert response.message == "502 Bad Gateway"


def test_structured_error_code_is_exposed(scripted_server):
    server = scripted_server(
        json_reply(500, {"error": {"type": "tool_use_failed", "message": "failed"}})
    )
    client = CombinedSearchClient(BASE_URL, transport=server.transport())
    assert _search(client, {"q": "x"}).error_code == "tool_use_failed"


def test_transport_failure_has_status_zero(scripted_server):
    server = scripted_server(httpx.ConnectError("connection refused"))
    client = CombinedSearchClient(BASE_URL, transport=server.transport())

    response = _search(client, {"q": "x", "type": "all"})

    assert response.status == 0
    assert response.text.startswith("Transport error: ConnectError")


class TestSuggestionClient:
    def test_returns_string_suggestions(self, scripted_server):
        server = scripted_server(json_reply(200, ["solar energy", 7, "solar panels"]))
        client = SuggestionClient(BASE_URL, transport=server.transport())

        assert asyncio.run(client.suggest("solar")) == ["solar energy", "solar panels"]
        assert server.requests[0].url.path == "/api/search/suggestions"

    def test_short_input_makes_no_request(self, scripted_server):
        server = scripted_server()
        client = SuggestionClient(BASE_URL, transport=server.transport())

        assert asyncio.run(client.suggest("s")) == []
        assert server.call_count == 0

    def test_failures_return_empty_list(self, scripted_server):
        server = scripted_server(json_reply(500, {"message": "down"}), json_reply(200, {"a": 1}))
        client = SuggestionClient(BASE_URL, transport=server.transport())

        assert asyncio.run(client.suggest("solar")) == []
        assert asyncio.run(client.suggest("solar")) == []
