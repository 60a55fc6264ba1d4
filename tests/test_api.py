"""Route tests through the FastAPI test client."""
import json
from types import SimpleNamespace
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient

from kite_mcp import github_client as gh
from kite_mcp.api import create_app
from kite_mcp.chat import ChatRelay
from kite_mcp.config import KiteSettings

from .conftest import FakeCompletions, make_chunk


def _frames(body: str):
    return [frame for frame in body.split("\n\n") if frame]


def _payloads(body: str):
    return [
        json.loads(frame[len("data: "):])
        for frame in _frames(body)
        if frame != "data: [DONE]"
    ]


class TestHealth:
    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert body["oauth_configured"] is True
        assert body["llm_configured"] is True
        assert body["server"]["name"] == "Kite MCP Server"


class TestMCPRoute:
    def test_status(self, client):
        body = client.get("/mcp").json()
        assert body["availableTools"] == ["commit-splitter", "greet", "github-proxy"]
        assert len(body["githubTools"]) == 10

    def test_tools_list(self, client):
        response = client.post(
            "/mcp", json={"jsonrpc": "2.0", "id": "list-tools", "method": "tools/list", "params": {}}
        )
        assert response.status_code == 200
        names = [t["name"] for t in response.json()["result"]["tools"]]
        assert names == ["commit-splitter", "greet", "github-proxy"]

    def test_tools_call_greet(self, client):
        response = client.post("/mcp", json={
            "jsonrpc": "2.0",
            "id": 1,
            "method": "tools/call",
            "params": {"name": "greet", "arguments": {"name": "Amaan"}},
        })
        assert response.json()["result"]["content"][0]["text"] == (
            "Hello, Amaan! Welcome to Kite MCP Server."
        )

    def test_tools_call_github(self, client, github_stub):
        github_stub.add("/repos/facebook/react/releases", [{"tag_name": "v19.0.0"}])
        response = client.post("/mcp", json={
            "jsonrpc": "2.0",
            "id": 2,
            "method": "tools/call",
            "params": {"name": "list_releases", "arguments": {"owner": "facebook", "repo": "react"}},
        })
        assert "v19.0.0" in response.json()["result"]["content"][0]["text"]
        assert len(github_stub.requests) == 1

    def test_malformed_body(self, client):
        response = client.post(
            "/mcp", content=b"this is not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["error"]["code"] == -32603
        assert body["error"]["message"] == "Internal error"
        assert "data" in body["error"]


class TestOAuthRoutes:
    def test_start_redirects_to_github(self, client):
        response = client.get("/api/oauth", follow_redirects=False)
        assert response.status_code in (302, 307)
        location = urlparse(response.headers["location"])
        assert location.netloc == "github.test"
        assert parse_qs(location.query)["scope"] == ["repo user read:org"]

    def test_start_without_client_id(self):
        settings = KiteSettings(github_client_id="", github_client_secret="")
        with TestClient(create_app(settings=settings)) as client:
            response = client.get("/api/oauth", follow_redirects=False)
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to initiate OAuth flow"}

    def test_callback_success_redirects_with_token(self, client, oauth_stub):
        response = client.get(
            "/api/auth/callback", params={"code": "c0de", "state": "s"}, follow_redirects=False
        )
        location = urlparse(response.headers["location"])
        assert f"{location.scheme}://{location.netloc}{location.path}" == (
            "http://frontend.test/dashboard"
        )
        query = parse_qs(location.query)
        assert query["token"] == ["gho_abc"]
        assert query["scopes"] == ["repo,user,read:org"]
        assert len(oauth_stub.requests) == 1

    def test_callback_provider_error(self, client, oauth_stub):
        response = client.get(
            "/api/auth/callback", params={"error": "access_denied"}, follow_redirects=False
        )
        assert response.headers["location"] == "http://frontend.test/?error=access_denied"
        assert oauth_stub.requests == []

    def test_callback_without_code(self, client):
        response = client.get("/api/auth/callback", follow_redirects=False)
        assert response.headers["location"] == "http://frontend.test/?error=no_code"

    def test_callback_exchange_failure(self, client, oauth_stub):
        oauth_stub.add("/login/oauth/access_token", {"error": "bad_verification_code"})
        response = client.get("/api/auth/callback", params={"code": "x"}, follow_redirects=False)
        assert response.headers["location"] == "http://frontend.test/?error=auth_failed"

    def test_json_exchange(self, client):
        response = client.get("/api/auth", params={"code": "c0de"})
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "token": "gho_abc",
            "tokenType": "bearer",
            "scopes": ["repo", "user", "read:org"],
        }

    def test_json_login_action(self, client):
        response = client.get("/api/auth", params={"action": "login"}, follow_redirects=False)
        assert response.headers["location"] == "/api/oauth"

    def test_json_provider_error(self, client):
        response = client.get("/api/auth", params={"error": "access_denied"})
        assert response.status_code == 400
        assert response.json() == {"error": "OAuth error: access_denied"}

    def test_json_without_code(self, client):
        response = client.get("/api/auth")
        assert response.status_code == 400
        assert response.json() == {"error": "Authorization code not provided"}

    def test_json_exchange_failure(self, client, oauth_stub):
        oauth_stub.add("/login/oauth/access_token", {"error": "bad_verification_code"})
        response = client.get("/api/auth", params={"code": "x"})
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to authenticate with GitHub"}


class TestIssuesRoute:
    def test_requires_owner_and_repo(self, client):
        response = client.get("/api/github", params={"owner": "o", "token": "t"})
        assert response.status_code == 400

    def test_requires_token(self, client):
        response = client.get("/api/github", params={"owner": "o", "repo": "r"})
        assert response.status_code == 401
        assert response.json() == {"error": "Authentication token is required"}

    def test_lists_issues(self, client, monkeypatch):
        calls = []

        def fake_list_issues(owner, repo, token):
            calls.append((owner, repo, token))
            return [{"number": 1}]

        monkeypatch.setattr(gh, "list_issues", fake_list_issues)
        response = client.get("/api/github", params={"owner": "o", "repo": "r", "token": "t"})
        assert response.json() == {"issues": [{"number": 1}]}
        assert calls == [("o", "r", "t")]

    def test_upstream_failure(self, client, monkeypatch):
        def failing(owner, repo, token):
            raise RuntimeError("401 Bad credentials")

        monkeypatch.setattr(gh, "list_issues", failing)
        response = client.get("/api/github", params={"owner": "o", "repo": "r", "token": "t"})
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch issues from GitHub"}


class TestChatRoute:
    def test_streams_chunks_then_done(self, client, completions):
        response = client.post("/api/chat", json={"messages": [{"role": "user", "content": "hi"}]})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"
        assert response.headers["access-control-allow-origin"] == "*"

        frames = _frames(response.text)
        assert frames[-1] == "data: [DONE]"
        payloads = _payloads(response.text)
        assert [p["choices"][0]["delta"]["content"] for p in payloads] == ["Hel", "lo"]
        assert set(payloads[0]) == {"id", "object", "created", "model", "choices"}

        call = completions.calls[0]
        assert call["model"] == "gpt-oss-120b"
        assert call["stream"] is True

    def test_overrides_and_extra_params_are_forwarded(self, client, completions):
        client.post("/api/chat", json={
            "messages": [{"role": "user", "content": "hi"}],
            "model": "llama3.1-8b",
            "max_tokens": 64,
            "temperature": 0.2,
        })
        call = completions.calls[0]
        assert call["model"] == "llama3.1-8b"
        assert call["max_tokens"] == 64
        assert call["temperature"] == 0.2

    @pytest.mark.parametrize("body", [{}, {"messages": []}, {"messages": "hello"}])
    def test_rejects_missing_messages_before_upstream(self, client, completions, body):
        response = client.post("/api/chat", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "Messages array is required and must not be empty"}
        assert completions.calls == []

    def test_unparseable_body(self, client, completions):
        response = client.post(
            "/api/chat", content=b"{oops", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 500
        assert "error" in response.json()
        assert completions.calls == []

    def test_missing_api_key(self, settings):
        settings = settings.model_copy(update={"cerebras_api_key": ""})
        app = create_app(settings=settings, chat_relay=ChatRelay(settings))
        with TestClient(app) as client:
            response = client.post("/api/chat", json={"messages": [{"role": "user", "content": "x"}]})
        assert response.status_code == 500
        assert response.json() == {"error": "CEREBRAS_API_KEY environment variable is not set"}

    def test_mid_stream_fault_emits_error_then_done(self, settings):
        completions = FakeCompletions(chunks=[make_chunk(0, "partial")], fail_after=1)
        relay = ChatRelay(settings, client=SimpleNamespace(chat=SimpleNamespace(completions=completions)))
        with TestClient(create_app(settings=settings, chat_relay=relay)) as client:
            response = client.post("/api/chat", json={"messages": [{"role": "user", "content": "x"}]})

        frames = _frames(response.text)
        assert frames[-1] == "data: [DONE]"
        payloads = _payloads(response.text)
        assert payloads[0]["choices"][0]["delta"]["content"] == "partial"
        assert payloads[-1] == {
            "error": {"message": "upstream connection reset", "type": "server_error"}
        }

    def test_provider_refuses_request(self, settings):
        completions = FakeCompletions(error=RuntimeError("invalid model"))
        relay = ChatRelay(settings, client=SimpleNamespace(chat=SimpleNamespace(completions=completions)))
        with TestClient(create_app(settings=settings, chat_relay=relay)) as client:
            response = client.post("/api/chat", json={"messages": [{"role": "user", "content": "x"}]})

        assert _frames(response.text) == [
            'data: {"error": {"message": "invalid model", "type": "server_error"}}',
            "data: [DONE]",
        ]

    def test_non_streaming_result_is_one_frame(self, client, completions):
        completions.result = {
            "id": "chatcmpl-2",
            "object": "chat.completion",
            "created": 1700000100,
            "model": "gpt-oss-120b",
            "choices": [{"index": 0, "message": {"role": "assistant", "content": "Hello"}}],
        }
        response = client.post(
            "/api/chat", json={"messages": [{"role": "user", "content": "hi"}], "stream": False}
        )
        payloads = _payloads(response.text)
        assert len(payloads) == 1
        assert payloads[0]["choices"][0]["message"]["content"] == "Hello"
        assert _frames(response.text)[-1] == "data: [DONE]"

    def test_preflight(self, client):
        response = client.options("/api/chat")
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-methods"] == "POST, OPTIONS"
        assert response.headers["access-control-allow-headers"] == "Content-Type"
