"""Shared fixtures: settings, a recording GitHub stub and a fake Cerebras client."""
from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

from kite_mcp.api import create_app
from kite_mcp.chat import ChatRelay
from kite_mcp.config import KiteSettings
from kite_mcp.dispatcher import MCPDispatcher
from kite_mcp.github_client import GitHubProxy
from kite_mcp.oauth import GitHubOAuth

GITHUB_API = "https://api.github.test"


class GitHubStub:
    """httpx handler that records requests and answers from a path table."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.routes: Dict[str, Tuple[int, Any]] = {}
        self.error: Optional[Exception] = None

    def add(self, path: str, body: Any, status: int = 200) -> None:
        self.routes[path] = (status, body)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        status, body = self.routes.get(request.url.path, (404, {"message": "Not Found"}))
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


class FakeCompletions:
    def __init__(self, chunks=None, fail_after: Optional[int] = None, result=None, error=None):
        self.chunks = list(chunks or [])
        self.fail_after = fail_after
        self.result = result
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        if kwargs.get("stream"):
            return self._iterate()
        return self.result

    async def _iterate(self):
        for index, chunk in enumerate(self.chunks):
            if index == self.fail_after:
                raise RuntimeError("upstream connection reset")
            yield chunk
        if self.fail_after is not None and self.fail_after >= len(self.chunks):
            raise RuntimeError("upstream connection reset")


def make_chunk(index: int, content: str) -> Dict[str, Any]:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion.chunk",
        "created": 1700000000 + index,
        "model": "gpt-oss-120b",
        "choices": [{"index": 0, "delta": {"content": content}, "finish_reason": None}],
        "system_fingerprint": "fp_ignored",
    }


@pytest.fixture
def settings() -> KiteSettings:
    return KiteSettings(
        github_client_id="client-123",
        github_client_secret="secret-456",
        github_oauth_base="https://github.test/login/oauth",
        github_api_base=GITHUB_API,
        next_public_base_url="http://frontend.test",
        cerebras_api_key="csk-test",
        cerebras_model="gpt-oss-120b",
        stream=True,
        cors_origin="*",
        cors_methods="POST, OPTIONS",
        cors_headers="Content-Type",
    )


@pytest.fixture
def github_stub() -> GitHubStub:
    return GitHubStub()


@pytest.fixture
def github_proxy(github_stub) -> GitHubProxy:
    return GitHubProxy(api_base=GITHUB_API, transport=github_stub.transport)


@pytest.fixture
def dispatcher(github_proxy) -> MCPDispatcher:
    return MCPDispatcher.create(github_proxy)


@pytest.fixture
def completions() -> FakeCompletions:
    return FakeCompletions(chunks=[make_chunk(0, "Hel"), make_chunk(1, "lo")])


@pytest.fixture
def oauth_stub() -> GitHubStub:
    stub = GitHubStub()
    stub.add(
        "/login/oauth/access_token",
        {"access_token": "gho_abc", "token_type": "bearer", "scope": "repo,user,read:org"},
    )
    return stub


@pytest.fixture
def client(settings, dispatcher, completions, oauth_stub) -> TestClient:
    fake_cerebras = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    app = create_app(
        settings=settings,
        dispatcher=dispatcher,
        oauth=GitHubOAuth(settings, transport=oauth_stub.transport),
        chat_relay=ChatRelay(settings, client=fake_cerebras),
    )
    return TestClient(app)
