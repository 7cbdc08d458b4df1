import json
from typing import Callable, Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient

from main import create_app
from utils.settings import Settings


def chunk(content: str) -> bytes:
    """Encode one chat-completion chunk as an upstream SSE frame."""
    event = {"object": "chat.completion.chunk", "choices": [{"index": 0, "delta": {"content": content}}]}
    return f"data: {json.dumps(event)}\n\n".encode("utf-8")


DONE = b"data: [DONE]\n\n"


def parse_events(body: str) -> List[Dict]:
    """Decode the relay's downstream event stream into payload dicts."""
    events = []
    for block in body.split("\n\n"):
        block = block.strip()
        if block.startswith("data: "):
            events.append(json.loads(block[len("data: "):]))
    return events


class FakeModelServer:
    """Scripted OpenAI-compatible server behind an httpx.MockTransport."""

    def __init__(self) -> None:
        self.requests: List[Dict] = []
        self.replies: List[Callable[[httpx.Request], httpx.Response]] = []

    def stream(self, *chunks: bytes, error: Exception = None) -> None:
        async def body():
            for item in chunks:
                yield item
            if error is not None:
                raise error

        self.replies.append(
            lambda request: httpx.Response(200, headers={"content-type": "text/event-stream"}, content=body())
        )

    def fail_status(self, status_code: int) -> None:
        self.replies.append(lambda request: httpx.Response(status_code, json={"error": {"message": "boom"}}))

    def refuse(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        self.replies.append(handler)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append({"url": str(request.url), "json": json.loads(request.content)})
        return self.replies.pop(0)(request)

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handle))


@pytest.fixture
def model_server() -> FakeModelServer:
    return FakeModelServer()


@pytest.fixture
def settings() -> Settings:
    return Settings(lm_base_url="http://model.test/v1", lm_model="google/gemma-3-4b")


@pytest.fixture
def app(settings, model_server):
    return create_app(settings, http_client=model_server.http_client())


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
