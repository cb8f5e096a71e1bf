"""
Shared fixtures for clust tests.

HTTP is faked with httpx.MockTransport; no network access is needed.
"""

import json
from typing import Callable, List, Optional

import httpx
import pytest

from clust import AsyncClient, Client, ClientConfig


# ── SSE helpers ──────────────────────────────────────


def sse_frame(event: Optional[str], payload) -> str:
    """Render one SSE frame, including the terminating blank line."""
    lines = []
    if event is not None:
        lines.append(f"event: {event}")
    data = payload if isinstance(payload, str) else json.dumps(payload)
    lines.append(f"data: {data}")
    return "\n".join(lines) + "\n\n"


MESSAGE_ENVELOPE = {
    "id": "msg_01",
    "type": "message",
    "role": "assistant",
    "content": [],
    "model": "claude-3-haiku-20240307",
    "stop_reason": None,
    "stop_sequence": None,
    "usage": {"input_tokens": 25, "output_tokens": 1},
}


def text_stream_frames(chunks: List[str], stop_reason: str = "end_turn") -> List[str]:
    """Frames of a complete streamed message with one text block."""
    frames = [
        sse_frame("message_start", {"type": "message_start", "message": MESSAGE_ENVELOPE}),
        sse_frame("content_block_start", {
            "type": "content_block_start", "index": 0,
            "content_block": {"type": "text", "text": ""},
        }),
        sse_frame("ping", {"type": "ping"}),
    ]
    for chunk in chunks:
        frames.append(sse_frame("content_block_delta", {
            "type": "content_block_delta", "index": 0,
            "delta": {"type": "text_delta", "text": chunk},
        }))
    frames += [
        sse_frame("content_block_stop", {"type": "content_block_stop", "index": 0}),
        sse_frame("message_delta", {
            "type": "message_delta",
            "delta": {"stop_reason": stop_reason, "stop_sequence": None},
            "usage": {"output_tokens": 15},
        }),
        sse_frame("message_stop", {"type": "message_stop"}),
    ]
    return frames


def response_json(text: str = "Hello!", **overrides) -> dict:
    body = dict(MESSAGE_ENVELOPE)
    body.update({
        "content": [{"type": "text", "text": text}],
        "stop_reason": "end_turn",
        "usage": {"input_tokens": 10, "output_tokens": 5},
    })
    body.update(overrides)
    return body


def error_json(error_type: str, message: str) -> dict:
    return {"type": "error", "error": {"type": error_type, "message": message}}


class BrokenStream(httpx.SyncByteStream):
    """Delivers the given frames (a single ping by default), then loses the connection."""

    def __init__(self, frames: Optional[List[str]] = None):
        self.frames = frames if frames is not None else [sse_frame("ping", {"type": "ping"})]

    def __iter__(self):
        for frame in self.frames:
            yield frame.encode()
        raise httpx.ReadError("connection reset")


class AsyncBrokenStream(httpx.AsyncByteStream):

    def __init__(self, frames: Optional[List[str]] = None):
        self.frames = frames if frames is not None else [sse_frame("ping", {"type": "ping"})]

    async def __aiter__(self):
        for frame in self.frames:
            yield frame.encode()
        raise httpx.ReadError("connection reset")


# ── Clients over MockTransport ──────────────────────────────────────


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(api_key="test-key")


@pytest.fixture
def make_client(config) -> Callable[[Callable[[httpx.Request], httpx.Response]], Client]:
    """Build a Client whose requests are answered by `handler`."""
    clients = []

    def _make(handler):
        http_client = httpx.Client(transport=httpx.MockTransport(handler))
        client = Client(config=config, http_client=http_client)
        clients.append(http_client)
        return client

    yield _make
    for http_client in clients:
        http_client.close()


@pytest.fixture
def make_async_client(config):
    """Build an AsyncClient whose requests are answered by `handler`."""

    def _make(handler):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return AsyncClient(config=config, http_client=http_client)

    return _make


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep ANTHROPIC_* variables of the developer's shell out of the tests."""
    for name in ("ANTHROPIC_API_KEY", "ANTHROPIC_BASE_URL", "ANTHROPIC_VERSION", "ANTHROPIC_BETA"):
        monkeypatch.delenv(name, raising=False)
