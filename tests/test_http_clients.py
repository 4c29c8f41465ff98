"""Tests for model provider adapters."""

import asyncio
import json
from types import SimpleNamespace

import httpx
import pytest

from fodmap_helper.adapters.azure_openai_chat_client import AzureOpenAIChatClient
from fodmap_helper.adapters.ollama_chat_client import HttpxOllamaChatClient
from fodmap_helper.domain.chat import ChatMessage

PROMPT = [
    ChatMessage(role="system", content="You are a FODMAP assistant."),
    ChatMessage(role="user", content="Is rice ok?"),
]


async def _collect(stream) -> list[str]:  # type: ignore[no-untyped-def]
    return [fragment async for fragment in stream]


def _chunk(content: str | None) -> SimpleNamespace:
    delta = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(delta=delta)])


class _ChunkStream:
    def __init__(self, chunks: list[SimpleNamespace]) -> None:
        self._chunks = iter(chunks)

    def __aiter__(self) -> "_ChunkStream":
        return self

    async def __anext__(self) -> SimpleNamespace:
        try:
            return next(self._chunks)
        except StopIteration:
            raise StopAsyncIteration from None


class _FakeCompletions:
    def __init__(self, content: str | None = "Rice is low FODMAP.") -> None:
        self.content = content
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        if kwargs.get("stream"):
            chunks = [
                _chunk("Rice "),
                SimpleNamespace(choices=[]),
                _chunk(None),
                _chunk("is fine."),
            ]
            return _ChunkStream(chunks)
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class _FakeAzureOpenAI:
    def __init__(self, content: str | None = "Rice is low FODMAP.") -> None:
        self.chat = SimpleNamespace(completions=_FakeCompletions(content))


def test_azure_client_complete() -> None:
    fake = _FakeAzureOpenAI()
    client = AzureOpenAIChatClient(client=fake, deployment="gpt-4o", temperature=0.3)

    result = asyncio.run(client.complete(PROMPT))

    assert result == "Rice is low FODMAP."
    payload = fake.chat.completions.last_payload
    assert payload["model"] == "gpt-4o"
    assert payload["messages"][1] == {"role": "user", "content": "Is rice ok?"}


def test_azure_client_empty_reply_raises() -> None:
    client = AzureOpenAIChatClient(client=_FakeAzureOpenAI(content=None), deployment="d")

    with pytest.raises(RuntimeError):
        asyncio.run(client.complete(PROMPT))


def test_azure_client_stream_skips_empty_chunks() -> None:
    fake = _FakeAzureOpenAI()
    client = AzureOpenAIChatClient(client=fake, deployment="gpt-4o")

    fragments = asyncio.run(_collect(client.stream(PROMPT)))

    assert fragments == ["Rice ", "is fine."]
    assert fake.chat.completions.last_payload["stream"] is True


def test_ollama_client_complete() -> None:
    seen: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/chat"
        seen.append(json.loads(request.content.decode()))
        return httpx.Response(
            200, json={"message": {"role": "assistant", "content": "Yes."}, "done": True}
        )

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = HttpxOllamaChatClient(
        base_url="http://ollama.local", model="llama3.1", http_client=async_client
    )

    result = asyncio.run(client.complete(PROMPT))

    assert result == "Yes."
    assert seen[0]["model"] == "llama3.1"
    assert seen[0]["stream"] is False
    assert seen[0]["options"] == {"temperature": 0.3}


def test_ollama_client_stream_reads_ndjson() -> None:
    lines = [
        {"message": {"content": "Rice "}, "done": False},
        {"message": {"content": ""}, "done": False},
        {"message": {"content": "is fine."}, "done": False},
        {"message": {"content": ""}, "done": True},
        {"message": {"content": "ignored"}, "done": False},
    ]
    body = "\n".join(json.dumps(line) for line in lines) + "\n"

    def handler(request: httpx.Request) -> httpx.Response:
        assert json.loads(request.content.decode())["stream"] is True
        return httpx.Response(200, content=body.encode())

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = HttpxOllamaChatClient(
        base_url="http://ollama.local", model="llama3.1", http_client=async_client
    )

    fragments = asyncio.run(_collect(client.stream(PROMPT)))

    assert fragments == ["Rice ", "is fine."]


def test_ollama_client_raises_on_http_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "model not loaded"})

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = HttpxOllamaChatClient(
        base_url="http://ollama.local", model="llama3.1", http_client=async_client
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.complete(PROMPT))
