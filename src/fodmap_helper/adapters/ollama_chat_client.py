"""Ollama chat client for local model runtimes."""

import json
from collections.abc import AsyncIterator
from dataclasses import dataclass

import httpx

from fodmap_helper.domain.chat import ChatMessage
from fodmap_helper.services.chat import ChatModel


@dataclass
class HttpxOllamaChatClient(ChatModel):
    """HTTPX-backed client for the Ollama ``/api/chat`` endpoint."""

    base_url: str
    model: str
    http_client: httpx.AsyncClient
    temperature: float = 0.3
    timeout_seconds: float = 120

    @classmethod
    def create(
        cls, base_url: str, model: str, temperature: float
    ) -> "HttpxOllamaChatClient":
        """Create an Ollama client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            model=model,
            http_client=httpx.AsyncClient(),
            temperature=temperature,
        )

    async def complete(self, messages: list[ChatMessage]) -> str:
        """Return the full reply for the prompt."""
        response = await self.http_client.post(
            f"{self.base_url}/api/chat",
            json=self._payload(messages, stream=False),
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        content = response.json().get("message", {}).get("content")
        if not content:
            raise RuntimeError("Ollama returned an empty response")
        return content

    async def stream(self, messages: list[ChatMessage]) -> AsyncIterator[str]:
        """Yield fragments from the NDJSON stream until the model is done."""
        async with self.http_client.stream(
            "POST",
            f"{self.base_url}/api/chat",
            json=self._payload(messages, stream=True),
            timeout=self.timeout_seconds,
        ) as response:
            response.raise_for_status()
            async for line in response.aiter_lines():
                if not line.strip():
                    continue
                data = json.loads(line)
                content = data.get("message", {}).get("content")
                if content:
                    yield content
                if data.get("done"):
                    break

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    def _payload(self, messages: list[ChatMessage], *, stream: bool) -> dict[str, object]:
        return {
            "model": self.model,
            "messages": [
                {"role": message.role, "content": message.content}
                for message in messages
            ],
            "stream": stream,
            "options": {"temperature": self.temperature},
        }
