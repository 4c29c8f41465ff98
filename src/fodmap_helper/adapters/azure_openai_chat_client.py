"""Azure OpenAI chat completions client."""

from collections.abc import AsyncIterator
from dataclasses import dataclass

from openai import AsyncAzureOpenAI

from fodmap_helper.domain.chat import ChatMessage
from fodmap_helper.services.chat import ChatModel


@dataclass
class AzureOpenAIChatClient(ChatModel):
    """Chat model backed by an Azure OpenAI deployment."""

    client: AsyncAzureOpenAI
    deployment: str
    temperature: float = 0.3

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        *,
        endpoint: str,
        api_key: str | None,
        api_version: str,
        deployment: str,
        temperature: float,
    ) -> "AzureOpenAIChatClient":
        """Create an Azure OpenAI chat client."""
        return cls(
            client=AsyncAzureOpenAI(
                azure_endpoint=endpoint,
                api_key=api_key,
                api_version=api_version,
            ),
            deployment=deployment,
            temperature=temperature,
        )

    async def complete(self, messages: list[ChatMessage]) -> str:
        """Return the full reply for the prompt."""
        response = await self.client.chat.completions.create(
            model=self.deployment,
            messages=_to_payload(messages),
            temperature=self.temperature,
        )
        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise RuntimeError("Azure OpenAI returned an empty response")
        return content

    async def stream(self, messages: list[ChatMessage]) -> AsyncIterator[str]:
        """Yield reply fragments as the deployment produces them."""
        response = await self.client.chat.completions.create(
            model=self.deployment,
            messages=_to_payload(messages),
            temperature=self.temperature,
            stream=True,
        )
        async for chunk in response:
            if not chunk.choices:
                continue
            content = chunk.choices[0].delta.content
            if content:
                yield content

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()


def _to_payload(messages: list[ChatMessage]) -> list[dict[str, str]]:
    return [{"role": message.role, "content": message.content} for message in messages]
