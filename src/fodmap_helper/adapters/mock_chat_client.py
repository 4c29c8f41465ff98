"""Template responder used when no model provider is configured."""

from collections.abc import AsyncIterator
from dataclasses import dataclass

from fodmap_helper.domain.chat import ChatMessage
from fodmap_helper.services.chat import ChatModel
from fodmap_helper.services.context import ContextAssembler
from fodmap_helper.services.prompts import (
    FOLLOW_UP_QUESTIONS,
    NOT_FOUND_FOLLOW_UPS,
    TITLE_SYSTEM_PROMPT,
)
from fodmap_helper.services.rating import (
    AVOID_MARKER,
    CAUTION_MARKER,
    SAFE_MARKER,
    rate,
)


@dataclass
class MockChatClient(ChatModel):
    """Deterministic replies built from the catalog's own ratings."""

    assembler: ContextAssembler

    async def complete(self, messages: list[ChatMessage]) -> str:
        """Return a templated reply for the last user message."""
        question = _last_user_message(messages)
        if messages and messages[0].content == TITLE_SYSTEM_PROMPT:
            return f"FODMAP: {question}"
        return self.render(question)

    async def stream(self, messages: list[ChatMessage]) -> AsyncIterator[str]:
        """Yield the templated reply as one fragment."""
        yield await self.complete(messages)

    def render(self, question: str) -> str:
        """Render the reply for a question."""
        matches = self.assembler.build_context(question).matches
        if not matches:
            return (
                f'I couldn\'t find any FODMAP information for "{question}". '
                'Try asking about specific foods like "banana", "apple", '
                '"bread", or "milk".\n\n' + "\n".join(NOT_FOUND_FOLLOW_UPS)
            )

        food = matches[0]
        rating = rate(food)
        if rating.safe_for_low_fodmap:
            marker = SAFE_MARKER
        elif rating.verdict == "moderate":
            marker = CAUTION_MARKER
        else:
            marker = AVOID_MARKER
        sections = [
            f"{marker} {food.name} is {rating.verdict.upper()} FODMAP!",
            rating.recommendation,
        ]
        if food.safe_serving:
            sections.append(f"Safe serving size: {food.safe_serving}")
        if food.tips:
            sections.append(f"💡 Tips: {food.tips}")
        if food.alternatives:
            sections.append(f"🔄 Alternatives: {', '.join(food.alternatives)}")
        sections.append("\n".join(FOLLOW_UP_QUESTIONS))
        return "\n\n".join(sections)


def _last_user_message(messages: list[ChatMessage]) -> str:
    for message in reversed(messages):
        if message.role == "user":
            return message.content
    return ""
