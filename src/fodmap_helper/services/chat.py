"""Chat orchestration: grounding, generation, and protocol deltas."""

import asyncio
import logging
import re
import uuid
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Protocol

from fodmap_helper.domain.chat import ChatMessage, ChatReply, ChatTurn, ProtocolDelta
from fodmap_helper.domain.foods import FoodContext, FoodRecord
from fodmap_helper.errors import UpstreamUnavailable, ValidationError
from fodmap_helper.services.context import ContextAssembler
from fodmap_helper.services.history import HistoryService
from fodmap_helper.services.prompts import TITLE_SYSTEM_PROMPT, build_system_prompt

_logger = logging.getLogger(__name__)

_WHITESPACE_SPLIT = re.compile(r"(\s+)")
_QUOTE_CHARS = "\"“”„`"
TITLE_MAX_LENGTH = 31


class ChatModel(Protocol):
    """Interface for a generative chat model."""

    async def complete(self, messages: list[ChatMessage]) -> str:
        """Return the full reply text."""

    def stream(self, messages: list[ChatMessage]) -> AsyncIterator[str]:
        """Yield reply fragments in generation order."""


def split_tokens(text: str) -> list[str]:
    """Split text into words and whitespace runs that join back to the text."""
    return [part for part in _WHITESPACE_SPLIT.split(text) if part]


@dataclass
class SyntheticStreamModel(ChatModel):
    """Streams a single-shot reply as paced whitespace-delimited tokens."""

    model: ChatModel
    delay_seconds: float = 0.02

    async def complete(self, messages: list[ChatMessage]) -> str:
        """Delegate to the wrapped model."""
        return await self.model.complete(messages)

    async def stream(self, messages: list[ChatMessage]) -> AsyncIterator[str]:
        """Generate the full reply, then yield it token by token."""
        text = await self.model.complete(messages)
        for index, token in enumerate(split_tokens(text)):
            if index and self.delay_seconds > 0:
                await asyncio.sleep(self.delay_seconds)
            yield token


@dataclass
class ChatStream:
    """A primed reply stream plus what the host needs afterwards."""

    session_id: str
    question: str
    matches: list[FoodRecord]
    food_results: tuple[FoodRecord, ...] | None
    first: str | None
    source: AsyncIterator[str]
    fragments: list[str] = field(default_factory=list)
    completed: bool = False

    @property
    def text(self) -> str:
        """Return the reply text emitted so far."""
        return "".join(self.fragments)

    async def deltas(self) -> AsyncIterator[ProtocolDelta]:
        """Yield one delta per fragment, then exactly one terminal delta.

        A failure after the first fragment ends the stream without a
        terminal delta; the client sees a truncated reply.
        """
        if self.first is not None:
            if self.first:
                yield self._delta(self.first)
            try:
                async for fragment in self.source:
                    if fragment:
                        yield self._delta(fragment)
            except Exception:
                _logger.exception(
                    "Chat stream aborted", extra={"session_id": self.session_id}
                )
                return
        self.completed = True
        yield ProtocolDelta(
            "", self.session_id, self.food_results, finish_reason="stop"
        )

    def _delta(self, fragment: str) -> ProtocolDelta:
        self.fragments.append(fragment)
        return ProtocolDelta(fragment, self.session_id, self.food_results)


@dataclass
class ChatService:
    """Orchestrates a chat request from validation to the terminal delta."""

    assembler: ContextAssembler
    model: ChatModel
    history: HistoryService
    food_results_limit: int = 3
    history_limit: int = 20

    async def start_stream(self, turn: ChatTurn) -> ChatStream:
        """Validate, ground, and open a generation stream.

        The first fragment is awaited before returning so that upstream
        failures surface as UpstreamUnavailable before any byte is written.
        """
        question = _validate(turn)
        session_id = turn.session_id or str(uuid.uuid4())
        _logger.info(
            "FODMAP chat stream: user_id=%s session_id=%s", turn.user_id, session_id
        )
        context = self._build_context(question)
        prompt = self._build_prompt(turn, session_id, question, context)
        fragments = self.model.stream(prompt)
        try:
            first = await anext(fragments, None)
        except Exception as exc:
            _logger.exception("Chat generation failed", extra={"session_id": session_id})
            raise UpstreamUnavailable from exc

        return ChatStream(
            session_id=session_id,
            question=question,
            matches=context.matches,
            food_results=self._food_results(context.matches),
            first=first,
            source=fragments,
        )

    async def reply(self, turn: ChatTurn) -> ChatReply:
        """Generate the full reply in a single call."""
        question = _validate(turn)
        session_id = turn.session_id or str(uuid.uuid4())
        _logger.info("FODMAP chat: user_id=%s session_id=%s", turn.user_id, session_id)
        context = self._build_context(question)
        prompt = self._build_prompt(turn, session_id, question, context)
        try:
            content = await self.model.complete(prompt)
        except Exception as exc:
            _logger.exception("Chat generation failed", extra={"session_id": session_id})
            raise UpstreamUnavailable from exc
        return ChatReply(
            session_id=session_id,
            content=content,
            matches=context.matches,
            food_results=self._food_results(context.matches),
        )

    async def ensure_title(self, user_id: str, session_id: str, question: str) -> None:
        """Generate and store a session title when none exists yet."""
        session = self.history.find_session(user_id, session_id)
        if session is not None and session.title:
            return
        raw = await self.model.complete(
            [
                ChatMessage(role="system", content=TITLE_SYSTEM_PROMPT),
                ChatMessage(role="user", content=question),
            ]
        )
        title = clean_title(raw)
        if not title:
            return
        _logger.info("Title for session %s: %s", session_id, title)
        self.history.set_title(user_id, session_id, title)

    def _build_context(self, question: str) -> FoodContext:
        try:
            return self.assembler.build_context(question)
        except Exception as exc:
            _logger.exception("Context build failed")
            raise UpstreamUnavailable from exc

    def _build_prompt(
        self, turn: ChatTurn, session_id: str, question: str, context: FoodContext
    ) -> list[ChatMessage]:
        session = self.history.find_session(turn.user_id, session_id)
        if session is not None and session.messages:
            previous = session.messages
        else:
            previous = turn.messages[:-1]
        previous = [m for m in previous if m.role in {"user", "assistant"}]
        if self.history_limit:
            previous = previous[-self.history_limit :]
        return [
            ChatMessage(role="system", content=build_system_prompt(context.prompt_block)),
            *previous,
            ChatMessage(role="user", content=question),
        ]

    def _food_results(self, matches: list[FoodRecord]) -> tuple[FoodRecord, ...] | None:
        if not matches:
            return None
        return tuple(matches[: self.food_results_limit])


def clean_title(raw: str) -> str:
    """Strip quotes and clamp a generated title."""
    title = raw.strip()
    for char in _QUOTE_CHARS:
        title = title.replace(char, "")
    title = title.strip().strip("'").strip()
    title = " ".join(title.split())
    return title[:TITLE_MAX_LENGTH].rstrip()


def _validate(turn: ChatTurn) -> str:
    if not turn.messages or not turn.messages[-1].content:
        raise ValidationError("Invalid or missing messages in the request body")
    return turn.messages[-1].content
