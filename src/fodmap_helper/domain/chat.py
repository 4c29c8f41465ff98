"""Domain models for chat sessions and the streaming protocol."""

from dataclasses import dataclass, field

from fodmap_helper.domain.foods import FoodRecord


@dataclass(frozen=True)
class ChatMessage:
    """Single chat message."""

    role: str
    content: str


@dataclass(frozen=True)
class ChatTurn:
    """Inbound chat request after parsing."""

    messages: list[ChatMessage]
    user_id: str
    session_id: str | None = None


@dataclass(frozen=True)
class ChatSessionSummary:
    """Session listing entry."""

    id: str
    title: str | None


@dataclass(frozen=True)
class ChatSessionRecord:
    """Stored chat session with its messages."""

    id: str
    user_id: str
    title: str | None
    messages: list[ChatMessage] = field(default_factory=list)


@dataclass(frozen=True)
class ProtocolDelta:
    """One incremental fragment of a streamed reply."""

    content: str
    session_id: str
    food_results: tuple[FoodRecord, ...] | None
    finish_reason: str | None = None

    @property
    def is_terminal(self) -> bool:
        """Return true for the completion marker."""
        return self.finish_reason is not None


@dataclass(frozen=True)
class ChatReply:
    """Full single-shot reply."""

    session_id: str
    content: str
    matches: list[FoodRecord]
    food_results: tuple[FoodRecord, ...] | None = None
