"""Chat session history backed by a pluggable store."""

import logging
from dataclasses import dataclass
from typing import Protocol

from fodmap_helper.domain.chat import ChatMessage, ChatSessionRecord, ChatSessionSummary
from fodmap_helper.errors import FodmapError, NotFoundError, UpstreamUnavailable

_logger = logging.getLogger(__name__)


class ChatHistoryRepository(Protocol):
    """Persistence interface for chat sessions."""

    def get_session(self, user_id: str, session_id: str) -> ChatSessionRecord | None:
        """Return a session with its messages, if present."""

    def list_sessions(self, user_id: str) -> list[ChatSessionSummary]:
        """Return every session owned by a user."""

    def append_message(
        self, user_id: str, session_id: str, message: ChatMessage
    ) -> None:
        """Append a message, creating the session when needed."""

    def set_title(self, user_id: str, session_id: str, title: str) -> None:
        """Store the session title."""


@dataclass
class HistoryService:
    """Application service for reading and recording chat history."""

    repository: ChatHistoryRepository

    def get_messages(self, user_id: str, session_id: str) -> list[ChatMessage]:
        """Return the ordered messages of a session."""
        session = self._get_session(user_id, session_id)
        if session is None:
            raise NotFoundError("Session not found")
        return session.messages

    def find_session(self, user_id: str, session_id: str) -> ChatSessionRecord | None:
        """Return a session if it exists."""
        return self._get_session(user_id, session_id)

    def list_sessions(self, user_id: str) -> list[ChatSessionSummary]:
        """Return the caller's sessions."""
        try:
            return self.repository.list_sessions(user_id)
        except FodmapError:
            raise
        except Exception as exc:
            _logger.exception("Failed to list chat sessions")
            raise UpstreamUnavailable from exc

    def record_exchange(
        self, user_id: str, session_id: str, question: str, answer: str
    ) -> None:
        """Append a user question and the assistant reply."""
        self.repository.append_message(
            user_id, session_id, ChatMessage(role="user", content=question)
        )
        self.repository.append_message(
            user_id, session_id, ChatMessage(role="assistant", content=answer)
        )

    def set_title(self, user_id: str, session_id: str, title: str) -> None:
        """Attach a title to the session."""
        self.repository.set_title(user_id, session_id, title)

    def _get_session(self, user_id: str, session_id: str) -> ChatSessionRecord | None:
        try:
            return self.repository.get_session(user_id, session_id)
        except FodmapError:
            raise
        except Exception as exc:
            _logger.exception(
                "Failed to read chat session", extra={"session_id": session_id}
            )
            raise UpstreamUnavailable from exc
