"""File-based chat history for local deployments."""

import hashlib
import json
import threading
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import quote

from fodmap_helper.domain.chat import ChatMessage, ChatSessionRecord, ChatSessionSummary
from fodmap_helper.errors import ValidationError
from fodmap_helper.services.history import ChatHistoryRepository

_MAX_SEGMENT_LENGTH = 128


@dataclass
class FileChatHistoryRepository(ChatHistoryRepository):
    """Stores one JSON document per session under ``<root>/<user_id>/``."""

    root: Path
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )

    def get_session(self, user_id: str, session_id: str) -> ChatSessionRecord | None:
        """Return a session with its messages, if present."""
        path = self._session_path(user_id, session_id)
        if not path.exists():
            return None
        return _parse_session(user_id, json.loads(path.read_text(encoding="utf-8")))

    def list_sessions(self, user_id: str) -> list[ChatSessionSummary]:
        """Return every session file for the user, newest first."""
        user_dir = self.root / _segment(user_id)
        if not user_dir.is_dir():
            return []
        files = sorted(
            user_dir.glob("*.json"), key=lambda item: item.stat().st_mtime, reverse=True
        )
        sessions = []
        for path in files:
            document = json.loads(path.read_text(encoding="utf-8"))
            sessions.append(
                ChatSessionSummary(id=document["id"], title=document.get("title"))
            )
        return sessions

    def append_message(
        self, user_id: str, session_id: str, message: ChatMessage
    ) -> None:
        """Append a message, creating the session file when needed."""
        with self._lock:
            document = self._read_or_create(user_id, session_id)
            document["messages"].append(
                {"role": message.role, "content": message.content}
            )
            self._write(user_id, session_id, document)

    def set_title(self, user_id: str, session_id: str, title: str) -> None:
        """Store the session title."""
        with self._lock:
            document = self._read_or_create(user_id, session_id)
            document["title"] = title
            self._write(user_id, session_id, document)

    def _read_or_create(self, user_id: str, session_id: str) -> dict[str, object]:
        path = self._session_path(user_id, session_id)
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
        return {"id": session_id, "title": None, "messages": []}

    def _write(self, user_id: str, session_id: str, document: dict[str, object]) -> None:
        path = self._session_path(user_id, session_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(document, ensure_ascii=False), encoding="utf-8")
        tmp_path.replace(path)

    def _session_path(self, user_id: str, session_id: str) -> Path:
        return self.root / _segment(user_id) / f"{_segment(session_id)}.json"


def _segment(value: str) -> str:
    """Encode an identifier into a single safe path component."""
    if not value:
        raise ValidationError("Invalid session or user identifier")
    encoded = quote(value, safe="@+-_")
    if encoded in {".", ".."}:
        encoded = encoded.replace(".", "%2E")
    if len(encoded) > _MAX_SEGMENT_LENGTH:
        encoded = hashlib.sha256(value.encode("utf-8")).hexdigest()
    return encoded


def _parse_session(user_id: str, document: dict[str, object]) -> ChatSessionRecord:
    return ChatSessionRecord(
        id=str(document["id"]),
        user_id=user_id,
        title=document.get("title"),
        messages=[
            ChatMessage(role=item["role"], content=item["content"])
            for item in document.get("messages", [])
        ],
    )
