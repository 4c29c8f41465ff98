"""Supabase-backed chat history repository."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from fodmap_helper.domain.chat import ChatMessage, ChatSessionRecord, ChatSessionSummary
from fodmap_helper.errors import NotFoundError
from fodmap_helper.services.history import ChatHistoryRepository


@dataclass
class SupabaseChatHistoryRepository(ChatHistoryRepository):
    """Supabase implementation for chat sessions and messages."""

    client: Client

    def get_session(self, user_id: str, session_id: str) -> ChatSessionRecord | None:
        """Return a session with its ordered messages, if present."""
        response = (
            self.client.table("chat_sessions")
            .select("id, user_id, title")
            .eq("id", session_id)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        messages_response = (
            self.client.table("chat_messages")
            .select("role, content, created_at")
            .eq("session_id", session_id)
            .order("created_at")
            .execute()
        )
        return ChatSessionRecord(
            id=row["id"],
            user_id=row["user_id"],
            title=row.get("title"),
            messages=[
                ChatMessage(role=item["role"], content=item["content"])
                for item in messages_response.data or []
            ],
        )

    def list_sessions(self, user_id: str) -> list[ChatSessionSummary]:
        """Return the user's sessions, most recently updated first."""
        response = (
            self.client.table("chat_sessions")
            .select("id, title")
            .eq("user_id", user_id)
            .order("updated_at", desc=True)
            .execute()
        )
        return [
            ChatSessionSummary(id=row["id"], title=row.get("title"))
            for row in response.data or []
        ]

    def append_message(
        self, user_id: str, session_id: str, message: ChatMessage
    ) -> None:
        """Insert a message, creating the session row when needed."""
        self._ensure_session(user_id, session_id)
        self.client.table("chat_messages").insert(
            {
                "session_id": session_id,
                "user_id": user_id,
                "role": message.role,
                "content": message.content,
            }
        ).execute()

    def set_title(self, user_id: str, session_id: str, title: str) -> None:
        """Store the session title."""
        self._ensure_session(user_id, session_id)
        self.client.table("chat_sessions").update(
            {"title": title, "updated_at": datetime.now(tz=UTC).isoformat()}
        ).eq("id", session_id).eq("user_id", user_id).execute()

    def _ensure_session(self, user_id: str, session_id: str) -> None:
        """Create or touch the caller's session row.

        Session ids are global, so an id owned by another user is reported
        as missing instead of being written into.
        """
        response = (
            self.client.table("chat_sessions")
            .select("id, user_id")
            .eq("id", session_id)
            .limit(1)
            .execute()
        )
        if response.data:
            if response.data[0].get("user_id") != user_id:
                raise NotFoundError("Session not found")
            self.client.table("chat_sessions").update(
                {"updated_at": datetime.now(tz=UTC).isoformat()}
            ).eq("id", session_id).eq("user_id", user_id).execute()
            return
        response = (
            self.client.table("chat_sessions")
            .insert({"id": session_id, "user_id": user_id, "title": None})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create chat session")
