"""Thread message data models."""

from __future__ import annotations

import uuid
from typing import Iterator, Literal, Optional

from pydantic import BaseModel

USER_AUTHOR = "u/User"


def author_label(agent_name: str) -> str:
    return f"u/{agent_name}"


class Message(BaseModel):
    id: str
    author: str
    role: Literal["user", "assistant"]
    content: str
    parent_id: Optional[str] = None
    attachment: Optional[str] = None

    @classmethod
    def create(
        cls,
        author: str,
        role: Literal["user", "assistant"],
        content: str,
        parent_id: Optional[str] = None,
        attachment: Optional[str] = None,
    ) -> "Message":
        """Build a message with a freshly minted id."""
        return cls(
            id=uuid.uuid4().hex,
            author=author,
            role=role,
            content=content,
            parent_id=parent_id,
            attachment=attachment,
        )


class MessageStore:
    """Append-only, ordered, in-memory message collection.

    Messages are never removed or replaced once appended. The store is not
    thread-safe; a concurrent host must serialize access.
    """

    def __init__(self, messages: Optional[list[Message]] = None):
        self._messages: list[Message] = []
        self._by_id: dict[str, Message] = {}
        for message in messages or []:
            self.append(message)

    def append(self, message: Message) -> Message:
        if message.id in self._by_id:
            raise ValueError(f"Duplicate message id: {message.id}")
        if message.parent_id is not None and message.parent_id not in self._by_id:
            # parents must precede their replies
            raise ValueError(f"Unknown parent message: {message.parent_id}")
        self._messages.append(message)
        self._by_id[message.id] = message
        return message

    def get(self, message_id: str) -> Optional[Message]:
        return self._by_id.get(message_id)

    def thread_for(self, message_id: str) -> list[Message]:
        from ..core.thread import build_thread

        target = self._by_id.get(message_id)
        if target is None:
            raise KeyError(message_id)
        return build_thread(target, self._messages)

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))
