from __future__ import annotations

from typing import Iterable, Iterator

from .models import ROLES, ChatMessage


class MessageLog:
    """Ordered chat history. Messages are appended and never edited in place."""

    def __init__(self) -> None:
        self._messages: list[ChatMessage] = []

    def append(self, message: ChatMessage) -> ChatMessage:
        if message.role not in ROLES:
            raise ValueError(f"Unknown message role: {message.role}")
        self._messages.append(message)
        return message

    def replace_all(self, messages: Iterable[ChatMessage]) -> None:
        # Administrative bulk swap (sample data toggle); not a chat operation.
        replacement = list(messages)
        for message in replacement:
            if message.role not in ROLES:
                raise ValueError(f"Unknown message role: {message.role}")
        self._messages = replacement

    def snapshot(self) -> tuple[ChatMessage, ...]:
        return tuple(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(tuple(self._messages))

    def __len__(self) -> int:
        return len(self._messages)
