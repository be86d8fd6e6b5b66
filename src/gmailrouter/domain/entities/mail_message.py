from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

# Opaque provider id, only used to fetch and mutate
MessageRef = str


@dataclass(frozen=True)
class MessageHeader:
    name: str
    value: str


@dataclass(frozen=True)
class MailMessage:
    ref: MessageRef
    headers: Optional[tuple[MessageHeader, ...]]  # None when the fetch had no header set
    snippet: str = ""

    def get_all(self, name: str) -> list[str]:
        """All values of header `name`, matched case-insensitively."""
        if self.headers is None:
            return []
        wanted = name.lower()
        return [h.value for h in self.headers if h.name.lower() == wanted]

    def get(self, name: str, default: str = "") -> str:
        values = self.get_all(name)
        return values[0] if values else default
