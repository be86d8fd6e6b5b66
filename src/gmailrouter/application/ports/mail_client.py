from __future__ import annotations
from datetime import datetime
from typing import Protocol

from gmailrouter.domain.entities.mail_message import MailMessage, MessageRef


class MailClient(Protocol):
    # Listing returns every page, not a lazy view
    def list_message_refs(self, since: datetime) -> list[MessageRef]: ...
    def fetch_message(self, ref: MessageRef) -> MailMessage: ...
    def delete_message(self, ref: MessageRef) -> None: ...
    def mark_as_spam(self, ref: MessageRef) -> None: ...
