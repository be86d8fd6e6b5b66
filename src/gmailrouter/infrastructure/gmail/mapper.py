from __future__ import annotations
from typing import Any, Mapping

from gmailrouter.domain.entities.mail_message import MailMessage, MessageHeader


def gmail_to_mail_message(raw: Mapping[str, Any]) -> MailMessage:
    """Map a users.messages.get (format=full) resource to a MailMessage."""
    payload = raw.get("payload") or {}
    raw_headers = payload.get("headers")

    headers = None
    if raw_headers is not None:
        # Gmail may omit name or value on malformed parts
        headers = tuple(
            MessageHeader(name=h["name"], value=h["value"])
            for h in raw_headers
            if h.get("name") is not None and h.get("value") is not None
        )

    return MailMessage(
        ref=raw.get("id", ""),
        headers=headers,
        snippet=raw.get("snippet", ""),
    )
