"""Recipient extraction from message headers."""

from __future__ import annotations

from gmailrouter.domain.entities.mail_message import MailMessage
from gmailrouter.domain.errors import MissingHeadersError


def _extract_address(part: str) -> str:
    """Extract email from 'Name <email@domain.com>' format."""
    part = part.strip()
    start = part.find("<")
    end = part.find(">", start + 1)
    if start != -1 and end != -1:
        return part[start + 1:end].strip()
    return part


def parse_local_parts(header_value: str, domain: str) -> set[str]:
    """Local-parts of the addresses in one header value that belong to `domain`.

    Supported formats: "email@domain.com", "Name <email@domain.com>",
    "email1, email2". The domain suffix is compared literally.
    """
    suffix = f"@{domain}"
    local_parts: set[str] = set()

    for part in header_value.split(","):
        address = _extract_address(part)
        if "@" in address and address.endswith(suffix):
            local_parts.add(address.split("@", 1)[0].lower())

    return local_parts


def extract_recipients(message: MailMessage, domain: str) -> frozenset[str]:
    """Collect in-domain local-parts from every To header of `message`.

    Raises:
        MissingHeadersError: the message has no header collection at all.
    """
    if message.headers is None:
        raise MissingHeadersError(message.ref)

    recipients: set[str] = set()
    for value in message.get_all("To"):
        recipients |= parse_local_parts(value, domain)

    return frozenset(recipients)
