"""Domain entities."""

from gmailrouter.domain.entities.mail_message import MailMessage, MessageHeader, MessageRef

__all__ = [
    "MailMessage",
    "MessageHeader",
    "MessageRef",
]
