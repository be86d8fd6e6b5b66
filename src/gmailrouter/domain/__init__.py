"""Domain models and entities."""

from gmailrouter.domain.entities import MailMessage, MessageHeader, MessageRef
from gmailrouter.domain.errors import (
    AuthError,
    ConfigError,
    MissingHeadersError,
    PolicyNotFoundError,
    RouterError,
)
from gmailrouter.domain.models import CycleReport, RoutingAction, RoutingRecord
from gmailrouter.domain.recipients import extract_recipients, parse_local_parts
from gmailrouter.domain.routing_policy import RoutingPolicy

__all__ = [
    "MailMessage",
    "MessageHeader",
    "MessageRef",
    "RouterError",
    "ConfigError",
    "PolicyNotFoundError",
    "AuthError",
    "MissingHeadersError",
    "CycleReport",
    "RoutingAction",
    "RoutingRecord",
    "RoutingPolicy",
    "extract_recipients",
    "parse_local_parts",
]
