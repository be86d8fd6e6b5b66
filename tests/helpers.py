"""Shared fakes and builders for routing tests."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from gmailrouter.domain.entities.mail_message import MailMessage, MessageHeader
from gmailrouter.domain.errors import PolicyNotFoundError
from gmailrouter.domain.routing_policy import RoutingPolicy

DOMAIN = "example.com"
FIXED_NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
START_DATE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_message(ref: str, *to_values: str, subject: str = "Hello") -> MailMessage:
    """Message with one To header per value."""
    headers = [MessageHeader("Subject", subject)]
    headers += [MessageHeader("To", v) for v in to_values]
    return MailMessage(ref=ref, headers=tuple(headers))


def headerless(ref: str) -> MailMessage:
    return MailMessage(ref=ref, headers=None)


class FakeMailClient:
    """In-memory MailClient. Deleted messages leave the inbox."""

    def __init__(
        self,
        messages: Optional[list[MailMessage]] = None,
        failing: Optional[set[str]] = None,
        list_error: Optional[Exception] = None,
    ):
        self.messages = {m.ref: m for m in messages or []}
        self.failing = set(failing or ())
        self.list_error = list_error
        self.list_calls: list[datetime] = []
        self.fetched: list[str] = []
        self.deleted: list[str] = []
        self.spammed: list[str] = []

    def list_message_refs(self, since: datetime) -> list[str]:
        self.list_calls.append(since)
        if self.list_error is not None:
            raise self.list_error
        return list(self.messages)

    def fetch_message(self, ref: str) -> MailMessage:
        self.fetched.append(ref)
        if ref in self.failing:
            raise RuntimeError(f"fetch failed for {ref}")
        return self.messages[ref]

    def delete_message(self, ref: str) -> None:
        self.deleted.append(ref)
        self.messages.pop(ref, None)

    def mark_as_spam(self, ref: str) -> None:
        self.spammed.append(ref)
        self.messages.pop(ref, None)


class InMemoryPolicyStore:
    """PolicyStore keeping a serialized copy, like the file would."""

    def __init__(self, policy: Optional[RoutingPolicy] = None):
        self.record = policy.to_record() if policy is not None else None
        self.saves = 0
        self.load_error: Optional[Exception] = None

    def exists(self) -> bool:
        return self.record is not None

    def load(self) -> RoutingPolicy:
        if self.load_error is not None:
            raise self.load_error
        if self.record is None:
            raise PolicyNotFoundError("routing config not found")
        return RoutingPolicy.from_record(self.record.model_copy(deep=True))

    def save(self, policy: RoutingPolicy) -> None:
        self.record = policy.to_record()
        self.saves += 1
