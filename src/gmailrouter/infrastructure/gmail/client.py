from __future__ import annotations
from datetime import datetime
from typing import Any

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from loguru import logger

from gmailrouter.application.ports.mail_client import MailClient
from gmailrouter.domain.entities.mail_message import MailMessage, MessageRef
from gmailrouter.infrastructure.gmail.auth import GmailAuthenticator, GmailOAuthConfig
from gmailrouter.infrastructure.gmail.mapper import gmail_to_mail_message

USER_ID = "me"
SPAM_LABEL = "SPAM"
INBOX_LABEL = "INBOX"


def inbox_query(since: datetime) -> str:
    """Gmail search query for inbox mail after `since`.

    Uses epoch seconds: a date-only `after:` is read as midnight Pacific
    time and would hide mail received later that day.
    """
    return f"in:inbox after:{int(since.timestamp())}"


class GmailMailClient(MailClient):
    """MailClient over a googleapiclient Gmail v1 resource.

    HttpError from the API is not caught here; callers decide whether a
    failure is per-message or per-cycle.
    """

    def __init__(self, service: Any) -> None:
        self.service = service

    @classmethod
    def from_credentials(cls, creds: Credentials) -> "GmailMailClient":
        return cls(build("gmail", "v1", credentials=creds, cache_discovery=False))

    def _messages(self):
        return self.service.users().messages()

    def list_message_refs(self, since: datetime) -> list[MessageRef]:
        """Ids of every inbox message after `since`, across all pages."""
        query = inbox_query(since)
        logger.info(f"Fetching messages: {query}")

        refs: list[MessageRef] = []
        seen: set[MessageRef] = set()
        page_token: str | None = None
        pages = 0

        while True:
            kwargs: dict[str, Any] = {"userId": USER_ID, "q": query}
            if page_token:
                kwargs["pageToken"] = page_token

            result = self._messages().list(**kwargs).execute()
            pages += 1

            for msg in result.get("messages", []):
                ref = msg.get("id")
                if ref and ref not in seen:
                    seen.add(ref)
                    refs.append(ref)

            page_token = result.get("nextPageToken")
            if not page_token:
                break

        logger.debug(f"Found {len(refs)} messages in {pages} page(s)")
        return refs

    def fetch_message(self, ref: MessageRef) -> MailMessage:
        raw = self._messages().get(userId=USER_ID, id=ref, format="full").execute()
        message = gmail_to_mail_message(raw)
        if message.ref != ref:
            message = MailMessage(ref=ref, headers=message.headers, snippet=message.snippet)
        return message

    def delete_message(self, ref: MessageRef) -> None:
        self._messages().delete(userId=USER_ID, id=ref).execute()
        logger.debug(f"Deleted message {ref}")

    def mark_as_spam(self, ref: MessageRef) -> None:
        body = {"addLabelIds": [SPAM_LABEL], "removeLabelIds": [INBOX_LABEL]}
        self._messages().modify(userId=USER_ID, id=ref, body=body).execute()
        logger.debug(f"Moved message {ref} to spam")


def connect_gmail(cfg: GmailOAuthConfig) -> GmailMailClient:
    """Authorize once and build the client used for the whole process."""
    creds = GmailAuthenticator(cfg).authorize()
    client = GmailMailClient.from_credentials(creds)
    logger.info("Gmail client ready")
    return client
