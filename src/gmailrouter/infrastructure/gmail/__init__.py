"""Gmail API adapter."""

from gmailrouter.infrastructure.gmail.auth import GMAIL_SCOPES, GmailAuthenticator, GmailOAuthConfig
from gmailrouter.infrastructure.gmail.client import GmailMailClient, connect_gmail

__all__ = [
    "GMAIL_SCOPES",
    "GmailAuthenticator",
    "GmailOAuthConfig",
    "GmailMailClient",
    "connect_gmail",
]
