from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from loguru import logger

from gmailrouter.domain.errors import AuthError

# Full access is needed for permanent delete
GMAIL_SCOPES = ["https://mail.google.com/"]


@dataclass(frozen=True)
class GmailOAuthConfig:
    """
    Where the OAuth client secret lives and where the token is cached.
    """
    client_secrets_path: Path
    token_path: Path
    port: int = 14500


class GmailAuthenticator:
    """
    Responsible ONLY for producing valid Gmail OAuth credentials.
    No listing, no fetching, no parsing.
    """

    def __init__(self, cfg: GmailOAuthConfig) -> None:
        self.cfg = cfg

    def _load_cached(self) -> Credentials | None:
        if not self.cfg.token_path.is_file():
            return None
        try:
            return Credentials.from_authorized_user_file(str(self.cfg.token_path), GMAIL_SCOPES)
        except (ValueError, OSError) as e:
            logger.warning(f"Ignoring unreadable token cache {self.cfg.token_path}: {e}")
            return None

    def _save(self, creds: Credentials) -> None:
        self.cfg.token_path.parent.mkdir(parents=True, exist_ok=True)
        self.cfg.token_path.write_text(creds.to_json(), encoding="utf-8")
        logger.debug(f"Token cached at {self.cfg.token_path}")

    def _run_flow(self) -> Credentials:
        if not self.cfg.client_secrets_path.is_file():
            raise AuthError(f"OAuth client secret not found: {self.cfg.client_secrets_path}")

        logger.info(f"Starting OAuth consent flow on port {self.cfg.port}")
        try:
            flow = InstalledAppFlow.from_client_secrets_file(str(self.cfg.client_secrets_path), GMAIL_SCOPES)
            return flow.run_local_server(port=self.cfg.port)
        except (ValueError, OSError, GoogleAuthError) as e:
            raise AuthError(f"OAuth consent flow failed: {e}") from e

    def authorize(self) -> Credentials:
        """
        Returns valid credentials: cached token, refreshed token, or a
        fresh grant from the installed-app flow. The token is persisted.
        """
        logger.info("Initializing Gmail credentials")
        creds = self._load_cached()

        if creds and creds.valid:
            logger.debug("Using cached OAuth token")
            return creds

        if creds and creds.expired and creds.refresh_token:
            try:
                creds.refresh(Request())
                logger.info("Refreshed expired OAuth token")
            except GoogleAuthError as e:
                logger.warning(f"Token refresh failed, re-running consent flow: {e}")
                creds = self._run_flow()
        else:
            creds = self._run_flow()

        if not creds or not creds.valid:
            raise AuthError("Failed to obtain a valid access token")

        self._save(creds)
        return creds
