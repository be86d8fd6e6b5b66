"""Infrastructure layer - Gmail adapter, config files, and settings."""

from gmailrouter.infrastructure.config import CredentialsConfig, load_credentials
from gmailrouter.infrastructure.gmail import GmailMailClient, GmailOAuthConfig, connect_gmail
from gmailrouter.infrastructure.log import configure_logging
from gmailrouter.infrastructure.settings import Settings, get_settings
from gmailrouter.infrastructure.stores import YamlPolicyStore

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "configure_logging",
    # Config files
    "CredentialsConfig",
    "load_credentials",
    "YamlPolicyStore",
    # Gmail
    "GmailMailClient",
    "GmailOAuthConfig",
    "connect_gmail",
]
