"""Exceptions raised by the router."""


class RouterError(Exception):
    """Base class for router errors."""


class ConfigError(RouterError):
    """A config file is unreadable or fails validation."""


class PolicyNotFoundError(ConfigError):
    """The routing policy file does not exist yet (bootstrap needed)."""


class AuthError(RouterError):
    """Gmail credentials are missing or the OAuth grant failed."""


class MissingHeadersError(RouterError):
    """A fetched message came back without a header collection."""

    def __init__(self, ref: str):
        super().__init__(f"Message {ref} has no headers")
        self.ref = ref
