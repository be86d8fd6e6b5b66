"""Application layer - routing use cases and ports."""

from gmailrouter.application.use_cases import (
    BootstrapRoutingUseCase,
    RouteMessagesUseCase,
    collect_all_addresses,
)

__all__ = [
    "BootstrapRoutingUseCase",
    "RouteMessagesUseCase",
    "collect_all_addresses",
]
