"""Routing use cases."""

from gmailrouter.application.use_cases.bootstrap_routing import (
    BootstrapRoutingUseCase,
    collect_all_addresses,
)
from gmailrouter.application.use_cases.route_messages import RouteMessagesUseCase

__all__ = [
    "BootstrapRoutingUseCase",
    "RouteMessagesUseCase",
    "collect_all_addresses",
]
