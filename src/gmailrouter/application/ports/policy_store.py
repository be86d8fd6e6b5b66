from __future__ import annotations
from typing import Protocol

from gmailrouter.domain.routing_policy import RoutingPolicy


class PolicyStore(Protocol):
    def exists(self) -> bool: ...
    def load(self) -> RoutingPolicy: ...
    def save(self, policy: RoutingPolicy) -> None: ...
