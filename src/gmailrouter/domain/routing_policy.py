"""Allow/block policy keyed by local-part, with a watermark date."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Mapping, Optional

from gmailrouter.domain.models import RoutingRecord


class RoutingPolicy:
    """
    Default-allow lookup over the routing addresses.

    An address missing from the map is allowed. New addresses are only
    ever inserted as allowed; blocking one means editing routing.yaml.
    """

    def __init__(
        self,
        addresses: Optional[Mapping[str, bool]] = None,
        updated_date: Optional[datetime] = None,
    ) -> None:
        self._addresses: dict[str, bool] = dict(addresses or {})
        self.updated_date = updated_date or datetime.fromtimestamp(0, timezone.utc)

    @classmethod
    def from_record(cls, record: RoutingRecord) -> "RoutingPolicy":
        return cls(record.addresses, record.updated_date)

    def to_record(self) -> RoutingRecord:
        return RoutingRecord(addresses=dict(sorted(self._addresses.items())), updated_date=self.updated_date)

    def is_allowed(self, local_part: str) -> bool:
        return self._addresses.get(local_part, True)

    def add_address(self, local_part: str) -> bool:
        """Insert `local_part` as allowed if absent. Returns True if it was new."""
        if local_part in self._addresses:
            return False
        self._addresses[local_part] = True
        return True

    def add_addresses(self, local_parts: Iterable[str]) -> int:
        return sum(1 for lp in local_parts if self.add_address(lp))

    def advance_watermark(self, date: datetime) -> None:
        """Move the watermark. Callers persist right after."""
        self.updated_date = date

    def should_delete(self, recipients: Iterable[str]) -> bool:
        """True if any recipient is blocked. Empty input never deletes."""
        return any(not self.is_allowed(r) for r in recipients)

    def allowed_addresses(self) -> list[str]:
        return sorted(a for a, ok in self._addresses.items() if ok)

    def blocked_addresses(self) -> list[str]:
        return sorted(a for a, ok in self._addresses.items() if not ok)

    def __contains__(self, local_part: object) -> bool:
        return local_part in self._addresses

    def __len__(self) -> int:
        return len(self._addresses)

    def __repr__(self) -> str:
        return (
            f"RoutingPolicy(addresses={len(self)}, blocked={len(self.blocked_addresses())}, "
            f"updated_date={self.updated_date.isoformat()})"
        )
