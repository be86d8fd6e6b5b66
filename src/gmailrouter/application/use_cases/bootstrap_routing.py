"""Build or refresh the routing policy from historical mail."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

from loguru import logger

from gmailrouter.application.ports.mail_client import MailClient
from gmailrouter.application.ports.policy_store import PolicyStore
from gmailrouter.domain.entities.mail_message import MessageRef
from gmailrouter.domain.recipients import extract_recipients
from gmailrouter.domain.routing_policy import RoutingPolicy


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def collect_all_addresses(
    client: MailClient,
    refs: Sequence[MessageRef],
    domain: str,
) -> set[str]:
    """Union of in-domain recipients over `refs`.

    A message that fails to fetch or has no headers is logged and skipped;
    the scan always covers every other message.
    """
    addresses: set[str] = set()
    failed = 0

    for idx, ref in enumerate(refs):
        if idx % 100 == 0:
            logger.debug(f"Scanning message {idx + 1}/{len(refs)}")

        try:
            message = client.fetch_message(ref)
            addresses |= extract_recipients(message, domain)
        except Exception as e:
            failed += 1
            logger.warning(f"Failed to scan message {ref}: {e}")

    if failed:
        logger.warning(f"Skipped {failed} of {len(refs)} messages during address scan")

    return addresses


class BootstrapRoutingUseCase:
    """Discover recipient addresses and merge them into the routing policy.

    Flow:
    1. Load routing.yaml if it exists (otherwise start from an empty policy)
    2. List inbox messages since the policy watermark (or `start_date`)
    3. Collect every in-domain To recipient
    4. Add unseen addresses as allowed; existing entries are never touched
    5. Move the watermark to now and save

    Running it twice over the same history adds the same addresses and
    leaves every existing flag as it was.
    """

    def __init__(
        self,
        client: MailClient,
        store: PolicyStore,
        domain: str,
        start_date: datetime,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.client = client
        self.store = store
        self.domain = domain
        self.start_date = start_date
        self.clock = clock

    def run(self) -> RoutingPolicy:
        existing: Optional[RoutingPolicy] = self.store.load() if self.store.exists() else None

        if existing is None:
            logger.info("Routing config not found, scanning history to build it")
            since = self.start_date
        else:
            logger.info(f"Refreshing routing config with mail since {existing.updated_date.isoformat()}")
            since = existing.updated_date

        refs = self.client.list_message_refs(since)
        logger.info(f"Found {len(refs)} messages to scan")

        addresses = collect_all_addresses(self.client, refs, self.domain)
        logger.info(f"Found {len(addresses)} unique addresses")

        policy = existing if existing is not None else RoutingPolicy()
        added = policy.add_addresses(sorted(addresses))
        policy.advance_watermark(self.clock())
        self.store.save(policy)

        logger.info(f"Routing config saved: {len(policy)} addresses ({added} new)")
        if existing is None:
            logger.info("Review routing.yaml and set addresses to false to block them")

        return policy
