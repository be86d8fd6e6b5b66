"""Delete (or mark as spam) inbox mail addressed to blocked local-parts."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from loguru import logger

from gmailrouter.application.ports.mail_client import MailClient
from gmailrouter.application.ports.policy_store import PolicyStore
from gmailrouter.domain.entities.mail_message import MessageRef
from gmailrouter.domain.errors import MissingHeadersError
from gmailrouter.domain.models import CycleReport, RoutingAction
from gmailrouter.domain.recipients import extract_recipients
from gmailrouter.domain.routing_policy import RoutingPolicy


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RouteMessagesUseCase:
    """One routing cycle over the inbox.

    Flow:
    1. Load routing.yaml fresh
    2. List inbox messages since its watermark (all pages)
    3. Per message: fetch, extract To recipients, delete if any is blocked
    4. Record unseen recipients as allowed so they show up in routing.yaml
    5. Apply new addresses and the watermark to the current routing.yaml

    Failures on a single message are logged and skipped. A message without
    headers is skipped for good; any other failure keeps the watermark
    where it was, so the next cycle lists that message again. Listing or
    loading failures propagate and abort the cycle.
    """

    def __init__(
        self,
        client: MailClient,
        store: PolicyStore,
        domain: str,
        action: RoutingAction = RoutingAction.DELETE,
        advance_watermark: bool = True,
        progress_every: int = 50,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the routing use case.

        Args:
            client: Gmail client (or any MailClient)
            store: Where routing.yaml lives
            domain: Owned domain; other recipients are ignored
            action: Delete permanently, or move to spam
            advance_watermark: If False the watermark stays where bootstrap
                               put it and every cycle re-scans from there
            progress_every: Log progress every N messages
            clock: Source of "now", for the watermark
        """
        self.client = client
        self.store = store
        self.domain = domain
        self.action = RoutingAction(action)
        self.advance_watermark = advance_watermark
        self.progress_every = progress_every
        self.clock = clock

    def run(self) -> CycleReport:
        started_at = self.clock()
        logger.info("Starting email processing cycle")

        policy = self.store.load()
        refs = self.client.list_message_refs(policy.updated_date)
        logger.info(f"Found {len(refs)} messages to process")

        report = CycleReport(found=len(refs))
        discovered: list[str] = []
        retry = 0
        for idx, ref in enumerate(refs):
            if idx and idx % self.progress_every == 0:
                logger.info(f"Progress: {idx}/{len(refs)} messages processed")

            try:
                result = self._process_message(ref, policy, discovered)
            except MissingHeadersError as e:
                report.skipped += 1
                logger.warning(f"Skipping message {ref}: {e}")
                continue
            except Exception as e:
                report.skipped += 1
                retry += 1
                logger.warning(f"Failed to process message {ref}: {e}")
                continue

            report.processed += 1
            if result == "deleted":
                report.deleted += 1

        report.discovered = len(discovered)
        advance = self.advance_watermark and not retry
        if self.advance_watermark and retry:
            logger.warning(f"Keeping watermark at {policy.updated_date.isoformat()}: {retry} message(s) to retry")
        if advance or discovered:
            self._persist(discovered, started_at if advance else None)

        logger.info(
            f"Processing complete: "
            f"found={report.found}, "
            f"processed={report.processed}, "
            f"deleted={report.deleted}, "
            f"skipped={report.skipped}, "
            f"new_addresses={report.discovered}"
        )
        return report

    def _persist(self, discovered: list[str], watermark: Optional[datetime]) -> None:
        """Apply this cycle's changes to the current routing.yaml and save.

        The file is reloaded so flags edited during the cycle are kept.
        """
        latest = self.store.load()
        latest.add_addresses(discovered)
        if watermark is not None:
            latest.advance_watermark(watermark)
        self.store.save(latest)

    def _process_message(self, ref: MessageRef, policy: RoutingPolicy, discovered: list[str]) -> str:
        """Classify and act on a single message.

        Returns:
            'deleted' - Message was deleted or moved to spam
            'kept' - Every recipient is allowed
            'no_recipients' - Not addressed to the owned domain
        """
        message = self.client.fetch_message(ref)
        recipients = extract_recipients(message, self.domain)

        if not recipients:
            return "no_recipients"

        for local_part in sorted(recipients):
            if policy.add_address(local_part):
                discovered.append(local_part)
                logger.info(f"New address recorded: {local_part}@{self.domain}")

        if not policy.should_delete(recipients):
            return "kept"

        logger.info(f"Routing message {ref} to {self.action.value} (recipients: {sorted(recipients)})")
        if self.action is RoutingAction.SPAM:
            self.client.mark_as_spam(ref)
        else:
            self.client.delete_message(ref)
        return "deleted"
