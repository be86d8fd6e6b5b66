"""Gmail router worker - bootstraps routing.yaml, then polls the inbox forever."""

from __future__ import annotations

import signal
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable

from loguru import logger

from gmailrouter.application.ports.mail_client import MailClient
from gmailrouter.application.ports.policy_store import PolicyStore
from gmailrouter.application.use_cases import BootstrapRoutingUseCase, RouteMessagesUseCase
from gmailrouter.domain.errors import RouterError
from gmailrouter.infrastructure import (
    CredentialsConfig,
    GmailOAuthConfig,
    Settings,
    YamlPolicyStore,
    configure_logging,
    connect_gmail,
    get_settings,
    load_credentials,
)


@dataclass
class WorkerStats:
    """Track worker statistics."""
    cycles_completed: int = 0
    cycles_failed: int = 0
    total_processed: int = 0
    total_deleted: int = 0
    total_skipped: int = 0
    last_poll: datetime | None = None


class RouterWorker:
    """
    Single-mailbox routing worker.

    Uninitialized -> Bootstrapping -> Steady(cycle) -> Steady(cycle) ...
    Bootstrap failures are fatal. Cycle failures are logged and retried
    after the next interval.
    """

    def __init__(
        self,
        client: MailClient,
        store: PolicyStore,
        credentials: CredentialsConfig,
        settings: Settings,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.store = store
        self.credentials = credentials
        self.settings = settings
        self.poll_interval = credentials.check_interval_seconds
        self.running = False
        self.stats = WorkerStats()
        self._sleep = sleep

        self.bootstrap = BootstrapRoutingUseCase(
            client=client,
            store=store,
            domain=credentials.domain,
            start_date=credentials.start_date,
        )
        self.router = RouteMessagesUseCase(
            client=client,
            store=store,
            domain=credentials.domain,
            action=settings.action,
            advance_watermark=settings.advance_watermark,
            progress_every=settings.progress_every,
        )

    def _run_cycle(self) -> None:
        """Run one routing cycle, containing any failure."""
        self.stats.last_poll = datetime.now()
        logger.info(f"Starting poll cycle #{self.stats.cycles_completed + self.stats.cycles_failed + 1}")

        try:
            report = self.router.run()
        except Exception as e:
            self.stats.cycles_failed += 1
            logger.error(f"Error processing emails: {e}")
            return

        self.stats.cycles_completed += 1
        self.stats.total_processed += report.processed
        self.stats.total_deleted += report.deleted
        self.stats.total_skipped += report.skipped
        self._log_stats()

    def _log_stats(self) -> None:
        """Log current worker statistics."""
        logger.info(
            f"Worker stats: "
            f"cycles={self.stats.cycles_completed}, "
            f"failed_cycles={self.stats.cycles_failed}, "
            f"processed={self.stats.total_processed}, "
            f"deleted={self.stats.total_deleted}, "
            f"skipped={self.stats.total_skipped}"
        )

    def _handle_shutdown(self, signum, frame) -> None:
        """Handle graceful shutdown."""
        logger.info(f"Received signal {signum}, shutting down...")
        self.running = False

    def _wait(self) -> None:
        logger.info(f"Waiting {self.poll_interval} seconds before next check...")

        # Sleep in small increments to respond to signals quickly
        remaining = self.poll_interval
        while remaining > 0 and self.running:
            step = min(remaining, 10)
            self._sleep(step)
            remaining -= step

    def run(self) -> int:
        """Bootstrap, then run the poll loop until a shutdown signal."""
        signal.signal(signal.SIGTERM, self._handle_shutdown)
        signal.signal(signal.SIGINT, self._handle_shutdown)

        logger.info(f"Domain: {self.credentials.domain}")
        logger.info(f"Check interval: {self.poll_interval} seconds")
        logger.info(f"Start date: {self.credentials.start_date.isoformat()}")
        logger.info(f"Action for blocked recipients: {self.settings.action.value}")

        try:
            self.bootstrap.run()
        except Exception as e:
            logger.error(f"Failed to initialize routing config: {e}")
            return 1

        self.running = True
        while self.running:
            self._run_cycle()
            if self.running:
                self._wait()

        logger.info("Worker shutdown complete")
        self._log_stats()
        return 0


def resolve_secrets_path(credentials: CredentialsConfig, config_dir: Path) -> Path:
    """google_credentials_path, relative paths taken from the config dir."""
    path = Path(credentials.google_credentials_path).expanduser()
    return path if path.is_absolute() else config_dir / path


def main() -> int:
    """Entry point for the router worker."""
    settings = get_settings()
    configure_logging(settings.log_level)

    logger.info("=" * 60)
    logger.info(settings.app_name)
    logger.info("=" * 60)

    settings.ensure_config_dir()
    try:
        credentials = load_credentials(settings.credentials_path)
    except RouterError as e:
        logger.error(f"{e}. Make sure {settings.credentials_path} exists")
        return 1

    try:
        client = connect_gmail(GmailOAuthConfig(
            client_secrets_path=resolve_secrets_path(credentials, settings.config_dir),
            token_path=settings.token_path,
            port=settings.oauth_port,
        ))
    except Exception as e:
        logger.error(f"Failed to create Gmail client: {e}")
        return 1

    worker = RouterWorker(
        client=client,
        store=YamlPolicyStore(settings.routing_path),
        credentials=credentials,
        settings=settings,
    )
    return worker.run()


if __name__ == "__main__":
    raise SystemExit(main())
