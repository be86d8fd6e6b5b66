"""Ad-hoc diagnostics for the router setup."""

from __future__ import annotations

import argparse

from gmailrouter.application.ports.mail_client import MailClient
from gmailrouter.application.use_cases import collect_all_addresses
from gmailrouter.cli.worker import resolve_secrets_path
from gmailrouter.domain.errors import PolicyNotFoundError, RouterError
from gmailrouter.infrastructure import (
    CredentialsConfig,
    GmailMailClient,
    GmailOAuthConfig,
    Settings,
    YamlPolicyStore,
    configure_logging,
    connect_gmail,
    get_settings,
    load_credentials,
)


def _connect(settings: Settings, credentials: CredentialsConfig) -> GmailMailClient:
    return connect_gmail(GmailOAuthConfig(
        client_secrets_path=resolve_secrets_path(credentials, settings.config_dir),
        token_path=settings.token_path,
        port=settings.oauth_port,
    ))


def list_messages(client: MailClient, credentials: CredentialsConfig, limit: int = 10) -> int:
    print("Loading messages...\n")
    refs = client.list_message_refs(credentials.start_date)
    print(f"Messages found: {len(refs)}\n")

    if refs:
        print(f"First {min(limit, len(refs))} messages:")
        for i, ref in enumerate(refs[:limit], start=1):
            message = client.fetch_message(ref)
            print(f"  {i}. {message.get('Subject', '(no subject)')}")
    return 0


def check_config(settings: Settings) -> int:
    print("Checking config...\n")

    print(f"Checking {settings.credentials_path}...")
    try:
        credentials = load_credentials(settings.credentials_path)
    except RouterError as e:
        print(f"  Error: {e}")
        return 1
    print(f"  Domain: {credentials.domain}")
    print(f"  Check interval: {credentials.check_interval_seconds} s")
    print(f"  Start date: {credentials.start_date.isoformat()}")
    print()

    print(f"Checking {settings.routing_path}...")
    try:
        policy = YamlPolicyStore(settings.routing_path).load()
    except PolicyNotFoundError as e:
        print(f"  {e} (it is created on first run)")
        return 0
    except RouterError as e:
        print(f"  Error: {e}")
        return 1

    blocked = policy.blocked_addresses()
    print(f"  Addresses: {len(policy)}")
    print(f"  Allowed: {len(policy.allowed_addresses())}")
    print(f"  Blocked: {len(blocked)}")
    print(f"  Updated: {policy.updated_date.isoformat()}")
    if blocked:
        print("\n  Blocked addresses:")
        for address in blocked:
            print(f"    - {address}")
    return 0


def check_auth(settings: Settings, credentials: CredentialsConfig) -> int:
    print("Checking Gmail API authentication...\n")
    try:
        _connect(settings, credentials)
    except Exception as e:
        print(f"Error: {e}")
        return 1
    print("Auth success!")
    return 0


def count_addresses(client: MailClient, credentials: CredentialsConfig) -> int:
    print("Counting unique addresses\n")
    refs = client.list_message_refs(credentials.start_date)
    print(f"Total messages: {len(refs)}")
    print("Scanning addresses...\n")

    addresses = collect_all_addresses(client, refs, credentials.domain)
    print(f"Unique addresses found: {len(addresses)}\n")
    print("Address list:")
    for address in sorted(addresses):
        print(f"  - {address}@{credentials.domain}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gmail-router-util", description="Gmail router diagnostics")
    sub = parser.add_subparsers(dest="command", required=True)

    lm = sub.add_parser("list-messages", help="List messages since start_date with subjects")
    lm.add_argument("--limit", type=int, default=10, help="How many subjects to show")
    sub.add_parser("check-config", help="Validate credentials.yaml and routing.yaml")
    sub.add_parser("test-auth", help="Check Gmail API authentication")
    sub.add_parser("count-addresses", help="Scan mail and list unique in-domain addresses")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)

    if args.command == "check-config":
        return check_config(settings)

    try:
        credentials = load_credentials(settings.credentials_path)
    except RouterError as e:
        print(f"Error: {e}")
        return 1

    if args.command == "test-auth":
        return check_auth(settings, credentials)

    client = _connect(settings, credentials)
    if args.command == "list-messages":
        return list_messages(client, credentials, args.limit)
    return count_addresses(client, credentials)


if __name__ == "__main__":
    raise SystemExit(main())
