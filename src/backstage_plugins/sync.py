# ABOUTME: One-shot Okta catalog synchronization command
# ABOUTME: Runs an org entity provider per configured Okta account and prints the mutations

"""okta-catalog-sync: map every configured Okta org to catalog entities once."""

from __future__ import annotations

import asyncio
import sys

import httpx
import structlog

from backstage_plugins.catalog.connection import JsonLinesConnection
from backstage_plugins.catalog.providers import org_providers_from_settings
from backstage_plugins.config import OktaSettings, load_settings
from backstage_plugins.okta.client import OktaError
from backstage_plugins.utils.logging import configure_logging, set_correlation_id

logger = structlog.get_logger(__name__)


async def run_sync(settings: OktaSettings, connection: JsonLinesConnection) -> int:
    """
    Run each account's provider once, in order.

    A failing account is logged and does not stop the others.

    Returns:
        Number of accounts that failed.
    """
    failures = 0
    for provider in org_providers_from_settings(settings):
        set_correlation_id("")
        await provider.connect(connection)
        try:
            await provider.run()
        except (OktaError, httpx.HTTPError) as e:
            logger.error("Okta synchronization failed", provider=provider.get_provider_name(), error=str(e))
            failures += 1
    return failures


def main() -> None:
    settings = load_settings()
    # mutations go to stdout, so logs must not
    configure_logging(level=settings.log_level, json_output=settings.json_logs, stream=sys.stderr)

    if not settings.okta.accounts:
        logger.error("No Okta accounts configured", hint="Set OKTA_ACCOUNTS")
        sys.exit(1)

    failures = asyncio.run(run_sync(settings.okta, JsonLinesConnection(sys.stdout)))
    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
