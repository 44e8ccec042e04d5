"""
Clock-in / clock-out entry points, run from the menu's action items.

    python -m clockbar.actions clock-in
    python -m clockbar.actions clock-out
"""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from clockbar.config import Settings, bootstrap, load_config
from clockbar.errors import ErrorKind
from clockbar.integrations.clockify_client import ClockifyClient
from clockbar.models import ActionError, ActionResult
from clockbar.notifier import Notifier

logger = logging.getLogger(__name__)

CLOCK_IN = "clock-in"
CLOCK_OUT = "clock-out"
OPERATIONS = (CLOCK_IN, CLOCK_OUT)

SUCCESS_MESSAGES = {
    CLOCK_IN: "Successfully clocked in",
    CLOCK_OUT: "Successfully clocked out",
}


async def run_action(
    operation: str,
    settings: Optional[Settings] = None,
    client: Optional[ClockifyClient] = None,
) -> ActionResult:
    """Load config and run one operation; every failure comes back as an ActionResult."""
    if operation not in OPERATIONS:
        return ActionResult.failure(ValueError(f"Unknown operation: {operation}"))

    try:
        settings = settings or load_config()
        client = client or ClockifyClient.from_settings(settings)
        if operation == CLOCK_IN:
            entry = await client.clock_in()
        else:
            entry = await client.clock_out()
        return ActionResult.success(entry.model_dump())
    except Exception as e:
        logger.error(f"{operation} failed: {e}", exc_info=True, extra={"operation": operation})
        return ActionResult.failure(e)


def failure_message(operation: str, error: ActionError) -> str:
    """User-facing text for a failed clock action."""
    if error.kind == ErrorKind.CONFIG:
        return f"Configuration error: {error.headline}"

    if error.kind == ErrorKind.API:
        if error.status_code == 401:
            return "Authentication failed. Check your API token."
        if operation == CLOCK_IN and error.status_code == 400:
            return "Invalid request. You may already be clocked in."
        if operation == CLOCK_OUT and error.status_code == 404:
            return "No active time entry found to clock out."
        return f"API error: {error.message}"

    if error.kind == ErrorKind.NETWORK:
        return "Network error. Please check your connection."

    return error.message or f"Failed to {operation.replace('-', ' ')}"


async def _run(operation: str, notifier: Notifier, settings: Optional[Settings] = None) -> int:
    result = await run_action(operation, settings)
    if result.ok:
        await notifier.notify(title="Clockify", message=SUCCESS_MESSAGES[operation], sound="Glass")
        return 0

    await notifier.notify(
        title="Clockify Error",
        message=failure_message(operation, result.error),
        sound="Basso",
    )
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="clockbar-action", description="Clock in or out of Clockify.")
    parser.add_argument("operation", choices=OPERATIONS)
    args = parser.parse_args(argv)

    settings = bootstrap()
    return asyncio.run(_run(args.operation, Notifier(), settings))


def clock_in_main() -> None:
    sys.exit(main([CLOCK_IN]))


def clock_out_main() -> None:
    sys.exit(main([CLOCK_OUT]))


if __name__ == "__main__":
    sys.exit(main())
