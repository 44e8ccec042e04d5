"""
Menu-bar status plugin: today's worked time plus clock-in/out actions.

The host runs this on a schedule and shows whatever it prints. A menu is
printed even on failure, with exit code 1.
"""
import asyncio
import logging
import sys
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from clockbar.config import DEFAULT_TRACKER_URL, Settings, bootstrap, config_hint, load_config
from clockbar.errors import ClockifyAPIError, ErrorKind, classify
from clockbar.integrations.clockify_client import ClockifyClient
from clockbar.integrations.clockify_types import TimeEntry
from clockbar.menu import SEPARATOR, MenuEntry, MenuItem, format_menu
from clockbar.network import NetworkWatcher, check_and_update_lock
from clockbar.notifier import Notifier
from clockbar.utils.timefmt import local_now

logger = logging.getLogger(__name__)

WORKDAY_HOURS = 8

WORKING_COLOR = "#FFFFFF"
IDLE_COLOR = "#777777"
ERROR_COLOR = "#FF0000"


@dataclass
class WorkSummary:
    is_working: bool
    worked: timedelta

    @property
    def hours(self) -> int:
        return int(self.worked.total_seconds() // 3600)

    @property
    def minutes(self) -> int:
        return int((self.worked.total_seconds() % 3600) // 60)


def todays_entries(entries: Iterable[TimeEntry], now: datetime) -> List[TimeEntry]:
    """Entries that started on now's local calendar date."""
    today = now.date()
    return [
        e for e in entries
        if e.timeInterval.started_at().astimezone(now.tzinfo).date() == today
    ]


def summarize(entries: Iterable[TimeEntry], now: Optional[datetime] = None) -> WorkSummary:
    now = now or local_now()
    today = todays_entries(entries, now)
    worked = sum((e.timeInterval.elapsed(now) for e in today), timedelta())
    return WorkSummary(
        is_working=any(e.timeInterval.is_open for e in today),
        worked=max(worked, timedelta()),
    )


def status_line(summary: WorkSummary) -> Tuple[str, str]:
    hours, minutes = summary.hours, summary.minutes
    if summary.is_working:
        badge = "🟡" if hours < WORKDAY_HOURS else "🟢"
        return f"Working: {hours}h {minutes}m {badge}", WORKING_COLOR

    if hours > WORKDAY_HOURS:
        return f"Finished: {hours}h {minutes}m 🟢", IDLE_COLOR
    if hours > 0 or minutes > 0:
        return f"Not working: {hours}h {minutes}m", IDLE_COLOR
    return "Out of office", IDLE_COLOR


def _action(text: str, operation: str, disabled: bool) -> MenuItem:
    return MenuItem(
        text=text,
        shell=sys.executable,
        params=["-m", "clockbar.actions", operation],
        terminal=False,
        refresh=True,
        disabled=disabled,
    )


def build_menu(summary: WorkSummary, tracker_url: str = DEFAULT_TRACKER_URL) -> List[MenuEntry]:
    text, color = status_line(summary)
    return [
        MenuItem(text=text, color=color, dropdown=False),
        SEPARATOR,
        _action("Clock in", "clock-in", disabled=summary.is_working),
        _action("Clock out", "clock-out", disabled=not summary.is_working),
        SEPARATOR,
        MenuItem(text="Check my time", href=tracker_url),
    ]


def describe_error(exc: BaseException) -> str:
    kind = classify(exc)
    if kind == ErrorKind.CONFIG:
        return "Clockify: configuration error"
    if kind == ErrorKind.API:
        if isinstance(exc, ClockifyAPIError) and exc.status_code == 401:
            return "Clockify: authentication failed"
        return f"Clockify: API error ({getattr(exc, 'status_code', '?')})"
    if kind == ErrorKind.NETWORK:
        return "Clockify: network error"
    return "Clockify: unexpected error"


def build_error_menu(exc: BaseException, env_file: Optional[str] = None) -> List[MenuEntry]:
    detail = str(exc).split("\n")[0] or type(exc).__name__
    target = config_hint(env_file)
    return [
        MenuItem(text=f"⚠️ {describe_error(exc)}", color=ERROR_COLOR),
        SEPARATOR,
        MenuItem(text=detail, disabled=True),
        MenuItem(text="Check configuration", shell="/usr/bin/open", params=[target], terminal=False),
        MenuItem(text="Refresh", refresh=True),
    ]


def _log_prompt_failure(task: "asyncio.Task[None]") -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(f"Clock-in prompt failed: {exc}", exc_info=exc)


async def render(
    settings: Optional[Settings] = None,
    now: Optional[datetime] = None,
    client: Optional[ClockifyClient] = None,
    watcher: Optional[NetworkWatcher] = None,
    out=None,
) -> int:
    """Print the menu to out (stdout by default); return the process exit code."""
    out = out or sys.stdout
    prompt: Optional[asyncio.Task] = None
    env_file = settings.ENV_FILE if settings else None
    try:
        settings = settings or load_config()
        env_file = settings.ENV_FILE
        client = client or ClockifyClient.from_settings(settings)

        entries = await client.get_time_entries()
        summary = summarize(entries, now)

        if not summary.is_working and check_and_update_lock(settings.LOCK_DIR):
            watcher = watcher or NetworkWatcher(
                settings.COMPANY_NETWORK, client, Notifier(wait_timeout=settings.PROMPT_TIMEOUT)
            )
            prompt = asyncio.create_task(watcher.notify_clock_in())
            prompt.add_done_callback(_log_prompt_failure)

        menu = build_menu(summary, settings.TRACKER_URL)
    except Exception as e:
        logger.error(f"Status render failed: {e}", exc_info=True, extra={"kind": classify(e).value})
        out.write(format_menu(build_error_menu(e, env_file)))
        out.flush()
        return 1

    out.write(format_menu(menu))
    out.flush()

    if prompt is not None:
        # The host only shows the menu once we exit, so the prompt gets a bounded wait.
        _, pending = await asyncio.wait({prompt}, timeout=settings.PROMPT_TIMEOUT)
        if pending:
            logger.info(f"Clock-in prompt unanswered after {settings.PROMPT_TIMEOUT}s")
            prompt.cancel()
            await asyncio.gather(prompt, return_exceptions=True)
    return 0


def main() -> None:
    # The host may start us without a UTF-8 locale; the status line has emoji.
    sys.stdout.reconfigure(encoding="utf-8")
    settings = bootstrap()
    sys.exit(asyncio.run(render(settings)))


if __name__ == "__main__":
    main()
