"""
Company network detection and the clock-in prompt.

When the machine is on the configured company WiFi and the user is not
clocked in, a notification offers to clock in. A lock file's mtime keeps the
prompt to at most once per hour across invocations.
"""
from __future__ import annotations
import logging
import re
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, Optional, Union

from clockbar.notifier import Listener, Notifier
from clockbar.utils.shell import CommandError, run_command

logger = logging.getLogger(__name__)

COMMON_INTERFACES = ("en0", "en1", "en2")
DEFAULT_INTERFACE = "en0"

DEFAULT_LOCK_DIR = Path.home() / ".xbar-clockify"
LOCK_FILE_NAME = ".notify_lock"
LOCK_DURATION = timedelta(hours=1)

_DEVICE_LINE = re.compile(r"^Device: (.+)$")


class ClickSubscription:
    """Handle for the single click listener a watcher keeps on its notifier."""

    def __init__(self, notifier: Notifier, channel: str = "click"):
        self.notifier = notifier
        self.channel = channel
        self.listener: Optional[Listener] = None

    @property
    def active(self) -> bool:
        return self.listener is not None

    def unsubscribe(self) -> None:
        if self.listener is not None:
            self.notifier.remove_listener(self.channel, self.listener)
            self.listener = None

    def resubscribe(self, listener: Listener) -> None:
        self.unsubscribe()
        self.notifier.on(self.channel, listener)
        self.listener = listener


def parse_hardware_ports(output: str) -> Optional[str]:
    """Device name of the Wi-Fi/AirPort port in `networksetup -listallhardwareports` output."""
    lines = output.split("\n")
    for i, raw in enumerate(lines):
        line = raw.strip()
        if "Hardware Port:" in line and ("Wi-Fi" in line or "AirPort" in line):
            if i + 1 < len(lines):
                match = _DEVICE_LINE.match(lines[i + 1].strip())
                if match and match.group(1):
                    return match.group(1)
    return None


class NetworkWatcher:
    def __init__(
        self,
        company_network: Optional[str],
        client: Any,
        notifier: Optional[Notifier] = None,
        run=run_command,
    ):
        self.company_network = company_network
        self.client = client
        self.notifier = notifier or Notifier()
        self.run = run
        self.subscription = ClickSubscription(self.notifier)

    async def get_active_network_interface(self) -> Optional[str]:
        try:
            result = await self.run("networksetup", "-listallhardwareports")
        except CommandError as e:
            logger.error(f"Error detecting network interface: {e}")
            return DEFAULT_INTERFACE

        device = parse_hardware_ports(result.stdout)
        if device:
            return device

        for iface in COMMON_INTERFACES:
            try:
                await self.run("networksetup", "-getairportnetwork", iface)
                return iface
            except CommandError:
                continue
        return None

    async def get_wifi_name(self) -> Optional[str]:
        interface = await self.get_active_network_interface()
        if not interface:
            return None

        try:
            result = await self.run("networksetup", "-getairportnetwork", interface)
        except CommandError as e:
            if e.returncode == 1 or "not associated" in e.stderr:
                return None
            logger.error(f"Error getting WiFi name: {e}")
            return None

        if "not associated" in result.stdout:
            return None
        name = result.stdout.split(":")[-1].strip()
        return name or None

    async def _on_click(self, options: Dict[str, Any], event: str) -> None:
        if event not in ("clicked", "activate"):
            return
        try:
            await self.client.clock_in()
            logger.info("Clocked in from notification")
        except Exception as e:
            logger.error(f"Failed to clock in from notification: {e}", exc_info=True)

    async def notify_clock_in(self) -> None:
        if not self.company_network:
            return

        self.subscription.unsubscribe()

        network = await self.get_wifi_name()
        if not network:
            return

        if network != self.company_network:
            logger.debug(f"On {network}, not the company network")
            return

        self.subscription.resubscribe(self._on_click)
        await self.notifier.notify(
            title=f"Connected to {network} network",
            message=f"Looks like you just connected to {network}. Do you want to clock in?",
            icon="Terminal Icon",
            sound="Blow",
            wait=True,
            close_label="Dismiss",
            actions="Clock in",
        )


def check_and_update_lock(
    lock_dir: Union[str, Path, None] = None,
    now: Optional[datetime] = None,
    duration: timedelta = LOCK_DURATION,
) -> bool:
    """
    Return True, touching the lock file, when the cooldown has elapsed or the
    lock does not exist yet. Filesystem errors are logged and count as False.
    """
    directory = Path(lock_dir) if lock_dir else DEFAULT_LOCK_DIR
    lock_file = directory / LOCK_FILE_NAME
    now = now or datetime.now()

    try:
        directory.mkdir(parents=True, exist_ok=True)
        try:
            mtime = datetime.fromtimestamp(lock_file.stat().st_mtime)
        except FileNotFoundError:
            lock_file.write_text("")
            return True

        if now - mtime > duration:
            lock_file.write_text("")
            return True
        return False
    except OSError as e:
        logger.error(f"Error checking lock file {lock_file}: {e}")
        return False
