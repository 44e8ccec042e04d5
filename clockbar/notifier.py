"""
Desktop notifications through terminal-notifier, with click events.

Falls back to ``osascript`` when terminal-notifier is not installed; that path
cannot report clicks.
"""
from __future__ import annotations
import inspect
import json
import logging
import shutil
from collections import defaultdict
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from clockbar.utils.shell import CommandError, run_command

logger = logging.getLogger(__name__)

Listener = Callable[[Dict[str, Any], str], Union[None, Awaitable[None]]]

# terminal-notifier -json activationType -> event name
ACTIVATIONS = {
    "contentsClicked": "clicked",
    "actionClicked": "activate",
    "closed": "closed",
    "timeout": "timeout",
}

# event name -> listener channel
CHANNELS = {
    "clicked": "click",
    "activate": "click",
    "closed": "close",
    "timeout": "timeout",
}

# How long a waiting notification stays up; the menu process lives that long.
WAIT_TIMEOUT = 30.0


def _applescript_string(value: str) -> str:
    # AppleScript understands \" and \\ but not \uXXXX escapes
    return json.dumps(value, ensure_ascii=False)


class Notifier:
    def __init__(self, binary: Optional[str] = None, run=run_command, wait_timeout: float = WAIT_TIMEOUT):
        self.binary = binary or shutil.which("terminal-notifier")
        self.wait_timeout = wait_timeout
        self.run = run
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)

    def on(self, channel: str, listener: Listener) -> None:
        self._listeners[channel].append(listener)

    def remove_listener(self, channel: str, listener: Listener) -> None:
        try:
            self._listeners[channel].remove(listener)
        except ValueError:
            pass

    def listener_count(self, channel: str) -> int:
        return len(self._listeners[channel])

    async def emit(self, channel: str, options: Dict[str, Any], event: str) -> None:
        for listener in list(self._listeners[channel]):
            result = listener(options, event)
            if inspect.isawaitable(result):
                await result

    def _command(self, options: Dict[str, Any]) -> List[str]:
        args = [self.binary, "-title", options["title"], "-message", options["message"]]
        if options.get("icon"):
            args += ["-appIcon", options["icon"]]
        if options.get("sound"):
            args += ["-sound", options["sound"]]
        if options.get("wait"):
            args += ["-timeout", str(max(1, int(self.wait_timeout))), "-json"]
            if options.get("actions"):
                args += ["-actions", options["actions"]]
            if options.get("close_label"):
                args += ["-closeLabel", options["close_label"]]
        return args

    async def notify(
        self,
        title: str,
        message: str,
        icon: Optional[str] = None,
        sound: Optional[str] = None,
        wait: bool = False,
        close_label: Optional[str] = None,
        actions: Optional[str] = None,
    ) -> Optional[str]:
        """
        Show a notification. With wait=True, block until the user reacts and
        dispatch the resulting event to listeners; returns the event name.
        Never raises on delivery problems.
        """
        options = {
            "title": title,
            "message": message,
            "icon": icon,
            "sound": sound,
            "wait": wait,
            "close_label": close_label,
            "actions": actions,
        }
        if not self.binary:
            await self._notify_osascript(options)
            return None

        timeout = self.wait_timeout + 5 if wait else 10.0
        try:
            result = await self.run(*self._command(options), timeout=timeout)
        except CommandError as e:
            logger.warning(f"terminal-notifier failed: {e}")
            return None

        if not wait:
            return None

        event = self._parse_activation(result.stdout)
        if event is None:
            return None
        channel = CHANNELS.get(event)
        if channel:
            await self.emit(channel, options, event)
        return event

    @staticmethod
    def _parse_activation(output: str) -> Optional[str]:
        try:
            payload = json.loads(output)
        except ValueError:
            logger.debug(f"Unrecognised terminal-notifier output: {output!r}")
            return None
        activation = payload.get("activationType") if isinstance(payload, dict) else None
        return ACTIVATIONS.get(activation)

    async def _notify_osascript(self, options: Dict[str, Any]) -> None:
        script = "display notification {} with title {}".format(
            _applescript_string(options["message"]), _applescript_string(options["title"])
        )
        if options.get("sound"):
            script += " sound name {}".format(_applescript_string(options["sound"]))
        try:
            await self.run("osascript", "-e", script)
        except CommandError as e:
            logger.warning(f"Desktop notification unavailable: {e}")
