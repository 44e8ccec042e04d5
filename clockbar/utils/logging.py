"""
Logging configuration with optional JSON output.

Everything goes to stderr: stdout belongs to the menu-bar host.
"""
import logging
import sys
import json
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class JSONFormatter(logging.Formatter):
    """JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
            "service": "clockbar",
        }

        if hasattr(record, "operation"):
            log_obj["operation"] = record.operation
        if hasattr(record, "status"):
            log_obj["status"] = record.status
        if hasattr(record, "kind"):
            log_obj["kind"] = record.kind

        if record.exc_info:
            log_obj["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_obj)


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("true", "1", "yes")


def configure_logging(level: Optional[str] = None, use_json: Optional[bool] = None) -> None:
    """
    Configure root logging for a single process invocation.
    LOG_LEVEL and LOG_JSON in the environment are used when arguments are omitted.
    """
    if use_json is None:
        use_json = _env_flag("LOG_JSON")
    level_name = (level or os.getenv("LOG_LEVEL") or "WARNING").upper()

    handler = logging.StreamHandler(sys.stderr)

    if use_json:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )

    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        handlers=[handler],
        force=True,
    )
