from __future__ import annotations
import re
from pathlib import Path
from typing import Optional, Union

from dotenv import find_dotenv
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from clockbar.errors import ConfigValidationError
from clockbar.utils.logging import configure_logging

REQUIRED_KEYS = ("API_TOKEN", "WORKSPACE_ID", "MY_USER_ID", "PROJECT_ID", "BASE_URL")
OPTIONAL_KEYS = ("COMPANY_NETWORK",)

_URL_SCHEME = re.compile(r"^https?://")

DEFAULT_TRACKER_URL = "https://app.clockify.me/tracker"

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="", extra="ignore")

    # Clockify
    API_TOKEN: Optional[str] = None  # do not commit
    BASE_URL: Optional[str] = None
    WORKSPACE_ID: Optional[str] = None
    MY_USER_ID: Optional[str] = None
    PROJECT_ID: Optional[str] = None
    TRACKER_URL: str = DEFAULT_TRACKER_URL

    # Network prompt
    COMPANY_NETWORK: Optional[str] = None
    LOCK_DIR: Optional[str] = None
    PROMPT_TIMEOUT: float = 30.0  # seconds the clock-in prompt may keep the plugin running

    # HTTP
    HTTP_TIMEOUT: float = 20.0

    # Observability
    LOG_LEVEL: str = "WARNING"
    LOG_JSON: bool = False

    # Set by load_config, used by the error menu
    ENV_FILE: Optional[str] = None


def find_env_file(start: Union[str, Path]) -> Optional[Path]:
    """Return the nearest .env walking up from start, or None."""
    current = Path(start).resolve()
    if current.is_file():
        current = current.parent
    for directory in (current, *current.parents):
        candidate = directory / ".env"
        if candidate.is_file():
            return candidate
    return None


def default_env_file() -> Optional[Path]:
    found = find_env_file(PROJECT_ROOT)
    if found:
        return found
    cwd_env = find_dotenv(usecwd=True)
    return Path(cwd_env) if cwd_env else None


def load_config(env_file: Union[str, Path, None] = None) -> Settings:
    """
    Load settings from the environment merged over a .env file and validate them.
    Raises ConfigValidationError listing every missing required key.
    """
    path = Path(env_file) if env_file is not None else default_env_file()
    found = str(path) if path is not None and path.is_file() else None
    try:
        settings = Settings(_env_file=path, ENV_FILE=found)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigValidationError(f"Invalid settings: {details}", []) from e

    missing = [
        key for key in REQUIRED_KEYS
        if not getattr(settings, key) or not getattr(settings, key).strip()
    ]
    if missing:
        raise ConfigValidationError(
            f"Missing required environment variables: {', '.join(missing)}\n"
            "Please check your .env file. Required variables:\n"
            "  " + "\n  ".join(REQUIRED_KEYS) + "\n"
            "Optional variables:\n"
            "  COMPANY_NETWORK (for automatic clock-in notifications)",
            missing,
        )

    if not _URL_SCHEME.match(settings.BASE_URL):
        raise ConfigValidationError(
            "Invalid BASE_URL format. Must start with http:// or https://\n"
            f"Current value: {settings.BASE_URL}",
            [],
        )

    return settings


def config_hint(settings_file: Optional[str] = None) -> str:
    """The file (or directory) a user should open to fix their settings."""
    if settings_file:
        return settings_file
    example = PROJECT_ROOT / ".env.example"
    return str(example if example.is_file() else PROJECT_ROOT)


def bootstrap(env_file: Union[str, Path, None] = None) -> Optional[Settings]:
    """
    Load settings, then configure logging from them. When the settings are
    unusable, logging falls back to the environment and None is returned so
    the caller can report the failure through its normal path.
    """
    try:
        settings = load_config(env_file)
    except ConfigValidationError:
        configure_logging()
        return None
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)
    return settings
