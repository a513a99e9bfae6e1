# settings.py
"""
Runtime configuration.

Values are read from an add-on style options.json (if present) and can be
overridden by MPD_SWITCHER_* environment variables.
"""

import os
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import logging
logger = logging.getLogger(__name__)

# -------------------------------------------------------------------
# Defaults
# -------------------------------------------------------------------

OPTIONS_FILE: Path = Path(os.getenv("MPD_SWITCHER_OPTIONS", "/data/options.json"))

DEFAULT_API_BASE_URL = "http://localhost:6279/api"
DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_REQUEST_TIMEOUT = 5.0
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 5002

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    api_base_url: str = DEFAULT_API_BASE_URL
    poll_interval: float = DEFAULT_POLL_INTERVAL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    expose: bool = False

    @property
    def listen_host(self) -> str:
        return "0.0.0.0" if self.expose else self.host


# -------------------------------------------------------------------
# JSON helpers
# -------------------------------------------------------------------

def load_json(path: Path, default: Any):
    if not path.exists():
        logger.info(f"No options file at {path}, using defaults")
        return default
    try:
        return json.loads(path.read_text())
    except json.JSONDecodeError:
        logger.warning(f"Options file {path} is not valid JSON, ignored")
        return default


# -------------------------------------------------------------------
# Value coercion
# -------------------------------------------------------------------

def _positive_float(name: str, value: Any, default: float) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid value for {name}: {value!r}, using {default}")
        return default
    if result <= 0:
        logger.warning(f"{name} must be positive, got {result}, using {default}")
        return default
    return result


def _port(value: Any, default: int) -> int:
    try:
        result = int(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid port: {value!r}, using {default}")
        return default
    if not 0 < result < 65536:
        logger.warning(f"Port out of range: {result}, using {default}")
        return default
    return result


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


# -------------------------------------------------------------------
# Public API
# -------------------------------------------------------------------

def load_settings(
    env: Mapping[str, str] | None = None,
    options_file: Path | None = None,
) -> Settings:
    """
    Build Settings from options.json, then apply environment overrides.
    """
    env = os.environ if env is None else env
    options = load_json(options_file or OPTIONS_FILE, {})
    if not isinstance(options, dict):
        logger.warning("Options file does not hold an object, ignored")
        options = {}

    def pick(option: str, variable: str, default: Any) -> Any:
        if variable in env:
            return env[variable]
        return options.get(option, default)

    api_base_url = str(pick("api_base_url", "MPD_SWITCHER_API_URL", DEFAULT_API_BASE_URL)).rstrip("/")

    settings = Settings(
        api_base_url=api_base_url or DEFAULT_API_BASE_URL,
        poll_interval=_positive_float(
            "poll_interval",
            pick("poll_interval", "MPD_SWITCHER_POLL_INTERVAL", DEFAULT_POLL_INTERVAL),
            DEFAULT_POLL_INTERVAL,
        ),
        request_timeout=_positive_float(
            "request_timeout",
            pick("request_timeout", "MPD_SWITCHER_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
            DEFAULT_REQUEST_TIMEOUT,
        ),
        host=str(pick("host", "MPD_SWITCHER_HOST", DEFAULT_HOST)),
        port=_port(pick("port", "MPD_SWITCHER_PORT", DEFAULT_PORT), DEFAULT_PORT),
        expose=_flag(pick("expose", "MPD_SWITCHER_EXPOSE", False)),
    )
    logger.info(f"Settings loaded: {settings}")
    return settings
