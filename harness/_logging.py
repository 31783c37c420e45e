"""Logging setup shared by the runner and the bundled connectors.

Stdout belongs to the protocol stream: every line written there must be one JSON
message. Log records therefore always go to stderr, and anything that may hold
credentials passes through ``redact_config`` before it is logged.
"""

import logging
import os
import sys
from threading import Lock
from typing import Any

_SETUP_LOCK = Lock()
_SETUP_DONE = False
_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_SENSITIVE_KEYS = {
    "password",
    "token",
    "secret",
    "api_key",
    "apikey",
    "authorization",
}
_MASK = "***"


def _resolve_log_level() -> int:
    level_name = os.getenv("HARNESS_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def _setup_default_logging() -> None:
    global _SETUP_DONE
    if _SETUP_DONE:
        return

    with _SETUP_LOCK:
        if _SETUP_DONE:
            return

        # an application that configured logging itself keeps its handlers
        if not logging.getLogger().handlers:
            logging.basicConfig(level=_resolve_log_level(), format=_LOG_FORMAT, stream=sys.stderr)

        _SETUP_DONE = True


def get_logger(name: str) -> logging.Logger:
    """Return the ``harness.<name>`` logger, configuring stderr output on first use."""
    _setup_default_logging()
    return logging.getLogger(f"harness.{name}")


def _redact_value(value: Any) -> Any:
    if isinstance(value, dict):
        return redact_config(value)
    if isinstance(value, list):
        return [_redact_value(item) for item in value]
    return value


def redact_config(values: dict[str, Any]) -> dict[str, Any]:
    """Copy ``values`` with every sensitive key masked, at any nesting depth."""
    redacted: dict[str, Any] = {}
    for key, value in values.items():
        if str(key).lower() in _SENSITIVE_KEYS and value is not None:
            redacted[key] = _MASK
        else:
            redacted[key] = _redact_value(value)
    return redacted
