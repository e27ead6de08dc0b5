"""Environment and ``.env`` configuration helpers.

Purpose
-------
Translate ``LOG_HTTP_*`` environment variables into a :class:`TransportConfig`
and optionally pre-load them from the nearest ``.env`` file so CLI runs and
host applications share one configuration story.

Contents
--------
* :data:`DOTENV_ENV_VAR` – toggle checked by the CLI before loading ``.env``.
* :func:`enable_dotenv` – idempotent ``.env`` discovery and loading.
* :func:`config_from_env` – environment → :class:`TransportConfig`.
* :func:`coerce_level` – level names/integers → :class:`LogLevel`.

Explicit keyword overrides always win over the environment, and existing
environment variables always win over ``.env`` entries.
"""

from __future__ import annotations

import json
import os
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dotenv import find_dotenv, load_dotenv

from lib_log_http.domain import LogLevel, TransportConfig

DOTENV_ENV_VAR = "LOG_HTTP_USE_DOTENV"

ENV_URL = "LOG_HTTP_URL"
ENV_HOST = "LOG_HTTP_HOST"
ENV_PATH = "LOG_HTTP_PATH"
ENV_METHOD = "LOG_HTTP_METHOD"
ENV_AUTH = "LOG_HTTP_AUTH"
ENV_AUTH_TYPE = "LOG_HTTP_AUTH_TYPE"
ENV_HEADERS = "LOG_HTTP_HEADERS"
ENV_BODY_ADDONS = "LOG_HTTP_BODY_ADDONS"
ENV_ENABLED = "LOG_HTTP_ENABLED"
ENV_LEVEL = "LOG_HTTP_LEVEL"

_TRUTHY = {"1", "true", "yes", "on"}

_DOTENV_LOCK = threading.Lock()
_DOTENV_LOADED: Path | None = None


def enable_dotenv() -> Path | None:
    """Load the nearest ``.env`` file without overriding existing variables.

    :func:`dotenv.find_dotenv` searches the working directory and its
    parents. Returns the loaded path, or ``None`` when no file exists.
    Subsequent calls return the first result.
    """

    global _DOTENV_LOADED
    with _DOTENV_LOCK:
        if _DOTENV_LOADED is not None:
            return _DOTENV_LOADED
        found = find_dotenv(usecwd=True)
        if not found:
            return None
        candidate = Path(found).resolve()
        load_dotenv(candidate, override=False)
        _DOTENV_LOADED = candidate
        return candidate


def dotenv_requested(flag: bool | None, environ: Mapping[str, str] | None = None) -> bool:
    """Decide whether to load ``.env``: an explicit CLI flag beats the environment toggle.

    Examples
    --------
    >>> dotenv_requested(None, {"LOG_HTTP_USE_DOTENV": "1"})
    True
    >>> dotenv_requested(False, {"LOG_HTTP_USE_DOTENV": "1"})
    False
    """

    if flag is not None:
        return flag
    env = os.environ if environ is None else environ
    return _parse_bool(env.get(DOTENV_ENV_VAR), default=False)


def _reset_dotenv_state_for_testing() -> None:
    global _DOTENV_LOADED
    with _DOTENV_LOCK:
        _DOTENV_LOADED = None


def config_from_env(environ: Mapping[str, str] | None = None, **overrides: Any) -> TransportConfig:
    """Build a :class:`TransportConfig` from ``LOG_HTTP_*`` variables.

    ``overrides`` use the :meth:`TransportConfig.from_options` keyword names;
    values other than ``None`` replace the environment.

    Raises
    ------
    ValueError
        When a JSON variable is malformed or not an object, or the method is
        not POST/PUT.

    Examples
    --------
    >>> env = {"LOG_HTTP_URL": "http://logs/", "LOG_HTTP_PATH": "ingest", "LOG_HTTP_AUTH": "t"}
    >>> cfg = config_from_env(env, method="put")
    >>> cfg.base_url, cfg.path, cfg.method.value, cfg.auth
    ('http://logs/', 'ingest', 'PUT', 't')
    """

    env = os.environ if environ is None else environ
    options: dict[str, Any] = {
        "url": env.get(ENV_URL) or None,
        "host": env.get(ENV_HOST) or None,
        "path": env.get(ENV_PATH) or None,
        "method": env.get(ENV_METHOD) or None,
        "auth": env.get(ENV_AUTH) or None,
        "auth_type": env.get(ENV_AUTH_TYPE) or None,
        "headers": _parse_json_object(ENV_HEADERS, env.get(ENV_HEADERS)),
        "body_addons": _parse_json_object(ENV_BODY_ADDONS, env.get(ENV_BODY_ADDONS)),
        "enabled": _parse_bool(env.get(ENV_ENABLED), default=True),
    }
    options.update({key: value for key, value in overrides.items() if value is not None})
    return TransportConfig.from_options(**options)


def level_from_env(environ: Mapping[str, str] | None = None, default: LogLevel = LogLevel.INFO) -> LogLevel:
    """Return the handler threshold from ``LOG_HTTP_LEVEL`` or ``default``."""

    env = os.environ if environ is None else environ
    raw = env.get(ENV_LEVEL)
    if not raw:
        return default
    return coerce_level(raw)


def coerce_level(level: str | int | LogLevel) -> LogLevel:
    """Normalise level inputs (name, stdlib integer or enum) into :class:`LogLevel`.

    Examples
    --------
    >>> coerce_level("warning") is LogLevel.WARNING
    True
    >>> coerce_level(40) is LogLevel.ERROR
    True
    """

    if isinstance(level, LogLevel):
        return level
    if isinstance(level, int):
        return LogLevel.from_python_level(level)
    return LogLevel.from_name(level)


def _parse_bool(value: str | None, *, default: bool) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in _TRUTHY


def _parse_json_object(name: str, raw: str | None) -> dict[str, Any] | None:
    """Parse ``raw`` as a JSON object, naming ``name`` in error messages."""

    if raw is None or not raw.strip():
        return None
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"{name} must contain valid JSON: {exc.msg}") from exc
    if not isinstance(value, dict):
        raise ValueError(f"{name} must be a JSON object")
    return value


__all__ = [
    "DOTENV_ENV_VAR",
    "coerce_level",
    "config_from_env",
    "dotenv_requested",
    "enable_dotenv",
    "level_from_env",
]
