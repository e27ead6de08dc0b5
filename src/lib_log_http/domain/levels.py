"""Log level abstraction shared by the handler bridge and the configuration layer.

Purpose
-------
Offer a domain-specific representation of log severities so thresholds can be
supplied as strings (CLI, environment) or stdlib integers and still resolve to
one canonical value.

Contents
--------
* :class:`LogLevel` enum with conversion helpers.

System Role
-----------
Used by :mod:`lib_log_http.config` to coerce handler thresholds and by
:class:`lib_log_http.adapters.HttpLogHandler` to derive the ``level`` field
placed into outgoing record bodies.
"""

from __future__ import annotations

import logging
from enum import Enum


class LogLevel(Enum):
    """Enumerated logging levels used throughout the system."""

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50

    @property
    def severity(self) -> str:
        """Return the lowercase severity name for structured logging payloads."""

        return self.name.lower()

    def to_python_level(self) -> int:
        """Return the :mod:`logging` constant matching this level."""

        return getattr(logging, self.name)

    @classmethod
    def from_name(cls, name: str) -> "LogLevel":
        """Resolve a case-insensitive level name.

        Examples
        --------
        >>> LogLevel.from_name(" warning ") is LogLevel.WARNING
        True
        """
        normalized = name.strip().upper()
        if normalized == "WARN":
            normalized = "WARNING"
        try:
            return cls[normalized]
        except KeyError as exc:
            raise ValueError(f"Unknown log level: {name!r}") from exc

    @classmethod
    def from_python_level(cls, level: int) -> "LogLevel":
        """Translate a stdlib logging level integer into :class:`LogLevel`.

        Custom levels snap down to the nearest known severity so records from
        libraries with extra levels (``TRACE=5``, ``NOTICE=25``) still map.
        """
        if level < cls.DEBUG.value:
            return cls.DEBUG
        candidates = [member for member in cls if member.value <= level]
        return candidates[-1]


__all__ = ["LogLevel"]
