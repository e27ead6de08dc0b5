"""Application ports consumed by the dispatcher."""

from __future__ import annotations

from .http import HttpTransportPort
from .scheduler import SchedulerPort

__all__ = ["HttpTransportPort", "SchedulerPort"]
