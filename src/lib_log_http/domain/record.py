"""Open log-record shape and the merge rule applied to outgoing bodies.

Log records arrive from the host logging pipeline as open mappings. The
transport never interprets them beyond merging configured body addons, so
the domain only fixes the value types that survive JSON serialisation and
the precedence rule for merges.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Union

FieldValue = Union[str, int, float, bool, None, Mapping[str, Any], Sequence[Any]]
"""Value stored under a record field (scalars, nested mappings or lists)."""

LogRecord = Mapping[str, FieldValue]
"""One structured log event, at minimum carrying ``level`` and ``message``."""


def merge_right_wins(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Return a shallow merge of ``base`` and ``overrides``.

    Keys present in both mappings take the value from ``overrides``. Field
    order follows ``base`` first, then keys only found in ``overrides``.
    Neither argument is mutated.

    Examples
    --------
    >>> merge_right_wins({"a": 0, "msg": "x"}, {"a": 1, "app": "svc"})
    {'a': 1, 'msg': 'x', 'app': 'svc'}
    """

    merged = dict(base)
    merged.update(overrides)
    return merged


__all__ = ["FieldValue", "LogRecord", "merge_right_wins"]
