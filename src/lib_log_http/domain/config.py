"""Immutable transport configuration resolved once at construction time.

Purpose
-------
Capture every option that shapes outgoing requests (destination, verb,
authentication, static headers and body addons) in a frozen value object so
concurrent dispatches can read it without locking.

Contents
--------
* :class:`HttpMethod` – the verbs the transport may use.
* :func:`resolve_base_url` – single resolution point for ``url`` vs. the
  deprecated ``host`` alias.
* :class:`TransportConfig` – frozen dataclass plus :meth:`TransportConfig.from_options`.

System Role
-----------
Domain layer. No validation is applied to URLs; malformed values surface
later when the HTTP adapter tries to use them.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any

from .auth import AuthType

DEFAULT_BASE_URL = "http://localhost:80"


class HttpMethod(str, Enum):
    """HTTP verbs supported for log delivery."""

    POST = "POST"
    PUT = "PUT"

    @classmethod
    def coerce(cls, value: "str | HttpMethod | None") -> "HttpMethod":
        """Normalise ``value`` into a member, defaulting to ``POST``.

        Examples
        --------
        >>> HttpMethod.coerce("put") is HttpMethod.PUT
        True
        >>> HttpMethod.coerce(None) is HttpMethod.POST
        True
        """
        if value is None or value == "":
            return cls.POST
        if isinstance(value, HttpMethod):
            return value
        normalized = value.strip().upper()
        try:
            return cls(normalized)
        except ValueError as exc:
            raise ValueError(f"Unsupported HTTP method: {value!r} (expected POST or PUT)") from exc


def resolve_base_url(url: str | None = None, host: str | None = None) -> str:
    """Pick the destination base from ``url``, the deprecated ``host`` alias, or the default.

    Examples
    --------
    >>> resolve_base_url("http://a", "http://b")
    'http://a'
    >>> resolve_base_url(host="http://b")
    'http://b'
    >>> resolve_base_url()
    'http://localhost:80'
    """

    return url or host or DEFAULT_BASE_URL


def _freeze(mapping: Mapping[str, Any] | None) -> Mapping[str, Any] | None:
    if mapping is None:
        return None
    return MappingProxyType(dict(mapping))


@dataclass(slots=True, frozen=True)
class TransportConfig:
    """Read-only options applied to every dispatched record.

    Attributes
    ----------
    base_url:
        Destination base; ``path`` is appended when present.
    path:
        Optional path joined to ``base_url`` with exactly one separator.
    method:
        :class:`HttpMethod` used for every request.
    auth:
        Optional secret placed into the ``authorization`` header.
    auth_type:
        Scheme name as supplied by the caller; the ``bearer`` default is
        applied at dispatch time so an absent ``auth`` never forces a type.
    headers:
        Static caller headers, frozen into a read-only mapping.
    body_addons:
        Static fields merged into every body, frozen into a read-only mapping.
    enabled:
        ``False`` acknowledges records without sending them.
    """

    base_url: str = DEFAULT_BASE_URL
    path: str | None = None
    method: HttpMethod = HttpMethod.POST
    auth: str | None = None
    auth_type: str | None = None
    headers: Mapping[str, str] | None = None
    body_addons: Mapping[str, Any] | None = None
    enabled: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", HttpMethod.coerce(self.method))
        if isinstance(self.auth_type, AuthType):
            object.__setattr__(self, "auth_type", self.auth_type.value)
        object.__setattr__(self, "headers", _freeze(self.headers))
        object.__setattr__(self, "body_addons", _freeze(self.body_addons))

    @classmethod
    def from_options(
        cls,
        *,
        url: str | None = None,
        host: str | None = None,
        path: str | None = None,
        method: str | HttpMethod | None = None,
        auth: str | None = None,
        auth_type: str | AuthType | None = None,
        headers: Mapping[str, str] | None = None,
        body_addons: Mapping[str, Any] | None = None,
        enabled: bool = True,
    ) -> "TransportConfig":
        """Build a configuration from caller-facing option names.

        ``url`` wins over the deprecated ``host``; both fall back to
        :data:`DEFAULT_BASE_URL`.

        Examples
        --------
        >>> cfg = TransportConfig.from_options(host="http://legacy", path="logs")
        >>> cfg.base_url, cfg.path, cfg.method.value
        ('http://legacy', 'logs', 'POST')
        """

        return cls(
            base_url=resolve_base_url(url, host),
            path=path or None,
            method=HttpMethod.coerce(method),
            auth=auth or None,
            auth_type=auth_type or None,
            headers=headers,
            body_addons=body_addons,
            enabled=enabled,
        )

    def redacted(self) -> dict[str, Any]:
        """Return a plain dictionary with the auth secret masked for display."""

        return {
            "base_url": self.base_url,
            "path": self.path,
            "method": self.method.value,
            "auth": "***" if self.auth else None,
            "auth_type": self.auth_type,
            "headers": dict(self.headers) if self.headers is not None else None,
            "body_addons": dict(self.body_addons) if self.body_addons is not None else None,
            "enabled": self.enabled,
        }


__all__ = ["DEFAULT_BASE_URL", "HttpMethod", "TransportConfig", "resolve_base_url"]
