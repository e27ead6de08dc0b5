"""Authentication schemes and their ``authorization`` header prefixes."""

from __future__ import annotations

from enum import Enum

AUTHORIZATION_HEADER = "authorization"


class AuthType(str, Enum):
    """Known authentication schemes accepted by the transport."""

    BEARER = "bearer"
    APIKEY = "apikey"
    BASIC = "basic"
    CUSTOM = "custom"
    NONE = "none"


DEFAULT_AUTH_TYPE = AuthType.BEARER

_PREFIXES = {
    AuthType.BEARER: "Bearer ",
    AuthType.APIKEY: "ApiKey ",
    AuthType.BASIC: "Basic ",
}


def auth_prefix(auth_type: str | AuthType | None) -> str:
    """Return the header-value prefix for ``auth_type``.

    ``None`` falls back to :data:`DEFAULT_AUTH_TYPE`. ``custom``, ``none``
    and unrecognised schemes map to an empty prefix so the raw secret is
    sent verbatim.

    Examples
    --------
    >>> auth_prefix("apikey")
    'ApiKey '
    >>> auth_prefix(None)
    'Bearer '
    >>> auth_prefix("hmac")
    ''
    """

    if auth_type is None:
        auth_type = DEFAULT_AUTH_TYPE
    try:
        scheme = AuthType(auth_type)
    except ValueError:
        return ""
    return _PREFIXES.get(scheme, "")


def format_auth_header(auth: str, auth_type: str | AuthType | None) -> str:
    """Return the complete ``authorization`` header value for ``auth``."""

    return f"{auth_prefix(auth_type)}{auth}"


__all__ = [
    "AUTHORIZATION_HEADER",
    "AuthType",
    "DEFAULT_AUTH_TYPE",
    "auth_prefix",
    "format_auth_header",
]
