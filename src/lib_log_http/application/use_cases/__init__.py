"""Use cases composed by the dispatcher."""

from __future__ import annotations

from .build_request import BuildRequest, create_build_request

__all__ = ["BuildRequest", "create_build_request"]
