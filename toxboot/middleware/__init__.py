"""Middleware package — error hierarchy and request ID."""

from toxboot.middleware.error_handler import (
    FetchError,
    NoCandidatesError,
    ParseError,
    ToxBootError,
    UnknownLayoutError,
    register_error_handlers,
)
from toxboot.middleware.request_id import RequestIdMiddleware

__all__ = [
    "FetchError",
    "NoCandidatesError",
    "ParseError",
    "RequestIdMiddleware",
    "ToxBootError",
    "UnknownLayoutError",
    "register_error_handlers",
]
