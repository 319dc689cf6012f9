"""Helper utilities for the typing practice application.

This package contains small utilities shared across the client-side engine
and the backend service.
"""

from .debug_util import DebugUtil  # noqa: F401
