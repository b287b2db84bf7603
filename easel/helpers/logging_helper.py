"""
Logging helpers for safe error handling and message sanitization.

This module provides utilities to prevent information leakage through
error messages while preserving detailed logging for debugging.
"""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

_CREDENTIALS_RE = re.compile(r"//[^/@\s]*@")


def sanitize_exception_message(e: Exception, safe_message: str = "An error occurred") -> str:
    """
    Sanitize exception message for user display.

    Prevents information leakage (backend type, file paths, stacks) through
    detailed error messages while preserving full details in the log.

    Args:
        e: The exception to sanitize
        safe_message: Generic message to return to users

    Returns:
        Safe error message for user display

    Example:
        >>> try:
        ...     raise StorageError("/srv/data/nedb/artworks.db: permission denied")
        ... except StorageError as e:
        ...     return {"error": sanitize_exception_message(e, "Internal server error")}
    """
    logger.error("[security] Exception sanitized: %s", e, exc_info=e)
    return safe_message


def redact_uri(uri: str) -> str:
    """Hide credentials in a connection string before logging it."""
    return _CREDENTIALS_RE.sub("//<credentials>@", uri)
