"""Custom exceptions used across multiple layers.

Rules:
- Only put exceptions here if they need to be raised in one layer and caught in another.
- Keep exceptions simple and focused.
- No I/O, no config loading, no complex logic.

"Not found" is deliberately absent: persistence returns None / zero counts and
services return None / False so callers can tell "absent" from "failed".
"""

from __future__ import annotations


class StorageError(Exception):
    """Backend connectivity, serialization or malformed-filter failure.

    Logged in full server-side, surfaced to clients as a generic 500.
    """


class ContentValidationError(ValueError):
    """Input failed a schema or domain constraint (surfaced as 400)."""


class ConflictError(ContentValidationError):
    """A unique field (artwork slug, user email) is already taken."""


class BuildFailure(Exception):
    """Build toolchain exited non-zero or did not produce the expected output."""


class SwapFailure(Exception):
    """Renaming the new build into the live path failed; the previous site was restored."""


class FatalSwapError(Exception):
    """Swap failed and rollback failed too. The live site may be missing.

    Never swallowed: requires operator intervention.
    """


class ImageProcessingError(Exception):
    """An uploaded image could not be decoded, or its variants could not be written."""
