"""Numeric public identifiers derived from backend-native ids.

Both storage backends expose a native identifier that callers must never see
in its raw form: the embedded store uses 16-character alphanumeric keys, the
networked store uses 12-byte ObjectIds. Clients address records with a single
positive integer instead, computed by folding the native id's string form into
a 32-bit accumulator (h = h * 31 + unit, wrapped to int32) and taking the
absolute value.

The fold runs over UTF-16 code units so ids match the ones already handed out
to the browser client, which computes the same value.
"""

from __future__ import annotations

_INT32 = 0xFFFFFFFF
_SIGN = 0x80000000


def numeric_id(native_id: object) -> int:
    """Derive the public numeric id for a native identifier.

    Args:
        native_id: Native key (str) or any object whose str() is the key,
            e.g. a bson ObjectId

    Returns:
        Integer in [0, 2**31]
    """
    text = str(native_id)
    units = text.encode("utf-16-le")
    acc = 0
    for i in range(0, len(units), 2):
        unit = units[i] | (units[i + 1] << 8)
        acc = (acc * 31 + unit) & _INT32
    if acc & _SIGN:
        acc -= 1 << 32
    return abs(acc)


def parse_public_id(value: str | int) -> int | None:
    """Parse a path parameter into a public id; None when it is not an integer."""
    if isinstance(value, int):
        return value if value >= 0 else None
    text = value.strip()
    if not (text.isascii() and text.isdigit()):
        return None
    return int(text)
