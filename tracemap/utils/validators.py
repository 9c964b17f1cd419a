"""
Input validation and masking utilities for TraceMap.
"""

import re

# First character, then everything up to the last "@"
_MASK_RE = re.compile(r"(.)(.*)(?=@)")


def has_email_shape(value: str | None) -> bool:
    """The email path only requires an "@" somewhere in the identifier."""
    return bool(value) and "@" in value


def local_part(email: str) -> str:
    """Lower-cased text before the first "@"."""
    return email.lower().split("@", 1)[0]


def mask_email(email: str) -> str:
    """
    Hide all but the first character of the local part.

    >>> mask_email("alice@example.com")
    'a****@example.com'

    Identifiers with an empty local part or no "@" come back unchanged.
    """
    return _MASK_RE.sub(lambda m: m.group(1) + "*" * len(m.group(2)), email, count=1)
