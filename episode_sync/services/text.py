"""Text normalization shared by the matching services."""

import re
from typing import Optional

# Any run of characters that are not letters or digits
_SEPARATOR_RUN = re.compile(r"[\W_]+")


def normalize_text(value: Optional[str]) -> str:
    """Normalize free text for comparison.

    Lower-cases, collapses every run of non-alphanumeric characters (dots,
    dashes, underscores, brackets, whitespace) into a single space and trims.
    ``None`` normalizes to an empty string.
    """
    if not value:
        return ""
    return _SEPARATOR_RUN.sub(" ", value.lower()).strip()


def contains_phrase(haystack: str, needle: str) -> bool:
    """Check that a normalized ``needle`` occurs contiguously in ``haystack``.

    An empty needle never matches.
    """
    if not needle:
        return False
    return needle in haystack
