"""Token estimation and slug helpers shared by the crawler and chunker.

Token counts are approximated from character length (1 token ≈ 4 characters
of English text), which is accurate enough for sizing retrieval chunks without
loading a tokenizer.
"""

import math
import re

CHARS_PER_TOKEN = 4

_SLUG_INVALID = re.compile(r"[^a-z0-9]+")


def estimate_tokens(text: str) -> int:
    """Estimate the token count of a piece of text.

    Args:
        text: Text to measure

    Returns:
        Ceiling of len(text) / 4, 0 for empty text

    Examples:
        >>> estimate_tokens("abcd")
        1
        >>> estimate_tokens("abcde")
        2
    """
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def slugify(text: str) -> str:
    """Make a URL-safe slug from a string.

    Lowercases the text, collapses every run of non-alphanumeric characters
    into a single hyphen and trims leading/trailing hyphens.

    Examples:
        >>> slugify("Getting Started: OAuth 2.0")
        'getting-started-oauth-2-0'
    """
    return _SLUG_INVALID.sub("-", text.lower()).strip("-")
