"""Text helpers."""

import regex

_GRAPHEME = regex.compile(r"\X")


def str_len(value: str) -> int:
    """Return the number of extended grapheme clusters in ``value``."""
    return len(_GRAPHEME.findall(value))