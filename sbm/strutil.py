from __future__ import annotations

ELLIPSIS = "..."


def contains_ci(haystack: str, needle: str) -> bool:
    """Case-insensitive substring test. An empty needle matches everything."""
    return needle.casefold() in haystack.casefold()


def equals_ci(a: str, b: str) -> bool:
    return a.casefold() == b.casefold()


def truncate(s: str, max_len: int) -> str:
    """Clip ``s`` to ``max_len`` characters, marking the cut with an ellipsis.

    The kept prefix is ``max_len - len(ELLIPSIS)`` characters long, so the
    result is exactly ``max_len`` characters. Limits too short to hold the
    marker get a plain cut.
    """
    if len(s) <= max_len:
        return s
    if max_len <= len(ELLIPSIS):
        return s[:max_len]
    return s[: max_len - len(ELLIPSIS)] + ELLIPSIS


def is_digits(token: str) -> bool:
    # str.isdigit() also accepts superscripts and other non-ASCII digits.
    return bool(token) and token.isascii() and token.isdigit()
