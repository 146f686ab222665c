"""Title normalization helpers for comparing artist, album and track names."""

import re
from napster_sync.utils.logger import get_logger


logger = get_logger()

INVALID_TITLE_CHARS = re.compile(r"[^a-zA-Z0-9' ]+")
SPACE_CHARS = re.compile(r"\s+")


def normalize(text: str) -> str:
    """
    Reduce a title to a canonical form for comparison.

    Runs of characters outside ``[a-zA-Z0-9' ]`` are replaced with a single
    space, whitespace runs are collapsed, and the result is lower-cased and
    trimmed. Calling it twice gives the same result as calling it once.

    Args:
        text: Free-text artist, album or track name

    Returns:
        Normalized title
    """
    distilled = INVALID_TITLE_CHARS.sub(" ", text or "")
    distilled = SPACE_CHARS.sub(" ", distilled)
    return distilled.lower().strip()


def remove_suffix_clause(text: str, left_delimiter: str, right_delimiter: str) -> str:
    """
    Remove a clause like "(xyz)" from the very right side of the given string.

    Args:
        text: Title to trim
        left_delimiter: Opening delimiter, e.g. "("
        right_delimiter: Closing delimiter, e.g. ")"

    Returns:
        The title without its trailing clause, or the trimmed title if it
        does not end with a complete clause
    """
    distilled = (text or "").strip()
    if not distilled.endswith(right_delimiter):
        return distilled

    i = distilled.rfind(left_delimiter)
    if i == -1:
        return distilled

    logger.debug(f"Stripping expressions: [{distilled}]")
    return distilled[:i].rstrip()


def simplify(text: str) -> str:
    """Drop one trailing parenthetical clause and then one trailing bracketed clause."""
    distilled = remove_suffix_clause(text, "(", ")")
    distilled = remove_suffix_clause(distilled, "[", "]")
    return distilled


def titles_equal(a: str, b: str, liberal: bool = False) -> bool:
    """
    Compare two titles.

    Strict mode (``liberal=False``) first compares the raw case-insensitive,
    trimmed strings and falls back to comparing their normalized forms (so
    "Live (1999)" and "Live [1999]" are equal). Liberal mode only compares the
    simplified forms, ignoring a trailing qualifier such as " (Remastered)".

    Args:
        a: First title
        b: Second title
        liberal: Whether to ignore trailing parenthetical or bracketed clauses

    Returns:
        True if the titles are considered equal
    """
    a = (a or "").strip().lower()
    b = (b or "").strip().lower()

    if liberal:
        # Remove subexpressions that may indicate that this album is a
        # variation or alternate production rather than the original.
        simplified = simplify(a)
        return bool(simplified) and simplified == simplify(b)

    if a == b:
        return True

    # A title with no ASCII letters or digits normalizes to "", which would
    # equal every other such title.
    normalized = normalize(a)
    return bool(normalized) and normalized == normalize(b)
