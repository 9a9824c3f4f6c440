# ABOUTME: Builds the sort/search keys stored in the *_key columns.
# ABOUTME: Strips articles and punctuation so "The Beatles" sorts under B.

import re

UNKNOWN_STRING = "<unknown>"
SORT_FIRST = "\x01"

_LEADING_ARTICLES = ("the ", "an ", "a ")
_TRAILING_ARTICLES = (", the", ",the", ", an", ",an", ", a", ",a")
_PUNCTUATION_RE = re.compile(r"[\[\]()\"'.,?!]")


def key_for(name: str | None, lower_case: bool = True) -> str | None:
    """Convert an artist, album or track name into its collation key.

    Args:
        name: The display value. None passes through unchanged.
        lower_case: Fold the key to lower case so sorting ignores case.

    Returns:
        The key string. "<unknown>" maps to a sort-first marker so unknown
        entries group ahead of everything else.
    """
    if name is None:
        return None

    name = name.strip()
    if name == UNKNOWN_STRING:
        return SORT_FIRST

    sort_first = name.startswith(SORT_FIRST)
    if sort_first:
        name = name[len(SORT_FIRST) :].strip()
    if lower_case:
        name = name.lower()

    folded = name.lower()
    for article in _LEADING_ARTICLES:
        if folded.startswith(article):
            name = name[len(article) :]
            break
    folded = name.lower()
    for article in _TRAILING_ARTICLES:
        if folded.endswith(article):
            name = name[: -len(article)]
            break

    name = _PUNCTUATION_RE.sub("", name).strip()
    return f"{SORT_FIRST}{name}" if sort_first else name
