"""Readable branch name suggestions from PR titles."""

import re
from typing import Optional

NO_TITLE_FALLBACK = "no-title-found"

# Common English stop words, dropped when slugging a title.
STOP_WORDS = (
    "i", "me", "my", "myself", "we", "our", "ours", "ourselves",
    "you", "your", "yours", "yourself", "yourselves", "he", "him", "his", "himself",
    "she", "her", "hers", "herself", "it", "its", "itself", "they", "them",
    "their", "theirs", "themselves", "what", "which", "who", "whom", "this", "that",
    "these", "those", "am", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "having", "do", "does", "did", "doing", "a", "an", "the",
    "and", "but", "if", "or", "because", "as", "until", "while", "of", "at", "by", "for",
    "with", "about", "against", "between", "into", "through", "during", "before", "after",
    "above", "below", "to", "from", "up", "down", "in", "out", "on", "off", "over", "under",
    "again", "further", "then", "once", "here", "there", "when", "where", "why", "how",
    "all", "any", "both", "each", "few", "more", "most", "other", "some", "such",
    "no", "nor", "not", "only", "own", "same", "so", "than", "too", "very",
    "'s", "'t", "can", "will", "just", "don", "should", "now",
)

# Characters git refuses in ref names.
_UNSAFE_REF_CHARS = re.compile(r"[~^:?*\[\]\\]")

_STOP_WORD_PATTERNS = [
    re.compile(r"\b" + re.escape(word) + r"\b", re.IGNORECASE) for word in STOP_WORDS
]


def remove_stop_words(text: str) -> str:
    """Lower-case text and strip every whole-word stop word from it."""
    text = text.lower()
    for pattern in _STOP_WORD_PATTERNS:
        text = pattern.sub("", text)
    return text


def suggest_branch_name(title: Optional[str]) -> str:
    """Turn a PR title into a hyphenated slug.

    >>> suggest_branch_name("Fix the bug in the login flow")
    'fix-bug-login-flow'
    >>> suggest_branch_name(None)
    'no-title-found'
    """
    if not title:
        return NO_TITLE_FALLBACK
    text = _UNSAFE_REF_CHARS.sub("", remove_stop_words(title))
    slug = re.sub(r"\s+", "-", text.strip())
    return slug.strip("-") or NO_TITLE_FALLBACK
