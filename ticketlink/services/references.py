"""Ticket reference extraction and link insertion (pure text, no I/O)"""

import re
from typing import Iterable, List, Optional

ISSUE_KEY_RE = re.compile(r"\b[a-zA-Z]+-[0-9]+\b")


def extract_candidates(body: Optional[str], title: Optional[str] = None) -> List[str]:
    """Return every ticket-looking token, body matches first, then title matches.

    Duplicates are kept; deduplication happens during validation.
    """
    candidates = ISSUE_KEY_RE.findall(body or "")
    candidates.extend(ISSUE_KEY_RE.findall(title or ""))
    return candidates


def insert_links(text: str, valid_issues: Iterable[str], base_url: str) -> str:
    """Wrap each whitespace-delimited token mentioning a valid issue in a browse link.

    Returns `text` itself when nothing was rewritten. Otherwise the tokens are
    joined back with single spaces, so tabs/newlines/repeated spaces are lost.
    """
    issues = list(valid_issues)
    if not text or not issues:
        return text

    words = text.split()
    did_replace = False
    for i, word in enumerate(words):
        # "Starts with [" is the whole "already linked" check. Broken or partial
        # links are left alone rather than repaired.
        if word.startswith("["):
            continue
        if not any(issue in word for issue in issues):
            continue
        words[i] = f"[{word}]({base_url}/browse/{word})"
        did_replace = True

    if not did_replace:
        return text
    return " ".join(words)
