"""Extract sign-offs and prior mentions from pull request comments."""

from __future__ import annotations

import re
from typing import Iterable, Sequence

from further_review_core.models import Comment

DEFAULT_SIGN_OFF_PHRASES: tuple[str, ...] = ("lgtm", ":+1:")

# "@" not preceded by a word character, so e-mail addresses are not mentions.
_MENTION_RE = re.compile(r"(?<![\w@])@([\w-]+)")


def is_sign_off(text: str, phrases: Sequence[str] = DEFAULT_SIGN_OFF_PHRASES) -> bool:
    lowered = (text or "").lower()
    return any(phrase.lower() in lowered for phrase in phrases)


def get_sign_offs(
    comments: Iterable[Comment],
    self_login: str,
    phrases: Sequence[str] = DEFAULT_SIGN_OFF_PHRASES,
) -> list[str]:
    """Return the sorted, de-duplicated logins of everyone who approved.

    Comments written by the bot itself never count, even when they quote an
    approval phrase.
    """
    own = self_login.lower()
    sign_offs = set()
    for comment in comments:
        author = comment.author.lower()
        if author == own:
            continue
        if is_sign_off(comment.text, phrases):
            sign_offs.add(author)
    return sorted(sign_offs)


def get_mentions(comments: Iterable[Comment], self_login: str) -> list[str]:
    """Return every login the bot has already @-mentioned, sorted and de-duplicated."""
    own = self_login.lower()
    mentions = set()
    for comment in comments:
        if comment.author.lower() != own:
            continue
        mentions.update(token.lower() for token in _MENTION_RE.findall(comment.text or ""))
    return sorted(mentions)
