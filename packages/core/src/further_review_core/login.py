"""Normalize free-form identity strings to GitHub logins.

Supported formats:

    paultyng
    paultyng <paul@example.com>
    Paul Tyng <paul@example.com> (@paultyng)
    Paul Tyng (@paultyng)

Anything else raises LoginParseError.
"""

from __future__ import annotations

import re

from further_review_core.errors import LoginParseError

_LOGIN = r"(?P<login>[A-Za-z0-9_-]+)"
_EMAIL = r"<[^<>\s]+@[^<>\s]+>"

_HANDLE_RE = re.compile(rf"^(?:[^<>()@]+?\s*)?(?:{_EMAIL}\s*)?\(@{_LOGIN}\)$")
_EMAIL_RE = re.compile(rf"^{_LOGIN}\s*{_EMAIL}$")
_BARE_RE = re.compile(rf"^@?{_LOGIN}$")

# Most specific first: a "(@handle)" suffix wins over a leading token.
_FORMATS = (_HANDLE_RE, _EMAIL_RE, _BARE_RE)


def parse_login(identity: str) -> str:
    if not isinstance(identity, str):
        raise LoginParseError(f"Login must be a string, got {type(identity).__name__}: {identity!r}")

    text = identity.strip()
    for pattern in _FORMATS:
        match = pattern.match(text)
        if match:
            return match.group("login").lower()

    raise LoginParseError(f"Unrecognized login format: {identity!r}")
