"""Review rule provider contract.

A provider is any object with a ``get_reviews(owner, repo, sha)`` method that
returns ``ReviewRule`` instances. Providers are constructed by the Reviewer as
``Provider(github, options)`` where ``options`` is the provider's entry from
the ``review`` config section (``{}`` when the entry is just ``true``).

``build_review_rule`` turns one raw mapping from a rules source into a
validated ``ReviewRule`` so every provider applies the same checks.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from further_review_core.errors import LoginParseError, ReviewRuleError
from further_review_core.login import parse_login
from further_review_core.models import DEFAULT_GLOB, DEFAULT_REQUIRED, ReviewRule


@runtime_checkable
class ReviewProvider(Protocol):
    def get_reviews(self, owner: str, repo: str, sha: str) -> list[ReviewRule]:
        """Return the review rules this source defines at ``sha``."""


def build_review_rule(data: Any, source: str = "<rules>") -> ReviewRule:
    """Validate one raw rule mapping and normalize its logins.

    Raises ReviewRuleError when the mapping is malformed, a login cannot be
    parsed, or ``required`` asks for more sign-offs than there are logins
    (a rule like that could never pass).
    """
    if not isinstance(data, dict):
        raise ReviewRuleError(f"{source}: review must be a mapping, got {type(data).__name__}")

    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ReviewRuleError(f"{source}: review is missing a name")

    raw_logins = data.get("logins") or []
    if isinstance(raw_logins, str) or not isinstance(raw_logins, (list, tuple)):
        raise ReviewRuleError(f"{source}: logins for {name!r} must be a list")

    logins: list[str] = []
    for raw in raw_logins:
        # YAML reads an unquoted all-digit login as an int.
        if isinstance(raw, int) and not isinstance(raw, bool):
            raw = str(raw)
        try:
            login = parse_login(raw)
        except LoginParseError as e:
            raise ReviewRuleError(f"{source}: {name!r}: {e}") from e
        if login not in logins:
            logins.append(login)

    glob = data.get("glob", DEFAULT_GLOB)
    if not isinstance(glob, str) or not glob.strip():
        raise ReviewRuleError(f"{source}: glob for {name!r} must be a non-empty string")

    required = data.get("required", DEFAULT_REQUIRED)
    # bool is an int subclass; "required: yes" is a config mistake, not 1.
    if isinstance(required, bool) or not isinstance(required, int) or required < 0:
        raise ReviewRuleError(f"{source}: required for {name!r} must be a non-negative integer")
    if required > len(logins):
        raise ReviewRuleError(
            f"{source}: {name!r} requires {required} sign-off(s) but lists only {len(logins)} login(s)"
        )

    return ReviewRule(name=name.strip(), logins=tuple(logins), glob=glob.strip(), required=required)
