"""File glob matching for review rules.

Patterns are shell globs matched against the whole repository-relative path:
``*``, ``?`` and ``[...]`` stay within one path segment, ``**`` spans any number
of directories, and ``{a,b}`` alternation (nested too) is supported. A pattern
with no slash only matches files at the repository root. ``!`` and ``#`` carry
no special meaning outside a character class.
"""

from __future__ import annotations

from typing import Iterable

from wcmatch import glob

# DOTGLOB so the default "**" also covers files like .github/workflows/ci.yml.
GLOB_FLAGS = glob.GLOBSTAR | glob.BRACE | glob.DOTGLOB | glob.FORCEUNIX


def is_glob_match(files: Iterable[str], pattern: str) -> bool:
    """Return True if any path in ``files`` matches ``pattern``."""
    return any(glob.globmatch(path, pattern, flags=GLOB_FLAGS) for path in files)
