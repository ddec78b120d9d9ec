"""Rules read from a YAML file committed to the repository.

Example ``.further-review.yml``::

    reviews:
      - name: Dependencies
        logins:
          - paultyng
          - Jane Doe <jane@example.com> (@janedoe)
        glob: "{package.json,requirements*.txt}"
        required: 1
"""

from __future__ import annotations

import logging

import yaml

from further_review_core.errors import ReviewRuleError
from further_review_core.models import ReviewRule
from further_review_core.providers.base import build_review_rule

logger = logging.getLogger(__name__)

DEFAULT_FILES = ".further-review.yml,.further-review.yaml"


class FurtherReviewFileProvider:
    def __init__(self, github, options: dict | None = None):
        self.github = github
        self.options = options or {}

    def get_file_paths(self) -> list[str]:
        raw = self.options.get("file") or DEFAULT_FILES
        return [path.strip() for path in str(raw).split(",") if path.strip()]

    def get_reviews(self, owner: str, repo: str, sha: str) -> list[ReviewRule]:
        """Load rules from every candidate file present at ``sha``.

        A missing file means "no extra rules" and is not an error; GitHub
        failures other than not-found propagate to the caller.
        """
        rules: list[ReviewRule] = []
        for path in self.get_file_paths():
            contents = self.github.get_file_contents(owner, repo, sha, path)
            if contents is None:
                logger.debug("No rules file %s in %s/%s@%s", path, owner, repo, sha[:7])
                continue
            rules.extend(self.get_reviews_from_file(path, contents))
        return rules

    def get_reviews_from_file(self, path: str, contents: str) -> list[ReviewRule]:
        try:
            data = yaml.safe_load(contents)
        except yaml.YAMLError as e:
            raise ReviewRuleError(f"Could not parse {path}: {e}") from e

        logger.debug("Loaded %s: %r", path, data)

        if not isinstance(data, dict):
            return []
        reviews = data.get("reviews")
        if not isinstance(reviews, list):
            return []

        return [build_review_rule(raw, source=f"{path}[{i}]") for i, raw in enumerate(reviews)]
