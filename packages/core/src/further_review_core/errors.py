"""Exception types raised by the review evaluation core."""

from __future__ import annotations


class FurtherReviewError(Exception):
    """Base class for errors that abort a single evaluation."""


class LoginParseError(FurtherReviewError, ValueError):
    """An identity string did not match any supported login format."""


class ReviewRuleError(FurtherReviewError, ValueError):
    """A rules source could not be parsed or contained an invalid rule."""
