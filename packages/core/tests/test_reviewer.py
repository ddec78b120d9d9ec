"""Tests for the Reviewer aggregator."""

from unittest.mock import MagicMock

import pytest

from further_review_core.config import DEFAULT_CONFIG
from further_review_core.errors import ReviewRuleError
from further_review_core.models import Comment, PullRequest, ReviewRule, RuleResult
from further_review_core.reviewer import (
    Reviewer,
    build_mention_comment,
    describe_results,
    evaluate_rules,
)

SELF_LOGIN = "further-review"
PR = PullRequest(owner="paultyng", repo="further-review", number=32, sha="abcd1234")


@pytest.fixture
def github():
    gh = MagicMock()
    gh.get_current_user.return_value = SELF_LOGIN
    gh.get_issue_comments.return_value = [
        Comment("visitor1", "wut?"),
        Comment("signoff1", "LGTM"),
    ]
    gh.get_pull_request_files.return_value = ["file1.js", "file2.js"]
    return gh


def _provider_returning(*rules):
    class _TestProvider:
        def __init__(self, github, options):
            self.options = options

        def get_reviews(self, owner, repo, sha):
            return list(rules)

    return _TestProvider


def _reviewer(github, *rules, **config):
    cfg = {"review": {"test_provider": True}, **config}
    return Reviewer(github, config=cfg, providers={"test_provider": _provider_returning(*rules)})


def _states(github):
    return [c.kwargs["state"] for c in github.create_status.call_args_list]


class TestUpdateStatus:
    def test_posts_with_fixed_context_and_null_target_url(self, github):
        Reviewer(github).update_status("paultyng", "further-review", "abcd1234", "pending", "Test Description")

        github.create_status.assert_called_once_with(
            owner="paultyng",
            repo="further-review",
            sha="abcd1234",
            state="pending",
            description="Test Description",
            context="Further Review",
            target_url=None,
        )

    def test_custom_context(self, github):
        Reviewer(github, config={"status_context": "Sign-offs"}).update_status("o", "r", "sha", "success", "ok")
        assert github.create_status.call_args.kwargs["context"] == "Sign-offs"

    def test_truncates_long_descriptions(self, github):
        Reviewer(github).update_status("o", "r", "sha", "failure", "x" * 300)
        description = github.create_status.call_args.kwargs["description"]
        assert len(description) == 140
        assert description.endswith("...")

    def test_propagates_client_errors(self, github):
        github.create_status.side_effect = RuntimeError("502")
        with pytest.raises(RuntimeError):
            Reviewer(github).update_status("o", "r", "sha", "pending", "x")

    def test_shadow_mode_does_not_post(self, github):
        Reviewer(github, shadow=True).update_status("o", "r", "sha", "pending", "x")
        github.create_status.assert_not_called()


class TestProcessReviews:
    def test_simple_success(self, github):
        outcome = _reviewer(github, ReviewRule(name="Test Review", logins=("signoff1",))).process_reviews(PR)

        assert _states(github) == ["pending", "success"]
        assert outcome.state == "success"
        github.create_comment.assert_not_called()

    def test_mentions(self, github):
        rule = ReviewRule(name="Test Review", logins=("mention1", "mention2"))
        outcome = _reviewer(github, rule).process_reviews(PR)

        assert _states(github) == ["pending", "failure"]
        github.create_comment.assert_called_once()
        kwargs = github.create_comment.call_args.kwargs
        assert kwargs["owner"] == "paultyng"
        assert kwargs["repo"] == "further-review"
        assert kwargs["number"] == 32
        assert "@mention1" in kwargs["body"]
        assert "@mention2" in kwargs["body"]
        assert "Test Review" in kwargs["body"]
        assert outcome.comment_body == kwargs["body"]

    def test_rerun_does_not_repeat_mentions(self, github):
        rule = ReviewRule(name="Test Review", logins=("mention1", "mention2"))
        _reviewer(github, rule).process_reviews(PR)
        first_body = github.create_comment.call_args.kwargs["body"]

        github.get_issue_comments.return_value = github.get_issue_comments.return_value + [
            Comment(SELF_LOGIN, first_body)
        ]
        github.reset_mock(return_value=False)
        outcome = _reviewer(github, rule).process_reviews(PR)

        assert _states(github) == ["pending", "failure"]
        github.create_comment.assert_not_called()
        assert outcome.mentioned == ["mention1", "mention2"]
        assert outcome.comment_body is None

    def test_only_new_logins_are_mentioned(self, github):
        github.get_issue_comments.return_value = [Comment(SELF_LOGIN, "waiting on @mention1")]
        _reviewer(github, ReviewRule(name="Docs", logins=("mention1", "mention2"))).process_reviews(PR)

        body = github.create_comment.call_args.kwargs["body"]
        assert "@mention2" in body
        assert "@mention1" not in body
        assert "`mention1`" in body

    def test_sign_off_from_unlisted_login_does_not_count(self, github):
        _reviewer(github, ReviewRule(name="Owners", logins=("owner1",))).process_reviews(PR)
        assert _states(github) == ["pending", "failure"]

    def test_own_lgtm_does_not_count(self, github):
        github.get_issue_comments.return_value = [Comment(SELF_LOGIN, "LGTM")]
        _reviewer(github, ReviewRule(name="Self", logins=(SELF_LOGIN,))).process_reviews(PR)
        assert _states(github) == ["pending", "failure"]

    def test_unmatched_rule_is_ignored(self, github):
        rule = ReviewRule(name="Schema", logins=("owner1",), glob="schema/**")
        outcome = _reviewer(github, rule).process_reviews(PR)

        assert _states(github) == ["pending", "success"]
        assert outcome.description == "No additional reviews required"

    def test_no_changed_files_succeeds(self, github):
        github.get_pull_request_files.return_value = []
        _reviewer(github, ReviewRule(name="Any", logins=("owner1",))).process_reviews(PR)
        assert _states(github) == ["pending", "success"]

    def test_required_zero_always_satisfied(self, github):
        _reviewer(github, ReviewRule(name="FYI", logins=("owner1",), required=0)).process_reviews(PR)
        assert _states(github) == ["pending", "success"]

    def test_no_providers_succeeds(self, github):
        Reviewer(github, config={"review": {}}).process_reviews(PR)
        assert _states(github) == ["pending", "success"]

    def test_bot_login_config_skips_user_lookup(self, github):
        github.get_issue_comments.return_value = [Comment("actions-bot", "LGTM")]
        _reviewer(github, ReviewRule(name="R", logins=("actions-bot",)), bot_login="actions-bot").process_reviews(PR)

        github.get_current_user.assert_not_called()
        assert _states(github) == ["pending", "failure"]

    def test_provider_failure_leaves_pending(self, github):
        class _BrokenProvider:
            def __init__(self, github, options):
                pass

            def get_reviews(self, owner, repo, sha):
                raise ReviewRuleError("bad rules")

        reviewer = Reviewer(github, config={"review": {"broken": True}}, providers={"broken": _BrokenProvider})
        with pytest.raises(ReviewRuleError):
            reviewer.process_reviews(PR)

        assert _states(github) == ["pending"]
        github.create_comment.assert_not_called()

    def test_io_failure_propagates(self, github):
        github.get_issue_comments.side_effect = RuntimeError("timeout")
        with pytest.raises(RuntimeError):
            _reviewer(github, ReviewRule(name="R", logins=("a",))).process_reviews(PR)
        assert _states(github) == ["pending"]

    def test_shadow_mode_posts_nothing(self, github):
        reviewer = Reviewer(
            github,
            config={"review": {"test_provider": True}},
            providers={"test_provider": _provider_returning(ReviewRule(name="R", logins=("mention1",)))},
            shadow=True,
        )
        outcome = reviewer.process_reviews(PR)

        assert outcome.state == "failure"
        assert outcome.comment_body is not None
        github.create_status.assert_not_called()
        github.create_comment.assert_not_called()

    def test_uses_file_provider_by_default(self, github):
        github.get_file_contents.side_effect = lambda owner, repo, sha, path: (
            "reviews:\n  - name: JS\n    logins: [signoff1]\n    glob: '*.js'\n" if path == ".further-review.yml" else None
        )
        outcome = Reviewer(github).process_reviews(PR)

        assert outcome.state == "success"
        assert [r.rule.name for r in outcome.results] == ["JS"]


class TestProviders:
    def test_rules_concatenate_in_config_order(self, github):
        providers = {
            "first": _provider_returning(ReviewRule(name="A", logins=("a",)), ReviewRule(name="B", logins=("b",))),
            "second": _provider_returning(ReviewRule(name="C", logins=("c",))),
        }
        reviewer = Reviewer(github, config={"review": {"second": True, "first": True}}, providers=providers)
        assert [r.name for r in reviewer.load_rules("o", "r", "sha")] == ["C", "A", "B"]

    def test_options_mapping_passed_to_provider(self, github):
        providers = {"p": _provider_returning()}
        reviewer = Reviewer(github, config={"review": {"p": {"file": "x.yml"}}}, providers=providers)
        assert reviewer.get_providers()[0].options == {"file": "x.yml"}

    def test_disabled_provider_skipped(self, github):
        providers = {"p": _provider_returning()}
        assert Reviewer(github, config={"review": {"p": False}}, providers=providers).get_providers() == []

    def test_unknown_provider_raises(self, github):
        with pytest.raises(ValueError, match="Unknown review provider"):
            Reviewer(github, config={"review": {"nope": True}}).get_providers()

    def test_invalid_options_raise(self, github):
        with pytest.raises(ValueError):
            Reviewer(github, config={"review": {"further_review_file": "yes"}}).get_providers()

    def test_default_config_not_shared_between_reviewers(self, github):
        first = Reviewer(github)
        first.config["review"]["further_review_file"] = False
        first.config["sign_off_phrases"].append("ship it")

        second = Reviewer(github)
        assert second.config["review"] == {"further_review_file": True}
        assert second.sign_off_phrases == ["lgtm", ":+1:"]
        assert DEFAULT_CONFIG["review"] == {"further_review_file": True}


class TestEvaluateRules:
    def test_counts_only_listed_sign_offs(self):
        rule = ReviewRule(name="R", logins=("a", "b", "c"), required=2)
        [result] = evaluate_rules([rule], ["x.py"], ["a", "z"])

        assert result.matched is True
        assert result.satisfied is False
        assert result.signed_off == ("a",)
        assert result.outstanding == ("b", "c")
        assert result.missing_count == 1

    def test_satisfied_when_enough_sign_offs(self):
        rule = ReviewRule(name="R", logins=("a", "b", "c"), required=2)
        [result] = evaluate_rules([rule], ["x.py"], ["a", "c"])
        assert result.satisfied is True
        assert result.missing_count == 0

    def test_unmatched_rule_is_satisfied(self):
        [result] = evaluate_rules([ReviewRule(name="R", logins=("a",), glob="*.go")], ["x.py"], [])
        assert result.matched is False
        assert result.satisfied is True
        assert result.missing_count == 0

    def test_root_level_glob_ignores_nested_files(self):
        rule = ReviewRule(name="Deps", logins=("a",), glob="package.json")
        [result] = evaluate_rules([rule], ["examples/app/package.json", "src/index.js"], [])
        assert result.matched is False
        assert result.satisfied is True

    def test_preserves_rule_order(self):
        rules = [ReviewRule(name=n, logins=("a",)) for n in ("z", "a", "m")]
        assert [r.rule.name for r in evaluate_rules(rules, ["f"], [])] == ["z", "a", "m"]


class TestDescribeResults:
    def _result(self, name, matched, satisfied, missing=0):
        return RuleResult(
            rule=ReviewRule(name=name, logins=("a",)), matched=matched, satisfied=satisfied, missing_count=missing
        )

    def test_no_matched_rules(self):
        assert describe_results([self._result("R", False, True)]) == "No additional reviews required"

    def test_all_satisfied(self):
        assert describe_results([self._result("R", True, True)]) == "All 1 required review(s) signed off"

    def test_lists_failed_rules(self):
        results = [self._result("Docs", True, False, 1), self._result("API", True, False, 2)]
        assert describe_results(results) == "Awaiting sign-off: Docs (1 more), API (2 more)"


class TestBuildMentionComment:
    def _failed(self, name, outstanding, missing=1):
        return RuleResult(
            rule=ReviewRule(name=name, logins=tuple(outstanding)),
            matched=True,
            satisfied=False,
            outstanding=tuple(outstanding),
            missing_count=missing,
        )

    def test_none_when_everyone_already_mentioned(self):
        assert build_mention_comment([self._failed("R", ["a", "b"])], ["a", "b"]) is None

    def test_shared_login_listed_under_each_rule(self):
        body = build_mention_comment([self._failed("R1", ["a", "b"]), self._failed("R2", ["b", "c"])], [])
        assert body.count("@b") == 2
        assert "`b`" not in body
        assert "@a" in body and "@c" in body

    def test_footer_uses_sign_off_phrase(self):
        body = build_mention_comment([self._failed("R", ["a"])], [], sign_off_phrase="SHIP IT")
        assert "`SHIP IT`" in body
