"""Tests for the review orchestration: run_review and its helpers."""

from unittest.mock import MagicMock

import pytest

from prsuggest_core.exceptions import SuggestionError
from prsuggest_core.models import CandidateSuggestion, CommentRecord
from prsuggest_core.reviewer import (
    ReviewSummary,
    _get_suggester,
    get_model_name,
    print_shadow_comments,
    run_review,
)

DIFF = """\
diff --git a/src/app.py b/src/app.py
--- a/src/app.py
+++ b/src/app.py
@@ -10,2 +10,2 @@
-foo
+bar
 baz
diff --git a/dist/bundle.js b/dist/bundle.js
--- a/dist/bundle.js
+++ b/dist/bundle.js
@@ -1 +1 @@
-a
+b
"""


def _base_config(**overrides):
    config = {
        "github_token": "tok",
        "platform": "openai",
        "model_name": "",
        "openai_api_key": "key",
        "anthropic_api_key": None,
        "rules": "",
        "files_to_ignore": [],
        "delete_existing_reviews": False,
        "deletion_delay": 0,
        "review_draft_prs": False,
    }
    config.update(overrides)
    return config


def _setup(mocker, candidates=None, draft=False):
    mock_pr = MagicMock()
    mock_pr.draft = draft
    mock_pr.head.sha = "a" * 40
    mock_pr.body = "Renames foo"
    mocker.patch("prsuggest_core.reviewer.get_pull", return_value=mock_pr)
    mocker.patch("prsuggest_core.reviewer.get_diff", return_value=DIFF)

    suggester = MagicMock()
    suggester.suggest.return_value = candidates or []
    return mock_pr, suggester


class TestRunReview:
    def test_posts_only_anchored_comments_in_one_review(self, mocker):
        candidates = [
            CandidateSuggestion("src/app.py", 10, "use baz instead"),
            CandidateSuggestion("src/app.py", 99, "not in diff"),
            CandidateSuggestion("src/app.py", 10, None),
        ]
        mock_pr, suggester = _setup(mocker, candidates)

        summary = run_review("owner/repo", 1, _base_config(), auto_confirm=True, repo_obj=MagicMock(), suggester=suggester)

        mock_pr.create_review.assert_called_once_with(
            body="Code Review by gpt-4o",
            event="COMMENT",
            comments=[{"path": "src/app.py", "line": 10, "body": "use baz instead"}],
        )
        assert summary.posted is True
        assert summary.candidates == 3
        assert summary.dropped_candidates == 2
        assert summary.change_records == 2

    def test_passes_rules_and_description_to_suggester(self, mocker):
        _, suggester = _setup(mocker)
        run_review(
            "owner/repo", 1, _base_config(rules="be strict"), auto_confirm=True, repo_obj=MagicMock(), suggester=suggester
        )
        kwargs = suggester.suggest.call_args.kwargs
        assert kwargs["rules"] == "be strict"
        assert kwargs["description"] == "Renames foo"

    def test_ignored_files_are_not_sent_or_anchored(self, mocker):
        candidates = [CandidateSuggestion("dist/bundle.js", 1, "minified")]
        mock_pr, suggester = _setup(mocker, candidates)

        summary = run_review(
            "owner/repo",
            1,
            _base_config(files_to_ignore=["dist/**"]),
            auto_confirm=True,
            repo_obj=MagicMock(),
            suggester=suggester,
        )

        sent = suggester.suggest.call_args.args[0]
        assert {r.path for r in sent} == {"src/app.py"}
        assert summary.ignored_records == 1
        mock_pr.create_review.assert_not_called()

    def test_everything_ignored_skips_generator(self, mocker):
        mock_pr, suggester = _setup(mocker)
        summary = run_review(
            "owner/repo", 1, _base_config(files_to_ignore=["**"]), auto_confirm=True, repo_obj=MagicMock(), suggester=suggester
        )
        suggester.suggest.assert_not_called()
        assert summary.change_records == 0
        mock_pr.create_review.assert_not_called()

    def test_no_suggestions_posts_nothing(self, mocker):
        mock_pr, suggester = _setup(mocker, candidates=[])
        summary = run_review("owner/repo", 1, _base_config(), auto_confirm=True, repo_obj=MagicMock(), suggester=suggester)
        assert isinstance(summary, ReviewSummary)
        assert summary.posted is False
        mock_pr.create_review.assert_not_called()

    def test_shadow_mode_does_not_post_or_delete(self, mocker):
        mock_pr, suggester = _setup(mocker, [CandidateSuggestion("src/app.py", 10, "x")])
        delete = mocker.patch("prsuggest_core.reviewer.delete_bot_comments")

        summary = run_review(
            "owner/repo",
            1,
            _base_config(delete_existing_reviews=True),
            shadow=True,
            repo_obj=MagicMock(),
            suggester=suggester,
        )

        mock_pr.create_review.assert_not_called()
        delete.assert_not_called()
        assert summary.comments == [{"path": "src/app.py", "line": 10, "body": "x"}]

    def test_deletes_existing_bot_comments_first(self, mocker):
        mock_pr, suggester = _setup(mocker)
        delete = mocker.patch("prsuggest_core.reviewer.delete_bot_comments", return_value=4)

        summary = run_review(
            "owner/repo",
            1,
            _base_config(delete_existing_reviews=True, deletion_delay=1.5),
            auto_confirm=True,
            repo_obj=MagicMock(),
            suggester=suggester,
        )

        delete.assert_called_once_with(mock_pr, delay=1.5)
        assert summary.deleted_comments == 4

    def test_skips_draft_pr(self, mocker):
        mock_pr, suggester = _setup(mocker, draft=True)
        assert run_review("owner/repo", 1, _base_config(), repo_obj=MagicMock(), suggester=suggester) is None
        suggester.suggest.assert_not_called()

    def test_reviews_draft_when_enabled(self, mocker):
        mock_pr, suggester = _setup(mocker, draft=True)
        summary = run_review(
            "owner/repo", 1, _base_config(review_draft_prs=True), auto_confirm=True, repo_obj=MagicMock(), suggester=suggester
        )
        assert summary is not None
        suggester.suggest.assert_called_once()

    def test_declined_confirmation_skips_post(self, mocker):
        mock_pr, suggester = _setup(mocker, [CandidateSuggestion("src/app.py", 10, "x")])
        mocker.patch("builtins.input", return_value="n")
        assert run_review("owner/repo", 1, _base_config(), repo_obj=MagicMock(), suggester=suggester) is None
        mock_pr.create_review.assert_not_called()

    def test_custom_model_name_in_review_body(self, mocker):
        mock_pr, suggester = _setup(mocker, [CandidateSuggestion("src/app.py", 10, "x")])
        run_review(
            "owner/repo", 1, _base_config(model_name="gpt-4o-mini"), auto_confirm=True, repo_obj=MagicMock(), suggester=suggester
        )
        assert mock_pr.create_review.call_args.kwargs["body"] == "Code Review by gpt-4o-mini"

    def test_pr_not_found_raises_value_error(self, mocker):
        from github import GithubException

        mocker.patch("prsuggest_core.reviewer.get_pull", side_effect=GithubException(404, "Not Found"))
        with pytest.raises(ValueError, match="not found"):
            run_review("owner/repo", 999, _base_config(), repo_obj=MagicMock())

    def test_suggestion_failure_propagates(self, mocker):
        mock_pr, suggester = _setup(mocker)
        suggester.suggest.side_effect = SuggestionError("Could not generate suggestions: boom")
        with pytest.raises(SuggestionError):
            run_review("owner/repo", 1, _base_config(), auto_confirm=True, repo_obj=MagicMock(), suggester=suggester)
        mock_pr.create_review.assert_not_called()

    def test_builds_suggester_from_config_when_not_given(self, mocker):
        _setup(mocker)
        built = MagicMock()
        built.suggest.return_value = []
        factory = mocker.patch("prsuggest_core.reviewer._get_suggester", return_value=built)
        run_review("owner/repo", 1, _base_config(), auto_confirm=True, repo_obj=MagicMock())
        factory.assert_called_once()
        built.suggest.assert_called_once()


class TestGetSuggester:
    def test_returns_openai_suggester(self, mocker):
        mock_cls = mocker.patch.dict(
            "prsuggest_core.reviewer._SUGGESTERS", {"openai": MagicMock(), "anthropic": MagicMock()}
        )
        _get_suggester({"platform": "openai", "openai_api_key": "oai-key", "model_name": "gpt-4o-mini"})
        mock_cls["openai"].assert_called_once_with(api_key="oai-key", model_name="gpt-4o-mini")

    def test_returns_anthropic_suggester(self, mocker):
        mock_cls = mocker.patch.dict(
            "prsuggest_core.reviewer._SUGGESTERS", {"openai": MagicMock(), "anthropic": MagicMock()}
        )
        _get_suggester({"platform": "anthropic", "anthropic_api_key": "ant-key"})
        mock_cls["anthropic"].assert_called_once_with(api_key="ant-key", model_name="")

    def test_raises_for_unknown_platform(self):
        with pytest.raises(ValueError, match="Unsupported AI platform"):
            _get_suggester({"platform": "gemini"})


class TestGetModelName:
    def test_configured_name_wins(self):
        assert get_model_name({"platform": "openai", "model_name": "o3"}) == "o3"

    def test_platform_defaults(self):
        assert get_model_name({"platform": "openai", "model_name": ""}) == "gpt-4o"
        assert get_model_name({"platform": "anthropic"}) == "claude-sonnet-4-20250514"


class TestPrintShadowComments:
    def test_no_comments_prints_message(self, mocker):
        mock_print = mocker.patch("prsuggest_core.reviewer.console.print")
        print_shadow_comments([], [])
        printed = " ".join(str(a) for call in mock_print.call_args_list for a in call.args)
        assert "no comments" in printed.lower()

    def test_prints_each_comment(self, mocker):
        mock_print = mocker.patch("prsuggest_core.reviewer.console.print")
        print_shadow_comments([CommentRecord("foo.py", 5, "rename"), CommentRecord("bar.py", 9, "typo")], [])
        printed = " ".join(str(a) for call in mock_print.call_args_list for a in call.args)
        assert "foo.py" in printed
        assert "bar.py" in printed
        assert "2 comment" in printed
