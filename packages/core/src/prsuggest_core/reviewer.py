"""Core PR review orchestration."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from github import GithubException
from rich.console import Console

from prsuggest_core.diff.parser import parse_diff
from prsuggest_core.diff.positions import extract_change_records
from prsuggest_core.gh.pull_request import delete_bot_comments, get_diff, get_pull, get_repo, publish_review
from prsuggest_core.models import ChangeRecord, CommentRecord
from prsuggest_core.providers.anthropic import AnthropicSuggester
from prsuggest_core.providers.openai import OpenAISuggester
from prsuggest_core.reconcile import reconcile
from prsuggest_core.utils.globs import filter_ignored

console = Console()
logger = logging.getLogger(__name__)

_SUGGESTERS = {
    "openai": OpenAISuggester,
    "anthropic": AnthropicSuggester,
}


@dataclass
class ReviewSummary:
    """Result returned by run_review, enough for the CLI to report what happened."""

    repo: str
    pr_number: int
    head_sha: str
    model: str
    posted: bool = False
    deleted_comments: int = 0
    change_records: int = 0
    ignored_records: int = 0
    candidates: int = 0
    dropped_candidates: int = 0
    comments: list[dict] = field(default_factory=list)
    reviewed_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


def _get_suggester(config: dict):
    platform = config.get("platform", "openai")
    if platform not in _SUGGESTERS:
        raise ValueError(f"Unsupported AI platform: {platform!r}. Choose 'openai' or 'anthropic'.")
    return _SUGGESTERS[platform](
        api_key=config.get(f"{platform}_api_key"),
        model_name=config.get("model_name") or "",
    )


def get_model_name(config: dict) -> str:
    """Return the configured model name, or the platform's default when unset."""
    if config.get("model_name"):
        return config["model_name"]
    platform = config.get("platform", "openai")
    if platform not in _SUGGESTERS:
        raise ValueError(f"Unsupported AI platform: {platform!r}. Choose 'openai' or 'anthropic'.")
    return _SUGGESTERS[platform].MODEL


def print_shadow_comments(comments: list[CommentRecord], records: list[ChangeRecord]) -> None:
    """Print review comments to the terminal without posting to GitHub."""
    if not comments:
        console.print("[yellow]Shadow mode: no comments generated.[/yellow]")
        return
    content_by_anchor = {(r.path, r.line): r.content for r in records}
    console.print(f"\n[bold]Shadow review — {len(comments)} comment(s) (not posted)[/bold]\n")
    for c in comments:
        console.print(f"[bold cyan]{c.path}[/bold cyan]  line [bold]{c.line}[/bold]")
        code = content_by_anchor.get((c.path, c.line), "").strip()
        if code:
            console.print(f"  [dim]{code}[/dim]", markup=False)
        console.print(f"  {c.body}", markup=False)
        console.print()


def run_review(
    repo: str,
    pr_number: int,
    config: dict,
    auto_confirm: bool = False,
    shadow: bool = False,
    repo_obj=None,
    suggester=None,
) -> ReviewSummary | None:
    """Run the full review cycle for one pull request.

    Returns None when the PR is skipped (draft) or the user declines to post.
    Raises ValueError when the PR does not exist and SuggestionError when the
    suggestion source fails.
    """
    this_repo = repo_obj if repo_obj is not None else get_repo(repo, token=config["github_token"])

    try:
        this_pr = get_pull(this_repo, pr_number)
    except GithubException:
        raise ValueError(f"PR #{pr_number} not found in {repo}.")

    if this_pr.draft and not config.get("review_draft_prs", False):
        console.print(
            "[yellow]Skipping draft PR. Set review_draft_prs: true in .prsuggest.yml to review drafts.[/yellow]"
        )
        return None

    model_name = get_model_name(config)
    summary = ReviewSummary(repo=repo, pr_number=pr_number, head_sha=this_pr.head.sha, model=model_name)

    if config.get("delete_existing_reviews") and not shadow:
        console.print("Deleting existing comments for all reviews by bot...")
        summary.deleted_comments = delete_bot_comments(this_pr, delay=config.get("deletion_delay", 1.5))
        console.print(f"  {summary.deleted_comments} comment(s) deleted.")
    else:
        logger.debug("Skipping deletion of existing bot review comments")

    console.print(f"Reviewing pull request {repo}#{pr_number}...")
    records = extract_change_records(parse_diff(get_diff(this_pr)))
    reviewable = filter_ignored(records, config.get("files_to_ignore", []))
    summary.change_records = len(reviewable)
    summary.ignored_records = len(records) - len(reviewable)

    if not reviewable:
        console.print("[green]No reviewable changes after applying ignore patterns. Nothing to do.[/green]")
        return summary

    console.print(f"Generating suggestions using model {model_name}...")
    suggester = suggester if suggester is not None else _get_suggester(config)
    candidates = suggester.suggest(reviewable, rules=config.get("rules", ""), description=this_pr.body or "")
    summary.candidates = len(candidates)

    if not candidates:
        console.print("[green]No suggestions found. Code review complete. All good![/green]")
        return summary

    # The generator only saw the reviewable records, so those are the valid anchors.
    comments = reconcile(reviewable, candidates)
    summary.dropped_candidates = len(candidates) - len(comments)
    summary.comments = [c.to_dict() for c in comments]
    if summary.dropped_candidates:
        logger.info("Dropped %d suggestion(s) without a body or outside the diff", summary.dropped_candidates)

    if shadow:
        print_shadow_comments(comments, reviewable)
        console.print(f"[bold]Shadow review complete. {len(comments)} comment(s) would be posted.[/bold]")
        return summary

    if not comments:
        console.print("[green]No suggestions anchored to changed lines. Code review complete. All good![/green]")
        return summary

    if not auto_confirm:
        answer = input(f"Post {len(comments)} comment(s)? (y/n): ").strip().lower()
        if answer != "y":
            return None

    publish_review(this_pr, comments, body=f"Code Review by {model_name}")
    summary.posted = True
    console.print(f"\n[green]Code review complete! {len(comments)} comment(s) posted.[/green]")
    return summary
