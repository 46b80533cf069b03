"""review command — suggest and post inline review comments on a pull request."""

from __future__ import annotations

import click
from rich.console import Console

from prsuggest_core.exceptions import PrSuggestError
from prsuggest_core.gh.pull_request import get_pull_requests, get_repo
from prsuggest_core.reviewer import run_review

console = Console()


@click.command("review")
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option(
    "--pr",
    "pr_number",
    type=int,
    default=None,
    help="Pull request number. Omit to list open PRs interactively.",
)
@click.option(
    "--platform",
    type=click.Choice(["openai", "anthropic"]),
    default=None,
    help="AI platform generating the suggestions. Overrides config file.",
)
@click.option("--model", "model_name", default=None, help="Model name. Defaults to the platform's default model.")
@click.option("--rules", default=None, help="Extra review rules passed to the model.")
@click.option(
    "--files-to-ignore",
    "files_to_ignore",
    default=None,
    help="Comma-separated glob patterns of files to skip. Overrides config file.",
)
@click.option(
    "--delete-existing",
    "delete_existing",
    is_flag=True,
    help="Delete comments left by earlier bot reviews before posting.",
)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompts.")
@click.option(
    "--shadow",
    "-s",
    is_flag=True,
    help="Dry-run mode: print review comments without posting to GitHub.",
)
@click.pass_context
def review_cmd(
    ctx,
    repo: str,
    pr_number: int | None,
    platform: str | None,
    model_name: str | None,
    rules: str | None,
    files_to_ignore: str | None,
    delete_existing: bool,
    yes: bool,
    shadow: bool,
):
    """Review a pull request with OpenAI or Anthropic models.

    Only suggestions that land on lines the diff actually changes are posted,
    all in a single review.

    \b
    Required environment variables:
      GITHUB_TOKEN         GitHub personal access token (or use gh CLI)
      OPENAI_API_KEY       Required when using --platform openai
      ANTHROPIC_API_KEY    Required when using --platform anthropic
    """
    from prsuggest_core.config import api_key_env_var, load_config, resolve_api_key
    from prsuggest_cli.auth import resolve_github_token

    config_path = ctx.obj.get("config_path", ".prsuggest.yml") if ctx.obj else ".prsuggest.yml"
    try:
        config = load_config(
            config_path,
            cli_overrides={
                "platform": platform,
                "model_name": model_name,
                "rules": rules,
                "files_to_ignore": files_to_ignore,
                "delete_existing_reviews": delete_existing or None,
            },
        )
    except ValueError as e:
        raise click.UsageError(str(e))

    token = resolve_github_token()
    if not token:
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )
    config["github_token"] = token

    try:
        if not resolve_api_key(config):
            raise click.UsageError(f"{api_key_env_var(config['platform'])} environment variable is not set.")
    except ValueError as e:
        raise click.UsageError(str(e))

    this_repo = get_repo(repo, token=token)

    if pr_number is None:
        prs = list(get_pull_requests(this_repo))
        if not prs:
            console.print("[yellow]No open pull requests found.[/yellow]")
            return
        console.print("\nOpen pull requests:")
        for pr in prs:
            console.print(f"  [bold]#{pr.number}[/bold]  {pr.title}")
        pr_number = click.prompt("\nEnter the pull request number", type=int)

    try:
        summary = run_review(
            repo=repo,
            pr_number=pr_number,
            config=config,
            auto_confirm=yes,
            shadow=shadow,
            repo_obj=this_repo,
        )
    except (PrSuggestError, ValueError) as e:
        raise click.ClickException(str(e))

    if summary is not None and summary.dropped_candidates:
        console.print(
            f"[dim]{summary.dropped_candidates} suggestion(s) dropped "
            "(empty, or not anchored to a changed line).[/dim]"
        )
