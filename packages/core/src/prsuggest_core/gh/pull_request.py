from __future__ import annotations

import logging
import time

from github import Github

from prsuggest_core.diff.parser import build_unified_diff
from prsuggest_core.models import CommentRecord

logger = logging.getLogger(__name__)

# Reviews posted from a workflow always come from this account; the name
# cannot be customised, so user type "Bot" is accepted as well.
ACTIONS_BOT_LOGIN = "github-actions[bot]"

DEFAULT_DELETION_DELAY = 1.5


def get_repo(repo_name: str, token: str):
    return Github(token).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def get_pull_requests(repo, state: str = "open"):
    return repo.get_pulls(state=state)


def get_diff(pr) -> str:
    """Return the PR's changes as unified diff text."""
    return build_unified_diff(pr.get_files())


def is_bot_review(review) -> bool:
    user = review.user
    if user is None:
        return False
    return user.login == ACTIONS_BOT_LOGIN or user.type == "Bot"


def find_bot_reviews(pr) -> list:
    return [r for r in pr.get_reviews() if is_bot_review(r)]


def delete_bot_comments(pr, delay: float = DEFAULT_DELETION_DELAY, sleep=time.sleep) -> int:
    """Delete every inline comment left under reviews posted by a bot.

    GitHub rate-limits content-modifying requests, so deletions are spaced
    ``delay`` seconds apart. Returns the number of comments deleted.
    """
    deleted = 0
    for review in find_bot_reviews(pr):
        # Fetch every page before deleting; deletions shift later comments onto earlier pages.
        comments = list(pr.get_single_review_comments(review.id))
        for comment in comments:
            comment.delete()
            deleted += 1
            logger.debug("Deleted review comment %s from review %s", comment.id, review.id)
            if delay > 0:
                sleep(delay)
    return deleted


def publish_review(pr, comments: list[CommentRecord], body: str):
    """Post all comments as a single COMMENT review."""
    return pr.create_review(
        body=body,
        event="COMMENT",
        comments=[c.to_dict() for c in comments],
    )
