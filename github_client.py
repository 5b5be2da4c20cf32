"""GitHub API client for posting buf lint reviews."""

import functools
import logging

import requests.exceptions
from github import Auth, Github
from github.GithubException import GithubException

from config import validate_repo, with_retry
from models import ReviewSubmission

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"


class GitHubDeliveryError(ValueError):
    """Raised when a review could not be posted."""


def _error_message(e: GithubException) -> str:
    data = e.data if isinstance(e.data, dict) else {}
    return data.get("message", str(e))


# ---------------------------------------------------------------------------
# Cached GitHub client
# ---------------------------------------------------------------------------
@functools.lru_cache(maxsize=4)
def get_github_client(token: str, base_url: str | None = None) -> Github:
    """Create or return a cached GitHub client for *token*."""
    if not token:
        raise ValueError("a Github authentication token string was not provided")
    return Github(auth=Auth.Token(token), base_url=base_url or DEFAULT_API_URL)


# ---------------------------------------------------------------------------
# Write operations
# ---------------------------------------------------------------------------
@with_retry(
    max_retries=3,
    base_delay=1.0,
    retryable=(
        requests.exceptions.ConnectionError,
        requests.exceptions.Timeout,
    ),
)
def post_review(
    token: str,
    repo: str,
    pr_number: int,
    review: ReviewSubmission,
    *,
    base_url: str | None = None,
) -> int:
    """
    Post a review with in-line comments to a PR.

    Args:
        token: GitHub token with pull-request write access
        repo: Repository in "owner/repo" format
        pr_number: Pull request number
        review: ReviewSubmission with body, event type, and comments
        base_url: API root, for GitHub Enterprise

    Returns:
        Review ID

    Raises:
        GitHubDeliveryError: If posting fails
    """
    repo = validate_repo(repo)
    client = get_github_client(token, base_url)

    try:
        repository = client.get_repo(repo)
        pr = repository.get_pull(pr_number)

        # The review API needs the latest commit
        commit = pr.get_commits().reversed[0]

        comments_payload = [comment.to_payload() for comment in review.comments]

        github_review = pr.create_review(
            commit=commit,
            body=review.body,
            event=review.event,
            comments=comments_payload,
        )

        logger.info(
            "Posted review %d on PR #%d with %d comments",
            github_review.id,
            pr_number,
            len(comments_payload),
        )
        return github_review.id

    except GithubException as e:
        error_msg = _error_message(e)
        logger.error("Failed to post review: %s", error_msg)

        if isinstance(e.data, dict) and "errors" in e.data:
            for error in e.data["errors"]:
                logger.error("  - %s", error)

        raise GitHubDeliveryError(f"Failed to post review: {error_msg}") from e
