"""Action inputs, credentials and shared utilities for buflint."""

import functools
import json
import logging
import os
import re
import time
from dataclasses import dataclass

from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Environment & logging (initialised once on first import)
# ---------------------------------------------------------------------------
load_dotenv()


def _log_level() -> int:
    if os.getenv("RUNNER_DEBUG") == "1":
        return logging.DEBUG
    name = os.getenv("INPUT_LOG_LEVEL", "INFO").upper()
    return logging.getLevelNamesMapping().get(name, logging.INFO)


logging.basicConfig(
    level=_log_level(),
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
BUF_BINARY: str = "buf"
COMMENT_MODES: tuple[str, ...] = ("auto", "never")

# Repo format: "owner/repo"
_REPO_PATTERN = re.compile(r"^[\w.-]+/[\w.-]+$")


class ConfigurationError(ValueError):
    """Raised when a required action input is missing or invalid."""


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------
def validate_repo(repo: str) -> str:
    """Validate repository string matches 'owner/repo' format.

    Returns *repo* unchanged on success; raises ``ConfigurationError`` otherwise.
    """
    if not _REPO_PATTERN.match(repo):
        raise ConfigurationError(
            f"Invalid repo format: {repo!r}. Expected 'owner/repo' "
            f"(e.g. 'bufbuild/buf')."
        )
    return repo


def _get_input(name: str, fallback_env: str | None = None) -> str:
    """Read an action input the way the Actions runner exposes it."""
    value = os.getenv(f"INPUT_{name.upper()}", "").strip()
    if not value and fallback_env:
        value = os.getenv(fallback_env, "").strip()
    return value


def read_pull_request_number(event_path: str | None) -> int | None:
    """Return ``pull_request.number`` from the event payload, if any."""
    if not event_path or not os.path.isfile(event_path):
        return None
    try:
        with open(event_path, encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read event payload %s: %s", event_path, e)
        return None

    pull_request = payload.get("pull_request") if isinstance(payload, dict) else None
    if not isinstance(pull_request, dict):
        return None

    number = pull_request.get("number")
    if isinstance(number, int) and not isinstance(number, bool):
        return number
    return None


# ---------------------------------------------------------------------------
# Action configuration
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class ActionConfig:
    """Everything the action needs from its surrounding workflow."""

    github_token: str
    input: str
    owner: str
    repository: str
    pull_request: int | None = None
    buf_token: str | None = None
    comment_mode: str = "auto"
    schema: str = "v2"
    api_url: str | None = None

    @property
    def repo(self) -> str:
        return f"{self.owner}/{self.repository}"

    @classmethod
    def from_env(cls) -> "ActionConfig":
        """
        Build the configuration from ``INPUT_*`` and ``GITHUB_*`` variables.

        Raises:
            ConfigurationError: If a required value is missing or malformed
        """
        github_token = _get_input("github_token", "GITHUB_TOKEN")
        if not github_token:
            raise ConfigurationError(
                "a Github authentication token string was not provided"
            )
        lint_input = _get_input("input")
        if not lint_input:
            raise ConfigurationError("an input string was not provided")

        owner, _, repository = os.getenv("GITHUB_REPOSITORY", "").partition("/")
        if not owner:
            raise ConfigurationError("an owner string was not provided")
        if not repository:
            raise ConfigurationError("a repository string was not provided")
        validate_repo(f"{owner}/{repository}")

        comment_mode = _get_input("comment_mode").lower() or "auto"
        if comment_mode not in COMMENT_MODES:
            raise ConfigurationError(
                f"Invalid comment_mode: {comment_mode!r}. "
                f"Expected one of {', '.join(COMMENT_MODES)}."
            )

        return cls(
            github_token=github_token,
            input=lint_input,
            owner=owner,
            repository=repository,
            pull_request=read_pull_request_number(os.getenv("GITHUB_EVENT_PATH")),
            buf_token=_get_input("buf_token", "BUF_TOKEN") or None,
            comment_mode=comment_mode,
            schema=_get_input("annotation_schema").lower() or "v2",
            api_url=os.getenv("GITHUB_API_URL") or None,
        )

    def subprocess_env(self) -> dict[str, str]:
        """
        Return the environment for buf invocations.

        This is the only place credentials reach the buf process; the
        current process environment is copied, never modified.
        """
        env = dict(os.environ)
        if self.buf_token:
            env["BUF_TOKEN"] = self.buf_token
        return env


# ---------------------------------------------------------------------------
# Retry decorator
# ---------------------------------------------------------------------------
def with_retry(
    max_retries: int = 3,
    base_delay: float = 1.0,
    retryable: tuple[type[Exception], ...] = (Exception,),
):
    """Decorator: retry a function with exponential back-off."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            last_exc: Exception | None = None
            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)
                except retryable as exc:
                    last_exc = exc
                    if attempt < max_retries - 1:
                        delay = base_delay * (2**attempt)
                        logger.warning(
                            "Attempt %d/%d for %s failed: %s. Retrying in %.1fs...",
                            attempt + 1,
                            max_retries,
                            func.__name__,
                            exc,
                            delay,
                        )
                        time.sleep(delay)
            raise last_exc  # type: ignore[misc]

        return wrapper

    return decorator
