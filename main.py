"""Entry point for the buf lint GitHub Action."""

import logging
import shutil
import sys

import requests.exceptions

from annotation_parser import schema_for
from buf import lint
from comments import build_review, escape_data, to_console_annotation
from config import BUF_BINARY, ActionConfig, ConfigurationError
from github_client import GitHubDeliveryError, post_review
from models import FileAnnotation, LintResult

logger = logging.getLogger(__name__)

BUF_NOT_INSTALLED = (
    'buf is not installed; please add the "bufbuild/buf-setup-action" step to your job'
)


def set_failed(message: str) -> int:
    """Report *message* as the build failure and return the exit code."""
    # Workflow commands are one line; keep the rest of the output readable.
    first, _, rest = message.partition("\n")
    print(f"::error::{escape_data(first)}")
    if rest:
        print(rest)
    return 1


def print_annotations(annotations: tuple[FileAnnotation, ...]) -> None:
    """Emit one ``::error`` workflow command per annotation."""
    for annotation in annotations:
        print(to_console_annotation(annotation))


def deliver(config: ActionConfig, result: LintResult) -> bool:
    """
    Post the annotations as a PR review, or print them as annotations.

    Returns:
        True if a review was posted
    """
    if config.pull_request is None or config.comment_mode == "never":
        print_annotations(result.file_annotations)
        return False

    review = build_review(result.file_annotations)
    try:
        post_review(
            config.github_token,
            config.repo,
            config.pull_request,
            review,
            base_url=config.api_url,
        )
        return True
    except (GitHubDeliveryError, requests.exceptions.RequestException) as e:
        # Keep going so the raw output still reaches the user.
        logger.info("Failed to write comments in-line: %s", e)
        print_annotations(result.file_annotations)
        return False


def run_lint(config: ActionConfig) -> str | None:
    """
    Run buf lint and deliver the results.

    Returns:
        The build failure message, or None if there is nothing to report
    """
    binary_path = shutil.which(BUF_BINARY)
    if not binary_path:
        return BUF_NOT_INSTALLED

    try:
        schema = schema_for(config.schema)
    except KeyError as e:
        return str(e.args[0])

    result = lint(binary_path, config.input, env=config.subprocess_env(), schema=schema)
    if not isinstance(result, LintResult):
        return result.message

    if not result.file_annotations:
        logger.info("No lint errors were found.")
        return None

    deliver(config, result)

    # Include the raw output so that the console has enough context.
    return f"buf found {len(result.file_annotations)} lint failures.\n{result.raw}"


def main() -> int:
    """Main entry point."""
    try:
        config = ActionConfig.from_env()
        logger.info("Running buf lint on %s for %s", config.input, config.repo)
        message = run_lint(config)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return set_failed(str(e))
    except Exception as e:
        # A missed error must still fail the build, never pass it.
        logger.exception("Unexpected error")
        return set_failed(str(e) or type(e).__name__)

    if message:
        return set_failed(message)
    return 0


if __name__ == "__main__":
    sys.exit(main())
