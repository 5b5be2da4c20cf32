"""Run external commands and classify their exit status."""

import logging
import shlex
import shutil

# Bandit: subprocess usage is intentional; commands are argument lists built
# from the buf binary path and never go through a shell.
import subprocess  # nosec B404
from collections.abc import Mapping, Sequence
from pathlib import Path

from models import CommandOutcome, CommandOutput, ExecutionFailure

logger = logging.getLogger(__name__)

# buf exits with 100 when it ran successfully and found file annotations.
FILE_ANNOTATIONS_EXIT_CODE = 100

SUCCESS_EXIT_CODES: frozenset[int] = frozenset({0, FILE_ANNOTATIONS_EXIT_CODE})


def _normalize_args(args: Sequence[str]) -> list[str]:
    if not args:
        msg = "command requires at least one argument"
        raise ValueError(msg)

    head, *rest = args
    head_path = Path(head)
    if head_path.is_absolute():
        return [str(head_path), *rest]

    resolved = shutil.which(head)
    if resolved is None:
        msg = f"Executable '{head}' was not found on PATH"
        raise FileNotFoundError(msg)
    return [resolved, *rest]


def run_command(
    args: Sequence[str],
    *,
    env: Mapping[str, str] | None = None,
) -> CommandOutcome:
    """
    Execute *args* synchronously and return its output or a failure.

    Exit status 0 and ``FILE_ANNOTATIONS_EXIT_CODE`` both yield a
    ``CommandOutput`` holding stdout. Any other status yields an
    ``ExecutionFailure`` carrying stderr. Nothing is retried.
    """
    command = tuple(args)
    display = shlex.join(command)

    try:
        normalized = _normalize_args(command)
        logger.debug("Running %s", display)
        completed = subprocess.run(  # nosec B603
            normalized,
            env=dict(env) if env is not None else None,
            check=False,
            capture_output=True,
            text=True,
        )
    except (OSError, ValueError) as e:
        logger.debug("Could not start %s: %s", display, e)
        return ExecutionFailure(
            message=f"failed to run command: {display}",
            command=command,
        )

    if completed.returncode in SUCCESS_EXIT_CODES:
        logger.debug("%s exited with status %d", display, completed.returncode)
        return CommandOutput(text=completed.stdout or "", exit_code=completed.returncode)

    stderr = (completed.stderr or "").strip()
    logger.debug("%s failed with status %d", display, completed.returncode)
    return ExecutionFailure(
        message=stderr or f"command exited with status {completed.returncode}: {display}",
        command=command,
        exit_code=completed.returncode,
    )
