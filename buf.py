"""Run `buf lint` and collect both its raw and structured output."""

import logging
import shlex
from collections.abc import Mapping

from annotation_parser import LATEST_SCHEMA, AnnotationSchema, parse_lines, split_output
from models import ExecutionFailure, LintFailure, LintResult, ParseFailure
from runner import run_command

logger = logging.getLogger(__name__)

JSON_ERROR_FORMAT = "--error-format=json"


def lint_command(binary_path: str, lint_input: str, *, json_output: bool = False) -> list[str]:
    """Build the `buf lint` argument list for *lint_input*."""
    args = [binary_path, "lint", *shlex.split(lint_input)]
    if json_output:
        args.append(JSON_ERROR_FORMAT)
    return args


def lint(
    binary_path: str,
    lint_input: str,
    *,
    env: Mapping[str, str] | None = None,
    schema: AnnotationSchema = LATEST_SCHEMA,
) -> LintResult | LintFailure:
    """
    Run `buf lint` on *lint_input*.

    The same command runs twice: once as-is, so the raw text users see on
    the command line is preserved, and once with ``--error-format=json``
    for the structured annotations. The raw output is never rebuilt from
    the annotations since the two would drift apart.

    Returns:
        LintResult on success, otherwise the first ExecutionFailure or
        ParseFailure encountered
    """
    try:
        raw_command = lint_command(binary_path, lint_input)
        json_command = lint_command(binary_path, lint_input, json_output=True)
    except ValueError as e:
        # shlex rejects unbalanced quotes, e.g. "proto/it's"
        logger.debug("Could not split input %r: %s", lint_input, e)
        return ExecutionFailure(
            message=f"failed to run command: {binary_path} lint {lint_input}",
        )

    raw_output = run_command(raw_command, env=env)
    if isinstance(raw_output, ExecutionFailure):
        return raw_output

    json_output = run_command(json_command, env=env)
    if isinstance(json_output, ExecutionFailure):
        return json_output

    file_annotations = parse_lines(split_output(json_output.text), schema)
    if isinstance(file_annotations, ParseFailure):
        return file_annotations

    logger.info("buf reported %d annotation(s)", len(file_annotations))
    return LintResult(raw=raw_output.text, file_annotations=tuple(file_annotations))
