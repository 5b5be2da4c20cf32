"""Map buf FileAnnotations to GitHub review comments and console annotations."""

from collections.abc import Iterable

from models import FileAnnotation, ReviewComment, ReviewSubmission

# Prefix for in-line comments so it's clear they come from buf.
BUF_MESSAGE_PREFIX = "buf-lint: "

# GitHub requires a review body.
DEFAULT_REVIEW_BODY = "buf-lint: Please resolve all failures to proceed."


def _positive(value: int | None) -> int | None:
    if value is not None and value > 0:
        return value
    return None


def to_comment(annotation: FileAnnotation) -> ReviewComment:
    """Map a file-scoped FileAnnotation into a GitHub review comment."""
    start = _positive(annotation.start_line)
    end = _positive(annotation.end_line)

    # GitHub rejects a start_line equal to line, so single-line
    # annotations only set line.
    start_line = start if start is not None and end is not None and end > start else None

    line = end
    if line is None and start_line is None:
        # Annotations such as a missing package declaration carry no
        # location; they go on the first line of the file.
        line = 1

    return ReviewComment(
        path=annotation.path or "",
        body=BUF_MESSAGE_PREFIX + annotation.message,
        line=line,
        start_line=start_line,
    )


def _labelled(annotation: FileAnnotation) -> str:
    if annotation.type:
        return f"{annotation.type}: {annotation.message}"
    return annotation.message


def build_review_body(annotations: Iterable[FileAnnotation]) -> str:
    """Fold global (path-less) annotations into the top-level review body."""
    review_comments = [_labelled(a) for a in annotations if a.is_global]
    if not review_comments:
        return DEFAULT_REVIEW_BODY
    return "\n".join([DEFAULT_REVIEW_BODY, *review_comments])


def build_review(annotations: Iterable[FileAnnotation]) -> ReviewSubmission:
    """Build a review with one in-line comment per file-scoped annotation."""
    annotations = list(annotations)
    return ReviewSubmission(
        body=build_review_body(annotations),
        event="COMMENT",
        comments=[to_comment(a) for a in annotations if not a.is_global],
    )


# ---------------------------------------------------------------------------
# Workflow command annotations
# ---------------------------------------------------------------------------
def escape_data(value: str) -> str:
    """Escape text for the message part of a workflow command."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _escape_property(value: str) -> str:
    return escape_data(value).replace(":", "%3A").replace(",", "%2C")


def to_console_annotation(annotation: FileAnnotation) -> str:
    """
    Render an annotation as an Actions ``::error`` workflow command.

    e.g. ``::error file=a.proto,line=3,col=1::Package name "foo" should be suffixed``
    """
    properties: list[str] = []
    if not annotation.is_global:
        properties.append(f"file={_escape_property(annotation.path or '')}")
        line = _positive(annotation.start_line) or _positive(annotation.end_line)
        if line is not None:
            properties.append(f"line={line}")
        column = _positive(annotation.start_column)
        if column is not None:
            properties.append(f"col={column}")
        message = annotation.message
    else:
        message = _labelled(annotation)

    prefix = "::error " + ",".join(properties) if properties else "::error"
    return f"{prefix}::{escape_data(message)}"
