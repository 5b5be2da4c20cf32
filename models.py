"""Data models for buf lint results and GitHub review comments."""

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field

# GitHub places comments on the RIGHT side (latest version) of the diff.
RIGHT_SIDE = "RIGHT"


class FileAnnotation(BaseModel):
    """A single buf FileAnnotation, decoded from one JSON line."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    type: str | None = Field(default=None, description="Lint rule, e.g. PACKAGE_DEFINED")
    message: str = Field(description="What is wrong")
    path: str | None = Field(default=None, description="File the annotation refers to")
    start_line: int | None = None
    end_line: int | None = None
    start_column: int | None = None
    end_column: int | None = None

    @property
    def is_global(self) -> bool:
        """True when the annotation cannot be attributed to a file."""
        return not self.path


# ---------------------------------------------------------------------------
# Command / lint outcomes
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class CommandOutput:
    """Text produced by a successful (or findings-present) invocation."""

    text: str
    exit_code: int = 0


@dataclass(frozen=True)
class ExecutionFailure:
    """An invocation that could not run or exited with an unknown status."""

    message: str
    command: tuple[str, ...] = ()
    exit_code: int | None = None


@dataclass(frozen=True)
class ParseFailure:
    """A line of structured output that is not a valid file annotation."""

    line: str

    @property
    def message(self) -> str:
        return f'failed to parse "{self.line}" as file annotation'


CommandOutcome = CommandOutput | ExecutionFailure
LintFailure = ExecutionFailure | ParseFailure


@dataclass(frozen=True)
class LintResult:
    """
    Raw and structured output of one `buf lint` run.

    Both are kept so the console shows exactly what users would see on the
    command line, while the annotations drive review comments.
    """

    raw: str
    file_annotations: tuple[FileAnnotation, ...] = ()


# ---------------------------------------------------------------------------
# GitHub review shapes
# ---------------------------------------------------------------------------
@dataclass
class ReviewComment:
    """A comment to post on a line (or line range) in a PR."""

    path: str  # file path (e.g., "proto/foo/v1/foo.proto")
    body: str  # comment text
    line: int | None = None  # last line of the range (new version)
    start_line: int | None = None  # first line, only for multi-line ranges
    side: str = RIGHT_SIDE
    start_side: str = RIGHT_SIDE

    def to_payload(self) -> dict:
        """Return the dict GitHub's review API expects, minus unset lines."""
        payload: dict = {"path": self.path, "body": self.body}
        if self.start_line is not None:
            payload["start_line"] = self.start_line
            payload["start_side"] = self.start_side
        if self.line is not None:
            payload["line"] = self.line
            payload["side"] = self.side
        return payload


@dataclass
class ReviewSubmission:
    """A complete review to submit to a PR."""

    body: str = ""  # overall summary
    event: str = "COMMENT"  # APPROVE, REQUEST_CHANGES, COMMENT
    comments: list[ReviewComment] = field(default_factory=list)
