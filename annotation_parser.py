"""Parser for buf's ``--error-format=json`` output (one object per line)."""

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from pydantic import ValidationError

from models import FileAnnotation, ParseFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnnotationSchema:
    """The minimal set of fields a decoded object needs to be an annotation."""

    name: str
    required_fields: frozenset[str]

    def is_satisfied_by(self, obj: object) -> bool:
        return isinstance(obj, Mapping) and self.required_fields.issubset(obj)


# Early buf releases always emitted "type"; later ones may leave it out.
SCHEMA_V1 = AnnotationSchema("v1", frozenset({"type", "message"}))
SCHEMA_V2 = AnnotationSchema("v2", frozenset({"message"}))
LATEST_SCHEMA = SCHEMA_V2

_SCHEMAS: dict[str, AnnotationSchema] = {
    schema.name: schema for schema in (SCHEMA_V1, SCHEMA_V2)
}


def schema_for(name: str) -> AnnotationSchema:
    """Look up a schema by name; raises ``KeyError`` if unknown."""
    try:
        return _SCHEMAS[name]
    except KeyError:
        raise KeyError(
            f"Unknown annotation schema {name!r}; expected one of {', '.join(_SCHEMAS)}"
        ) from None


def split_output(text: str) -> list[str]:
    """Split command output into its non-empty lines."""
    return [line for line in text.strip().split("\n") if line.strip()]


def parse_line(line: str, schema: AnnotationSchema = LATEST_SCHEMA) -> FileAnnotation | None:
    """Decode one line, returning ``None`` if it is not a valid annotation."""
    try:
        obj = json.loads(line)
    except json.JSONDecodeError as e:
        logger.debug("JSON decode error: %s", e)
        return None

    if not schema.is_satisfied_by(obj):
        logger.debug("Missing fields %s in %r", sorted(schema.required_fields), line)
        return None

    try:
        return FileAnnotation.model_validate(obj)
    except ValidationError as e:
        logger.debug("Pydantic validation error: %s", e)
        return None


def parse_lines(
    lines: Sequence[str],
    schema: AnnotationSchema = LATEST_SCHEMA,
) -> list[FileAnnotation] | ParseFailure:
    """
    Parse output lines into FileAnnotations.

    Parsing is all-or-nothing: the first line that cannot be decoded, or
    that decodes to something other than an annotation under *schema*,
    yields a ``ParseFailure`` for that line and nothing else.

    Args:
        lines: Non-empty output lines, one JSON object each
        schema: Which fields a line must carry

    Returns:
        The annotations in input order, or a ParseFailure
    """
    file_annotations: list[FileAnnotation] = []
    for line in lines:
        annotation = parse_line(line, schema)
        if annotation is None:
            logger.warning("Failed to parse buf output line: %s", line)
            return ParseFailure(line=line)
        file_annotations.append(annotation)
    return file_annotations
