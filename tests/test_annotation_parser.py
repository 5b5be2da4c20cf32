"""Tests for parsing buf's JSON-lines output."""

import pytest

from annotation_parser import (
    LATEST_SCHEMA,
    SCHEMA_V1,
    SCHEMA_V2,
    parse_lines,
    schema_for,
    split_output,
)
from models import FileAnnotation, ParseFailure

VALID_LINES = [
    '{"path":"a.proto","start_line":1,"start_column":1,"end_line":1,"end_column":10,"type":"PACKAGE_DEFINED","message":"Files must have a package defined."}',
    '{"path":"b.proto","start_line":5,"end_line":10,"type":"FIELD_LOWER_SNAKE_CASE","message":"Field name \\"fooBar\\" should be lower_snake_case."}',
    '{"message":"Module has no buf.yaml."}',
]


def test_parse_lines_preserves_order() -> None:
    annotations = parse_lines(VALID_LINES)
    assert isinstance(annotations, list)
    assert [a.path for a in annotations] == ["a.proto", "b.proto", None]
    assert annotations[0].type == "PACKAGE_DEFINED"
    assert annotations[0].start_column == 1
    assert annotations[1].end_line == 10
    assert annotations[1].message == 'Field name "fooBar" should be lower_snake_case.'


def test_parse_lines_empty_input() -> None:
    assert parse_lines([]) == []


def test_parse_lines_ignores_unknown_fields() -> None:
    annotations = parse_lines(['{"message":"m","path":"a.proto","extra":true}'])
    assert annotations == [FileAnnotation(message="m", path="a.proto")]


@pytest.mark.parametrize("position", [0, 1, 3])
def test_parse_lines_reports_malformed_line(position: int) -> None:
    bad = '{"path":"a.proto","message":'
    lines = list(VALID_LINES)
    lines.insert(position, bad)

    result = parse_lines(lines)

    assert isinstance(result, ParseFailure)
    assert result.line == bad
    assert bad in result.message


@pytest.mark.parametrize(
    "line",
    [
        '{"path":"a.proto","type":"PACKAGE_DEFINED"}',
        '["message"]',
        '"message"',
        '{"message":null}',
        "not json",
    ],
)
def test_parse_lines_rejects_non_annotations(line: str) -> None:
    result = parse_lines([line])
    assert result == ParseFailure(line=line)


def test_schema_v1_requires_type() -> None:
    line = '{"message":"no type here"}'
    assert isinstance(parse_lines([line], SCHEMA_V1), ParseFailure)
    assert isinstance(parse_lines([line], SCHEMA_V2), list)


def test_schema_lookup() -> None:
    assert schema_for("v1") is SCHEMA_V1
    assert schema_for("v2") is LATEST_SCHEMA
    with pytest.raises(KeyError):
        schema_for("v9")


def test_split_output_drops_blank_lines() -> None:
    text = '\n{"message":"a"}\n\n   \n{"message":"b"}\n'
    assert split_output(text) == ['{"message":"a"}', '{"message":"b"}']
    assert split_output("") == []
