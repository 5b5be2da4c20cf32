"""Tests for reading action inputs from the environment."""

import json
import os

import pytest

from config import ActionConfig, ConfigurationError, read_pull_request_number, validate_repo

BASE_ENV = {
    "INPUT_GITHUB_TOKEN": "ghs_token",
    "INPUT_INPUT": "proto",
    "GITHUB_REPOSITORY": "bufbuild/example",
}

CLEARED = (
    "INPUT_GITHUB_TOKEN",
    "GITHUB_TOKEN",
    "INPUT_INPUT",
    "GITHUB_REPOSITORY",
    "INPUT_BUF_TOKEN",
    "BUF_TOKEN",
    "INPUT_COMMENT_MODE",
    "INPUT_ANNOTATION_SCHEMA",
    "GITHUB_EVENT_PATH",
    "GITHUB_API_URL",
)


@pytest.fixture
def action_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in CLEARED:
        monkeypatch.delenv(name, raising=False)
    for name, value in BASE_ENV.items():
        monkeypatch.setenv(name, value)
    return monkeypatch


def test_from_env_defaults(action_env: pytest.MonkeyPatch) -> None:
    config = ActionConfig.from_env()
    assert config.github_token == "ghs_token"
    assert config.input == "proto"
    assert config.repo == "bufbuild/example"
    assert config.pull_request is None
    assert config.buf_token is None
    assert config.comment_mode == "auto"
    assert config.schema == "v2"


def test_from_env_reads_pull_request(action_env: pytest.MonkeyPatch, tmp_path) -> None:
    event = tmp_path / "event.json"
    event.write_text(json.dumps({"pull_request": {"number": 12}}))
    action_env.setenv("GITHUB_EVENT_PATH", str(event))

    assert ActionConfig.from_env().pull_request == 12


@pytest.mark.parametrize(
    ("unset", "message"),
    [
        ("INPUT_GITHUB_TOKEN", "a Github authentication token string was not provided"),
        ("INPUT_INPUT", "an input string was not provided"),
        ("GITHUB_REPOSITORY", "an owner string was not provided"),
    ],
)
def test_from_env_missing_inputs(
    action_env: pytest.MonkeyPatch, unset: str, message: str
) -> None:
    action_env.delenv(unset)
    with pytest.raises(ConfigurationError, match=message):
        ActionConfig.from_env()


def test_from_env_missing_repository(action_env: pytest.MonkeyPatch) -> None:
    action_env.setenv("GITHUB_REPOSITORY", "bufbuild/")
    with pytest.raises(ConfigurationError, match="a repository string was not provided"):
        ActionConfig.from_env()


def test_from_env_rejects_unknown_comment_mode(action_env: pytest.MonkeyPatch) -> None:
    action_env.setenv("INPUT_COMMENT_MODE", "sometimes")
    with pytest.raises(ConfigurationError, match="comment_mode"):
        ActionConfig.from_env()


def test_subprocess_env_adds_buf_token(action_env: pytest.MonkeyPatch) -> None:
    action_env.setenv("INPUT_BUF_TOKEN", "buf_secret")
    config = ActionConfig.from_env()

    env = config.subprocess_env()

    assert env["BUF_TOKEN"] == "buf_secret"
    assert "BUF_TOKEN" not in os.environ


def test_read_pull_request_number_ignores_other_events(tmp_path) -> None:
    event = tmp_path / "event.json"
    event.write_text(json.dumps({"push": {"ref": "refs/heads/main"}}))
    assert read_pull_request_number(str(event)) is None
    assert read_pull_request_number(None) is None
    assert read_pull_request_number(str(tmp_path / "missing.json")) is None


def test_validate_repo() -> None:
    assert validate_repo("bufbuild/buf") == "bufbuild/buf"
    with pytest.raises(ValueError):
        validate_repo("bufbuild")


@pytest.mark.parametrize(
    "payload",
    [{"pull_request": "x"}, {"pull_request": None}, [1, 2], "text", {"pull_request": {"number": "7"}}],
)
def test_read_pull_request_number_ignores_malformed_payloads(tmp_path, payload) -> None:
    event = tmp_path / "event.json"
    event.write_text(json.dumps(payload))
    assert read_pull_request_number(str(event)) is None
