"""Tests for the command line entrypoint."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import click
import httpx
import pytest
from click.testing import CliRunner

from org_pulse.cli import _parse_relative_date, _resolve_since, main

NOW = datetime(2024, 6, 30, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """main() reconfigures the root logger; undo it after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("7d", NOW - timedelta(days=7)),
        ("2w", NOW - timedelta(weeks=2)),
        ("3m", NOW - timedelta(days=90)),
        ("1y", NOW - timedelta(days=365)),
    ],
)
def test_parse_relative_date(value, expected):
    assert _parse_relative_date(value, now=NOW) == expected


def test_parse_relative_date_rejects_absolute():
    assert _parse_relative_date("2024-01-01") is None


def test_resolve_since_absolute():
    assert _resolve_since("2024-01-02") == datetime(2024, 1, 2, tzinfo=timezone.utc)


def test_resolve_since_invalid():
    with pytest.raises(click.BadParameter):
        _resolve_since("last tuesday")


def test_main_runs_pipeline():
    runner = CliRunner()
    with patch("org_pulse.orchestrator.run", new=AsyncMock()) as run:
        result = runner.invoke(
            main,
            ["myorg", "--since", "2024-01-01", "--format", "json", "--exclude-repo", "old"],
            env={"GITHUB_TOKEN": "t0k"},
        )

    assert result.exit_code == 0, result.output
    kwargs = run.call_args.kwargs
    assert kwargs["org"] == "myorg"
    assert kwargs["token"] == "t0k"
    assert kwargs["since"] == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert kwargs["output_format"] == "json"
    assert kwargs["exclude_repos"] == ["old"]
    assert kwargs["verify_ssl"] is True


def test_main_reads_org_from_env():
    runner = CliRunner()
    with patch("org_pulse.orchestrator.run", new=AsyncMock()) as run:
        result = runner.invoke(
            main, [], env={"GITHUB_TOKEN": "t0k", "GITHUB_ORG_NAME": "envorg"}
        )

    assert result.exit_code == 0, result.output
    assert run.call_args.kwargs["org"] == "envorg"


def test_main_requires_token():
    runner = CliRunner()
    result = runner.invoke(main, ["myorg"], env={"GITHUB_TOKEN": ""})
    assert result.exit_code != 0
    assert "token" in result.output.lower()


def test_main_reports_auth_failure():
    response = MagicMock(spec=httpx.Response)
    response.status_code = 401
    error = httpx.HTTPStatusError("401", request=MagicMock(), response=response)

    runner = CliRunner()
    with patch("org_pulse.orchestrator.run", new=AsyncMock(side_effect=error)):
        result = runner.invoke(main, ["myorg"], env={"GITHUB_TOKEN": "bad"})

    assert result.exit_code == 1
    assert "Authentication failed" in result.output


def test_main_rejects_bad_since():
    runner = CliRunner()
    result = runner.invoke(main, ["myorg", "--since", "soon"], env={"GITHUB_TOKEN": "t0k"})
    assert result.exit_code == 2
