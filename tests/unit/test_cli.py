"""Unit tests for the CLI entrypoint.

Tests cover: valid file invocation, events-only output, missing
arguments, nonexistent file, invalid configuration, --timezone and
--currency overrides, and the --verbose / -v flag.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from itmd.__main__ import main

ITINERARY = """\
## 2025-03-15

> [08:30] breakfast :: Cafe Central
> - price: 12
"""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_itinerary(tmp_path: Path, name: str = "trip.md") -> Path:
    """Write a minimal itinerary file and return its path."""
    path = tmp_path / name
    path.write_text(ITINERARY, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestCLI:
    """Unit tests for ``itmd.__main__.main``."""

    def test_cli_valid_file_prints_tree(
        self,
        tmp_path: Path,
        monkeypatch_env: dict[str, str],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Valid file -> exit code 0 and the document tree as JSON."""
        exit_code = main([str(_make_itinerary(tmp_path))])

        assert exit_code == 0
        tree = json.loads(capsys.readouterr().out)
        assert tree["type"] == "root"
        assert [child["type"] for child in tree["children"]] == ["itmdHeading", "itmdEvent"]

    def test_cli_events_only_uses_env_defaults(
        self,
        tmp_path: Path,
        monkeypatch_env: dict[str, str],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """--events-only -> summaries resolved with the env timezone."""
        exit_code = main(["--events-only", str(_make_itinerary(tmp_path))])

        assert exit_code == 0
        summaries = json.loads(capsys.readouterr().out)
        assert summaries == [
            {
                "event_type": "breakfast",
                "base_type": "activity",
                "title_text": None,
                "start_iso": "2025-03-15T08:30+01:00",
                "end_iso": None,
                "date_iso": "2025-03-15",
                "warnings": [],
            }
        ]

    def test_cli_timezone_override(
        self,
        tmp_path: Path,
        monkeypatch_env: dict[str, str],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """--timezone replaces the configured default."""
        exit_code = main(["--events-only", "--timezone", "Asia/Tokyo", str(_make_itinerary(tmp_path))])

        assert exit_code == 0
        summaries = json.loads(capsys.readouterr().out)
        assert summaries[0]["start_iso"] == "2025-03-15T08:30+09:00"

    def test_cli_unknown_timezone(
        self,
        tmp_path: Path,
        clean_env: None,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Unresolvable --timezone -> exit code 1."""
        exit_code = main(["--timezone", "Mars/Base", str(_make_itinerary(tmp_path))])

        assert exit_code == 1
        assert "Unknown timezone" in capsys.readouterr().err

    def test_cli_currency_override(
        self,
        tmp_path: Path,
        clean_env: None,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """--currency sets the currency for bare amounts."""
        exit_code = main(["--currency", "usd", str(_make_itinerary(tmp_path))])

        assert exit_code == 0
        tree = json.loads(capsys.readouterr().out)
        price = tree["children"][1]["prices"][0]["price"]
        assert price["tokens"][0]["currency"] == "USD"
        assert price["warnings"] == ["currency-not-detected"]

    def test_cli_missing_file_argument_shows_usage(
        self,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """No arguments -> exit code 2, stderr contains 'usage'."""
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 2
        captured = capsys.readouterr()
        assert "usage" in captured.err.lower()

    def test_cli_nonexistent_file_shows_error(
        self,
        tmp_path: Path,
        clean_env: None,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Nonexistent file -> exit code 1, stderr contains 'file not found'."""
        bad_path = tmp_path / "does_not_exist.md"

        exit_code = main([str(bad_path)])

        assert exit_code == 1
        captured = capsys.readouterr()
        assert "file not found" in captured.err

    def test_cli_invalid_config_shows_error(
        self,
        tmp_path: Path,
        monkeypatch_env: dict[str, str],
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Invalid environment -> exit code 1 naming the variable."""
        monkeypatch.setenv("ITMD_DEFAULT_CURRENCY", "euro")

        exit_code = main([str(_make_itinerary(tmp_path))])

        assert exit_code == 1
        assert "ITMD_DEFAULT_CURRENCY" in capsys.readouterr().err

    def test_cli_verbose_flag_sets_debug_logging(
        self,
        tmp_path: Path,
        monkeypatch_env: dict[str, str],
    ) -> None:
        """-v flag -> setup_logging called with 'DEBUG'."""
        itinerary = _make_itinerary(tmp_path)

        with patch("itmd.__main__.setup_logging") as mock_logging:
            exit_code = main(["-v", str(itinerary)])

        assert exit_code == 0
        mock_logging.assert_called_once_with("DEBUG")

    def test_cli_log_level_from_env(
        self,
        tmp_path: Path,
        monkeypatch_env: dict[str, str],
    ) -> None:
        """Without -v the configured LOG_LEVEL is used."""
        itinerary = _make_itinerary(tmp_path)

        with patch("itmd.__main__.setup_logging") as mock_logging:
            main([str(itinerary)])

        mock_logging.assert_called_once_with("WARNING")
