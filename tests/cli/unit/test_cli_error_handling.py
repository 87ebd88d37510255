"""CLI error-handling tests."""

from __future__ import annotations

from pathlib import Path

from snapshot_app_tester.cli import main


def test_missing_required_option_returns_clean_click_error(capsys) -> None:
    exit_code = main(["update"])
    captured = capsys.readouterr()

    assert exit_code == 2
    assert "Missing option" in captured.err
    assert "--test-name" in captured.err
    assert "Traceback" not in captured.err


def test_unknown_option_returns_clean_click_error(capsys) -> None:
    exit_code = main(["compare", "--bogus"])
    captured = capsys.readouterr()

    assert exit_code == 2
    assert "No such option: --bogus" in captured.err
    assert "Traceback" not in captured.err


def test_domain_error_returns_exit_code_one(tmp_path: Path, capsys) -> None:
    exit_code = main(["compare", "--root", str(tmp_path)])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "No current snapshots found" in captured.err
    assert "Traceback" not in captured.err


def test_invalid_configuration_returns_exit_code_one(tmp_path: Path, capsys) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("browser:\n  name: netscape\n", encoding="utf-8")

    exit_code = main(["compare", "--config", str(config_path)])

    assert exit_code == 1
    assert "netscape" in capsys.readouterr().err
