"""Tests for CLI commands using Click's CliRunner."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from hostacl.cli import main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    for name in ("HOSTACL_RULES_FILE", "HOSTACL_SERVER_ADDR", "SERVER_ADDR", "HOSTACL_USER"):
        monkeypatch.delenv(name, raising=False)


def test_main_help():
    runner = CliRunner()
    result = runner.invoke(main, ["--help"])
    assert result.exit_code == 0
    assert "hostacl" in result.output
    assert "check" in result.output
    assert "lint" in result.output


def test_main_version():
    runner = CliRunner()
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_check_allowed(office_rules_path: Path):
    runner = CliRunner()
    result = runner.invoke(
        main, ["--rules", str(office_rules_path), "check", "192.168.1.55", "--user", "root"]
    )
    assert result.exit_code == 0
    assert "ALLOWED" in result.output


def test_check_denied(office_rules_path: Path):
    runner = CliRunner()
    result = runner.invoke(
        main, ["--rules", str(office_rules_path), "check", "192.168.1.15", "-u", "root"]
    )
    assert result.exit_code == 1
    assert "DENIED" in result.output


def test_check_user_from_env(office_rules_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("HOSTACL_RULES_FILE", str(office_rules_path))
    monkeypatch.setenv("HOSTACL_USER", "root")
    runner = CliRunner()
    result = runner.invoke(main, ["check", "10.9.9.9"])
    assert result.exit_code == 1


def test_check_without_rules():
    runner = CliRunner()
    result = runner.invoke(main, ["check", "10.0.0.1"])
    assert result.exit_code == 2
    assert "No rule file" in result.output


def test_check_invalid_rule_file(tmp_path: Path):
    path = tmp_path / "rules.yaml"
    path.write_text("rules: []\n")
    runner = CliRunner()
    result = runner.invoke(main, ["--rules", str(path), "check", "10.0.0.1"])
    assert result.exit_code == 2


def test_match_cidr():
    runner = CliRunner()
    result = runner.invoke(main, ["match", "2001:db8::/32", "2001:db8:1::1"])
    assert result.exit_code == 0
    assert "MATCH" in result.output


def test_no_match_range():
    runner = CliRunner()
    result = runner.invoke(main, ["match", "192.168.1.[10-20]", "192.168.1.21"])
    assert result.exit_code == 1
    assert "NO MATCH" in result.output


def test_match_shortcut_with_server_addr():
    runner = CliRunner()
    result = runner.invoke(
        main, ["match", "localnetC", "10.0.0.200", "--server-addr", "10.0.0.0"]
    )
    assert result.exit_code == 0


def test_match_invalid_pattern():
    runner = CliRunner()
    result = runner.invoke(main, ["match", "10.0.0.0/40", "10.0.0.1"])
    assert result.exit_code == 2
    assert "Invalid" in result.output


def test_lint_clean(office_rules_path: Path):
    runner = CliRunner()
    result = runner.invoke(main, ["lint", str(office_rules_path)])
    assert result.exit_code == 0
    assert "0 invalid" in result.output


def test_lint_reports_invalid(broken_rules_path: Path):
    runner = CliRunner()
    result = runner.invoke(main, ["lint", str(broken_rules_path)])
    assert result.exit_code == 1
    assert "2 invalid" in result.output


def test_lint_server_addr_resolves_localnet(broken_rules_path: Path):
    runner = CliRunner()
    result = runner.invoke(
        main, ["lint", str(broken_rules_path), "--server-addr", "10.0.0.1"]
    )
    assert result.exit_code == 1
    assert "1 invalid" in result.output
