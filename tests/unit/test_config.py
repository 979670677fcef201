"""Tests for environment-driven configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from hostacl.config import HostAclConfig

_ENV_VARS = (
    "HOSTACL_RULES_FILE",
    "HOSTACL_SERVER_ADDR",
    "SERVER_ADDR",
    "HOSTACL_USER",
    "HOSTACL_TRUSTED_PROXIES",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = HostAclConfig.load()
    assert config.rules_file is None
    assert config.server_address is None
    assert config.username == ""
    assert config.trusted_proxies == {}


def test_env_overrides(monkeypatch: pytest.MonkeyPatch, office_rules_path: Path):
    monkeypatch.setenv("HOSTACL_RULES_FILE", str(office_rules_path))
    monkeypatch.setenv("HOSTACL_SERVER_ADDR", "10.1.2.3")
    monkeypatch.setenv("HOSTACL_USER", "root")
    monkeypatch.setenv("HOSTACL_TRUSTED_PROXIES", "10.0.0.1=X-Forwarded-For, 10.0.0.2=X-Real-IP")

    config = HostAclConfig.load()
    assert config.rules_file == office_rules_path
    assert config.server_address == "10.1.2.3"
    assert config.username == "root"
    assert config.trusted_proxies == {
        "10.0.0.1": "X-Forwarded-For",
        "10.0.0.2": "X-Real-IP",
    }


def test_server_addr_fallback(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SERVER_ADDR", "192.168.0.1")
    assert HostAclConfig.load().server_address == "192.168.0.1"


def test_invalid_trusted_proxies(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("HOSTACL_TRUSTED_PROXIES", "10.0.0.1")
    with pytest.raises(ValueError, match="trusted proxy"):
        HostAclConfig.load()


def test_controller_from_rules_file(office_rules_path: Path):
    config = HostAclConfig(rules_file=office_rules_path)
    controller = config.controller()
    assert controller.rule_set.name == "office"
    assert controller.decide("192.168.1.55", "root").allowed


def test_controller_without_rules_file():
    with pytest.raises(ValueError, match="rules file"):
        HostAclConfig().controller()


def test_middleware_kwargs(monkeypatch: pytest.MonkeyPatch, office_rules_path: Path):
    monkeypatch.setenv("HOSTACL_RULES_FILE", str(office_rules_path))
    monkeypatch.setenv("HOSTACL_USER", "root")
    monkeypatch.setenv("HOSTACL_TRUSTED_PROXIES", "10.0.0.1=X-Forwarded-For")

    kwargs = HostAclConfig.load().middleware_kwargs()
    assert kwargs["username"] == "root"
    assert kwargs["trusted_proxies"] == {"10.0.0.1": "X-Forwarded-For"}
    assert kwargs["controller"].rule_set.name == "office"
