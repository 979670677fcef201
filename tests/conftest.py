"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from hostacl.models import Kind, Order, Rule, RuleSet


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def office_rules_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "office_rules.yaml"


@pytest.fixture
def broken_rules_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "broken_pattern_rules.yaml"


@pytest.fixture
def office_rule_set() -> RuleSet:
    return RuleSet(
        name="office",
        order=Order.DENY_ALLOW_LISTED,
        rules=(
            Rule(kind=Kind.DENY, user="%", address="192.168.1.[10-20]"),
            Rule(kind=Kind.ALLOW, user="root", address="localhost"),
            Rule(kind=Kind.ALLOW, user="root", address="192.168.1.0/24"),
            Rule(kind=Kind.ALLOW, user="backup", address="2001:db8::/32"),
        ),
    )
