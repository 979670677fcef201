"""Load RuleSet objects from rule lines and YAML files.

A rule file looks like::

    name: office
    order: deny,allow-listed
    rules:
      - deny % from all
      - allow root from localhost
      - allow % 192.168.1.[10-20]
      - kind: allow
        user: backup
        from: 2001:db8::/32
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import yaml

from hostacl.models import Kind, Order, Rule, RuleSet

_FROM = "from"


class RuleSyntaxError(ValueError):
    """Raised when a rule or rule file is structurally invalid."""


def parse_rule_line(line: str) -> Rule:
    """Parse ``<allow|deny> <user> [from] <address>``."""
    tokens = line.split()
    if len(tokens) >= 3 and tokens[2] == _FROM:
        del tokens[2]
    if len(tokens) != 3:
        raise RuleSyntaxError(
            f"Expected '<allow|deny> <user> [from] <address>', got {line!r}"
        )
    return Rule(kind=_parse_kind(tokens[0]), user=tokens[1], address=tokens[2])


def rules_from_lines(lines: Iterable[str]) -> tuple[Rule, ...]:
    """Parse raw rule lines, skipping blanks and ``#`` comments."""
    rules: list[Rule] = []
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        rules.append(parse_rule_line(line))
    return tuple(rules)


def load_rules(path: str | Path) -> RuleSet:
    """Load a rule set from a YAML file path."""
    text = Path(path).read_text(encoding="utf-8")
    return load_rules_from_string(text)


def load_rules_from_string(text: str) -> RuleSet:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise RuleSyntaxError(f"Invalid rule file YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise RuleSyntaxError("Rule file YAML must be a mapping")
    return _build_rule_set(data)


def _build_rule_set(data: dict) -> RuleSet:
    if "order" not in data:
        raise RuleSyntaxError("Rule file must declare an order")
    order = _parse_order(data["order"])

    rules_data = data.get("rules") or []
    if not isinstance(rules_data, list):
        raise RuleSyntaxError("'rules' must be a list")

    return RuleSet(
        order=order,
        rules=tuple(_parse_rule_entry(entry) for entry in rules_data),
        name=str(data.get("name", "unnamed")),
    )


def _parse_rule_entry(entry: object) -> Rule:
    if isinstance(entry, str):
        return parse_rule_line(entry)
    if not isinstance(entry, dict):
        raise RuleSyntaxError(f"Rule must be a string or mapping, got {entry!r}")

    address = entry.get(_FROM, entry.get("address"))
    if "kind" not in entry or "user" not in entry or address is None:
        raise RuleSyntaxError(
            f"Rule mapping needs 'kind', 'user' and 'from' keys: {entry!r}"
        )
    return Rule(
        kind=_parse_kind(str(entry["kind"])),
        user=str(entry["user"]),
        address=str(address).strip(),
    )


def _parse_kind(value: str) -> Kind:
    try:
        return Kind(value.strip().lower())
    except ValueError as exc:
        raise RuleSyntaxError(f"Unknown rule kind: {value!r}") from exc


def _parse_order(value: object) -> Order:
    normalized = str(value).replace(" ", "").lower()
    try:
        return Order(normalized)
    except ValueError as exc:
        choices = ", ".join(o.value for o in Order)
        raise RuleSyntaxError(
            f"Unknown order {value!r}; expected one of: {choices}"
        ) from exc
