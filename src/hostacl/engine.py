"""Rule engine — first-match evaluation of allow or deny rules."""

from __future__ import annotations

import hmac
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from hostacl.address import ParsedAddress
from hostacl.models import WILDCARD_USER, Kind, Rule
from hostacl.patterns import (
    RulePattern,
    build_shortcuts,
    matches,
    parse_pattern,
    resolve_shortcut,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _CompiledRule:
    """A rule with its address pattern parsed once. ``pattern`` is None when
    the rule's address is malformed; such a rule never matches."""

    rule: Rule
    pattern: RulePattern | None
    error: str = ""


class RuleEngine:
    """Evaluates a client against an ordered rule list.

    Compiled rules are immutable, so one engine may be shared between
    threads. Shortcuts are resolved at construction; build a new engine when
    the server address changes.
    """

    def __init__(
        self,
        rules: Sequence[Rule],
        shortcuts: Mapping[str, str] | None = None,
    ) -> None:
        shortcuts = build_shortcuts() if shortcuts is None else shortcuts
        self._compiled: tuple[_CompiledRule, ...] = tuple(
            _compile_rule(rule, shortcuts) for rule in rules
        )

    @property
    def rules(self) -> tuple[Rule, ...]:
        return tuple(cr.rule for cr in self._compiled)

    def patterns(self) -> list[tuple[Rule, RulePattern | None, str]]:
        """Each rule with its compiled pattern, or None and the parse error."""
        return [(cr.rule, cr.pattern, cr.error) for cr in self._compiled]

    def first_match(
        self, kind: Kind, username: str, address: ParsedAddress
    ) -> Rule | None:
        """Return the first rule of ``kind`` for ``username`` covering ``address``."""
        for cr in self._compiled:
            if cr.rule.kind is not kind:
                continue
            if not _user_matches(cr.rule.user, username):
                continue
            if cr.pattern is not None and matches(cr.pattern, address):
                return cr.rule
        return None

    def evaluate(self, kind: Kind, username: str, address: ParsedAddress) -> bool:
        return self.first_match(kind, username, address) is not None

    def has_rules_for(self, kind: Kind, username: str) -> bool:
        """True if any rule of ``kind`` applies to ``username``, valid or not."""
        return any(
            cr.rule.kind is kind and _user_matches(cr.rule.user, username)
            for cr in self._compiled
        )


def evaluate(
    rules: Sequence[Rule],
    kind: Kind,
    username: str,
    address: ParsedAddress,
    shortcuts: Mapping[str, str] | None = None,
) -> bool:
    """One-shot evaluation without keeping a compiled engine around."""
    return RuleEngine(rules, shortcuts).evaluate(kind, username, address)


def _compile_rule(rule: Rule, shortcuts: Mapping[str, str]) -> _CompiledRule:
    text = resolve_shortcut(rule.address, shortcuts)
    try:
        pattern = parse_pattern(text)
    except ValueError as exc:
        logger.warning("Ignoring rule %r: %s", str(rule), exc)
        return _CompiledRule(rule=rule, pattern=None, error=str(exc))
    return _CompiledRule(rule=rule, pattern=pattern)


def _user_matches(rule_user: str, username: str) -> bool:
    if rule_user == WILDCARD_USER:
        return True
    # Case-sensitive, constant-time
    return hmac.compare_digest(
        rule_user.encode("utf-8", "surrogatepass"),
        username.encode("utf-8", "surrogatepass"),
    )
