"""Access decision — combine allow and deny evaluation under a rule set's order."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from hostacl.address import InvalidAddress, ParsedAddress, parse
from hostacl.engine import RuleEngine
from hostacl.models import Kind, Order, Rule, RuleSet
from hostacl.patterns import build_shortcuts

logger = logging.getLogger(__name__)


class AccessControlError(Exception):
    """Base class for access-control failures."""


class UnknownClientAddress(AccessControlError):
    """The requesting address is missing or unusable."""


class Outcome(enum.Enum):
    """What decided the request."""

    ALLOW = "allow"
    DENY = "deny"
    NO_MATCH = "no_match"
    UNKNOWN_ADDRESS = "unknown_address"


@dataclass(frozen=True)
class AccessDecision:
    """Final answer for one request, with enough detail for an audit log."""

    allowed: bool
    outcome: Outcome
    matched_rule: Rule | None = None
    reason: str = ""


def decide(
    rule_set: RuleSet,
    address: str | None,
    username: str | None,
    server_address: str | None = None,
) -> AccessDecision:
    """Decide a single request. Fails closed when the address is unknown."""
    engine = RuleEngine(rule_set.rules, build_shortcuts(server_address))
    return _decide(rule_set.order, engine, address, username)


@dataclass(frozen=True)
class _Snapshot:
    rule_set: RuleSet
    engine: RuleEngine


class AccessController:
    """Holds the active rule set and answers requests against it.

    ``reload()`` swaps in a fully built snapshot with a single assignment, so
    a concurrent ``decide()`` sees either the old rules or the new ones.
    """

    def __init__(self, rule_set: RuleSet, server_address: str | None = None) -> None:
        self._snapshot = _build_snapshot(rule_set, server_address)

    @property
    def rule_set(self) -> RuleSet:
        return self._snapshot.rule_set

    @property
    def engine(self) -> RuleEngine:
        return self._snapshot.engine

    def reload(self, rule_set: RuleSet, server_address: str | None = None) -> None:
        self._snapshot = _build_snapshot(rule_set, server_address)
        logger.info(
            "Loaded rule set %r (%s) with %d rule(s)",
            rule_set.name,
            rule_set.order.value,
            len(rule_set.rules),
        )

    def decide(self, address: str | None, username: str | None) -> AccessDecision:
        snapshot = self._snapshot
        decision = _decide(snapshot.rule_set.order, snapshot.engine, address, username)
        logger.debug(
            "%s %s@%s: %s",
            "ALLOW" if decision.allowed else "DENY",
            username or "",
            address or "?",
            decision.reason,
        )
        return decision


def _build_snapshot(rule_set: RuleSet, server_address: str | None) -> _Snapshot:
    engine = RuleEngine(rule_set.rules, build_shortcuts(server_address))
    return _Snapshot(rule_set=rule_set, engine=engine)


def _client_address(text: str | None) -> ParsedAddress:
    if not text or not text.strip():
        raise UnknownClientAddress("Client address could not be determined")
    try:
        return parse(text)
    except InvalidAddress as exc:
        raise UnknownClientAddress(f"Unusable client address {text!r}") from exc


def _decide(
    order: Order,
    engine: RuleEngine,
    address_text: str | None,
    username: str | None,
) -> AccessDecision:
    username = username or ""
    try:
        address = _client_address(address_text)
    except UnknownClientAddress as exc:
        return AccessDecision(
            allowed=False, outcome=Outcome.UNKNOWN_ADDRESS, reason=str(exc)
        )

    deny_rule = engine.first_match(Kind.DENY, username, address)
    allow_rule = engine.first_match(Kind.ALLOW, username, address)

    if order is Order.DENY_ALLOW:
        if allow_rule is not None:
            return _matched(True, allow_rule)
        if deny_rule is not None:
            return _matched(False, deny_rule)
        return AccessDecision(
            allowed=True, outcome=Outcome.NO_MATCH, reason="No rule matched"
        )

    if order in (Order.ALLOW_DENY, Order.EXPLICIT):
        if deny_rule is not None:
            return _matched(False, deny_rule)
        if allow_rule is not None:
            return _matched(True, allow_rule)
        return AccessDecision(
            allowed=False, outcome=Outcome.NO_MATCH, reason="No allow rule matched"
        )

    # Order.DENY_ALLOW_LISTED
    if deny_rule is not None:
        return _matched(False, deny_rule)
    if allow_rule is not None:
        return _matched(True, allow_rule)
    if engine.has_rules_for(Kind.ALLOW, username):
        return AccessDecision(
            allowed=False,
            outcome=Outcome.NO_MATCH,
            reason=f"No allow rule for {username!r} matched",
        )
    return AccessDecision(
        allowed=True,
        outcome=Outcome.NO_MATCH,
        reason=f"No deny rule matched and no allow rules apply to {username!r}",
    )


def _matched(allowed: bool, rule: Rule) -> AccessDecision:
    return AccessDecision(
        allowed=allowed,
        outcome=Outcome.ALLOW if allowed else Outcome.DENY,
        matched_rule=rule,
        reason=f"Matched rule: {rule}",
    )
