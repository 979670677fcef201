"""Rule data models — immutable dataclasses shared by the loader, engine and CLI."""

from __future__ import annotations

import enum
from dataclasses import dataclass

WILDCARD_USER = "%"


class Kind(enum.Enum):
    """Whether a rule grants or revokes access."""

    ALLOW = "allow"
    DENY = "deny"


class Order(enum.Enum):
    """How allow and deny results combine into a final decision.

    Every rule set names its order; there is no default.
    """

    # Denied on a Deny match; otherwise allowed unless the user has Allow
    # rules and none of them match.
    DENY_ALLOW_LISTED = "deny,allow-listed"
    # Allowed unless a Deny matches without an Allow also matching.
    DENY_ALLOW = "deny,allow"
    # Forbidden unless an Allow matches and no Deny matches.
    ALLOW_DENY = "allow,deny"
    # Same outcome as allow,deny; kept for configs written against it.
    EXPLICIT = "explicit"


@dataclass(frozen=True)
class Rule:
    """A single allow/deny rule: ``<kind> <user> [from] <address>``."""

    kind: Kind
    user: str
    address: str

    @property
    def is_wildcard_user(self) -> bool:
        return self.user == WILDCARD_USER

    def __str__(self) -> str:
        return f"{self.kind.value} {self.user} from {self.address}"


@dataclass(frozen=True)
class RuleSet:
    """An ordered rule list plus the order used to combine its results."""

    order: Order
    rules: tuple[Rule, ...] = ()
    name: str = "unnamed"
