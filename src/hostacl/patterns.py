"""Rule address patterns — exact, bracket range and CIDR matching.

Supported forms::

    192.168.1.5                  exact
    192.168.1.[10-20]            range over a single whole octet
    192.168.1.0/24               CIDR
    2001:db8::1                  exact
    2001:db8::[1-ff]             range over the trailing group only
    2001:db8::/32                CIDR

Partial components such as ``192.168.1.1[0-9]`` are not supported.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass

from hostacl.address import Family, InvalidAddress, ParsedAddress, family_of, parse

_RANGE_RE = re.compile(r"\[([0-9A-Fa-f]+)-([0-9A-Fa-f]+)\]")
_DECIMAL_RE = re.compile(r"[0-9]{1,3}")
_HEX_GROUP_RE = re.compile(r"[0-9A-Fa-f]{1,4}")

BUILTIN_SHORTCUTS: dict[str, str] = {
    "all": "0.0.0.0/0",
    "localhost": "127.0.0.1/8",
}


@dataclass(frozen=True)
class ExactPattern:
    """Matches a single address."""

    address: ParsedAddress

    @property
    def family(self) -> Family:
        return self.address.family

    @property
    def kind(self) -> str:
        return "exact"


@dataclass(frozen=True)
class BracketRangePattern:
    """Matches addresses whose components equal ``fixed`` except at ``position``,
    where the component must lie in ``[low, high]``."""

    family: Family
    fixed: tuple[int | None, ...]
    position: int
    low: int
    high: int

    @property
    def kind(self) -> str:
        return "range"


@dataclass(frozen=True)
class CidrPattern:
    """Matches ``base`` through ``base`` with all host bits set.

    The base is used as given and is not masked down to the network address,
    so ``10.0.0.7/24`` covers 10.0.0.7 - 10.0.0.255 only.
    """

    base: ParsedAddress
    prefix_len: int

    @property
    def family(self) -> Family:
        return self.base.family

    @property
    def kind(self) -> str:
        return "cidr"

    @property
    def first(self) -> int:
        return self.base.value

    @property
    def last(self) -> int:
        flexbits = self.base.width - self.prefix_len
        return self.base.value | ((1 << flexbits) - 1)


RulePattern = ExactPattern | BracketRangePattern | CidrPattern


def parse_pattern(text: str) -> RulePattern:
    """Detect the pattern syntax once and build the matching pattern object."""
    text = (text or "").strip()
    if not text:
        raise InvalidAddress("Empty address pattern")
    if "/" in text:
        return _parse_cidr(text)
    if "[" in text:
        return _parse_bracket_range(text)
    return ExactPattern(parse(text))


def matches(pattern: RulePattern, address: ParsedAddress) -> bool:
    """Return True if ``address`` is covered by ``pattern``. Never raises."""
    if pattern.family is not address.family:
        return False

    if isinstance(pattern, ExactPattern):
        return pattern.address.value == address.value

    if isinstance(pattern, CidrPattern):
        return pattern.first <= address.value <= pattern.last

    if isinstance(pattern, BracketRangePattern):
        for i, component in enumerate(address.components()):
            if i == pattern.position:
                if not pattern.low <= component <= pattern.high:
                    return False
            elif pattern.fixed[i] != component:
                return False
        return True

    return False


def build_shortcuts(server_address: str | None = None) -> dict[str, str]:
    """Return the shortcut table, adding localnetA/B/C when the server address is known."""
    shortcuts = dict(BUILTIN_SHORTCUTS)
    if server_address:
        shortcuts["localnetA"] = f"{server_address}/8"
        shortcuts["localnetB"] = f"{server_address}/16"
        shortcuts["localnetC"] = f"{server_address}/24"
    return shortcuts


def resolve_shortcut(text: str, shortcuts: Mapping[str, str]) -> str:
    return shortcuts.get(text, text)


def _parse_cidr(text: str) -> CidrPattern:
    base_text, _, prefix_text = text.partition("/")
    base = parse(base_text)
    prefix_text = prefix_text.strip()
    if not _DECIMAL_RE.fullmatch(prefix_text):
        raise InvalidAddress(f"Invalid prefix length in {text!r}")
    prefix_len = int(prefix_text)
    if prefix_len > base.width:
        raise InvalidAddress(
            f"Prefix length {prefix_len} exceeds {base.width} bits in {text!r}"
        )
    return CidrPattern(base=base, prefix_len=prefix_len)


def _parse_bracket_range(text: str) -> BracketRangePattern:
    if family_of(text) is Family.V6:
        return _parse_v6_range(text)
    return _parse_v4_range(text)


def _parse_v4_range(text: str) -> BracketRangePattern:
    parts = text.split(".")
    if len(parts) != 4:
        raise InvalidAddress(f"Expected 4 octets in {text!r}")

    fixed: list[int | None] = []
    position: int | None = None
    low = high = 0
    for i, part in enumerate(parts):
        match = _RANGE_RE.fullmatch(part)
        if match:
            if position is not None:
                raise InvalidAddress(f"Only one octet may be a range in {text!r}")
            position = i
            low = _octet(match.group(1), text)
            high = _octet(match.group(2), text)
            fixed.append(None)
        else:
            fixed.append(_octet(part, text))

    if position is None:
        raise InvalidAddress(f"No whole-octet range found in {text!r}")
    return _range(Family.V4, tuple(fixed), position, low, high, text)


def _parse_v6_range(text: str) -> BracketRangePattern:
    head, sep, tail = text.rpartition(":")
    match = _RANGE_RE.fullmatch(tail)
    if not sep or not match or "[" in head:
        raise InvalidAddress(f"IPv6 range must be the last group in {text!r}")

    # Substitute a zero group so the codec can expand any "::" compression
    base = parse(f"{head}:0")
    low = _group(match.group(1), text)
    high = _group(match.group(2), text)
    fixed = base.components()[:7] + (None,)
    return _range(Family.V6, fixed, 7, low, high, text)


def _range(
    family: Family,
    fixed: tuple[int | None, ...],
    position: int,
    low: int,
    high: int,
    text: str,
) -> BracketRangePattern:
    if low > high:
        raise InvalidAddress(f"Range start exceeds range end in {text!r}")
    return BracketRangePattern(
        family=family, fixed=fixed, position=position, low=low, high=high
    )


def _octet(value: str, text: str) -> int:
    if not _DECIMAL_RE.fullmatch(value) or int(value) > 255:
        raise InvalidAddress(f"Invalid octet {value!r} in {text!r}")
    return int(value)


def _group(value: str, text: str) -> int:
    if not _HEX_GROUP_RE.fullmatch(value):
        raise InvalidAddress(f"Invalid group {value!r} in {text!r}")
    return int(value, 16)
