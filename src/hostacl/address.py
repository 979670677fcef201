"""Address codec — textual IPv4/IPv6 literals to fixed-width integers."""

from __future__ import annotations

import enum
import ipaddress
from dataclasses import dataclass


class InvalidAddress(ValueError):
    """Raised when text is not a valid IPv4 or IPv6 literal."""


class Family(enum.Enum):
    """Address family, selected from the literal's syntax."""

    V4 = "v4"
    V6 = "v6"
    UNKNOWN = "unknown"

    @property
    def width(self) -> int:
        if self is Family.V4:
            return 32
        if self is Family.V6:
            return 128
        raise ValueError("Unknown family has no width")


@dataclass(frozen=True)
class ParsedAddress:
    """An address as a big-endian unsigned integer.

    Ordering on ``value`` is the same as ordering on the zero-padded hex form
    of the address, so range checks can be done with plain comparisons.
    """

    family: Family
    value: int

    def __post_init__(self) -> None:
        if self.family is Family.UNKNOWN:
            raise InvalidAddress("Address family must be V4 or V6")
        if not 0 <= self.value < (1 << self.family.width):
            raise InvalidAddress(
                f"Value out of range for {self.family.value}: {self.value}"
            )

    @property
    def width(self) -> int:
        return self.family.width

    def components(self) -> tuple[int, ...]:
        """Split into 4 octets (v4) or 8 16-bit groups (v6), most significant first."""
        if self.family is Family.V4:
            bits, count = 8, 4
        else:
            bits, count = 16, 8
        mask = (1 << bits) - 1
        return tuple(
            (self.value >> (bits * (count - 1 - i))) & mask for i in range(count)
        )

    def __str__(self) -> str:
        if self.family is Family.V4:
            return str(ipaddress.IPv4Address(self.value))
        return str(ipaddress.IPv6Address(self.value))


def family_of(text: str) -> Family:
    """Guess the family from syntax alone. Callers must still call parse()."""
    text = (text or "").strip()
    if not text:
        return Family.UNKNOWN
    if ":" in text:
        return Family.V6
    return Family.V4


def parse(text: str) -> ParsedAddress:
    """Parse a v4 dotted-quad or v6 colon-form literal. No DNS lookups."""
    family = family_of(text)
    if family is Family.UNKNOWN:
        raise InvalidAddress("Empty address")

    literal = text.strip()
    try:
        if family is Family.V6:
            # A zone index (fe80::1%eth0) does not take part in matching
            literal = literal.split("%", 1)[0]
            return ParsedAddress(Family.V6, int(ipaddress.IPv6Address(literal)))
        return ParsedAddress(Family.V4, int(ipaddress.IPv4Address(literal)))
    except (ipaddress.AddressValueError, ValueError) as exc:
        raise InvalidAddress(f"Invalid {family.value} address: {text!r}") from exc
