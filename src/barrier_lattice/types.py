"""Shared enums and small value types used across the pricing code."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Literal, TypeAlias

from barrier_lattice.errors import ArgumentError


class PutCall(StrEnum):
    """Canonical option side labels used across pricing code."""

    CALL = "call"
    PUT = "put"

    @property
    def sign(self) -> float:
        """+1 for calls, -1 for puts."""
        return 1.0 if self is PutCall.CALL else -1.0


# Tolerant input type accepted at system boundaries (config files/tests).
PutCallInput: TypeAlias = PutCall | Literal["call", "put", "C", "P"]


class BarrierDirection(StrEnum):
    """Side of the spot the barrier sits on."""

    UP = "up"
    DOWN = "down"


class KnockType(StrEnum):
    KNOCK_IN = "knock_in"
    KNOCK_OUT = "knock_out"

    @property
    def is_knock_in(self) -> bool:
        return self is KnockType.KNOCK_IN


class LongShort(StrEnum):
    LONG = "long"
    SHORT = "short"

    @property
    def sign(self) -> float:
        return 1.0 if self is LongShort.LONG else -1.0


def normalize_put_call(value: PutCallInput) -> PutCall:
    """Normalize option side labels to :class:`PutCall`."""
    if isinstance(value, PutCall):
        return value
    label = str(value).strip()
    if label in ("call", "C", "CALL"):
        return PutCall.CALL
    if label in ("put", "P", "PUT"):
        return PutCall.PUT
    raise ArgumentError("put_call must be one of {'call', 'put', 'C', 'P'}")


@dataclass(frozen=True)
class CurrencyPair:
    """Ordered currency pair, e.g. EUR/USD quoted as USD per one EUR."""

    base: str
    counter: str

    def __post_init__(self) -> None:
        if len(self.base) != 3 or len(self.counter) != 3:
            raise ArgumentError("currency codes must have three letters")
        object.__setattr__(self, "base", self.base.upper())
        object.__setattr__(self, "counter", self.counter.upper())
        if self.base == self.counter:
            raise ArgumentError("base and counter currencies must differ")

    @classmethod
    def parse(cls, text: str) -> CurrencyPair:
        """Parse ``"EUR/USD"`` into a pair."""
        parts = text.split("/")
        if len(parts) != 2:
            raise ArgumentError(f"Invalid currency pair: {text!r}")
        return cls(parts[0].strip(), parts[1].strip())

    def __str__(self) -> str:
        return f"{self.base}/{self.counter}"


@dataclass(frozen=True)
class CurrencyAmount:
    currency: str
    amount: float

    def __post_init__(self) -> None:
        if len(self.currency) != 3:
            raise ArgumentError("currency code must have three letters")
        object.__setattr__(self, "currency", self.currency.upper())
        object.__setattr__(self, "amount", float(self.amount))
