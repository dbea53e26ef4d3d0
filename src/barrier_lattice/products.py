"""Immutable FX option descriptors consumed by the barrier pricer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from barrier_lattice.errors import ArgumentError
from barrier_lattice.types import (
    BarrierDirection,
    CurrencyAmount,
    CurrencyPair,
    KnockType,
    LongShort,
    PutCall,
    PutCallInput,
    normalize_put_call,
)


@dataclass(frozen=True)
class Barrier:
    """Constant barrier monitored continuously up to expiry."""

    direction: BarrierDirection
    knock_type: KnockType
    level: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "direction", BarrierDirection(self.direction))
        object.__setattr__(self, "knock_type", KnockType(self.knock_type))
        if not self.level > 0:
            raise ArgumentError("barrier level must be > 0")

    @classmethod
    def of(
        cls,
        direction: BarrierDirection | str,
        knock_type: KnockType | str,
        level: float,
    ) -> Barrier:
        return cls(BarrierDirection(direction), KnockType(knock_type), float(level))

    def is_breached(self, spot: float) -> bool:
        if self.direction is BarrierDirection.UP:
            return spot >= self.level
        return spot <= self.level


@dataclass(frozen=True)
class FxVanillaOption:
    """European option to exchange `notional` base units at `strike`.

    `strike` is quoted in counter currency per base unit, the same way as the
    pair spot rate.
    """

    currency_pair: CurrencyPair
    put_call: PutCall
    strike: float
    notional: float
    expiry: date
    long_short: LongShort = LongShort.LONG

    def __post_init__(self) -> None:
        object.__setattr__(self, "put_call", normalize_put_call(self.put_call))
        object.__setattr__(self, "long_short", LongShort(self.long_short))
        if not self.strike > 0:
            raise ArgumentError("strike must be > 0")
        if not self.notional > 0:
            raise ArgumentError("notional must be > 0")

    @classmethod
    def of(
        cls,
        currency_pair: CurrencyPair | str,
        put_call: PutCallInput,
        strike: float,
        expiry: date,
        notional: float = 1.0,
        long_short: LongShort | str = LongShort.LONG,
    ) -> FxVanillaOption:
        pair = (
            currency_pair
            if isinstance(currency_pair, CurrencyPair)
            else CurrencyPair.parse(currency_pair)
        )
        return cls(
            currency_pair=pair,
            put_call=normalize_put_call(put_call),
            strike=float(strike),
            notional=float(notional),
            expiry=expiry,
            long_short=LongShort(long_short),
        )


@dataclass(frozen=True)
class FxSingleBarrierOption:
    """Vanilla FX option with a single knock-in or knock-out barrier.

    For knock-out options the rebate is paid when the barrier is hit; for
    knock-in options it is paid at expiry if the barrier was never hit.
    """

    underlying: FxVanillaOption
    barrier: Barrier
    rebate: CurrencyAmount | None = None

    def __post_init__(self) -> None:
        if self.rebate is None:
            return
        pair = self.underlying.currency_pair
        if self.rebate.currency not in (pair.base, pair.counter):
            raise ArgumentError(
                f"rebate currency {self.rebate.currency} must belong to {pair}"
            )
        if self.rebate.amount < 0:
            raise ArgumentError("rebate amount must be >= 0")

    @classmethod
    def of(
        cls,
        underlying: FxVanillaOption,
        barrier: Barrier,
        rebate: CurrencyAmount | None = None,
    ) -> FxSingleBarrierOption:
        return cls(underlying=underlying, barrier=barrier, rebate=rebate)

    def rebate_per_unit(self) -> float:
        """Rebate per unit of base notional, expressed in counter currency.

        A base-currency rebate is converted at the barrier level.
        """
        if self.rebate is None:
            return 0.0
        per_unit = self.rebate.amount / self.underlying.notional
        if self.rebate.currency == self.underlying.currency_pair.counter:
            return per_unit
        return per_unit * self.barrier.level
