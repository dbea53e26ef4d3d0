"""Market data providers bound to a valuation date.

`RatesProvider` owns FX spot rates and one discount curve per currency;
`FxVolatilityProvider` owns the implied-volatility surface of one currency
pair. Both are immutable; bumped copies are produced for finite-difference
sensitivities.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import date
from types import MappingProxyType

from barrier_lattice.errors import ArgumentError
from barrier_lattice.market.curves import DiscountFactors
from barrier_lattice.market.volatility import VolatilitySurface
from barrier_lattice.types import CurrencyPair

DAYS_PER_YEAR = 365.0


def year_fraction(start: date, end: date, basis: float = DAYS_PER_YEAR) -> float:
    """ACT/basis year fraction between two dates."""
    return (end - start).days / basis


@dataclass(frozen=True)
class RatesProvider:
    """FX spot rates and per-currency discount curves at one valuation date."""

    valuation_date: date
    fx_rates: Mapping[CurrencyPair, float]
    curves: Mapping[str, DiscountFactors]

    def __post_init__(self) -> None:
        for pair, rate in self.fx_rates.items():
            if not isinstance(pair, CurrencyPair):
                raise ArgumentError("fx_rates must be keyed by CurrencyPair")
            if not rate > 0:
                raise ArgumentError(f"fx rate for {pair} must be > 0")
        object.__setattr__(self, "fx_rates", MappingProxyType(dict(self.fx_rates)))
        object.__setattr__(
            self,
            "curves",
            MappingProxyType({ccy.upper(): c for ccy, c in self.curves.items()}),
        )

    def fx_rate(self, pair: CurrencyPair) -> float:
        """Spot rate of `pair` (counter units per one base unit)."""
        if pair in self.fx_rates:
            return float(self.fx_rates[pair])
        inverse = CurrencyPair(pair.counter, pair.base)
        if inverse in self.fx_rates:
            return 1.0 / float(self.fx_rates[inverse])
        raise ArgumentError(f"No FX rate available for {pair}")

    def discount_factors(self, currency: str) -> DiscountFactors:
        try:
            return self.curves[currency.upper()]
        except KeyError as e:
            raise ArgumentError(f"No discount curve for currency {currency!r}") from e

    def relative_time(self, when: date) -> float:
        return year_fraction(self.valuation_date, when)

    def with_fx_shift(self, pair: CurrencyPair, relative_shift: float) -> RatesProvider:
        """Copy with the spot of `pair` multiplied by `1 + relative_shift`."""
        spot = self.fx_rate(pair)
        rates = {
            p: r
            for p, r in self.fx_rates.items()
            if p not in (pair, CurrencyPair(pair.counter, pair.base))
        }
        rates[pair] = spot * (1.0 + relative_shift)
        return replace(self, fx_rates=rates)

    def with_parallel_shift(self, currency: str, shift: float) -> RatesProvider:
        """Copy with the zero rates of one currency shifted by `shift`."""
        curves = dict(self.curves)
        curves[currency.upper()] = self.discount_factors(currency).shifted(shift)
        return replace(self, curves=curves)


@dataclass(frozen=True)
class FxVolatilityProvider:
    """Black implied volatilities of one currency pair."""

    valuation_date: date
    currency_pair: CurrencyPair
    surface: VolatilitySurface
    day_count_basis: float = field(default=DAYS_PER_YEAR)

    def relative_time(self, when: date) -> float:
        return year_fraction(self.valuation_date, when, self.day_count_basis)

    def volatility(
        self,
        currency_pair: CurrencyPair,
        t: float,
        strike: float,
        forward: float,
    ) -> float:
        if currency_pair == self.currency_pair:
            return self.surface.volatility(t, strike, forward)
        if currency_pair == CurrencyPair(self.currency_pair.counter, self.currency_pair.base):
            # Volatility of the inverse pair at the inverse strike.
            return self.surface.volatility(t, 1.0 / strike, 1.0 / forward)
        raise ArgumentError(
            f"Volatilities provided for {self.currency_pair}, not {currency_pair}"
        )

    def with_parallel_shift(self, shift: float) -> FxVolatilityProvider:
        return replace(self, surface=self.surface.shifted(shift))
