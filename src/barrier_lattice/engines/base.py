"""Interface for barrier-option pricing engines and shared market lookups."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from barrier_lattice.errors import ArgumentError
from barrier_lattice.market import FxVolatilityProvider, RatesProvider
from barrier_lattice.market.curves import DiscountFactors
from barrier_lattice.products import Barrier, FxSingleBarrierOption


@runtime_checkable
class PriceModel(Protocol):
    """Minimum pricing capability required by risk modules and reports."""

    def price(
        self,
        option: FxSingleBarrierOption,
        rates: RatesProvider,
        volatilities: FxVolatilityProvider,
    ) -> float:
        """Return the signed value per unit of base notional, in counter currency."""


@dataclass(frozen=True)
class FxMarketView:
    """Market quantities of one currency pair seen from the valuation date."""

    spot: float
    time_to_expiry: float
    base_curve: DiscountFactors
    counter_curve: DiscountFactors

    def forward(self, t: float) -> float:
        return self.spot * self.base_curve.discount_factor(t) / self.counter_curve.discount_factor(t)

    @property
    def interest_rate(self) -> float:
        return self.counter_curve.zero_rate(self.time_to_expiry)

    @property
    def dividend_rate(self) -> float:
        return self.base_curve.zero_rate(self.time_to_expiry)


def market_view(
    option: FxSingleBarrierOption,
    rates: RatesProvider,
    volatilities: FxVolatilityProvider,
) -> FxMarketView:
    """Validate the inputs of a barrier pricing and look up the pair's market.

    Raises:
        ArgumentError: If the barrier is not a constant continuous barrier,
            the providers disagree on the valuation date or the option has
            expired.
    """
    if not isinstance(option.barrier, Barrier):
        raise ArgumentError(
            f"Only constant continuous barriers are supported, got {type(option.barrier).__name__}"
        )
    if rates.valuation_date != volatilities.valuation_date:
        raise ArgumentError(
            f"Valuation dates differ: rates {rates.valuation_date}, "
            f"volatilities {volatilities.valuation_date}"
        )
    underlying = option.underlying
    t = rates.relative_time(underlying.expiry)
    if not t > 0:
        raise ArgumentError(
            f"Option expiry {underlying.expiry} must be after valuation date {rates.valuation_date}"
        )
    pair = underlying.currency_pair
    return FxMarketView(
        spot=rates.fx_rate(pair),
        time_to_expiry=t,
        base_curve=rates.discount_factors(pair.base),
        counter_curve=rates.discount_factors(pair.counter),
    )
