"""Closed-form barrier pricing engine."""

from __future__ import annotations

from dataclasses import dataclass

from barrier_lattice.engines.base import market_view
from barrier_lattice.market import FxVolatilityProvider, RatesProvider
from barrier_lattice.models.black_scholes import black_barrier_price
from barrier_lattice.products import FxSingleBarrierOption


@dataclass(frozen=True)
class BlackBarrierPricer:
    """Reiner-Rubinstein pricer using the implied volatility at the strike.

    Rates are read as flat at their expiry zero rates, so the result is exact
    only for flat curves and a flat surface.
    """

    def price(
        self,
        option: FxSingleBarrierOption,
        rates: RatesProvider,
        volatilities: FxVolatilityProvider,
    ) -> float:
        market = market_view(option, rates, volatilities)
        underlying = option.underlying
        T = market.time_to_expiry
        sigma = volatilities.volatility(
            underlying.currency_pair, T, underlying.strike, market.forward(T)
        )
        value = black_barrier_price(
            S=market.spot,
            K=underlying.strike,
            H=option.barrier.level,
            T=T,
            sigma=sigma,
            r=market.interest_rate,
            q=market.dividend_rate,
            put_call=underlying.put_call,
            direction=option.barrier.direction,
            knock_type=option.barrier.knock_type,
            rebate=option.rebate_per_unit(),
        )
        return underlying.long_short.sign * value
