"""Implied trinomial tree pricing engine for FX single-barrier options."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from barrier_lattice.engines.base import FxMarketView, market_view
from barrier_lattice.errors import ArgumentError
from barrier_lattice.market import (
    FxVolatilityProvider,
    LocalVolatilityFromImplied,
    RatesProvider,
)
from barrier_lattice.products import FxSingleBarrierOption
from barrier_lattice.tree.calibration import ImpliedTrinomialTreeCalibrator
from barrier_lattice.tree.data import MIN_STEPS, RecombiningTrinomialTreeData
from barrier_lattice.tree.engine import TrinomialTree
from barrier_lattice.tree.lattice import CoxRossRubinsteinLattice, LatticeSpecification
from barrier_lattice.tree.option_functions import (
    KnockoutOptionFunction,
    VanillaOptionFunction,
)
from barrier_lattice.types import CurrencyAmount

logger = logging.getLogger(__name__)

# Allowed mismatch between a supplied tree horizon and the option expiry.
_HORIZON_TOLERANCE = 1e-12


@dataclass(frozen=True)
class ImpliedTreeBarrierPricer:
    """Price single-barrier FX options on a calibrated trinomial tree.

    Knock-outs are priced directly. Knock-ins use in/out parity: with rebate
    `R` paid at expiry if the barrier is never hit,

        knock_in = vanilla + R P(T) - knock_out'

    where `knock_out'` pays `R P(T) / P(t_i)` when the barrier is hit at
    `t_i`, the value at `t_i` of `R` paid at expiry.

    Attributes:
        steps: Number of tree steps.
        lattice: Lattice used to extend the tree edges.
        local_volatility: Read the implied surface through Dupire local
            volatility. When false the implied volatility at each node is used
            as the node's local volatility.
    """

    steps: int = 101
    lattice: LatticeSpecification = field(default_factory=CoxRossRubinsteinLattice)
    local_volatility: bool = True
    tree: TrinomialTree = field(default_factory=TrinomialTree, repr=False)

    def __post_init__(self) -> None:
        if self.steps < MIN_STEPS:
            raise ArgumentError(f"steps must be >= {MIN_STEPS}, got {self.steps}")

    def calibrate_tree(
        self,
        option: FxSingleBarrierOption,
        rates: RatesProvider,
        volatilities: FxVolatilityProvider,
    ) -> RecombiningTrinomialTreeData:
        """Calibrate a tree spanning valuation date to option expiry."""
        market = market_view(option, rates, volatilities)
        return self._calibrate(market, option, volatilities)

    def _calibrate(
        self,
        market: FxMarketView,
        option: FxSingleBarrierOption,
        volatilities: FxVolatilityProvider,
    ) -> RecombiningTrinomialTreeData:
        pair = option.underlying.currency_pair

        def implied_vol(t: float, level: float) -> float:
            return volatilities.volatility(pair, t, level, market.forward(t))

        interest_rate = market.counter_curve.zero_rate
        dividend_rate = market.base_curve.zero_rate
        surface = implied_vol
        if self.local_volatility:
            surface = LocalVolatilityFromImplied(
                implied_vol=implied_vol,
                spot=market.spot,
                interest_rate=interest_rate,
                dividend_rate=dividend_rate,
            )
        calibrator = ImpliedTrinomialTreeCalibrator(
            steps=self.steps,
            time_to_expiry=market.time_to_expiry,
            lattice=self.lattice,
        )
        return calibrator.calibrate(surface, market.spot, interest_rate, dividend_rate)

    def price(
        self,
        option: FxSingleBarrierOption,
        rates: RatesProvider,
        volatilities: FxVolatilityProvider,
        data: RecombiningTrinomialTreeData | None = None,
    ) -> float:
        """Signed price per unit of base notional, in counter currency.

        Raises:
            ArgumentError: On invalid inputs, a supplied tree whose horizon
                differs from the option expiry, or a barrier outside the tree.
            CalibrationError: If the tree cannot be calibrated.
        """
        market = market_view(option, rates, volatilities)
        underlying = option.underlying
        barrier = option.barrier
        sign = underlying.long_short.sign
        T = market.time_to_expiry
        rebate = option.rebate_per_unit()

        if barrier.is_breached(market.spot):
            if barrier.knock_type.is_knock_in:
                value = self._breached_vanilla(option, market, volatilities, data)
            else:
                value = rebate
            logger.debug("Barrier %s already breached at spot %.6f", barrier, market.spot)
            return sign * value

        if data is None:
            data = self._calibrate(market, option, volatilities)
        elif abs(data.time_to_expiry - T) > _HORIZON_TOLERANCE:
            raise ArgumentError(
                f"Tree horizon {data.time_to_expiry} differs from option expiry {T}"
            )

        n = data.step_count
        times = data.dt * np.arange(n + 1)
        if barrier.knock_type.is_knock_in:
            df_expiry = market.counter_curve.discount_factor(T)
            layer_dfs = np.array([market.counter_curve.discount_factor(t) for t in times])
            knockout_rebate = rebate * df_expiry / layer_dfs
        else:
            knockout_rebate = np.full(n + 1, rebate)

        knockout = KnockoutOptionFunction.of(
            strike=underlying.strike,
            time_to_expiry=T,
            put_call=underlying.put_call,
            barrier_direction=barrier.direction,
            barrier_level=barrier.level,
            rebate=knockout_rebate,
        )
        knockout_price = self.tree.price(knockout, data)
        if not barrier.knock_type.is_knock_in:
            logger.debug("Knock-out price %.10f (steps=%d)", knockout_price, n)
            return sign * knockout_price

        vanilla = VanillaOptionFunction.of(underlying.strike, T, underlying.put_call)
        vanilla_price = self.tree.price(vanilla, data)
        if rebate:
            vanilla_price += rebate * market.counter_curve.discount_factor(T)
        value = vanilla_price - knockout_price
        logger.debug(
            "Knock-in via parity: vanilla leg %.10f, knock-out leg %.10f, price %.10f",
            vanilla_price,
            knockout_price,
            value,
        )
        return sign * value

    def _breached_vanilla(
        self,
        option: FxSingleBarrierOption,
        market: FxMarketView,
        volatilities: FxVolatilityProvider,
        data: RecombiningTrinomialTreeData | None,
    ) -> float:
        underlying = option.underlying
        if data is None:
            data = self._calibrate(market, option, volatilities)
        vanilla = VanillaOptionFunction.of(
            underlying.strike, market.time_to_expiry, underlying.put_call
        )
        return self.tree.price(vanilla, data)

    def present_value(
        self,
        option: FxSingleBarrierOption,
        rates: RatesProvider,
        volatilities: FxVolatilityProvider,
        data: RecombiningTrinomialTreeData | None = None,
    ) -> CurrencyAmount:
        """Signed value of the full notional in counter currency."""
        price = self.price(option, rates, volatilities, data)
        underlying = option.underlying
        return CurrencyAmount(underlying.currency_pair.counter, price * underlying.notional)

