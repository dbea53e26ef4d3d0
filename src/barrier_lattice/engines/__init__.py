"""Pricing engines for FX single-barrier options."""

from .barrier_pricer import ImpliedTreeBarrierPricer
from .base import FxMarketView, PriceModel, market_view
from .black_barrier_pricer import BlackBarrierPricer
from .convergence import DEFAULT_STEP_COUNTS, convergence_table

__all__ = [
    "PriceModel",
    "FxMarketView",
    "market_view",
    "ImpliedTreeBarrierPricer",
    "BlackBarrierPricer",
    "convergence_table",
    "DEFAULT_STEP_COUNTS",
]
