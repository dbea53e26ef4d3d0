"""Market data capabilities consumed by the tree pricers."""

from .curves import DiscountFactors, FlatDiscountFactors, ZeroRateDiscountFactors
from .providers import FxVolatilityProvider, RatesProvider, year_fraction
from .volatility import (
    FlatVolatilitySurface,
    LocalVolatilityFromImplied,
    SsviVolatilitySurface,
    VolatilitySurface,
)

__all__ = [
    "DiscountFactors",
    "FlatDiscountFactors",
    "ZeroRateDiscountFactors",
    "VolatilitySurface",
    "FlatVolatilitySurface",
    "SsviVolatilitySurface",
    "LocalVolatilityFromImplied",
    "RatesProvider",
    "FxVolatilityProvider",
    "year_fraction",
]
