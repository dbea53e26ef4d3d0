"""Analytical option-pricing models."""

from .black_scholes import bs_d1_d2, bs_delta, bs_price, bs_vega, black_barrier_price

__all__ = [
    "bs_d1_d2",
    "bs_price",
    "bs_delta",
    "bs_vega",
    "black_barrier_price",
]
