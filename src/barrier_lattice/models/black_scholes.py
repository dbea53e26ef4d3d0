"""Closed-form Black-Scholes prices for vanilla and single-barrier options."""

from __future__ import annotations

import numpy as np
from scipy.stats import norm

from barrier_lattice.errors import ArgumentError
from barrier_lattice.types import (
    BarrierDirection,
    KnockType,
    PutCallInput,
    normalize_put_call,
)


def bs_d1_d2(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    q: float = 0.0,
) -> tuple[float, float]:
    """Compute d1 and d2 for Black-Scholes with continuous dividend yield."""
    if T <= 0 or sigma <= 0:
        raise ArgumentError("T and sigma must be positive")
    d1 = (np.log(S / K) + (r - q + 0.5 * sigma**2) * T) / (sigma * np.sqrt(T))
    d2 = d1 - sigma * np.sqrt(T)
    return d1, d2


def bs_price(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    q: float = 0.0,
    put_call: PutCallInput = "call",
) -> float:
    """Black-Scholes price with continuous dividend yield.

    For FX, `r` is the counter-currency rate and `q` the base-currency rate.
    """
    phi = normalize_put_call(put_call).sign
    d1, d2 = bs_d1_d2(S, K, T, sigma, r, q)
    return float(
        phi * S * np.exp(-q * T) * norm.cdf(phi * d1)
        - phi * K * np.exp(-r * T) * norm.cdf(phi * d2)
    )


def bs_delta(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    q: float = 0.0,
    put_call: PutCallInput = "call",
) -> float:
    """Black-Scholes spot delta."""
    phi = normalize_put_call(put_call).sign
    d1, _ = bs_d1_d2(S, K, T, sigma, r, q)
    return float(phi * np.exp(-q * T) * norm.cdf(phi * d1))


def bs_vega(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    q: float = 0.0,
) -> float:
    """Black-Scholes vega per +1.0 volatility."""
    d1, _ = bs_d1_d2(S, K, T, sigma, r, q)
    return float(S * np.exp(-q * T) * norm.pdf(d1) * np.sqrt(T))


def black_barrier_price(
    S: float,
    K: float,
    H: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    q: float = 0.0,
    put_call: PutCallInput = "call",
    direction: BarrierDirection | str = BarrierDirection.DOWN,
    knock_type: KnockType | str = KnockType.KNOCK_OUT,
    rebate: float = 0.0,
) -> float:
    """Reiner-Rubinstein price of a continuously monitored single barrier.

    The rebate is paid when the barrier is hit for knock-outs and at expiry
    when the barrier was never hit for knock-ins. A barrier already breached
    at `S` returns the rebate (knock-out) or the vanilla price (knock-in).
    """
    if H <= 0 or K <= 0 or S <= 0:
        raise ArgumentError("S, K and H must be positive")
    opt = normalize_put_call(put_call)
    direction = BarrierDirection(direction)
    knock_type = KnockType(knock_type)

    down = direction is BarrierDirection.DOWN
    breached = S <= H if down else S >= H
    if breached:
        if knock_type.is_knock_in:
            return bs_price(S, K, T, sigma, r, q, opt)
        return float(rebate)

    phi = opt.sign
    eta = 1.0 if down else -1.0
    b = r - q
    vol_t = sigma * np.sqrt(T)
    mu = (b - 0.5 * sigma**2) / sigma**2
    lam = np.sqrt(mu**2 + 2.0 * r / sigma**2)
    ratio = H / S
    df_q = np.exp((b - r) * T)
    df_r = np.exp(-r * T)

    x1 = np.log(S / K) / vol_t + (1.0 + mu) * vol_t
    x2 = np.log(S / H) / vol_t + (1.0 + mu) * vol_t
    y1 = np.log(H**2 / (S * K)) / vol_t + (1.0 + mu) * vol_t
    y2 = np.log(H / S) / vol_t + (1.0 + mu) * vol_t
    z = np.log(H / S) / vol_t + lam * vol_t

    A = phi * S * df_q * norm.cdf(phi * x1) - phi * K * df_r * norm.cdf(phi * (x1 - vol_t))
    B = phi * S * df_q * norm.cdf(phi * x2) - phi * K * df_r * norm.cdf(phi * (x2 - vol_t))
    up_pow = ratio ** (2.0 * (mu + 1.0))
    lo_pow = ratio ** (2.0 * mu)
    C = phi * S * df_q * up_pow * norm.cdf(eta * y1) - phi * K * df_r * lo_pow * norm.cdf(
        eta * (y1 - vol_t)
    )
    D = phi * S * df_q * up_pow * norm.cdf(eta * y2) - phi * K * df_r * lo_pow * norm.cdf(
        eta * (y2 - vol_t)
    )
    E = rebate * df_r * (
        norm.cdf(eta * (x2 - vol_t)) - lo_pow * norm.cdf(eta * (y2 - vol_t))
    )
    F = rebate * (
        ratio ** (mu + lam) * norm.cdf(eta * z)
        + ratio ** (mu - lam) * norm.cdf(eta * (z - 2.0 * lam * vol_t))
    )

    call = phi > 0
    strike_above = K >= H
    if knock_type.is_knock_in:
        if down and call:
            value = C + E if strike_above else A - B + D + E
        elif call:
            value = A + E if strike_above else B - C + D + E
        elif down:
            value = B - C + D + E if strike_above else A + E
        else:
            value = A - B + D + E if strike_above else C + E
    else:
        if down and call:
            value = A - C + F if strike_above else B - D + F
        elif call:
            value = F if strike_above else A - B + C - D + F
        elif down:
            value = A - B + C - D + F if strike_above else F
        else:
            value = B - D + F if strike_above else A - C + F
    return float(value)
