from __future__ import annotations

from datetime import date, timedelta

import pytest

from barrier_lattice.market import (
    FlatDiscountFactors,
    FlatVolatilitySurface,
    FxVolatilityProvider,
    RatesProvider,
)
from barrier_lattice.products import Barrier, FxSingleBarrierOption, FxVanillaOption
from barrier_lattice.types import CurrencyPair

VALUATION = date(2024, 1, 2)
EXPIRY = VALUATION + timedelta(days=182)
EURUSD = CurrencyPair("EUR", "USD")


@pytest.fixture
def eurusd() -> CurrencyPair:
    return EURUSD


@pytest.fixture
def flat_market():
    def _build(
        spot: float = 1.10,
        usd_rate: float = 0.05,
        eur_rate: float = 0.03,
        vol: float = 0.10,
    ) -> tuple[RatesProvider, FxVolatilityProvider]:
        rates = RatesProvider(
            valuation_date=VALUATION,
            fx_rates={EURUSD: spot},
            curves={"USD": FlatDiscountFactors(usd_rate), "EUR": FlatDiscountFactors(eur_rate)},
        )
        vols = FxVolatilityProvider(
            valuation_date=VALUATION,
            currency_pair=EURUSD,
            surface=FlatVolatilitySurface(vol),
        )
        return rates, vols

    return _build


@pytest.fixture
def barrier_option():
    def _build(
        direction: str = "up",
        knock_type: str = "knock_out",
        level: float = 1.20,
        strike: float = 1.10,
        put_call: str = "call",
        rebate=None,
        long_short: str = "long",
        notional: float = 1.0,
        expiry: date = EXPIRY,
    ) -> FxSingleBarrierOption:
        underlying = FxVanillaOption.of(
            EURUSD,
            put_call,
            strike,
            expiry,
            notional=notional,
            long_short=long_short,
        )
        return FxSingleBarrierOption.of(
            underlying, Barrier.of(direction, knock_type, level), rebate
        )

    return _build
