from datetime import date

import pytest

from barrier_lattice.errors import ArgumentError
from barrier_lattice.products import Barrier, FxSingleBarrierOption, FxVanillaOption
from barrier_lattice.types import (
    BarrierDirection,
    CurrencyAmount,
    CurrencyPair,
    KnockType,
    LongShort,
    PutCall,
    normalize_put_call,
)

EXPIRY = date(2024, 7, 1)


def test_currency_pair_parse_and_format():
    pair = CurrencyPair.parse("eur/usd")
    assert pair == CurrencyPair("EUR", "USD")
    assert str(pair) == "EUR/USD"
    with pytest.raises(ArgumentError):
        CurrencyPair.parse("EURUSD")
    with pytest.raises(ArgumentError):
        CurrencyPair("USD", "usd")


@pytest.mark.parametrize("label, expected", [("C", PutCall.CALL), ("put", PutCall.PUT)])
def test_normalize_put_call(label, expected):
    assert normalize_put_call(label) is expected


def test_vanilla_factory_normalises_inputs():
    option = FxVanillaOption.of("EUR/USD", "P", 1.1, EXPIRY, notional=5.0, long_short="short")
    assert option.currency_pair == CurrencyPair("EUR", "USD")
    assert option.put_call is PutCall.PUT
    assert option.long_short is LongShort.SHORT
    with pytest.raises(ArgumentError, match="strike"):
        FxVanillaOption.of("EUR/USD", "call", 0.0, EXPIRY)
    with pytest.raises(ArgumentError, match="notional"):
        FxVanillaOption.of("EUR/USD", "call", 1.0, EXPIRY, notional=-1.0)


def test_barrier_breach():
    up = Barrier.of("up", "knock_out", 1.2)
    down = Barrier.of(BarrierDirection.DOWN, KnockType.KNOCK_IN, 1.0)
    assert up.is_breached(1.2) and not up.is_breached(1.19)
    assert down.is_breached(0.99) and not down.is_breached(1.01)
    assert down.knock_type.is_knock_in
    with pytest.raises(ArgumentError):
        Barrier.of("up", "knock_out", 0.0)


def test_rebate_per_unit_by_currency():
    underlying = FxVanillaOption.of("EUR/USD", "call", 1.1, EXPIRY, notional=100.0)
    barrier = Barrier.of("up", "knock_out", 1.25)

    assert FxSingleBarrierOption.of(underlying, barrier).rebate_per_unit() == 0.0
    usd = FxSingleBarrierOption.of(underlying, barrier, CurrencyAmount("USD", 2.0))
    eur = FxSingleBarrierOption.of(underlying, barrier, CurrencyAmount("EUR", 2.0))
    assert usd.rebate_per_unit() == pytest.approx(0.02)
    assert eur.rebate_per_unit() == pytest.approx(0.025)


def test_rebate_validation():
    underlying = FxVanillaOption.of("EUR/USD", "call", 1.1, EXPIRY)
    barrier = Barrier.of("up", "knock_out", 1.25)
    with pytest.raises(ArgumentError, match="must belong to EUR/USD"):
        FxSingleBarrierOption.of(underlying, barrier, CurrencyAmount("JPY", 1.0))
    with pytest.raises(ArgumentError, match=">= 0"):
        FxSingleBarrierOption.of(underlying, barrier, CurrencyAmount("USD", -1.0))
