import pytest

from barrier_lattice.engines import BlackBarrierPricer, ImpliedTreeBarrierPricer
from barrier_lattice.errors import ArgumentError
from barrier_lattice.models import bs_delta, bs_price, bs_vega
from barrier_lattice.risk import BarrierSensitivities, fd_sensitivities


def test_far_barrier_sensitivities_match_vanilla_greeks(flat_market, barrier_option):
    rates, vols = flat_market()
    option = barrier_option(direction="up", level=5.0)
    T = rates.relative_time(option.underlying.expiry)

    out = fd_sensitivities(BlackBarrierPricer(), option, rates, vols)

    assert isinstance(out, BarrierSensitivities)
    assert out.price == pytest.approx(bs_price(1.10, 1.10, T, 0.10, 0.05, 0.03), rel=1e-10)
    assert out.delta == pytest.approx(bs_delta(1.10, 1.10, T, 0.10, 0.05, 0.03), rel=1e-6)
    assert out.vega == pytest.approx(bs_vega(1.10, 1.10, T, 0.10, 0.05, 0.03), rel=1e-6)
    assert out.gamma > 0.0
    assert out.rho > 0.0


def test_tree_sensitivities_of_down_and_out_call(flat_market, barrier_option):
    rates, vols = flat_market()
    option = barrier_option(direction="down", level=1.02)
    pricer = ImpliedTreeBarrierPricer(steps=101, local_volatility=False)

    out = fd_sensitivities(pricer, option, rates, vols)

    assert out.price == pytest.approx(pricer.price(option, rates, vols))
    assert out.delta > 0.0
    closed = fd_sensitivities(BlackBarrierPricer(), option, rates, vols)
    assert out.delta == pytest.approx(closed.delta, abs=0.05)


def test_bumps_must_be_positive(flat_market, barrier_option):
    rates, vols = flat_market()
    with pytest.raises(ArgumentError, match="bump sizes"):
        fd_sensitivities(BlackBarrierPricer(), barrier_option(), rates, vols, spot_bump=0.0)
