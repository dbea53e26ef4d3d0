import numpy as np
import pytest

from barrier_lattice.errors import ArgumentError
from barrier_lattice.models import bs_price
from barrier_lattice.tree import (
    CoxRossRubinsteinLattice,
    KnockoutOptionFunction,
    TrigeorgisLattice,
    TrinomialTree,
    VanillaOptionFunction,
    build_uniform_tree,
    check_alignment,
    option_values,
    price_uniform,
)

SPOT, VOL, R, Q, T = 1.10, 0.10, 0.05, 0.03, 0.5


@pytest.mark.parametrize("lattice", [CoxRossRubinsteinLattice(), TrigeorgisLattice()])
@pytest.mark.parametrize("put_call", ["call", "put"])
@pytest.mark.parametrize("strike", [1.05, 1.15])
def test_vanilla_converges_to_black_scholes(lattice, put_call, strike):
    fn = VanillaOptionFunction.of(strike, T, put_call)

    tree = price_uniform(fn, lattice, SPOT, VOL, R, Q, steps=151)
    bs = bs_price(SPOT, strike, T, VOL, R, Q, put_call)

    assert tree == pytest.approx(bs, abs=4e-4)


def test_tree_put_call_parity_is_exact():
    data = build_uniform_tree(CoxRossRubinsteinLattice(), SPOT, VOL, R, Q, T, 60)
    engine = TrinomialTree()

    call = engine.price(VanillaOptionFunction.of(1.12, T, "call"), data)
    put = engine.price(VanillaOptionFunction.of(1.12, T, "put"), data)

    # CRR half steps are martingales, so the tree reproduces the forward.
    forward_pv = SPOT * np.exp(-Q * T) - 1.12 * np.exp(-R * T)
    assert call - put == pytest.approx(forward_pv, abs=1e-12)


def test_option_values_layers_and_price():
    data = build_uniform_tree(CoxRossRubinsteinLattice(), SPOT, VOL, R, Q, T, 8)
    fn = VanillaOptionFunction.of(1.10, T, "call")

    layers = option_values(fn, data)

    assert [v.size for v in layers] == [2 * i + 1 for i in range(9)]
    assert layers[0][0] == TrinomialTree().price(fn, data)
    np.testing.assert_allclose(layers[-1], np.maximum(data.state_value(8) - 1.10, 0.0))


def test_knockout_is_bounded_by_vanilla():
    data = build_uniform_tree(CoxRossRubinsteinLattice(), SPOT, VOL, R, Q, T, 80)
    engine = TrinomialTree()
    vanilla = engine.price(VanillaOptionFunction.of(1.10, T, "call"), data)
    knockout = engine.price(
        KnockoutOptionFunction.of(1.10, T, "call", "up", 1.20, np.zeros(81)), data
    )

    assert 0.0 < knockout < vanilla


def test_knockout_with_rebate_everywhere_is_worth_more():
    data = build_uniform_tree(CoxRossRubinsteinLattice(), SPOT, VOL, R, Q, T, 40)
    engine = TrinomialTree()
    plain = engine.price(KnockoutOptionFunction.of(1.10, T, "put", "down", 1.0, [0.0] * 41), data)
    rebated = engine.price(
        KnockoutOptionFunction.of(1.10, T, "put", "down", 1.0, [0.01] * 41), data
    )
    assert rebated > plain


def test_unknown_function_raises_type_error():
    data = build_uniform_tree(CoxRossRubinsteinLattice(), SPOT, VOL, R, Q, T, 5)
    with pytest.raises(TypeError, match="Unsupported option function"):
        TrinomialTree().price(object(), data)


def test_knockout_rebate_must_cover_every_layer():
    data = build_uniform_tree(CoxRossRubinsteinLattice(), SPOT, VOL, R, Q, T, 10)
    fn = KnockoutOptionFunction.of(1.10, T, "call", "up", 1.20, np.linspace(0.0, 0.2, 21))

    with pytest.raises(ArgumentError, match="rebate has 21 values but the tree has 11 layers"):
        TrinomialTree().price(fn, data)
    with pytest.raises(ArgumentError, match="rebate has 21 values"):
        option_values(fn, data)


def test_payoff_expiry_must_match_tree_horizon():
    data = build_uniform_tree(CoxRossRubinsteinLattice(), SPOT, VOL, R, Q, T, 10)

    with pytest.raises(ArgumentError, match="differs from tree horizon"):
        TrinomialTree().price(VanillaOptionFunction.of(1.10, 0.25, "call"), data)
    with pytest.raises(ArgumentError, match="differs from tree horizon"):
        option_values(KnockoutOptionFunction.of(1.10, 1.0, "put", "down", 1.0, [0.0] * 11), data)


def test_aligned_term_structure_rebate_is_read_by_layer():
    data = build_uniform_tree(CoxRossRubinsteinLattice(), SPOT, VOL, R, Q, T, 10)
    rebate = np.linspace(0.0, 0.2, 11)
    fn = KnockoutOptionFunction.of(1.10, T, "call", "up", 1.20, rebate)

    layers = option_values(fn, data)

    knocked = data.state_value(10) >= 1.20
    np.testing.assert_allclose(layers[-1][knocked], 0.2)
    assert check_alignment(fn, data) is None
