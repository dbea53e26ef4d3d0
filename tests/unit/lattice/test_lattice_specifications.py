import numpy as np
import pytest

from barrier_lattice.errors import ArgumentError
from barrier_lattice.tree import (
    CoxRossRubinsteinLattice,
    LatticeSpecification,
    TrigeorgisLattice,
    build_uniform_tree,
    lattice_factors,
)


@pytest.mark.parametrize("lattice", [CoxRossRubinsteinLattice(), TrigeorgisLattice()])
def test_lattices_satisfy_protocol(lattice):
    assert isinstance(lattice, LatticeSpecification)


def test_space_steps():
    dt = 0.01
    assert CoxRossRubinsteinLattice().space_step(0.2, dt) == pytest.approx(0.2 * np.sqrt(0.02))
    assert TrigeorgisLattice().space_step(0.2, dt) == pytest.approx(0.2 * np.sqrt(0.03))


@pytest.mark.parametrize("lattice", [CoxRossRubinsteinLattice(), TrigeorgisLattice()])
def test_factors_are_reciprocal_around_one(lattice):
    down, middle, up = lattice.factors(0.15, 1 / 52)
    assert middle == 1.0
    assert down * up == pytest.approx(1.0, abs=1e-14)
    assert (down, middle, up) == lattice_factors(lattice, 0.15, 1 / 52)


@pytest.mark.parametrize("lattice", [CoxRossRubinsteinLattice(), TrigeorgisLattice()])
def test_probabilities_are_valid_and_match_drift(lattice):
    vol, r, q, dt = 0.12, 0.05, 0.02, 1 / 100
    probs = lattice.probabilities(vol, r, q, dt)
    assert all(0.0 <= p <= 1.0 for p in probs)
    assert sum(probs) == pytest.approx(1.0, abs=1e-14)

    down, _, up = lattice.factors(vol, dt)
    growth = probs[0] * down + probs[1] + probs[2] * up
    # Both lattices match the forward to first order in dt.
    assert growth == pytest.approx(np.exp((r - q) * dt), abs=1e-6)


def test_crr_without_carry_has_half_middle_weight():
    down, middle, up = CoxRossRubinsteinLattice().probabilities(0.2, 0.03, 0.03, 0.01)
    # Zero carry still leaves a negative drift in log space.
    assert up < down
    assert middle == pytest.approx(0.5, abs=1e-3)


def test_trigeorgis_rejects_dominant_drift():
    with pytest.raises(ArgumentError, match="Invalid trinomial probabilities"):
        TrigeorgisLattice().probabilities(0.01, 0.5, 0.0, 1.0)


@pytest.mark.parametrize("vol, dt", [(0.0, 0.1), (-0.1, 0.1), (0.1, 0.0)])
def test_invalid_inputs_raise(vol, dt):
    with pytest.raises(ArgumentError):
        CoxRossRubinsteinLattice().space_step(vol, dt)


def test_build_uniform_tree_layout():
    lattice = CoxRossRubinsteinLattice()
    data = build_uniform_tree(lattice, 1.1, 0.1, 0.05, 0.03, 0.5, 5)

    dx = lattice.space_step(0.1, 0.1)
    assert data.step_count == 5
    assert data.dt == pytest.approx(0.1)
    for i in range(6):
        layer = data.state_value(i)
        assert layer.size == 2 * i + 1
        assert layer[i] == pytest.approx(1.1)
        np.testing.assert_allclose(np.diff(np.log(layer)), dx, rtol=1e-12)
    for i in range(1, 6):
        assert data.discount_factor(i) == pytest.approx(np.exp(-0.05 * 0.1))
        np.testing.assert_allclose(
            data.transition_probability(i),
            np.tile(lattice.probabilities(0.1, 0.05, 0.03, 0.1), (2 * i - 1, 1)),
        )


def test_build_uniform_tree_needs_three_steps():
    with pytest.raises(ArgumentError, match="steps must be >= 3"):
        build_uniform_tree(CoxRossRubinsteinLattice(), 1.1, 0.1, 0.0, 0.0, 1.0, 2)
