import numpy as np
import pytest

from eca_explorer.automaton import (
    Automaton,
    evolve_row,
    render_trace,
    seed_finite_block,
    seed_random,
    seed_simple,
    step_row,
)
from eca_explorer.errors import InvalidConfiguration


def test_rule_110_from_single_cell():
    trace = Automaton.centered(7, 110).evolve(3)
    assert render_trace(trace).split('\n') == [
        "   #   ",
        "  ##   ",
        " ###   ",
        "## #   ",
    ]


def test_rule_90_one_step():
    ca = Automaton.centered(7, 90)
    assert str(ca) == "   #   "
    assert str(ca.step()) == "  # #  "


def test_wraparound_at_index_zero():
    ca = Automaton([1, 0, 0, 0, 0], 90)
    assert ca.step().cells.tolist() == [0, 1, 0, 0, 1]


def test_width_one_reads_itself_three_times():
    assert Automaton([1], 110).step().cells.tolist() == [0]
    assert Automaton([1], 254).step().cells.tolist() == [1]


def test_rule_0_clears_row():
    ca = Automaton(seed_random(40, 0.5, np.random.default_rng(3)), 0)
    assert ca.step().population == 0


def test_step_matches_rule_bits_for_every_rule():
    x = seed_random(23, 0.5, np.random.default_rng(0))
    w = len(x)
    for rule in range(256):
        expected = [(rule >> (4 * x[i - 1] + 2 * x[i] + x[(i + 1) % w])) & 1
                    for i in range(w)]
        assert step_row(x, rule).tolist() == expected
        # same input, same output
        assert np.array_equal(step_row(x, rule), step_row(x, rule))


def test_evolve_does_not_advance():
    ca = Automaton.centered(11, 30)
    before = ca.cells.copy()
    trace = ca.evolve(5)
    assert trace.shape == (6, 11)
    assert np.array_equal(trace[0], before)
    assert np.array_equal(ca.cells, before)
    assert np.array_equal(trace, evolve_row(before, 30, 5))


def test_copy_is_independent():
    ca = Automaton.centered(9, 30)
    other = ca.copy()
    ca.step()
    assert other != ca
    assert other == Automaton.centered(9, 30)


def test_properties():
    ca = Automaton([1, 1, 0, 0], 30)
    assert ca.width == 4
    assert ca.population == 2
    assert ca.density == 0.5
    assert not ca.is_constant
    assert Automaton([1, 1, 1], 30).is_constant


def test_seeds():
    assert seed_simple(5).tolist() == [0, 0, 1, 0, 0]
    assert seed_finite_block(6, 2).tolist() == [0, 0, 1, 1, 0, 0]
    rng = np.random.default_rng(1)
    assert seed_random(1000, 0.0, rng).sum() == 0
    assert seed_random(1000, 1.0, rng).sum() == 1000


@pytest.mark.parametrize("cells,rule", [([], 30), ([1, 0], 256), ([[1, 0]], 30)])
def test_invalid_automaton(cells, rule):
    with pytest.raises(InvalidConfiguration):
        Automaton(cells, rule)


def test_invalid_seed_width():
    with pytest.raises(InvalidConfiguration):
        Automaton.centered(0, 30)
