import numpy as np
import pytest

from eca_explorer.cycles import CycleStatus, cycle_class, find_cycle, trace_cycle
from eca_explorer.errors import InvalidConfiguration


def test_rule_0_dies_after_one_step():
    report = find_cycle(0, 31, 10000)
    assert report.status is CycleStatus.FOUND_CYCLE
    assert report.transient == 1
    assert report.period == 1
    assert report.died
    assert report.final_density == 0.0


def test_rule_0_with_budget_of_one():
    report = find_cycle(0, 31, 1)
    assert report.found
    assert (report.transient, report.period) == (1, 1)


def test_identity_rule_is_a_fixed_point():
    report = find_cycle(204, 31, 100)
    assert (report.transient, report.period) == (0, 1)
    assert not report.died


def test_complement_rule_has_period_two():
    report = find_cycle(51, 31, 100)
    assert (report.transient, report.period) == (0, 2)


def test_rule_255_fills_and_stays():
    report = find_cycle(255, 31, 100)
    assert (report.transient, report.period) == (1, 1)
    assert not report.died
    assert report.final_density == 1.0


def test_budget_exhausted():
    report = find_cycle(30, 31, 5)
    assert report.status is CycleStatus.EXHAUSTED
    assert report.transient == 5
    assert report.period is None
    assert report.generations_run == 5


def test_same_inputs_same_report():
    assert find_cycle(110, 31, 10000) == find_cycle(110, 31, 10000)


def test_explicit_initial_row():
    report = find_cycle(204, 4, 10, initial=[1, 0, 1, 1])
    assert (report.transient, report.period) == (0, 1)
    with pytest.raises(InvalidConfiguration):
        find_cycle(204, 5, 10, initial=[1, 0, 1, 1])


@pytest.mark.parametrize("rule,width,budget", [(256, 31, 10), (30, 0, 10), (30, 31, 0)])
def test_invalid_inputs(rule, width, budget):
    with pytest.raises(InvalidConfiguration):
        find_cycle(rule, width, budget)


def test_trace_cycle():
    trace = np.array([[1, 0], [0, 1], [1, 0]], dtype=np.uint8)
    assert trace_cycle(trace) == (0, 2)
    assert trace_cycle(np.array([[1, 0], [0, 1]])) is None


def test_cycle_class():
    assert cycle_class(find_cycle(0, 31, 100)) == 'dies'
    assert cycle_class(find_cycle(51, 31, 100)) == 'short cycle'
    assert cycle_class(find_cycle(51, 31, 100), short_period=1) == 'long cycle'
    assert cycle_class(find_cycle(30, 31, 5)) == 'no cycle'
