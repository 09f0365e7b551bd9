import numpy as np

from eca_explorer.automaton import step_row
from eca_explorer.cycles import find_cycle
from eca_explorer.entropy import analyze_entropy
from eca_explorer.inference import Observations, infer_locality
from eca_explorer.survey import compression_survey, entropy_survey


def test_rule_30_entropy_is_high_and_steady():
    signature = analyze_entropy(30, 31, 200, 4, 50)
    assert signature.normalized_mean > 0.9
    assert signature.normalized_variance < 0.03
    assert signature.label == 'chaotic'


def test_rule_90_entropy_oscillates_and_it_reads_two_neighbors():
    r90 = analyze_entropy(90, 31, 200, 4, 50)
    r30 = analyze_entropy(30, 31, 200, 4, 50)
    assert r90.normalized_variance > r30.normalized_variance
    assert analyze_entropy(90, 79).label == 'fractal'

    result = infer_locality(Observations.collect(90, seed=90))
    assert result.radius == 1
    assert result.support == frozenset({'left', 'right'})


def test_entropy_survey_class_sizes():
    survey = entropy_survey()
    counts = survey.counts
    assert not survey.failures
    assert sum(counts.values()) == 256
    assert counts['chaotic'] == 18
    assert counts['fractal'] == 23
    groups = survey.by_label
    assert {30, 45, 110} <= set(groups['chaotic'])
    assert {90, 150, 126} <= set(groups['fractal'])


def test_compression_ranking():
    survey = compression_survey(rules=[30, 110, 90, 0])
    ratios = survey.ratios()
    assert ratios[30] > ratios[110] > ratios[90] > ratios[0]
    assert ratios[0] == min(ratios.values())
    assert survey.ranked[0].rule == 0
    assert survey.least_compressible.rule == 30


def test_zero_row_is_fixed_iff_bit_0_is_clear():
    for width in (1, 2, 5):
        zeros = np.zeros(width, dtype=np.uint8)
        for rule in range(256):
            fixed = np.array_equal(step_row(zeros, rule), zeros)
            assert fixed == (rule & 1 == 0), (rule, width)
            if fixed:
                assert find_cycle(rule, width, 10, initial=zeros).died


def test_cycle_detection_is_a_pure_function():
    first = find_cycle(110, 31, 10000)
    second = find_cycle(110, 31, 10000)
    assert first == second
