import pytest

from eca_explorer.errors import InvalidConfiguration
from eca_explorer.survey import (
    RuleSurvey,
    compression_survey,
    cycle_survey,
    dependency_survey,
    entropy_survey,
    radius_survey,
    support_pattern_groups,
)


def _flaky(rule):
    if rule == 3:
        raise ValueError("boom")
    return rule * 2


def test_one_failure_does_not_stop_the_survey():
    entries = list(RuleSurvey(_flaky, range(5)))
    assert [e.rule for e in entries] == [0, 1, 2, 3, 4]
    assert entries[3].error == "ValueError: boom"
    assert entries[3].result is None
    assert [e.result for e in entries if e.ok] == [0, 2, 4, 8]


def test_survey_is_lazy_and_restartable():
    calls = []

    def analyze(rule):
        calls.append(rule)
        return rule

    survey = RuleSurvey(analyze, [7, 8, 9])
    assert calls == []
    assert next(iter(survey)).rule == 7
    assert calls == [7]
    first = [(e.rule, e.result) for e in survey]
    second = [(e.rule, e.result) for e in survey]
    assert first == second == [(7, 7), (8, 8), (9, 9)]
    assert len(survey) == 3


def test_progress_reports_failures(capsys):
    list(RuleSurvey(_flaky, range(5), progress=True))
    captured = capsys.readouterr()
    assert "Error processing rule 3: ValueError: boom" in captured.out + captured.err


def test_cycle_survey_counts():
    survey = cycle_survey(width=31, max_generations=50, rules=[0, 51, 204, 255])
    assert survey.counts == {'dies': 1, 'short cycle': 3, 'long cycle': 0, 'no cycle': 0}
    frame = survey.to_frame()
    assert list(frame.index) == [0, 51, 204, 255]
    assert frame.loc[51, 'period'] == 2
    assert frame.loc[0, 'class'] == 'dies'


def test_entropy_survey_labels():
    survey = entropy_survey(width=31, generations=200, block_size=4, skip=50, rules=[0, 30])
    groups = survey.by_label
    assert groups['dead'] == [0]
    assert groups['chaotic'] == [30]
    assert sum(survey.counts.values()) == 2


def test_radius_survey():
    survey = radius_survey(rules=[0, 51, 90, 110, 204])
    assert survey.counts == {'0': 3, '1': 2, '>1': 0, 'inconclusive': 0}
    assert survey.radius_zero_names() == {0: 'constant 0', 51: 'NOT', 204: 'identity'}
    frame = survey.to_frame()
    assert frame.loc[90, 'support'] == 'left+right'


def test_radius_survey_needs_a_radius():
    with pytest.raises(InvalidConfiguration):
        radius_survey(max_radius=0, rules=[0])


@pytest.mark.parametrize("run", [
    lambda: cycle_survey(width=0, rules=[0]),
    lambda: cycle_survey(max_generations=0, rules=[0]),
    lambda: entropy_survey(generations=0, rules=[0]),
    lambda: entropy_survey(width=3, block_size=4, rules=[0]),
    lambda: entropy_survey(skip=-1, rules=[0]),
    lambda: compression_survey(width=0, rules=[0]),
    lambda: compression_survey(generations=0, rules=[0]),
    lambda: radius_survey(trials=0, rules=[0]),
    lambda: dependency_survey(width=0, rules=[0]),
    lambda: dependency_survey(trials=0, rules=[0]),
    lambda: dependency_survey(noise=1.5, rules=[0]),
])
def test_bad_survey_parameters_fail_before_any_rule(run):
    with pytest.raises(InvalidConfiguration):
        run()


def test_dependency_survey_matches_decoder():
    survey = dependency_survey(rules=[0, 90, 110, 170, 204])
    assert survey.mismatches == []
    assert survey.matches == [0, 90, 110, 170, 204]
    assert survey.to_frame().loc[170, 'inferred'] == 'right'


def test_support_pattern_groups():
    groups = support_pattern_groups()
    assert len(groups) == 8
    assert sum(len(rules) for _, rules in groups) == 256
    assert groups[0] == ('none (constant)', [0, 255])
