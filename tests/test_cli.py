import pytest

from eca_explorer.automaton import Automaton
from eca_explorer.cli import EXIT_INVALID_CONFIG, EXIT_OK, build_parser, main, resolve_defaults


def test_render_default_mode(capsys):
    assert main(['--rule', '110', '--width', '7', '--generations', '3']) == EXIT_OK
    out = capsys.readouterr().out
    assert "Rule 110" in out
    assert "## #   " in out
    assert "Rule 110 transition table:" in out
    assert "      110      ->  1" in out


def test_mode_defaults_fill_unset_options():
    args = resolve_defaults(build_parser().parse_args(['--cycle']))
    assert (args.rule, args.width, args.max_steps) == (110, 31, 10000)
    args = resolve_defaults(build_parser().parse_args(['--dependency-infer']))
    assert (args.rule, args.generations) == (90, 30)
    args = resolve_defaults(build_parser().parse_args(['--width', '9']))
    assert args.mode == 'render'
    assert args.width == 9


def test_cycle(capsys):
    assert main(['--cycle', '--rule', '0', '--width', '31']) == EXIT_OK
    out = capsys.readouterr().out
    assert "Transient length: 1" in out
    assert "Cycle period: 1" in out
    assert "Died: yes" in out


def test_analyze(capsys):
    assert main(['--analyze', '--max-steps', '20']) == EXIT_OK
    out = capsys.readouterr().out
    assert "Summary:" in out
    assert "Dies immediately:" in out


def test_invalid_rule_exits_with_status_2(capsys):
    assert main(['--rule', '300']) == EXIT_INVALID_CONFIG
    assert "error:" in capsys.readouterr().err


def test_block_size_wider_than_row(capsys):
    assert main(['--entropy', '--rule', '30', '--width', '3', '--block-size', '4']) == 2


def test_modes_are_exclusive():
    with pytest.raises(SystemExit):
        main(['--cycle', '--entropy'])


def test_entropy(capsys):
    assert main(['--entropy', '--rule', '30', '--width', '31',
                 '--generations', '60', '--block-size', '4']) == EXIT_OK
    out = capsys.readouterr().out
    assert "Max possible entropy: 4.000 bits" in out
    assert "Class:" in out


def test_compress(capsys):
    assert main(['--compress', '--rule', '0', '--width', '31', '--generations', '20']) == 0
    out = capsys.readouterr().out
    assert "Raw size:        651 bits" in out
    assert "Ratio:" in out


def test_radius(capsys):
    assert main(['--radius', '--rule', '90', '--max-radius', '2']) == EXIT_OK
    out = capsys.readouterr().out
    assert "Inferred radius: 1" in out
    assert "Inferred dependencies: left + right" in out


def test_radius_strict_on_noise(capsys):
    with pytest.warns(UserWarning):
        assert main(['--radius', '--rule', '110', '--noise', '0.1',
                     '--max-radius', '1']) == EXIT_OK
    assert "Result: inconclusive" in capsys.readouterr().out


def test_radius_tolerant(capsys):
    assert main(['--radius', '--rule', '110', '--noise', '0.05', '--tolerant',
                 '--tolerance', '0.1', '--max-radius', '2']) == EXIT_OK
    assert "Inferred radius: 1" in capsys.readouterr().out


def test_infer(capsys):
    assert main(['--infer', '--rule', '110']) == EXIT_OK
    out = capsys.readouterr().out
    assert "Inferred rule: 110" in out
    assert "Match:         EXACT" in out
    assert "Global (correlational)" in out


def test_dependency_infer(capsys):
    assert main(['--dependency-infer', '--rule', '90']) == EXIT_OK
    out = capsys.readouterr().out
    assert "Inferred dependencies: left + right" in out
    assert "Match: YES" in out


def test_plot(tmp_path, capsys):
    path = tmp_path / "rule30.png"
    assert main(['--rule', '30', '--width', '21', '--generations', '10',
                 '--plot', str(path)]) == EXIT_OK
    assert path.exists()


def test_bad_survey_width_exits_with_status_2(capsys):
    assert main(['--analyze', '--width', '0', '--max-steps', '5']) == EXIT_INVALID_CONFIG
    captured = capsys.readouterr()
    assert "Width must be >= 1" in captured.err
    assert "Rule 0" not in captured.out


@pytest.mark.parametrize("mode", ['--infer', '--radius', '--dependency-infer',
                                  '--radius-survey', '--dependency'])
def test_zero_trials_is_rejected(mode, capsys):
    assert main([mode, '--trials', '0']) == EXIT_INVALID_CONFIG
    assert "Trials must be >= 1" in capsys.readouterr().err


def test_trials_default_per_mode():
    args = resolve_defaults(build_parser().parse_args(['--infer']))
    assert args.trials == 10
    args = resolve_defaults(build_parser().parse_args(['--dependency']))
    assert args.trials == 5
    args = resolve_defaults(build_parser().parse_args(['--radius', '--trials', '3']))
    assert args.trials == 3


def test_entropy_evolves_the_rule_once(monkeypatch, capsys):
    calls = []
    evolve = Automaton.evolve

    def counting_evolve(self, generations):
        calls.append(generations)
        return evolve(self, generations)

    monkeypatch.setattr(Automaton, 'evolve', counting_evolve)
    assert main(['--entropy', '--rule', '90', '--width', '31',
                 '--generations', '40']) == EXIT_OK
    assert calls == [40]
    assert "Class:" in capsys.readouterr().out
