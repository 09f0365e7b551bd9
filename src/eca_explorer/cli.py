"""
eca_explorer/cli.py - command line interface

Usage:
    eca-explorer [mode] [options]
    python -m eca_explorer [mode] [options]

Modes (one at a time, default: render the rule and print its table):
    --cycle             cycle detection for one rule
    --analyze           cycle survey over all 256 rules
    --entropy           block-entropy signature of one rule
    --entropy-survey    entropy classes of all rules
    --compress          spacetime compression ratio of one rule
    --compress-survey   compression ranking of all rules
    --infer             recover the rule number from observations
    --radius            infer the effective radius (and support)
    --radius-survey     effective radius of all rules
    --dependency        which neighbors each rule depends on
    --dependency-infer  infer one rule's dependencies from observations

Examples:
    eca-explorer --rule 30 --width 79 --generations 40
    eca-explorer --cycle --rule 110 --width 31 --max-steps 10000
    eca-explorer --entropy --rule 30 --block-size 4 --plot rule30.png
    eca-explorer --radius --rule 110 --noise 0.05 --tolerant --tolerance 0.1
"""

import argparse
import sys
from typing import List, Optional

from . import report
from .automaton import Automaton
from .compression import analyze_compression
from .config import (
    DEFAULT_RULE,
    INFERENCE_SEED,
    INFERENCE_TOLERANCE,
    MODE_DEFAULTS,
)
from .cycles import find_cycle
from .entropy import analyze_entropy_trace
from .errors import ExplorerError, InvalidConfiguration
from .inference import InferenceMode, Observations, infer_locality, infer_support
from .recovery import generalization_test, infer_rule_number
from .rules import validate_rule
from .survey import (
    compression_survey,
    cycle_survey,
    dependency_survey,
    entropy_survey,
    radius_survey,
)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_CONFIG = 2

MODE_HELP = {
    'cycle': "Cycle detection for one rule",
    'analyze': "Cycle survey over all 256 rules",
    'entropy': "Block-entropy signature of one rule",
    'entropy_survey': "Entropy classes of all rules",
    'compress': "Spacetime compression ratio of one rule",
    'compress_survey': "Compression ranking of all rules",
    'infer': "Recover the rule number from observations",
    'radius': "Infer the effective radius and support of one rule",
    'radius_survey': "Effective radius of all rules",
    'dependency': "Which neighbors each rule depends on",
    'dependency_infer': "Infer one rule's dependencies from observations",
}


# =============================================================================
# Commands
# =============================================================================

def cmd_render(args):
    ca = Automaton.centered(args.width, validate_rule(args.rule))
    trace = ca.evolve(args.generations)
    print(report.format_evolution(args.rule, trace))
    print()
    print(report.format_transition_table(args.rule))
    if args.plot:
        from .visualize import plot_spacetime
        plot_spacetime(trace, args.plot, rule=args.rule)
        print(f"\nSaved figure to {args.plot}")


def cmd_cycle(args):
    result = find_cycle(args.rule, args.width, args.max_steps)
    print(report.format_cycle(result))


def cmd_analyze(args):
    survey = cycle_survey(args.width, args.max_steps, progress=True)
    print(report.format_cycle_survey(survey, args.width, args.max_steps))


def cmd_entropy(args):
    signature, trace = analyze_entropy_trace(args.rule, args.width, args.generations,
                                             args.block_size, args.skip)
    print(report.format_entropy(signature, trace.mean(axis=1), args.width))
    if args.plot:
        from .visualize import plot_spacetime
        plot_spacetime(trace, args.plot, rule=args.rule, signature=signature)
        print(f"\nSaved figure to {args.plot}")


def cmd_entropy_survey(args):
    survey = entropy_survey(args.width, args.generations, args.block_size, args.skip,
                            progress=True)
    print(report.format_entropy_survey(survey, args.width, args.generations,
                                       args.block_size))


def cmd_compress(args):
    result = analyze_compression(args.rule, args.width, args.generations)
    print(report.format_compression(result, args.width, args.generations))
    if args.plot:
        from .visualize import plot_spacetime
        trace = Automaton.centered(args.width, args.rule).evolve(args.generations)
        plot_spacetime(trace, args.plot, rule=args.rule)
        print(f"\nSaved figure to {args.plot}")


def cmd_compress_survey(args):
    survey = compression_survey(args.width, args.generations, progress=True)
    print(report.format_compression_survey(survey, args.width, args.generations))


def _inference_mode(args) -> InferenceMode:
    return InferenceMode.TOLERANT if args.tolerant else InferenceMode.STRICT


def _collect(args) -> Observations:
    return Observations.collect(args.rule, args.width, args.generations, args.trials,
                                noise=args.noise, seed=args.seed)


def cmd_infer(args):
    obs = _collect(args)
    vote = infer_rule_number(obs)
    generalization = generalization_test(args.rule, vote, obs, args.width, args.generations)
    print(report.format_rule_recovery(args.rule, obs, vote, generalization))


def cmd_radius(args):
    obs = _collect(args)
    result = infer_locality(obs, args.max_radius, _inference_mode(args), args.tolerance)
    print(report.format_locality(args.rule, obs, result))


def cmd_radius_survey(args):
    survey = radius_survey(args.width, args.generations, args.max_radius,
                           args.trials, args.noise, _inference_mode(args),
                           args.tolerance, args.seed,
                           progress=True)
    print(report.format_radius_survey(survey, args.width, args.generations))


def cmd_dependency(args):
    survey = dependency_survey(trials=args.trials, noise=args.noise,
                               seed=args.seed, progress=True)
    print(report.format_dependency_survey(survey))


def cmd_dependency_infer(args):
    obs = _collect(args)
    print(f"Collected {obs.transitions} transitions\n")
    print(report.format_support_inference(args.rule, infer_support(obs, 1)))


COMMANDS = {
    'render': cmd_render,
    'cycle': cmd_cycle,
    'analyze': cmd_analyze,
    'entropy': cmd_entropy,
    'entropy_survey': cmd_entropy_survey,
    'compress': cmd_compress,
    'compress_survey': cmd_compress_survey,
    'infer': cmd_infer,
    'radius': cmd_radius,
    'radius_survey': cmd_radius_survey,
    'dependency': cmd_dependency,
    'dependency_infer': cmd_dependency_infer,
}


# =============================================================================
# Parsing
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='eca-explorer',
        description="Explore the 256 elementary cellular automata",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    modes = parser.add_mutually_exclusive_group()
    for mode, text in MODE_HELP.items():
        flag = '--' + mode.replace('_', '-')
        modes.add_argument(flag, dest='mode', action='store_const', const=mode,
                           help=text)
    parser.set_defaults(mode='render')

    parser.add_argument("--rule", type=int, default=None, help="Rule number (0-255)")
    parser.add_argument("--width", type=int, default=None, help="Number of cells")
    parser.add_argument("--generations", type=int, default=None,
                        help="Generations to simulate")
    parser.add_argument("--max-steps", type=int, default=None,
                        help="Step budget for cycle detection")
    parser.add_argument("--block-size", type=int, default=None,
                        help="Block length for entropy")
    parser.add_argument("--skip", type=int, default=None,
                        help="Transient generations skipped by entropy statistics")
    parser.add_argument("--max-radius", type=int, default=None,
                        help="Largest radius tried by radius inference")
    parser.add_argument("--noise", type=float, default=None,
                        help="Probability of flipping each observed output bit")
    parser.add_argument("--tolerant", action="store_true",
                        help="Accept a radius whose majority-vote error rate is "
                             "within --tolerance")
    parser.add_argument("--tolerance", type=float, default=INFERENCE_TOLERANCE,
                        help="Error rate accepted in tolerant mode")
    parser.add_argument("--trials", type=int, default=None,
                        help="Random initial rows sampled for inference")
    parser.add_argument("--seed", type=int, default=INFERENCE_SEED,
                        help="Random seed for sampled observations")
    parser.add_argument("--plot", default=None, metavar="PATH",
                        help="Save a spacetime figure to PATH")
    return parser


def resolve_defaults(args: argparse.Namespace) -> argparse.Namespace:
    """Fill unset options from the defaults of the selected mode."""
    for key, value in MODE_DEFAULTS[args.mode].items():
        if getattr(args, key) is None:
            setattr(args, key, value)
    if args.rule is None:
        args.rule = DEFAULT_RULE
    if args.noise is None:
        args.noise = 0.0
    return args


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = resolve_defaults(parser.parse_args(argv))
    try:
        COMMANDS[args.mode](args)
    except InvalidConfiguration as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID_CONFIG
    except ExplorerError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
