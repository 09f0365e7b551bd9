"""
Text reports for the CLI.

Every function here returns a string; nothing prints. The layout follows the
console tables of the explorer: a header line, a dashed rule, one row per
item, then a short summary.
"""

from typing import Dict, Iterable, List, Optional

import numpy as np

from .automaton import render_trace
from .cycles import CycleReport
from .compression import CompressionReport
from .entropy import EntropySignature
from .inference import LocalityInference, Observations, RadiusInference, SupportInference
from .recovery import GeneralizationReport, RuleVote
from .rules import (
    ECARule,
    SUPPORT_PATTERNS,
    boolean_function_name,
    dependency_classes,
    rule_support,
)
from .survey import (
    CompressionSurvey,
    CycleSurvey,
    DependencySurvey,
    EntropySurvey,
    RadiusSurvey,
)


def _rule_line(width: int) -> str:
    return "-" * width


def _support_text(support: Optional[frozenset]) -> str:
    if support is None:
        return "unknown"
    ordered = [p for p in ('left', 'center', 'right') if p in support]
    ordered += sorted(p for p in support if p not in ('left', 'center', 'right'))
    return " + ".join(ordered) if ordered else "CONSTANT"


def _rule_rows(rules: List[int], per_line: int = 8) -> List[str]:
    return ["    " + "".join(f"{r:>4}" for r in rules[i:i + per_line])
            for i in range(0, len(rules), per_line)]


def _failures(entries) -> List[str]:
    return [f"  Rule {e.rule}: {e.error}" for e in entries]


# =============================================================================
# Single rule
# =============================================================================

def format_evolution(rule: int, trace: np.ndarray) -> str:
    width = trace.shape[1]
    return "\n".join([f"Rule {rule}", _rule_line(width), render_trace(trace),
                      _rule_line(width)])


def format_transition_table(rule: int) -> str:
    lines = [f"Rule {rule} transition table:", "  neighborhood -> next"]
    for pattern, out in ECARule(rule).transition_rows():
        lines.append(f"      {pattern}      ->  {out}")
    return "\n".join(lines)


def format_cycle(report: CycleReport) -> str:
    lines = [f"Analyzing Rule {report.rule} "
             f"(width={report.width}, max_steps={report.max_generations})",
             f"  Transient length: {report.transient}"]
    if report.found:
        lines.append(f"  Cycle period: {report.period}")
    else:
        lines.append(f"  Cycle period: not found within {report.max_generations} steps")
    lines.append(f"  Died: {'yes' if report.died else 'no'}")
    lines.append(f"  Final density: {report.final_density:.3f}")
    return "\n".join(lines)


def format_entropy(signature: EntropySignature, densities: Optional[Iterable[float]] = None,
                   width: Optional[int] = None) -> str:
    """
    Per-generation entropy table plus the post-transient summary.

    Args:
        signature: result of analyze_entropy
        densities: optional row densities to show next to each entropy
        width: automaton width, for the header
    """
    k = signature.block_size
    header = f"Entropy analysis: Rule {signature.rule}"
    if width is not None:
        header += f" (width={width}, blocks={k})"
    lines = [header, f"Max possible entropy: {float(k):.3f} bits",
             f"{'Gen':>5} {'Entropy':>8} {'Density':>8}", _rule_line(25)]
    densities = list(densities) if densities is not None else []
    for g, h in enumerate(signature.entropies):
        d = f"{densities[g]:>8.3f}" if g < len(densities) else f"{'':>8}"
        lines.append(f"{g:>5} {h:>8.4f} {d}")
    lines += [
        _rule_line(25),
        f"Skipped transient: {signature.skip} generations",
        f"Mean entropy:  {signature.mean:.4f}",
        f"Std dev:       {signature.std:.4f}",
        f"Range:         [{signature.minimum:.4f}, {signature.maximum:.4f}]",
        f"Normalized:    {100.0 * signature.normalized_mean:.1f}% of max",
        f"Class:         {signature.label}",
    ]
    if signature.cycle is not None:
        lines.append(f"Trace cycle:   transient {signature.cycle[0]}, "
                     f"period {signature.cycle[1]}")
    return "\n".join(lines)


def format_compression(report: CompressionReport, width: int, generations: int) -> str:
    return "\n".join([
        f"Compression analysis: Rule {report.rule} (width={width}, gens={generations})",
        f"  Raw size:        {report.raw_bits} bits",
        f"  Compressed:      {report.compressed_bits} bits",
        f"  Ratio:           {report.ratio:.3f} (lower = more compressible)",
        f"  Incompressible:  {report.incompressible_percent:.1f}%",
        f"  Band:            {report.band}",
    ])


# =============================================================================
# Inference
# =============================================================================

def format_rule_recovery(rule: int, observations: Observations, vote: RuleVote,
                         generalization: Optional[GeneralizationReport] = None) -> str:
    lines = [f"Rule inference test (true rule={rule}, width={observations.width}, "
             f"transitions={observations.transitions}, noise={observations.noise})",
             "",
             "Neighborhood observations:",
             "  NHD   Count   P(1)   Inferred   True",
             _rule_line(45)]
    true_rule = ECARule(rule)
    for v in reversed(vote.votes):
        lines.append(f"  {v.pattern}  {v.count:>6}  {v.p_one:>5.2f}  "
                     f"{v.inferred_bit:>9}  {true_rule.output(v.code):>5}")
    lines += [_rule_line(45),
              f"Inferred rule: {vote.rule}",
              f"True rule:     {rule}",
              f"Match:         {'EXACT' if vote.rule == rule else 'MISMATCH'}"]

    if generalization is not None:
        g = generalization
        names = list(g.causal_one_step)
        lines += ["", "Generalization test (biased initial conditions):"]
        for name in names:
            lines.append(f"  {name:<8} trajectory error: "
                         f"{100.0 * g.causal_trajectory[name]:.4f}%")
        lines += ["", "Comparison (one-step prediction, shifted density):",
                  "  " + f"{'Learner':22}" + "".join(f"{n:>10}" for n in names)]
        lines.append("  " + f"{'Local (causal)':22}" + "".join(
            f"{100.0 * g.causal_one_step[n]:>9.2f}%" for n in names))
        lines.append("  " + f"{'Global (correlational)':22}" + "".join(
            f"{100.0 * g.correlational_one_step[n]:>9.2f}%" for n in names))
        if g.exact:
            lines.append("\nRule recovery successful: learned the local mechanism, "
                         "not just correlations.")
        else:
            lines.append("\nRule recovery failed: noise or insufficient data "
                         "prevented learning the local mechanism.")
    return "\n".join(lines)


def format_radius_inference(rule: Optional[int], observations: Observations,
                            result: RadiusInference) -> str:
    head = "Radius inference"
    if rule is not None:
        head += f" (true rule={rule}, width={observations.width})"
    lines = [head, f"Testing radii 0 to {result.max_radius} ({result.mode.value} mode)...",
             f"Collected {observations.transitions} row transitions", ""]
    for trial in result.trials:
        lines.append(f"Radius {trial.radius} (window size {trial.window_size}):")
        lines.append(f"  Unique windows observed: {trial.unique_windows} / "
                     f"{trial.possible_windows} possible")
        lines.append(f"  Consistent: {trial.unique_windows - trial.inconsistent_windows} "
                     f"({100.0 * trial.consistency_rate:.1f}%)")
        lines.append(f"  Majority-vote error rate: {100.0 * trial.error_rate:.2f}%")
        if trial.inconsistent_windows:
            lines.append(f"  Inconsistent windows: {trial.inconsistent_windows} "
                         "(examples below)")
            for pattern, zeros, ones in trial.examples:
                lines.append(f"    {pattern} -> 0 ({zeros} times), 1 ({ones} times)")
        lines.append("")
    if result.resolved:
        lines.append(f"Inferred radius: {result.radius}")
        if result.radius == 0:
            lines.append("  Effective radius < 1: the neighbors do not matter")
        elif result.radius > 1:
            lines.append("  NOTE: consistent only above radius 1")
    else:
        lines.append(f"Result: {result.message}")
    return "\n".join(lines)


def format_support_inference(rule: Optional[int], support: SupportInference) -> str:
    lines = []
    if rule is not None:
        lines.append(f"Dependency inference from observations (rule={rule})")
        lines.append("(Only observed transitions are used, never the rule table)")
        lines.append("")
    for e in support.evidence:
        lines.append(f"Testing whether {e.position.upper()} matters:")
        lines.append(f"  Contexts tested: {e.contexts_tested} / {e.contexts_possible}")
        if e.relevant:
            lines.append(f"  Output differs in {e.contexts_differing} contexts: "
                         f"{e.position.upper()} matters")
        else:
            lines.append(f"  No differences found: {e.position.upper()} does NOT matter")
        lines.append("")
    if support.is_constant:
        lines.append("Inferred: CONSTANT rule (no dependencies)")
    else:
        lines.append(f"Inferred dependencies: {_support_text(support.support)}")

    if rule is not None and support.radius == 1:
        truth = rule_support(rule)
        lines += ["", f"Ground truth (from rule {rule} = 0b{rule:08b}):",
                  f"  True dependencies: {_support_text(truth)}",
                  f"  Match: {'YES' if truth == support.support else 'NO'}"]
    return "\n".join(lines)


def format_locality(rule: Optional[int], observations: Observations,
                    result: LocalityInference) -> str:
    text = format_radius_inference(rule, observations, result.radius_inference)
    if result.support_inference is not None:
        text += "\n\n" + format_support_inference(None, result.support_inference)
    return text


# =============================================================================
# Surveys
# =============================================================================

def format_cycle_survey(survey: CycleSurvey, width: int, max_steps: int) -> str:
    lines = [f"Analyzing all rules (width={width}, max_steps={max_steps})",
             f"{'Rule':>4} {'Transient':>10} {'Period':>8} {'Died?':>6} {'Density':>8}",
             _rule_line(50)]
    for e in survey.successes:
        r: CycleReport = e.result
        # rules that die on the first step are only counted
        if r.died and r.transient <= 1:
            continue
        period = str(r.period) if r.found else ">max"
        lines.append(f"{e.rule:>4} {r.transient:>10} {period:>8} "
                     f"{'yes' if r.died else 'no':>6} {r.final_density:>8.3f}")
    counts = survey.counts
    lines += [_rule_line(50), "Summary:",
              f"  Dies immediately: {counts['dies']}",
              f"  Short cycle (<={survey.short_period}): {counts['short cycle']}",
              f"  Long cycle (>{survey.short_period}): {counts['long cycle']}",
              f"  No cycle found: {counts['no cycle']}"]
    if survey.failures:
        lines += ["Failed:"] + _failures(survey.failures)
    return "\n".join(lines)


def format_entropy_survey(survey: EntropySurvey, width: int, generations: int,
                          block_size: int) -> str:
    lines = [f"Entropy survey (width={width}, gens={generations}, blocks={block_size})",
             f"{'Rule':>4} {'Mean':>7} {'StdDev':>7} {'Class':>8}",
             _rule_line(32)]
    for e in survey.successes:
        s: EntropySignature = e.result
        if s.label in ('fractal', 'complex', 'chaotic'):
            lines.append(f"{e.rule:>4} {s.normalized_mean:>7.3f} "
                         f"{s.normalized_std:>7.3f} {s.label:>8}")
    groups = survey.by_label
    lines += [_rule_line(32), "Classification:",
              f"  Dead:       {len(groups['dead'])} rules",
              f"  Fixed:      {len(groups['fixed'])} rules",
              f"  Periodic:   {len(groups['periodic'])} rules",
              f"  Unresolved: {len(groups['unresolved'])} rules",
              f"  Fractal:    {len(groups['fractal'])} rules ({groups['fractal'][:5]}...)",
              f"  Complex:    {len(groups['complex'])} rules",
              f"  Chaotic:    {len(groups['chaotic'])} rules ({groups['chaotic']})"]
    if survey.failures:
        lines += ["Failed:"] + _failures(survey.failures)
    return "\n".join(lines)


def format_compression_survey(survey: CompressionSurvey, width: int,
                              generations: int) -> str:
    lines = [f"Compression survey (width={width}, gens={generations})",
             f"{'Rule':>4} {'Ratio':>8} {'Class':>12}",
             _rule_line(28)]
    for e in survey.ranked:
        if e.result.band != 'trivial':
            lines.append(f"{e.rule:>4} {e.result.ratio:>8.3f} {e.result.band:>12}")
    counts = survey.counts
    b = survey.bands
    lines += [_rule_line(28), "Classification:",
              f"  Trivial (<{b.trivial:.0%}):     {counts['trivial']}",
              f"  Periodic ({b.trivial:.0%}-{b.periodic:.0%}):  {counts['periodic']}",
              f"  Structured ({b.periodic:.0%}-{b.structured:.0%}): {counts['structured']}",
              f"  Complex ({b.structured:.0%}-{b.complex:.0%}):  {counts['complex']}",
              f"  Chaotic (>{b.complex:.0%}):    {counts['chaotic']}"]
    most, least = survey.most_compressible, survey.least_compressible
    if most is not None:
        lines.append(f"\nMost compressible: Rule {most.rule} "
                     f"({100.0 * most.result.ratio:.1f}%)")
    if least is not None:
        lines.append(f"Least compressible: Rule {least.rule} "
                     f"({100.0 * least.result.ratio:.1f}%)")
    if survey.failures:
        lines += ["Failed:"] + _failures(survey.failures)
    return "\n".join(lines)


def format_radius_survey(survey: RadiusSurvey, width: int, generations: int) -> str:
    counts = survey.counts
    groups = survey.by_radius
    lines = [f"Radius survey (width={width}, gens={generations})",
             "Finding effective radius for each rule...", "",
             "Results:",
             f"  Effective radius 0: {counts['0']} rules",
             f"  Effective radius 1: {counts['1']} rules",
             f"  Effective radius >1: {counts['>1']} rules (unexpected!)",
             f"  Inconclusive: {counts['inconclusive']} rules"]

    if groups.get(0):
        lines += ["", "Rules with effective radius 0 (neighbors don't matter):"]
        lines += _rule_rows(groups[0])
    above = sorted(r for k, v in groups.items() if k is not None and k > 1 for r in v)
    if above:
        lines += ["", "Rules with effective radius >1 (unexpected for ECAs):"]
        lines += [f"  Rule {r}" for r in above]

    names = survey.radius_zero_names()
    if names:
        lines += ["", "Analysis of radius-0 rules:",
                  "These rules have output that depends only on the center cell."]
        for e in survey.successes:
            if e.rule in names:
                table = e.result.radius_inference.truth_table
                lines.append(f"  Rule {e.rule:>3}: f(0)={table[0]}, f(1)={table[1]} "
                             f"({names[e.rule]})")
    if survey.failures:
        lines += ["Failed:"] + _failures(survey.failures)
    return "\n".join(lines)


def format_dependency_classes(groups: Optional[Dict[frozenset, List[int]]] = None) -> str:
    """Decoder-side dependency analysis of all 256 rules."""
    if groups is None:
        groups = dependency_classes()
    lines = ["Dependency analysis for all 256 rules",
             "Checking which neighborhood positions are necessary...", ""]
    for pattern, name in SUPPORT_PATTERNS:
        rules = groups.get(pattern)
        if not rules:
            continue
        lines.append(f"{name}: {len(rules)} rules")
        if len(rules) <= 16:
            lines += _rule_rows(rules)
        else:
            lines.append(f"    (first 8: {rules[:8]}...)")
        lines.append("")

    lines.append("Analysis of center-ignoring rules (left + right only):")
    for rule in groups.get(frozenset({'left', 'right'}), []):
        lines.append(f"  Rule {rule:>3}: f(l,r) = {boolean_function_name(rule)}")
    return "\n".join(lines)


def format_dependency_survey(survey: DependencySurvey) -> str:
    lines = [format_dependency_classes(survey.true_groups), "",
             "Inferred from observations:",
             f"  Matches:    {len(survey.matches)} rules",
             f"  Mismatches: {len(survey.mismatches)} rules"]
    for rule in survey.mismatches:
        entry = next(e for e in survey.entries if e.rule == rule)
        lines.append(f"    Rule {rule:>3}: inferred {_support_text(entry.result.support)}, "
                     f"true {_support_text(rule_support(rule))}")
    if survey.failures:
        lines += ["Failed:"] + _failures(survey.failures)
    return "\n".join(lines)
