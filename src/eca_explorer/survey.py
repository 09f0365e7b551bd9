"""
Surveys over the rule space.

RuleSurvey wraps any single-rule analysis and yields one SurveyEntry per rule.
It is lazy, finite and restartable (iterating it again reruns the analyses),
and each rule runs on its own: an exception from one rule is recorded on its
entry and the survey moves on to the next.

The *_survey helpers run a RuleSurvey and aggregate the results into a
summary with counts, groupings and a pandas DataFrame view.
"""

from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Iterable, Iterator, List, Optional

import pandas as pd
from tqdm import tqdm

from .compression import CompressionReport, Compressor, analyze_compression, deflate_compressor
from .config import (
    COMPRESSION_GENERATIONS,
    CYCLE_WIDTH,
    DEFAULT_COMPRESSION_BANDS,
    DEFAULT_ENTROPY_THRESHOLDS,
    DEFAULT_WIDTH,
    ENTROPY_BLOCK_SIZE,
    ENTROPY_GENERATIONS,
    ENTROPY_SKIP,
    INFERENCE_GENERATIONS,
    INFERENCE_SEED,
    INFERENCE_TOLERANCE,
    INFERENCE_WIDTH,
    NUM_RULES,
    SHORT_CYCLE_PERIOD,
    SURVEY_MAX_GENERATIONS,
    SURVEY_MAX_RADIUS,
    SURVEY_TRIALS,
    CompressionBands,
    EntropyThresholds,
)
from .cycles import CycleReport, cycle_class, find_cycle
from .entropy import ENTROPY_LABELS, EntropySignature, analyze_entropy
from .errors import require
from .inference import (
    InferenceMode,
    LocalityInference,
    Observations,
    infer_locality,
    infer_support,
)
from .rules import SUPPORT_PATTERNS, center_map_name, dependency_classes, rule_support

ALL_RULES = range(NUM_RULES)


def _check_run(width: int, generations: int, name: str = "Generations"):
    """Survey-wide parameters are checked once, before any rule runs."""
    require(width >= 1, f"Width must be >= 1, got {width}")
    require(generations >= 1, f"{name} must be >= 1, got {generations}")


def _check_sampling(width: int, generations: int, trials: int, noise: float):
    _check_run(width, generations)
    require(trials >= 1, f"Trials must be >= 1, got {trials}")
    require(0.0 <= noise <= 1.0, f"Noise must be in [0, 1], got {noise}")


@dataclass
class SurveyEntry:
    rule: int
    result: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class RuleSurvey:
    """
    One analysis fanned out over a set of rules.

    Args:
        analyze: callable rule -> result
        rules: rules to visit, in order (default: all 256)
        progress: show a tqdm progress bar
        desc: progress bar label
    """

    def __init__(self, analyze: Callable[[int], Any], rules: Iterable[int] = ALL_RULES,
                 progress: bool = False, desc: str = "Surveying"):
        self.analyze = analyze
        self.rules = list(rules)
        self.progress = progress
        self.desc = desc

    def __len__(self) -> int:
        return len(self.rules)

    def run_one(self, rule: int) -> SurveyEntry:
        try:
            return SurveyEntry(rule, self.analyze(rule))
        except Exception as e:
            return SurveyEntry(rule, error=f"{type(e).__name__}: {e}")

    def __iter__(self) -> Iterator[SurveyEntry]:
        rules = tqdm(self.rules, desc=self.desc, unit="rule") if self.progress else self.rules
        for rule in rules:
            entry = self.run_one(rule)
            if entry.error is not None and self.progress:
                tqdm.write(f"  Error processing rule {rule}: {entry.error}")
            yield entry


@dataclass
class SurveySummary:
    entries: List[SurveyEntry]

    @property
    def failures(self) -> List[SurveyEntry]:
        return [e for e in self.entries if not e.ok]

    @property
    def successes(self) -> List[SurveyEntry]:
        return [e for e in self.entries if e.ok]

    def _row(self, entry: SurveyEntry) -> Dict[str, Any]:
        return {}

    def to_frame(self) -> pd.DataFrame:
        rows = []
        for e in self.entries:
            row = {'rule': e.rule, 'error': e.error}
            if e.ok:
                row.update(self._row(e))
            rows.append(row)
        return pd.DataFrame(rows).set_index('rule')


# =============================================================================
# Cycles
# =============================================================================

CYCLE_BUCKETS = ('dies', 'short cycle', 'long cycle', 'no cycle')


@dataclass
class CycleSurvey(SurveySummary):
    short_period: int = SHORT_CYCLE_PERIOD

    @property
    def counts(self) -> Dict[str, int]:
        c = Counter(cycle_class(e.result, self.short_period) for e in self.successes)
        return {bucket: c.get(bucket, 0) for bucket in CYCLE_BUCKETS}

    def _row(self, entry):
        r: CycleReport = entry.result
        return {'transient': r.transient, 'period': r.period, 'died': r.died,
                'final_density': r.final_density,
                'class': cycle_class(r, self.short_period)}


def cycle_survey(width: int = CYCLE_WIDTH, max_generations: int = SURVEY_MAX_GENERATIONS,
                 rules: Iterable[int] = ALL_RULES, short_period: int = SHORT_CYCLE_PERIOD,
                 progress: bool = False) -> CycleSurvey:
    _check_run(width, max_generations, "max_generations")
    survey = RuleSurvey(lambda rule: find_cycle(rule, width, max_generations),
                        rules, progress, desc="Cycles")
    return CycleSurvey(list(survey), short_period)


# =============================================================================
# Entropy
# =============================================================================

@dataclass
class EntropySurvey(SurveySummary):

    @property
    def by_label(self) -> Dict[str, List[int]]:
        groups = {label: [] for label in ENTROPY_LABELS}
        for e in self.successes:
            groups[e.result.label].append(e.rule)
        return groups

    @property
    def counts(self) -> Dict[str, int]:
        return {label: len(rules) for label, rules in self.by_label.items()}

    def _row(self, entry):
        s: EntropySignature = entry.result
        return {'mean': s.normalized_mean, 'std': s.normalized_std,
                'variance': s.normalized_variance, 'label': s.label}


def entropy_survey(width: int = DEFAULT_WIDTH, generations: int = ENTROPY_GENERATIONS,
                   block_size: int = ENTROPY_BLOCK_SIZE, skip: int = ENTROPY_SKIP,
                   thresholds: EntropyThresholds = DEFAULT_ENTROPY_THRESHOLDS,
                   rules: Iterable[int] = ALL_RULES, progress: bool = False) -> EntropySurvey:
    _check_run(width, generations)
    require(1 <= block_size <= width,
            f"Block size must be in [1, {width}], got {block_size}")
    require(skip >= 0, f"Skip must be >= 0, got {skip}")
    survey = RuleSurvey(
        lambda rule: analyze_entropy(rule, width, generations, block_size, skip, thresholds),
        rules, progress, desc="Entropy")
    return EntropySurvey(list(survey))


# =============================================================================
# Compression
# =============================================================================

@dataclass
class CompressionSurvey(SurveySummary):
    bands: CompressionBands = DEFAULT_COMPRESSION_BANDS

    @property
    def ranked(self) -> List[SurveyEntry]:
        """Successful entries, most compressible first."""
        return sorted(self.successes, key=lambda e: e.result.ratio)

    @property
    def counts(self) -> Dict[str, int]:
        c = Counter(e.result.band for e in self.successes)
        return {band: c.get(band, 0)
                for band in ('trivial', 'periodic', 'structured', 'complex', 'chaotic')}

    @property
    def most_compressible(self) -> Optional[SurveyEntry]:
        """Most compressible rule that is not trivial."""
        ranked = [e for e in self.ranked if e.result.band != 'trivial']
        return ranked[0] if ranked else None

    @property
    def least_compressible(self) -> Optional[SurveyEntry]:
        ranked = self.ranked
        return ranked[-1] if ranked else None

    def ratios(self) -> Dict[int, float]:
        return {e.rule: e.result.ratio for e in self.successes}

    def _row(self, entry):
        r: CompressionReport = entry.result
        return {'raw_bytes': r.raw_bytes, 'compressed_bytes': r.compressed_bytes,
                'ratio': r.ratio, 'band': r.band}


def compression_survey(width: int = DEFAULT_WIDTH,
                       generations: int = COMPRESSION_GENERATIONS,
                       compressor: Compressor = deflate_compressor,
                       bands: CompressionBands = DEFAULT_COMPRESSION_BANDS,
                       rules: Iterable[int] = ALL_RULES,
                       progress: bool = False) -> CompressionSurvey:
    _check_run(width, generations)
    survey = RuleSurvey(
        lambda rule: analyze_compression(rule, width, generations, compressor, bands),
        rules, progress, desc="Compression")
    return CompressionSurvey(list(survey), bands)


# =============================================================================
# Radius
# =============================================================================

@dataclass
class RadiusSurvey(SurveySummary):

    @property
    def by_radius(self) -> Dict[Optional[int], List[int]]:
        """Inferred radius -> rules; None collects the inconclusive ones."""
        groups: Dict[Optional[int], List[int]] = defaultdict(list)
        for e in self.successes:
            groups[e.result.radius].append(e.rule)
        return dict(groups)

    @property
    def counts(self) -> Dict[str, int]:
        groups = self.by_radius
        return {
            '0': len(groups.get(0, [])),
            '1': len(groups.get(1, [])),
            '>1': sum(len(v) for k, v in groups.items() if k is not None and k > 1),
            'inconclusive': len(groups.get(None, [])),
        }

    def radius_zero_names(self) -> Dict[int, str]:
        """Name of the center map each radius-0 rule was inferred to compute."""
        names = {}
        for e in self.successes:
            if e.result.radius == 0:
                table = e.result.radius_inference.truth_table
                if 0 in table and 1 in table:
                    names[e.rule] = center_map_name(table[0], table[1])
        return names

    def _row(self, entry):
        r: LocalityInference = entry.result
        support = sorted(r.support) if r.support is not None else None
        return {'radius': r.radius, 'resolved': r.resolved,
                'support': '+'.join(support) if support is not None else None}


def radius_survey(width: int = INFERENCE_WIDTH, generations: int = INFERENCE_GENERATIONS,
                  max_radius: int = SURVEY_MAX_RADIUS, trials: int = SURVEY_TRIALS,
                  noise: float = 0.0, mode: InferenceMode = InferenceMode.STRICT,
                  tolerance: float = INFERENCE_TOLERANCE, seed: int = INFERENCE_SEED,
                  rules: Iterable[int] = ALL_RULES, progress: bool = False) -> RadiusSurvey:
    _check_sampling(width, generations, trials, noise)
    require(max_radius >= 1, f"A radius survey needs max_radius >= 1, got {max_radius}")

    def analyze(rule):
        obs = Observations.collect(rule, width, generations, trials, noise=noise, seed=seed)
        return infer_locality(obs, max_radius, mode, tolerance)

    return RadiusSurvey(list(RuleSurvey(analyze, rules, progress, desc="Radius")))


# =============================================================================
# Dependencies
# =============================================================================

@dataclass
class DependencySurvey(SurveySummary):
    """Inferred supports next to the supports read off the rule tables."""

    @property
    def true_groups(self) -> Dict[FrozenSet[str], List[int]]:
        return dependency_classes()

    @property
    def matches(self) -> List[int]:
        return [e.rule for e in self.successes if e.result.support == rule_support(e.rule)]

    @property
    def mismatches(self) -> List[int]:
        return [e.rule for e in self.successes if e.result.support != rule_support(e.rule)]

    def _row(self, entry):
        inferred = sorted(entry.result.support)
        actual = sorted(rule_support(entry.rule))
        return {'inferred': '+'.join(inferred) or 'none',
                'actual': '+'.join(actual) or 'none',
                'match': inferred == actual}


def dependency_survey(width: int = INFERENCE_WIDTH, generations: int = 30,
                      trials: int = SURVEY_TRIALS, noise: float = 0.0,
                      seed: int = INFERENCE_SEED, rules: Iterable[int] = ALL_RULES,
                      progress: bool = False) -> DependencySurvey:
    """
    Flip-test support inference at radius 1 for every rule, scored against
    the decoder's supports.
    """
    _check_sampling(width, generations, trials, noise)

    def analyze(rule):
        obs = Observations.collect(rule, width, generations, trials, noise=noise, seed=seed)
        return infer_support(obs, 1)

    return DependencySurvey(list(RuleSurvey(analyze, rules, progress, desc="Dependencies")))


def support_pattern_groups() -> List[tuple]:
    """(label, rules) for every support pattern, in report order."""
    groups = dependency_classes()
    return [(label, groups.get(pattern, [])) for pattern, label in SUPPORT_PATTERNS]
