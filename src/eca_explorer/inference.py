"""
Locality inference from observed transitions.

Given rows before and after one update (optionally with label noise on the
"after" side), recover without looking at the rule number:

  - the effective radius: the smallest r for which the (2r+1)-cell window
    around a cell determines its next value, and
  - the support: which cells of that window the output actually depends on.

Everything here works from the observation arrays alone. The only code that
runs a rule is Observations.collect, which produces the data.

Two acceptance modes:

  STRICT    a radius is accepted only if no window value was ever seen with
            both outputs. Label noise breaks this almost immediately, so
            noisy data is expected to come back INCONCLUSIVE.
  TOLERANT  a radius is accepted when the majority-vote error rate
            sum(min(#0, #1)) / samples is at most `tolerance`.
"""

import warnings
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .automaton import Automaton
from .config import (
    INFERENCE_DENSITY,
    INFERENCE_GENERATIONS,
    INFERENCE_MAX_RADIUS,
    INFERENCE_NOISE,
    INFERENCE_SEED,
    INFERENCE_TOLERANCE,
    INFERENCE_TRIALS,
    INFERENCE_WIDTH,
    LOW_COVERAGE,
)
from .errors import require
from .neighborhood import position_names, window_codes, window_pattern

# Window codes are int64; keep (2r+1) well inside that
MAX_SUPPORTED_RADIUS = 30


class InferenceMode(Enum):
    STRICT = 'strict'
    TOLERANT = 'tolerant'


class InferenceOutcome(Enum):
    RESOLVED = 'resolved'
    INCONCLUSIVE = 'inconclusive'


# =============================================================================
# Observations
# =============================================================================

@dataclass(eq=False)
class Observations:
    """
    Paired rows: after[t] is the observed successor of before[t].

    Both arrays have shape (T, W). `noise` records the label-noise
    probability the data was collected with (0 for clean or unknown data).
    """
    before: np.ndarray
    after: np.ndarray
    noise: float = 0.0

    def __post_init__(self):
        self.before = (np.asarray(self.before) != 0).astype(np.uint8)
        self.after = (np.asarray(self.after) != 0).astype(np.uint8)
        require(self.before.ndim == 2 and self.before.size >= 1,
                f"Observations need a non-empty (T, W) array, got shape {self.before.shape}")
        require(self.before.shape == self.after.shape,
                f"before/after shapes differ: {self.before.shape} vs {self.after.shape}")

    @property
    def transitions(self) -> int:
        return int(self.before.shape[0])

    @property
    def width(self) -> int:
        return int(self.before.shape[1])

    @property
    def samples(self) -> int:
        """Number of (window, output) pairs at any radius."""
        return int(self.before.size)

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[Sequence, Sequence]],
                   noise: float = 0.0) -> "Observations":
        pairs = list(pairs)
        require(len(pairs) > 0, "No observation pairs given")
        before = np.array([b for b, _ in pairs])
        after = np.array([a for _, a in pairs])
        return cls(before, after, noise)

    @classmethod
    def collect(cls, rule: int, width: int = INFERENCE_WIDTH,
                generations: int = INFERENCE_GENERATIONS,
                trials: int = INFERENCE_TRIALS,
                density: float = INFERENCE_DENSITY,
                noise: float = INFERENCE_NOISE,
                seed: Optional[int] = INFERENCE_SEED) -> "Observations":
        """
        Sample transitions of `rule` from random initial rows.

        Each trial starts from a fresh Bernoulli(density) row and records
        `generations` consecutive transitions. With noise > 0 every observed
        output bit is flipped independently with that probability; the
        automaton itself keeps evolving on the true values.
        """
        require(width >= 1, f"Width must be >= 1, got {width}")
        require(generations >= 1, f"Generations must be >= 1, got {generations}")
        require(trials >= 1, f"Trials must be >= 1, got {trials}")
        require(0.0 <= noise <= 1.0, f"Noise must be in [0, 1], got {noise}")

        rng = np.random.default_rng(seed)
        before = np.empty((trials * generations, width), dtype=np.uint8)
        after = np.empty_like(before)
        t = 0
        for _ in range(trials):
            ca = Automaton.random(width, rule, density, rng)
            for _ in range(generations):
                before[t] = ca.cells
                ca.step()
                after[t] = ca.cells
                t += 1
        if noise > 0:
            flips = rng.random(after.shape) < noise
            after ^= flips.astype(np.uint8)
        return cls(before, after, noise)


# =============================================================================
# Window statistics
# =============================================================================

@dataclass(eq=False)
class WindowStatistics:
    """Output counts per observed window code at one radius."""
    radius: int
    codes: np.ndarray
    zeros: np.ndarray
    ones: np.ndarray

    @property
    def window_size(self) -> int:
        return 2 * self.radius + 1

    @property
    def samples(self) -> int:
        return int(self.zeros.sum() + self.ones.sum())

    @property
    def inconsistent(self) -> np.ndarray:
        return (self.zeros > 0) & (self.ones > 0)

    def majority(self) -> Dict[int, int]:
        """code -> majority output (ties go to 0)."""
        return {int(c): int(o > z) for c, z, o in zip(self.codes, self.zeros, self.ones)}


def window_statistics(observations: Observations, radius: int) -> WindowStatistics:
    require(0 <= radius <= MAX_SUPPORTED_RADIUS,
            f"Radius must be in [0, {MAX_SUPPORTED_RADIUS}], got {radius}")
    codes = window_codes(observations.before, radius).ravel()
    out = observations.after.ravel()
    uniq, inv = np.unique(codes, return_inverse=True)
    total = np.bincount(inv, minlength=len(uniq))
    ones = np.bincount(inv, weights=out, minlength=len(uniq)).astype(np.int64)
    return WindowStatistics(radius=radius, codes=uniq, zeros=total - ones, ones=ones)


# =============================================================================
# Radius inference
# =============================================================================

@dataclass(frozen=True)
class RadiusTrial:
    """How well windows of one radius explain the observations."""
    radius: int
    window_size: int
    unique_windows: int
    possible_windows: int
    inconsistent_windows: int
    error_rate: float
    examples: Tuple[Tuple[str, int, int], ...] = ()

    @property
    def consistent(self) -> bool:
        return self.inconsistent_windows == 0

    @property
    def consistency_rate(self) -> float:
        return (self.unique_windows - self.inconsistent_windows) / self.unique_windows

    @property
    def coverage(self) -> float:
        """Fraction of the 2^(2r+1) window values that were observed."""
        return self.unique_windows / self.possible_windows


def radius_trial(observations: Observations, radius: int,
                 max_examples: int = 3) -> RadiusTrial:
    stats = window_statistics(observations, radius)
    bad = np.flatnonzero(stats.inconsistent)
    examples = tuple(
        (window_pattern(int(stats.codes[i]), stats.window_size),
         int(stats.zeros[i]), int(stats.ones[i]))
        for i in bad[:max_examples]
    )
    errors = np.minimum(stats.zeros, stats.ones).sum()
    return RadiusTrial(
        radius=radius,
        window_size=stats.window_size,
        unique_windows=len(stats.codes),
        possible_windows=1 << stats.window_size,
        inconsistent_windows=len(bad),
        error_rate=float(errors / stats.samples),
        examples=examples,
    )


@dataclass
class RadiusInference:
    outcome: InferenceOutcome
    mode: InferenceMode
    max_radius: int
    radius: Optional[int] = None
    tolerance: Optional[float] = None
    trials: List[RadiusTrial] = field(default_factory=list)
    truth_table: Dict[int, int] = field(default_factory=dict)

    @property
    def resolved(self) -> bool:
        return self.outcome is InferenceOutcome.RESOLVED

    @property
    def accepted_trial(self) -> Optional[RadiusTrial]:
        return self.trials[-1] if self.resolved else None

    @property
    def message(self) -> str:
        if self.resolved:
            return f"inferred radius {self.radius}"
        return f"inconclusive: radius > {self.max_radius} or noise excessive"


def _check_mode(mode: InferenceMode, tolerance: float) -> None:
    require(isinstance(mode, InferenceMode), f"Unknown inference mode: {mode!r}")
    require(0.0 <= tolerance < 0.5, f"Tolerance must be in [0, 0.5), got {tolerance}")


def infer_radius(observations: Observations,
                 max_radius: int = INFERENCE_MAX_RADIUS,
                 mode: InferenceMode = InferenceMode.STRICT,
                 tolerance: float = INFERENCE_TOLERANCE) -> RadiusInference:
    """
    Smallest radius whose windows explain the observations.

    Args:
        observations: sampled transitions
        max_radius: largest radius tried (>= 0)
        mode: STRICT (no conflicting window) or TOLERANT (error rate <= tolerance)
        tolerance: accepted majority-vote error rate in TOLERANT mode

    Returns:
        RadiusInference; INCONCLUSIVE when no radius up to max_radius passes.
    """
    require(0 <= max_radius <= MAX_SUPPORTED_RADIUS,
            f"max_radius must be in [0, {MAX_SUPPORTED_RADIUS}], got {max_radius}")
    _check_mode(mode, tolerance)
    if mode is InferenceMode.STRICT and observations.noise > 0:
        warnings.warn(
            f"Strict consistency on data with label noise {observations.noise} "
            "will rarely find a consistent radius; consider TOLERANT mode",
            UserWarning,
        )
    if mode is InferenceMode.TOLERANT and tolerance == 0.0:
        warnings.warn("Tolerant mode with zero tolerance behaves like strict mode",
                      UserWarning)

    result = RadiusInference(
        outcome=InferenceOutcome.INCONCLUSIVE,
        mode=mode,
        max_radius=max_radius,
        tolerance=tolerance if mode is InferenceMode.TOLERANT else None,
    )
    for r in range(max_radius + 1):
        trial = radius_trial(observations, r)
        result.trials.append(trial)
        if mode is InferenceMode.STRICT:
            accepted = trial.consistent
        else:
            accepted = trial.error_rate <= tolerance
        if accepted:
            result.outcome = InferenceOutcome.RESOLVED
            result.radius = r
            result.truth_table = window_statistics(observations, r).majority()
            if trial.coverage < LOW_COVERAGE:
                warnings.warn(
                    f"Only {trial.unique_windows} of {trial.possible_windows} "
                    f"windows observed at radius {r}; the result is consistent "
                    "with the data but may not generalize",
                    UserWarning,
                )
            break
    return result


# =============================================================================
# Support (dependency) inference
# =============================================================================

@dataclass(frozen=True)
class PositionEvidence:
    """
    Flip test for one window cell.

    A context is a setting of the other cells; it is tested when windows with
    this cell at 0 and at 1 were both observed in that context.
    """
    position: str
    offset: int
    contexts_tested: int
    contexts_possible: int
    contexts_differing: int

    @property
    def relevant(self) -> bool:
        return self.contexts_differing > 0

    @property
    def coverage(self) -> float:
        return self.contexts_tested / self.contexts_possible


@dataclass
class SupportInference:
    radius: int
    evidence: List[PositionEvidence]

    @property
    def support(self) -> frozenset:
        return frozenset(e.position for e in self.evidence if e.relevant)

    @property
    def ordered_support(self) -> List[str]:
        return [e.position for e in self.evidence if e.relevant]

    @property
    def coverage(self) -> float:
        """Worst per-position context coverage."""
        return min(e.coverage for e in self.evidence)

    @property
    def is_constant(self) -> bool:
        return not self.support


def infer_support(observations: Observations, radius: int) -> SupportInference:
    """
    Which cells of the radius-`radius` window the output depends on.

    For each cell, compare the majority output of every pair of observed
    windows that differ only in that cell. A cell that never changes the
    output is reported irrelevant. This holds for the sampled contexts only:
    a context never observed cannot show a dependence.
    """
    stats = window_statistics(observations, radius)
    table = stats.majority()
    size = stats.window_size
    names = position_names(radius)

    evidence = []
    for j, name in enumerate(names):
        bit = 1 << (size - 1 - j)
        tested = differing = 0
        for code, out in table.items():
            if code & bit:
                continue
            partner = table.get(code | bit)
            if partner is None:
                continue
            tested += 1
            if partner != out:
                differing += 1
        evidence.append(PositionEvidence(
            position=name,
            offset=j - radius,
            contexts_tested=tested,
            contexts_possible=1 << (size - 1),
            contexts_differing=differing,
        ))

    result = SupportInference(radius=radius, evidence=evidence)
    if result.coverage < LOW_COVERAGE:
        warnings.warn(
            f"Flip tests covered only {result.coverage:.0%} of contexts for some "
            "cells; an unobserved dependence may be reported as irrelevant",
            UserWarning,
        )
    return result


@dataclass
class LocalityInference:
    radius_inference: RadiusInference
    support_inference: Optional[SupportInference] = None

    @property
    def resolved(self) -> bool:
        return self.radius_inference.resolved

    @property
    def radius(self) -> Optional[int]:
        return self.radius_inference.radius

    @property
    def support(self) -> Optional[frozenset]:
        if self.support_inference is None:
            return None
        return self.support_inference.support


def infer_locality(observations: Observations,
                   max_radius: int = INFERENCE_MAX_RADIUS,
                   mode: InferenceMode = InferenceMode.STRICT,
                   tolerance: float = INFERENCE_TOLERANCE) -> LocalityInference:
    """Radius inference followed by support inference at the accepted radius."""
    radius_result = infer_radius(observations, max_radius, mode, tolerance)
    if not radius_result.resolved:
        return LocalityInference(radius_result)
    return LocalityInference(radius_result,
                             infer_support(observations, radius_result.radius))
