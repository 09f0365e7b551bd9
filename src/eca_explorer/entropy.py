"""
Block entropy of spacetime traces.

For each generation the k-grams of the row are read toroidally (exactly W
windows whatever k is) and the Shannon entropy of their frequencies is taken
in bits. The per-generation sequence, with an initial transient window
discarded, gives the mean/variance signature used to label a rule.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .automaton import Automaton, step_row
from .config import (
    DEFAULT_ENTROPY_THRESHOLDS,
    ENTROPY_BLOCK_SIZE,
    ENTROPY_GENERATIONS,
    ENTROPY_SKIP,
    EntropyThresholds,
)
from .cycles import trace_cycle
from .errors import require
from .rules import validate_rule

ENTROPY_LABELS = ('dead', 'fixed', 'periodic', 'unresolved', 'fractal', 'complex', 'chaotic')


def kgram_counts(row: np.ndarray, k: int) -> np.ndarray:
    """Counts of the distinct k-grams of a ring, in no particular order."""
    x = np.asarray(row, dtype=np.uint8)
    require(x.ndim == 1 and x.size >= 1, "Row must be a non-empty 1-D array")
    require(1 <= k <= x.size, f"Block size must be in [1, {x.size}], got {k}")
    padded = np.concatenate([x, x[:k - 1]])
    windows = sliding_window_view(padded, k)
    _, counts = np.unique(windows, axis=0, return_counts=True)
    return counts


def block_entropy(row: np.ndarray, k: int) -> float:
    """
    Shannon entropy (bits) of the k-block distribution of one row.

    0 log 0 is taken as 0, so only observed blocks contribute; the value is
    always within [0, k].
    """
    counts = kgram_counts(row, k)
    p = counts / counts.sum()
    H = -np.sum(p * np.log2(p))
    return float(min(max(H, 0.0), float(k)))


def entropy_profile(trace: np.ndarray, k: int) -> np.ndarray:
    """One block entropy per generation of `trace` (shape (G, W))."""
    xs = np.asarray(trace, dtype=np.uint8)
    require(xs.ndim == 2 and xs.shape[0] >= 1, "Trace must be a non-empty (G, W) array")
    return np.array([block_entropy(row, k) for row in xs], dtype=float)


def effective_skip(skip: int, generations: int) -> int:
    """Transient window actually discarded: never all of the sequence."""
    require(skip >= 0, f"Skip must be >= 0, got {skip}")
    require(generations >= 1, f"Need at least one generation, got {generations}")
    return min(skip, generations - 1)


@dataclass(eq=False)
class EntropySignature:
    """Per-generation entropies plus post-transient summary statistics."""
    block_size: int
    entropies: np.ndarray
    skip: int
    rule: Optional[int] = None
    label: Optional[str] = None
    cycle: Optional[Tuple[int, int]] = None
    mean: float = field(init=False)
    variance: float = field(init=False)
    normalized_entropies: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        self.entropies = np.asarray(self.entropies, dtype=float)
        post = self.entropies[self.skip:]
        self.mean = float(post.mean())
        self.variance = float(post.var())
        self.normalized_entropies = post / self.block_size

    @property
    def post_transient(self) -> np.ndarray:
        return self.entropies[self.skip:]

    @property
    def std(self) -> float:
        return float(np.sqrt(self.variance))

    @property
    def normalized_mean(self) -> float:
        return self.mean / self.block_size

    @property
    def normalized_variance(self) -> float:
        return float(self.normalized_entropies.var())

    @property
    def normalized_std(self) -> float:
        return float(np.sqrt(self.normalized_variance))

    @property
    def minimum(self) -> float:
        return float(self.entropies.min())

    @property
    def maximum(self) -> float:
        return float(self.entropies.max())


def signature_from_trace(trace: np.ndarray, block_size: int = ENTROPY_BLOCK_SIZE,
                         skip: int = ENTROPY_SKIP,
                         rule: Optional[int] = None) -> EntropySignature:
    entropies = entropy_profile(trace, block_size)
    return EntropySignature(
        block_size=block_size,
        entropies=entropies,
        skip=effective_skip(skip, len(entropies)),
        rule=rule,
        cycle=trace_cycle(trace),
    )


def _ends_on_constant_fixed_point(trace: np.ndarray, rule: Optional[int]) -> bool:
    last = trace[-1]
    if last.min() != last.max():
        return False
    if rule is not None:
        return bool(np.array_equal(step_row(last, rule), last))
    return len(trace) >= 2 and bool(np.array_equal(trace[-2], last))


def classify_entropy(signature: EntropySignature, trace: np.ndarray,
                     thresholds: EntropyThresholds = DEFAULT_ENTROPY_THRESHOLDS) -> str:
    """
    Label a signature with one of ENTROPY_LABELS.

    m is the post-transient mean normalized by the block size and v the
    variance of the normalized post-transient entropies. Low-entropy
    signatures are labelled by how the trace ends:

    - dead: an all-false or all-true row that maps to itself
    - fixed: a non-constant row that maps to itself (period 1)
    - periodic: a cycle with period > 1
    - unresolved: no state repeats within the trace

    Anything else is fractal when v is above the oscillation band, chaotic
    when m is high and v small, complex otherwise.
    """
    m = signature.normalized_mean
    v = signature.normalized_variance
    low = m < thresholds.dead_mean or (
        v < thresholds.periodic_variance and m < thresholds.periodic_mean)
    if low:
        if _ends_on_constant_fixed_point(np.asarray(trace), signature.rule):
            return 'dead'
        if signature.cycle is None:
            return 'unresolved'
        return 'fixed' if signature.cycle[1] == 1 else 'periodic'
    if v > thresholds.oscillation_variance:
        return 'fractal'
    if m > thresholds.chaotic_mean and v < thresholds.chaotic_variance:
        return 'chaotic'
    return 'complex'


def analyze_entropy_trace(rule: int, width: int, generations: int = ENTROPY_GENERATIONS,
                          block_size: int = ENTROPY_BLOCK_SIZE, skip: int = ENTROPY_SKIP,
                          thresholds: EntropyThresholds = DEFAULT_ENTROPY_THRESHOLDS,
                          initial: Optional[Sequence] = None
                          ) -> Tuple[EntropySignature, np.ndarray]:
    """
    Evolve a rule and classify its entropy signature.

    Args:
        rule: ECA rule number (0-255)
        width: number of cells (>= 1)
        generations: steps after the initial row (>= 1); the trace holds
            generations + 1 rows
        block_size: k-gram length, 1 <= k <= width
        skip: transient generations discarded before mean/variance
        thresholds: classification bands
        initial: optional starting row; defaults to a single centred live cell

    Returns:
        (EntropySignature with `label` set, the (generations + 1, width) trace)
    """
    rule = validate_rule(rule)
    require(width >= 1, f"Width must be >= 1, got {width}")
    require(generations >= 1, f"Generations must be >= 1, got {generations}")
    require(1 <= block_size <= width,
            f"Block size must be in [1, {width}], got {block_size}")
    require(skip >= 0, f"Skip must be >= 0, got {skip}")

    ca = Automaton.centered(width, rule) if initial is None else Automaton(initial, rule)
    require(ca.width == width, f"Initial row has width {ca.width}, expected {width}")
    trace = ca.evolve(generations)

    signature = signature_from_trace(trace, block_size, skip, rule)
    signature.label = classify_entropy(signature, trace, thresholds)
    return signature, trace


def analyze_entropy(rule: int, width: int, generations: int = ENTROPY_GENERATIONS,
                    block_size: int = ENTROPY_BLOCK_SIZE, skip: int = ENTROPY_SKIP,
                    thresholds: EntropyThresholds = DEFAULT_ENTROPY_THRESHOLDS,
                    initial: Optional[Sequence] = None) -> EntropySignature:
    """Labelled entropy signature of a rule; see analyze_entropy_trace."""
    signature, _ = analyze_entropy_trace(rule, width, generations, block_size,
                                         skip, thresholds, initial)
    return signature
