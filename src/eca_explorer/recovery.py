"""
Rule recovery and out-of-distribution generalization.

A local learner reads the next value of a cell from its 3-cell neighborhood
(majority vote per neighborhood over the observations). A global,
correlational learner only sees the cell's own value and the density of the
row it sits in. Both are fitted on the same observations and scored on rows
drawn with a very different density, which separates learning the mechanism
from learning correlations.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from .automaton import evolve_row, seed_random
from .config import (
    DENSE_DENSITY,
    DENSITY_BUCKETS,
    GENERALIZATION_TRIALS,
    INFERENCE_GENERATIONS,
    INFERENCE_WIDTH,
    SPARSE_DENSITY,
)
from .errors import require
from .inference import Observations, window_statistics
from .neighborhood import neighborhood_pattern, window_codes


@dataclass(frozen=True)
class NeighborhoodVote:
    code: int
    count: int
    ones: int

    @property
    def pattern(self) -> str:
        return neighborhood_pattern(self.code)

    @property
    def p_one(self) -> float:
        """Observed P(next = 1); 0.5 when the neighborhood was never seen."""
        return self.ones / self.count if self.count else 0.5

    @property
    def inferred_bit(self) -> int:
        return int(self.p_one > 0.5)


@dataclass(frozen=True)
class RuleVote:
    votes: List[NeighborhoodVote]

    @property
    def rule(self) -> int:
        return sum(v.inferred_bit << v.code for v in self.votes)

    @property
    def table(self) -> np.ndarray:
        return np.array([v.inferred_bit for v in self.votes], dtype=np.uint8)


def infer_rule_number(observations: Observations) -> RuleVote:
    """Majority vote per 3-cell neighborhood, read from the observations only."""
    stats = window_statistics(observations, 1)
    counts = dict(zip(stats.codes.tolist(), (stats.zeros + stats.ones).tolist()))
    ones = dict(zip(stats.codes.tolist(), stats.ones.tolist()))
    return RuleVote([NeighborhoodVote(code, int(counts.get(code, 0)), int(ones.get(code, 0)))
                     for code in range(8)])


class CorrelationalBaseline:
    """
    P(next = 1 | current cell, row-density bucket).

    Captures global statistics of the training rows but not the local
    mechanism.
    """

    def __init__(self, buckets: int = DENSITY_BUCKETS):
        require(buckets >= 1, f"Buckets must be >= 1, got {buckets}")
        self.buckets = buckets
        self.counts = np.zeros((buckets, 2), dtype=np.int64)
        self.ones = np.zeros((buckets, 2), dtype=np.int64)

    def _bucket(self, rows: np.ndarray) -> np.ndarray:
        density = rows.mean(axis=1)
        return np.minimum((density * self.buckets).astype(int), self.buckets - 1)

    def fit(self, observations: Observations) -> "CorrelationalBaseline":
        b = np.repeat(self._bucket(observations.before), observations.width)
        c = observations.before.ravel()
        np.add.at(self.counts, (b, c), 1)
        np.add.at(self.ones, (b, c), observations.after.ravel())
        return self

    def predict(self, before: np.ndarray) -> np.ndarray:
        rows = np.atleast_2d(before)
        b = np.repeat(self._bucket(rows), rows.shape[1]).reshape(rows.shape)
        count = self.counts[b, rows]
        ones = self.ones[b, rows]
        # unseen (bucket, cell) pairs predict 0
        return ((count > 0) & (ones > count // 2)).astype(np.uint8)


def local_predict(table: np.ndarray, before: np.ndarray) -> np.ndarray:
    return np.asarray(table, dtype=np.uint8)[window_codes(before, 1)]


def trajectory_error_rate(true_rule: int, inferred_rule: int, width: int,
                          generations: int, density: float, trials: int,
                          seed: Optional[int]) -> float:
    """Fraction of cells where the two rules' trajectories disagree."""
    rng = np.random.default_rng(seed)
    errors = total = 0
    for _ in range(trials):
        x0 = seed_random(width, density, rng)
        a = evolve_row(x0, true_rule, generations)[1:]
        b = evolve_row(x0, inferred_rule, generations)[1:]
        errors += int(np.count_nonzero(a != b))
        total += a.size
    return errors / total


@dataclass(frozen=True)
class GeneralizationReport:
    inferred_rule: int
    true_rule: int
    causal_one_step: Dict[str, float]
    correlational_one_step: Dict[str, float]
    causal_trajectory: Dict[str, float]

    @property
    def exact(self) -> bool:
        return self.inferred_rule == self.true_rule


def generalization_test(true_rule: int, vote: RuleVote, training: Observations,
                        width: int = INFERENCE_WIDTH,
                        generations: int = INFERENCE_GENERATIONS,
                        trials: int = GENERALIZATION_TRIALS,
                        densities: Optional[Dict[str, float]] = None,
                        seed: int = 11111) -> GeneralizationReport:
    """
    Score the local vote and the correlational baseline on shifted densities.

    Args:
        true_rule: rule that generates the test rows
        vote: result of infer_rule_number on `training`
        training: observations the baseline is fitted on
        densities: name -> initial density; defaults to sparse (10%) and
            dense (90%)

    Returns:
        GeneralizationReport with per-density error rates
    """
    if densities is None:
        densities = {'sparse': SPARSE_DENSITY, 'dense': DENSE_DENSITY}
    baseline = CorrelationalBaseline().fit(training)

    causal, corr, traj = {}, {}, {}
    for i, (name, density) in enumerate(densities.items()):
        test = Observations.collect(true_rule, width, generations, trials,
                                    density=density, noise=0.0, seed=seed + i)
        causal[name] = float(np.mean(local_predict(vote.table, test.before) != test.after))
        corr[name] = float(np.mean(baseline.predict(test.before) != test.after))
        traj[name] = trajectory_error_rate(true_rule, vote.rule, width, generations,
                                           density, trials, seed + i)
    return GeneralizationReport(
        inferred_rule=vote.rule,
        true_rule=true_rule,
        causal_one_step=causal,
        correlational_one_step=corr,
        causal_trajectory=traj,
    )
