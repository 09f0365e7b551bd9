"""
1D binary cellular automaton on a ring.

The row is a uint8 numpy array; cell i reads cells i-1, i, i+1 modulo W.
Updates are synchronous: the next row is computed entirely from the current
one before it replaces it.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from .errors import require
from .neighborhood import window_codes
from .rules import rule_table, validate_rule

__all__ = [
    "Automaton", "step_row", "evolve_row", "render_trace",
    "seed_simple", "seed_finite_block", "seed_random",
]


# --------------------------- Seeds ---------------------------

def seed_simple(N: int, val: int = 1) -> np.ndarray:
    require(N >= 1, f"Width must be >= 1, got {N}")
    x = np.zeros(N, dtype=np.uint8)
    x[N // 2] = val
    return x


def seed_finite_block(N: int, length: int = 10, val: int = 1) -> np.ndarray:
    require(N >= 1, f"Width must be >= 1, got {N}")
    length = min(length, N)
    x = np.zeros(N, dtype=np.uint8)
    s = (N - length) // 2
    x[s:s + length] = val
    return x


def seed_random(N: int, p: float = 0.5,
                rng: Optional[np.random.Generator] = None) -> np.ndarray:
    require(N >= 1, f"Width must be >= 1, got {N}")
    require(0.0 <= p <= 1.0, f"Density must be in [0, 1], got {p}")
    rng = np.random.default_rng() if rng is None else rng
    return (rng.random(N) < p).astype(np.uint8)


# --------------------------- Core engine ---------------------------

def step_row(x: np.ndarray, rule: int) -> np.ndarray:
    """One synchronous update of row `x` (periodic BC). Returns a new array."""
    table = rule_table(rule)
    return table[window_codes(x, 1)]


def evolve_row(x0: np.ndarray, rule: int, T: int) -> np.ndarray:
    """Return array of shape (T+1, N) including x0."""
    require(T >= 0, f"Generations must be >= 0, got {T}")
    table = rule_table(rule)
    xs = np.empty((T + 1, len(x0)), dtype=np.uint8)
    xs[0] = x0
    for t in range(T):
        xs[t + 1] = table[window_codes(xs[t], 1)]
    return xs


class Automaton:
    """A row of cells plus the rule that evolves it."""

    def __init__(self, cells: Sequence, rule: int):
        self.rule = validate_rule(rule)
        row = np.asarray(cells)
        require(row.ndim == 1, f"Cells must be a 1-D row, got shape {row.shape}")
        require(row.size >= 1, "Width must be >= 1")
        self.cells = (row != 0).astype(np.uint8)

    @classmethod
    def centered(cls, width: int, rule: int) -> "Automaton":
        """Single live cell at width // 2."""
        return cls(seed_simple(width), rule)

    @classmethod
    def random(cls, width: int, rule: int, density: float = 0.5,
               rng: Optional[np.random.Generator] = None) -> "Automaton":
        return cls(seed_random(width, density, rng), rule)

    @property
    def width(self) -> int:
        return int(self.cells.size)

    @property
    def population(self) -> int:
        return int(self.cells.sum())

    @property
    def density(self) -> float:
        return self.population / self.width

    @property
    def is_constant(self) -> bool:
        """All-false or all-true row."""
        return self.population in (0, self.width)

    def next_row(self) -> np.ndarray:
        """Next generation, leaving this automaton untouched."""
        return step_row(self.cells, self.rule)

    def step(self) -> "Automaton":
        """Advance one generation in place and return self."""
        self.cells = self.next_row()
        return self

    def copy(self) -> "Automaton":
        return Automaton(self.cells.copy(), self.rule)

    def evolve(self, generations: int) -> np.ndarray:
        """
        Spacetime trace from the current row.

        Returns:
            uint8 array of shape (generations + 1, width); row 0 is a copy of
            the current row. The automaton itself is not advanced.
        """
        return evolve_row(self.cells, self.rule, generations)

    def render(self, live: str = '#', dead: str = ' ') -> str:
        return ''.join(live if c else dead for c in self.cells)

    def __str__(self):
        return self.render()

    def __eq__(self, other):
        return (isinstance(other, Automaton) and other.rule == self.rule
                and np.array_equal(other.cells, self.cells))

    def __repr__(self):
        return f"Automaton(rule={self.rule}, width={self.width}, population={self.population})"


def render_trace(trace: np.ndarray, live: str = '#', dead: str = ' ') -> str:
    """One line per generation."""
    return '\n'.join(''.join(live if c else dead for c in row) for row in trace)
