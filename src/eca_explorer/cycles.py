"""
Cycle detection over the full state history.

Every visited row is kept in a dict keyed by the row's bytes and mapped to the
generation it was first seen at. Because the key is the whole state, a lookup
hit is full-state equality; there is no digest that could collide. Memory is
O(width x generations) whatever the lookup strategy, so the generation budget
is always a caller parameter.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Sequence

import numpy as np

from .automaton import Automaton
from .config import SHORT_CYCLE_PERIOD
from .errors import require
from .rules import rule_output, validate_rule


class CycleStatus(Enum):
    FOUND_CYCLE = 'found cycle'
    EXHAUSTED = 'exhausted'


@dataclass(frozen=True)
class CycleReport:
    """
    Outcome of a cycle search.

    For FOUND_CYCLE, `transient` is the generation at which the repeated
    state first appeared and `period` the distance to its repetition. For
    EXHAUSTED, `transient` equals the budget and `period` is None.
    """
    rule: int
    width: int
    max_generations: int
    status: CycleStatus
    transient: int
    period: Optional[int]
    generations_run: int
    died: bool
    final_density: float

    @property
    def found(self) -> bool:
        return self.status is CycleStatus.FOUND_CYCLE


def find_cycle(rule: int, width: int, max_generations: int,
               initial: Optional[Sequence] = None) -> CycleReport:
    """
    Run the automaton until a state repeats or the budget runs out.

    Args:
        rule: ECA rule number (0-255)
        width: number of cells (>= 1)
        max_generations: steps allowed before giving up (>= 1)
        initial: optional starting row; defaults to a single centred live cell

    Returns:
        CycleReport
    """
    rule = validate_rule(rule)
    require(width >= 1, f"Width must be >= 1, got {width}")
    require(max_generations >= 1, f"max_generations must be >= 1, got {max_generations}")

    if initial is None:
        ca = Automaton.centered(width, rule)
    else:
        ca = Automaton(initial, rule)
        require(ca.width == width,
                f"Initial row has width {ca.width}, expected {width}")

    seen: Dict[bytes, int] = {ca.cells.tobytes(): 0}

    for step in range(1, max_generations + 1):
        ca.step()
        key = ca.cells.tobytes()
        first = seen.get(key)
        if first is not None:
            period = step - first
            return CycleReport(
                rule=rule,
                width=width,
                max_generations=max_generations,
                status=CycleStatus.FOUND_CYCLE,
                transient=first,
                period=period,
                generations_run=step,
                died=period == 1 and ca.population == 0,
                final_density=ca.density,
            )
        if ca.is_constant and rule_output(rule, 7 * int(ca.cells[0])) == ca.cells[0]:
            # A constant row maps to itself iff the rule keeps 000 (or 111)
            return CycleReport(
                rule=rule,
                width=width,
                max_generations=max_generations,
                status=CycleStatus.FOUND_CYCLE,
                transient=step,
                period=1,
                generations_run=step,
                died=ca.population == 0,
                final_density=ca.density,
            )
        seen[key] = step

    return CycleReport(
        rule=rule,
        width=width,
        max_generations=max_generations,
        status=CycleStatus.EXHAUSTED,
        transient=max_generations,
        period=None,
        generations_run=max_generations,
        died=False,
        final_density=ca.density,
    )


def trace_cycle(trace: np.ndarray) -> Optional[tuple]:
    """
    First repetition inside an already captured trace.

    Returns:
        (transient, period) or None if no row repeats.
    """
    seen: Dict[bytes, int] = {}
    for t, row in enumerate(np.asarray(trace, dtype=np.uint8)):
        key = row.tobytes()
        if key in seen:
            return seen[key], t - seen[key]
        seen[key] = t
    return None


def cycle_class(report: CycleReport, short_period: int = SHORT_CYCLE_PERIOD) -> str:
    """Bucket used by the all-rules cycle survey."""
    if report.died:
        return 'dies'
    if not report.found:
        return 'no cycle'
    if report.period <= short_period:
        return 'short cycle'
    return 'long cycle'
