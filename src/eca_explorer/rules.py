"""
Rule decoding for Elementary Cellular Automata

A rule number R in [0, 255] is an 8-entry truth table: bit i of R is the
output for neighborhood code i (see neighborhood.py for the code layout).

    neighborhood:  111 110 101 100 011 010 001 000
    bit position:   7   6   5   4   3   2   1   0

Nothing here is cached in module state; every table is computed from the
integer on demand.
"""

from collections import defaultdict
from typing import Dict, FrozenSet, List, Tuple

import numpy as np

from .errors import require
from .neighborhood import POSITIONS, encode_neighborhood, neighborhood_pattern

# Position -> bit of the neighborhood code
POSITION_BITS = {'left': 2, 'center': 1, 'right': 0}

# Two-input functions f(l, r) keyed by outputs for (l, r) = 00, 01, 10, 11
BOOLEAN_FUNCTIONS = {
    '0000': 'FALSE',
    '1111': 'TRUE',
    '0001': 'AND',
    '0010': 'l AND NOT r',
    '0011': 'l',
    '0100': 'NOT l AND r',
    '0101': 'r',
    '0110': 'XOR',
    '0111': 'OR',
    '1000': 'NOR',
    '1001': 'XNOR',
    '1010': 'NOT r',
    '1011': 'l OR NOT r',
    '1100': 'NOT l',
    '1101': 'NOT l OR r',
    '1110': 'NAND',
}

# Support patterns in report order
SUPPORT_PATTERNS: List[Tuple[FrozenSet[str], str]] = [
    (frozenset(), 'none (constant)'),
    (frozenset({'center'}), 'center only'),
    (frozenset({'left'}), 'left only'),
    (frozenset({'right'}), 'right only'),
    (frozenset({'left', 'center'}), 'left + center'),
    (frozenset({'center', 'right'}), 'center + right'),
    (frozenset({'left', 'right'}), 'left + right (symmetric)'),
    (frozenset({'left', 'center', 'right'}), 'all three'),
]


def validate_rule(rule) -> int:
    """Return `rule` as an int, or raise InvalidConfiguration."""
    require(isinstance(rule, (int, np.integer)) and not isinstance(rule, bool),
            f"Rule number must be an integer, got {rule!r}")
    require(0 <= rule <= 255, f"Rule number must be between 0 and 255, got {rule}")
    return int(rule)


def rule_output(rule: int, code: int) -> int:
    """Output bit of `rule` for neighborhood `code`."""
    return (rule >> code) & 1


def rule_table(rule: int) -> np.ndarray:
    """
    uint8[8] with the outputs for neighborhood codes 0..7 (000..111).
    """
    rule = validate_rule(rule)
    return np.array([rule_output(rule, i) for i in range(8)], dtype=np.uint8)


def table_to_rule(table) -> int:
    """Inverse of rule_table."""
    require(len(table) == 8, f"An ECA table has 8 entries, got {len(table)}")
    rule = 0
    for code, out in enumerate(table):
        if out:
            rule |= 1 << code
    return rule


def depends_on(rule: int, position: str) -> bool:
    """
    True if flipping `position` changes the output for some fixed setting of
    the other two cells.
    """
    require(position in POSITION_BITS, f"Unknown position: {position}")
    bit = 1 << POSITION_BITS[position]
    return any(rule_output(rule, code) != rule_output(rule, code | bit)
               for code in range(8) if not code & bit)


def rule_support(rule: int) -> FrozenSet[str]:
    rule = validate_rule(rule)
    return frozenset(p for p in POSITIONS if depends_on(rule, p))


def mirror_rule(rule: int) -> int:
    """Left-right reflection: R'(l, c, r) = R(r, c, l)."""
    rule = validate_rule(rule)
    out = 0
    for code in range(8):
        l, c, r = (code >> 2) & 1, (code >> 1) & 1, code & 1
        if rule_output(rule, encode_neighborhood(r, c, l)):
            out |= 1 << code
    return out


def complement_rule(rule: int) -> int:
    """State inversion: R'(x) = NOT R(NOT x)."""
    rule = validate_rule(rule)
    out = 0
    for code in range(8):
        if not rule_output(rule, 7 - code):
            out |= 1 << code
    return out


def equivalence_class(rule: int) -> FrozenSet[int]:
    """The rule together with its mirror, complement and mirror-complement."""
    m = mirror_rule(rule)
    return frozenset({rule, m, complement_rule(rule), complement_rule(m)})


def boolean_function_name(rule: int) -> str:
    """
    Name of f(l, r) for a rule that ignores its center cell.

    Raises InvalidConfiguration if the rule depends on the center.
    """
    rule = validate_rule(rule)
    require(not depends_on(rule, 'center'),
            f"Rule {rule} depends on its center cell")
    outputs = ''.join(str(rule_output(rule, encode_neighborhood(l, 0, r)))
                      for l in (0, 1) for r in (0, 1))
    return BOOLEAN_FUNCTIONS[outputs]


def center_function_name(rule: int) -> str:
    """Name of a rule whose output depends on the center cell alone."""
    rule = validate_rule(rule)
    require(not (depends_on(rule, 'left') or depends_on(rule, 'right')),
            f"Rule {rule} depends on a neighbor")
    return center_map_name(rule_output(rule, 0), rule_output(rule, 2))


def center_map_name(f0: int, f1: int) -> str:
    """Name of the map center -> output given f(0) and f(1)."""
    names = {(0, 0): 'constant 0', (1, 1): 'constant 1',
             (0, 1): 'identity', (1, 0): 'NOT'}
    return names[(int(f0), int(f1))]


def dependency_classes() -> Dict[FrozenSet[str], List[int]]:
    """All 256 rules grouped by their support."""
    groups: Dict[FrozenSet[str], List[int]] = defaultdict(list)
    for rule in range(256):
        groups[rule_support(rule)].append(rule)
    return dict(groups)


class ECARule:
    """Elementary Cellular Automaton Rule representation"""

    def __init__(self, rule_number: int):
        self.rule_number = validate_rule(rule_number)
        self.rule_binary = format(self.rule_number, '08b')
        self.table = rule_table(self.rule_number)

    def apply(self, left: int, center: int, right: int) -> int:
        """Apply rule to a 3-cell neighborhood"""
        return int(self.table[encode_neighborhood(left, center, right)])

    def output(self, code: int) -> int:
        return int(self.table[code])

    @property
    def support(self) -> FrozenSet[str]:
        return rule_support(self.rule_number)

    def depends_on(self, position: str) -> bool:
        return depends_on(self.rule_number, position)

    @property
    def is_radius_zero(self) -> bool:
        return not (self.depends_on('left') or self.depends_on('right'))

    def mirror(self) -> "ECARule":
        return ECARule(mirror_rule(self.rule_number))

    def complement(self) -> "ECARule":
        return ECARule(complement_rule(self.rule_number))

    def transition_rows(self) -> List[Tuple[str, int]]:
        """(pattern, output) pairs from 111 down to 000."""
        return [(neighborhood_pattern(code), self.output(code))
                for code in range(7, -1, -1)]

    def __eq__(self, other):
        return isinstance(other, ECARule) and other.rule_number == self.rule_number

    def __hash__(self):
        return hash(self.rule_number)

    def __repr__(self):
        return f"ECARule({self.rule_number})"
