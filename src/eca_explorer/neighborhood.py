"""
Neighborhood and window encoding.

ECA numbering (Wolfram): code = left<<2 | center<<1 | right, so bit `code`
of the rule number is the output for that neighborhood. Windows of radius r
follow the same convention: the leftmost cell is the most significant bit of
a (2r+1)-bit code.

The rule decoder and the locality inferer both encode through this module.
"""

from typing import List, Sequence, Tuple

import numpy as np

from .errors import require

NEIGHBORHOOD_SIZE = 3
POSITIONS = ('left', 'center', 'right')


def encode_neighborhood(left, center, right) -> int:
    """(left, center, right) -> 0..7"""
    return (int(bool(left)) << 2) | (int(bool(center)) << 1) | int(bool(right))


def decode_neighborhood(code: int) -> Tuple[bool, bool, bool]:
    """0..7 -> (left, center, right)"""
    require(0 <= code < 8, f"Neighborhood code must be in [0, 7], got {code}")
    return bool((code >> 2) & 1), bool((code >> 1) & 1), bool(code & 1)


def neighborhood_pattern(code: int) -> str:
    """Code as its 3-character bit pattern, e.g. 6 -> '110'."""
    return format(code, '03b')


def encode_window(bits: Sequence) -> int:
    code = 0
    for b in bits:
        code = (code << 1) | int(bool(b))
    return code


def decode_window(code: int, size: int) -> Tuple[bool, ...]:
    require(size >= 1, f"Window size must be >= 1, got {size}")
    require(0 <= code < (1 << size), f"Window code {code} does not fit in {size} bits")
    return tuple(bool((code >> (size - 1 - j)) & 1) for j in range(size))


def window_pattern(code: int, size: int) -> str:
    return format(code, f'0{size}b')


def position_names(radius: int) -> List[str]:
    """
    Names of the cells of a radius-`radius` window, left to right.

    Radius 0 and 1 keep the familiar center / left, center, right; larger
    radii use signed offsets from the center ('-2', '-1', '0', '+1', '+2').
    """
    require(radius >= 0, f"Radius must be >= 0, got {radius}")
    if radius == 0:
        return ['center']
    if radius == 1:
        return list(POSITIONS)
    return ['0' if off == 0 else f'{off:+d}' for off in range(-radius, radius + 1)]


def window_codes(rows: np.ndarray, radius: int) -> np.ndarray:
    """
    Codes of every toroidal window of radius `radius`.

    Args:
        rows: uint8 array of shape (W,) or (T, W)
        radius: half-width r; windows have 2r+1 cells

    Returns:
        int64 array of the same shape as `rows`; entry i is the code of the
        window centred on cell i (cell i+off read modulo W).
    """
    require(radius >= 0, f"Radius must be >= 0, got {radius}")
    x = np.asarray(rows).astype(np.int64)
    codes = np.zeros(x.shape, dtype=np.int64)
    # MSB first: the leftmost offset is shifted in first
    for off in range(-radius, radius + 1):
        codes = (codes << 1) | np.roll(x, -off, axis=-1)
    return codes
