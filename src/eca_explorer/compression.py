"""
Spacetime compressibility.

The trace is packed one bit per cell, row after row, into a continuous bit
stream (rows are not byte aligned), most significant bit first, with the last
byte zero padded. Any DEFLATE-family compressor can then be used as an oracle
for the compressed length; the ratio compressed / raw is a proxy for how much
structure the rule leaves in its spacetime diagram.
"""

import zlib
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Union

import numpy as np

from .automaton import Automaton
from .config import (
    COMPRESSION_GENERATIONS,
    COMPRESSION_LEVEL,
    DEFAULT_COMPRESSION_BANDS,
    CompressionBands,
)
from .errors import CompressorFailure, require
from .rules import validate_rule

Compressor = Callable[[bytes], Union[bytes, int]]


def deflate_compressor(data: bytes, level: int = COMPRESSION_LEVEL) -> bytes:
    """Raw DEFLATE stream (no zlib header or checksum)."""
    comp = zlib.compressobj(level, zlib.DEFLATED, -15)
    return comp.compress(data) + comp.flush()


def pack_trace(trace: np.ndarray) -> bytes:
    """(G, W) binary trace -> ceil(G*W / 8) bytes."""
    xs = np.asarray(trace, dtype=np.uint8)
    require(xs.ndim == 2 and xs.size >= 1, "Trace must be a non-empty (G, W) array")
    return np.packbits(xs.ravel() & 1, bitorder='big').tobytes()


def compressed_length(data: bytes, compressor: Compressor = deflate_compressor) -> int:
    """
    Length of `data` after `compressor`.

    The compressor may return the compressed bytes or their length directly.
    Anything it raises, and any other return type, becomes CompressorFailure.
    """
    try:
        out = compressor(data)
    except Exception as e:
        raise CompressorFailure(f"Compressor failed: {e}") from e
    if isinstance(out, (bytes, bytearray, memoryview)):
        return len(out)
    if isinstance(out, (int, np.integer)) and not isinstance(out, bool) and out >= 0:
        return int(out)
    raise CompressorFailure(
        f"Compressor must return bytes or a non-negative length, got {type(out).__name__}"
    )


@dataclass(frozen=True)
class CompressionReport:
    raw_bits: int
    raw_bytes: int
    compressed_bytes: int
    ratio: float
    band: str
    rule: Optional[int] = None

    @property
    def compressed_bits(self) -> int:
        return self.compressed_bytes * 8

    @property
    def incompressible_percent(self) -> float:
        return 100.0 * self.ratio


def compression_ratio(trace: np.ndarray, compressor: Compressor = deflate_compressor,
                      bands: CompressionBands = DEFAULT_COMPRESSION_BANDS,
                      rule: Optional[int] = None) -> CompressionReport:
    """
    Compressed / raw byte length of a packed trace.

    Container overhead can push tiny or random traces past their raw size;
    the ratio is capped at 1, the raw counts are kept in the report.
    """
    raw = pack_trace(trace)
    comp_len = compressed_length(raw, compressor)
    ratio = min(1.0, comp_len / len(raw))
    return CompressionReport(
        raw_bits=int(np.asarray(trace).size),
        raw_bytes=len(raw),
        compressed_bytes=comp_len,
        ratio=ratio,
        band=bands.label(ratio),
        rule=rule,
    )


def analyze_compression(rule: int, width: int,
                        generations: int = COMPRESSION_GENERATIONS,
                        compressor: Compressor = deflate_compressor,
                        bands: CompressionBands = DEFAULT_COMPRESSION_BANDS,
                        initial: Optional[Sequence] = None) -> CompressionReport:
    """Compress the (generations + 1, width) trace of `rule`."""
    rule = validate_rule(rule)
    require(width >= 1, f"Width must be >= 1, got {width}")
    require(generations >= 1, f"Generations must be >= 1, got {generations}")
    ca = Automaton.centered(width, rule) if initial is None else Automaton(initial, rule)
    require(ca.width == width, f"Initial row has width {ca.width}, expected {width}")
    return compression_ratio(ca.evolve(generations), compressor, bands, rule)
