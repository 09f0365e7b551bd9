import zlib

import numpy as np
import pytest

from eca_explorer.compression import (
    analyze_compression,
    compressed_length,
    compression_ratio,
    deflate_compressor,
    pack_trace,
)
from eca_explorer.config import CompressionBands
from eca_explorer.errors import CompressorFailure, InvalidConfiguration


def test_pack_trace_is_a_continuous_bit_stream():
    trace = np.array([[1, 0, 1, 1], [0, 0, 0, 1]], dtype=np.uint8)
    assert pack_trace(trace) == bytes([0b10110001])


def test_pack_trace_pads_last_byte():
    trace = np.ones((3, 3), dtype=np.uint8)
    assert pack_trace(trace) == bytes([0xFF, 0x80])


def test_deflate_is_raw():
    data = b"cellular automata" * 10
    assert zlib.decompress(deflate_compressor(data), -15) == data


def test_rule_0_is_trivial():
    report = analyze_compression(0, 79, 200)
    assert report.raw_bits == 201 * 79
    assert report.raw_bytes == (201 * 79 + 7) // 8
    assert report.ratio < 0.05
    assert report.band == 'trivial'


def test_ratio_capped_at_one():
    trace = np.zeros((2, 8), dtype=np.uint8)
    report = compression_ratio(trace, lambda data: b"x" * (len(data) + 100))
    assert report.ratio == 1.0
    assert report.compressed_bytes == len(pack_trace(trace)) + 100


def test_compressor_may_return_length():
    trace = np.zeros((4, 8), dtype=np.uint8)
    assert compression_ratio(trace, lambda data: 1).ratio == 0.25


def test_failing_compressor():
    def broken(data):
        raise OSError("disk on fire")

    with pytest.raises(CompressorFailure, match="disk on fire"):
        analyze_compression(30, 31, 10, compressor=broken)


def test_compressor_with_bad_return_type():
    with pytest.raises(CompressorFailure):
        compressed_length(b"abc", lambda data: "abc")
    with pytest.raises(CompressorFailure):
        compressed_length(b"abc", lambda data: -1)


def test_chaotic_rule_is_less_compressible():
    r30 = analyze_compression(30, 79, 200).ratio
    r110 = analyze_compression(110, 79, 200).ratio
    r90 = analyze_compression(90, 79, 200).ratio
    r0 = analyze_compression(0, 79, 200).ratio
    assert r30 > r110 > r90 > r0


def test_bands():
    bands = CompressionBands()
    assert bands.label(0.01) == 'trivial'
    assert bands.label(0.05) == 'periodic'
    assert bands.label(0.3) == 'structured'
    assert bands.label(0.6) == 'complex'
    assert bands.label(0.8) == 'chaotic'
    assert CompressionBands(trivial=0.5).label(0.3) == 'trivial'


def test_invalid_parameters():
    with pytest.raises(InvalidConfiguration):
        analyze_compression(30, 0, 10)
    with pytest.raises(InvalidConfiguration):
        analyze_compression(30, 10, 0)
