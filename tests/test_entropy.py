import numpy as np
import pytest

from eca_explorer.config import EntropyThresholds
from eca_explorer.entropy import (
    EntropySignature,
    analyze_entropy,
    analyze_entropy_trace,
    block_entropy,
    classify_entropy,
    effective_skip,
    entropy_profile,
    kgram_counts,
)
from eca_explorer.errors import InvalidConfiguration


def test_constant_row_has_zero_entropy():
    assert block_entropy(np.zeros(16, dtype=np.uint8), 3) == 0.0
    assert block_entropy(np.ones(16, dtype=np.uint8), 3) == 0.0


def test_alternating_row():
    row = np.array([0, 1] * 8, dtype=np.uint8)
    assert block_entropy(row, 1) == pytest.approx(1.0)
    assert block_entropy(row, 2) == pytest.approx(1.0)
    assert block_entropy(row, 3) == pytest.approx(1.0)


def test_kgram_windows_wrap():
    row = np.array([1, 0, 0, 0, 0], dtype=np.uint8)
    counts = kgram_counts(row, 3)
    assert counts.sum() == 5
    assert sorted(counts.tolist()) == [1, 1, 1, 2]


def test_entropy_bounded_by_block_size():
    rng = np.random.default_rng(7)
    for k in (1, 2, 3, 4):
        for _ in range(10):
            h = block_entropy((rng.random(20) < 0.5).astype(np.uint8), k)
            assert 0.0 <= h <= k


def test_block_size_larger_than_width():
    with pytest.raises(InvalidConfiguration):
        block_entropy(np.zeros(3, dtype=np.uint8), 4)
    with pytest.raises(InvalidConfiguration):
        analyze_entropy(30, 3, block_size=4)


def test_effective_skip():
    assert effective_skip(50, 201) == 50
    assert effective_skip(50, 11) == 10
    assert effective_skip(0, 1) == 0
    with pytest.raises(InvalidConfiguration):
        effective_skip(-1, 10)


def test_short_run_keeps_one_generation():
    signature = analyze_entropy(30, 31, generations=10, block_size=3, skip=50)
    assert len(signature.entropies) == 11
    assert signature.skip == 10
    assert len(signature.post_transient) == 1


def test_profile_has_one_value_per_row():
    trace = np.zeros((4, 8), dtype=np.uint8)
    assert entropy_profile(trace, 2).tolist() == [0.0] * 4


def test_signature_statistics():
    sig = EntropySignature(block_size=2, entropies=np.array([2.0, 1.0, 1.0]), skip=1)
    assert sig.mean == 1.0
    assert sig.variance == 0.0
    assert sig.normalized_mean == 0.5
    assert sig.minimum == 1.0
    assert sig.maximum == 2.0


def test_rule_0_is_dead():
    assert analyze_entropy(0, 31, 100, 3, 50).label == 'dead'


def test_identity_single_cell_is_a_fixed_point():
    signature = analyze_entropy(204, 31, 100, 3, 50)
    assert signature.normalized_mean < 0.3
    assert signature.cycle == (0, 1)
    assert signature.label == 'fixed'


def test_periodic_needs_a_longer_cycle():
    # complement flips the row every step
    signature = analyze_entropy(51, 79)
    assert signature.cycle == (0, 2)
    assert signature.label == 'periodic'

    # shift comes back after going once around the ring
    signature = analyze_entropy(2, 79)
    assert signature.cycle == (0, 79)
    assert signature.label == 'periodic'


def test_low_entropy_without_a_repeat_is_unresolved():
    # shift plus complement needs 158 steps to repeat on 79 cells
    signature = analyze_entropy(15, 79)
    assert signature.cycle is None
    assert signature.label == 'unresolved'

    trace = np.zeros((5, 8), dtype=np.uint8)
    for t in range(5):
        trace[t, t] = 1
    sig = EntropySignature(block_size=3, entropies=np.full(5, 0.3), skip=0)
    assert classify_entropy(sig, trace) == 'unresolved'


def test_rule_30_is_chaotic():
    signature = analyze_entropy(30, 31, 200, 4, 50)
    assert signature.normalized_mean > 0.9
    assert signature.label == 'chaotic'


def test_rule_90_is_fractal():
    signature = analyze_entropy(90, 79)
    assert signature.normalized_std > 0.15
    assert signature.label == 'fractal'


def test_oscillation_is_fractal_whatever_the_mean():
    trace = np.zeros((1, 8), dtype=np.uint8)
    sig = EntropySignature(block_size=3, entropies=np.array([0.3, 2.7] * 5), skip=0)
    assert sig.normalized_mean == pytest.approx(0.5)
    assert classify_entropy(sig, trace) == 'fractal'


def test_thresholds_are_configurable():
    signature = analyze_entropy(30, 31, 200, 4, 50)
    trace = np.zeros((1, 31), dtype=np.uint8)
    assert classify_entropy(signature, trace) == 'chaotic'
    assert classify_entropy(signature, trace, EntropyThresholds(chaotic_mean=0.99)) == 'complex'
    assert classify_entropy(signature, trace,
                            EntropyThresholds(oscillation_variance=0.0)) == 'fractal'


def test_invalid_thresholds():
    with pytest.raises(ValueError):
        EntropyThresholds(chaotic_mean=1.5)
    with pytest.raises(ValueError):
        EntropyThresholds(oscillation_variance=-0.1)


def test_analyze_entropy_trace_returns_the_trace_it_measured():
    signature, trace = analyze_entropy_trace(110, 41, 60, 3, 10)
    assert trace.shape == (61, 41)
    assert np.allclose(signature.entropies, entropy_profile(trace, 3))
