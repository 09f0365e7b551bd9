"""
Default parameters for the explorer.

Every analysis takes these as keyword defaults, so callers can override any
of them per call; the CLI picks its per-mode defaults from MODE_DEFAULTS.
"""

from dataclasses import dataclass
from typing import Dict


# =============================================================================
# Simulation
# =============================================================================

DEFAULT_RULE = 110
DEFAULT_WIDTH = 79
DEFAULT_GENERATIONS = 40

NUM_RULES = 256

# =============================================================================
# Cycle detection
# =============================================================================

CYCLE_WIDTH = 31
CYCLE_MAX_GENERATIONS = 10000
SURVEY_MAX_GENERATIONS = 1000
SHORT_CYCLE_PERIOD = 10

# =============================================================================
# Entropy
# =============================================================================

ENTROPY_BLOCK_SIZE = 3
ENTROPY_SKIP = 50
# Transient plus 100 recorded generations
ENTROPY_GENERATIONS = ENTROPY_SKIP + 100


@dataclass(frozen=True)
class EntropyThresholds:
    """
    Classification bands on the post-transient entropy signature.

    Means are taken over entropies normalized by the block size, variances
    over the normalized per-generation entropies. A signature is low-entropy
    when its mean is below `dead_mean`, or when it is both flat (variance
    below `periodic_variance`) and below `periodic_mean`; such signatures are
    told apart by how the trace ends. The rest are fractal above
    `oscillation_variance`, chaotic above `chaotic_mean` with variance below
    `chaotic_variance`, and complex otherwise.

    The defaults put 18 rules in chaotic and 23 in fractal over the default
    entropy survey (width 79, k = 3, 50 skipped then 100 recorded
    generations).
    """
    dead_mean: float = 0.05
    periodic_mean: float = 0.3
    periodic_variance: float = 0.02 ** 2
    oscillation_variance: float = 0.15 ** 2
    chaotic_mean: float = 0.75
    chaotic_variance: float = 0.1 ** 2

    def __post_init__(self):
        for name in ('dead_mean', 'periodic_mean', 'chaotic_mean'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {value}")
        for name in ('periodic_variance', 'oscillation_variance', 'chaotic_variance'):
            value = getattr(self, name)
            if value < 0.0:
                raise ValueError(f"{name} must be non-negative, got {value}")


DEFAULT_ENTROPY_THRESHOLDS = EntropyThresholds()

# =============================================================================
# Compression
# =============================================================================

COMPRESSION_GENERATIONS = 200
COMPRESSION_LEVEL = 9


@dataclass(frozen=True)
class CompressionBands:
    """Upper bounds (exclusive) of each compression-ratio band."""
    trivial: float = 0.05
    periodic: float = 0.20
    structured: float = 0.50
    complex: float = 0.80

    def label(self, ratio: float) -> str:
        if ratio < self.trivial:
            return 'trivial'
        if ratio < self.periodic:
            return 'periodic'
        if ratio < self.structured:
            return 'structured'
        if ratio < self.complex:
            return 'complex'
        return 'chaotic'


DEFAULT_COMPRESSION_BANDS = CompressionBands()

# =============================================================================
# Inference
# =============================================================================

INFERENCE_WIDTH = 50
INFERENCE_GENERATIONS = 20
INFERENCE_TRIALS = 10
INFERENCE_DENSITY = 0.5
INFERENCE_MAX_RADIUS = 4
INFERENCE_NOISE = 0.0
INFERENCE_TOLERANCE = 0.1
INFERENCE_SEED = 67890

SURVEY_MAX_RADIUS = 2
SURVEY_TRIALS = 5

# Out-of-distribution test rows for the rule-recovery comparison
SPARSE_DENSITY = 0.1
DENSE_DENSITY = 0.9
GENERALIZATION_TRIALS = 5
DENSITY_BUCKETS = 10

# Below this fraction of observed windows the inference results get a warning
LOW_COVERAGE = 0.5

# =============================================================================
# CLI defaults per mode
# =============================================================================

MODE_DEFAULTS: Dict[str, Dict[str, object]] = {
    'render': {'rule': DEFAULT_RULE, 'width': DEFAULT_WIDTH,
               'generations': DEFAULT_GENERATIONS},
    'cycle': {'rule': DEFAULT_RULE, 'width': CYCLE_WIDTH,
              'max_steps': CYCLE_MAX_GENERATIONS},
    'analyze': {'width': CYCLE_WIDTH, 'max_steps': SURVEY_MAX_GENERATIONS},
    'entropy': {'rule': DEFAULT_RULE, 'width': DEFAULT_WIDTH,
                'generations': ENTROPY_GENERATIONS,
                'block_size': ENTROPY_BLOCK_SIZE, 'skip': ENTROPY_SKIP},
    'entropy_survey': {'width': DEFAULT_WIDTH, 'generations': ENTROPY_GENERATIONS,
                       'block_size': ENTROPY_BLOCK_SIZE, 'skip': ENTROPY_SKIP},
    'compress': {'rule': DEFAULT_RULE, 'width': DEFAULT_WIDTH,
                 'generations': COMPRESSION_GENERATIONS},
    'compress_survey': {'width': DEFAULT_WIDTH,
                        'generations': COMPRESSION_GENERATIONS},
    'infer': {'rule': DEFAULT_RULE, 'width': INFERENCE_WIDTH,
              'generations': INFERENCE_GENERATIONS, 'noise': INFERENCE_NOISE,
              'trials': INFERENCE_TRIALS},
    'radius': {'rule': DEFAULT_RULE, 'width': INFERENCE_WIDTH,
               'generations': INFERENCE_GENERATIONS,
               'max_radius': INFERENCE_MAX_RADIUS, 'noise': INFERENCE_NOISE,
               'trials': INFERENCE_TRIALS},
    'radius_survey': {'width': INFERENCE_WIDTH,
                      'generations': INFERENCE_GENERATIONS,
                      'max_radius': SURVEY_MAX_RADIUS, 'trials': SURVEY_TRIALS},
    'dependency': {'trials': SURVEY_TRIALS},
    'dependency_infer': {'rule': 90, 'width': INFERENCE_WIDTH,
                         'generations': 30, 'noise': INFERENCE_NOISE,
                         'trials': INFERENCE_TRIALS},
}
