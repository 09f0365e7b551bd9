"""
ECA Explorer: Dynamics and Locality of Elementary Cellular Automata
====================================================================

Simulates the 256 elementary cellular automata on a ring and characterises
each rule by its cycles, block entropy and compressibility, and by what can
be recovered about it from observed transitions alone.

Main Components:
---------------
- ECARule / Automaton: rule decoding and synchronous evolution
- find_cycle: transient and period detection
- analyze_entropy: block-entropy signature and label
- analyze_compression: spacetime compression ratio
- infer_radius / infer_support: locality inference from observations
- infer_rule_number / generalization_test: rule recovery
- RuleSurvey and the *_survey helpers: all-rules surveys

Quick Start:
-----------
>>> from eca_explorer import Automaton, find_cycle, analyze_entropy
>>>
>>> ca = Automaton.centered(31, 110)
>>> trace = ca.evolve(40)
>>> report = find_cycle(110, 31, 10000)
>>> signature = analyze_entropy(30, 79, block_size=4)
"""

# Rules and simulation
from .rules import (
    ECARule,
    validate_rule,
    rule_table,
    rule_support,
    depends_on,
    mirror_rule,
    complement_rule,
    equivalence_class,
)
from .automaton import Automaton, evolve_row, step_row, render_trace

# Analyses
from .cycles import CycleReport, CycleStatus, find_cycle
from .entropy import EntropySignature, analyze_entropy, analyze_entropy_trace, block_entropy
from .compression import CompressionReport, analyze_compression, compression_ratio

# Inference
from .inference import (
    InferenceMode,
    InferenceOutcome,
    Observations,
    RadiusInference,
    SupportInference,
    infer_locality,
    infer_radius,
    infer_support,
)
from .recovery import GeneralizationReport, RuleVote, generalization_test, infer_rule_number

# Surveys
from .survey import (
    RuleSurvey,
    SurveyEntry,
    compression_survey,
    cycle_survey,
    dependency_survey,
    entropy_survey,
    radius_survey,
)

# Errors and configuration
from .errors import CompressorFailure, ExplorerError, InvalidConfiguration
from .config import CompressionBands, EntropyThresholds

__version__ = '0.1.0'

__all__ = [
    # Rules and simulation
    'ECARule',
    'validate_rule',
    'rule_table',
    'rule_support',
    'depends_on',
    'mirror_rule',
    'complement_rule',
    'equivalence_class',
    'Automaton',
    'evolve_row',
    'step_row',
    'render_trace',

    # Analyses
    'CycleReport',
    'CycleStatus',
    'find_cycle',
    'EntropySignature',
    'analyze_entropy',
    'analyze_entropy_trace',
    'block_entropy',
    'CompressionReport',
    'analyze_compression',
    'compression_ratio',

    # Inference
    'InferenceMode',
    'InferenceOutcome',
    'Observations',
    'RadiusInference',
    'SupportInference',
    'infer_locality',
    'infer_radius',
    'infer_support',
    'GeneralizationReport',
    'RuleVote',
    'generalization_test',
    'infer_rule_number',

    # Surveys
    'RuleSurvey',
    'SurveyEntry',
    'compression_survey',
    'cycle_survey',
    'dependency_survey',
    'entropy_survey',
    'radius_survey',

    # Errors and configuration
    'CompressorFailure',
    'ExplorerError',
    'InvalidConfiguration',
    'CompressionBands',
    'EntropyThresholds',
]
