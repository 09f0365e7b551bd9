"""
Exceptions raised by the explorer.

Exhausted cycle searches and inconclusive inferences are *outcomes*, not
errors; they are reported through the result objects instead.
"""


class ExplorerError(Exception):
    """Base class for every error raised by eca_explorer."""


class InvalidConfiguration(ExplorerError, ValueError):
    """A width, rule, generation count, radius or probability is out of range."""


class CompressorFailure(ExplorerError, RuntimeError):
    """The external compressor raised or returned something unusable."""


def require(condition: bool, message: str) -> None:
    """Raise InvalidConfiguration with `message` unless `condition` holds."""
    if not condition:
        raise InvalidConfiguration(message)
