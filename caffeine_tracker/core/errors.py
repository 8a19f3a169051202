"""
Engine error kinds.

InvalidInput and InvalidConfiguration are caller bugs and are never
recovered internally. OutOfRange is the one a caller is expected to
retry from, by aggregating a wider timeline.
"""


class CaffeineEngineError(Exception):
    """Base class for every error raised by the engine."""


class InvalidInput(CaffeineEngineError, ValueError):
    """Negative elapsed time, non-positive resolution, malformed timestamp..."""


class InvalidConfiguration(CaffeineEngineError, ValueError):
    """Non-positive half-life or daily limit, inverted safety bands."""


class OutOfRange(CaffeineEngineError, LookupError):
    """Requested instant lies outside the aggregated timeline."""
