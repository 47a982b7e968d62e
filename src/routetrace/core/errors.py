"""Exception types raised by routetrace.

Only configuration problems surface as exceptions. Out-of-order signals and
malformed performance entries are absorbed by the tracker and the cache.
"""


class RouteTraceError(Exception):
    """Base class for routetrace errors."""


class ConfigurationError(RouteTraceError, ValueError):
    """Raised at construction time when a timeout or capacity is not positive."""
