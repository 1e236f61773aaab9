class EnumerationError(Exception):
    """Base class for enumeration-related exceptions."""


class DomainError(EnumerationError):
    """A distribution is malformed or a value lies outside its support."""


class BudgetExceeded(EnumerationError):
    """The exploration completed more paths than the configured ceiling allows."""


class EmptyPosterior(EnumerationError):
    """ No execution path survived with a non-zero weight."""


class ContinuationReuseError(EnumerationError):
    """A pending branch was resumed more than once, or one path invoked the exit continuation twice."""


class NoActiveExploration(EnumerationError):
    """An effect primitive was invoked outside of an exploration."""


class ConfigurationError(Exception):
    pass


class DroppedContinuation(EnumerationError):
    """An execution path returned without invoking its continuation."""
