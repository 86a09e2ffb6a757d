"""Exceptions raised by the cross-reference engine."""


class SinsLensError(Exception):
    """Base class for all engine errors."""


class EngineNotReadyError(SinsLensError):
    """Raised when a request arrives before any index rebuild was started.

    Callers should trigger a rebuild and retry the request.
    """


class InvalidStateTransitionError(SinsLensError):
    """Raised when the engine lifecycle is driven out of order."""


class SchemaAnnotationError(SinsLensError):
    """Raised when an entity family declares a marker on a schema node that does not exist."""
