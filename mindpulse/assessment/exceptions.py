"""Exceptions raised by the assessment core."""


class AssessmentError(Exception):
    """Base class for assessment errors."""


class GameConfigError(AssessmentError):
    """Raised when a game is constructed with missing or invalid configuration."""


class GameStateError(AssessmentError):
    """Raised on an illegal game state transition, e.g. starting a game twice."""


class SessionStateError(AssessmentError):
    """Raised when the session lifecycle is driven out of order."""
