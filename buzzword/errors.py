"""
Exception hierarchy for the Buzzword engine.

Clue service failures (network, timeout, malformed payload) are absorbed by
the phrase provider and turned into the offline fallback. The remaining
errors reach the caller of the round state machine.
"""

from typing import Any, Dict, Optional


class BuzzwordError(Exception):
    """Base exception for all Buzzword errors.

    Attributes:
        message: Human-readable error message
        details: Optional dictionary of additional error context
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ClueServiceError(BuzzwordError):
    """Any failure talking to the remote clue service."""


class NetworkFailure(ClueServiceError):
    """Transport error or non-success HTTP status."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.status_code = status_code


class ClueTimeout(ClueServiceError):
    """The clue request exceeded its timeout."""


class MalformedResponse(ClueServiceError):
    """The payload failed to parse or lacks a required field."""


class NoOfflineMatch(BuzzwordError):
    """The offline table has no entry for the requested tier and language."""

    def __init__(self, difficulty_tier: int, language_code: str):
        super().__init__(
            f"No offline prompts for difficulty {difficulty_tier} and language '{language_code}'",
            {"difficulty_tier": difficulty_tier, "language_code": language_code},
        )
        self.difficulty_tier = difficulty_tier
        self.language_code = language_code


class InvalidGuess(BuzzwordError):
    """Empty or whitespace-only guess. The round stays open."""


class ResourceExhausted(BuzzwordError):
    """No lives left. Only an explicit reset recovers."""


class PhraseUnavailable(BuzzwordError):
    """No phrase was delivered within the round watchdog window.

    Recoverable: the round stays generable and the caller may retry.
    """

    recoverable = True


class InvalidTransition(BuzzwordError):
    """An operation was requested in a state that does not allow it."""

    def __init__(self, operation: str, state: str):
        super().__init__(
            f"Cannot {operation} while round is {state}",
            {"operation": operation, "state": state},
        )
        self.operation = operation
        self.state = state
