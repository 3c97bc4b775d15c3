"""Buzzword: guess the word behind a generated clue before the clock runs out."""

from .config import GameSettings, load_secrets
from .errors import (
    BuzzwordError,
    InvalidGuess,
    InvalidTransition,
    PhraseUnavailable,
    ResourceExhausted,
)
from .evaluator import GuessEvaluator
from .models import MatchResult, Phrase
from .phrase_provider import PhraseProvider
from .progression import ProgressionState
from .round_machine import RoundEvents, RoundState, RoundStateMachine

__version__ = "0.1.0"

__all__ = [
    "BuzzwordError",
    "GameSettings",
    "GuessEvaluator",
    "InvalidGuess",
    "InvalidTransition",
    "MatchResult",
    "Phrase",
    "PhraseProvider",
    "PhraseUnavailable",
    "ProgressionState",
    "ResourceExhausted",
    "RoundEvents",
    "RoundState",
    "RoundStateMachine",
    "load_secrets",
]
