"""
context.py — Language and difficulty for the next round.

Everything here is a pure function of the number of rounds completed:

    tier        = clamp(1 + rounds // rounds_per_tier_step, 1, max_tier)
    time_limit  = clamp(base - rounds * decay, min_time_limit, base)
    creativity  = 1 + rounds * ramp

Creativity is only used to flavour clue requests, never for scoring.
"""

from dataclasses import dataclass

from .config import GameSettings
from .i18n import normalize_language


def tier_for_rounds(rounds_completed: int, settings: GameSettings) -> int:
    rounds = max(0, rounds_completed)
    tier = 1 + rounds // settings.rounds_per_tier_step
    return max(1, min(tier, settings.max_tier))


def time_limit_for_rounds(rounds_completed: int, settings: GameSettings) -> float:
    rounds = max(0, rounds_completed)
    limit = settings.base_time_limit - rounds * settings.time_decay_per_round
    return max(settings.min_time_limit, min(limit, settings.base_time_limit))


def creativity_for_rounds(rounds_completed: int, settings: GameSettings) -> float:
    return 1.0 + max(0, rounds_completed) * settings.creativity_ramp


@dataclass(frozen=True)
class GameContext:
    """Snapshot handed to the phrase provider and the round timer.

    Attributes:
        language:    Active display language ("en" or "es").
        tier:        Difficulty tier, 1..max_tier.
        time_limit:  Seconds allowed for the round.
        creativity:  Monotonically increasing flavour multiplier.
    """

    language: str
    tier: int
    time_limit: float
    creativity: float

    @classmethod
    def for_rounds(cls, rounds_completed: int, settings: GameSettings, language: str) -> "GameContext":
        return cls(
            language=normalize_language(language),
            tier=tier_for_rounds(rounds_completed, settings),
            time_limit=time_limit_for_rounds(rounds_completed, settings),
            creativity=creativity_for_rounds(rounds_completed, settings),
        )
