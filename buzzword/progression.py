"""
progression.py — Score, lives and difficulty across rounds.

ProgressionState is the only place session numbers change. The round
machine is the sole caller of register_round(); everything else reads.

Usage:
    progression = ProgressionState(settings, language="en")
    ctx = progression.context()          # tier, time limit, creativity
    progression.register_round(result)
    if progression.is_game_over:
        ...
"""

import logging
from typing import Optional

from .config import GameSettings
from .context import GameContext, creativity_for_rounds, tier_for_rounds, time_limit_for_rounds
from .errors import ResourceExhausted
from .i18n import normalize_language
from .models import MatchResult
from .score_sink import BestScoreReporter

logger = logging.getLogger(__name__)


class ProgressionState:
    """Mutable state for one play session.

    Attributes:
        total_score:       Points accumulated this game.
        best_score:        Highest total_score seen, survives reset().
        rounds_completed:  Rounds decided this game (matches and misses).
        lives_remaining:   0..starting_lives. Zero means game over.
        language:          Active language code.
    """

    def __init__(
        self,
        settings: GameSettings,
        language: Optional[str] = None,
        best_score: int = 0,
        reporter: Optional[BestScoreReporter] = None,
    ) -> None:
        self.settings = settings
        self.language = normalize_language(language or settings.default_language)
        self.best_score = max(0, int(best_score))
        self.reporter = reporter
        self.total_score = 0
        self.rounds_completed = 0
        self.lives_remaining = settings.starting_lives

    def reset(self) -> None:
        """Start a fresh game. Best score and language are kept."""
        self.total_score = 0
        self.rounds_completed = 0
        self.lives_remaining = self.settings.starting_lives

    def set_language(self, language: str) -> None:
        self.language = normalize_language(language)

    @property
    def is_game_over(self) -> bool:
        return self.lives_remaining <= 0

    @property
    def tier(self) -> int:
        return tier_for_rounds(self.rounds_completed, self.settings)

    @property
    def time_limit(self) -> float:
        return time_limit_for_rounds(self.rounds_completed, self.settings)

    @property
    def creativity_multiplier(self) -> float:
        return creativity_for_rounds(self.rounds_completed, self.settings)

    def context(self) -> GameContext:
        return GameContext.for_rounds(self.rounds_completed, self.settings, self.language)

    def register_round(self, result: MatchResult) -> None:
        """Apply a decided round to score, lives and best score.

        Raises:
            ResourceExhausted: no lives left; only reset() recovers.
        """
        if self.is_game_over:
            raise ResourceExhausted("No lives remaining", {"total_score": self.total_score})

        self.rounds_completed += 1
        self.total_score = max(0, self.total_score + result.total_points)

        if result.matched:
            self.lives_remaining = min(
                self.settings.starting_lives,
                self.lives_remaining + self.settings.lives_gained_on_match,
            )
        else:
            self.lives_remaining = max(0, self.lives_remaining - self.settings.lives_lost_on_fail)

        logger.info(
            f"[ROUND] Round {self.rounds_completed}: +{result.total_points} "
            f"(score {self.total_score}, lives {self.lives_remaining})"
        )

        if self.total_score > self.best_score:
            self.best_score = self.total_score
            logger.info(f"[SCORE] New best score: {self.best_score}")
            if self.reporter is not None:
                self.reporter.report(self.best_score)
