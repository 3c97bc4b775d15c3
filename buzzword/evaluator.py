"""
Scoring for a single guess.

Base points depend on which accepted answer matched (earlier entries are
the more expected answers and are worth more):

    position:  0    1    2    3    4    5    6   ...
    points:    120  105  90   75   65   60   55  ...  floor 30

The speed bonus adds up to 40 points for answering early in the round.
Everything here is pure; the same inputs always give the same result.
"""

import math
from typing import Optional

from .i18n import DEFAULT_LANGUAGE, t
from .models import MatchResult, Phrase, normalize_answer

TOP_POSITION_POINTS = (120, 105, 90, 75, 65)
MIN_BASE_POINTS = 30
POINTS_STEP_AFTER_TOP = 5
MAX_SPEED_BONUS = 40
RANK_LABELS = 6


def base_points(position: int) -> int:
    """Points for a match at the given zero-based position; 0 for no match."""
    if position < 0:
        return 0
    if position < len(TOP_POSITION_POINTS):
        return TOP_POSITION_POINTS[position]
    last = len(TOP_POSITION_POINTS) - 1
    return max(MIN_BASE_POINTS, TOP_POSITION_POINTS[last] - POINTS_STEP_AFTER_TOP * (position - last))


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def speed_bonus(response_time_seconds: float, time_limit_seconds: float) -> int:
    """round(40 * clamp01((limit - rt) / limit)), halves rounded up."""
    if time_limit_seconds <= 0:
        return 0
    ratio = _clamp01((time_limit_seconds - response_time_seconds) / time_limit_seconds)
    return int(math.floor(MAX_SPEED_BONUS * ratio + 0.5))


def rank_label(position: int, language: str = DEFAULT_LANGUAGE) -> str:
    if position < 0:
        return ""
    return t(f"rank.{min(position, RANK_LABELS - 1)}", language)


def _clamp_response_time(response_time_seconds: float, time_limit_seconds: float) -> float:
    upper = max(0.0, time_limit_seconds)
    return max(0.0, min(float(response_time_seconds), upper))


class GuessEvaluator:
    """Matches guesses against a phrase's accepted answers."""

    def __init__(self, default_language: str = DEFAULT_LANGUAGE):
        # Used for messages when there is no phrase to take the language from
        self.default_language = default_language

    def evaluate_guess(
        self,
        phrase: Optional[Phrase],
        guess: str,
        response_time_seconds: float,
        time_limit_seconds: float,
    ) -> MatchResult:
        rt = _clamp_response_time(response_time_seconds, time_limit_seconds)
        if phrase is None:
            return MatchResult(
                matched=False,
                response_time_seconds=rt,
                message=t("result.no_phrase", self.default_language),
            )

        lang = phrase.language_code
        normalized_guess = normalize_answer(guess)
        position = -1
        if normalized_guess:
            for index, answer in enumerate(phrase.accepted_answers):
                if normalize_answer(answer) == normalized_guess:
                    position = index
                    break

        if position < 0:
            return MatchResult(
                matched=False,
                response_time_seconds=rt,
                message=t("result.no_match", lang),
                accepted_answers_echo=phrase.accepted_answers,
            )

        base = base_points(position)
        bonus = speed_bonus(response_time_seconds, time_limit_seconds)
        total = max(0, base + bonus)
        rank = rank_label(position, lang)
        return MatchResult(
            matched=True,
            matched_position=position,
            base_points=base,
            speed_bonus=bonus,
            total_points=total,
            response_time_seconds=rt,
            matched_text=phrase.accepted_answers[position],
            message=t("result.match_ranked", lang, rank=rank, position=position + 1, points=total),
            accepted_answers_echo=phrase.accepted_answers,
            rank=rank,
        )

    def build_timeout_result(self, phrase: Optional[Phrase], time_limit_seconds: float) -> MatchResult:
        """Result for a round whose countdown ran out before any guess."""
        lang = phrase.language_code if phrase is not None else self.default_language
        return MatchResult(
            matched=False,
            response_time_seconds=max(0.0, float(time_limit_seconds)),
            message=t("result.time_up", lang),
            accepted_answers_echo=phrase.accepted_answers if phrase is not None else (),
            timed_out=True,
        )
