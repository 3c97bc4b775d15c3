"""
Round orchestration.

    IDLE -> GENERATING_PHRASE -> AWAITING_GUESS -> EVALUATING -> SHOWING_RESULT
                                                                  |-> GENERATING_PHRASE (next_round)
                                                                  |-> GAME_OVER (no lives left)

A round is decided exactly once, either by submit_guess() or by tick()
noticing the countdown ran out. Both run synchronously between awaits, so
whichever leaves AWAITING_GUESS first wins and the other becomes a no-op.

Every generation gets a new round token. abandon() and reset() bump the
token, so a phrase that arrives for an older round is dropped.

A new best score is sent to the score sink in the default executor; the
loop never waits on the sink while deciding a round.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, Dict, List, Optional

from .config import GameSettings
from .countdown import Countdown
from .errors import InvalidGuess, InvalidTransition, PhraseUnavailable
from .evaluator import GuessEvaluator
from .i18n import t
from .models import MatchResult, Phrase
from .phrase_provider import PhraseProvider
from .progression import ProgressionState

logger = logging.getLogger(__name__)


class RoundState(str, Enum):
    IDLE = "idle"
    GENERATING_PHRASE = "generating_phrase"
    AWAITING_GUESS = "awaiting_guess"
    EVALUATING = "evaluating"
    SHOWING_RESULT = "showing_result"
    GAME_OVER = "game_over"


EVENT_NAMES = ("phrase_ready", "guess_decided", "round_timeout", "game_over", "phrase_unavailable")


class RoundEvents:
    """Named callback lists. Each callback receives a single payload."""

    def __init__(self):
        self._subscribers: Dict[str, List[Callable]] = {name: [] for name in EVENT_NAMES}

    def subscribe(self, event: str, callback: Callable) -> Callable:
        if event not in self._subscribers:
            raise ValueError(f"Unknown event '{event}'. Expected one of {EVENT_NAMES}")
        self._subscribers[event].append(callback)
        return callback

    def unsubscribe(self, event: str, callback: Callable) -> None:
        if callback in self._subscribers.get(event, []):
            self._subscribers[event].remove(callback)

    def emit(self, event: str, payload) -> None:
        for callback in list(self._subscribers[event]):
            try:
                callback(payload)
            except Exception:
                # One broken listener must not stall the round
                logger.exception(f"[ROUND] '{event}' listener {callback!r} failed")


class RoundStateMachine:
    def __init__(
        self,
        provider: PhraseProvider,
        progression: ProgressionState,
        evaluator: Optional[GuessEvaluator] = None,
        countdown: Optional[Countdown] = None,
        events: Optional[RoundEvents] = None,
        settings: Optional[GameSettings] = None,
        tick_interval: float = 0.1,
    ):
        self.provider = provider
        self.progression = progression
        self.settings = settings or progression.settings
        self.evaluator = evaluator or GuessEvaluator(progression.language)
        self.countdown = countdown or Countdown()
        self.events = events or RoundEvents()
        self.tick_interval = tick_interval

        self.state = RoundState.IDLE
        self.phrase: Optional[Phrase] = None
        self.result: Optional[MatchResult] = None
        self.time_limit = 0.0
        self.hints_used = 0
        self._round_token = 0
        self._flush_task: Optional[asyncio.Future] = None

    # -- queries -----------------------------------------------------------

    @property
    def round_token(self) -> int:
        return self._round_token

    @property
    def is_paused(self) -> bool:
        return self.state is RoundState.AWAITING_GUESS and self.countdown.is_paused

    @property
    def remaining_time(self) -> float:
        if self.state is not RoundState.AWAITING_GUESS:
            return 0.0
        return self.countdown.remaining

    @property
    def hints_remaining(self) -> int:
        return max(0, self.settings.max_hints - self.hints_used)

    # -- generation ----------------------------------------------------------

    async def start_round(self) -> Optional[Phrase]:
        """Generate the first phrase of a game, or retry after PhraseUnavailable.

        Returns the phrase, or None when the round was abandoned meanwhile.

        Raises:
            InvalidTransition: not IDLE.
            PhraseUnavailable: nothing arrived within the watchdog window.
        """
        if self.state is not RoundState.IDLE:
            raise InvalidTransition("start a round", self.state.value)
        return await self._generate()

    async def next_round(self) -> Optional[Phrase]:
        """Move from the shown result to the next round."""
        if self.state is not RoundState.SHOWING_RESULT:
            raise InvalidTransition("start the next round", self.state.value)
        return await self._generate()

    async def _generate(self) -> Optional[Phrase]:
        self._round_token += 1
        token = self._round_token
        self._clear_round()
        self.state = RoundState.GENERATING_PHRASE

        ctx = self.progression.context()
        logger.info(f"[ROUND] Generating tier {ctx.tier} phrase ({ctx.language}, {ctx.time_limit:.0f}s)")
        try:
            phrase = await asyncio.wait_for(
                self.provider.request_phrase(ctx.tier, ctx.language, ctx.creativity),
                timeout=self.settings.phrase_watchdog,
            )
        except asyncio.TimeoutError:
            if token != self._round_token:
                return None
            self.state = RoundState.IDLE
            error = PhraseUnavailable(
                t("round.unavailable", ctx.language),
                {"watchdog_seconds": self.settings.phrase_watchdog},
            )
            logger.warning(f"[ROUND] No phrase within {self.settings.phrase_watchdog}s watchdog")
            self.events.emit("phrase_unavailable", error)
            raise error
        except (Exception, asyncio.CancelledError):
            if token == self._round_token:
                self.state = RoundState.IDLE
            raise

        if token != self._round_token:
            logger.info("[ROUND] Discarding phrase for an abandoned round")
            return None

        self.phrase = phrase
        self.time_limit = ctx.time_limit
        self.countdown.start(ctx.time_limit)
        self.state = RoundState.AWAITING_GUESS
        self.events.emit("phrase_ready", phrase)
        return phrase

    # -- deciding the round ----------------------------------------------------

    def submit_guess(self, guess: str) -> Optional[MatchResult]:
        """Evaluate a guess against the current phrase.

        Returns the decided result, or None when no guess is accepted right
        now (round already decided, paused, or not awaiting a guess).

        Raises:
            InvalidGuess: blank guess; the round stays open.
        """
        if self.state is not RoundState.AWAITING_GUESS or self.countdown.is_paused:
            logger.debug(f"[ROUND] Ignoring guess in state {self.state.value}")
            return None
        if self.countdown.expired:
            return self._decide(self.evaluator.build_timeout_result(self.phrase, self.time_limit))
        if not (guess or "").strip():
            raise InvalidGuess(t("guess.empty", self.progression.language))

        self.state = RoundState.EVALUATING
        result = self.evaluator.evaluate_guess(self.phrase, guess, self.countdown.elapsed, self.time_limit)
        return self._decide(result)

    def tick(self) -> Optional[MatchResult]:
        """Decide the round as a timeout if the countdown has run out."""
        if self.state is not RoundState.AWAITING_GUESS or self.countdown.is_paused:
            return None
        if not self.countdown.expired:
            return None
        return self._decide(self.evaluator.build_timeout_result(self.phrase, self.time_limit))

    async def run_countdown(self, interval: Optional[float] = None) -> Optional[MatchResult]:
        """Tick until the current round is decided; returns its result."""
        token = self._round_token
        interval = interval or self.tick_interval
        while self.state is RoundState.AWAITING_GUESS and token == self._round_token:
            result = self.tick()
            if result is not None:
                return result
            await asyncio.sleep(interval)
        return self.result if token == self._round_token else None

    def _decide(self, result: MatchResult) -> MatchResult:
        self.state = RoundState.EVALUATING
        self.countdown.stop()
        self.result = result
        self.progression.register_round(result)
        self.state = RoundState.SHOWING_RESULT

        if result.timed_out:
            logger.info(f"[ROUND] Time's up. Answer was '{self.phrase.best_answer if self.phrase else ''}'")
        self.events.emit("guess_decided", result)
        if result.timed_out:
            self.events.emit("round_timeout", result)

        if self.progression.is_game_over:
            self.state = RoundState.GAME_OVER
            logger.info(f"[ROUND] Game over with score {self.progression.total_score}")
            self.events.emit("game_over", self.progression)
        self._schedule_flush()
        return result

    # -- best score ------------------------------------------------------------

    def _schedule_flush(self) -> None:
        reporter = self.progression.reporter
        if reporter is None or reporter.pending <= 0:
            return
        if self._flush_task is not None and not self._flush_task.done():
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("[SCORE] No running loop; best score stays pending")
            return
        self._flush_task = loop.create_task(self._flush_off_loop())

    async def _flush_off_loop(self) -> bool:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.progression.reporter.flush)

    async def flush_best_score(self) -> bool:
        """Wait for any in-flight submit, then send whatever is still pending.

        Returns True when the sink holds the best score (or there is no sink).
        """
        if self._flush_task is not None and not self._flush_task.done():
            await self._flush_task
        reporter = self.progression.reporter
        if reporter is None:
            return True
        if reporter.pending <= 0:
            return True
        return await self._flush_off_loop()

    # -- player controls -------------------------------------------------------

    def pause(self) -> bool:
        if self.state is not RoundState.AWAITING_GUESS:
            return False
        return self.countdown.pause()

    def resume(self) -> bool:
        if self.state is not RoundState.AWAITING_GUESS:
            return False
        return self.countdown.resume()

    def request_hint(self) -> Optional[str]:
        """Hint 1: the phrase hint (or word length). Hint 2: first letter."""
        if self.state is not RoundState.AWAITING_GUESS or self.countdown.is_paused or self.phrase is None:
            return None
        target = self.phrase.target_word
        lang = self.phrase.language_code
        hints = [
            self.phrase.hint or t("hint.length", lang, length=len(target)),
            t("hint.first_letter", lang, letter=target[:1].upper()),
        ]
        if self.hints_used >= min(self.settings.max_hints, len(hints)):
            return None
        hint = hints[self.hints_used]
        self.hints_used += 1
        return hint

    def abandon(self) -> None:
        """Drop the current round. A phrase still in flight will be ignored."""
        self._round_token += 1
        self.countdown.stop()
        if self.state is not RoundState.GAME_OVER:
            self.state = RoundState.IDLE
        self._clear_round()

    def reset(self) -> None:
        """New game: progression back to start, machine back to IDLE."""
        self._round_token += 1
        self.countdown.stop()
        self.progression.reset()
        self._clear_round()
        self.state = RoundState.IDLE

    def _clear_round(self) -> None:
        self.phrase = None
        self.result = None
        self.time_limit = 0.0
        self.hints_used = 0
