import asyncio
import threading

import pytest

from buzzword.config import GameSettings
from buzzword.countdown import Countdown
from buzzword.errors import InvalidGuess, InvalidTransition, PhraseUnavailable
from buzzword.models import Phrase
from buzzword.progression import ProgressionState
from buzzword.round_machine import RoundEvents, RoundState, RoundStateMachine
from buzzword.score_sink import BestScoreReporter


class SlowProvider:
    """Hangs on the first request, answers immediately afterwards."""

    def __init__(self, phrase):
        self.phrase = phrase
        self.calls = 0

    async def request_phrase(self, difficulty_tier, language_code, creativity=1.0):
        self.calls += 1
        if self.calls == 1:
            await asyncio.sleep(10)
        return self.phrase


class GatedProvider:
    def __init__(self, phrase):
        self.phrase = phrase
        self.gate = asyncio.Event()

    async def request_phrase(self, difficulty_tier, language_code, creativity=1.0):
        await self.gate.wait()
        return self.phrase


@pytest.fixture
def recorded():
    return {name: [] for name in ("phrase_ready", "guess_decided", "round_timeout", "game_over", "phrase_unavailable")}


def build_machine(provider, settings, clock, recorded=None):
    events = RoundEvents()
    if recorded is not None:
        for name, items in recorded.items():
            events.subscribe(name, items.append)
    progression = ProgressionState(settings, language="en")
    return RoundStateMachine(provider, progression, countdown=Countdown(clock=clock), events=events)


@pytest.fixture
def machine(stub_provider, settings, clock, recorded):
    return build_machine(stub_provider, settings, clock, recorded)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_start_round_awaits_guess(machine, stub_provider, cat_phrase, recorded):
    phrase = await machine.start_round()
    assert phrase == cat_phrase
    assert machine.state is RoundState.AWAITING_GUESS
    assert machine.time_limit == 60.0
    assert recorded["phrase_ready"] == [cat_phrase]
    assert stub_provider.calls == [(1, "en", 1.0)]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_quick_synonym_guess(machine, recorded):
    await machine.start_round()
    result = machine.submit_guess("kitty")
    assert result.total_points == 145
    assert machine.state is RoundState.SHOWING_RESULT
    assert machine.progression.total_score == 145
    assert machine.progression.lives_remaining == 10
    assert recorded["guess_decided"] == [result]
    assert recorded["round_timeout"] == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_elapsed_time_feeds_speed_bonus(machine, clock):
    await machine.start_round()
    clock.advance(30.0)
    result = machine.submit_guess("cat")
    assert result.base_points == 120
    assert result.speed_bonus == 20
    assert result.response_time_seconds == 30.0


@pytest.mark.unit
@pytest.mark.asyncio
async def test_blank_guess_keeps_round_open(machine):
    await machine.start_round()
    with pytest.raises(InvalidGuess):
        machine.submit_guess("   ")
    assert machine.state is RoundState.AWAITING_GUESS
    assert machine.progression.rounds_completed == 0


@pytest.mark.unit
@pytest.mark.asyncio
async def test_wrong_guess_costs_lives(machine):
    await machine.start_round()
    result = machine.submit_guess("dog")
    assert not result.matched
    assert machine.progression.lives_remaining == 7


@pytest.mark.unit
@pytest.mark.asyncio
async def test_timeout_via_tick(machine, clock, recorded):
    await machine.start_round()
    clock.advance(59.0)
    assert machine.tick() is None
    clock.advance(1.0)
    result = machine.tick()

    assert result.timed_out
    assert result.total_points == 0
    assert result.response_time_seconds == 60.0
    assert result.message == "Time's up!"
    assert machine.progression.lives_remaining == 7
    assert recorded["round_timeout"] == [result]
    assert recorded["guess_decided"] == [result]
    # The round is decided; late input is ignored
    assert machine.submit_guess("cat") is None
    assert machine.tick() is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_guess_after_expiry_loses_to_timeout(machine, clock):
    await machine.start_round()
    clock.advance(61.0)
    result = machine.submit_guess("cat")
    assert result.timed_out
    assert not result.matched
    assert machine.progression.total_score == 0


@pytest.mark.unit
@pytest.mark.asyncio
async def test_run_countdown_returns_timeout(machine, clock):
    await machine.start_round()
    clock.advance(120.0)
    result = await machine.run_countdown(interval=0.001)
    assert result.timed_out
    assert machine.state is RoundState.SHOWING_RESULT


@pytest.mark.unit
@pytest.mark.asyncio
async def test_run_countdown_returns_guess_result(machine):
    await machine.start_round()
    task = asyncio.ensure_future(machine.run_countdown(interval=0.001))
    await asyncio.sleep(0)
    result = machine.submit_guess("feline")
    assert await task == result
    assert result.matched_position == 3


@pytest.mark.unit
@pytest.mark.asyncio
async def test_pause_freezes_countdown_and_guesses(machine, clock):
    await machine.start_round()
    clock.advance(10.0)
    assert machine.pause()
    assert machine.is_paused
    clock.advance(300.0)
    assert machine.submit_guess("cat") is None
    assert machine.tick() is None
    assert machine.request_hint() is None
    assert machine.resume()
    assert machine.remaining_time == 50.0
    result = machine.submit_guess("cat")
    assert result.matched


@pytest.mark.unit
@pytest.mark.asyncio
async def test_hints(machine):
    await machine.start_round()
    assert machine.request_hint() == "The word has 3 letters"
    assert machine.request_hint() == "The word starts with 'C'"
    assert machine.request_hint() is None
    assert machine.hints_remaining == 0
    result = machine.submit_guess("cat")
    assert result.total_points == 160


@pytest.mark.unit
@pytest.mark.asyncio
async def test_phrase_hint_used_first(settings, clock):
    phrase = Phrase(clue_text="Ringing in the ears", target_word="tinnitus", hint="Loud concerts cause it")
    provider = GatedProvider(phrase)
    provider.gate.set()
    machine = build_machine(provider, settings, clock)
    await machine.start_round()
    assert machine.request_hint() == "Loud concerts cause it"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_invalid_transitions(machine):
    with pytest.raises(InvalidTransition):
        await machine.next_round()
    await machine.start_round()
    with pytest.raises(InvalidTransition):
        await machine.start_round()
    machine.submit_guess("cat")
    with pytest.raises(InvalidTransition):
        await machine.start_round()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_next_round_uses_progression(machine, stub_provider):
    await machine.start_round()
    for _ in range(3):
        machine.submit_guess("cat")
        await machine.next_round()
    assert stub_provider.calls[-1][0] == 2
    assert machine.time_limit == 54.0
    assert machine.hints_used == 0


@pytest.mark.unit
@pytest.mark.asyncio
async def test_watchdog_raises_phrase_unavailable(cat_phrase, clock, recorded):
    settings = GameSettings(clue_timeout=0.01, phrase_watchdog=0.05, best_score_sink="none")
    machine = build_machine(SlowProvider(cat_phrase), settings, clock, recorded)

    with pytest.raises(PhraseUnavailable) as exc_info:
        await machine.start_round()

    assert exc_info.value.recoverable
    assert machine.state is RoundState.IDLE
    assert recorded["phrase_unavailable"] == [exc_info.value]
    assert machine.progression.rounds_completed == 0

    # Retry succeeds
    assert await machine.start_round() == cat_phrase
    assert machine.state is RoundState.AWAITING_GUESS


@pytest.mark.unit
@pytest.mark.asyncio
async def test_abandoned_round_ignores_late_phrase(cat_phrase, settings, clock, recorded):
    provider = GatedProvider(cat_phrase)
    machine = build_machine(provider, settings, clock, recorded)

    task = asyncio.ensure_future(machine.start_round())
    await asyncio.sleep(0)
    assert machine.state is RoundState.GENERATING_PHRASE
    machine.abandon()
    provider.gate.set()

    assert await task is None
    assert machine.state is RoundState.IDLE
    assert machine.phrase is None
    assert recorded["phrase_ready"] == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_game_over_and_reset(stub_provider, clock, recorded):
    settings = GameSettings(starting_lives=3, lives_lost_on_fail=3, best_score_sink="none")
    machine = build_machine(stub_provider, settings, clock, recorded)

    await machine.start_round()
    machine.submit_guess("cat")
    await machine.next_round()
    machine.submit_guess("dog")

    assert machine.state is RoundState.GAME_OVER
    assert recorded["game_over"] == [machine.progression]
    assert machine.progression.best_score == 160
    with pytest.raises(InvalidTransition):
        await machine.next_round()

    machine.reset()
    assert machine.state is RoundState.IDLE
    assert machine.progression.lives_remaining == 3
    assert machine.progression.total_score == 0
    assert machine.progression.best_score == 160


@pytest.mark.unit
def test_events_reject_unknown_names():
    events = RoundEvents()
    with pytest.raises(ValueError):
        events.subscribe("phrase_sent", print)


@pytest.mark.unit
def test_broken_listener_does_not_stop_others():
    events = RoundEvents()
    seen = []

    def broken(payload):
        raise RuntimeError("boom")

    events.subscribe("guess_decided", broken)
    events.subscribe("guess_decided", seen.append)
    events.emit("guess_decided", "result")
    assert seen == ["result"]


class BlockingSink:
    """Score sink whose submit blocks until released."""

    def __init__(self):
        self.release = threading.Event()
        self.submitted = []

    def submit(self, score):
        self.release.wait(5)
        self.submitted.append(score)
        return True


@pytest.mark.unit
@pytest.mark.asyncio
async def test_guess_does_not_wait_on_score_sink(stub_provider, settings, clock):
    sink = BlockingSink()
    reporter = BestScoreReporter(sink)
    progression = ProgressionState(settings, language="en", reporter=reporter)
    machine = RoundStateMachine(stub_provider, progression, countdown=Countdown(clock=clock))

    await machine.start_round()
    result = machine.submit_guess("cat")

    assert result.total_points == 160
    assert machine.state is RoundState.SHOWING_RESULT
    assert sink.submitted == []
    assert reporter.pending == 160

    sink.release.set()
    assert await machine.flush_best_score()
    assert sink.submitted == [160]
    assert reporter.pending == 0


@pytest.mark.unit
@pytest.mark.asyncio
async def test_flush_without_reporter(machine):
    await machine.start_round()
    machine.submit_guess("cat")
    assert await machine.flush_best_score()
