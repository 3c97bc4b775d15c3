"""
Terminal driver for Buzzword.

    python -m buzzword [--offline] [--language es] [--lives N]

Type a guess and press Enter. Commands: /hint, /pause, /resume, /quit.
"""

import argparse
import asyncio
import dataclasses
import logging
import os
import sys
import threading
from typing import Optional

from .config import GameSettings, Secrets, load_secrets
from .errors import InvalidGuess, PhraseUnavailable
from .i18n import SUPPORTED_LANGUAGES, t
from .monitoring import setup_logging
from .phrase_provider import PhraseProvider
from .progression import ProgressionState
from .round_machine import RoundState, RoundStateMachine
from .score_sink import BestScoreReporter, build_score_sink

logger = logging.getLogger(__name__)

QUIT = "/quit"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="buzzword", description="Guess the word behind the clue.")
    parser.add_argument("--offline", action="store_true", help="never call the clue service")
    parser.add_argument("--language", choices=SUPPORTED_LANGUAGES, help="clue and message language")
    parser.add_argument("--lives", type=int, help="starting lives")
    parser.add_argument("--log-level", help="overrides LOG_LEVEL (default WARNING in the terminal)")
    return parser


def apply_overrides(settings: GameSettings, args: argparse.Namespace) -> GameSettings:
    changes = {}
    if args.offline:
        changes["offline_mode"] = True
    if args.language:
        changes["default_language"] = args.language
    if args.lives is not None:
        changes["starting_lives"] = args.lives
    if not changes:
        return settings
    settings = dataclasses.replace(settings, **changes)
    settings.validate()
    return settings


def build_engine(settings: GameSettings, secrets: Secrets) -> RoundStateMachine:
    """Wire provider, progression and best-score reporting into a machine."""
    sink = build_score_sink(settings)
    best = 0
    load = getattr(sink, "load", None)
    if load is not None:
        best = load()
    reporter = BestScoreReporter(sink) if sink is not None else None

    provider = PhraseProvider(settings, api_key=secrets.gemini_api_key)
    progression = ProgressionState(settings, settings.default_language, best_score=best, reporter=reporter)
    return RoundStateMachine(provider, progression, settings=settings)


class TerminalGame:
    """Reads stdin on a daemon thread and plays rounds until game over or /quit."""

    def __init__(self, machine: RoundStateMachine, out=print):
        self.machine = machine
        self.out = out
        self.lines: Optional[asyncio.Queue] = None
        machine.events.subscribe("phrase_ready", self._on_phrase_ready)
        machine.events.subscribe("guess_decided", self._on_decided)
        machine.events.subscribe("game_over", self._on_game_over)

    @property
    def lang(self) -> str:
        return self.machine.progression.language

    def _on_phrase_ready(self, phrase) -> None:
        p = self.machine.progression
        self.out("")
        self.out(t("cli.status", self.lang, score=p.total_score, lives=p.lives_remaining,
                   best=p.best_score, seconds=self.machine.time_limit))
        self.out(t("cli.clue", self.lang, clue=phrase.clue_text))

    def _on_decided(self, result) -> None:
        self.out(result.message)
        if not result.matched and self.machine.phrase is not None:
            self.out(t("cli.answer", self.lang, answer=self.machine.phrase.best_answer))

    def _on_game_over(self, progression) -> None:
        self.out(t("round.game_over", self.lang, score=progression.total_score))

    def _start_reader(self) -> None:
        loop = asyncio.get_running_loop()
        queue = self.lines

        def reader():
            for line in sys.stdin:
                loop.call_soon_threadsafe(queue.put_nowait, line.rstrip("\n"))
            loop.call_soon_threadsafe(queue.put_nowait, QUIT)

        threading.Thread(target=reader, name="buzzword-stdin", daemon=True).start()

    async def run(self) -> None:
        self.lines = asyncio.Queue()
        self._start_reader()
        machine = self.machine
        while True:
            try:
                if machine.state is RoundState.IDLE:
                    await machine.start_round()
                elif machine.state is RoundState.SHOWING_RESULT:
                    await machine.next_round()
            except PhraseUnavailable as e:
                self.out(e.message)
                if not await self._wait_for_retry():
                    break
                continue
            if machine.state is RoundState.GAME_OVER:
                break
            if not await self._play_round():
                break
        await machine.flush_best_score()
        self.out(t("cli.goodbye", self.lang))

    async def _wait_for_retry(self) -> bool:
        """Block until the player asks for another try. False on /quit."""
        self.out(t("cli.retry", self.lang))
        line = await self.lines.get()
        return line.strip().lower() != QUIT

    async def _play_round(self) -> bool:
        """Returns False when the player quits."""
        machine = self.machine
        countdown = asyncio.ensure_future(machine.run_countdown())
        try:
            while machine.state is RoundState.AWAITING_GUESS:
                line_task = asyncio.ensure_future(self.lines.get())
                done, _ = await asyncio.wait({line_task, countdown}, return_when=asyncio.FIRST_COMPLETED)
                if line_task not in done:
                    line_task.cancel()
                    break
                if not self._handle_line(line_task.result().strip()):
                    machine.abandon()
                    return False
        finally:
            countdown.cancel()
        return True

    def _handle_line(self, line: str) -> bool:
        machine = self.machine
        command = line.lower()
        if command == QUIT:
            return False
        if command == "/hint":
            self.out(machine.request_hint() or t("cli.no_hint", self.lang))
        elif command == "/pause":
            if machine.pause():
                self.out(t("cli.paused", self.lang))
        elif command == "/resume":
            if machine.resume():
                self.out(t("cli.resumed", self.lang))
        elif machine.is_paused:
            self.out(t("cli.paused", self.lang))
        else:
            try:
                machine.submit_guess(line)
            except InvalidGuess as e:
                self.out(e.message)
        return True


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level or os.getenv("LOG_LEVEL", "WARNING"))

    try:
        settings = apply_overrides(GameSettings.from_env(), args)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    machine = build_engine(settings, load_secrets())
    try:
        asyncio.run(TerminalGame(machine).run())
    except KeyboardInterrupt:
        print()
    return 0
