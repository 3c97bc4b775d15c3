import pytest

from buzzword.config import GameSettings
from buzzword.models import Phrase


class FakeClock:
    """Manually advanced stand-in for time.monotonic."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubProvider:
    """Phrase provider that returns a fixed phrase and records calls."""

    def __init__(self, phrase):
        self.phrase = phrase
        self.calls = []

    async def request_phrase(self, difficulty_tier, language_code, creativity=1.0):
        self.calls.append((difficulty_tier, language_code, creativity))
        return self.phrase


@pytest.fixture
def settings():
    return GameSettings(best_score_sink="none")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cat_phrase():
    return Phrase(
        clue_text="A domestic animal that purrs and meows",
        target_word="cat",
        accepted_answers=("cat", "kitty", "kitten", "feline"),
        language_code="en",
        difficulty_tier=1,
        source="offline",
    )


@pytest.fixture
def stub_provider(cat_phrase):
    return StubProvider(cat_phrase)
