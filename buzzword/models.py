# Pydantic models for phrases, match results and the clue service payload.

from typing import Iterable, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .i18n import normalize_language

UNKNOWN_ANSWER = "unknown"

PhraseSource = Literal["remote", "offline", "default"]


def normalize_answer(text) -> str:
    """Comparison form of a guess or answer: trimmed and casefolded."""
    if text is None:
        return ""
    return str(text).strip().casefold()


def compose_accepted_answers(candidates: Iterable) -> Tuple[str, ...]:
    """Deduplicate answers case-insensitively, keeping the first spelling.

    Blank and non-string entries are dropped. Never returns an empty tuple.
    """
    seen = set()
    answers: List[str] = []
    for item in candidates or ():
        if not isinstance(item, str):
            continue
        display = item.strip()
        key = normalize_answer(display)
        if not key or key in seen:
            continue
        seen.add(key)
        answers.append(display)
    if not answers:
        return (UNKNOWN_ANSWER,)
    return tuple(answers)


class Phrase(BaseModel):
    """Clue payload for one round."""

    model_config = ConfigDict(frozen=True)

    clue_text: str
    target_word: str
    accepted_answers: Tuple[str, ...] = Field(default=(UNKNOWN_ANSWER,))
    language_code: Literal["en", "es"] = "en"
    difficulty_tier: int = Field(default=1, ge=1)
    hint: str = ""
    source: PhraseSource = "default"

    @field_validator("language_code", mode="before")
    @classmethod
    def _normalize_language(cls, v):
        return normalize_language(v)

    @field_validator("accepted_answers", mode="before")
    @classmethod
    def _dedupe_answers(cls, v):
        return compose_accepted_answers(v)

    @field_validator("hint", mode="before")
    @classmethod
    def _blank_hint(cls, v):
        return (v or "").strip()

    @property
    def best_answer(self) -> str:
        return self.accepted_answers[0]


class MatchResult(BaseModel):
    """Outcome of evaluating one guess, or of a round timing out."""

    model_config = ConfigDict(frozen=True)

    matched: bool
    matched_position: int = -1
    base_points: int = Field(default=0, ge=0)
    speed_bonus: int = Field(default=0, ge=0)
    total_points: int = Field(default=0, ge=0)
    response_time_seconds: float = Field(default=0.0, ge=0.0)
    matched_text: str = ""
    message: str = ""
    accepted_answers_echo: Tuple[str, ...] = ()
    rank: str = ""
    timed_out: bool = False


class ClueResponse(BaseModel):
    """Structured payload returned by the clue service.

    Field names follow the JSON schema sent with the request.
    """

    model_config = ConfigDict(populate_by_name=True)

    language_code: str = Field(..., alias="languageCode")
    phrase: str
    target_word: str = Field(..., alias="targetWord")
    synonyms: List[str]
    hint: Optional[str] = ""

    @field_validator("phrase", "target_word")
    @classmethod
    def _require_text(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("hint", mode="before")
    @classmethod
    def _hint_text(cls, v):
        return (v or "").strip() if isinstance(v, str) or v is None else v


class OfflinePrompt(BaseModel):
    """One record of the offline phrase table."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    phrase: str
    target_word: str = Field(..., alias="targetWord")
    accepted_answers: Tuple[str, ...] = Field(default=(), alias="acceptedAnswers")
    hint: str = ""
    language: str = "en"
    difficulty: int = Field(default=1, ge=1)

    @field_validator("phrase", "target_word")
    @classmethod
    def _require_text(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("language", mode="before")
    @classmethod
    def _normalize_language(cls, v):
        return normalize_language(v)

    @field_validator("hint", mode="before")
    @classmethod
    def _blank_hint(cls, v):
        return (v or "").strip()
