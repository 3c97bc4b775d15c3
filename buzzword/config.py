"""
Configuration for Buzzword.

Game tuning comes from environment variables (a project `.env` is loaded on
import). Secrets are resolved through a chain of sources so that keys never
have to live in the repository.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .i18n import normalize_language

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent

# Load environment variables without clobbering values already set
env_path = PROJECT_ROOT / '.env'
load_dotenv(env_path)

GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"

SECRETS_JSON_ENV = "BUZZWORD_SECRETS_JSON"
GEMINI_KEY_ENV = "GEMINI_API_KEY"
PLAYFAB_TITLE_ENV = "PLAYFAB_TITLE_ID"
PLAYFAB_SECRET_ENV = "PLAYFAB_DEV_SECRET"
LOCAL_SECRETS_FILE = "buzzword-secrets.json"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid integer for {name}={raw!r}; using {default}")
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid number for {name}={raw!r}; using {default}")
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass
class GameSettings:
    """Tuning knobs for lives, timing, difficulty and the clue service."""

    starting_lives: int = 10
    lives_lost_on_fail: int = 3
    lives_gained_on_match: int = 1

    base_time_limit: float = 60.0
    min_time_limit: float = 20.0
    time_decay_per_round: float = 2.0

    rounds_per_tier_step: int = 3
    max_tier: int = 3
    creativity_ramp: float = 0.1

    clue_timeout: float = 30.0
    phrase_watchdog: float = 35.0
    history_size: int = 20
    avoid_recent: int = 5
    max_hints: int = 2

    offline_mode: bool = False
    default_language: str = "en"
    gemini_model: str = DEFAULT_GEMINI_MODEL
    gemini_endpoint: str = ""
    offline_prompts_path: Optional[str] = None

    best_score_sink: str = "local"
    best_score_file: str = "game_data/best_score.json"
    best_score_table: str = "buzzword_best_scores"
    player_id: str = "local"

    def __post_init__(self):
        self.default_language = normalize_language(self.default_language)
        if not self.gemini_endpoint:
            self.gemini_endpoint = GEMINI_ENDPOINT.format(model=self.gemini_model)

    @classmethod
    def from_env(cls) -> "GameSettings":
        """Build settings from environment variables, falling back to defaults."""
        defaults = cls()
        settings = cls(
            starting_lives=_env_int("STARTING_LIVES", defaults.starting_lives),
            lives_lost_on_fail=_env_int("LIVES_LOST_ON_FAIL", defaults.lives_lost_on_fail),
            lives_gained_on_match=_env_int("LIVES_GAINED_ON_MATCH", defaults.lives_gained_on_match),
            base_time_limit=_env_float("BASE_TIME_LIMIT_S", defaults.base_time_limit),
            min_time_limit=_env_float("MIN_TIME_LIMIT_S", defaults.min_time_limit),
            time_decay_per_round=_env_float("TIME_DECAY_PER_ROUND_S", defaults.time_decay_per_round),
            rounds_per_tier_step=_env_int("ROUNDS_PER_TIER_STEP", defaults.rounds_per_tier_step),
            max_tier=_env_int("MAX_TIER", defaults.max_tier),
            creativity_ramp=_env_float("CREATIVITY_RAMP", defaults.creativity_ramp),
            clue_timeout=_env_float("CLUE_TIMEOUT_S", defaults.clue_timeout),
            phrase_watchdog=_env_float("PHRASE_WATCHDOG_S", defaults.phrase_watchdog),
            history_size=_env_int("PHRASE_HISTORY_SIZE", defaults.history_size),
            avoid_recent=_env_int("AVOID_RECENT_PHRASES", defaults.avoid_recent),
            max_hints=_env_int("MAX_HINTS", defaults.max_hints),
            offline_mode=_env_bool("OFFLINE_MODE", defaults.offline_mode),
            default_language=os.getenv("DEFAULT_LANGUAGE", defaults.default_language),
            gemini_model=os.getenv("GEMINI_MODEL", defaults.gemini_model),
            gemini_endpoint=os.getenv("GEMINI_ENDPOINT", ""),
            offline_prompts_path=os.getenv("OFFLINE_PROMPTS_PATH") or None,
            best_score_sink=os.getenv("BEST_SCORE_SINK", defaults.best_score_sink).strip().lower(),
            best_score_file=os.getenv("BEST_SCORE_FILE", defaults.best_score_file),
            best_score_table=os.getenv("BEST_SCORE_TABLE", defaults.best_score_table),
            player_id=os.getenv("PLAYER_ID", defaults.player_id),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        """Raise ValueError when settings contradict each other."""
        if self.starting_lives < 1:
            raise ValueError("starting_lives must be at least 1")
        if self.lives_lost_on_fail < 0 or self.lives_gained_on_match < 0:
            raise ValueError("life adjustments must not be negative")
        if self.min_time_limit <= 0 or self.min_time_limit > self.base_time_limit:
            raise ValueError("min_time_limit must be in (0, base_time_limit]")
        if self.time_decay_per_round < 0:
            raise ValueError("time_decay_per_round must not be negative")
        if self.rounds_per_tier_step < 1 or self.max_tier < 1:
            raise ValueError("rounds_per_tier_step and max_tier must be at least 1")
        if self.phrase_watchdog <= self.clue_timeout:
            raise ValueError(
                f"phrase_watchdog ({self.phrase_watchdog}s) must exceed clue_timeout ({self.clue_timeout}s)"
            )
        if self.history_size < 1 or self.avoid_recent < 0 or self.max_hints < 0:
            raise ValueError("history_size must be positive; avoid_recent and max_hints non-negative")


@dataclass
class Secrets:
    gemini_api_key: str = ""
    playfab_title_id: str = ""
    playfab_api_key: str = ""
    source: str = field(default="none", compare=False)

    def has_any_value(self) -> bool:
        return bool(self.gemini_api_key or self.playfab_title_id or self.playfab_api_key)

    @classmethod
    def from_dict(cls, data: dict, source: str) -> "Secrets":
        return cls(
            gemini_api_key=str(data.get("geminiApiKey") or "").strip(),
            playfab_title_id=str(data.get("playFabTitleId") or "").strip(),
            playfab_api_key=str(data.get("playFabApiKey") or "").strip(),
            source=source,
        )


def _secrets_from_env_json() -> Optional[Secrets]:
    raw = os.getenv(SECRETS_JSON_ENV)
    if not raw:
        return None
    try:
        return Secrets.from_dict(json.loads(raw), source=SECRETS_JSON_ENV)
    except (json.JSONDecodeError, AttributeError) as e:
        logger.warning(f"Failed to parse {SECRETS_JSON_ENV} payload: {e}")
        return None


def _secrets_from_env_vars() -> Optional[Secrets]:
    secrets = Secrets(
        gemini_api_key=(os.getenv(GEMINI_KEY_ENV) or "").strip(),
        playfab_title_id=(os.getenv(PLAYFAB_TITLE_ENV) or "").strip(),
        playfab_api_key=(os.getenv(PLAYFAB_SECRET_ENV) or "").strip(),
        source="environment",
    )
    return secrets if secrets.has_any_value() else None


def _secrets_from_file(path: Path) -> Optional[Secrets]:
    if not path.exists():
        return None
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return Secrets.from_dict(json.load(f), source=str(path))
    except (OSError, json.JSONDecodeError, AttributeError) as e:
        logger.warning(f"Could not read secrets file {path}: {e}")
        return None


def load_secrets(project_root: Optional[Path] = None, user_dir: Optional[Path] = None) -> Secrets:
    """Resolve secrets from the first source that provides any value.

    Order: BUZZWORD_SECRETS_JSON, individual environment variables,
    LocalSettings/buzzword-secrets.json under the project root, then
    ~/.buzzword/buzzword-secrets.json. Returns empty Secrets (offline mode)
    when nothing is found.
    """
    root = project_root or PROJECT_ROOT
    home = user_dir or (Path.home() / ".buzzword")
    loaders = (
        _secrets_from_env_json,
        _secrets_from_env_vars,
        lambda: _secrets_from_file(root / "LocalSettings" / LOCAL_SECRETS_FILE),
        lambda: _secrets_from_file(home / LOCAL_SECRETS_FILE),
    )
    for loader in loaders:
        secrets = loader()
        if secrets is not None and secrets.has_any_value():
            logger.info(f"Loaded secrets from {secrets.source}")
            return secrets
    logger.info("No secrets found. Clue service disabled; using offline phrases.")
    return Secrets()
