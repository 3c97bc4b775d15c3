"""
Offline phrases for when the clue service is unavailable.

Two layers:
- the offline table: records loaded once from data/offline_prompts.json
  (or OFFLINE_PROMPTS_PATH), filtered by difficulty and language
- built-in defaults: one curated phrase per difficulty bucket and language,
  used when the table has nothing for the request
"""

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple, Union

from pydantic import ValidationError

from .i18n import normalize_language
from .models import OfflinePrompt

logger = logging.getLogger(__name__)

BUNDLED_TABLE = "offline_prompts.json"

# bucket -> language -> (phrase, target, accepted answers, hint)
DEFAULT_PHRASES: Dict[str, Dict[str, Tuple[str, str, Tuple[str, ...], str]]] = {
    "low": {
        "en": (
            "A domestic animal that purrs and meows",
            "cat",
            ("cat", "kitty", "kitten", "feline"),
            "It chases mice",
        ),
        "es": (
            "Un animal doméstico que ronronea y maúlla",
            "gato",
            ("gato", "gatito", "minino", "felino"),
            "Persigue ratones",
        ),
    },
    "mid": {
        "en": (
            "A constant ringing sound in your ears",
            "tinnitus",
            ("tinnitus", "ringing", "ear ringing"),
            "Loud concerts can cause it",
        ),
        "es": (
            "Un zumbido constante en los oídos",
            "acúfeno",
            ("acúfeno", "tinnitus", "zumbido", "acufeno"),
            "Los conciertos muy fuertes pueden causarlo",
        ),
    },
    "high": {
        "en": (
            "The fear of long words",
            "hippopotomonstrosesquippedaliophobia",
            ("hippopotomonstrosesquippedaliophobia", "sesquipedalophobia"),
            "Ironically, its own name is very long",
        ),
        "es": (
            "El miedo a las palabras largas",
            "hipopotomonstrosesquipedaliofobia",
            ("hipopotomonstrosesquipedaliofobia", "sesquipedalofobia"),
            "Irónicamente, su nombre es larguísimo",
        ),
    },
}


def bucket_for_tier(difficulty_tier: int, max_tier: int = 3) -> str:
    """Map a tier onto low/mid/high. Tiers above max_tier are clamped first."""
    tier = max(1, min(int(difficulty_tier), max(1, max_tier)))
    if tier <= 1:
        return "low"
    if tier == 2:
        return "mid"
    return "high"


def get_default_phrase(difficulty_tier: int, language_code: str, max_tier: int = 3) -> OfflinePrompt:
    """Return the built-in phrase for this tier's bucket. Never fails."""
    bucket = bucket_for_tier(difficulty_tier, max_tier)
    lang = normalize_language(language_code)
    phrase, target, answers, hint = DEFAULT_PHRASES[bucket][lang]
    logger.info(f"[FALLBACK] Using built-in '{bucket}' phrase for language '{lang}'")
    return OfflinePrompt(
        phrase=phrase,
        target_word=target,
        accepted_answers=answers,
        hint=hint,
        language=lang,
        difficulty=max(1, difficulty_tier),
    )


def parse_offline_records(records: Iterable) -> Tuple[OfflinePrompt, ...]:
    """Validate raw records, skipping (and logging) unusable ones."""
    prompts = []
    for index, record in enumerate(records or []):
        try:
            prompts.append(OfflinePrompt.model_validate(record))
        except ValidationError as e:
            logger.warning(f"[FALLBACK] Skipping offline record #{index}: {e.error_count()} validation error(s)")
    return tuple(prompts)


def load_offline_table(path: Optional[Union[str, Path]] = None) -> Tuple[OfflinePrompt, ...]:
    """Load the offline phrase table once.

    With no path, the table bundled with the package is used. A missing or
    unreadable file yields an empty table; defaults still cover every request.
    """
    try:
        if path:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            source = str(path)
        else:
            text = resources.files("buzzword").joinpath("data").joinpath(BUNDLED_TABLE).read_text(encoding='utf-8')
            data = json.loads(text)
            source = f"bundled {BUNDLED_TABLE}"
    except FileNotFoundError:
        logger.warning(f"[FALLBACK] Offline prompts file not found at {path or BUNDLED_TABLE}")
        return ()
    except json.JSONDecodeError as e:
        logger.warning(f"[FALLBACK] Error decoding offline prompts: {e}")
        return ()
    except OSError as e:
        logger.warning(f"[FALLBACK] Error reading offline prompts: {e}")
        return ()

    records = data.get("prompts", []) if isinstance(data, dict) else data
    table = parse_offline_records(records)
    logger.info(f"[FALLBACK] Loaded {len(table)} offline prompts from {source}")
    return table
