"""Default prompt text for clue generation.

The phrase provider accepts any callable with the same signature as
build_clue_prompt, so deployments can swap in their own wording.
"""

import random
from typing import Optional, Sequence

from .i18n import LANGUAGE_NAMES, normalize_language

DIFFICULTY_DESCRIPTIONS = {
    1: "a simple, creative phrase {context} that describes a common everyday word. "
       "The word should be something most people know. Make it fun and varied!",
    2: "a moderately challenging phrase {context} that describes a less common word. "
       "Be creative and use interesting descriptions!",
    3: "a difficult, sophisticated phrase {context} that describes an uncommon or technical word. "
       "Make it intellectually challenging!",
}
GENERIC_DESCRIPTION = "a creative phrase {context} that describes a word."

CONTEXTS = [
    "describing an object or thing",
    "describing an action or activity",
    "describing a feeling or emotion",
    "describing a place or location",
    "describing a concept or idea",
    "describing a profession or job",
    "describing an animal or creature",
    "describing food or drink",
    "describing weather or nature",
    "describing technology or tools",
]


def creativity_flavor(multiplier: float) -> str:
    if multiplier < 1.3:
        return "Keep the tone playful and clear."
    if multiplier < 1.8:
        return "Be inventive: use an unexpected angle or a vivid image."
    return "Be daring: use wordplay, metaphor or a surprising point of view."


def build_clue_prompt(
    difficulty_tier: int,
    language_code: str,
    creativity: float = 1.0,
    recent_phrases: Sequence[str] = (),
    rng: Optional[random.Random] = None,
) -> str:
    """Build the instruction text for one clue request.

    Args:
        difficulty_tier: Tier >= 1; tiers without their own wording get a generic one.
        language_code: Target language of the clue and answers.
        creativity: Flavour multiplier from progression (1.0 at the start).
        recent_phrases: Clues to avoid repeating, most recent first.
        rng: Random source for the thematic context.
    """
    rng = rng or random
    context = rng.choice(CONTEXTS)
    description = DIFFICULTY_DESCRIPTIONS.get(difficulty_tier, GENERIC_DESCRIPTION).format(context=context)
    language_name = LANGUAGE_NAMES[normalize_language(language_code)]

    parts = [
        f"Generate {description}",
        "Never use the word itself in the phrase.",
        f"Write the phrase, the target word, the synonyms and the hint in {language_name}.",
        "List up to 5 synonyms or equally valid answers, most likely first.",
        "Add a short hint that does not reveal the word.",
        creativity_flavor(creativity),
    ]
    if recent_phrases:
        avoid = "; ".join(f'"{p}"' for p in recent_phrases)
        parts.append(f"Do NOT generate phrases similar to these recent ones: {avoid}.")
    return " ".join(parts)
