"""
Player-facing strings for Buzzword.

English is the default and the fallback for unknown keys or languages.

Usage:
    from buzzword.i18n import t, normalize_language
    lang = normalize_language("ES")        # -> "es"
    t("result.match_ranked", lang, rank="Perfecto", position=1, points=160)
    # -> "¡Perfecto! Coincidencia #1 (+160 puntos)"
"""

import logging
from typing import Dict

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en"
SUPPORTED_LANGUAGES = ("en", "es")

# Names used inside clue prompts
LANGUAGE_NAMES = {
    "en": "English",
    "es": "Spanish",
}

MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        "result.match_ranked": "{rank}! Match #{position} (+{points} points)",
        "result.no_match": "No match!",
        "result.no_phrase": "No phrase available.",
        "result.time_up": "Time's up!",
        "rank.0": "Perfect",
        "rank.1": "Excellent",
        "rank.2": "Great",
        "rank.3": "Good",
        "rank.4": "Fair",
        "rank.5": "Close",
        "hint.length": "The word has {length} letters",
        "hint.first_letter": "The word starts with '{letter}'",
        "guess.empty": "Please enter a word!",
        "round.unavailable": "Error loading phrase. Please try again.",
        "round.game_over": "Game over! Final score: {score}",
        "cli.clue": "Clue: {clue}",
        "cli.status": "Score {score} | Lives {lives} | Best {best} | {seconds:.0f}s",
        "cli.answer": "The answer was: {answer}",
        "cli.paused": "Paused. Type /resume to continue.",
        "cli.resumed": "Resumed.",
        "cli.no_hint": "No more hints for this word.",
        "cli.goodbye": "Thanks for playing!",
        "cli.retry": "Press Enter to try again or type /quit.",
    },
    "es": {
        "result.match_ranked": "¡{rank}! Coincidencia #{position} (+{points} puntos)",
        "result.no_match": "¡Sin coincidencia!",
        "result.no_phrase": "No hay frase disponible.",
        "result.time_up": "¡Se acabó el tiempo!",
        "rank.0": "Perfecto",
        "rank.1": "Excelente",
        "rank.2": "Genial",
        "rank.3": "Bien",
        "rank.4": "Aceptable",
        "rank.5": "Cerca",
        "hint.length": "La palabra tiene {length} letras",
        "hint.first_letter": "La palabra empieza con '{letter}'",
        "guess.empty": "¡Escribe una palabra!",
        "round.unavailable": "Error al cargar la frase. Inténtalo de nuevo.",
        "round.game_over": "¡Fin del juego! Puntuación final: {score}",
        "cli.clue": "Pista: {clue}",
        "cli.status": "Puntos {score} | Vidas {lives} | Récord {best} | {seconds:.0f}s",
        "cli.answer": "La respuesta era: {answer}",
        "cli.paused": "En pausa. Escribe /resume para continuar.",
        "cli.resumed": "Reanudado.",
        "cli.no_hint": "No quedan pistas para esta palabra.",
        "cli.goodbye": "¡Gracias por jugar!",
        "cli.retry": "Pulsa Enter para reintentar o escribe /quit.",
    },
}


def normalize_language(code) -> str:
    """Map any language code onto a supported one ("es-MX" -> "es", "fr" -> "en")."""
    if not code:
        return DEFAULT_LANGUAGE
    base = str(code).strip().lower().replace("_", "-").split("-")[0]
    if base in SUPPORTED_LANGUAGES:
        return base
    logger.debug(f"Unsupported language '{code}', using '{DEFAULT_LANGUAGE}'")
    return DEFAULT_LANGUAGE


def t(key: str, lang: str = DEFAULT_LANGUAGE, **kwargs) -> str:
    table = MESSAGES.get(normalize_language(lang), MESSAGES[DEFAULT_LANGUAGE])
    template = table.get(key) or MESSAGES[DEFAULT_LANGUAGE].get(key, key)
    return template.format(**kwargs) if kwargs else template
