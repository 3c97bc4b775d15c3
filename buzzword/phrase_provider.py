"""
Phrase provider: one Phrase per round, whatever the network does.

Sources are tried in order:
1. the remote clue service (skipped in offline mode or without an API key)
2. the offline table, filtered by difficulty and language
3. the built-in default phrase for the tier's bucket

Remote failures are logged and absorbed; request_phrase never raises
for service problems.
"""

import logging
import random
from typing import Callable, Optional, Sequence

from .clue_client import ClueServiceClient
from .config import GameSettings
from .errors import ClueServiceError, NoOfflineMatch
from .fallback_phrases import get_default_phrase, load_offline_table
from .history import PhraseHistory
from .i18n import normalize_language
from .models import OfflinePrompt, Phrase, compose_accepted_answers
from .monitoring import log_info_safe
from .prompts import build_clue_prompt

logger = logging.getLogger(__name__)

PromptBuilder = Callable[..., str]


class PhraseProvider:
    def __init__(
        self,
        settings: GameSettings,
        api_key: str = "",
        client: Optional[ClueServiceClient] = None,
        offline_table: Optional[Sequence[OfflinePrompt]] = None,
        prompt_builder: PromptBuilder = build_clue_prompt,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings
        self.prompt_builder = prompt_builder
        self.rng = rng or random.Random()
        self._history = PhraseHistory(settings.history_size)

        if client is None and api_key and not settings.offline_mode:
            client = ClueServiceClient(
                api_key=api_key,
                endpoint=settings.gemini_endpoint,
                timeout=settings.clue_timeout,
            )
        self._client = client

        if offline_table is None:
            offline_table = load_offline_table(settings.offline_prompts_path)
        self._offline_table = tuple(offline_table)

        if self.remote_enabled:
            logger.info("[CLUE] Remote clue service enabled")
        else:
            logger.info("[CLUE] Running in offline mode")

    @property
    def remote_enabled(self) -> bool:
        return self._client is not None and not self.settings.offline_mode

    @property
    def history(self) -> PhraseHistory:
        return self._history

    @property
    def offline_table(self):
        return self._offline_table

    async def request_phrase(self, difficulty_tier: int, language_code: str, creativity: float = 1.0) -> Phrase:
        """Return a phrase for the given tier and language.

        Args:
            difficulty_tier: Requested tier; values below 1 are raised to 1.
            language_code: Any code; unsupported ones map to the default language.
            creativity: Flavour multiplier forwarded to the prompt builder.
        """
        tier = max(1, int(difficulty_tier))
        lang = normalize_language(language_code)

        if self.remote_enabled:
            try:
                return await self._request_remote(tier, lang, creativity)
            except ClueServiceError as e:
                logger.warning(f"[CLUE] {type(e).__name__}: {e.message}. Falling back to offline phrases")

        return self._offline_phrase(tier, lang)

    async def _request_remote(self, tier: int, lang: str, creativity: float) -> Phrase:
        recent = self._history.most_recent(self.settings.avoid_recent)
        prompt = self.prompt_builder(tier, lang, creativity, recent, rng=self.rng)
        logger.debug(f"[CLUE] Requesting tier {tier} phrase in '{lang}' (avoiding {len(recent)} recent)")

        response = await self._client.generate(prompt)

        returned_lang = normalize_language(response.language_code)
        if returned_lang != lang:
            logger.warning(f"[CLUE] Service answered in '{response.language_code}', expected '{lang}'")

        self._history.add(response.phrase)
        log_info_safe(logger, "[CLUE] Phrase: ", response.phrase)
        return Phrase(
            clue_text=response.phrase,
            target_word=response.target_word,
            accepted_answers=compose_accepted_answers([response.target_word, *response.synonyms]),
            language_code=lang,
            difficulty_tier=tier,
            hint=response.hint or "",
            source="remote",
        )

    def _pick_offline(self, tier: int, lang: str) -> OfflinePrompt:
        candidates = [p for p in self._offline_table if p.difficulty == tier and p.language == lang]
        if not candidates:
            raise NoOfflineMatch(tier, lang)
        return self.rng.choice(candidates)

    def _offline_phrase(self, tier: int, lang: str) -> Phrase:
        try:
            prompt = self._pick_offline(tier, lang)
            source = "offline"
        except NoOfflineMatch as e:
            logger.warning(f"[FALLBACK] {e.message}. Using built-in phrase")
            prompt = get_default_phrase(tier, lang, self.settings.max_tier)
            source = "default"

        log_info_safe(logger, f"[FALLBACK] {source.capitalize()} phrase: ", prompt.phrase)
        return Phrase(
            clue_text=prompt.phrase,
            target_word=prompt.target_word,
            accepted_answers=compose_accepted_answers([prompt.target_word, *prompt.accepted_answers]),
            language_code=lang,
            difficulty_tier=tier,
            hint=prompt.hint,
            source=source,
        )
