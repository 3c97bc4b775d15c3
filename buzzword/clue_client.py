"""
Async client for the remote clue service (Gemini generateContent).

The request declares a JSON response schema so the model answers with
{languageCode, phrase, targetWord, synonyms, hint}. Every failure mode is
raised as a ClueServiceError subclass; callers decide how to fall back.
"""

import asyncio
import json
import logging
import re
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from .errors import ClueTimeout, MalformedResponse, NetworkFailure
from .models import ClueResponse

logger = logging.getLogger(__name__)

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "languageCode": {"type": "STRING", "description": "ISO code of the language used (en or es)"},
        "phrase": {
            "type": "STRING",
            "description": "A natural language description of the target word without using the word itself",
        },
        "targetWord": {"type": "STRING", "description": "The word that the phrase is describing"},
        "synonyms": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "Other answers that should also count as correct, most likely first",
        },
        "hint": {"type": "STRING", "description": "A short extra clue that does not reveal the word"},
    },
    "required": ["languageCode", "phrase", "targetWord", "synonyms"],
    "propertyOrdering": ["languageCode", "targetWord", "phrase", "synonyms", "hint"],
}

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def build_request_body(prompt: str, temperature: float = 0.9) -> Dict[str, Any]:
    return {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": RESPONSE_SCHEMA,
            "temperature": temperature,
            "topP": 0.95,
            "topK": 40,
            "maxOutputTokens": 256,
        },
    }


def extract_text(data: Any) -> str:
    """Pull the generated text out of a generateContent response envelope."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        raise MalformedResponse("Clue response has no candidates", {"body": str(data)[:500]}) from None
    if not isinstance(text, str) or not text.strip():
        raise MalformedResponse("Clue response text is empty")
    return text


def parse_clue_text(text: str) -> ClueResponse:
    """Parse the model's JSON text into a validated ClueResponse."""
    cleaned = _CODE_FENCE.sub("", text.strip()).strip()
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedResponse(f"Clue text is not JSON: {e}", {"text": cleaned[:500]}) from None
    if not isinstance(payload, dict):
        raise MalformedResponse("Clue payload is not a JSON object", {"text": cleaned[:500]})
    try:
        return ClueResponse.model_validate(payload)
    except ValidationError as e:
        fields = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        raise MalformedResponse(f"Clue payload failed validation: {fields}", {"fields": fields}) from None


class ClueServiceClient:
    """Sends one clue request per call. Holds no connection between calls.

    timeout is a deadline for the whole request, body included.
    """

    def __init__(
        self,
        api_key: str,
        endpoint: str,
        timeout: float = 30.0,
        temperature: float = 0.9,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.endpoint = endpoint
        self.timeout = timeout
        self.temperature = temperature
        self.transport = transport

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key,
        }

    async def generate(self, prompt: str) -> ClueResponse:
        """POST the prompt and return the validated clue payload.

        Raises:
            ClueTimeout: the request exceeded self.timeout
            NetworkFailure: transport error or non-2xx status
            MalformedResponse: body or model text failed to parse/validate
        """
        body = build_request_body(prompt, self.temperature)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                # httpx timeouts apply per read, not to the whole request
                response = await asyncio.wait_for(
                    client.post(self.endpoint, headers=self.headers, json=body),
                    timeout=self.timeout,
                )
        except (httpx.TimeoutException, asyncio.TimeoutError):
            raise ClueTimeout(f"Clue request timed out after {self.timeout}s") from None
        except httpx.HTTPError as e:
            raise NetworkFailure(f"Clue request failed: {e}") from None

        if response.status_code < 200 or response.status_code >= 300:
            raise NetworkFailure(
                f"Clue service returned HTTP {response.status_code}",
                status_code=response.status_code,
                details={"body": (response.text or "")[:500]},
            )
        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponse(f"Clue response body is not JSON: {e}") from None
        return parse_clue_text(extract_text(data))
