"""
Gemini client for generated city profiles.

Asks the model for a JSON description of a city: name, country, a short
description, coordinates, and lists of attractions, places to eat and
places to stay. Only responses that parse into that shape are cached.

Also answers free-form travel questions. Those answers are never cached.
"""

import json
from typing import Any, Optional, TYPE_CHECKING

import aiohttp
import structlog

from tripcache.collectors.base import Collector
from tripcache.core.exceptions import ConfigurationError, ProviderResponseError, ValidationError
from tripcache.core.models import ProviderEndpoint

if TYPE_CHECKING:
    from tripcache.cache.response import ResponseCache

logger = structlog.get_logger(logger_name=__name__)

CITY_PROMPT = """For the location "{query}", return a single JSON object describing the city.

Keys:
- "cityName": canonical city name (string)
- "country": country (string)
- "cityDescription": 2-3 sentence general description (string)
- "coordinates": {{"latitude": number, "longitude": number}}
- "attractions": top attractions
- "kitchens": top restaurants or local eateries
- "stays": top hotels, guesthouses or unusual accommodation

Each item in "attractions", "kitchens" and "stays" is an object with
"name", "description" (1-2 sentences), "website" ("N/A" if unknown) and
"googleMapsLink".

Give 3-5 items per list where possible and use an empty list when nothing
is known. Make the coordinates accurate. If the location is ambiguous, use
its most common interpretation. Reply with the JSON object only."""

PLACE_LISTS = ("attractions", "kitchens", "stays")

ASSISTANT_PROMPT = """You are a friendly travel assistant. The user is asking about {destination}.
Their question is: "{message}"

Answer in the language of the question.

Give a helpful, practical answer that:
1. Directly addresses the question
2. Gives actionable advice
3. Includes relevant details about {place}
4. Keeps a conversational tone

Format the answer in Markdown: **bold** for key points, "*" bullets for
lists or options, and blank lines between sections. Keep it concise and
end with a short tip when one is useful."""


def strip_code_fence(text: str) -> str:
    """Remove a surrounding Markdown code fence from model output."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned[3:]
        if cleaned.lower().startswith("json"):
            cleaned = cleaned[4:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


class GeminiClient(Collector):
    """Async client for the Gemini generateContent API."""

    PROVIDER = "gemini"
    BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        session: Optional[aiohttp.ClientSession] = None,
        timeout: int = 60,
        cache: Optional["ResponseCache"] = None,
    ):
        """Initialize the Gemini client.

        Args:
            api_key: Gemini API key.
            model: Model name.
            session: Optional aiohttp session.
            timeout: Request timeout in seconds; generation is slow.
            cache: Optional response cache.
        """
        if not api_key:
            raise ConfigurationError("GEMINI_API_KEY")
        super().__init__(session, timeout, cache)
        self.api_key = api_key
        self.model = model

    async def city_info(self, location_query: str) -> dict[str, Any]:
        """Return a generated city profile for a free-text location.

        Raises:
            ProviderResponseError: If the model output is not a JSON object
                or a place list is not an array.
        """
        return await self._cached(
            ProviderEndpoint.GEMINI,
            {"locationQuery": location_query},
            lambda: self._generate_city_info(location_query),
        )

    async def ask(self, message: str, city_name: Optional[str] = None) -> str:
        """Answer a travel question, optionally about one city.

        Args:
            message: The user's question, in any language.
            city_name: City the conversation is about, if any.

        Returns:
            Markdown-formatted answer text.

        Raises:
            ValidationError: If the message is empty.
            ProviderResponseError: If the model returned no text.
        """
        if not message or not message.strip():
            raise ValidationError("message", repr(message), "Message must not be empty")

        prompt = ASSISTANT_PROMPT.format(
            message=message.strip(),
            destination=city_name or "their destination",
            place=city_name or "the destination",
        )
        data = await self._generate(prompt, resource="assistant answer")
        text = self._extract_text(data).strip()
        if not text:
            raise ProviderResponseError(self.PROVIDER, "Model returned an empty answer")
        return text

    async def _generate(self, prompt: str, resource: str, json_output: bool = False) -> Any:
        url = f"{self.BASE_URL}/models/{self.model}:generateContent"
        body: dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        if json_output:
            body["generationConfig"] = {"responseMimeType": "application/json"}

        headers = self._build_headers()
        headers["x-goog-api-key"] = self.api_key

        return await self._request_json("POST", url, resource=resource, headers=headers, json=body)

    async def _generate_city_info(self, location_query: str) -> dict[str, Any]:
        data = await self._generate(
            CITY_PROMPT.format(query=location_query),
            resource=f"city info for '{location_query}'",
            json_output=True,
        )
        text = self._extract_text(data)
        return self._parse_city_json(text)

    def _extract_text(self, data: Any) -> str:
        """Pull the generated text out of a generateContent response."""
        try:
            parts = data["candidates"][0]["content"]["parts"]
            return "".join(part.get("text", "") for part in parts)
        except (KeyError, IndexError, TypeError, AttributeError):
            raise ProviderResponseError(
                self.PROVIDER,
                "Response had no candidate text",
                raw=json.dumps(data)[:2000] if data is not None else None,
            )

    def _parse_city_json(self, text: str) -> dict[str, Any]:
        """Parse model output into a city dictionary.

        Place lists must be JSON arrays. Bare strings inside them are taken
        as place names and any other non-object item is dropped, so only
        well-formed profiles reach the cache.
        """
        try:
            parsed = json.loads(strip_code_fence(text))
        except json.JSONDecodeError as e:
            logger.warning("gemini_parse_failed", error=str(e))
            raise ProviderResponseError(self.PROVIDER, f"Output is not valid JSON: {e}", raw=text)

        if not isinstance(parsed, dict):
            raise ProviderResponseError(self.PROVIDER, "Output is not a JSON object", raw=text)

        for key in PLACE_LISTS:
            items = parsed.get(key)
            if items is None:
                parsed[key] = []
                continue
            if not isinstance(items, list):
                raise ProviderResponseError(self.PROVIDER, f'"{key}" is not a list', raw=text)
            parsed[key] = [
                {"name": item} if isinstance(item, str) else item
                for item in items
                if isinstance(item, (str, dict))
            ]
        return parsed
