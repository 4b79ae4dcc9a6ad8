"""
Gemini-backed listing description writer.

Descriptions are a nice-to-have: every failure here is downgraded to a fixed
fallback text and logged, never raised to the caller.
"""
import logging
from typing import Optional

import httpx

from tinda.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

NO_API_KEY_TEXT = "This is a great item! (AI Description unavailable without API Key)"
EMPTY_RESPONSE_TEXT = "Could not generate description."
ERROR_TEXT = "Error generating description. Please try again."

PROMPT_TEMPLATE = """
Write a catchy, short, and professional sales description for a marketplace listing in the Philippines.
Item: {title}
Category: {category}
Condition: {condition}

Tone: Friendly, trustworthy, enthusiastic.
Max length: 3 sentences.
Include emojis.
"""


class DescriptionWriter:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        # injectable for tests (httpx.MockTransport)
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.settings.gemini_api_base}/models/{self.settings.gemini_model}:generateContent"

    async def generate(self, prompt: str) -> str:
        if not self.settings.gemini_api_key:
            logger.warning("No API key configured for Gemini.")
            return NO_API_KEY_TEXT

        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.settings.gemini_api_key,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.gemini_timeout_seconds,
                transport=self._transport,
            ) as client:
                resp = await client.post(self.endpoint, json=payload, headers=headers)
            resp.raise_for_status()
            text = _extract_text(resp.json())
        except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error("Gemini API error: %s", e)
            return ERROR_TEXT

        return text or EMPTY_RESPONSE_TEXT

    async def generate_listing_description(self, title: str, category: str, condition: str) -> str:
        prompt = PROMPT_TEMPLATE.format(title=title, category=category, condition=condition)
        return await self.generate(prompt)


def _extract_text(body) -> str:
    """Join the text parts of the first candidate; ValueError on an unexpected body shape."""
    if not isinstance(body, dict):
        raise ValueError(f"Unexpected response body: {type(body).__name__}")
    candidates = body.get("candidates") or []
    if not isinstance(candidates, list):
        raise ValueError("Unexpected candidates field")
    if not candidates:
        return ""
    first = candidates[0]
    if not isinstance(first, dict):
        raise ValueError("Unexpected candidate shape")
    # blocked candidates come back without content
    content = first.get("content") or {}
    if not isinstance(content, dict):
        raise ValueError("Unexpected candidate content")
    parts = content.get("parts") or []
    if not isinstance(parts, list) or not all(isinstance(p, dict) for p in parts):
        raise ValueError("Unexpected content parts")
    return "".join(str(p.get("text", "")) for p in parts).strip()


def get_description_writer() -> DescriptionWriter:
    return DescriptionWriter()
