# summavoice/ai.py
"""Text rewriting on top of Google Gemini."""
import logging
import re

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from summavoice import config
from summavoice.errors import ApiError

logger = logging.getLogger(__name__)

_client: genai.Client | None = None

SUMMARY_LENGTHS = {
    1: "one sentence",
    2: "a short paragraph",
    3: "a medium-length summary",
    4: "a detailed summary",
    5: "a very detailed summary",
}

_BULLET = re.compile(r"^\s*(?:[-•*]|\d+[.)])\s*")


def init_ai_service() -> bool:
    """Create the Gemini client if an API key is configured; returns availability."""
    global _client
    if not config.GOOGLE_AI_API_KEY:
        _client = None
        return False
    _client = genai.Client(api_key=config.GOOGLE_AI_API_KEY)
    return True


def is_available() -> bool:
    return _client is not None


async def generate_text(prompt: str, max_output_tokens: int = 2048, temperature: float = 0.7) -> str:
    """Send one prompt to Gemini and return the plain text answer."""
    if _client is None and not init_ai_service():
        raise ApiError(500, "AI service is not configured")

    try:
        response = await _client.aio.models.generate_content(
            model=config.GEMINI_MODEL,
            contents=prompt,
            config=types.GenerateContentConfig(
                max_output_tokens=max_output_tokens,
                temperature=max(0.0, min(1.0, temperature)),
                top_p=0.95,
                top_k=40,
            ),
        )
    except (genai_errors.APIError, httpx.HTTPError) as exc:
        logger.error("Gemini request failed: %s", exc)
        raise ApiError(502, "Failed to generate text with AI") from exc

    if not response.text:
        raise ApiError(502, "AI service returned an empty response")
    return response.text.strip()


async def paraphrase_text(text: str, tone: str = "neutral", complexity: str = "maintain") -> str:
    prompt = (
        f"Paraphrase the following text with a {tone} tone and {complexity} complexity.\n"
        f"Only respond with the paraphrased text, nothing else.\n\nText: \"{text}\""
    )
    return await generate_text(prompt, max_output_tokens=2048, temperature=0.7)


async def summarize_text(text: str, format: str = "paragraph", length: int = 3) -> str:
    size = SUMMARY_LENGTHS[min(5, max(1, length))]
    prompt = (
        f"Please provide {size} of the following text in {format} format.\n"
        f"Only respond with the summary, nothing else.\n\nText: \"{text}\""
    )
    # lower temperature keeps summaries focused
    return await generate_text(prompt, max_output_tokens=1024, temperature=0.3)


def parse_key_points(result: str) -> list[str]:
    """Turn a bulleted answer into a list of points."""
    points = []
    for line in result.splitlines():
        point = _BULLET.sub("", line).strip()
        if point:
            points.append(point)
    return points


async def extract_key_points(text: str, count: int = 5) -> list[str]:
    prompt = (
        f"Extract {count} key points from the following text. "
        f"Return each point on a new line with a bullet point (-).\n\nText: \"{text}\""
    )
    result = await generate_text(prompt, max_output_tokens=1024, temperature=0.2)
    return parse_key_points(result)


async def change_tone(text: str, tone: str) -> str:
    prompt = (
        f"Rewrite the following text with a {tone} tone. "
        f"Only respond with the rewritten text, nothing else.\n\nText: \"{text}\""
    )
    return await generate_text(prompt, max_output_tokens=2048, temperature=0.7)
