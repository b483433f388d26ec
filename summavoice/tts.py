# summavoice/tts.py
"""Speech synthesis: provider adapters, text chunking and concurrent chunk synthesis."""
import asyncio
import io
import logging
import re
from dataclasses import dataclass

import httpx
from gtts import gTTS, gTTSError

from summavoice import config
from summavoice.errors import ApiError
from summavoice.voices import AUDIO_FORMAT_CODES, CODECS, DEFAULTS, LANGUAGE_CODES

logger = logging.getLogger(__name__)

_SENTENCE_END = re.compile(r"(?<=[.!?;:])\s+")


@dataclass
class SpeechOptions:
    voice: str | None = None
    language: str | None = None
    speed: int = DEFAULTS["speed"]
    format: str = DEFAULTS["format"]
    codec: str = DEFAULTS["codec"]


@dataclass
class SpeechResult:
    audio: bytes
    language: str
    voice: str
    chunks: int


def chunk_text(text, max_chars=None):
    """
    Split text into segments of at most max_chars characters.
    Sentence boundaries are preferred, then whitespace; a single word longer
    than the limit is cut hard.
    """
    max_chars = max_chars or config.TTS_CHUNK_SIZE
    chunks = []
    current = ""

    def flush():
        nonlocal current
        if current.strip():
            chunks.append(current.strip())
        current = ""

    for sentence in _SENTENCE_END.split(text.strip()):
        sentence = " ".join(sentence.split())
        if not sentence:
            continue
        candidate = f"{current} {sentence}" if current else sentence
        if len(candidate) <= max_chars:
            current = candidate
            continue
        flush()
        if len(sentence) <= max_chars:
            current = sentence
            continue
        # sentence alone is too long: fall back to words
        for word in sentence.split(" "):
            while len(word) > max_chars:
                flush()
                chunks.append(word[:max_chars])
                word = word[max_chars:]
            candidate = f"{current} {word}" if current else word
            if len(candidate) <= max_chars:
                current = candidate
            else:
                flush()
                current = word
    flush()
    return chunks


def resolve_voice(voice=None, language=None):
    """
    Work out (language_code, voice_name) from the request.

    'en-us-linda' -> ('en-us', 'linda'); 'en-us' -> ('en-us', '');
    a bare voice name such as 'Linda' is paired with the requested language.
    """
    voice_to_use = voice or language or DEFAULTS["voice"]
    language_code = voice_to_use
    voice_name = ""

    parts = voice_to_use.split("-")
    if len(parts) >= 3:
        language_code = f"{parts[0]}-{parts[1]}"
        voice_name = "-".join(parts[2:])
    elif len(parts) == 1 and voice and language:
        language_code = language
        voice_name = voice

    language_code = language_code.lower()
    if language_code not in LANGUAGE_CODES:
        raise ApiError(400, f"Unsupported language code: {language_code}")
    return language_code, voice_name


class VoiceRSSProvider:
    """Client for the VoiceRSS HTTP API."""

    name = "voicerss"

    def __init__(self, api_key=None, api_url=None, timeout=None, transport=None):
        self.api_key = api_key if api_key is not None else config.VOICE_RSS_API_KEY
        self.api_url = api_url or config.VOICE_RSS_API_URL
        self.timeout = timeout or config.TTS_TIMEOUT_SECONDS
        self.transport = transport

    async def synthesize_chunk(self, text, language, voice_name, options: SpeechOptions) -> bytes:
        if not self.api_key:
            raise ApiError(500, "VoiceRSS API key is not configured")

        params = {
            "key": self.api_key,
            "src": text,
            "hl": language,
            "r": str(options.speed),
            "c": options.codec,
            "f": options.format,
        }
        if voice_name:
            params["v"] = voice_name.capitalize()

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.api_url,
                    data=params,
                    headers={"Accept": "audio/*"},
                )
        except httpx.HTTPError as exc:
            logger.error("VoiceRSS request failed: %s", exc)
            raise ApiError(502, f"Failed to generate speech: {exc}") from exc

        if response.status_code == 401:
            raise ApiError(502, "Failed to generate speech: Invalid or missing VoiceRSS API key")
        if response.status_code == 400:
            raise ApiError(502, "Failed to generate speech: Invalid request to VoiceRSS API")
        if response.status_code >= 400:
            raise ApiError(502, "Failed to generate speech: VoiceRSS API server error")

        # VoiceRSS answers 200 with a plain-text body on errors
        if response.content[:5] == b"ERROR":
            message = response.content.decode("utf-8", errors="replace").strip()
            logger.error("VoiceRSS API error: %s", message)
            raise ApiError(502, f"Failed to generate speech: VoiceRSS API error: {message}")

        return response.content


# gTTS speaks by language plus Google top-level domain for the accent
_GTTS_TLDS = {
    "en-gb": "co.uk",
    "en-au": "com.au",
    "en-ca": "ca",
    "en-in": "co.in",
    "en-ie": "ie",
    "fr-ca": "ca",
    "pt-br": "com.br",
    "pt-pt": "pt",
    "es-mx": "com.mx",
    "es-es": "es",
}
_GTTS_LANGS = {"zh-cn": "zh-CN", "zh-tw": "zh-TW", "zh-hk": "zh-TW", "he-il": "iw", "nb-no": "no"}


class GTTSProvider:
    """Google Translate TTS through gTTS; only produces MP3."""

    name = "gtts"

    def _synthesize(self, text, language, speed):
        lang = _GTTS_LANGS.get(language, language.split("-")[0])
        tts = gTTS(text, lang=lang, tld=_GTTS_TLDS.get(language, "com"), slow=speed < 0)
        buffer = io.BytesIO()
        tts.write_to_fp(buffer)
        return buffer.getvalue()

    async def synthesize_chunk(self, text, language, voice_name, options: SpeechOptions) -> bytes:
        if options.codec != "MP3":
            raise ApiError(400, "Google TTS only supports the MP3 codec")
        try:
            return await asyncio.to_thread(self._synthesize, text, language, options.speed)
        except (gTTSError, ValueError) as exc:
            logger.error("gTTS request failed: %s", exc)
            raise ApiError(502, f"Failed to generate speech: {exc}") from exc


def get_provider():
    if config.TTS_PROVIDER == "gtts":
        return GTTSProvider()
    return VoiceRSSProvider()


async def synthesize(text, options: SpeechOptions | None = None) -> SpeechResult:
    """
    Convert text of any length to one audio buffer.

    The text is chunked and every chunk is sent to the provider concurrently;
    buffers are joined in chunk order. A single failing chunk fails the call.
    """
    options = options or SpeechOptions()

    if not text or not isinstance(text, str) or not text.strip():
        raise ApiError(400, "Text is required and must be a non-empty string")
    if options.format not in AUDIO_FORMAT_CODES:
        raise ApiError(400, "Unsupported audio format")
    if options.codec not in CODECS:
        raise ApiError(400, f"Unsupported codec. Must be one of: {', '.join(CODECS)}")
    if options.speed < -10 or options.speed > 10:
        raise ApiError(400, "Speed must be between -10 and 10")

    language, voice_name = resolve_voice(options.voice, options.language)
    chunks = chunk_text(text)
    provider = get_provider()
    logger.info(
        "Synthesizing %d characters in %d chunk(s) with %s (%s %s)",
        len(text), len(chunks), provider.name, language, voice_name or "default voice",
    )

    buffers = await asyncio.gather(
        *(provider.synthesize_chunk(chunk, language, voice_name, options) for chunk in chunks)
    )
    return SpeechResult(audio=b"".join(buffers), language=language, voice=voice_name, chunks=len(chunks))
