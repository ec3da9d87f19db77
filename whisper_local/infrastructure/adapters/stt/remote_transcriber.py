"""
faster-whisper server HTTP client - multipart WAV upload + health check
"""

import asyncio
from typing import Optional

import httpx
import structlog

from whisper_local.core.exceptions import (
    RemoteServerError,
    RequestTimeoutError,
    TranscriptionError,
)
from whisper_local.infrastructure.adapters.functionality import with_timeout

logger = structlog.get_logger()

TRANSCRIPTIONS_PATH = "/v1/audio/transcriptions"
HEALTH_PATH = "/health"

TRANSCRIPTION_TIMEOUT = 60.0
HEALTH_TIMEOUT = 5.0


class RemoteTranscriber:
    """
    Stateless client for the OpenAI-compatible transcription endpoint.

    Every call opens its own httpx.AsyncClient, nothing is kept between calls.
    """

    def __init__(self, base_url: str,
                 request_timeout: float = TRANSCRIPTION_TIMEOUT,
                 health_timeout: float = HEALTH_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Args:
            base_url: Server base URL, e.g. http://localhost:8765
            request_timeout: Overall bound for one transcription request (s)
            health_timeout: Bound for one health check (s)
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.request_timeout = request_timeout
        self.health_timeout = health_timeout
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            transport=self._transport
        )

    async def transcribe_audio(self, audio: bytes, language: str,
                               word_timestamps: bool = False) -> str:
        """
        Send audio to the server and return the recognized text.

        Args:
            audio: WAV bytes
            language: Language code sent with the request
            word_timestamps: Ask the server for word-level timestamps

        Returns:
            The ``text`` field of the response, "" when missing

        Raises:
            RequestTimeoutError: Request exceeded request_timeout
            RemoteServerError: Non-success status or unreadable body
            TranscriptionError: Server could not be reached
        """
        logger.debug("whisper_transcribing",
                     size=len(audio),
                     language=language,
                     word_timestamps=word_timestamps)

        text = await with_timeout(
            self._post_transcription(audio, language, word_timestamps),
            self.request_timeout,
            name="transcription_request",
            error_class=RequestTimeoutError
        )

        logger.info("whisper_complete", text=text[:100], length=len(text))
        return text

    async def _post_transcription(self, audio: bytes, language: str,
                                  word_timestamps: bool) -> str:
        files = {"file": ("audio.wav", audio, "audio/wav")}
        data = {"language": language}
        if word_timestamps:
            data["response_format"] = "verbose_json"
            data["timestamp_granularities[]"] = "word"

        try:
            async with self._client(self.request_timeout) as client:
                response = await client.post(TRANSCRIPTIONS_PATH, files=files, data=data)
        except httpx.TimeoutException as e:
            raise RequestTimeoutError("transcription_request", self.request_timeout) from e
        except httpx.RequestError as e:
            logger.error("whisper_connection_error", error=str(e), url=self.base_url)
            raise TranscriptionError(f"Cannot connect to whisper server: {e}") from e

        if not response.is_success:
            logger.error("whisper_http_error",
                         status=response.status_code,
                         detail=response.text[:200])
            raise RemoteServerError(response.status_code, response.text)

        try:
            result = response.json()
        except ValueError:
            raise RemoteServerError(response.status_code,
                                    f"invalid JSON body: {response.text[:200]}")

        if not isinstance(result, dict):
            raise RemoteServerError(response.status_code,
                                    f"unexpected response: {response.text[:200]}")

        return result.get("text") or ""

    async def check_health(self) -> bool:
        """
        Query the health endpoint.

        Returns:
            True on any 2xx answer within health_timeout, False otherwise
        """
        try:
            async with self._client(self.health_timeout) as client:
                response = await asyncio.wait_for(
                    client.get(HEALTH_PATH),
                    timeout=self.health_timeout
                )
            return response.is_success
        except Exception:
            return False
