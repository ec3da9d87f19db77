"""Transcription session - buffers one utterance and flushes it on end"""

import asyncio
from typing import List, Optional

import structlog

from whisper_local.core.exceptions import SessionClosedError, TranscriptTimeoutError
from whisper_local.core.ports.i_stt_provider import ISTTSession, PartialCallback
from whisper_local.infrastructure.adapters.stt.remote_transcriber import RemoteTranscriber

logger = structlog.get_logger()

DEFAULT_WAIT_TIMEOUT = 30.0
END_POLL_INTERVAL = 0.1


class TranscriptionSession(ISTTSession):
    """
    Batch session: audio is collected until end_audio(), then sent once.

    Partial results are not produced; on_partial only stores the callback.
    """

    def __init__(self, transcriber: RemoteTranscriber, language: str,
                 word_timestamps: bool = False,
                 poll_interval: float = END_POLL_INTERVAL):
        self.transcriber = transcriber
        self.language = language
        self.word_timestamps = word_timestamps
        self.poll_interval = poll_interval

        self._chunks: List[bytes] = []
        self._ended = False
        self._partial_callback: Optional[PartialCallback] = None

    @property
    def ended(self) -> bool:
        return self._ended

    @property
    def buffered_bytes(self) -> int:
        return sum(len(chunk) for chunk in self._chunks)

    def send_audio(self, audio: bytes) -> None:
        """
        Append an audio chunk.

        Raises:
            SessionClosedError: end_audio() or close() was already called
        """
        if self._ended:
            raise SessionClosedError("Session ended, cannot send more audio")
        self._chunks.append(bytes(audio))

    def end_audio(self) -> None:
        self._ended = True

    def on_partial(self, callback: PartialCallback) -> None:
        # Batch transcription only, the callback is never invoked
        self._partial_callback = callback

    async def wait_for_transcript(self, timeout: float = DEFAULT_WAIT_TIMEOUT) -> str:
        """
        Wait for end_audio(), then transcribe everything buffered.

        The remote request has its own bound, independent of ``timeout``.

        Args:
            timeout: Seconds to wait for the audio stream to end

        Returns:
            Transcribed text

        Raises:
            TranscriptTimeoutError: Stream not ended within timeout; the
                session stays usable
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout

        while not self._ended and loop.time() < deadline:
            await asyncio.sleep(self.poll_interval)

        if not self._ended:
            logger.warning("transcript_wait_timeout", timeout=timeout)
            raise TranscriptTimeoutError("transcript_wait", timeout)

        audio = b"".join(self._chunks)
        return await self.transcriber.transcribe_audio(
            audio,
            self.language,
            word_timestamps=self.word_timestamps
        )

    async def close(self) -> None:
        self._ended = True
        self._chunks = []

    async def __aenter__(self) -> "TranscriptionSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
