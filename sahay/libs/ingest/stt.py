"""Speech-to-text adapter backed by Google Cloud Speech."""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass, field
from typing import Any

from google.cloud import speech

LOGGER = logging.getLogger(__name__)

DEFAULT_LANGUAGE_CODE = "en-US"
DEFAULT_MIME_TYPE = "audio/webm"

MIME_TYPE_TO_ENCODING = {
    "audio/webm": "WEBM_OPUS",
    "audio/webm;codecs=opus": "WEBM_OPUS",
    "audio/ogg": "OGG_OPUS",
    "audio/ogg;codecs=opus": "OGG_OPUS",
    "audio/mpeg": "MP3",
    "audio/wav": "LINEAR16",
    "audio/x-wav": "LINEAR16",
    # No MP4 encoding in the v1 API; let the service sniff the container.
    "audio/mp4": "ENCODING_UNSPECIFIED",
}


class SpeechError(RuntimeError):
    """Raised when speech recognition or synthesis fails."""


@dataclass(slots=True)
class Transcription:
    transcript: str
    confidence: float
    language_code: str
    words: list[dict[str, Any]] = field(default_factory=list)


def strip_data_url(payload: str) -> str:
    """Drop a ``data:<mime>;base64,`` prefix if the client sent one."""

    if payload.startswith("data:") and "," in payload:
        return payload.split(",", 1)[1]
    return payload


def resolve_encoding(mime_type: str | None) -> str:
    key = (mime_type or DEFAULT_MIME_TYPE).replace(" ", "").lower()
    return MIME_TYPE_TO_ENCODING.get(key, "WEBM_OPUS")


class SpeechTranscriber:
    """Wraps ``SpeechAsyncClient.recognize`` for short base64 clips."""

    def __init__(self, client: speech.SpeechAsyncClient | None = None) -> None:
        self._client = client

    def _get_client(self) -> speech.SpeechAsyncClient:
        if self._client is None:
            self._client = speech.SpeechAsyncClient()
        return self._client

    async def transcribe(
        self,
        audio_base64: str,
        *,
        mime_type: str = DEFAULT_MIME_TYPE,
        language_code: str = DEFAULT_LANGUAGE_CODE,
        diarization: bool = False,
    ) -> Transcription:
        if not audio_base64:
            raise SpeechError("audioBase64 payload is required")
        try:
            content = base64.b64decode(strip_data_url(audio_base64), validate=False)
        except (binascii.Error, ValueError) as exc:
            raise SpeechError(f"audio payload is not valid base64: {exc}") from exc

        encoding = getattr(
            speech.RecognitionConfig.AudioEncoding,
            resolve_encoding(mime_type),
            speech.RecognitionConfig.AudioEncoding.WEBM_OPUS,
        )
        config = speech.RecognitionConfig(
            encoding=encoding,
            language_code=language_code,
            enable_automatic_punctuation=True,
            enable_word_time_offsets=True,
            audio_channel_count=1,
            model="latest_long",
        )
        if diarization:
            config.diarization_config = speech.SpeakerDiarizationConfig(
                enable_speaker_diarization=True,
                min_speaker_count=1,
                max_speaker_count=2,
            )

        try:
            response = await self._get_client().recognize(
                config=config, audio=speech.RecognitionAudio(content=content)
            )
        except Exception as exc:
            LOGGER.warning("[stt] Speech recognition failed: %s", exc, exc_info=True)
            raise SpeechError(f"Speech recognition failed: {exc}") from exc

        if not response.results:
            return Transcription(transcript="", confidence=0.0, language_code=language_code)

        first = response.results[0]
        if not first.alternatives:
            return Transcription(transcript="", confidence=0.0, language_code=language_code)
        alternative = first.alternatives[0]
        words = [
            {
                "word": word.word,
                "startTime": word.start_time.total_seconds(),
                "endTime": word.end_time.total_seconds(),
                "speakerTag": word.speaker_tag or None,
            }
            for word in alternative.words
        ]
        return Transcription(
            transcript=(alternative.transcript or "").strip(),
            confidence=float(alternative.confidence or 0.0),
            language_code=first.language_code or language_code,
            words=words,
        )


__all__ = [
    "DEFAULT_LANGUAGE_CODE",
    "MIME_TYPE_TO_ENCODING",
    "SpeechError",
    "SpeechTranscriber",
    "Transcription",
    "resolve_encoding",
    "strip_data_url",
]
