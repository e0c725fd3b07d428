"""Text-to-speech adapter backed by Google Cloud Text-to-Speech."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass

from google.cloud import texttospeech

from .stt import SpeechError

LOGGER = logging.getLogger(__name__)

DEFAULT_VOICE = {"languageCode": "en-US", "name": "en-US-Neural2-F", "ssmlGender": "FEMALE"}

LANGUAGE_VOICE_MAP = {
    "en": {"languageCode": "en-IN", "name": "en-IN-Neural2-D", "ssmlGender": "FEMALE"},
    "hi": {"languageCode": "hi-IN", "name": "hi-IN-Wavenet-A", "ssmlGender": "FEMALE"},
    "bn": {"languageCode": "bn-IN", "name": "bn-IN-Wavenet-A", "ssmlGender": "FEMALE"},
}


@dataclass(slots=True)
class SynthesizedSpeech:
    audio_base64: str
    mime_type: str
    voice: dict[str, str]


def resolve_voice(language: str | None) -> dict[str, str]:
    return dict(LANGUAGE_VOICE_MAP.get((language or "").lower(), DEFAULT_VOICE))


class VoiceSynthesizer:
    """Wraps ``TextToSpeechAsyncClient.synthesize_speech`` returning base64 MP3."""

    def __init__(self, client: texttospeech.TextToSpeechAsyncClient | None = None) -> None:
        self._client = client

    def _get_client(self) -> texttospeech.TextToSpeechAsyncClient:
        if self._client is None:
            self._client = texttospeech.TextToSpeechAsyncClient()
        return self._client

    async def synthesize(
        self,
        text: str,
        *,
        language: str = "en",
        speaking_rate: float = 0.95,
        pitch: float = -2.0,
    ) -> SynthesizedSpeech:
        if not text or not text.strip():
            raise SpeechError("Text is required for TTS synthesis.")

        voice = resolve_voice(language)
        try:
            response = await self._get_client().synthesize_speech(
                input=texttospeech.SynthesisInput(text=text.strip()),
                voice=texttospeech.VoiceSelectionParams(
                    language_code=voice["languageCode"],
                    name=voice["name"],
                    ssml_gender=texttospeech.SsmlVoiceGender[voice["ssmlGender"]],
                ),
                audio_config=texttospeech.AudioConfig(
                    audio_encoding=texttospeech.AudioEncoding.MP3,
                    speaking_rate=speaking_rate,
                    pitch=pitch,
                    effects_profile_id=["handset-class-device"],
                ),
            )
        except Exception as exc:
            LOGGER.warning("[tts] Synthesis failed: %s", exc, exc_info=True)
            raise SpeechError(f"Text-to-Speech failed: {exc}") from exc

        if not response.audio_content:
            raise SpeechError("Text-to-Speech returned empty audio content.")
        return SynthesizedSpeech(
            audio_base64=base64.b64encode(response.audio_content).decode("ascii"),
            mime_type="audio/mpeg",
            voice=voice,
        )


__all__ = ["DEFAULT_VOICE", "LANGUAGE_VOICE_MAP", "SynthesizedSpeech", "VoiceSynthesizer", "resolve_voice"]
