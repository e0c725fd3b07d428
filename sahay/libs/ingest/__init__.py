"""Speech ingestion and synthesis adapters."""

from .stt import SpeechError, SpeechTranscriber, Transcription
from .tts import SynthesizedSpeech, VoiceSynthesizer

__all__ = ["SpeechError", "SpeechTranscriber", "SynthesizedSpeech", "Transcription", "VoiceSynthesizer"]
