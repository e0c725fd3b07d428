from datetime import timedelta
from types import SimpleNamespace

import pytest
from google.cloud import speech, texttospeech

from sahay.libs.ingest import SpeechError, SpeechTranscriber, VoiceSynthesizer
from sahay.libs.ingest.stt import resolve_encoding, strip_data_url
from sahay.libs.ingest.tts import DEFAULT_VOICE, resolve_voice


class FakeSpeechClient:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    async def recognize(self, *, config, audio):
        self.requests.append({"config": config, "audio": audio})
        if self.error:
            raise self.error
        return self.response


class FakeTTSClient:
    def __init__(self, audio=b"abc"):
        self.audio = audio
        self.requests = []

    async def synthesize_speech(self, **request):
        self.requests.append(request)
        return SimpleNamespace(audio_content=self.audio)


def _recognition(transcript=" hello there ", words=()):
    alternative = SimpleNamespace(transcript=transcript, confidence=0.83, words=list(words))
    return SimpleNamespace(results=[SimpleNamespace(alternatives=[alternative], language_code="hi-in")])


@pytest.mark.parametrize(
    "mime, encoding",
    [
        (None, "WEBM_OPUS"),
        ("audio/webm; codecs=opus", "WEBM_OPUS"),
        ("audio/OGG", "OGG_OPUS"),
        ("audio/mp4", "ENCODING_UNSPECIFIED"),
        ("audio/flac", "WEBM_OPUS"),
    ],
)
def test_resolve_encoding(mime, encoding):
    assert resolve_encoding(mime) == encoding


def test_strip_data_url():
    assert strip_data_url("data:audio/webm;base64,QUJD") == "QUJD"
    assert strip_data_url("QUJD") == "QUJD"


@pytest.mark.asyncio
async def test_transcribe_maps_words_and_config():
    words = [
        SimpleNamespace(word="hello", start_time=timedelta(0), end_time=timedelta(milliseconds=400), speaker_tag=1),
        SimpleNamespace(word="there", start_time=timedelta(milliseconds=400), end_time=timedelta(seconds=1), speaker_tag=0),
    ]
    client = FakeSpeechClient(_recognition(words=words))
    result = await SpeechTranscriber(client).transcribe(
        "data:audio/ogg;base64,QUJD", mime_type="audio/ogg", language_code="hi-IN", diarization=True
    )

    assert result.transcript == "hello there"
    assert result.confidence == 0.83
    assert result.language_code == "hi-in"
    assert result.words[0] == {"word": "hello", "startTime": 0.0, "endTime": 0.4, "speakerTag": 1}
    assert result.words[1]["speakerTag"] is None

    request = client.requests[0]
    assert request["config"].encoding == speech.RecognitionConfig.AudioEncoding.OGG_OPUS
    assert request["config"].diarization_config.enable_speaker_diarization is True
    assert request["audio"].content == b"ABC"


@pytest.mark.asyncio
async def test_transcribe_empty_results():
    result = await SpeechTranscriber(FakeSpeechClient(SimpleNamespace(results=[]))).transcribe("QUJD")
    assert (result.transcript, result.confidence, result.words) == ("", 0.0, [])


@pytest.mark.asyncio
async def test_transcribe_errors():
    with pytest.raises(SpeechError):
        await SpeechTranscriber(FakeSpeechClient()).transcribe("")
    with pytest.raises(SpeechError, match="Speech recognition failed"):
        await SpeechTranscriber(FakeSpeechClient(error=RuntimeError("quota"))).transcribe("QUJD")


def test_resolve_voice():
    assert resolve_voice("HI")["languageCode"] == "hi-IN"
    assert resolve_voice("fr") == DEFAULT_VOICE
    resolve_voice("fr")["name"] = "changed"
    assert DEFAULT_VOICE["name"] == "en-US-Neural2-F"


@pytest.mark.asyncio
async def test_synthesize_returns_base64_mp3():
    client = FakeTTSClient()
    speech_out = await VoiceSynthesizer(client).synthesize("  Breathe in  ", language="bn", speaking_rate=1.0)

    assert speech_out.audio_base64 == "YWJj"
    assert speech_out.mime_type == "audio/mpeg"
    assert speech_out.voice["languageCode"] == "bn-IN"

    request = client.requests[0]
    assert request["input"].text == "Breathe in"
    assert request["voice"].ssml_gender == texttospeech.SsmlVoiceGender.FEMALE
    assert request["audio_config"].speaking_rate == 1.0


@pytest.mark.asyncio
async def test_synthesize_rejects_empty_text_and_audio():
    with pytest.raises(SpeechError):
        await VoiceSynthesizer(FakeTTSClient()).synthesize("   ")
    with pytest.raises(SpeechError, match="empty audio"):
        await VoiceSynthesizer(FakeTTSClient(audio=b"")).synthesize("hello")
