"""Speech-to-text for dictated work logs and notes.

`SpeechToText` is the interface the session depends on;
`WhisperSpeechToText` implements it with the OpenAI transcription API.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from openai import OpenAI, OpenAIError

from ..errors import TranscriptionError

logger = logging.getLogger(__name__)

DEFAULT_AUDIO_NAME = "recording.webm"


@dataclass
class TranscriptionResult:
    """Represents the result of speech-to-text transcription."""

    text: str
    confidence: float | None = None


class SpeechToText:
    """Abstract STT interface."""

    def transcribe(self, audio_bytes: bytes, filename: str = DEFAULT_AUDIO_NAME) -> TranscriptionResult:
        """Transcribe audio to text."""
        raise NotImplementedError


class WhisperSpeechToText(SpeechToText):
    """Transcribe uploaded audio with OpenAI Whisper."""

    def __init__(self, client: Any | None = None, model: str = "whisper-1") -> None:
        self.client = client if client is not None else OpenAI()
        self.model = model

    def transcribe(self, audio_bytes: bytes, filename: str = DEFAULT_AUDIO_NAME) -> TranscriptionResult:
        """Send audio to the transcription endpoint.

        Raises:
            TranscriptionError: if the request fails or the transcript is empty.
        """
        if not audio_bytes:
            raise TranscriptionError("No audio file uploaded")
        name = filename or DEFAULT_AUDIO_NAME
        if "." not in name:
            name = f"{name}.webm"
        logger.info("Whisper: transcribing %s (%d bytes)", name, len(audio_bytes))
        try:
            response = self.client.audio.transcriptions.create(
                model=self.model,
                file=(name, audio_bytes),
            )
        except OpenAIError as e:
            logger.error("Whisper error: %s", e)
            raise TranscriptionError(str(e) or "Whisper transcription failed") from e
        text = (getattr(response, "text", "") or "").strip()
        if not text:
            raise TranscriptionError("Empty transcript from Whisper")
        return TranscriptionResult(text=text)
