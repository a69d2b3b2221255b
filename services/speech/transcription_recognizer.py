"""Speech recognizer that transcribes recorded audio chunks with OpenAI."""

from __future__ import annotations

import io
import logging
from typing import AsyncIterable, AsyncIterator, List

from openai import AsyncOpenAI

from models.errors import SpeechCaptureError
from services.speech.contracts import RecognitionEvent, RecognitionResult

LOGGER = logging.getLogger(__name__)

TRANSCRIBE_MODEL = "whisper-1"

AUDIO_SUFFIXES = {
	"audio/webm": "webm",
	"audio/wav": "wav",
	"audio/x-wav": "wav",
	"audio/mpeg": "mp3",
	"audio/mp4": "mp4",
	"audio/ogg": "ogg",
	"audio/flac": "flac",
}


def _filename_for_mime(mime_type: str) -> str:
	"""Return an upload filename whose extension names the audio format."""
	mime = (mime_type or "").lower().split(";", 1)[0].strip()
	suffix = AUDIO_SUFFIXES.get(mime)
	if suffix is None:
		raise ValueError(f"Unsupported audio MIME type: '{mime_type}'")
	return f"speech.{suffix}"


class TranscriptionRecognizer:
	"""Turn a stream of recorded utterances into final recognition results.

	Each audio chunk is one utterance; it is transcribed as a whole and
	reported as a single committed segment.
	"""

	def __init__(self, client: AsyncOpenAI, chunks: AsyncIterable[bytes], mime_type: str = "audio/webm") -> None:
		if client is None:
			raise ValueError("AsyncOpenAI client is required.")
		self.client = client
		self.chunks = chunks
		self.filename = _filename_for_mime(mime_type)
		self.lang = "en-US"
		self.interim_results = False
		self.max_alternatives = 1
		self._stopped = False

	async def results(self) -> AsyncIterator[RecognitionEvent]:
		self._stopped = False
		results: List[RecognitionResult] = []
		async for chunk in self.chunks:
			if self._stopped:
				break
			if not chunk:
				continue
			text = await self._transcribe(chunk)
			if not text:
				continue
			results.append(RecognitionResult(transcript=text, is_final=True))
			# Re-send every committed segment so consumers see the whole dictation.
			yield RecognitionEvent(result_index=0, results=list(results))
		if not results and not self._stopped:
			raise SpeechCaptureError("no-speech")

	def stop(self) -> None:
		self._stopped = True

	async def _transcribe(self, audio_bytes: bytes) -> str:
		audio_file = io.BytesIO(audio_bytes)
		audio_file.name = self.filename
		try:
			response = await self.client.audio.transcriptions.create(
				model=TRANSCRIBE_MODEL,
				file=audio_file,
				language=self.lang.split("-", 1)[0],
				response_format="text",
			)
		except Exception as exc:
			LOGGER.error("OpenAI transcription request failed: %s", exc)
			raise SpeechCaptureError("network", str(exc)) from exc
		return (response if isinstance(response, str) else getattr(response, "text", "") or "").strip()
