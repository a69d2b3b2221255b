"""Bridge a speech recognizer stream into transcript callbacks."""

from __future__ import annotations

import logging

from models.errors import SpeechCaptureError, SpeechCaptureUnavailable
from services.speech.contracts import (
	EndCallback,
	ErrorCallback,
	RecognitionEvent,
	SpeechRecognizer,
	TranscriptCallback,
)

LOGGER = logging.getLogger(__name__)

CAPTURE_LANG = "en-US"


def split_transcript(event: RecognitionEvent) -> tuple[str, str]:
	"""Return `(final, interim)` text for the results changed by `event`.

	Final segments are joined with a trailing space each; interim segments are
	concatenated as-is.
	"""
	final = ""
	interim = ""
	for result in event.results[event.result_index:]:
		if result.is_final:
			final += result.transcript + " "
		else:
			interim += result.transcript
	return final, interim


class SpeechCaptureAdapter:
	"""Run a recognizer and report transcripts, errors, and the end of capture."""

	available = True

	def __init__(self, recognizer: SpeechRecognizer) -> None:
		if recognizer is None:
			raise ValueError("A speech recognizer is required.")
		self.recognizer = recognizer
		self.recognizer.lang = CAPTURE_LANG
		self.recognizer.interim_results = True
		self.recognizer.max_alternatives = 1

	async def run(self, on_transcript: TranscriptCallback, on_error: ErrorCallback, on_end: EndCallback) -> None:
		"""Consume the recognizer until it ends; `on_end` always fires last."""
		try:
			async for event in self.recognizer.results():
				final, interim = split_transcript(event)
				on_transcript(final, interim)
		except SpeechCaptureError as exc:
			LOGGER.error("Speech recognition error %s", exc.code)
			on_error(exc.code)
		except Exception as exc:
			LOGGER.error("Speech recognition failed: %s", exc)
			on_error("unknown")
		finally:
			on_end()

	def stop(self) -> None:
		self.recognizer.stop()


class UnavailableSpeechCapture:
	"""Speech capability for environments without a recognizer."""

	available = False

	async def run(self, on_transcript: TranscriptCallback, on_error: ErrorCallback, on_end: EndCallback) -> None:
		raise SpeechCaptureUnavailable()

	def stop(self) -> None:
		pass
