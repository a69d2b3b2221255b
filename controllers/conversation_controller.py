"""Client-side conversation state and the user actions that drive it."""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime
from typing import Any, Callable, Iterable, List, Optional, Sequence

from models.conversation import Message, UploadedFile
from models.errors import RequestCancelled, SpeechCaptureUnavailable
from models.inference import InferenceModel
from services.conversation.message_log import ConversationLog, SeedEntry
from services.conversation.pending import PendingRequests
from services.relay_client import DEFAULT_TIMEOUT_SECONDS, RelayClient
from services.speech.capture_adapter import UnavailableSpeechCapture
from services.speech.contracts import SpeechCapture
from utils.media_validation import is_image_media_type, read_as_data_url

LOGGER = logging.getLogger(__name__)

FALLBACK_REPLY = "I couldn't generate a response. Please try again."
APOLOGY_REPLY = "I apologize, but I encountered an error while processing your request. Please try again."
IMAGE_FAILURE_REPLY = "I apologize, but I couldn't analyze that image. Please try again."
CANCELLED_REPLY = "Request cancelled."

Listener = Callable[["ConversationController"], None]


def _generated_text(response: Any) -> Optional[str]:
	if isinstance(response, dict):
		text = response.get("generated_text")
		if isinstance(text, str) and text:
			return text
	return None


class ConversationController:
	"""Own the message log and turn user input into relay calls.

	Text sends and image uploads may overlap; each settles on its own and
	appends its reply whenever it finishes.
	"""

	def __init__(
		self,
		relay: RelayClient,
		*,
		speech: Optional[SpeechCapture] = None,
		notify: Optional[Callable[[str], None]] = None,
		timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
		seed: Optional[Iterable[SeedEntry]] = None,
		clock: Callable[[], datetime] = datetime.now,
	) -> None:
		if relay is None:
			raise ValueError("A relay client is required.")
		self.relay = relay
		self.speech: SpeechCapture = speech or UnavailableSpeechCapture()
		self.notify = notify or (lambda text: LOGGER.warning("%s", text))
		self.timeout = timeout
		self.log = ConversationLog(seed=seed, clock=clock)
		self.pending = PendingRequests()
		self.input_text = ""
		self.is_recording = False
		self._sends_in_flight = 0
		self._capture_task: Optional[asyncio.Task] = None
		self._listeners: List[Listener] = []

	# ----- state -----

	@property
	def messages(self) -> Sequence[Message]:
		return self.log.messages

	@property
	def is_generating(self) -> bool:
		return self._sends_in_flight > 0

	@property
	def can_send(self) -> bool:
		"""Whether the submit affordance should be enabled."""
		return bool(self.input_text.strip()) and not self.is_generating

	@property
	def offers_feedback(self) -> bool:
		"""Whether thumbs up/down should be shown under the latest reply."""
		last = self.log.last
		return last is not None and not last.is_user

	def subscribe(self, listener: Listener) -> Callable[[], None]:
		"""Call `listener` after every state change; returns an unsubscribe function."""
		self._listeners.append(listener)

		def unsubscribe() -> None:
			if listener in self._listeners:
				self._listeners.remove(listener)

		return unsubscribe

	def set_input(self, text: str) -> None:
		self.input_text = text
		self._changed()

	# ----- text path -----

	async def handle_send(self, text: Optional[str] = None) -> Optional[Message]:
		"""Send the input buffer (or `text`) and append the assistant's reply.

		Returns the reply message, or None when there was nothing to send.
		"""
		if text is not None:
			self.input_text = text
		prompt = self.input_text
		if not prompt.strip():
			return None

		user_message = self._append(prompt, is_user=True)
		self.input_text = ""
		self._sends_in_flight += 1
		self._changed()

		try:
			response = await self.pending.run(
				user_message.id,
				self.relay.call(InferenceModel.TEXT_GENERATION, prompt),
				timeout=self.timeout,
			)
			reply = _generated_text(response) or FALLBACK_REPLY
		except RequestCancelled:
			reply = CANCELLED_REPLY
		except Exception as exc:
			LOGGER.error("Error generating response: %s", exc)
			reply = APOLOGY_REPLY
		finally:
			self._sends_in_flight -= 1
		return self._append(reply, is_user=False)

	# ----- upload path -----

	async def handle_file_upload(self, upload: Optional[UploadedFile]) -> Optional[Message]:
		"""Note an uploaded file in the thread and classify it when it is an image.

		Returns the assistant reply for images, None otherwise.
		"""
		if upload is None:
			return None
		if not is_image_media_type(upload.media_type):
			self._append(f"📎 Uploaded file: {upload.name}", is_user=True)
			return None

		note = self._append(f"📎 Analyzing image: {upload.name}", is_user=True)
		try:
			data_url = await read_as_data_url(upload)
			response = await self.pending.run(
				note.id,
				self.relay.call(InferenceModel.IMAGE_CLASSIFICATION, data_url),
				timeout=self.timeout,
			)
		except RequestCancelled:
			reply = CANCELLED_REPLY
		except Exception as exc:
			LOGGER.error("Error analyzing image %s: %s", upload.name, exc)
			reply = IMAGE_FAILURE_REPLY
		else:
			reply = f"I analyzed the image and found: {json.dumps(response, indent=2, ensure_ascii=False)}"
		return self._append(reply, is_user=False)

	# ----- cancellation -----

	def cancel(self, message_id: int) -> bool:
		"""Cancel the request started by the user message `message_id`."""
		return self.pending.cancel(message_id)

	def cancel_all(self) -> int:
		return self.pending.cancel_all()

	# ----- voice path -----

	def handle_voice_input(self) -> bool:
		"""Start speech capture; returns False when no speech facility exists.

		Must be called from a running event loop.
		"""
		if not self.speech.available:
			self.notify(str(SpeechCaptureUnavailable()))
			return False
		if self.is_recording:
			return True
		self._set_recording(True)
		self._capture_task = asyncio.get_running_loop().create_task(
			self.speech.run(self._on_transcript, self._on_speech_error, self._on_speech_end)
		)
		return True

	def stop_voice_input(self) -> None:
		if self.is_recording:
			self.speech.stop()

	async def wait_for_capture(self) -> None:
		"""Wait until the current capture, if any, has ended."""
		if self._capture_task is not None:
			await self._capture_task

	def _on_transcript(self, final: str, interim: str) -> None:
		self.set_input(final + interim)

	def _on_speech_error(self, code: str) -> None:
		LOGGER.error("Speech recognition error: %s", code)
		self._set_recording(False)

	def _on_speech_end(self) -> None:
		self._set_recording(False)

	# ----- helpers -----

	def _set_recording(self, value: bool) -> None:
		self.is_recording = value
		self._changed()

	def _append(self, text: str, *, is_user: bool) -> Message:
		message = self.log.append(text, is_user=is_user)
		self._changed()
		return message

	def _changed(self) -> None:
		for listener in list(self._listeners):
			listener(self)
