"""Types and protocols for speech capture."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import AsyncIterator, Callable, List, Protocol


# --------- Types ---------
@dataclass(frozen=True)
class RecognitionResult:
    transcript: str
    """
    Best alternative for this segment.
    """
    is_final: bool = False
    """
    Whether the recognizer has committed this segment.
    """


@dataclass(frozen=True)
class RecognitionEvent:
    result_index: int
    """
    Index of the first result that changed since the previous event.
    """
    results: List[RecognitionResult] = field(default_factory=list)
    """
    Every result recognized since capture started.
    """


TranscriptCallback = Callable[[str, str], None]
ErrorCallback = Callable[[str], None]
EndCallback = Callable[[], None]


# --------- Protocols ---------
class SpeechRecognizer(Protocol):
    """
    A continuous speech-to-text facility.
    """
    lang: str
    interim_results: bool
    max_alternatives: int

    def results(self) -> AsyncIterator[RecognitionEvent]: ...
    """
    Start recognition and yield an event for every recognition update.
    Raising SpeechCaptureError ends capture with that error code.
    """
    def stop(self) -> None: ...
    """
    Ask the recognizer to finish; the results stream ends soon after.
    """


class SpeechCapture(Protocol):
    """
    Speech capability handed to the conversation controller.
    """
    available: bool

    async def run(self, on_transcript: TranscriptCallback, on_error: ErrorCallback, on_end: EndCallback) -> None: ...
    def stop(self) -> None: ...
