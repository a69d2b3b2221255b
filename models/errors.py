"""Exception types shared by the relay, the relay client, and the conversation layer."""


class InferenceError(Exception):
    """Base class for failures along the inference path."""


class UnsupportedModel(InferenceError):
    """Raised when a request names a model outside the supported set."""

    def __init__(self, model: object = None) -> None:
        super().__init__("Unsupported model type")
        self.model = model


class UpstreamInferenceFailure(InferenceError):
    """Raised when the upstream provider call fails; keeps the provider message."""


class RelayCallFailed(InferenceError):
    """Raised by the relay client on any non-success call."""

    def __init__(self, message: str = "Failed to call inference relay") -> None:
        super().__init__(message)


class SpeechCaptureUnavailable(Exception):
    """Raised when voice input is requested but no speech facility exists."""

    def __init__(self, message: str = "Voice recognition not supported on this device.") -> None:
        super().__init__(message)


class SpeechCaptureError(Exception):
    """Raised by a recognizer when capture fails; carries a short error code."""

    def __init__(self, code: str, message: str | None = None) -> None:
        super().__init__(message or code)
        self.code = code


class RequestCancelled(InferenceError):
    """Raised when an outstanding request is cancelled by the user."""


class RequestTimedOut(InferenceError):
    """Raised when an outstanding request exceeds its time limit."""
