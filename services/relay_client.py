"""HTTP client used by the conversation layer to reach the inference relay."""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

import httpx
from dotenv import load_dotenv

from models.errors import RelayCallFailed
from models.inference import InferenceModel

LOGGER = logging.getLogger(__name__)

DEFAULT_RELAY_PATH = "/"
DEFAULT_TIMEOUT_SECONDS = 60.0


class RelayClient:
    """Send `{model, inputs}` to the relay and return the parsed JSON reply."""

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        path: str = DEFAULT_RELAY_PATH,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not base_url:
            raise ValueError("Relay base URL is required.")
        self.url = base_url.rstrip("/") + "/" + path.lstrip("/") if path else base_url
        self.token = token or ""
        self.timeout = timeout
        self._http = httpx.AsyncClient(timeout=timeout, transport=transport)

    @classmethod
    def from_env(cls, **kwargs: Any) -> "RelayClient":
        """Build a client from RELAY_BASE_URL, RELAY_TOKEN, RELAY_PATH and RELAY_TIMEOUT_SECONDS."""
        load_dotenv()
        base_url = os.getenv("RELAY_BASE_URL")
        if not base_url:
            raise RuntimeError("RELAY_BASE_URL environment variable is not set")
        timeout = float(os.getenv("RELAY_TIMEOUT_SECONDS") or DEFAULT_TIMEOUT_SECONDS)
        return cls(
            base_url,
            os.getenv("RELAY_TOKEN", ""),
            path=os.getenv("RELAY_PATH", DEFAULT_RELAY_PATH),
            timeout=timeout,
            **kwargs,
        )

    async def call(self, model: InferenceModel | str, inputs: Any) -> Any:
        """POST one inference request.

        Raises:
            RelayCallFailed: on any non-2xx status, transport error or timeout.
        """
        model_tag = model.value if isinstance(model, InferenceModel) else model
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.token}",
        }
        try:
            response = await self._http.post(self.url, json={"model": model_tag, "inputs": inputs}, headers=headers)
        except httpx.HTTPError as exc:
            LOGGER.error("Relay request for %s failed: %s", model_tag, exc)
            raise RelayCallFailed() from exc

        if not response.is_success:
            LOGGER.error("Relay returned HTTP %s for %s", response.status_code, model_tag)
            raise RelayCallFailed()

        try:
            return response.json()
        except ValueError as exc:
            LOGGER.error("Relay returned a non-JSON body for %s", model_tag)
            raise RelayCallFailed() from exc

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "RelayClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
