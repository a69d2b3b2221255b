import inspect
import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from openai import AsyncOpenAI

from routes.inference_route import router as inference_router

load_dotenv()  # Load environment variables from .env file if present

LOGGER = logging.getLogger(__name__)


async def _close_client(client) -> None:
    """Close the OpenAI client if it exposes a close/aclose method."""
    aclose = getattr(client, "aclose", None) or getattr(client, "close", None)
    if aclose is None:
        return
    try:
        if inspect.iscoroutinefunction(aclose):
            await aclose()
        else:
            result = aclose()
            if inspect.isawaitable(result):
                await result
    except Exception as exc:
        LOGGER.warning("Error while closing the OpenAI client: %s", exc)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize the upstream OpenAI async client and
    attach it to `app.state`. A client injected through `create_app` is
    used as-is and left open on shutdown.
    """
    owns_client = getattr(app.state, "openai_client", None) is None
    if owns_client:
        if not os.getenv("OPENAI_API_KEY"):
            raise RuntimeError("OPENAI_API_KEY environment variable is not set")
        try:
            app.state.openai_client = AsyncOpenAI()
        except Exception as exc:
            raise RuntimeError("Failed to initialize OpenAI Async client") from exc

    try:
        yield
    finally:
        if owns_client:
            await _close_client(app.state.openai_client)
            app.state.openai_client = None


def create_app(openai_client: Optional[AsyncOpenAI] = None) -> FastAPI:
    """
    Create and configure the relay application.

    Args:
        openai_client: Optional pre-built client, mainly for tests.
    """
    app = FastAPI(lifespan=lifespan)
    app.state.openai_client = openai_client

    @app.get("/health")
    async def health(request: Request):
        """Simple health check that reports whether the upstream client is ready."""
        has_openai = getattr(request.app.state, "openai_client", None) is not None
        return {"ok": True, "openai_available": has_openai}

    app.include_router(inference_router)

    return app


app = create_app()
