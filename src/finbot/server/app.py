"""Finbot completion endpoint.

Serves ``POST /api/gemini``: ``{"message": str}`` in, ``{"reply": str}`` out,
or ``{"error": str}`` with a non-2xx status. The persona is sent as the
system message here, so clients only ever send the raw user text.
"""

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..completion.models import CompletionFailure, CompletionReply, CompletionRequest
from ..llm import LLMProvider, create_llm_provider
from ..prompts import build_persona_messages

logger = logging.getLogger("finbot.server")

MESSAGE_REQUIRED = "Message is required."
UPSTREAM_FAILED = "Something went wrong talking to Gemini."


def _failure(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=CompletionFailure(error=error).model_dump())


def get_provider(request: Request) -> LLMProvider | None:
    """Return the app's model provider, creating it from the environment once.

    Environment variables:
        GEMINI_API_KEY: Gemini API key (required)
        GEMINI_MODEL: Gemini model (default: gemini-2.5-flash)
    """
    provider = getattr(request.app.state, "provider", None)
    if provider is not None:
        return provider

    api_key = os.getenv("GEMINI_API_KEY")
    if not api_key:
        logger.error("GEMINI_API_KEY not set; cannot answer completion requests")
        return None

    provider = create_llm_provider(
        "gemini",
        api_key=api_key,
        model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
    )
    request.app.state.provider = provider
    return provider


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    if app.state.provider is not None:
        await app.state.provider.close()


def create_app(provider: LLMProvider | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        provider: Model provider to answer with; None builds one from the
            environment on the first request
    """
    app = FastAPI(title="Finbot completion endpoint", lifespan=_lifespan)
    app.state.provider = provider

    # Allow CORS for all origins (the chat clients are local tools)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def _invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("Rejected malformed completion request: %s", exc.errors())
        return _failure(400, MESSAGE_REQUIRED)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/gemini", response_model=CompletionReply)
    async def complete(
        body: CompletionRequest,
        llm: LLMProvider | None = Depends(get_provider),
    ):
        message = body.message or ""
        if not message.strip():
            return _failure(400, MESSAGE_REQUIRED)

        if llm is None:
            return _failure(500, UPSTREAM_FAILED)

        logger.info("Completion request (%d chars)", len(message))
        try:
            response = await llm.chat_completion(build_persona_messages(message))
        except Exception:
            logger.exception("[GEMINI_API_ERROR]")
            return _failure(500, UPSTREAM_FAILED)

        if response.usage:
            logger.info("Completion used %d tokens", response.usage.get("total_tokens", 0))
        return CompletionReply(reply=response.content)

    return app


def run_server(host: str = "127.0.0.1", port: int = 8000, log_level: str = "info") -> None:
    """Run the endpoint with uvicorn (blocking)."""
    import uvicorn

    logging.basicConfig(
        level=log_level.upper(), format="%(asctime)s %(levelname)s %(name)s %(message)s"
    )
    uvicorn.run(create_app(), host=host, port=port, log_level=log_level.lower())
