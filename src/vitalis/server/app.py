"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from vitalis import __version__
from vitalis.agent.generator import ResponseGenerator
from vitalis.config.loader import load_env_file, load_persona
from vitalis.config.schema import VitalisConfig
from vitalis.llm.factory import create_chat_client, create_extraction_client
from vitalis.memory.context import ContextAssembler
from vitalis.memory.extractor import MemoryExtractor
from vitalis.memory.storage import MemoryStorage
from vitalis.server.routes import MISSING_FIELDS_ERROR, create_router

logger = logging.getLogger(__name__)


async def _http_error_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


async def _validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.debug("Rejected request body: %s", exc.errors())
    return JSONResponse(status_code=400, content={"error": MISSING_FIELDS_ERROR})


def install_error_handlers(app: FastAPI) -> None:
    """Render errors as ``{"error": ...}`` and malformed bodies as 400s."""
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]


def create_app(config: VitalisConfig) -> FastAPI:
    """Create and configure FastAPI application.

    Storage, model clients and the persona are built once here and shared
    by every request. API keys may come from a ``.env`` file in the working
    directory.

    Args:
        config: Vitalis configuration

    Returns:
        Configured FastAPI app
    """
    env_path = load_env_file()
    if env_path:
        logger.info("Loaded environment from %s", env_path)

    storage = MemoryStorage(config.memory.storage_path)
    persona = load_persona(config.persona.path)

    chat_llm = create_chat_client(config)
    extraction_llm = create_extraction_client(config)

    extractor = MemoryExtractor(llm=extraction_llm, storage=storage)
    generator = ResponseGenerator(
        llm=chat_llm,
        storage=storage,
        assembler=ContextAssembler(storage, history_limit=config.memory.history_limit),
        extractor=extractor,
        persona=persona,
        temperature=config.chat.temperature,
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        logger.info("Vitalis ready (chat model %s, persona %s)", chat_llm.model, persona.name)
        yield
        await extractor.drain(timeout=config.memory.drain_timeout)
        await chat_llm.close()
        if extraction_llm is not None:
            await extraction_llm.close()

    app = FastAPI(
        title="Vitalis",
        description="Memory-backed health chat backend",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)

    app.state.storage = storage
    app.state.extractor = extractor
    app.state.generator = generator

    app.include_router(create_router(storage, generator))

    return app
