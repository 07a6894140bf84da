import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware

from planty import __version__
from planty.api.main import api_router
from planty.api.middleware.authentication import ApiKeyMiddleware
from planty.api.routes import health
from planty.core.db import get_engine
from planty.core.security import CredentialManager
from planty.core.settings import settings, warn_if_default_secret
from planty.core.store import PlantStore
from planty.transports.sse import MessageEndpoint, SseEndpoint, StreamSessionRegistry

logger = logging.getLogger('uvicorn.error')

SSE_PATH = "/sse"
MESSAGE_PATH = "/message"


def _attach_store(app: FastAPI, store: PlantStore) -> None:
    app.state.store = store
    app.state.credentials = CredentialManager(store)


def create_app(store: PlantStore | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        if store is None:
            _attach_store(_app, PlantStore(get_engine()))
        _app.state.store.init_db()
        warn_if_default_secret(logger)
        logger.info(f"SSE endpoint: {SSE_PATH}")
        yield

    app = FastAPI(title="planty", version=__version__, lifespan=lifespan)
    app.state.sessions = StreamSessionRegistry(MESSAGE_PATH)
    if store is not None:
        _attach_store(app, store)

    # middlewares run in reverse order of registration, authentication is innermost
    app.add_middleware(
        ApiKeyMiddleware,
        exempt_paths={f"{settings.API_PREFIX}/generate-key", "/health"},
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if settings.RESTRICT_HOSTS:
        app.add_middleware(
            TrustedHostMiddleware, allowed_hosts=settings.TRUSTED_HOSTS,
        )

    app.include_router(health.router)
    app.include_router(api_router, prefix=settings.API_PREFIX)

    app.add_route(SSE_PATH, SseEndpoint(), methods=["GET"], include_in_schema=False)
    app.add_route(MESSAGE_PATH, MessageEndpoint(), methods=["POST"], include_in_schema=False)

    return app


app = create_app()
