# quack_companion/main.py
import logging
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import chat, diagnostics, guidelines, notifications, session
from .core.config import Settings
from .core.middleware import ErrorHandlingMiddleware, quack_error_handler
from .services.assistant import AssistantService
from .services.auth import AuthService
from .services.guidelines import GuidelineService
from .services.notifications import NotificationCenter
from .services.quack import QuackClient
from .services.session import SessionStore
from .utils.errors import QuackError

logger = logging.getLogger(__name__)


def create_app(
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
) -> FastAPI:
    settings = settings or Settings()
    logging.basicConfig(level=settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Setup Services
        notifier = NotificationCenter()
        store = SessionStore(Path(settings.STATE_PATH) if settings.STATE_PATH else None)
        client = QuackClient(
            request_timeout=settings.REQUEST_TIMEOUT,
            stream_read_timeout=settings.STREAM_READ_TIMEOUT,
            parse_error_policy=settings.PARSE_ERROR_POLICY,
            notifier=notifier,
            transport=transport
        )
        auth_service = AuthService(settings, store, client, notifier)

        # Add to app state
        app.state.settings = settings
        app.state.session_id = str(uuid.uuid4())
        app.state.notifier = notifier
        app.state.session_store = store
        app.state.quack_client = client
        app.state.auth_service = auth_service
        app.state.guideline_service = GuidelineService(store, client, auth_service, notifier)
        app.state.assistant_service = AssistantService(store, client, auth_service)

        logger.info(f"Using {settings.PROJECT_NAME} version: {settings.VERSION}")
        logger.info(f"Session ID: {app.state.session_id}")

        # Safety checks
        await auth_service.prepare_api_access()

        yield

    app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION, lifespan=lifespan)

    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(QuackError, quack_error_handler)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "message": str(exc.detail),
                "issues": [str(exc.detail)] if isinstance(exc.detail, str) else exc.detail.get("issues", []),
                "code": exc.status_code
            }
        )

    # Include routers
    app.include_router(session.router, prefix=settings.API_V1_PREFIX)
    app.include_router(guidelines.router, prefix=settings.API_V1_PREFIX)
    app.include_router(chat.router, prefix=settings.API_V1_PREFIX)
    app.include_router(notifications.router, prefix=settings.API_V1_PREFIX)
    app.include_router(diagnostics.router, prefix=settings.API_V1_PREFIX)

    return app


app = create_app()
