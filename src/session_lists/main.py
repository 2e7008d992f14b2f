from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from .errors import InvalidIdentifier, NotFound
from .renderer import JSONViewRenderer, ViewRenderer
from .routers import lists as lists_router
from .sessions import SessionStore, get_session_store, session_middleware
from .settings import Settings, get_settings
from .utils import configure_logging

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "lists",
        "description": "Session-backed todo lists: create, rename, delete lists and manage their todos.",
    },
]


# PUBLIC_INTERFACE
def create_app(
    settings: Optional[Settings] = None,
    session_store: Optional[SessionStore] = None,
    renderer: Optional[ViewRenderer] = None,
) -> FastAPI:
    """
    Build the application with its session store and view renderer.

    Collaborators default to the ones selected by settings; tests may inject their own.
    """
    if settings is None:
        settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Session Todo Lists",
        description="Todo lists kept in the user's session, managed through form posts and redirects.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )
    app.state.settings = settings
    app.state.session_store = session_store if session_store is not None else get_session_store(settings)
    app.state.renderer = renderer if renderer is not None else JSONViewRenderer()

    app.middleware("http")(session_middleware(app.state.session_store, settings))

    # Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(NotFound)
    @app.exception_handler(InvalidIdentifier)
    async def lookup_exception_handler(request: Request, exc: NotFound | InvalidIdentifier) -> RedirectResponse:
        """
        Send the user back to the overview with the error kept for the next render.
        """
        logger.info("%s %s: %s", request.method, request.url.path, exc.message)
        request.state.session["error"] = exc.message
        return RedirectResponse(url="/lists", status_code=303)

    @app.get("/health", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {"message": "Healthy", "session_backend": settings.session_backend}

    app.include_router(lists_router.router)
    return app


app = create_app()
