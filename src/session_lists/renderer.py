from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse

from .schemas import PageOut


# PUBLIC_INTERFACE
class ViewRenderer(ABC):
    """Turns a view name and its context into a response."""

    @abstractmethod
    def render(self, request: Request, view: str, *, status_code: int = status.HTTP_200_OK, **context: Any) -> Response:
        """Render view. Flash messages in the session are consumed by the render."""


class JSONViewRenderer(ViewRenderer):
    """
    Renders views as JSON documents (PageOut) for API clients and tests.
    """

    def render(self, request: Request, view: str, *, status_code: int = status.HTTP_200_OK, **context: Any) -> Response:
        session = request.state.session
        page = PageOut(
            view=view,
            error=session.pop("error", None),
            success=session.pop("success", None),
            **context,
        )
        return JSONResponse(status_code=status_code, content=page.model_dump(mode="json", exclude_none=True))


# PUBLIC_INTERFACE
def get_renderer(request: Request) -> ViewRenderer:
    """Dependency returning the renderer installed on the application."""
    return request.app.state.renderer
