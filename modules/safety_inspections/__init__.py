"""Factory safety inspections module entry point."""

from __future__ import annotations

from fastapi import FastAPI

__all__ = ["register_api"]


def register_api(app: FastAPI) -> None:
    """Register FastAPI routes and error handlers for safety inspections."""
    from .api import handle_safety_error, router
    from .exceptions import SafetyHubError

    if not any(getattr(r, "path", "").startswith("/api/inspections") for r in app.router.routes):
        app.include_router(router)
        app.add_exception_handler(SafetyHubError, handle_safety_error)
