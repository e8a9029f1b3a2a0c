"""API package exports."""

from taiko_webui.api.auth import router as auth_router
from taiko_webui.api.middleware import CorrelationIdMiddleware
from taiko_webui.api.routes import router

__all__ = ["auth_router", "router", "CorrelationIdMiddleware"]
