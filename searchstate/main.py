"""ASGI entry point and app factory.

create_app() only wires things together: settings, logging, the cache
lifespan, the registry of search resources, error handlers, CORS and the v1
router. Settings are read when create_app() runs, so tests can adjust the
environment first.
"""

from collections.abc import Iterable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from searchstate.api.v1 import api_router
from searchstate.application.use_cases.search_session import (
    ResourceRegistry,
    SearchResource,
)
from searchstate.core.config import get_settings
from searchstate.core.exception_handlers import register_exception_handlers
from searchstate.core.lifespan import create_lifespan
from searchstate.shared.logging import setup_logging


def create_app(resources: Iterable[SearchResource] = ()) -> FastAPI:
    """Build the application.

    Args:
        resources: Listing routes whose declared defaults the search-state
            endpoints backfill, keyed by resource name.
    """
    settings = get_settings()
    setup_logging()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )
    app.state.search_resources = ResourceRegistry(resources)
    register_exception_handlers(app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router, prefix="/api/v1")
    return app


app = create_app()
