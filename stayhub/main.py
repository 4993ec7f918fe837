from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stayhub.api.middleware.route_guard import RouteGuardMiddleware
from stayhub.api.routers import auth, me, peak_seasons, properties
from stayhub.shared.config import get_settings
from stayhub.shared.log_setup import configure_logging


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Stayhub API")
    app.add_middleware(RouteGuardMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.site_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(auth.router)
    app.include_router(me.router)
    app.include_router(peak_seasons.router)
    app.include_router(properties.router)
    return app


app = create_app()
