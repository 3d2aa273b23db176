# sage_insights/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from sage_insights.api.v1.insights import router as insights_router
from sage_insights.core.config import Settings, get_settings
from sage_insights.core.session import LoginRequired
from sage_insights.services.backend_client import BackendClient
from sage_insights.web.dashboard import ViewRegistry
from sage_insights.web.layout import get_templates
from sage_insights.web.pages import router as pages_router

logger = logging.getLogger("main")


def create_app(settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None) -> FastAPI:
    settings = settings or get_settings()

    # if no logging configured upstream, log to console
    if not logging.getLogger().handlers:
        logging.basicConfig(level=settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = BackendClient(settings.BACKEND_BASE_URL, transport=transport)
        app.state.registry = ViewRegistry(client, settings)
        logger.info("backend client ready: %s", settings.BACKEND_BASE_URL)
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(title="Sage AI Insights", lifespan=lifespan)
    app.state.templates = get_templates()
    app.dependency_overrides[get_settings] = lambda: settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(LoginRequired)
    async def redirect_to_login(request: Request, exc: LoginRequired):
        return RedirectResponse(settings.LOGIN_PATH, status_code=303)

    @app.get("/")
    def read_root():
        return RedirectResponse(settings.DASHBOARD_PATH, status_code=303)

    # Register routers
    app.include_router(pages_router)
    app.include_router(insights_router, prefix="/api/v1")
    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run("sage_insights.main:app", host=settings.APP_HOST, port=settings.APP_PORT)
