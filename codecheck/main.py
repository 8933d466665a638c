# codecheck/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from codecheck.api.router import router
from codecheck.audit.browser import BrowserManager
from codecheck.config import Settings, get_settings
from codecheck.logger import configure_logging

logger = logging.getLogger(__name__)


# ---------------------------
# App factory
# ---------------------------
def create_app(settings: Optional[Settings] = None, browser: Optional[BrowserManager] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)
    browser = browser or BrowserManager(headless=settings.BROWSER_HEADLESS)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # the browser outlives every check run: launched once, closed once
        await browser.start()
        try:
            yield
        finally:
            await browser.stop()

    app = FastAPI(title="Repository Markup Checker", version=settings.APP_VERSION, lifespan=lifespan)
    app.state.browser = browser

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["POST"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


app = create_app()


# ---------------------------
# Run Uvicorn (local dev)
# ---------------------------
if __name__ == "__main__":
    import uvicorn

    uvicorn.run("codecheck.main:app", host="0.0.0.0", port=get_settings().PORT)
