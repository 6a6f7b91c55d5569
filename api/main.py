import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from accounts import router as accounts_router
from assets import router as assets_router
from content import router as content_router
from core import directus
from core.cache import InMemoryCache
from site_settings import router as site_settings_router


def _configure_logging() -> None:
    level = os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", "").strip()
    if not raw:
        return ["http://localhost:4321", "http://127.0.0.1:4321"]
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Open the content-store client once per process.
    await directus.init_client()
    try:
        yield
    finally:
        await directus.close_client()


_configure_logging()

app = FastAPI(lifespan=lifespan)
app.state.cache = InMemoryCache()

# Allow the site frontend to call this API from the browser.
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(content_router.router, tags=["content"])
app.include_router(site_settings_router.router, tags=["site-settings"])
app.include_router(accounts_router.router, tags=["accounts"])
app.include_router(assets_router.router, tags=["assets"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
