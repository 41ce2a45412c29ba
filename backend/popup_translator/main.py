"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from popup_translator.config import settings, setup_logging
from popup_translator.api.v1.routes import provider, translation
from popup_translator.core.translation.pipeline import close_http_client

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    setup_logging()
    logger.info(
        "Starting %s: runtime=%s, model=%s",
        settings.app_name,
        settings.ollama_endpoint,
        settings.ollama_model,
    )
    yield
    # Shutdown: release pooled connections to the runtime
    await close_http_client()


app = FastAPI(
    title=settings.app_name,
    description="Japanese/English popup translation backed by a local Ollama runtime",
    version=VERSION,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(translation.router, prefix="/api/v1", tags=["translation"])
app.include_router(provider.router, prefix="/api/v1", tags=["provider"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Popup Translator API", "version": VERSION}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


def run() -> None:
    """Serve the API with uvicorn on the configured host and port."""
    uvicorn.run(
        "popup_translator.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
