"""
Ad Space Resolver - FastAPI Backend
Public QR code / ad space view and redirect endpoints.
"""

import logging
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from config import settings
from database import engine, Base
import models  # noqa: F401
from routers import (
    health,
    view,
    redirect,
    ad_spaces,
)
from services.diagnostics import install_diagnostics, new_request_id, request_id_var

logging.basicConfig(level=settings.LOG_LEVEL.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
install_diagnostics(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup
    print("🚀 Starting Ad Space Resolver API...")
    if settings.AUTO_CREATE_DB_SCHEMA:
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            print("🗄️ Database schema verified.")
        except Exception as e:
            print(f"⚠️ Database bootstrap skipped: {e}")
    if not settings.STORAGE_PUBLIC_BASE_URL:
        print("⚠️ STORAGE_PUBLIC_BASE_URL not set; stored creative paths will be ignored.")
    yield
    # Shutdown
    await engine.dispose()
    print("👋 Shutting down API...")


app = FastAPI(
    title="Ad Space Resolver API",
    description="Resolve scanned QR codes and ad space links to creatives and redirects",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def bind_request_id(request: Request, call_next):
    """Tag log records with a request id so the debug panel can filter them."""
    request_id = new_request_id(request.headers.get("x-request-id"))
    token = request_id_var.set(request_id)
    try:
        response = await call_next(request)
    finally:
        request_id_var.reset(token)
    response.headers["X-Request-ID"] = request_id
    return response


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(view.router, tags=["View"])
app.include_router(redirect.router, tags=["Redirect"])
app.include_router(ad_spaces.router, tags=["Ad Spaces"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Ad Space Resolver API",
        "version": "0.1.0",
        "status": "running"
    }


def run():
    """Serve the API with uvicorn on API_HOST:API_PORT."""
    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
