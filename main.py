"""
Marketplace backend entry point.

Run locally with:
    python main.py
"""
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from database import check_connection
from dependencies import notification_dispatcher
from logging_config import get_logger, setup_logging
from routers import (
    likes_router,
    profiles_router,
    properties_router,
    register_error_handlers,
    requests_router,
)

setup_logging(config.LOG_LEVEL, config.LOG_FORMAT)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    notification_dispatcher.start()
    logger.info("Application started")
    yield
    notification_dispatcher.stop()
    logger.info("Application stopped")


# App instance
app = FastAPI(title="Property Marketplace API", lifespan=lifespan)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(profiles_router)
app.include_router(properties_router)
app.include_router(likes_router)
app.include_router(requests_router)


@app.get("/health")
def health():
    database_ok = check_connection()
    return {
        "status": "ok" if database_ok else "degraded",
        "database": database_ok,
        "pending_notifications": notification_dispatcher.pending(),
    }


# 404 Fallback Middleware
@app.middleware("http")
async def not_found_middleware(request: Request, call_next):
    try:
        response = await call_next(request)
        # Unmatched paths only; routed 404s already carry an error body
        if response.status_code == 404 and request.scope.get("route") is None:
            return JSONResponse(status_code=404, content={"error": "Route not found"})
        return response
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=config.PORT, reload=True)
