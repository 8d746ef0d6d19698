from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from applytrack.routers import match
from applytrack.utils.logging_config import configure_for_environment, get_logger
from applytrack.middleware.error_handlers import (
    ExceptionHandlerMiddleware,
    RequestLoggingMiddleware,
    PerformanceMiddleware,
)

VERSION = "1.0.0"

# Configure logging first
configure_for_environment()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("ApplyTrack matching API starting up...")
    yield
    logger.info("ApplyTrack matching API shutting down...")


app = FastAPI(title="ApplyTrack Matching API", version=VERSION, lifespan=lifespan)

# Middleware added last runs first
app.add_middleware(ExceptionHandlerMiddleware)
app.add_middleware(PerformanceMiddleware, slow_request_threshold=2.0)
app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
@app.head("/")
async def root():
    return {"message": "Welcome to the ApplyTrack Matching API", "version": VERSION, "status": "ok"}


@app.get("/health")
@app.head("/health")
async def health_check():
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


app.include_router(match.router, prefix="/api/match", tags=["match"])

logger.info("ApplyTrack matching API initialized")
