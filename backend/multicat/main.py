from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware
from contextlib import asynccontextmanager
from multicat.core.config import settings
from multicat.core.database import engine, Base
from multicat.core.logging_config import (
    setup_logging,
    setup_diagnostics,
    CorrelationIdMiddleware,
)
from multicat.api.endpoints import articles, categories
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
import multicat.models  # noqa: F401  (registers tables on Base.metadata)
import logging

# Configure structured JSON logging
setup_logging()
logger = logging.getLogger(__name__)

# Diagnostics handle, created once and shared through app.state
diagnostics = setup_diagnostics(settings.ENABLE_LOGGING, settings.DIAGNOSTICS_LOG_FILE)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.RATE_LIMIT_DEFAULT])


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting multicat application...")

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")

    if settings.ENABLE_LOGGING:
        logger.info("Diagnostic logging enabled")

    yield

    logger.info("Shutting down multicat application...")


app = FastAPI(
    title="Multicat - Multi-category content service",
    description="Additional categories for content items, with subtree-aware listings",
    version="1.0.0",
    lifespan=lifespan,
)
app.state.diagnostics = diagnostics

# Add correlation ID middleware (first, so all logs have correlation IDs)
app.add_middleware(CorrelationIdMiddleware)

# Add rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# Session cookie backs the pending-edit cache
app.add_middleware(SessionMiddleware, secret_key=settings.SECRET_KEY)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(articles.router, prefix="/api/articles", tags=["articles"])
app.include_router(categories.router, prefix="/api/categories", tags=["categories"])


@app.get("/")
def root():
    return {
        "name": "Multicat",
        "version": "1.0.0",
        "description": "Multi-category content service",
    }


@app.get("/health")
def health_check():
    return {"status": "healthy"}
