import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gateway.api.chat import ErrorResponse, shutdown_chat_services
from gateway.api.llm_providers import ChatClientFactory
from gateway.config import settings
from gateway.middleware.auth import AuthenticationMiddleware
from gateway.routes import router as api_router
from gateway.services.database.base import BaseDatabaseManager
from gateway.validation import validate_configuration


def configure_logging() -> None:
    """Configure logging for the application."""
    # Set logging level from environment variable
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    # Configure root logger
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if settings.is_production:
        # In production, suppress HTTP request logs to reduce noise
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    else:
        logging.getLogger("uvicorn.access").setLevel(logging.INFO)

    # Provider SDKs log every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("anthropic").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured at {settings.LOG_LEVEL} level")
    logger.info(f"Environment: {settings.ENVIRONMENT}")


# Configure logging before creating the app
configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    validate_configuration(ChatClientFactory())
    logger.info(f"{settings.PROJECT_NAME} started")
    yield
    await shutdown_chat_services()
    BaseDatabaseManager.close_pool()
    logger.info(f"{settings.PROJECT_NAME} stopped")


app = FastAPI(
    title=settings.API_TITLE,
    version=settings.VERSION,
    description="Conversational gateway in front of OpenAI, Perplexity and Anthropic models",
    lifespan=lifespan,
)

# Set up CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_CREDENTIALS,
    allow_methods=settings.CORS_METHODS,
    allow_headers=settings.CORS_HEADERS,
)

# Add authentication middleware
app.add_middleware(AuthenticationMiddleware)

# Include API routes
app.include_router(api_router)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as 400 with the standard error body."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', '')}"
        for error in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(error="Invalid request", detail=details).model_dump(),
    )


@app.get("/")
async def root() -> Dict[str, str]:
    """Get basic API information."""
    return {"message": settings.API_TITLE}


@app.get("/health")
async def health_check() -> Dict[str, str]:
    """Check API health status."""
    return {"status": "healthy"}


def run() -> None:
    """Start the API server."""
    uvicorn.run(
        "gateway.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD and not settings.is_production,
    )


if __name__ == "__main__":
    run()
