from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from cookbook.config import settings
from cookbook.core.exceptions import (
    ServiceError, Unauthenticated, Forbidden, NotFound, InvalidArgument, Conflict, TransientError
)
from cookbook.core.logging import setup_logging, get_logger
from cookbook.database import init_db
from cookbook.api import api_router

logger = get_logger(__name__)

# Most specific first; Conflict is a TransientError
ERROR_STATUS = [
    (Unauthenticated, status.HTTP_401_UNAUTHORIZED),
    (Forbidden, status.HTTP_403_FORBIDDEN),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (InvalidArgument, status.HTTP_400_BAD_REQUEST),
    (Conflict, status.HTTP_409_CONFLICT),
    (TransientError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def status_for(exc: ServiceError) -> int:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    setup_logging(settings.log_level, settings.log_format, is_development=settings.is_development)
    logger.info("Starting {} ({})", settings.app_name, settings.environment)
    await init_db()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down")


app = FastAPI(
    title=settings.app_name,
    description="Follows, reviews, likes and recipe rating aggregation",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    status_code = status_for(exc)
    headers = {"WWW-Authenticate": "Basic"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=status_code, content=exc.to_dict(), headers=headers)


# Include API routes
app.include_router(api_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
