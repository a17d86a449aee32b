"""FastAPI application setup for AirPulse."""

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import router as api_router
from .config import settings
from .errors import GENERIC_ERROR_MESSAGE, ConfigurationError, InputValidationError
from utils.logging_utils import get_tagged_logger, setup_logging

setup_logging(level=settings.log_level, job_name="airpulse-api")
logger = get_tagged_logger(__name__, tag="airpulse/main")

app = FastAPI(title="AirPulse")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(InputValidationError)
async def handle_input_validation(request: Request, exc: InputValidationError):
    """Missing or malformed input: 400 with the reason."""
    logger.info("Rejected request to %s: %s", request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(ConfigurationError)
async def handle_configuration_error(request: Request, exc: ConfigurationError):
    """Missing API keys are reported explicitly, never degraded."""
    logger.error("Configuration error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def handle_unexpected(request: Request, exc: Exception):
    """Anything else: log everything, tell the caller nothing."""
    logger.error("Unhandled error on %s", request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": GENERIC_ERROR_MESSAGE},
    )


# API routes
app.include_router(api_router, prefix="/api")
