import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException
from pymongo.errors import ConnectionFailure, PyMongoError

from app.core.exceptions import BadRequestError, BikeShareError, DatabaseUnavailableError
from app.core.logging import get_logger
from app.schemas.response import ErrorResponse
from app.core.config import settings

logger = get_logger(__name__)

def add_exception_handlers(app: FastAPI):
    """
    Registers exception handlers with the FastAPI app.
    """
    @app.exception_handler(BikeShareError)
    async def bikeshare_exception_handler(request: Request, exc: BikeShareError):
        """
        Renders API errors. Store outages are logged as errors, the rest at info.
        """
        level = logging.ERROR if exc.status_code >= 500 else logging.INFO
        logger.log(
            level,
            f"{exc.code}: {exc.message}",
            extra={"method": request.method, "path": request.url.path}
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=exc.message,
                code=exc.code,
                details=exc.details
            ).model_dump()
        )

    @app.exception_handler(PyMongoError)
    async def store_exception_handler(request: Request, exc: PyMongoError):
        """
        Driver errors that escaped store_errors(): outages are a 500, anything else a 400.
        """
        logger.error(
            f"Untranslated MongoDB error: {exc}",
            extra={"method": request.method, "path": request.url.path}
        )
        error = DatabaseUnavailableError() if isinstance(exc, ConnectionFailure) else BadRequestError()
        return JSONResponse(
            status_code=error.status_code,
            content=ErrorResponse(
                error=error.message,
                code=error.code,
                details=None
            ).model_dump()
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """
        Handles standard HTTP exceptions (unknown routes, wrong methods)
        """
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=str(exc.detail),
                code="HTTP_ERROR",
                details=None
            ).model_dump()
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """
        Handles Pydantic validation errors. Malformed bodies are a 400.
        """
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(
                error="Input validation failed",
                code="VALIDATION_ERROR",
                details=jsonable_encoder(exc.errors())
            ).model_dump()
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all for unhandled exceptions.
        """
        logger.error(
            f"Unhandled exception: {str(exc)}",
            extra={
                "method": request.method,
                "path": request.url.path,
            },
            exc_info=True
        )

        message = "An internal error occurred. Please try again later." if settings.is_production else str(exc)

        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error=message,
                code="INTERNAL_ERROR",
                details=None
            ).model_dump()
        )
