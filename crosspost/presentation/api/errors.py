import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError as RequestBodyError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from ...domain.errors import AuthenticationError, CrosspostError

logger = structlog.get_logger()


def error_body(code: str, message: str) -> dict:
    return {"error": code, "message": message}


def register_exception_handlers(app: FastAPI) -> None:
    """Render domain and framework errors as ``{error, message}`` responses."""

    @app.exception_handler(CrosspostError)
    async def crosspost_error_handler(request: Request, exc: CrosspostError) -> JSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "Request failed",
            error_code=exc.code,
            error=exc.message,
            status_code=exc.status_code,
        )
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.code, exc.message),
            headers=headers,
        )

    @app.exception_handler(RequestBodyError)
    async def request_body_error_handler(request: Request, exc: RequestBodyError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else "Malformed request body"
        logger.warning("Request body rejected", error=message)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body("invalid_request", message),
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error("Database error", error=str(exc), error_type=type(exc).__name__)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body("database_error", "A database error occurred"),
        )
