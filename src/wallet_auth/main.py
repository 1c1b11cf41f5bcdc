# src/wallet_auth/main.py
"""Main entry point for the wallet authentication service."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from wallet_auth.api.v1 import auth_router, system_router
from wallet_auth.core.errors import (
    AuthError,
    InternalError,
    ProtocolError,
    Unauthorized,
    ValidationError,
    ValidationErrorKind,
)
from wallet_auth.core.logging import configure_logging
from wallet_auth.core.settings import settings

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Sign in with an Ethereum wallet and receive a session token",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Include API routers
app.include_router(auth_router, prefix="/api")
app.include_router(system_router)


def _error_body(exc: AuthError) -> dict[str, str]:
    return {"error": exc.message, "code": exc.code}


@app.exception_handler(ValidationError)
async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=_error_body(exc))


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info("Unparseable request body for %s: %d errors", request.url.path, len(exc.errors()))
    error = ValidationError(ValidationErrorKind.MISSING_FIELDS)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=_error_body(error))


@app.exception_handler(ProtocolError)
async def handle_protocol_error(request: Request, exc: ProtocolError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content=_error_body(exc))


@app.exception_handler(Unauthorized)
async def handle_unauthorized(request: Request, exc: Unauthorized) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=_error_body(exc),
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(InternalError)
async def handle_internal_error(request: Request, exc: InternalError) -> JSONResponse:
    logger.error("Internal error serving %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "code": InternalError.code},
    )


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Wallet challenge-response authentication",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("wallet_auth.main:app", host="0.0.0.0", port=settings.port, reload=settings.debug)
