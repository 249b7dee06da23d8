"""FastAPI application entrypoint. No business logic; only wiring, middleware and error handlers."""

import logging

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from lumasms.api.v1 import router as v1_router
from lumasms.core.config import settings
from lumasms.services.user_store import StoreUnavailable

logger = logging.getLogger(__name__)

app = FastAPI(
    title="LumaSMS Accounts API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "dev" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(v1_router, prefix=settings.API_V1_PREFIX)


@app.exception_handler(StoreUnavailable)
@app.exception_handler(SQLAlchemyError)
async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log store failures in full; the client only learns that something went wrong."""
    logger.exception(
        "Request failed with an internal error",
        exc_info=exc,
        extra={"path": request.url.path, "error": type(exc).__name__},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "LumaSMS Accounts API"}
