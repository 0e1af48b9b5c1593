import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from riftforge.api import cards_router, decks_router, health_router
from riftforge.config import settings
from riftforge.db.database import dispose_db, init_db
from riftforge.models.failure import (
    ClassifiedError,
    FailureKind,
    KnownError,
    create_failure,
    create_unknown_failure,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    await init_db()
    yield
    await dispose_db()


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("riftforge"),
    lifespan=lifespan,
)

app.include_router(cards_router)
app.include_router(decks_router)
app.include_router(health_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ClassifiedError)
async def classified_error_handler(_request: Request, exc: ClassifiedError) -> JSONResponse:
    """Deck rule refusals and known failures keep their own status code."""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_failure(exc).model_dump(mode="json"),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed requests get the invalid_input envelope instead of a bare detail list."""
    problems = "; ".join(
        f"{'.'.join(str(part) for part in problem['loc'])}: {problem['msg']}"
        for problem in exc.errors()
    )
    error = KnownError(kind=FailureKind.INVALID_INPUT, detail=problems, status_code=422)
    return JSONResponse(
        status_code=error.status_code,
        content=create_failure(error).model_dump(mode="json"),
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Anything unclassified becomes an explained unknown_failure, never a raw 500."""
    logger.exception("Unhandled error: %s", exc)
    return JSONResponse(
        status_code=500,
        content=create_unknown_failure(exc).model_dump(mode="json"),
    )
