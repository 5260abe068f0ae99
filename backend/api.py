"""FastAPI entrypoint for the wallet HTTP endpoints."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any, AsyncIterator

from fastapi import APIRouter, Body, FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import JSONResponse
from fastapi.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.factory import build_rate_limiter, build_transaction_service
from backend.jobs.keep_alive import KeepAliveJob, build_keep_alive_scheduler
from backend.ratelimit import RATE_LIMITED_MESSAGE, RateLimiter, client_key_from_request
from backend.services.transaction_service import INTERNAL_ERROR_MESSAGE, TransactionService
from shared import config as _config
from shared.models import ToolError, ToolErrorCode


logger = logging.getLogger(__name__)


_STATUS_BY_ERROR_CODE = {
    ToolErrorCode.VALIDATION_ERROR: 400,
    ToolErrorCode.NOT_FOUND: 404,
    ToolErrorCode.BACKEND_ERROR: 500,
}


@lru_cache(maxsize=1)
def get_transaction_service() -> TransactionService:
    """Create and cache the transaction service once per process."""

    return build_transaction_service()


@lru_cache(maxsize=1)
def get_rate_limiter() -> RateLimiter:
    """Create and cache the rate limiter once per process."""

    return build_rate_limiter()


def _unwrap(result: Any) -> Any:
    if isinstance(result, ToolError):
        raise HTTPException(status_code=_STATUS_BY_ERROR_CODE[result.code], detail=result.message)
    return result


router = APIRouter(prefix="/api")


@router.get("/health")
def health() -> dict[str, str]:
    """Healthcheck endpoint."""

    return {"status": "ok"}


@router.post("/transactions", status_code=201)
def create_transaction(payload: dict[str, Any] = Body(...)) -> Any:
    transaction = _unwrap(get_transaction_service().create_transaction(payload))
    return jsonable_encoder(transaction)


@router.get("/transactions/summary/{user_id}")
def get_transactions_summary(user_id: str) -> Any:
    summary = _unwrap(get_transaction_service().transactions_summary(user_id))
    return jsonable_encoder(summary)


@router.get("/transactions/{user_id}")
def list_transactions(user_id: str) -> Any:
    transactions = _unwrap(get_transaction_service().list_transactions(user_id))
    return jsonable_encoder(transactions)


@router.delete("/transactions/{transaction_id}")
def delete_transaction(transaction_id: str) -> Any:
    result = _unwrap(get_transaction_service().delete_transaction(transaction_id))
    return jsonable_encoder(result, by_alias=True)


async def enforce_rate_limit(request: Request, call_next):
    """Reject over-limit clients before the request reaches any route."""

    client_key = client_key_from_request(request)
    outcome = await run_in_threadpool(get_rate_limiter().limit, client_key)

    if not outcome.success:
        logger.warning(
            "rate_limit_exceeded client_key=%s limit=%s path=%s",
            client_key,
            outcome.limit,
            request.url.path,
        )
        return JSONResponse(
            status_code=429,
            content={"message": RATE_LIMITED_MESSAGE},
            headers={
                "X-RateLimit-Limit": str(outcome.limit),
                "X-RateLimit-Remaining": str(outcome.remaining),
                "X-RateLimit-Reset": str(int(outcome.reset_at)),
            },
        )

    return await call_next(request)


async def log_http_requests(request: Request, call_next):
    """Log incoming requests and their HTTP status codes."""

    logger.info("http_request_received method=%s path=%s", request.method, request.url.path)
    response = await call_next(request)

    logger.info(
        "http_response_sent method=%s path=%s status_code=%s",
        request.method,
        request.url.path,
        response.status_code,
    )
    return response


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("request_validation_failed path=%s errors=%s", request.url.path, len(exc.errors()))
    return JSONResponse(status_code=400, content={"message": "Invalid request body"})


async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    """Return a JSON 500 response for unhandled exceptions."""

    logger.exception(
        "unhandled_exception method=%s path=%s exception_type=%s message=%s",
        request.method,
        request.url.path,
        type(exc).__name__,
        str(exc),
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"message": INTERNAL_ERROR_MESSAGE})


def create_app(
    *,
    enable_keep_alive: bool,
    keep_alive_url: str | None = None,
    keep_alive_cron: str | None = None,
) -> FastAPI:
    """Build the API; the keep-alive scheduler runs only with `enable_keep_alive`."""

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        scheduler = None
        if enable_keep_alive:
            job = KeepAliveJob(url=keep_alive_url or _config.keep_alive_url())
            scheduler = build_keep_alive_scheduler(job, keep_alive_cron or _config.keep_alive_cron())
            scheduler.start()
        try:
            yield
        finally:
            if scheduler is not None:
                scheduler.shutdown(wait=False)

    application = FastAPI(title="Wallet API", lifespan=lifespan)
    application.include_router(router)

    # Last registered middleware runs first: CORS, then logging, then rate limiting.
    application.middleware("http")(enforce_rate_limit)
    application.middleware("http")(log_http_requests)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=_config.cors_allow_origins(),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(StarletteHTTPException, handle_http_exception)
    application.add_exception_handler(RequestValidationError, handle_request_validation_error)
    application.add_exception_handler(Exception, handle_unexpected_exception)
    return application


app = create_app(enable_keep_alive=_config.keep_alive_enabled())
logger.info("keep_alive_enabled=%s app_env=%s", _config.keep_alive_enabled(), _config.app_env())
