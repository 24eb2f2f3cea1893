# api_server.py
from __future__ import annotations

import logging
import math
import re
from typing import Any, Dict, Literal, Optional

from fastapi import Depends, FastAPI, Header, Request, Response
from fastapi.exceptions import RequestValidationError as BodyValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import config
from guardrails import RequestValidationError, validate_math_input
from logging_utils import log_calculation, utc_timestamp
from math_parser import CalculationError, calculate
from rate_limit import FixedWindowRateLimiter, RateLimitDecision

logger = logging.getLogger(__name__)

AVAILABLE_ENDPOINTS = [
    "POST /api/v1/calculate",
    "GET /api/v1/health",
]

# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Math Calculator API",
    version="1.0.0",
    description="HTTP API for evaluating arithmetic expressions.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.server.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization", "X-API-Key"],
)

if not config.server.api_key:
    logger.warning("API_KEY is not set; the API is open (dev only).")


@app.middleware("http")
async def request_logger(request: Request, call_next):
    logger.info("%s %s", request.method, request.url.path)
    return await call_next(request)


# ---------------------------------------------------------------------------
# Error envelope
# ---------------------------------------------------------------------------


class ApiError(Exception):
    """Error rendered as {"success": false, "error": ..., "code": ...}."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.extra = extra or {}
        self.headers = headers


def _error_response(
    status_code: int,
    code: str,
    message: str,
    extra: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    content: Dict[str, Any] = {"success": False, "error": message, "code": code}
    if extra:
        content.update(extra)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


@app.exception_handler(ApiError)
async def _handle_api_error(request: Request, exc: ApiError):
    return _error_response(exc.status_code, exc.code, exc.message, exc.extra, exc.headers)


@app.exception_handler(StarletteHTTPException)
async def _handle_http_error(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return _error_response(
            404,
            "NOT_FOUND",
            "Endpoint not found",
            {"availableEndpoints": AVAILABLE_ENDPOINTS},
        )
    return _error_response(exc.status_code, "HTTP_ERROR", str(exc.detail))


@app.exception_handler(BodyValidationError)
async def _handle_body_error(request: Request, exc: BodyValidationError):
    return _error_response(400, "INVALID_REQUEST_BODY", "Request body must be a JSON object.")


@app.exception_handler(Exception)
async def _handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error: %s", exc)
    return _error_response(500, "INTERNAL_ERROR", "Internal server error")


# ---------------------------------------------------------------------------
# Dependencies: rate limiting & auth
# ---------------------------------------------------------------------------

api_limiter = FixedWindowRateLimiter(
    config.rate_limit.api_max_requests, config.rate_limit.api_window_seconds
)
calculation_limiter = FixedWindowRateLimiter(
    config.rate_limit.calculation_max_requests,
    config.rate_limit.calculation_window_seconds,
)


_BEARER_PREFIX = re.compile(r"^bearer\s+", re.IGNORECASE)


def _client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _rate_limit_headers(decision: RateLimitDecision) -> Dict[str, str]:
    return {
        "RateLimit-Limit": str(decision.limit),
        "RateLimit-Remaining": str(decision.remaining),
        "RateLimit-Reset": str(math.ceil(decision.reset_after)),
    }


def _enforce(
    limiter: FixedWindowRateLimiter,
    request: Request,
    response: Response,
    code: str,
    message: str,
    retry_after: str,
) -> None:
    if not config.rate_limit.enabled:
        return
    decision = limiter.hit(_client_key(request))
    headers = _rate_limit_headers(decision)
    if not decision.allowed:
        headers["Retry-After"] = headers["RateLimit-Reset"]
        raise ApiError(
            429,
            code,
            message,
            extra={"retryAfter": retry_after},
            headers=headers,
        )
    for name, value in headers.items():
        response.headers[name] = value


def enforce_api_rate_limit(request: Request, response: Response) -> None:
    _enforce(
        api_limiter,
        request,
        response,
        "RATE_LIMIT_EXCEEDED",
        "Too many requests from this IP, please try again later.",
        "15 minutes",
    )


def enforce_calculation_rate_limit(request: Request, response: Response) -> None:
    _enforce(
        calculation_limiter,
        request,
        response,
        "CALCULATION_RATE_LIMIT_EXCEEDED",
        "Too many calculation requests, please slow down.",
        "1 minute",
    )


def verify_api_key(
    x_api_key: Optional[str] = Header(default=None, alias="X-API-Key"),
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> None:
    """
    If API_KEY is configured, require it via X-API-Key or Authorization
    (a "Bearer " prefix is accepted). If it's not set, the API is open.
    """
    expected = config.server.api_key
    if not expected:
        return

    provided = x_api_key or authorization
    if not provided:
        raise ApiError(
            401,
            "MISSING_API_KEY",
            "API key is required. Please provide X-API-Key header.",
        )

    provided = _BEARER_PREFIX.sub("", provided, count=1)

    if provided != expected:
        raise ApiError(401, "INVALID_API_KEY", "Invalid API key. Access denied.")


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class CalculateRequest(BaseModel):
    # Left untyped so guardrails can report wrong types with their own codes
    expression: Any = None


class CalculateResponse(BaseModel):
    success: Literal[True] = True
    expression: str
    result: float
    timestamp: str


class HealthResponse(BaseModel):
    status: Literal["healthy"] = "healthy"
    timestamp: str
    environment: str


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.post(
    "/api/v1/calculate",
    response_model=CalculateResponse,
    dependencies=[
        Depends(enforce_api_rate_limit),
        Depends(enforce_calculation_rate_limit),
        Depends(verify_api_key),
    ],
)
def calculate_expression(body: Optional[CalculateRequest] = None):
    raw_expression = body.expression if body is not None else None

    try:
        expression = validate_math_input(raw_expression)
    except RequestValidationError as e:
        raise ApiError(400, e.code, e.message)

    logger.info("Calculating expression: %s", expression)

    try:
        result = calculate(expression)
    except CalculationError as e:
        logger.info("Calculation error: %s", e.message)
        log_calculation(expression, error=e.message, code=e.error_code)
        raise ApiError(400, e.error_code, e.message, extra={"expression": raw_expression})

    logger.info("Result: %s", result)
    log_calculation(expression, result=result)

    resp = CalculateResponse(
        expression=expression.strip(),
        result=result,
        timestamp=utc_timestamp(),
    )
    return resp


@app.get(
    "/api/v1/health",
    response_model=HealthResponse,
    dependencies=[Depends(enforce_api_rate_limit)],
)
def health():
    resp = HealthResponse(
        timestamp=utc_timestamp(),
        environment=config.server.environment,
    )
    return resp
