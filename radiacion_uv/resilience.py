"""
Resilience Infrastructure for Radiación UV

Every upstream call goes through fetch_or_none(), which is the "no data"
boundary: whatever happens inside (timeout, HTTP error, malformed payload),
the caller receives either a result or None, never an exception.

One attempt per request. Providers never retry; a slow or failing source is
reported as missing and the reconciler falls through to the next one.

Features:
- @no_data_on_failure decorator for async functions
- Error categorization (timeout, rate_limit, api_error, parse_error)
"""

import asyncio
import functools
import json
import logging
import time
from enum import Enum
from typing import Any, Callable, Optional, Tuple

import httpx
from curl_cffi import CurlError

logger = logging.getLogger(__name__)

# libcurl CURLE_OPERATION_TIMEDOUT
CURL_TIMEOUT_CODE = 28


class ErrorType(Enum):
    """Categories of errors for tracking."""
    TIMEOUT = "timeout"
    RATE_LIMIT = "rate_limit"
    API_ERROR = "api_error"
    PARSE_ERROR = "parse_error"
    UNKNOWN = "unknown"


class MalformedPayloadError(ValueError):
    """Upstream answered but the body is not what we expect."""


def categorize_error(exception: BaseException) -> Tuple[ErrorType, str]:
    """
    Categorize an exception for logging.

    Returns:
        Tuple of (ErrorType, error_message)
    """
    error_msg = str(exception)[:200]  # Truncate long messages

    if isinstance(exception, (httpx.TimeoutException, asyncio.TimeoutError)):
        return (ErrorType.TIMEOUT, f"Timeout: {error_msg}")

    elif isinstance(exception, httpx.HTTPStatusError):
        status = exception.response.status_code
        if status == 429:
            return (ErrorType.RATE_LIMIT, "HTTP 429 Too Many Requests")
        elif status == 503:
            return (ErrorType.RATE_LIMIT, "HTTP 503 Service Unavailable")
        else:
            return (ErrorType.API_ERROR, f"HTTP {status}: {error_msg}")

    elif isinstance(exception, httpx.RequestError):
        return (ErrorType.API_ERROR, f"Request error: {error_msg}")

    elif isinstance(exception, CurlError):
        if getattr(exception, "code", None) == CURL_TIMEOUT_CODE:
            return (ErrorType.TIMEOUT, f"Timeout: {error_msg}")
        return (ErrorType.API_ERROR, f"Request error: {error_msg}")

    elif isinstance(exception, (json.JSONDecodeError, KeyError, ValueError, TypeError)):
        return (ErrorType.PARSE_ERROR, f"Parse error: {error_msg}")

    else:
        return (ErrorType.UNKNOWN, error_msg)


def no_data_on_failure(provider_name: str = "unknown") -> Callable:
    """
    Decorator that converts any failure of an async call into None.

    Usage:
        @no_data_on_failure(provider_name="CurrentUVIndex")
        async def fetch(self) -> Optional[dict]:
            ...

    Args:
        provider_name: Name for logging purposes
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> Optional[Any]:
            start_time = time.time()
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                error_type, error_msg = categorize_error(e)
                elapsed = time.time() - start_time
                logger.warning(
                    f"[{provider_name}] No data after {elapsed:.2f}s: "
                    f"{error_type.value} - {error_msg}"
                )
                return None

        return async_wrapper

    return decorator


async def fetch_or_none(
    func: Callable,
    provider_name: str = "unknown",
    *args,
    **kwargs
) -> Optional[Any]:
    """
    Execute an async function once; failures become None.

    Args:
        func: Async function to call
        provider_name: Name for logging
        *args, **kwargs: Arguments to pass to func

    Returns:
        Result of func or None on failure
    """
    @no_data_on_failure(provider_name=provider_name)
    async def wrapper():
        return await func(*args, **kwargs)

    return await wrapper()
