"""
Tests for the no-data boundary and error categorization.

Run with: python -m pytest tests/test_resilience.py -v
"""

import logging
import sys
from pathlib import Path

import httpx
import pytest
from curl_cffi import CurlError

logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)

sys.path.insert(0, str(Path(__file__).parent.parent))

from radiacion_uv.resilience import (
    ErrorType,
    MalformedPayloadError,
    categorize_error,
    fetch_or_none,
)


def _status_error(status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://example.test/")
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError(f"HTTP {status}", request=request, response=response)


class TestCategorizeError:

    def test_timeout(self):
        error_type, _ = categorize_error(httpx.ReadTimeout("slow"))
        assert error_type == ErrorType.TIMEOUT

    def test_rate_limit(self):
        error_type, msg = categorize_error(_status_error(429))
        assert error_type == ErrorType.RATE_LIMIT
        assert "429" in msg

    def test_server_error(self):
        error_type, _ = categorize_error(_status_error(500))
        assert error_type == ErrorType.API_ERROR

    def test_curl_timeout(self):
        error_type, msg = categorize_error(CurlError("Operation timed out", code=28))
        logger.info(f"[TEST] Curl code 28 -> {error_type.value}: {msg}")
        assert error_type == ErrorType.TIMEOUT

    def test_other_curl_error(self):
        error_type, _ = categorize_error(CurlError("Could not resolve host", code=6))
        assert error_type == ErrorType.API_ERROR

    def test_malformed_payload(self):
        error_type, _ = categorize_error(MalformedPayloadError("no 'ok'"))
        assert error_type == ErrorType.PARSE_ERROR

    def test_unknown(self):
        error_type, _ = categorize_error(RuntimeError("boom"))
        assert error_type == ErrorType.UNKNOWN


class TestFetchOrNone:

    @pytest.mark.asyncio
    async def test_returns_result(self):
        async def ok(value):
            return value * 2

        assert await fetch_or_none(ok, "test", 21) == 42

    @pytest.mark.asyncio
    async def test_failure_becomes_none_after_one_attempt(self):
        calls = []

        async def broken():
            calls.append(1)
            raise httpx.ConnectError("refused")

        result = await fetch_or_none(broken, "test")
        logger.info(f"[TEST] Result after failure: {result}")
        assert result is None
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_server_error_is_not_retried(self):
        calls = []

        async def unavailable():
            calls.append(1)
            raise _status_error(503)

        assert await fetch_or_none(unavailable, "test") is None
        assert len(calls) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
