# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Tests for releasepr.net module."""

from __future__ import annotations

import httpx
import pytest
from releasepr.net import IDEMPOTENT_METHODS, RETRYABLE_STATUS_CODES, http_client, request_with_retry


class _Counter:
    """Mock transport handler answering from a fixed list of responses."""

    def __init__(self, *responses: httpx.Response | Exception) -> None:
        self.responses = list(responses)
        self.calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        item = self.responses[min(self.calls, len(self.responses) - 1)]
        self.calls += 1
        if isinstance(item, Exception):
            raise item
        return item


def _client(handler: _Counter) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestConstants:
    """Tests for module-level constants."""

    def test_retryable_status_codes(self) -> None:
        """Retryable codes are rate limiting and 5xx server errors."""
        assert RETRYABLE_STATUS_CODES == {429, 500, 502, 503, 504}

    def test_post_is_not_idempotent(self) -> None:
        """PATCH counts as idempotent, POST does not."""
        assert 'PATCH' in IDEMPOTENT_METHODS
        assert 'POST' not in IDEMPOTENT_METHODS


class TestHttpClient:
    """Tests for http_client async context manager."""

    @pytest.mark.asyncio()
    async def test_configured_client(self) -> None:
        """Timeout and default headers reach the client."""
        async with http_client(timeout=60.0, headers={'X-Test': 'hello'}) as client:
            assert isinstance(client, httpx.AsyncClient)
            assert client.timeout.connect == 60.0
            assert client.headers.get('X-Test') == 'hello'


class TestIdempotentRetry:
    """request_with_retry for GET and PATCH."""

    @pytest.mark.asyncio()
    async def test_success_no_retry(self) -> None:
        """A 200 is returned after a single request."""
        handler = _Counter(httpx.Response(200, json={'ok': True}))
        async with _client(handler) as client:
            response = await request_with_retry(client, 'GET', 'https://example.com/api')
        assert response.status_code == 200
        assert handler.calls == 1

    @pytest.mark.asyncio()
    async def test_client_error_returned(self) -> None:
        """A 422 rejected fast-forward is handed back untouched."""
        handler = _Counter(httpx.Response(422, text='not a fast forward'))
        async with _client(handler) as client:
            response = await request_with_retry(client, 'PATCH', 'https://example.com/ref', max_retries=2)
        assert response.status_code == 422
        assert handler.calls == 1

    @pytest.mark.asyncio()
    async def test_retryable_then_success(self) -> None:
        """A 503 followed by a 200 yields the 200."""
        handler = _Counter(httpx.Response(503, text='try again'), httpx.Response(200, json={}))
        async with _client(handler) as client:
            response = await request_with_retry(client, 'GET', 'https://example.com/x', backoff_base=0.0)
        assert response.status_code == 200
        assert handler.calls == 2

    @pytest.mark.asyncio()
    async def test_retryable_status_exhausted(self) -> None:
        """Exhausting retries on a 502 raises HTTPStatusError."""
        handler = _Counter(httpx.Response(502, text='bad gateway'))
        async with _client(handler) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await request_with_retry(client, 'PATCH', 'https://example.com/x', max_retries=1, backoff_base=0.0)
        assert handler.calls == 2

    @pytest.mark.asyncio()
    async def test_read_timeout_retried(self) -> None:
        """A GET that timed out is sent again."""
        handler = _Counter(httpx.ReadTimeout('timed out'), httpx.Response(200, json={}))
        async with _client(handler) as client:
            response = await request_with_retry(client, 'GET', 'https://example.com/x', backoff_base=0.0)
        assert response.status_code == 200
        assert handler.calls == 2

    @pytest.mark.asyncio()
    async def test_connection_error_exhausted(self) -> None:
        """The last connection error is raised once retries run out."""
        handler = _Counter(httpx.ConnectError('refused'))
        async with _client(handler) as client:
            with pytest.raises(httpx.ConnectError):
                await request_with_retry(client, 'GET', 'https://example.com/x', max_retries=2, backoff_base=0.0)
        assert handler.calls == 3

    @pytest.mark.asyncio()
    async def test_default_backoff_read_at_call_time(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Patching RETRY_BACKOFF_BASE changes the delay used by default."""
        delays: list[float] = []

        async def _sleep(delay: float) -> None:
            delays.append(delay)

        monkeypatch.setattr('releasepr.net.RETRY_BACKOFF_BASE', 0.5)
        monkeypatch.setattr('releasepr.net.asyncio.sleep', _sleep)
        handler = _Counter(httpx.Response(503), httpx.Response(503), httpx.Response(200))
        async with _client(handler) as client:
            await request_with_retry(client, 'GET', 'https://example.com/x')
        assert delays == [0.5, 1.0]


class TestPostRetry:
    """request_with_retry for POST, which must not be repeated once sent."""

    @pytest.mark.asyncio()
    async def test_read_timeout_sent_once(self) -> None:
        """A POST that timed out after it was sent is raised, not resent."""
        handler = _Counter(httpx.ReadTimeout('timed out'), httpx.Response(201, json={}))
        async with _client(handler) as client:
            with pytest.raises(httpx.ReadTimeout):
                await request_with_retry(client, 'POST', 'https://example.com/comments', backoff_base=0.0)
        assert handler.calls == 1

    @pytest.mark.asyncio()
    async def test_server_error_returned(self) -> None:
        """A 5xx answer to a POST is returned to the caller without a retry."""
        handler = _Counter(httpx.Response(502, text='bad gateway'), httpx.Response(201, json={}))
        async with _client(handler) as client:
            response = await request_with_retry(client, 'POST', 'https://example.com/pulls', backoff_base=0.0)
        assert response.status_code == 502
        assert handler.calls == 1

    @pytest.mark.asyncio()
    async def test_connect_error_retried(self) -> None:
        """A POST that never reached the server is sent again."""
        handler = _Counter(httpx.ConnectError('refused'), httpx.Response(201, json={}))
        async with _client(handler) as client:
            response = await request_with_retry(client, 'POST', 'https://example.com/pulls', backoff_base=0.0)
        assert response.status_code == 201
        assert handler.calls == 2

    @pytest.mark.asyncio()
    async def test_rate_limit_retried(self) -> None:
        """A rate-limited POST was not acted on, so it is sent again."""
        handler = _Counter(httpx.Response(429), httpx.Response(201, json={}))
        async with _client(handler) as client:
            response = await request_with_retry(client, 'POST', 'https://example.com/merges', backoff_base=0.0)
        assert response.status_code == 201
        assert handler.calls == 2

    @pytest.mark.asyncio()
    async def test_idempotent_override(self) -> None:
        """idempotent=True restores full retries for a POST known to be safe."""
        handler = _Counter(httpx.Response(503), httpx.Response(204))
        async with _client(handler) as client:
            response = await request_with_retry(
                client,
                'POST',
                'https://example.com/merges',
                backoff_base=0.0,
                idempotent=True,
            )
        assert response.status_code == 204
        assert handler.calls == 2
