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

"""HTTP transport for the GitHub backend.

Every forge call goes through :func:`request_with_retry`, which is the
only place releasepr retries anything. The synchronizer above it makes
each call exactly once.

Which failures are retried depends on whether repeating the request is
harmless:

- Idempotent methods (GET, PATCH, PUT, DELETE) are retried on 429, 5xx,
  connection errors and read or write timeouts.
- ``POST`` is retried only on 429 and on errors raised before the request
  was sent (connect errors, connect and pool timeouts). A 5xx is returned
  to the caller and any other transport error is raised.

A ``POST`` that timed out after it was written may already have opened
the PR or posted the comment, so sending it again would duplicate it.
The PATCH calls the backend makes set absolute values (a ref's sha, a
body, a label set), so repeating one is harmless.

Usage::

    from releasepr.net import http_client, request_with_retry

    async with http_client(headers=headers) as client:
        response = await request_with_retry(client, 'POST', url, json=payload)
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Final

import httpx

from releasepr.logging import get_logger

log = get_logger('releasepr.net')

DEFAULT_POOL_SIZE: Final[int] = 10
DEFAULT_TIMEOUT: Final[float] = 30.0

MAX_RETRIES: Final[int] = 3
RETRY_BACKOFF_BASE: Final[float] = 1.0

RETRYABLE_STATUS_CODES: Final[frozenset[int]] = frozenset({429, 500, 502, 503, 504})

# GitHub rejects a rate-limited request before acting on it.
RATE_LIMIT_STATUS_CODES: Final[frozenset[int]] = frozenset({429})

IDEMPOTENT_METHODS: Final[frozenset[str]] = frozenset({'GET', 'HEAD', 'OPTIONS', 'PUT', 'PATCH', 'DELETE'})

# Raised before any byte of the request reached the server.
_UNSENT_ERRORS: tuple[type[httpx.TransportError], ...] = (
    httpx.ConnectError,
    httpx.ConnectTimeout,
    httpx.PoolTimeout,
)

_TRANSIENT_ERRORS: tuple[type[httpx.TransportError], ...] = (
    *_UNSENT_ERRORS,
    httpx.ReadTimeout,
    httpx.WriteTimeout,
    httpx.RemoteProtocolError,
)


@asynccontextmanager
async def http_client(
    *,
    pool_size: int = DEFAULT_POOL_SIZE,
    timeout: float = DEFAULT_TIMEOUT,
    base_url: str = '',
    headers: dict[str, str] | None = None,
) -> AsyncGenerator[httpx.AsyncClient]:
    """Create a managed async HTTP client with connection pooling.

    Args:
        pool_size: Maximum number of connections in the pool.
        timeout: Request timeout in seconds.
        base_url: Optional base URL for all requests.
        headers: Optional default headers.

    Yields:
        An :class:`httpx.AsyncClient` instance.
    """
    limits = httpx.Limits(
        max_connections=pool_size,
        max_keepalive_connections=pool_size,
    )
    async with httpx.AsyncClient(
        limits=limits,
        timeout=httpx.Timeout(timeout),
        base_url=base_url,
        headers=headers or {},
        follow_redirects=True,
    ) as client:
        yield client


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    max_retries: int | None = None,
    backoff_base: float | None = None,
    idempotent: bool | None = None,
    **kwargs: object,
) -> httpx.Response:
    """Send a request, retrying the failures that are safe to retry.

    Args:
        client: The httpx async client to use.
        method: HTTP method (GET, POST, etc.).
        url: Request URL.
        max_retries: Maximum number of retry attempts. Defaults to
            :data:`MAX_RETRIES`.
        backoff_base: Base delay in seconds for exponential backoff.
            Defaults to :data:`RETRY_BACKOFF_BASE`.
        idempotent: Whether repeating the request is harmless. Defaults
            to ``method in IDEMPOTENT_METHODS``.
        **kwargs: Additional keyword arguments passed to ``client.request()``.

    Returns:
        The :class:`httpx.Response`. A status that is not retried for
        this method, including 4xx, is returned as-is.

    Raises:
        httpx.HTTPStatusError: If retries are exhausted on a retryable
            status code.
        httpx.TransportError: If retries are exhausted on a transport
            error, or on the first transport error that is not safe to
            retry.
    """
    retries = MAX_RETRIES if max_retries is None else max_retries
    backoff = RETRY_BACKOFF_BASE if backoff_base is None else backoff_base
    if idempotent is None:
        idempotent = method.upper() in IDEMPOTENT_METHODS
    retry_errors = _TRANSIENT_ERRORS if idempotent else _UNSENT_ERRORS
    retry_statuses = RETRYABLE_STATUS_CODES if idempotent else RATE_LIMIT_STATUS_CODES

    for attempt in range(retries + 1):
        final = attempt == retries
        delay = backoff * (2**attempt)
        try:
            response = await client.request(method, url, **kwargs)  # type: ignore[arg-type]
        except retry_errors as exc:
            if final:
                raise
            log.warning(
                'http_retry_error',
                method=method,
                url=url,
                error=str(exc) or type(exc).__name__,
                attempt=attempt + 1,
                delay=delay,
            )
        else:
            if response.status_code not in retry_statuses:
                return response
            if final:
                response.raise_for_status()
            log.warning(
                'http_retry',
                method=method,
                url=url,
                status=response.status_code,
                attempt=attempt + 1,
                delay=delay,
            )
        await asyncio.sleep(delay)

    msg = 'request_with_retry: no attempts were made'
    raise RuntimeError(msg)


__all__ = [
    'DEFAULT_POOL_SIZE',
    'DEFAULT_TIMEOUT',
    'IDEMPOTENT_METHODS',
    'MAX_RETRIES',
    'RATE_LIMIT_STATUS_CODES',
    'RETRYABLE_STATUS_CODES',
    'RETRY_BACKOFF_BASE',
    'http_client',
    'request_with_retry',
]
