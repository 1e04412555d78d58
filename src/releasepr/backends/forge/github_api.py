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

"""GitHub REST API forge backend for releasepr.

Implements both :class:`~releasepr.backends.forge.Forge` and
:class:`~releasepr.backends.forge.MetadataStore` using the GitHub REST
API v3 via ``httpx``.

Authentication:

    Resolves a token in order of precedence:

    1. ``token`` constructor parameter.
    2. ``GITHUB_TOKEN`` env var (set automatically by GitHub Actions).
    3. ``GH_TOKEN`` env var (used by the ``gh`` CLI).

    If none are set, the backend raises ``ValueError`` at construction
    to fail fast rather than silently on the first API call.

Failure handling:

    Mutating calls (ref updates, merges, labels, comments) return a
    :class:`CommandResult` for every failure, transport errors and
    exhausted retries included, and leave the decision to the caller.
    A rejected fast-forward therefore always reaches the merge fallback.
    Reads raise :class:`~releasepr.errors.ReleasePRError` on anything
    but success; an empty PR list on an HTTP error would make the bot
    open a second release PR. Opening a PR also raises, since nothing
    can continue without it.

Usage::

    from releasepr.backends.forge.github_api import GitHubAPIBackend

    forge = GitHubAPIBackend(owner='probot', repo='probot')
    prs = await forge.list_open_prs('master')

.. seealso::

    `GitHub REST API <https://docs.github.com/en/rest>`_
"""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import Any

import httpx

from releasepr.backends._types import CommandResult, CommitRange, MergeResult, MergeStatus, PullRequest
from releasepr.backends.metadata import carry_metadata, read_metadata, strip_metadata, write_metadata
from releasepr.commit_parsing import RawCommit
from releasepr.errors import E, ReleasePRError
from releasepr.logging import get_logger
from releasepr.net import DEFAULT_POOL_SIZE, DEFAULT_TIMEOUT, http_client, request_with_retry
from releasepr.refs import Ref

log = get_logger('releasepr.backends.forge.github_api')

# GitHub REST API base URL.
_DEFAULT_BASE_URL = 'https://api.github.com'

# API version header for stable API behavior.
_API_VERSION = '2022-11-28'

# Media type that makes GET /commits/{ref} return only the sha.
_SHA_MEDIA_TYPE = 'application/vnd.github.sha'

_PR_PAGE_SIZE = 100


def _parse_pr(data: dict[str, Any]) -> PullRequest:
    """Normalize a GitHub pull request object."""
    head = data.get('head') or {}
    return PullRequest(
        number=data.get('number', 0),
        head=Ref(head.get('ref', ''), head.get('sha', '')),
        base=(data.get('base') or {}).get('ref', ''),
        author=(data.get('user') or {}).get('login', ''),
        labels=frozenset(lbl.get('name', '') for lbl in data.get('labels', [])),
        body=strip_metadata(data.get('body') or ''),
        url=data.get('html_url', ''),
    )


def _parse_commit(data: dict[str, Any]) -> RawCommit:
    return RawCommit(message=(data.get('commit') or {}).get('message', ''), sha=data.get('sha', ''))


class GitHubAPIBackend:
    """Forge and metadata store backed by the GitHub REST API.

    Args:
        owner: Repository owner (e.g., ``"probot"``).
        repo: Repository name (e.g., ``"probot"``).
        token: GitHub API token. Falls back to ``GITHUB_TOKEN`` or
            ``GH_TOKEN`` env vars.
        base_url: API base URL (override for GitHub Enterprise Server).
        pool_size: HTTP connection pool size.
        timeout: HTTP request timeout in seconds.
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        *,
        token: str = '',
        base_url: str = _DEFAULT_BASE_URL,
        pool_size: int = DEFAULT_POOL_SIZE,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize with owner, repo, and API token."""
        self._owner = owner
        self._repo = repo
        self._base_url = base_url.rstrip('/')
        self._repo_url = f'{self._base_url}/repos/{owner}/{repo}'
        self._pool_size = pool_size
        self._timeout = timeout

        resolved_token = token or os.environ.get('GITHUB_TOKEN', '') or os.environ.get('GH_TOKEN', '')
        if not resolved_token:
            msg = 'GitHub API token required: pass token= or set GITHUB_TOKEN or GH_TOKEN env var.'
            raise ValueError(msg)

        self._headers = {
            'Authorization': f'Bearer {resolved_token}',
            'Accept': 'application/vnd.github+json',
            'X-GitHub-Api-Version': _API_VERSION,
        }

    def __repr__(self) -> str:
        """Return a safe repr that never exposes the API token."""
        return f'GitHubAPIBackend(owner={self._owner!r}, repo={self._repo!r})'

    def _client(self) -> Any:  # noqa: ANN401 - async context manager
        return http_client(
            pool_size=self._pool_size,
            timeout=self._timeout,
            headers=self._headers,
        )

    @staticmethod
    def _result(method: str, url: str, response: httpx.Response) -> CommandResult:
        return CommandResult(
            command=[method, url],
            return_code=0 if response.is_success else response.status_code,
            stdout=response.text if response.is_success else '',
            stderr='' if response.is_success else response.text,
        )

    async def _send(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        action: str,
        **kwargs: Any,  # noqa: ANN401 - forwarded to httpx
    ) -> httpx.Response:
        """Send a request that the caller cannot do without."""
        try:
            return await request_with_retry(client, method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise ReleasePRError(
                code=E.FORGE_REQUEST_FAILED,
                message=f'{action} failed: {str(exc) or type(exc).__name__}',
                hint='GitHub may be unavailable. The next push starts over from the current state.',
            ) from exc

    async def _attempt(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        **kwargs: Any,  # noqa: ANN401 - forwarded to httpx
    ) -> CommandResult:
        """Send a mutating request. Every failure comes back as a failed result."""
        try:
            response = await request_with_retry(client, method, url, **kwargs)
        except httpx.HTTPStatusError as exc:
            response = exc.response
        except httpx.TransportError as exc:
            error = str(exc) or type(exc).__name__
            log.warning('forge_transport_error', method=method, url=url, error=error)
            return CommandResult(command=[method, url], return_code=-1, stderr=error)
        return self._result(method, url, response)

    @staticmethod
    def _ensure_ok(response: httpx.Response, action: str) -> None:
        if response.is_success:
            return
        raise ReleasePRError(
            code=E.FORGE_REQUEST_FAILED,
            message=f'{action} failed with HTTP {response.status_code}: {response.text[:200]}',
            hint='Check the token permissions (contents, pull requests, issues: write).',
        )

    @staticmethod
    def _json(response: httpx.Response, action: str) -> Any:  # noqa: ANN401 - raw API payload
        try:
            return response.json()
        except ValueError as exc:
            raise ReleasePRError(
                code=E.FORGE_REQUEST_FAILED,
                message=f'{action} returned a body that is not JSON',
            ) from exc

    # -- commit ranges -------------------------------------------------

    async def compare_commits(self, base: str, head: str) -> CommitRange:
        """Compare two refs via ``GET /compare/{base}...{head}``."""
        url = f'{self._repo_url}/compare/{base}...{head}'
        action = f'Comparing {base}...{head}'
        async with self._client() as client:
            response = await self._send(client, 'GET', url, action)
        self._ensure_ok(response, action)

        data = self._json(response, 'compare')
        commits = [_parse_commit(c) for c in data.get('commits', [])]
        total = data.get('total_commits', len(commits))
        log.debug('compare_commits', base=base, head=head, returned=len(commits), total=total)
        return CommitRange(commits=commits, total=total)

    async def resolve_sha(self, ref: str) -> str:
        """Resolve a ref to a sha via the ``vnd.github.sha`` media type."""
        url = f'{self._repo_url}/commits/{ref}'
        action = f'Resolving {ref}'
        async with self._client() as client:
            response = await self._send(client, 'GET', url, action, headers={'Accept': _SHA_MEDIA_TYPE})
        self._ensure_ok(response, action)
        return response.text.strip()

    async def list_commits(self, head: str, *, page: int = 1, per_page: int = 100) -> list[RawCommit]:
        """List one page of history from ``head`` via ``GET /commits``."""
        url = f'{self._repo_url}/commits'
        action = f'Listing commits from {head}'
        params = {'sha': head, 'per_page': per_page, 'page': page}
        async with self._client() as client:
            response = await self._send(client, 'GET', url, action, params=params)
        self._ensure_ok(response, action)
        return [_parse_commit(c) for c in self._json(response, 'list commits')]

    # -- refs and merges -------------------------------------------------

    async def update_ref(self, branch: str, sha: str) -> CommandResult:
        """Fast-forward a branch; GitHub answers 422 when it is not a fast-forward."""
        # The git data API wants "heads/<branch>", not "refs/heads/<branch>".
        url = f'{self._repo_url}/git/refs/heads/{branch}'
        async with self._client() as client:
            result = await self._attempt(client, 'PATCH', url, json={'sha': sha, 'force': False})
        log.debug('update_ref', branch=branch, sha=sha[:8], status=result.return_code)
        return result

    async def create_ref(self, branch: str, sha: str) -> CommandResult:
        """Create ``refs/heads/<branch>`` at ``sha``."""
        url = f'{self._repo_url}/git/refs'
        payload = {'ref': Ref(branch).ref, 'sha': sha}
        async with self._client() as client:
            result = await self._attempt(client, 'POST', url, json=payload)
        log.info('create_ref', branch=branch, sha=sha[:8], status=result.return_code)
        return result

    async def merge(self, base: str, head: str, message: str) -> MergeResult:
        """Merge via ``POST /merges``: 2xx merged, 409 conflict."""
        url = f'{self._repo_url}/merges'
        payload = {'base': base, 'head': head, 'commit_message': message}
        async with self._client() as client:
            result = await self._attempt(client, 'POST', url, json=payload)

        if result.ok:
            status = MergeStatus.MERGED
        elif result.return_code == 409:
            status = MergeStatus.CONFLICT
        else:
            status = MergeStatus.FAILED
        log.info('merge', base=base, head=head, status=result.return_code, outcome=status.value)
        return MergeResult(status=status, result=result)

    # -- pull requests ---------------------------------------------------

    async def list_open_prs(
        self,
        base: str,
        *,
        stop_when: Callable[[PullRequest], bool] | None = None,
    ) -> list[PullRequest]:
        """List open PRs against ``base``, paging until ``stop_when`` matches."""
        url = f'{self._repo_url}/pulls'
        action = f'Listing open PRs against {base}'
        results: list[PullRequest] = []
        page = 1
        async with self._client() as client:
            while True:
                params = {
                    'state': 'open',
                    'base': base,
                    'sort': 'created',
                    'direction': 'asc',
                    'per_page': _PR_PAGE_SIZE,
                    'page': page,
                }
                response = await self._send(client, 'GET', url, action, params=params)
                self._ensure_ok(response, action)
                batch = [_parse_pr(pr) for pr in self._json(response, 'list PRs')]
                results.extend(batch)
                if len(batch) < _PR_PAGE_SIZE:
                    break
                if stop_when is not None and any(stop_when(pr) for pr in batch):
                    break
                page += 1
        log.debug('list_open_prs', base=base, count=len(results), pages=page)
        return results

    async def get_pr(self, number: int) -> PullRequest | None:
        """Fetch one PR via ``GET /pulls/{number}``."""
        url = f'{self._repo_url}/pulls/{number}'
        action = f'Fetching PR #{number}'
        async with self._client() as client:
            response = await self._send(client, 'GET', url, action)
        if response.status_code == 404:
            return None
        self._ensure_ok(response, action)
        return _parse_pr(self._json(response, 'get PR'))

    async def create_pr(self, *, title: str, head: str, base: str, body: str = '') -> PullRequest:
        """Open a PR via ``POST /pulls``."""
        url = f'{self._repo_url}/pulls'
        payload = {'title': title, 'head': head, 'base': base, 'body': body}
        async with self._client() as client:
            response = await self._send(client, 'POST', url, f'Opening a PR from {head} into {base}', json=payload)
        if not response.is_success:
            raise ReleasePRError(
                code=E.PR_CREATE_FAILED,
                message=f'Opening a PR from {head} into {base} failed with HTTP {response.status_code}',
                hint=response.text[:200],
            )
        pr = _parse_pr(self._json(response, 'create PR'))
        log.info('create_pr', pr=pr.number, head=head, base=base)
        return pr

    async def add_labels(self, number: int, labels: list[str]) -> CommandResult:
        """Add labels via ``POST /issues/{number}/labels``."""
        url = f'{self._repo_url}/issues/{number}/labels'
        async with self._client() as client:
            result = await self._attempt(client, 'POST', url, json={'labels': labels})
        log.info('add_labels', pr=number, labels=labels, status=result.return_code)
        return result

    async def update_pr(self, number: int, *, body: str, labels: list[str]) -> CommandResult:
        """Replace body and labels via ``PATCH /issues/{number}``.

        The hidden metadata block of the current body is carried over so
        the conflict lock survives changelog rewrites.
        """
        url = f'{self._repo_url}/issues/{number}'
        async with self._client() as client:
            old_body = await self._issue_body(client, number)
            payload = {'body': carry_metadata(old_body, body), 'labels': labels}
            result = await self._attempt(client, 'PATCH', url, json=payload)
        log.info('update_pr', pr=number, labels=labels, status=result.return_code)
        return result

    async def create_comment(self, number: int, body: str) -> CommandResult:
        """Comment via ``POST /issues/{number}/comments``."""
        url = f'{self._repo_url}/issues/{number}/comments'
        async with self._client() as client:
            result = await self._attempt(client, 'POST', url, json={'body': body})
        log.info('create_comment', pr=number, status=result.return_code)
        return result

    # -- metadata --------------------------------------------------------

    async def _issue_body(self, client: httpx.AsyncClient, number: int) -> str:
        action = f'Fetching issue #{number}'
        response = await self._send(client, 'GET', f'{self._repo_url}/issues/{number}', action)
        self._ensure_ok(response, action)
        return self._json(response, 'get issue').get('body') or ''

    async def get_metadata(self, number: int, key: str) -> object | None:
        """Read ``key`` from the issue body's metadata block."""
        async with self._client() as client:
            body = await self._issue_body(client, number)
        return read_metadata(body).get(key)

    async def set_metadata(self, number: int, key: str, value: object) -> None:
        """Write ``key`` into the issue body's metadata block."""
        url = f'{self._repo_url}/issues/{number}'
        action = f'Updating metadata on issue #{number}'
        async with self._client() as client:
            body = await self._issue_body(client, number)
            data = read_metadata(body)
            data[key] = value
            response = await self._send(client, 'PATCH', url, action, json={'body': write_metadata(body, data)})
        self._ensure_ok(response, action)
        log.debug('set_metadata', pr=number, key=key)


__all__ = [
    'GitHubAPIBackend',
]
