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

"""Forge protocols for releasepr.

:class:`Forge` is everything the release synchronizer needs from the
hosting platform: commit ranges, ref updates and merges, and pull request
operations. :class:`MetadataStore` is the per-issue key/value store that
holds the conflict lock flag.

Implementations:

- :class:`~releasepr.backends.forge.github_api.GitHubAPIBackend`: GitHub REST API

Mutating calls return a :class:`CommandResult` instead of raising on any
failure, including one where no response arrived; callers decide which
failures are routine (a rejected fast-forward) and which are fatal.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from releasepr.backends._types import CommandResult, CommitRange, MergeResult, PullRequest
from releasepr.backends.forge.github_api import GitHubAPIBackend as GitHubAPIBackend
from releasepr.commit_parsing import RawCommit


@runtime_checkable
class Forge(Protocol):
    """Protocol for code forge operations used by the synchronizer.

    All methods are async; each one is a single suspension point.
    """

    async def compare_commits(self, base: str, head: str) -> CommitRange:
        """Return the commits reachable from ``head`` but not from ``base``.

        Args:
            base: Base branch or sha.
            head: Head branch or sha.
        """
        ...

    async def resolve_sha(self, ref: str) -> str:
        """Return the commit sha a branch or ref points at."""
        ...

    async def list_commits(self, head: str, *, page: int = 1, per_page: int = 100) -> list[RawCommit]:
        """Return one page of history walking back from ``head``, newest first.

        Args:
            head: Branch or sha to start from.
            page: 1-based page number.
            per_page: Page size.
        """
        ...

    async def update_ref(self, branch: str, sha: str) -> CommandResult:
        """Fast-forward ``branch`` to ``sha``; fails if ``sha`` does not descend from it."""
        ...

    async def create_ref(self, branch: str, sha: str) -> CommandResult:
        """Create a new branch pointing at ``sha``."""
        ...

    async def merge(self, base: str, head: str, message: str) -> MergeResult:
        """Merge ``head`` into the ``base`` branch with a merge commit.

        Args:
            base: Branch receiving the merge.
            head: Branch or sha being merged.
            message: Merge commit message.
        """
        ...

    async def list_open_prs(
        self,
        base: str,
        *,
        stop_when: Callable[[PullRequest], bool] | None = None,
    ) -> list[PullRequest]:
        """List open PRs against ``base``, oldest first.

        Args:
            base: Base branch filter.
            stop_when: If given, stop fetching further pages once a PR on
                the current page satisfies it.
        """
        ...

    async def get_pr(self, number: int) -> PullRequest | None:
        """Fetch one PR, or ``None`` if it does not exist."""
        ...

    async def create_pr(self, *, title: str, head: str, base: str, body: str = '') -> PullRequest:
        """Open a pull request and return it."""
        ...

    async def add_labels(self, number: int, labels: list[str]) -> CommandResult:
        """Add labels to a PR, keeping existing ones."""
        ...

    async def update_pr(self, number: int, *, body: str, labels: list[str]) -> CommandResult:
        """Replace a PR's body and its full label set."""
        ...

    async def create_comment(self, number: int, body: str) -> CommandResult:
        """Post a comment on a PR."""
        ...


@runtime_checkable
class MetadataStore(Protocol):
    """Per-issue key/value storage that survives across events."""

    async def get_metadata(self, number: int, key: str) -> object | None:
        """Return the value stored under ``key`` for issue ``number``, or ``None``."""
        ...

    async def set_metadata(self, number: int, key: str, value: object) -> None:
        """Store ``value`` under ``key`` for issue ``number``."""
        ...


__all__ = [
    'Forge',
    'GitHubAPIBackend',
    'MetadataStore',
]
