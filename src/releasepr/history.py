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

"""Commit range lookup between two refs.

The compare API caps the number of commits it returns. When the reported
total exceeds what came back, the range is rebuilt by walking history
backwards from ``head`` one page at a time until the sha ``base`` points
at is reached::

    compare(base, head)
         │
         ├── total == len(commits) ──→ done
         │
         ▼
    resolve_sha(base) ──→ stop sha
         │
         ▼
    list_commits(head, page=1, 2, ...) until stop sha
         │
         ▼
    reverse (oldest first, same as compare)
"""

from __future__ import annotations

from releasepr.backends.forge import Forge
from releasepr.commit_parsing import RawCommit
from releasepr.errors import E, ReleasePRError
from releasepr.logging import get_logger

logger = get_logger(__name__)

_PAGE_SIZE = 100


async def commits_between(forge: Forge, base: str, head: str) -> list[RawCommit]:
    """Return the commits reachable from ``head`` but not ``base``, oldest first.

    Args:
        forge: Forge to read history from.
        base: Base branch or sha.
        head: Head branch or sha.

    Raises:
        ReleasePRError: If the walk runs out of history before reaching
            ``base``.
    """
    compared = await forge.compare_commits(base, head)
    if not compared.truncated:
        return list(compared.commits)

    stop_sha = await forge.resolve_sha(base)
    logger.debug(
        'commit_range_truncated',
        base=base,
        head=head,
        returned=len(compared.commits),
        total=compared.total,
        stop_sha=stop_sha[:8],
    )

    walked: list[RawCommit] = []
    page = 1
    while True:
        batch = await forge.list_commits(head, page=page, per_page=_PAGE_SIZE)
        for commit in batch:
            if commit.sha == stop_sha:
                walked.reverse()
                logger.debug('commit_range_walked', base=base, head=head, commits=len(walked), pages=page)
                return walked
            walked.append(commit)
        if len(batch) < _PAGE_SIZE:
            break
        page += 1

    raise ReleasePRError(
        code=E.RANGE_BASE_NOT_FOUND,
        message=f'Walked {len(walked)} commits back from {head} without reaching {base} ({stop_sha[:8]})',
        hint=f'Check that {head} was branched from {base}.',
    )


__all__ = [
    'commits_between',
]
