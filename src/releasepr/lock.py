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

"""Merge-conflict lock for release PRs.

When the default branch cannot be merged into a release branch, the PR is
locked: later pushes leave it alone until someone resolves the conflict by
hand and clears the flag. The flag lives in the PR's metadata store, so it
survives between events without any local state.

The check and the set are separate calls; two overlapping events may both
see the PR unlocked.
"""

from __future__ import annotations

from releasepr.backends.forge import MetadataStore
from releasepr.logging import get_logger

logger = get_logger(__name__)

LOCK_KEY = 'locked_bc_merge_conflict'


async def is_pr_locked(store: MetadataStore, number: int) -> bool:
    """Return whether PR ``number`` is locked. Only a stored ``True`` counts."""
    return await store.get_metadata(number, LOCK_KEY) is True


async def lock_pr(store: MetadataStore, number: int) -> None:
    """Lock PR ``number`` against automatic updates."""
    await store.set_metadata(number, LOCK_KEY, True)
    logger.info('release_pr_locked', pr=number)


async def unlock_pr(store: MetadataStore, number: int) -> None:
    """Clear the lock on PR ``number``."""
    await store.set_metadata(number, LOCK_KEY, False)
    logger.info('release_pr_unlocked', pr=number)


__all__ = [
    'LOCK_KEY',
    'is_pr_locked',
    'lock_pr',
    'unlock_pr',
]
