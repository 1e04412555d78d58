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

"""Release PR synchronizer.

Keeps exactly one bot-owned release PR per base branch in step with the
default branch. Nothing is cached between events: the state of the
release PR is read back from the forge every time.

State machine (per push to the default branch)::

                      ┌───────────┐
                      │  Absent   │
                      └─────┬─────┘
                            │ create release/<n> at pushed sha,
                            │ re-search, open PR (or adopt a racer's)
                            ▼
    ┌──────────────────────────────────────────┐
    │              Open-Unlocked               │
    │                                          │
    │  head == pushed sha ──→ no-op            │
    │  head != pushed sha ──→ fast-forward     │
    │        rejected ──→ merge                │
    │        merged   ──→ regenerate changelog │
    └───────────────────┬──────────────────────┘
                        │ merge conflict:
                        │ comment, then lock
                        ▼
                  ┌─────────────┐
                  │ Open-Locked │ ──→ every later push: no-op
                  └─────────────┘

Calls to the forge happen strictly in this order: lock check, branch
update, conflict comment, lock set. Overlapping events may interleave;
there is no mutex.

Other pushes:

- Pushes to release branches (``release/...``) are reserved. They are
  reported as :attr:`SyncOutcome.RESERVED` and never acted on.
- Pushes to any other branch and branch deletions are ignored.

Usage::

    from releasepr.sync import PushEvent, SyncContext, handle_push

    ctx = SyncContext(config=cfg, forge=forge, metadata=forge, event=PushEvent.from_payload(payload))
    outcome = await handle_push(ctx)
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Any

from releasepr.backends import CommandResult, Forge, MergeStatus, MetadataStore, PullRequest
from releasepr.changelog import generate_changelog
from releasepr.commit_parsing import SEMVER_LABEL_PREFIX
from releasepr.config import RepoConfig
from releasepr.errors import E, ErrorCode, ReleasePRError
from releasepr.history import commits_between
from releasepr.lock import is_pr_locked, lock_pr
from releasepr.logging import bind_event_context, clear_event_context, get_logger
from releasepr.refs import Ref

logger = get_logger(__name__)

# Upper bound (exclusive) for the random release branch suffix.
BRANCH_SUFFIX_LIMIT = 1_000_000_000

CONFLICT_COMMENT = (
    'There is a merge conflict between this branch and {branch}. '
    'This PR will not be updated automatically from {branch} '
    'until the merge conflict is resolved manually.'
)

MERGE_MESSAGE = 'Auto-merging {head} into {base}'


class SyncOutcome(Enum):
    """What handling one event did."""

    IGNORED = 'ignored'
    RESERVED = 'reserved'
    CREATED = 'created'
    LOCKED = 'locked'
    UP_TO_DATE = 'up_to_date'
    UPDATED = 'updated'
    CONFLICT_LOCKED = 'conflict_locked'
    REGENERATED = 'regenerated'


@dataclass(frozen=True)
class PushEvent:
    """The parts of a ``push`` webhook payload the synchronizer reads.

    Attributes:
        head: Pushed branch and the sha it now points at.
        deleted: Whether the push deleted the branch.
        repository: ``owner/name`` of the repository, if known.
    """

    head: Ref
    deleted: bool = False
    repository: str = ''

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> PushEvent:  # noqa: ANN401 - webhook JSON
        """Build an event from a GitHub ``push`` webhook payload.

        Raises:
            ReleasePRError: If ``ref`` or ``after`` is missing.
        """
        ref = payload.get('ref')
        after = payload.get('after')
        if not isinstance(ref, str) or not ref or not isinstance(after, str):
            raise ReleasePRError(
                code=E.EVENT_INVALID,
                message='Push payload needs string "ref" and "after" fields',
                hint='Pass the JSON body of a GitHub push webhook.',
            )
        repository = payload.get('repository') or {}
        return cls(
            head=Ref(ref, after),
            deleted=bool(payload.get('deleted', False)),
            repository=repository.get('full_name', '') if isinstance(repository, dict) else '',
        )


@dataclass(frozen=True)
class SyncContext:
    """Everything one event needs, resolved once and passed explicitly.

    Attributes:
        config: Repository settings.
        forge: Hosting platform backend.
        metadata: Per-issue store holding the conflict lock.
        event: The push being handled; ``None`` for manual regeneration.
    """

    config: RepoConfig
    forge: Forge
    metadata: MetadataStore
    event: PushEvent | None = None


def _require_ok(result: CommandResult, code: ErrorCode, action: str) -> None:
    if result.ok:
        return
    raise ReleasePRError(
        code=code,
        message=f'{action} failed ({result.command_str} -> {result.return_code})',
        hint=result.stderr[:200],
    )


def new_release_branch(config: RepoConfig) -> str:
    """Return a fresh release branch name, e.g. ``release/482913004``."""
    return f'{config.release_branch_prefix}{random.randrange(BRANCH_SUFFIX_LIMIT)}'  # noqa: S311 - not crypto


def semver_labels(current: frozenset[str] | set[str], bump_label: str) -> list[str]:
    """Replace any ``semver-*`` label in ``current`` with ``bump_label``."""
    kept = {label for label in current if not label.startswith(SEMVER_LABEL_PREFIX)}
    return sorted(kept | {bump_label})


async def find_release_pr(ctx: SyncContext) -> PullRequest | None:
    """Return the oldest open PR against the base branch opened by the bot."""
    bot_name = ctx.config.bot_name

    def owned(pr: PullRequest) -> bool:
        return pr.author == bot_name

    prs = await ctx.forge.list_open_prs(ctx.config.base_branch, stop_when=owned)
    return next((pr for pr in prs if owned(pr)), None)


async def create_release_pr(ctx: SyncContext, pushed: Ref) -> tuple[PullRequest, bool]:
    """Open a release PR whose branch starts at the pushed sha.

    The PR search is repeated after the branch is created. If another
    event opened a release PR in the meantime, that PR is returned
    instead and the new branch is left unused.

    Returns:
        The release PR, and ``True`` if this call opened it.
    """
    cfg = ctx.config
    branch = new_release_branch(cfg)
    result = await ctx.forge.create_ref(branch, pushed.sha)
    _require_ok(result, E.REF_CREATE_FAILED, f'Creating {branch}')

    adopted = await find_release_pr(ctx)
    if adopted is not None:
        logger.info('release_pr_adopted', pr=adopted.number, unused_branch=branch)
        return adopted, False

    changelog = generate_changelog(await commits_between(ctx.forge, cfg.base_branch, branch))
    pr = await ctx.forge.create_pr(title=cfg.pr_title, head=branch, base=cfg.base_branch, body=changelog.text)
    result = await ctx.forge.add_labels(pr.number, [cfg.marker_label, changelog.bump.label])
    _require_ok(result, E.FORGE_REQUEST_FAILED, f'Labelling PR #{pr.number}')
    logger.info('release_pr_created', pr=pr.number, branch=branch, bump=changelog.bump.value)
    return pr, True


async def update_branch(ctx: SyncContext, release: Ref, pushed: Ref) -> bool:
    """Bring ``release`` up to ``pushed``: fast-forward, else merge.

    Returns:
        ``True`` if the release branch now contains the pushed commit,
        ``False`` on a merge conflict.

    Raises:
        ReleasePRError: If the merge fails for any other reason.
    """
    logger.info('release_branch_updating', branch=release.branch, old=release.short_sha, new=pushed.short_sha)
    result = await ctx.forge.update_ref(release.branch, pushed.sha)
    if result.ok:
        return True

    logger.info('fast_forward_rejected', branch=release.branch, status=result.return_code)
    message = MERGE_MESSAGE.format(head=pushed.branch, base=release.branch)
    merge = await ctx.forge.merge(release.branch, pushed.branch, message)
    if merge.status is MergeStatus.MERGED:
        logger.info('release_branch_merged', branch=release.branch, source=pushed.branch)
        return True
    if merge.status is MergeStatus.CONFLICT:
        logger.warning('release_branch_conflict', branch=release.branch, source=pushed.branch)
        return False
    raise ReleasePRError(
        code=E.MERGE_FAILED,
        message=f'Merging {pushed.branch} into {release.branch} failed with status {merge.result.return_code}',
        hint=merge.result.stderr[:200] or 'Check that both branches still exist.',
    )


async def regenerate_changelog(ctx: SyncContext, pr: PullRequest, *, force: bool = False) -> bool:
    """Recompute the release notes of ``pr`` and write them back.

    The body becomes the rendered changelog of ``base..head`` and the
    ``semver-*`` label is replaced by the new bump. Without ``force`` the
    update is skipped when neither would change.

    Returns:
        Whether the PR was updated.
    """
    commits = await commits_between(ctx.forge, ctx.config.base_branch, pr.head.branch)
    changelog = generate_changelog(commits)
    labels = semver_labels(pr.labels, changelog.bump.label)

    if not force and changelog.text == pr.body and set(labels) == set(pr.labels):
        logger.info('changelog_unchanged', pr=pr.number, bump=changelog.bump.value)
        return False

    result = await ctx.forge.update_pr(pr.number, body=changelog.text, labels=labels)
    _require_ok(result, E.FORGE_REQUEST_FAILED, f'Updating PR #{pr.number}')
    logger.info('changelog_regenerated', pr=pr.number, bump=changelog.bump.value, commits=len(commits))
    return True


async def _sync_default_branch(ctx: SyncContext, pushed: Ref) -> SyncOutcome:
    logger.info('push_received')
    pr = await find_release_pr(ctx)
    if pr is None:
        pr, created = await create_release_pr(ctx, pushed)
        if created:
            return SyncOutcome.CREATED
    bind_event_context(pr=pr.number)
    logger.info('release_pr_found', branch=pr.head.branch, head=pr.head.short_sha)

    if await is_pr_locked(ctx.metadata, pr.number):
        logger.info('release_pr_locked_skip', reason='unresolved merge conflict')
        return SyncOutcome.LOCKED

    if pr.head.sha == pushed.sha:
        logger.info('release_pr_up_to_date')
        return SyncOutcome.UP_TO_DATE

    if not await update_branch(ctx, pr.head, pushed):
        result = await ctx.forge.create_comment(pr.number, CONFLICT_COMMENT.format(branch=pushed.branch))
        _require_ok(result, E.FORGE_REQUEST_FAILED, f'Commenting on PR #{pr.number}')
        await lock_pr(ctx.metadata, pr.number)
        return SyncOutcome.CONFLICT_LOCKED

    await regenerate_changelog(ctx, pr)
    return SyncOutcome.UPDATED


async def handle_push(ctx: SyncContext) -> SyncOutcome:
    """Handle the push event in ``ctx``.

    Raises:
        ReleasePRError: If ``ctx`` carries no event, or a forge call fails
            unexpectedly.
    """
    event = ctx.event
    if event is None:
        raise ReleasePRError(code=E.EVENT_INVALID, message='No push event to handle')

    pushed = event.head
    bind_event_context(repo=event.repository, branch=pushed.branch, sha=pushed.short_sha)
    try:
        if event.deleted:
            logger.debug('push_ignored', reason='branch deleted')
            return SyncOutcome.IGNORED
        if pushed.branch.startswith(ctx.config.release_branch_prefix):
            # TODO: unlock the PR once a pushed conflict resolution merges cleanly.
            logger.info('release_branch_push_reserved')
            return SyncOutcome.RESERVED
        if pushed.branch != ctx.config.default_branch:
            logger.debug('push_ignored', reason='not the default branch')
            return SyncOutcome.IGNORED
        return await _sync_default_branch(ctx, pushed)
    finally:
        clear_event_context()


async def regenerate(ctx: SyncContext, number: int) -> SyncOutcome:
    """Rewrite the release notes of PR ``number`` unconditionally.

    Raises:
        ReleasePRError: If the PR does not exist.
    """
    bind_event_context(pr=number)
    try:
        pr = await ctx.forge.get_pr(number)
        if pr is None:
            raise ReleasePRError(
                code=E.FORGE_PR_NOT_FOUND,
                message=f'PR #{number} does not exist',
                hint='Check the PR number and the --repo argument.',
            )
        await regenerate_changelog(ctx, pr, force=True)
        return SyncOutcome.REGENERATED
    finally:
        clear_event_context()


__all__ = [
    'CONFLICT_COMMENT',
    'MERGE_MESSAGE',
    'PushEvent',
    'SyncContext',
    'SyncOutcome',
    'create_release_pr',
    'find_release_pr',
    'handle_push',
    'new_release_branch',
    'regenerate',
    'regenerate_changelog',
    'semver_labels',
    'update_branch',
]
