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

"""Markdown changelog rendering for release PR bodies.

The output is byte-stable: rendering the same :class:`Changeset` twice
yields identical text, so callers can compare a fresh render with the
current PR body to decide whether an update is needed.

Output shape::

    ## Features

    ### Typescript

    * Introduce typescript typings (#123)

    ## Bug Fixes

    * fix a bug (#234)

    ### Typescript

    * Fix bad typings
      **Breaking Change**: TypeScript typings have changed

Usage::

    from releasepr.changelog import generate_changelog

    changelog = generate_changelog(commits)
    changelog.bump   # BumpLevel.MINOR
    changelog.text   # '## Features\\n\\n* ...'
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from releasepr.changeset import HEADING_ORDER, Category, Changeset, ChangesetItem, Heading, build_changeset
from releasepr.commit_parsing import BumpLevel, RawCommit
from releasepr.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Changelog:
    """A rendered changelog and the bump it implies.

    Attributes:
        bump: Overall bump level of the commits.
        text: Rendered markdown.
    """

    bump: BumpLevel
    text: str


def _capitalize(text: str) -> str:
    # Only the first letter; "typeScript" stays "TypeScript".
    return text[:1].upper() + text[1:]


def _render_item(item: ChangesetItem) -> str:
    """Render one bullet body: subject, PR reference, breaking-change note."""
    text = item.message
    if item.pull_number:
        text += f' (#{item.pull_number})'
    if item.breaking_change:
        text += f'\n  **Breaking Change**: {item.breaking_change}'
    return text


def _render_block(prefix: str, category: Category) -> str:
    block = f'{prefix} {_capitalize(category.heading)}\n'
    if category.items:
        block += '\n' + ''.join(f'* {_render_item(item)}\n' for item in category.items)
    return block + '\n'


def _heading_rank(category: Category) -> int:
    return HEADING_ORDER.index(Heading(category.heading))


def render_changelog(changeset: Changeset) -> str:
    """Render a :class:`Changeset` as markdown.

    Categories follow :data:`~releasepr.changeset.HEADING_ORDER`; two raw
    types sharing a heading keep their encounter order. Subcategories
    follow their parent in encounter order.

    Args:
        changeset: The changeset to render.

    Returns:
        Markdown text without leading or trailing whitespace.
    """
    parts: list[str] = []
    for category in sorted(changeset.categories.values(), key=_heading_rank):
        parts.append(_render_block('##', category))
        for subcategory in category.subcategories.values():
            parts.append(_render_block('###', subcategory))
    return ''.join(parts).strip()


def generate_changelog(commits: Iterable[RawCommit]) -> Changelog:
    """Build and render the changelog for a commit range.

    Args:
        commits: Commits in range order.

    Returns:
        The bump level and rendered markdown.
    """
    commits = list(commits)
    changeset = build_changeset(commits)
    text = render_changelog(changeset)
    logger.debug(
        'changelog_generated',
        commits=len(commits),
        categories=len(changeset.categories),
        bump=changeset.bump.value,
    )
    return Changelog(bump=changeset.bump, text=text)


__all__ = [
    'Changelog',
    'generate_changelog',
    'render_changelog',
]
