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

"""Aggregate classified commits into a categorized changeset.

Key Concepts::

    ┌─────────────────────────┬─────────────────────────────────────────────┐
    │ Concept                 │ Plain-English                               │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ ChangesetItem           │ One changelog bullet: subject, PR number    │
    │                         │ and an optional breaking-change note.       │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ Category                │ All items for one raw commit type, plus     │
    │                         │ one level of per-scope subcategories.       │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ Changeset               │ Every category keyed by raw type, and the   │
    │                         │ overall bump level.                         │
    └─────────────────────────┴─────────────────────────────────────────────┘

Build flow::

    [RawCommit, ...]
         │  classify()            (non-conventional commits dropped)
         ▼
    severity per commit  ──max──▶  Changeset.bump
         │
         ▼
    categories[type] → items / subcategories[scope].items   (deduplicated)

Building never raises; malformed commits are simply left out.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from releasepr.commit_parsing import BumpLevel, ParsedCommit, RawCommit, classify, max_bump


class Heading(str, Enum):
    """Changelog section headings, in display order."""

    BREAKING = 'Breaking Changes'
    FEATURES = 'Features'
    BUG_FIXES = 'Bug Fixes'
    INTERNALS = 'Internals'
    DOCUMENTATION = 'Documentation'
    OTHER = 'Other'


HEADING_ORDER: list[Heading] = list(Heading)

_TYPE_HEADINGS: dict[str, Heading] = {
    'breaking': Heading.BREAKING,
    'breaking change': Heading.BREAKING,
    'feat': Heading.FEATURES,
    'fix': Heading.BUG_FIXES,
    'chore': Heading.INTERNALS,
    'refactor': Heading.INTERNALS,
    'internal': Heading.INTERNALS,
    'perf': Heading.INTERNALS,
    'docs': Heading.DOCUMENTATION,
}

_TYPE_SEVERITIES: dict[str, BumpLevel] = {
    **dict.fromkeys(('chore', 'docs', 'style', 'refactor', 'perf', 'test', 'fix', 'internal'), BumpLevel.PATCH),
    'feat': BumpLevel.MINOR,
    'breaking change': BumpLevel.MAJOR,
}

BREAKING_NOTE_TITLES: frozenset[str] = frozenset({'breaking', 'breaking change'})


def type_to_heading(cc_type: str) -> Heading:
    """Map a raw commit type to its changelog heading (``Other`` if unmapped)."""
    return _TYPE_HEADINGS.get(cc_type.lower(), Heading.OTHER)


def type_severity(cc_type: str) -> BumpLevel:
    """Map a raw commit type to a bump level (``UNKNOWN`` if unmapped)."""
    return _TYPE_SEVERITIES.get(cc_type.lower(), BumpLevel.UNKNOWN)


@dataclass
class ChangesetItem:
    """One changelog bullet.

    Attributes:
        message: The commit subject.
        breaking_change: Text of the commit's breaking-change note, if any.
        pull_number: PR that introduced the change, if known.
    """

    message: str
    breaking_change: str | None = None
    pull_number: int | None = None


@dataclass
class Category:
    """Items grouped under one raw commit type.

    Attributes:
        heading: Display heading; for subcategories, the scope.
        items: Items without a scope.
        subcategories: Scoped items keyed by scope, in encounter order.
    """

    heading: str
    items: list[ChangesetItem] = field(default_factory=list)
    subcategories: dict[str, Category] = field(default_factory=dict)


@dataclass
class Changeset:
    """Everything the renderer needs for one release PR body.

    Attributes:
        bump: The most severe bump level across all commits.
        categories: Categories keyed by raw commit type, in encounter order.
    """

    bump: BumpLevel = BumpLevel.NONE
    categories: dict[str, Category] = field(default_factory=dict)


def commit_severity(commit: ParsedCommit) -> BumpLevel:
    """Return the bump level a single classified commit implies."""
    if commit.type is None:
        return BumpLevel.NONE
    severity = type_severity(commit.type)
    if _breaking_note(commit) is not None:
        severity = max_bump(severity, BumpLevel.MAJOR)
    return severity


def _breaking_note(commit: ParsedCommit) -> str | None:
    for note in commit.notes:
        if note.title.lower() in BREAKING_NOTE_TITLES:
            return note.text
    return None


def _add_item(items: list[ChangesetItem], item: ChangesetItem) -> None:
    # A PR title and one of its commits often share a subject; keep one
    # bullet and hold on to whichever pull number turns up.
    for existing in items:
        if existing.message == item.message:
            if existing.pull_number is None:
                existing.pull_number = item.pull_number
            return
    items.append(item)


def build_changeset(commits: Iterable[RawCommit]) -> Changeset:
    """Classify ``commits`` and aggregate them into a :class:`Changeset`.

    Args:
        commits: Commits in range order.

    Returns:
        A fresh changeset; commits that are not conventional are skipped.
    """
    changeset = Changeset()

    for raw in commits:
        commit = classify(raw.message)
        if commit.type is None:
            continue

        changeset.bump = max_bump(changeset.bump, commit_severity(commit))

        category = changeset.categories.get(commit.type)
        if category is None:
            category = Category(heading=type_to_heading(commit.type).value)
            changeset.categories[commit.type] = category

        item = ChangesetItem(
            message=commit.subject or '',
            breaking_change=_breaking_note(commit),
            pull_number=int(commit.pull_number) if commit.pull_number else None,
        )

        if commit.scope:
            subcategory = category.subcategories.get(commit.scope)
            if subcategory is None:
                subcategory = Category(heading=commit.scope)
                category.subcategories[commit.scope] = subcategory
            _add_item(subcategory.items, item)
        else:
            _add_item(category.items, item)

    return changeset


__all__ = [
    'BREAKING_NOTE_TITLES',
    'HEADING_ORDER',
    'Category',
    'Changeset',
    'ChangesetItem',
    'Heading',
    'build_changeset',
    'commit_severity',
    'type_severity',
    'type_to_heading',
]
