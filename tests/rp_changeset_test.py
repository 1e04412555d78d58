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

"""Tests for releasepr.changeset module."""

from __future__ import annotations

import itertools

import pytest
from releasepr.changeset import (
    Heading,
    build_changeset,
    commit_severity,
    type_severity,
    type_to_heading,
)
from releasepr.commit_parsing import BumpLevel, RawCommit, classify


def _commits(*messages: str) -> list[RawCommit]:
    return [RawCommit(message=m, sha=f'sha{i}') for i, m in enumerate(messages)]


class TestTypeMappings:
    """Tests for type_to_heading and type_severity."""

    @pytest.mark.parametrize(
        ('cc_type', 'heading'),
        [
            ('breaking', Heading.BREAKING),
            ('Breaking Change', Heading.BREAKING),
            ('feat', Heading.FEATURES),
            ('fix', Heading.BUG_FIXES),
            ('chore', Heading.INTERNALS),
            ('refactor', Heading.INTERNALS),
            ('internal', Heading.INTERNALS),
            ('perf', Heading.INTERNALS),
            ('docs', Heading.DOCUMENTATION),
            ('style', Heading.OTHER),
            ('wip', Heading.OTHER),
        ],
    )
    def test_heading(self, cc_type: str, heading: Heading) -> None:
        """Each commit type maps to its fixed heading, unknown types to Other."""
        assert type_to_heading(cc_type) == heading

    @pytest.mark.parametrize('cc_type', ['chore', 'docs', 'style', 'refactor', 'perf', 'test', 'fix', 'internal'])
    def test_patch_types(self, cc_type: str) -> None:
        """Maintenance and fix types are patch-level."""
        assert type_severity(cc_type) == BumpLevel.PATCH

    def test_feat_is_minor(self) -> None:
        """feat is minor regardless of case."""
        assert type_severity('FEAT') == BumpLevel.MINOR

    def test_breaking_change_is_major(self) -> None:
        """A BREAKING CHANGE type is major."""
        assert type_severity('BREAKING CHANGE') == BumpLevel.MAJOR

    def test_unmapped_is_unknown(self) -> None:
        """Types nobody mapped force a human review."""
        assert type_severity('breaking') == BumpLevel.UNKNOWN
        assert type_severity('wip') == BumpLevel.UNKNOWN


class TestCommitSeverity:
    """Tests for commit_severity."""

    def test_breaking_note_raises_to_major(self) -> None:
        """A breaking-change note raises a fix to major."""
        assert commit_severity(classify('fix: x\n\nBREAKING CHANGE: y')) == BumpLevel.MAJOR

    def test_breaking_note_keeps_unknown(self) -> None:
        """A note never lowers a commit's severity."""
        assert commit_severity(classify('wip: x\n\nBREAKING CHANGE: y')) == BumpLevel.UNKNOWN

    def test_unparsed_is_none(self) -> None:
        """A non-conventional message contributes no bump."""
        assert commit_severity(classify('nothing here')) == BumpLevel.NONE


class TestBuildChangeset:
    """Tests for build_changeset."""

    def test_empty(self) -> None:
        """No commits give no categories and no bump."""
        changeset = build_changeset([])
        assert changeset.bump == BumpLevel.NONE
        assert changeset.categories == {}

    def test_non_conforming_dropped(self) -> None:
        """Non-conventional messages are dropped silently."""
        changeset = build_changeset(_commits('just words', 'more words'))
        assert changeset.categories == {}
        assert changeset.bump == BumpLevel.NONE

    def test_bump_is_maximum(self) -> None:
        """The overall bump is the highest commit severity."""
        changeset = build_changeset(_commits('fix: a', 'feat: b', 'docs: c'))
        assert changeset.bump == BumpLevel.MINOR

    def test_bump_order_independent(self) -> None:
        """Every permutation of the same commits gives the same bump."""
        messages = ['fix: a', 'feat: b', 'chore: c', 'fix: d\n\nBREAKING CHANGE: e']
        bumps = {build_changeset(_commits(*perm)).bump for perm in itertools.permutations(messages)}
        assert bumps == {BumpLevel.MAJOR}

    def test_categories_by_raw_type(self) -> None:
        """Categories are keyed by the raw type, even when headings coincide."""
        changeset = build_changeset(_commits('chore: a', 'refactor: b'))
        assert list(changeset.categories) == ['chore', 'refactor']
        assert changeset.categories['chore'].heading == 'Internals'
        assert changeset.categories['refactor'].heading == 'Internals'

    def test_scope_goes_to_subcategory(self) -> None:
        """Scoped commits land in a subcategory, unscoped ones stay at the top."""
        changeset = build_changeset(_commits('feat(typescript): typings', 'feat: top'))
        feat = changeset.categories['feat']
        assert [item.message for item in feat.items] == ['top']
        assert list(feat.subcategories) == ['typescript']
        assert feat.subcategories['typescript'].heading == 'typescript'
        assert feat.subcategories['typescript'].items[0].message == 'typings'

    def test_pull_number_from_merge(self) -> None:
        """The PR number comes from the merge line above the commit."""
        changeset = build_changeset(_commits('Merge pull request #234 from probot/x\n\nfix: fix a bug'))
        assert changeset.categories['fix'].items[0].pull_number == 234

    def test_breaking_note_text(self) -> None:
        """A breaking note is attached to its item whatever its case."""
        changeset = build_changeset(_commits('fix: a\n\nbreaking change: it broke'))
        assert changeset.categories['fix'].items[0].breaking_change == 'it broke'

    def test_dedup_keeps_first(self) -> None:
        """Duplicate entries collapse to the first, keeping its pull number."""
        changeset = build_changeset(
            _commits(
                'Merge pull request #123 from probot/t\n\nfeat(typescript): Introduce typings',
                'feat(typescript): Introduce typings',
            )
        )
        items = changeset.categories['feat'].subcategories['typescript'].items
        assert len(items) == 1
        assert items[0].pull_number == 123

    def test_dedup_backfills_pull_number(self) -> None:
        """A later duplicate supplies the pull number the first lacked."""
        changeset = build_changeset(
            _commits(
                'chore(release): Fix release script',
                'Merge pull request #456 from probot/r\n\nchore(release): Fix release script',
            )
        )
        items = changeset.categories['chore'].subcategories['release'].items
        assert len(items) == 1
        assert items[0].pull_number == 456
