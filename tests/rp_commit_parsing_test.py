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

"""Tests for the commit_parsing subpackage.

All tests are pure: no I/O, no mocks, no async.
"""

from __future__ import annotations

import pytest
from releasepr.commit_parsing import (
    BUMP_ORDER,
    BumpLevel,
    ConventionalCommitParser,
    Note,
    classify,
    max_bump,
)

# ---------------------------------------------------------------------------
# BumpLevel
# ---------------------------------------------------------------------------


class TestBumpLevel:
    """Tests for BumpLevel enum."""

    def test_order(self) -> None:
        """UNKNOWN ranks above MAJOR."""
        assert BUMP_ORDER == [
            BumpLevel.NONE,
            BumpLevel.PATCH,
            BumpLevel.MINOR,
            BumpLevel.MAJOR,
            BumpLevel.UNKNOWN,
        ]

    def test_label(self) -> None:
        """Bump levels render as semver-* labels."""
        assert BumpLevel.MINOR.label == 'semver-minor'
        assert BumpLevel.UNKNOWN.label == 'semver-unknown'


class TestMaxBump:
    """Tests for the max_bump pure function."""

    def test_same_level(self) -> None:
        """A level combined with itself is unchanged."""
        for level in BumpLevel:
            assert max_bump(level, level) == level

    def test_symmetric(self) -> None:
        """Argument order does not matter."""
        for a in BumpLevel:
            for b in BumpLevel:
                assert max_bump(a, b) == max_bump(b, a)

    def test_unknown_wins(self) -> None:
        """UNKNOWN outranks MAJOR so it forces a human review."""
        assert max_bump(BumpLevel.MAJOR, BumpLevel.UNKNOWN) == BumpLevel.UNKNOWN

    def test_none_loses(self) -> None:
        """NONE never wins over a real bump."""
        assert max_bump(BumpLevel.NONE, BumpLevel.PATCH) == BumpLevel.PATCH


# ---------------------------------------------------------------------------
# classify
# ---------------------------------------------------------------------------


class TestClassify:
    """Tests for classify()."""

    def test_merge_commit(self) -> None:
        """A merge line yields the PR number, fork owner and branch."""
        parsed = classify('Merge pull request #123 from probot/mkt/typescript\n\nfeat(typescript): Introduce typings')
        assert parsed.type == 'feat'
        assert parsed.scope == 'typescript'
        assert parsed.subject == 'Introduce typings'
        assert parsed.pull_number == '123'
        assert parsed.pull_branch == 'mkt/typescript'
        assert parsed.pull_fork_owner == 'probot'
        assert parsed.notes == ()

    def test_merge_commit_with_notes(self) -> None:
        """Notes after a merged commit's header are still collected."""
        parsed = classify(
            'Merge pull request #123 from probot/mkt/typescript\n\n'
            'feat(typescript): Introduce typings\n\n'
            'breaking change: stuff broke'
        )
        assert parsed.type == 'feat'
        assert parsed.pull_number == '123'
        assert parsed.notes == (Note(title='breaking change', text='stuff broke'),)

    def test_breaking_change_type(self) -> None:
        """A header may use the breaking-change phrase as its type."""
        parsed = classify('Merge pull request #123 from probot/mkt/typescript\n\nbreaking change: Modify typings')
        assert parsed.type == 'breaking change'
        assert parsed.scope is None
        assert parsed.subject == 'Modify typings'
        assert parsed.pull_number == '123'

    def test_plain_commit(self) -> None:
        """A plain header has no scope and no pull number."""
        parsed = classify('fix: fix a bug')
        assert parsed.type == 'fix'
        assert parsed.scope is None
        assert parsed.subject == 'fix a bug'
        assert parsed.pull_number is None
        assert parsed.pull_fork_owner is None
        assert parsed.pull_branch is None

    def test_non_conforming(self) -> None:
        """A message without a header is returned with no type."""
        parsed = classify('a commit with a non-semantic message')
        assert parsed.type is None
        assert parsed.scope is None
        assert parsed.subject is None

    def test_merge_without_header(self) -> None:
        """Merge info is kept even when the following line is not a header."""
        parsed = classify('Merge pull request #7 from octo/topic\n\njust words')
        assert parsed.type is None
        assert parsed.pull_number == '7'
        assert parsed.pull_fork_owner == 'octo'

    def test_surrounding_newlines_trimmed(self) -> None:
        """Blank lines around the message are ignored."""
        parsed = classify('\n\nchore(release): Fix release script\n\n')
        assert parsed.type == 'chore'
        assert parsed.scope == 'release'
        assert parsed.subject == 'Fix release script'

    def test_crlf_lines(self) -> None:
        """CRLF line endings parse like LF."""
        parsed = classify('feat: add x\r\n\r\nBREAKING CHANGE: y changed')
        assert parsed.subject == 'add x'
        assert parsed.notes == (Note(title='BREAKING CHANGE', text='y changed'),)

    def test_note_title_keeps_case(self) -> None:
        """A note title is kept exactly as written."""
        parsed = classify('fix: x\n\nBREAKING-CHANGE: gone')
        assert parsed.notes[0].title == 'BREAKING-CHANGE'

    def test_note_continuation_lines(self) -> None:
        """Lines after a note belong to its text."""
        parsed = classify('fix: x\n\nBREAKING CHANGE: first\nsecond line')
        assert parsed.notes == (Note(title='BREAKING CHANGE', text='first\nsecond line'),)

    @pytest.mark.parametrize(
        ('message', 'scope'),
        [
            ('feat($browser): x', '$browser'),
            ('feat(core.api): x', 'core.api'),
            ('feat(*): x', '*'),
        ],
    )
    def test_scope_characters(self, message: str, scope: str) -> None:
        """Scopes may contain symbols, dots and wildcards."""
        assert classify(message).scope == scope

    def test_missing_space_after_colon(self) -> None:
        """A header with no space after the colon is not conventional."""
        assert classify('feat:no space').type is None


class TestConventionalCommitParser:
    """Tests for the parser class."""

    def test_reusable(self) -> None:
        """One parser instance handles many messages."""
        parser = ConventionalCommitParser()
        assert parser.parse('feat: a').type == 'feat'
        assert parser.parse('docs: b').type == 'docs'
