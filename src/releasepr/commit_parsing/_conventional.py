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

"""Conventional Commits classifier.

Pure implementation: depends only on ``re`` and :mod:`._types`.
No I/O, no logging, no side effects.

Besides plain ``type(scope): subject`` messages this understands GitHub's
merge commits, where the first line is ``Merge pull request #N from
owner/branch`` and the conventional header follows on the next non-empty
line.
"""

from __future__ import annotations

import re

from releasepr.commit_parsing._types import Note, ParsedCommit

# Same shape as the usual conventional header, but the type may also
# contain hyphens, underscores and spaces ("BREAKING CHANGE: ...").
HEADER_PATTERN: re.Pattern[str] = re.compile(
    r'^(?P<type>[\w\- ]*)'  # type
    r'(?:\((?P<scope>[\w$.\-* ]*)\))?'  # optional scope in parens
    r': (?P<subject>.*)$',  # colon, space, subject
)

MERGE_PATTERN: re.Pattern[str] = re.compile(
    r'^Merge pull request #(?P<number>\d+) from (?P<owner>[^/]+)/(?P<branch>.*)$',
)

NOTE_KEYWORDS: tuple[str, ...] = ('BREAKING CHANGE', 'BREAKING-CHANGE')

NOTE_PATTERN: re.Pattern[str] = re.compile(
    r'^[\s|*]*(?P<title>' + '|'.join(re.escape(k) for k in NOTE_KEYWORDS) + r')[:\s]+(?P<text>.*)',
    re.IGNORECASE,
)

_LINE_SPLIT: re.Pattern[str] = re.compile(r'\r?\n')


def _split_lines(message: str) -> list[str]:
    return _LINE_SPLIT.split(message.strip('\r\n'))


def _collect_notes(lines: list[str]) -> tuple[Note, ...]:
    """Gather trailer notes; lines after a note continue its text."""
    notes: list[tuple[str, list[str]]] = []
    for line in lines:
        match = NOTE_PATTERN.match(line)
        if match:
            notes.append((match.group('title'), [match.group('text')]))
        elif notes:
            notes[-1][1].append(line)
    return tuple(Note(title=title, text='\n'.join(text).strip('\r\n')) for title, text in notes)


class ConventionalCommitParser:
    """Classifier for `Conventional Commits <https://www.conventionalcommits.org/>`_.

    Never raises: anything that does not look like a conventional commit
    comes back as a :class:`ParsedCommit` whose ``type`` is ``None``.
    """

    def parse(self, message: str) -> ParsedCommit:
        """Parse a full commit message.

        Args:
            message: The raw commit message, body and trailers included.

        Returns:
            The extracted fields.
        """
        lines = _split_lines(message)
        first = lines.pop(0)

        pull_number = pull_fork_owner = pull_branch = None
        merge_match = MERGE_PATTERN.match(first)
        if merge_match:
            pull_number = merge_match.group('number') or None
            pull_fork_owner = merge_match.group('owner') or None
            pull_branch = merge_match.group('branch') or None
            header = ''
            while lines and not header.strip():
                header = lines.pop(0)
        else:
            header = first

        cc_type = scope = subject = None
        header_match = HEADER_PATTERN.match(header)
        if header_match:
            cc_type = header_match.group('type') or None
            scope = header_match.group('scope') or None
            subject = header_match.group('subject') or None

        return ParsedCommit(
            type=cc_type,
            scope=scope,
            subject=subject,
            pull_number=pull_number,
            pull_fork_owner=pull_fork_owner,
            pull_branch=pull_branch,
            notes=_collect_notes(lines),
        )
