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

"""Value types exchanged with forge backends."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from releasepr.commit_parsing import RawCommit
from releasepr.refs import Ref


@dataclass(frozen=True)
class CommandResult:
    """Result of one forge API call.

    Attributes:
        command: Method and URL of the request, e.g. ``['PATCH', url]``.
        return_code: ``0`` on success, otherwise the HTTP status code, or
            ``-1`` when no response arrived.
        stdout: Response body on success.
        stderr: Response body on failure.
    """

    command: list[str]
    return_code: int
    stdout: str = ''
    stderr: str = ''

    @property
    def ok(self) -> bool:
        """Whether the call succeeded."""
        return self.return_code == 0

    @property
    def command_str(self) -> str:
        """The request as a single string, for log lines."""
        return ' '.join(self.command)


class MergeStatus(Enum):
    """Outcome of asking the forge to merge one branch into another."""

    MERGED = 'merged'
    CONFLICT = 'conflict'
    FAILED = 'failed'


@dataclass(frozen=True)
class MergeResult:
    """Outcome of a merge plus the raw call result for diagnostics."""

    status: MergeStatus
    result: CommandResult


@dataclass(frozen=True)
class CommitRange:
    """Commits between two refs as reported by a compare call.

    Attributes:
        commits: Commits returned, oldest first.
        total: How many commits the range really contains. The compare
            API caps its response, so ``total`` may exceed ``len(commits)``.
    """

    commits: list[RawCommit]
    total: int

    @property
    def truncated(self) -> bool:
        """Whether the forge returned fewer commits than the range holds."""
        return self.total > len(self.commits)


@dataclass(frozen=True)
class PullRequest:
    """An open pull request as seen by the bot.

    Attributes:
        number: PR number.
        head: Head branch and sha.
        base: Base branch name.
        author: Login of the user (or app) that opened it.
        labels: Current label names.
        body: Current body markdown.
        url: Browser URL.
    """

    number: int
    head: Ref
    base: str = ''
    author: str = ''
    labels: frozenset[str] = field(default_factory=frozenset)
    body: str = ''
    url: str = ''


__all__ = [
    'CommandResult',
    'CommitRange',
    'MergeResult',
    'MergeStatus',
    'PullRequest',
]
