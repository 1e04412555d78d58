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

"""Pure types for commit message parsing.

This module has **zero** runtime dependencies beyond the standard library.
Everything here is a frozen dataclass or enum with no I/O and no
side effects.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class BumpLevel(Enum):
    """Semver bump levels implied by a set of commits.

    ``UNKNOWN`` means at least one commit used a type nobody mapped to a
    severity. It ranks *above* ``MAJOR`` so that an unrecognized type
    always forces a human to look at the release.
    """

    NONE = 'none'
    PATCH = 'patch'
    MINOR = 'minor'
    MAJOR = 'major'
    UNKNOWN = 'unknown'

    @property
    def rank(self) -> int:
        """Position in the ordering NONE < PATCH < MINOR < MAJOR < UNKNOWN."""
        return BUMP_ORDER.index(self)

    @property
    def label(self) -> str:
        """The PR label carrying this bump, e.g. ``semver-minor``."""
        return f'{SEMVER_LABEL_PREFIX}{self.value}'


# Lowest first.
BUMP_ORDER: list[BumpLevel] = [
    BumpLevel.NONE,
    BumpLevel.PATCH,
    BumpLevel.MINOR,
    BumpLevel.MAJOR,
    BumpLevel.UNKNOWN,
]

SEMVER_LABEL_PREFIX = 'semver-'


def max_bump(a: BumpLevel, b: BumpLevel) -> BumpLevel:
    """Return the more severe of two bump levels.

    >>> max_bump(BumpLevel.MINOR, BumpLevel.PATCH)
    <BumpLevel.MINOR: 'minor'>
    >>> max_bump(BumpLevel.MAJOR, BumpLevel.UNKNOWN)
    <BumpLevel.UNKNOWN: 'unknown'>
    """
    return a if a.rank >= b.rank else b


@dataclass(frozen=True)
class RawCommit:
    """A commit as returned by the hosting platform.

    Attributes:
        message: Full commit message (header, body and trailers).
        sha: The commit sha.
    """

    message: str
    sha: str = ''


@dataclass(frozen=True)
class Note:
    """A trailer note such as ``BREAKING CHANGE: drops Node 8``.

    Attributes:
        title: The keyword as written in the message.
        text: Everything after the keyword, continuation lines included.
    """

    title: str
    text: str


@dataclass(frozen=True)
class ParsedCommit:
    """Structured fields extracted from one commit message.

    All string fields are ``None`` when the message did not provide them.
    A ``type`` of ``None`` means the message is not a conventional commit
    and is left out of changelogs and bump computation.

    Attributes:
        type: Commit type exactly as written (``"feat"``, ``"BREAKING CHANGE"``).
        scope: Optional scope from ``type(scope): ...``.
        subject: Text after the colon.
        pull_number: PR number from a ``Merge pull request #N`` line.
        pull_fork_owner: Owner of the merged branch.
        pull_branch: Name of the merged branch.
        notes: Trailer notes in message order.
    """

    type: str | None = None
    scope: str | None = None
    subject: str | None = None
    pull_number: str | None = None
    pull_fork_owner: str | None = None
    pull_branch: str | None = None
    notes: tuple[Note, ...] = ()
