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

"""Commit message classification.

Turns one raw commit message into a :class:`ParsedCommit` and defines
the bump levels the changeset builder aggregates.

Usage::

    from releasepr.commit_parsing import classify

    parsed = classify('Merge pull request #123 from probot/typings\\n\\nfeat(ts): Add typings')
    assert parsed.type == 'feat'
    assert parsed.scope == 'ts'
    assert parsed.pull_number == '123'
"""

from releasepr.commit_parsing._conventional import ConventionalCommitParser
from releasepr.commit_parsing._types import (
    BUMP_ORDER,
    SEMVER_LABEL_PREFIX,
    BumpLevel,
    Note,
    ParsedCommit,
    RawCommit,
    max_bump,
)

# Module-level singleton for convenience.
_DEFAULT_PARSER = ConventionalCommitParser()


def classify(message: str) -> ParsedCommit:
    """Classify a single commit message.

    Convenience wrapper around :meth:`ConventionalCommitParser.parse`.

    Args:
        message: The full commit message.

    Returns:
        A :class:`ParsedCommit`; ``type`` is ``None`` for messages that
        are not conventional commits.
    """
    return _DEFAULT_PARSER.parse(message)


__all__ = [
    'BUMP_ORDER',
    'SEMVER_LABEL_PREFIX',
    'BumpLevel',
    'ConventionalCommitParser',
    'Note',
    'ParsedCommit',
    'RawCommit',
    'classify',
    'max_bump',
]
