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

"""Branch + commit pointers.

Push payloads spell branches as ``refs/heads/develop``, the git data API
wants ``heads/develop`` and the pulls API returns plain ``develop``.
:class:`Ref` accepts any of the three and keeps only the branch name.

Usage::

    from releasepr.refs import Ref

    ref = Ref('refs/heads/develop', 'c0ffee1234567890')
    ref.branch     # 'develop'
    ref.ref        # 'refs/heads/develop'
    ref.short_sha  # 'c0ffee12'
"""

from __future__ import annotations

from dataclasses import dataclass

_PREFIXES: tuple[str, ...] = ('refs/heads/', 'heads/')

SHORT_SHA_LENGTH = 8


def normalize_branch(name: str) -> str:
    """Strip a ``refs/heads/`` or ``heads/`` prefix from a branch name."""
    for prefix in _PREFIXES:
        if name.startswith(prefix):
            return name[len(prefix) :]
    return name


@dataclass(frozen=True, init=False)
class Ref:
    """An immutable branch name and the commit it points at.

    Attributes:
        branch: Canonical branch name (no ``refs/heads/`` prefix).
        sha: Full commit sha, or ``''`` when unknown.
    """

    branch: str
    sha: str

    def __init__(self, branch: str, sha: str = '') -> None:
        """Normalize ``branch`` and store it with ``sha``."""
        object.__setattr__(self, 'branch', normalize_branch(branch))
        object.__setattr__(self, 'sha', sha)

    @property
    def ref(self) -> str:
        """Fully qualified ref, e.g. ``refs/heads/develop``."""
        return f'refs/heads/{self.branch}'

    @property
    def short_sha(self) -> str:
        """First eight characters of the sha, for log lines."""
        return self.sha[:SHORT_SHA_LENGTH]


__all__ = [
    'Ref',
    'normalize_branch',
]
