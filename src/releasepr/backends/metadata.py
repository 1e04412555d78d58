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

"""Issue-body metadata blocks.

Bots conventionally keep per-issue state in a hidden HTML comment at the
end of the issue body::

    <release notes ...>

    <!-- releasepr = {"locked_bc_merge_conflict": true} -->

Readers never see it, and it travels with the issue. The helpers here are
pure string functions; the GitHub backend uses them to implement
:class:`~releasepr.backends.forge.MetadataStore` and to keep the block
intact when the PR body is rewritten.
"""

from __future__ import annotations

import json
import re

METADATA_PATTERN: re.Pattern[str] = re.compile(r'\n\n<!-- releasepr = (?P<data>.*) -->', re.DOTALL)


def read_metadata(body: str) -> dict[str, object]:
    """Return the metadata stored in ``body`` (empty if none or unreadable)."""
    match = METADATA_PATTERN.search(body or '')
    if not match:
        return {}
    try:
        data = json.loads(match.group('data'))
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def strip_metadata(body: str) -> str:
    """Return ``body`` without its metadata block."""
    return METADATA_PATTERN.sub('', body or '')


def write_metadata(body: str, data: dict[str, object]) -> str:
    """Return ``body`` with its metadata block replaced by ``data``."""
    if not data:
        return strip_metadata(body)
    return f'{strip_metadata(body)}\n\n<!-- releasepr = {json.dumps(data, sort_keys=True)} -->'


def carry_metadata(old_body: str, new_body: str) -> str:
    """Return ``new_body`` carrying over the metadata block of ``old_body``."""
    return write_metadata(new_body, read_metadata(old_body))


__all__ = [
    'METADATA_PATTERN',
    'carry_metadata',
    'read_metadata',
    'strip_metadata',
    'write_metadata',
]
