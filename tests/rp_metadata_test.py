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

"""Tests for releasepr.backends.metadata module."""

from __future__ import annotations

from releasepr.backends.metadata import carry_metadata, read_metadata, strip_metadata, write_metadata

BODY = '## Features\n\n* a'
BLOCK = '\n\n<!-- releasepr = {"locked_bc_merge_conflict": true} -->'


class TestReadMetadata:
    """Tests for read_metadata."""

    def test_present(self) -> None:
        """The hidden block is decoded into a dict."""
        assert read_metadata(BODY + BLOCK) == {'locked_bc_merge_conflict': True}

    def test_absent(self) -> None:
        """A body without a block, or an empty body, reads as no metadata."""
        assert read_metadata(BODY) == {}
        assert read_metadata('') == {}

    def test_garbage_json(self) -> None:
        """An undecodable block reads as no metadata."""
        assert read_metadata(BODY + '\n\n<!-- releasepr = {nope -->') == {}

    def test_non_object_json(self) -> None:
        """A block holding a JSON array reads as no metadata."""
        assert read_metadata(BODY + '\n\n<!-- releasepr = [1, 2] -->') == {}


class TestWriteMetadata:
    """Tests for write_metadata and strip_metadata."""

    def test_appends_block(self) -> None:
        """The block is appended after the visible body."""
        assert write_metadata(BODY, {'locked_bc_merge_conflict': True}) == BODY + BLOCK

    def test_replaces_block(self) -> None:
        """Writing again replaces the block instead of adding a second one."""
        body = write_metadata(BODY + BLOCK, {'locked_bc_merge_conflict': False})
        assert body.count('<!-- releasepr') == 1
        assert read_metadata(body) == {'locked_bc_merge_conflict': False}

    def test_empty_data_strips(self) -> None:
        """Writing no data removes the block."""
        assert write_metadata(BODY + BLOCK, {}) == BODY

    def test_strip(self) -> None:
        """strip_metadata removes the block and leaves plain bodies alone."""
        assert strip_metadata(BODY + BLOCK) == BODY
        assert strip_metadata(BODY) == BODY


class TestCarryMetadata:
    """Tests for carry_metadata."""

    def test_keeps_lock_across_rewrite(self) -> None:
        """The lock flag survives a full body rewrite."""
        new_body = carry_metadata(BODY + BLOCK, '## Bug Fixes\n\n* b')
        assert new_body.startswith('## Bug Fixes')
        assert read_metadata(new_body) == {'locked_bc_merge_conflict': True}

    def test_nothing_to_carry(self) -> None:
        """A body without a block passes the new body through unchanged."""
        assert carry_metadata(BODY, 'new') == 'new'
