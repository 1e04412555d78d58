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

"""Shared test fakes for releasepr.

Provides reusable fake implementations of the Forge and MetadataStore
protocols so that individual test modules don't need to duplicate
boilerplate classes.

Usage::

    from tests._fakes import OK, FakeForge, FakeMetadataStore

    forge = FakeForge(fast_forward_ok=False)
    store = FakeMetadataStore()
"""

from tests._fakes._forge import (
    BOT as BOT,
    FAIL as FAIL,
    OK as OK,
    FakeForge as FakeForge,
    FakeMetadataStore as FakeMetadataStore,
)

__all__ = [
    'BOT',
    'FAIL',
    'OK',
    'FakeForge',
    'FakeMetadataStore',
]
