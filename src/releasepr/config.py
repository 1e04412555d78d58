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

"""Configuration reader for releasepr.

Reads ``releasepr.toml`` from the repository root and returns a validated
:class:`RepoConfig` dataclass. Every key is optional; a missing file
yields the defaults.

Validation Pipeline::

    releasepr.toml
    ┌──────────────────┐
    │ base_brnch = ... │  ← typo!
    └────────┬─────────┘
             │
             ▼
    ┌──────────────────┐     ┌──────────────────────────────┐
    │ 1. Unknown key   │────→│ RP-CONFIG-INVALID-KEY:       │
    │    detection     │     │ hint: "Did you mean          │
    └────────┬─────────┘     │       'base_branch'?"        │
             │               └──────────────────────────────┘
             ▼
    ┌──────────────────┐     ┌──────────────────────────────┐
    │ 2. Type check    │────→│ RP-CONFIG-INVALID-VALUE:     │
    │    each value    │     │ Expected str, got int        │
    └────────┬─────────┘     └──────────────────────────────┘
             │
             ▼
    ┌──────────────────┐
    │ RepoConfig()     │  ← frozen dataclass, ready to use
    └──────────────────┘

Supported keys in ``releasepr.toml``::

    default_branch        = "develop"            # branch whose pushes are tracked
    base_branch           = "master"             # branch release PRs target
    bot_name              = "semantic-pr[bot]"   # author of release PRs
    release_branch_prefix = "release/"           # prefix for new release branches
    pr_title              = "release branch!"    # title of new release PRs
    marker_label          = "release-candidate"  # label on new release PRs
    repo_owner            = "probot"             # default for --repo
    repo_name             = "probot"
    http_pool_size        = 10                   # httpx connection pool

Usage::

    from releasepr.config import load_config

    cfg = load_config(Path('.'))
    print(cfg.base_branch)  # "master"
"""

from __future__ import annotations

import difflib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomlkit
import tomlkit.exceptions

from releasepr.errors import E, ReleasePRError
from releasepr.logging import get_logger

logger = get_logger(__name__)

# The config file name at the repository root.
CONFIG_FILENAME = 'releasepr.toml'

# All recognized top-level keys in releasepr.toml.
VALID_KEYS: frozenset[str] = frozenset({
    'base_branch',
    'bot_name',
    'default_branch',
    'http_pool_size',
    'marker_label',
    'pr_title',
    'release_branch_prefix',
    'repo_name',
    'repo_owner',
})

_TYPE_MAP: dict[str, type | tuple[type, ...]] = {
    'base_branch': str,
    'bot_name': str,
    'default_branch': str,
    'http_pool_size': int,
    'marker_label': str,
    'pr_title': str,
    'release_branch_prefix': str,
    'repo_name': str,
    'repo_owner': str,
}


@dataclass(frozen=True)
class RepoConfig:
    """Settings for one repository.

    Attributes:
        default_branch: Branch whose pushes keep the release PR current.
        base_branch: Branch release PRs are opened against.
        bot_name: Login that owns release PRs. Only its PRs are adopted.
        release_branch_prefix: Prefix for newly allocated release branches.
            Pushes to branches with this prefix are reserved.
        pr_title: Title for newly opened release PRs.
        marker_label: Label added to newly opened release PRs.
        repo_owner: Repository owner used when ``--repo`` is not given.
        repo_name: Repository name used when ``--repo`` is not given.
        http_pool_size: Connection pool size for the GitHub backend.
        config_path: File the settings were read from, or ``None``.
    """

    default_branch: str = 'develop'
    base_branch: str = 'master'
    bot_name: str = 'semantic-pr[bot]'
    release_branch_prefix: str = 'release/'
    pr_title: str = 'release branch!'
    marker_label: str = 'release-candidate'
    repo_owner: str = ''
    repo_name: str = ''
    http_pool_size: int = 10
    config_path: Path | None = None


def _suggest_key(unknown: str) -> str | None:
    """Return the closest valid key for a typo, or None."""
    matches = difflib.get_close_matches(unknown, VALID_KEYS, n=1, cutoff=0.6)
    return matches[0] if matches else None


def _validate_value_type(key: str, value: Any) -> None:  # noqa: ANN401 - dynamic config
    expected = _TYPE_MAP[key]
    # bool is an int subclass; ``http_pool_size = true`` is still a mistake.
    if isinstance(value, bool) and expected is int:
        expected_ok = False
    else:
        expected_ok = isinstance(value, expected)
    if not expected_ok:
        type_name = expected.__name__ if isinstance(expected, type) else str(expected)
        raise ReleasePRError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"'{key}' must be {type_name}, got {type(value).__name__}",
            hint=f"Check the type of '{key}' in {CONFIG_FILENAME}.",
        )


def load_config(repo_root: Path) -> RepoConfig:
    """Load and validate configuration from ``releasepr.toml``.

    Args:
        repo_root: Directory containing ``releasepr.toml``.

    Returns:
        A validated :class:`RepoConfig`.

    Raises:
        ReleasePRError: If the file is unreadable or contains invalid config.
    """
    config_path = repo_root / CONFIG_FILENAME

    if not config_path.is_file():
        logger.debug('no_releasepr_config', path=str(config_path))
        return RepoConfig()

    try:
        text = config_path.read_text(encoding='utf-8')
    except OSError as exc:
        raise ReleasePRError(
            code=E.CONFIG_UNREADABLE,
            message=f'Failed to read {config_path}: {exc}',
        ) from exc

    try:
        doc = tomlkit.parse(text)
    except tomlkit.exceptions.TOMLKitError as exc:
        raise ReleasePRError(
            code=E.CONFIG_UNREADABLE,
            message=f'Failed to parse {config_path}: {exc}',
        ) from exc

    # unwrap() turns tomlkit items into plain str/int/bool.
    raw: dict[str, Any] = doc.unwrap()  # noqa: ANN401

    for key in raw:
        if key not in VALID_KEYS:
            suggestion = _suggest_key(key)
            raise ReleasePRError(
                code=E.CONFIG_INVALID_KEY,
                message=f"Unknown key '{key}' in {CONFIG_FILENAME}",
                hint=f"Did you mean '{suggestion}'?" if suggestion else 'Check the releasepr docs for valid keys.',
            )

    for key, value in raw.items():
        _validate_value_type(key, value)

    if 'http_pool_size' in raw and raw['http_pool_size'] < 1:
        raise ReleasePRError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"'http_pool_size' must be at least 1, got {raw['http_pool_size']}",
        )

    logger.debug('releasepr_config_loaded', path=str(config_path), keys=sorted(raw))
    return RepoConfig(**raw, config_path=config_path)


__all__ = [
    'CONFIG_FILENAME',
    'VALID_KEYS',
    'RepoConfig',
    'load_config',
]
