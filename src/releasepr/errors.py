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

"""Structured error system for releasepr.

Every error has a unique ``RP-NAMED-KEY`` code, a human-readable message,
and an optional hint with a suggested fix.

Routine conditions are *not* errors here: an unparseable commit is
skipped, a rejected fast-forward falls back to a merge, and a merge
conflict locks the release PR. Only unexpected failures from a forge call
(or bad input such as a broken config file) surface as
:class:`ReleasePRError`.

Code categories::

    RP-CONFIG-*       Configuration errors
    RP-EVENT-*        Malformed webhook / CLI events
    RP-FORGE-*        Unexpected responses from the hosting platform
    RP-MERGE-*        Merge failures other than conflicts
    RP-REF-*          Branch creation errors
    RP-PR-*           Pull request creation errors
    RP-RANGE-*        Commit range lookup errors

Usage::

    from releasepr.errors import ReleasePRError, E

    raise ReleasePRError(
        code=E.MERGE_FAILED,
        message='Merging develop into release/42 failed with HTTP 404',
        hint='Check that both branches still exist.',
    )
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

from rich.console import Console
from rich.markup import escape as rich_escape


class ErrorCode(str, Enum):
    """Enumeration of all releasepr diagnostic codes."""

    # Configuration
    CONFIG_INVALID_KEY = 'RP-CONFIG-INVALID-KEY'
    CONFIG_INVALID_VALUE = 'RP-CONFIG-INVALID-VALUE'
    CONFIG_UNREADABLE = 'RP-CONFIG-UNREADABLE'
    CONFIG_MISSING_REPO = 'RP-CONFIG-MISSING-REPO'

    # Events
    EVENT_INVALID = 'RP-EVENT-INVALID'

    # Forge
    FORGE_REQUEST_FAILED = 'RP-FORGE-REQUEST-FAILED'
    FORGE_PR_NOT_FOUND = 'RP-FORGE-PR-NOT-FOUND'
    FORGE_NO_TOKEN = 'RP-FORGE-NO-TOKEN'

    # Release branch maintenance
    MERGE_FAILED = 'RP-MERGE-FAILED'
    REF_CREATE_FAILED = 'RP-REF-CREATE-FAILED'
    PR_CREATE_FAILED = 'RP-PR-CREATE-FAILED'
    RANGE_BASE_NOT_FOUND = 'RP-RANGE-BASE-NOT-FOUND'


# Convenience alias for shorter imports.
E = ErrorCode


@dataclass(frozen=True)
class ErrorInfo:
    """Metadata for a single error code.

    Attributes:
        code: The ``RP-NAMED-KEY`` error code.
        message: Human-readable description of what went wrong.
        hint: Optional suggestion for how to fix the error.
    """

    code: ErrorCode
    message: str
    hint: str = ''


class ReleasePRError(Exception):
    """Base exception for all releasepr errors.

    Args:
        code: The error code from :class:`ErrorCode`.
        message: Human-readable description of what went wrong.
        hint: Optional suggestion for how to fix the error.
    """

    def __init__(self, code: ErrorCode, message: str, hint: str = '') -> None:
        """Initialize with an error code, message, and optional hint."""
        self.info = ErrorInfo(code=code, message=message, hint=hint)
        super().__init__(f'[{code.value}] {message}')

    @property
    def code(self) -> ErrorCode:
        """The error code."""
        return self.info.code

    @property
    def hint(self) -> str:
        """Suggestion for fixing this error, or empty string."""
        return self.info.hint


ERRORS: dict[ErrorCode, ErrorInfo] = {
    E.CONFIG_INVALID_KEY: ErrorInfo(
        code=E.CONFIG_INVALID_KEY,
        message='releasepr.toml contains a key releasepr does not recognize.',
        hint='Check the spelling; the error message suggests the closest valid key.',
    ),
    E.CONFIG_INVALID_VALUE: ErrorInfo(
        code=E.CONFIG_INVALID_VALUE,
        message='A key in releasepr.toml has a value of the wrong type or out of range.',
        hint='Branch names and labels are strings; http_pool_size is an integer of at least 1.',
    ),
    E.CONFIG_UNREADABLE: ErrorInfo(
        code=E.CONFIG_UNREADABLE,
        message='releasepr.toml exists but could not be read or is not valid TOML.',
        hint='Check file permissions and run the file through a TOML validator.',
    ),
    E.CONFIG_MISSING_REPO: ErrorInfo(
        code=E.CONFIG_MISSING_REPO,
        message='Could not determine which repository to operate on.',
        hint='Pass --repo owner/name, set repo_owner/repo_name in releasepr.toml, or set GITHUB_REPOSITORY.',
    ),
    E.EVENT_INVALID: ErrorInfo(
        code=E.EVENT_INVALID,
        message='The push event payload is missing "ref" or "after".',
        hint='Pass the raw GitHub push webhook payload (GITHUB_EVENT_PATH in Actions).',
    ),
    E.FORGE_REQUEST_FAILED: ErrorInfo(
        code=E.FORGE_REQUEST_FAILED,
        message='A GitHub API call failed or returned a body that could not be parsed.',
        hint='Check the token permissions (contents, pull requests, issues: write) and githubstatus.com.',
    ),
    E.FORGE_PR_NOT_FOUND: ErrorInfo(
        code=E.FORGE_PR_NOT_FOUND,
        message='The pull request to regenerate does not exist in the repository.',
        hint='Check the PR number and that --repo points at the right repository.',
    ),
    E.FORGE_NO_TOKEN: ErrorInfo(
        code=E.FORGE_NO_TOKEN,
        message='No GitHub API token was found.',
        hint='Set GITHUB_TOKEN (or GH_TOKEN) to a token that can write contents, pull requests and issues.',
    ),
    E.MERGE_FAILED: ErrorInfo(
        code=E.MERGE_FAILED,
        message='The hosting platform refused to merge the default branch into the release branch.',
        hint='A merge conflict locks the PR instead; this error means something else went wrong (missing branch, permissions).',
    ),
    E.REF_CREATE_FAILED: ErrorInfo(
        code=E.REF_CREATE_FAILED,
        message='Creating the release branch failed.',
        hint='The token needs contents: write on the repository.',
    ),
    E.PR_CREATE_FAILED: ErrorInfo(
        code=E.PR_CREATE_FAILED,
        message='Opening the release pull request failed.',
        hint='The token needs pull requests: write. GitHub also refuses a second open PR for the same head and base.',
    ),
    E.RANGE_BASE_NOT_FOUND: ErrorInfo(
        code=E.RANGE_BASE_NOT_FOUND,
        message='Walking the commit history never reached the base branch.',
        hint='The release branch may not share history with the base branch.',
    ),
}


def explain(code: str) -> str | None:
    """Return a detailed explanation for an error code.

    Args:
        code: The error code string, e.g. ``"RP-MERGE-FAILED"``.

    Returns:
        A formatted explanation string, or ``None`` if the code is unknown.
    """
    try:
        error_code = ErrorCode(code)
    except ValueError:
        return None

    info = ERRORS.get(error_code)
    if info is None:
        return f'{code}: No detailed explanation available.'

    lines = [f'{code}: {info.message}']
    if info.hint:
        lines.append(f'  Hint: {info.hint}')
    return '\n'.join(lines)


def render_error(exc: ReleasePRError, *, file: TextIO | None = None) -> None:
    """Render an error in compiler style, colored when writing to a TTY.

    Output format::

        error[RP-MERGE-FAILED]: Merging develop into release/42 failed.
          |
          = hint: Check that both branches still exist.

    Args:
        exc: The error to render.
        file: Output stream (defaults to ``sys.stderr``).
    """
    out = file or sys.stderr

    if out.isatty():
        console = Console(file=out, highlight=False)
        msg = rich_escape(exc.info.message)
        console.print(
            f'[bold red]error[/bold red][bold red]\\[{exc.code.value}][/bold red][bold]: {msg}[/bold]',
        )
        if exc.hint:
            hint = rich_escape(exc.hint)
            console.print('  [dim]|[/dim]')
            console.print(f'  [dim]=[/dim] [cyan]hint[/cyan]: {hint}')
        console.print()
    else:
        print(f'error[{exc.code.value}]: {exc.info.message}', file=out)  # noqa: T201 - CLI output
        if exc.hint:
            print('  |', file=out)  # noqa: T201 - CLI output
            print(f'  = hint: {exc.hint}', file=out)  # noqa: T201 - CLI output
        print(file=out)  # noqa: T201 - CLI output


__all__ = [
    'E',
    'ERRORS',
    'ErrorCode',
    'ErrorInfo',
    'ReleasePRError',
    'explain',
    'render_error',
]
