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

"""Command-line interface for releasepr.

Subcommands::

    releasepr sync [--event PATH]     Handle a push event (GitHub Actions: $GITHUB_EVENT_PATH)
    releasepr regenerate PR           Rewrite the release notes of a PR
    releasepr changelog BASE HEAD     Print the changelog for a commit range
    releasepr explain CODE            Describe an RP-* error code

The repository is taken from ``--repo owner/name``, then ``repo_owner`` /
``repo_name`` in ``releasepr.toml``, then the event payload, then
``$GITHUB_REPOSITORY``.

Usage::

    $ GITHUB_TOKEN=... releasepr --repo probot/probot sync --event push.json
    created
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path

from rich_argparse import RichHelpFormatter

from releasepr import __version__
from releasepr.backends import GitHubAPIBackend
from releasepr.changelog import generate_changelog
from releasepr.config import RepoConfig, load_config
from releasepr.errors import E, ReleasePRError, explain, render_error
from releasepr.history import commits_between
from releasepr.logging import configure_logging, get_logger
from releasepr.sync import PushEvent, SyncContext, handle_push, regenerate

logger = get_logger(__name__)


def _resolve_repo(args: argparse.Namespace, cfg: RepoConfig, event_repo: str = '') -> tuple[str, str]:
    """Return ``(owner, name)`` for the repository to operate on."""
    candidates = [
        args.repo or '',
        f'{cfg.repo_owner}/{cfg.repo_name}' if cfg.repo_owner and cfg.repo_name else '',
        event_repo,
        os.environ.get('GITHUB_REPOSITORY', ''),
    ]
    for candidate in candidates:
        if not candidate:
            continue
        owner, _, name = candidate.partition('/')
        if not owner or not name or '/' in name:
            raise ReleasePRError(
                code=E.CONFIG_MISSING_REPO,
                message=f"Repository '{candidate}' is not of the form owner/name",
            )
        return owner, name
    raise ReleasePRError(
        code=E.CONFIG_MISSING_REPO,
        message='No repository given',
        hint='Pass --repo owner/name or set GITHUB_REPOSITORY.',
    )


def _build_forge(owner: str, name: str, cfg: RepoConfig) -> GitHubAPIBackend:
    try:
        return GitHubAPIBackend(owner, name, pool_size=cfg.http_pool_size)
    except ValueError as exc:
        raise ReleasePRError(code=E.FORGE_NO_TOKEN, message=str(exc)) from exc


def _read_event(path_arg: str | None) -> PushEvent:
    path = path_arg or os.environ.get('GITHUB_EVENT_PATH', '')
    if not path:
        raise ReleasePRError(
            code=E.EVENT_INVALID,
            message='No push event given',
            hint='Pass --event PATH or set GITHUB_EVENT_PATH.',
        )
    try:
        payload = json.loads(Path(path).read_text(encoding='utf-8'))
    except (OSError, ValueError) as exc:
        raise ReleasePRError(code=E.EVENT_INVALID, message=f'Failed to read event {path}: {exc}') from exc
    if not isinstance(payload, dict):
        raise ReleasePRError(code=E.EVENT_INVALID, message=f'Event {path} is not a JSON object')
    return PushEvent.from_payload(payload)


async def _cmd_sync(args: argparse.Namespace) -> int:
    """Handle the ``sync`` subcommand."""
    cfg = load_config(Path.cwd())
    event = _read_event(args.event)
    owner, name = _resolve_repo(args, cfg, event.repository)
    forge = _build_forge(owner, name, cfg)
    outcome = await handle_push(SyncContext(config=cfg, forge=forge, metadata=forge, event=event))
    print(outcome.value)  # noqa: T201 - CLI output
    return 0


async def _cmd_regenerate(args: argparse.Namespace) -> int:
    """Handle the ``regenerate`` subcommand."""
    cfg = load_config(Path.cwd())
    owner, name = _resolve_repo(args, cfg)
    forge = _build_forge(owner, name, cfg)
    outcome = await regenerate(SyncContext(config=cfg, forge=forge, metadata=forge), args.pr)
    print(outcome.value)  # noqa: T201 - CLI output
    return 0


async def _cmd_changelog(args: argparse.Namespace) -> int:
    """Handle the ``changelog`` subcommand."""
    cfg = load_config(Path.cwd())
    owner, name = _resolve_repo(args, cfg)
    forge = _build_forge(owner, name, cfg)
    changelog = generate_changelog(await commits_between(forge, args.base, args.head))
    print(f'Bump: {changelog.bump.value}\n')  # noqa: T201 - CLI output
    print(changelog.text)  # noqa: T201 - CLI output
    return 0


def _cmd_explain(args: argparse.Namespace) -> int:
    """Handle the ``explain`` subcommand."""
    result = explain(args.code)
    if result is None:
        print(f'Unknown error code: {args.code}')  # noqa: T201 - CLI output
        return 1
    print(result)  # noqa: T201 - CLI output
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser.

    Returns:
        Configured :class:`argparse.ArgumentParser`.
    """
    RichHelpFormatter.styles['argparse.groups'] = 'bold yellow'
    parser = argparse.ArgumentParser(
        prog='releasepr',
        description='Keep a release pull request in step with the default branch.',
        formatter_class=RichHelpFormatter,
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}',
    )
    parser.add_argument(
        '--repo',
        metavar='OWNER/NAME',
        default=None,
        help='Repository to operate on. Defaults to releasepr.toml, then $GITHUB_REPOSITORY.',
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging.')
    parser.add_argument('--quiet', '-q', action='store_true', help='Only log warnings and errors.')
    parser.add_argument('--json-log', action='store_true', help='Log JSON lines instead of console output.')

    subparsers = parser.add_subparsers(dest='command')

    sync_parser = subparsers.add_parser(
        'sync',
        help='Update the release PR for a push event.',
    )
    sync_parser.add_argument(
        '--event',
        metavar='PATH',
        default=None,
        help='Push webhook payload (JSON). Defaults to $GITHUB_EVENT_PATH.',
    )

    regenerate_parser = subparsers.add_parser(
        'regenerate',
        help='Rewrite the release notes and semver label of a PR.',
    )
    regenerate_parser.add_argument('pr', type=int, help='Pull request number.')

    changelog_parser = subparsers.add_parser(
        'changelog',
        help='Print the changelog and bump level for a commit range.',
    )
    changelog_parser.add_argument('base', help='Base branch or sha.')
    changelog_parser.add_argument('head', help='Head branch or sha.')

    explain_parser = subparsers.add_parser(
        'explain',
        help='Explain an error code.',
    )
    explain_parser.add_argument('code', help='Error code, e.g. RP-MERGE-FAILED.')

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.

    Args:
        argv: Arguments to parse instead of ``sys.argv[1:]``.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet, json_log=args.json_log)

    try:
        command = args.command
        if command == 'sync':
            return asyncio.run(_cmd_sync(args))
        if command == 'regenerate':
            return asyncio.run(_cmd_regenerate(args))
        if command == 'changelog':
            return asyncio.run(_cmd_changelog(args))
        if command == 'explain':
            return _cmd_explain(args)

        parser.print_help()  # noqa: T201 - CLI output
        print(  # noqa: T201 - CLI output
            f'\n{parser.prog}: error: please provide a command',
            file=sys.stderr,
        )
        return 2

    except ReleasePRError as exc:
        render_error(exc)
        return 1
    except KeyboardInterrupt:
        logger.info('interrupted')
        return 130


def _main() -> None:
    """Wrapper for pyproject.toml [project.scripts] entry point."""
    sys.exit(main())


__all__ = [
    'build_parser',
    'main',
]
