"""
renderbatch CLI - thin entrypoint for the external renderer.

Commands:
- locate: Print the render executable that would be used
- aerender: Render saved project files out of process, in order

Design principles:
- CLI is a dispatcher only
- Surface errors verbatim from the worker layer
- Exit non-zero on failure

Exit codes:
- 0: Success
- 2: Worker execution error
- 4: System error (executable or project file not found)
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, NoReturn, Optional

from .config import RenderBatchSettings
from .worker.discovery import discover_aerender
from .worker.errors import WorkerExecutionError, WorkerNotFoundError
from .worker.process import ExternalRenderWorker, FailurePolicy


def _resolve_executable(args: argparse.Namespace, settings: RenderBatchSettings) -> str:
    if args.executable:
        return args.executable
    if settings.aerender_path:
        return settings.aerender_path
    try:
        return discover_aerender()
    except WorkerNotFoundError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(4)


def cmd_locate(args: argparse.Namespace) -> NoReturn:
    """Print the render executable path."""
    settings = RenderBatchSettings.from_env()
    print(_resolve_executable(args, settings))
    sys.exit(0)


def cmd_aerender(args: argparse.Namespace) -> NoReturn:
    """
    Render project files through the external renderer.

    Writes one JSON result per invocation to stdout.

    Exit codes:
        0: Every project rendered
        2: At least one invocation failed
        4: Executable or project file not found
    """
    settings = RenderBatchSettings.from_env()

    projects = [Path(p).resolve() for p in args.projects]
    missing = [str(p) for p in projects if not p.is_file()]
    if missing:
        print(f"ERROR: Project file(s) not found: {', '.join(missing)}", file=sys.stderr)
        sys.exit(4)

    failure_policy = settings.failure_policy
    if args.continue_on_failure:
        failure_policy = FailurePolicy.CONTINUE

    fixed_flags = [] if args.no_default_flags else settings.worker_flags
    worker = ExternalRenderWorker(
        _resolve_executable(args, settings),
        fixed_flags=fixed_flags,
        failure_policy=failure_policy,
    )
    for project in projects:
        worker.enqueue_project(str(project))

    try:
        results = worker.run_all()
        exit_code = 0
    except WorkerExecutionError as e:
        print(f"✗ {e}", file=sys.stderr)
        results = e.results
        exit_code = 2

    for result in results:
        print(json.dumps(result.model_dump(mode="json")))
    sys.exit(exit_code)


def main(argv: Optional[List[str]] = None) -> NoReturn:
    """
    Main CLI entrypoint.

    Parses arguments and dispatches to subcommands.
    """
    parser = argparse.ArgumentParser(
        prog='renderbatch',
        description='renderbatch - batch rendering through the host render queue',
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    subparsers = parser.add_subparsers(dest='command', required=True, help='Command to execute')

    # Locate command
    parser_locate = subparsers.add_parser(
        'locate',
        help='Print the render executable that would be used'
    )
    parser_locate.add_argument(
        '--executable',
        default=None,
        help='Use this executable instead of discovering one'
    )
    parser_locate.set_defaults(func=cmd_locate)

    # Aerender command
    parser_aerender = subparsers.add_parser(
        'aerender',
        help='Render saved project files through the external renderer'
    )
    parser_aerender.add_argument(
        'projects',
        nargs='+',
        help='Project files to render, in order'
    )
    parser_aerender.add_argument(
        '--executable',
        default=None,
        help='Render executable (default: discovered)'
    )
    parser_aerender.add_argument(
        '--continue-on-failure',
        action='store_true',
        help='Keep rendering remaining projects after a failure'
    )
    parser_aerender.add_argument(
        '--no-default-flags',
        action='store_true',
        help='Do not pass -continueOnMissingFootage'
    )
    parser_aerender.set_defaults(func=cmd_aerender)

    # Parse and dispatch
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    args.func(args)


if __name__ == '__main__':
    main()
