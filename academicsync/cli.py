"""
CLI (Command Line Interface).

Runs one adapter operation against a live back-end and prints the
normalized records as JSON, e.g.:

    academicsync portal class-schedules --cookie JSESSIONID=...
    academicsync transcript passed-courses --out passed.json
    academicsync portal taken-surveys --verbose

Note:
- There is no login flow: pass the cookies of an existing session
- Exit codes: 0 ok, 1 parse/fetch failure, 2 usage error, 3 session expired
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests
from rich.console import Console

from academicsync.adapters import SourceAdapter, create_adapter
from academicsync.errors import AcademicSyncError, SessionExpiredError
from academicsync.fetch import DEFAULT_TIMEOUT, PageFetcher
from academicsync.reporting import ErrorReporter
from academicsync.storage import records_to_json, save_records


console = Console()
err_console = Console(stderr=True)

DEFAULT_BASE_URLS: Dict[str, str] = {
    "transcript": "https://guarani.frba.utn.edu.ar",
    "portal": "https://siga.frba.utn.edu.ar",
}

OPERATIONS: Dict[str, str] = {
    "start-year": "get_start_year",
    "student-id": "get_student_id",
    "class-schedules": "get_class_schedules",
    "passed-courses": "get_passed_courses",
    "professor-classes": "get_professor_classes_from_surveys",
    "taken-surveys": "get_taken_surveys",
}


def _parse_cookies(values: List[str]) -> Dict[str, str]:
    """
    Turn repeated NAME=VALUE flags into a dict.
    """
    cookies: Dict[str, str] = {}
    for value in values:
        name, sep, cookie = value.partition("=")
        if not sep or not name.strip():
            raise argparse.ArgumentTypeError(f"Invalid cookie (expected NAME=VALUE): {value!r}")
        cookies[name.strip()] = cookie.strip()
    return cookies


def build_adapter(args: argparse.Namespace) -> SourceAdapter:
    session = requests.Session()
    for name, value in _parse_cookies(args.cookie).items():
        session.cookies.set(name, value)

    base_url = args.base_url or DEFAULT_BASE_URLS[args.source]
    fetcher = PageFetcher(base_url, session=session, timeout=args.timeout)
    return create_adapter(args.source, fetcher, ErrorReporter())


async def run_operation(adapter: SourceAdapter, operation: str) -> Any:
    return await getattr(adapter, OPERATIONS[operation])()


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser.
    """
    parser = argparse.ArgumentParser(prog="academicsync", description="Academic records extractor")
    parser.add_argument("source", choices=sorted(DEFAULT_BASE_URLS), help="Source system")
    parser.add_argument("operation", choices=list(OPERATIONS), help="Records to extract")
    parser.add_argument("--base-url", type=str, default=None, help="Override the source base URL")
    parser.add_argument(
        "--cookie",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Session cookie to send (repeatable)",
    )
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help="Request timeout in seconds")
    parser.add_argument("--out", type=str, default=None, help="Also write the JSON output to this file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """
    CLI entry point. Exits via SystemExit with the return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        adapter = build_adapter(args)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))

    try:
        records = asyncio.run(run_operation(adapter, args.operation))
    except SessionExpiredError:
        err_console.print("[yellow]Session expired, please log in again.[/yellow]")
        raise SystemExit(3)
    except (AcademicSyncError, requests.RequestException) as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    console.print_json(records_to_json(records))
    if args.out:
        out = save_records(records, args.out)
        err_console.print(f"Written to: {out}")

    raise SystemExit(0)
