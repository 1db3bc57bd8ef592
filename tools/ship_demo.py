#!/usr/bin/env python3
"""
Remote Logger demo CLI
Ships a handful of console messages to the ingest service and reports the
delivery statistics
"""

import argparse
import asyncio
import json
import os
import sys

import httpx
from rich.console import Console
from rich.table import Table

from remote_logger import DEFAULT_INGEST_URL, RemoteLogger

# Rich console writes straight to the terminal, so it is not mirrored remotely
console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Remote Logger demo")
    parser.add_argument("--package-name",
                       default=os.getenv("REMOTE_LOGGER_PACKAGE_NAME", "com.demo.app"),
                       help="Log stream identifier")
    parser.add_argument("--password",
                       default=os.getenv("REMOTE_LOGGER_PASSWORD"),
                       help="Password; omit for anonymous mode")
    parser.add_argument("--new-account", action="store_true",
                       help="Ask the auth endpoint to create the account")
    parser.add_argument("--table-name", default="logs",
                       help="Destination label")
    parser.add_argument("--buffer-size", type=int, default=1,
                       help="Entries per batch")
    parser.add_argument("--flush-interval", type=int, default=5000,
                       help="Milliseconds between timed flushes")
    parser.add_argument("--ingest-url",
                       default=os.getenv("REMOTE_LOGGER_INGEST_URL", DEFAULT_INGEST_URL),
                       help="Ingest host")
    parser.add_argument("--delay", type=float, default=2.0,
                       help="Seconds before the late message")
    parser.add_argument("--json", action="store_true",
                       help="Output statistics as JSON")
    return parser


async def run_demo(args: argparse.Namespace, client: httpx.AsyncClient | None = None) -> dict:
    """Log the demo messages through an overridden print and return stats."""
    remote = RemoteLogger(
        package_name=args.package_name,
        password=args.password,
        is_new_account=args.new_account,
        table_name=args.table_name,
        buffer_size=args.buffer_size,
        flush_interval=args.flush_interval,
        ingest_url=args.ingest_url,
        client=client,
    )
    restore = remote.override_console()
    try:
        # Let the initial handshake finish before the first batch
        await remote.wait_idle()

        print("Hello from Remote Logger Demo!")
        print("This is a warning message", {"code": 123})
        print("Something went wrong!", {"error": "Unknown failed"}, file=sys.stderr)
        print("Complex object", {"user": {"id": 1, "name": "Test"}, "action": "login"})

        await asyncio.sleep(args.delay)
        print(f"Async log after {args.delay:g} seconds")
    finally:
        restore()
        await remote.close()

    return remote.get_stats()


def display_stats(stats: dict):
    table = Table(title="Delivery Statistics", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    for key, value in stats.items():
        table.add_row(key, "-" if value is None else str(value))
    console.print(table)


async def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        stats = await run_demo(args)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    if args.json:
        console.print_json(json.dumps(stats, default=str))
    else:
        display_stats(stats)

    return 0 if stats["session_state"] != "disabled" else 2


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
