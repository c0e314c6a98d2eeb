"""Entry point for the webring directory — `webring` console script."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from webring.config import settings
from webring.health.classifier import ClassifierPatterns, classify_site
from webring.ring.registry import MemberConfigError, load_members

console = Console()


def run_server() -> None:
    """Start the FastAPI server."""
    console.print(
        Panel.fit(
            f"[bold]Webring[/bold]\n"
            f"Bind:    {settings.api_host}:{settings.api_port}\n"
            f"Members: {settings.members_file}\n"
            f"Domain:  {settings.ring_domain}\n"
            f"Commit:  {settings.commit}",
            title="webring",
            border_style="green",
        )
    )
    uvicorn.run(
        "webring.api.server:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


def run_check(url: str) -> None:
    """Classify a single site and print the result."""
    patterns = ClassifierPatterns(domain=settings.ring_domain, ring_name=settings.ring_name)
    with console.status(f"[bold green]Checking {url}..."):
        status = classify_site(url, patterns=patterns, timeout=settings.request_timeout)

    style = "green" if status.is_healthy else "red"
    console.print(f"[{style}]{status.value}[/{style}] — {status.description}")


def show_members(path: str) -> None:
    """Validate the member file and list its entries."""
    try:
        members = load_members(Path(path))
    except MemberConfigError as e:
        console.print(f"[bold red]Invalid member file:[/bold red] {e}")
        sys.exit(1)

    table = Table(title=f"{len(members)} members")
    table.add_column("id", style="cyan")
    table.add_column("name")
    table.add_column("url", style="dim")
    for m in members:
        table.add_row(m.id, m.name, m.url)
    console.print(table)


def main() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    parser = argparse.ArgumentParser(description="Webring directory service")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("serve", help="Start the API server")

    check_parser = sub.add_parser("check", help="Classify one site's ring integration")
    check_parser.add_argument("url", help="Site URL to fetch")

    members_parser = sub.add_parser("members", help="Validate and list the member file")
    members_parser.add_argument("--file", default=settings.members_file, help="Member YAML file")

    args = parser.parse_args()

    if args.command == "serve":
        run_server()
    elif args.command == "check":
        run_check(args.url)
    elif args.command == "members":
        show_members(args.file)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
