# shopez/cli/runner.py

"""Headless diagnostics printed with Rich."""

import logging

from rich.console import Console
from rich.table import Table

from shopez.services.health_checker import HealthChecker

logger = logging.getLogger("shopez.cli")

_err = Console(stderr=True)


async def run_health_check() -> int:
    """Probe every remote service and print a status table.

    Returns 1 if any endpoint is down, else 0.
    """
    _err.print("[bold]Checking remote services...[/bold]")
    checker = HealthChecker()
    results = await checker.check_all()

    table = Table(
        title="Service Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Endpoint", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    any_down = False
    for r in results:
        if r.status == "ok":
            status = "[green]OK[/green]"
        elif r.status == "slow":
            status = "[yellow]SLOW[/yellow]"
        else:
            status = "[red]DOWN[/red]"
            any_down = True

        latency = f"{r.latency_ms:.0f}ms" if r.latency_ms > 0 else "—"
        table.add_row(r.endpoint_id, status, latency, r.message)

    Console().print(table)
    if any_down:
        logger.warning("Health check found unreachable endpoints")
    return 1 if any_down else 0
