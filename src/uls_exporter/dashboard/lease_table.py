"""One-shot lease listing using Rich. Handy for checking what the exporter counts."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from uls_exporter.leases import LeaseRecord, format_timestamp


def _age(since: Optional[datetime], now: datetime) -> str:
    if since is None:
        return ""
    seconds = int((now - since).total_seconds())
    if seconds < 0:
        return "[dim]in future[/dim]"
    if seconds < 60:
        return f"{seconds}s ago"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    return f"{seconds // 3600}h ago"


def build_lease_table(leases: List[LeaseRecord], source_name: str, now: Optional[datetime] = None) -> Table:
    now = now or datetime.now(timezone.utc)
    active = sum(1 for lease in leases if not lease.is_revoked)

    table = Table(
        title=f"{source_name}: {len(leases)} leases ({active} active)",
        show_header=True,
        header_style="bold",
    )
    table.add_column("ID", justify="right")
    table.add_column("Token", style="dim")
    table.add_column("Created (UTC)")
    table.add_column("Last renewal")
    table.add_column("Revoked", justify="center")
    table.add_column("User")
    table.add_column("Host")
    table.add_column("Groups")

    for lease in sorted(leases, key=lambda le: le.lease_id):
        ctx = lease.entitlement_context
        user = ctx.environment_user
        if ctx.environment_domain and user:
            user = f"{ctx.environment_domain}\\{user}"
        table.add_row(
            str(lease.lease_id),
            str(lease.token),
            format_timestamp(lease.created_at),
            _age(lease.last_renewed_at, now),
            "[red]yes[/red]" if lease.is_revoked else "[green]no[/green]",
            user,
            ctx.environment_hostname,
            ", ".join(lease.entitlement_group_ids),
        )

    return table


def print_leases(leases: List[LeaseRecord], source_name: str, console: Optional[Console] = None):
    console = console or Console()
    if not leases:
        console.print(f"[dim]{source_name}: no active leases.[/dim]")
        return
    console.print(build_lease_table(leases, source_name))
