"""List the SCM providers prcomment can talk to."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from prcomment_core.scm.factory import DEFAULT_ENDPOINTS, requires_endpoint, supported_providers

console = Console()


@click.command("providers")
def providers_cmd():
    """Show every supported PLUGIN_SCM_PROVIDER value and its endpoint needs."""
    table = Table(title="Supported SCM providers", show_header=True, header_style="bold cyan")
    table.add_column("Provider", style="bold")
    table.add_column("Endpoint")

    for provider in supported_providers():
        if requires_endpoint(provider):
            endpoint = "[yellow]required (PLUGIN_SCM_ENDPOINT)[/yellow]"
        else:
            endpoint = f"[dim]{DEFAULT_ENDPOINTS[provider]}[/dim]"
        table.add_row(provider.value, endpoint)

    console.print(table)
