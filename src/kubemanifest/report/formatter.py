# src/kubemanifest/report/formatter.py
from collections import Counter
from typing import Any, Dict, Mapping, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from kubemanifest.core.errors import ManifestError
from kubemanifest.core.models import Resource, ResourceID


class ResourceFormatter:
    """
    ResourceFormatter: renders what a load produced.
    Read-only; resources are never modified.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def print_resource_table(self, resources: Mapping[ResourceID, Resource]):
        """
        One row per resource, ordered by identity.
        """
        table = Table(title="Loaded Resources", show_header=True, header_style="bold magenta")
        table.add_column("Resource ID", style="cyan")
        table.add_column("Kind")
        table.add_column("Source", style="dim")
        table.add_column("Bytes", justify="right")

        for rid in sorted(resources):
            resource = resources[rid]
            table.add_row(str(rid), resource.kind, resource.source, str(len(resource.raw)))

        self.console.print(table)

    def print_error(self, error: ManifestError):
        """Wraps a load failure in a red panel titled with the error type."""
        self.console.print(Panel(
            str(error),
            title=f"[bold red]{type(error).__name__}[/bold red]",
            border_style="red"
        ))

    def generate_summary(self, resources: Mapping[ResourceID, Resource]) -> Dict[str, Any]:
        if not resources:
            return {"total_resources": 0, "by_kind": {}, "sources": 0}

        by_kind = Counter(resource.kind for resource in resources.values())
        sources = {resource.source for resource in resources.values()}
        return {
            "total_resources": len(resources),
            "by_kind": dict(sorted(by_kind.items())),
            "sources": len(sources),
        }
