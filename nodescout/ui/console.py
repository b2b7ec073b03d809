"""
Terminal rendering of node tables and the scan log.

Uses the rich library for tables and colored log lines.
"""

from typing import List, Optional

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from nodescout.core.models import NodeRecord, NodeStatus, ScanLogEntry, Severity

SEVERITY_STYLES = {
    Severity.INFO: "blue",
    Severity.SUCCESS: "green",
    Severity.WARNING: "yellow",
    Severity.ERROR: "red",
}

STATUS_STYLES = {
    NodeStatus.ACTIVE: "green",
    NodeStatus.TIMEOUT: "red",
    NodeStatus.UNTESTED: "dim",
}


def latency_style(ms: int) -> str:
    if not ms:
        return "dim"
    if ms < 100:
        return "green"
    if ms < 300:
        return "yellow"
    return "red"


class NodeScoutConsole:
    """Renders pipeline output for the command line."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def print_log_entry(self, entry: ScanLogEntry):
        line = Text(f"[{entry.timestamp}] ", style="dim")
        prefix = "> " if entry.severity == Severity.INFO else ""
        line.append(prefix + entry.message, style=SEVERITY_STYLES[entry.severity])
        self.console.print(line)

    def nodes_table(self, nodes: List[NodeRecord], total: Optional[int] = None) -> Table:
        shown = len(nodes)
        title = f"Collected nodes {shown} / {total if total is not None else shown}"
        table = Table(title=title, box=box.SIMPLE_HEAVY, show_lines=False)
        table.add_column("ID", style="dim", no_wrap=True)
        table.add_column("Protocol", style="cyan")
        table.add_column("Name")
        table.add_column("Endpoint")
        table.add_column("Country")
        table.add_column("Status")
        table.add_column("Latency", justify="right")

        for node in nodes:
            endpoint = f"{node.address}:{node.port}" if node.has_endpoint() else "-"
            latency = f"{node.latency} ms" if node.latency else "-"
            table.add_row(
                node.id[:8],
                node.protocol.value,
                node.name,
                endpoint,
                node.country,
                Text(node.status.value, style=STATUS_STYLES[node.status]),
                Text(latency, style=latency_style(node.latency)),
            )
        return table

    def print_nodes(self, nodes: List[NodeRecord], total: Optional[int] = None):
        if not nodes:
            self.console.print("[dim]No nodes collected.[/dim]")
            return
        self.console.print(self.nodes_table(nodes, total))

    def print_message(self, message: str, style: str = ""):
        self.console.print(message, style=style or None)
