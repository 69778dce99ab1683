"""
renderer.py
- Formats grouped probe results into fixed-width matrix tables.
- Two stages: build_table() returns plain structured rows for assertions,
  render_*() turns them into rich Text lines colored green/red per cell.
"""

from dataclasses import dataclass
from typing import List, Optional

from rich.console import Console
from rich.text import Text

from core.constants import CELL_SEPARATOR, CELL_WIDTH, HEADER_RULE
from lib.netcheck.aggregator import distinct_services

DNS_TITLE = "DNS Lookup Results:"
GET_TITLE = "GET Request Results:"

SUCCESS_STYLE = "green"
FAILURE_STYLE = "red"
LABEL_STYLE = "white"
TITLE_STYLE = "white underline"
WARNING_STYLE = "yellow"


@dataclass(frozen=True)
class MatrixCell:
    text: str
    success: Optional[bool]  # None: node produced no result for this service


@dataclass(frozen=True)
class MatrixRow:
    node: str
    label: str
    cells: List[MatrixCell]


@dataclass(frozen=True)
class MatrixTable:
    network: str
    services: List[str]
    headers: List[str]
    rows: List[MatrixRow]


def shorten_service_name(name):
    """network-breaker-global-3 -> global-3"""
    parts = name.split("-")
    if len(parts) < 2:
        return name
    return f"{parts[-2]}-{parts[-1]}"


def shorten_node_name(name):
    """swarm-worker-7 -> w-07. Names without a <role>-<index> tail are returned unchanged."""
    parts = name.split("-")
    if len(parts) < 2 or not (parts[-1].isascii() and parts[-1].isdigit()) or not parts[-2]:
        return name
    return f"{parts[-2][0]}-{int(parts[-1]):02d}"


def table_cell(text, width=CELL_WIDTH):
    """Truncate or space-pad to exactly `width` characters."""
    return (text or "")[:width].ljust(width)


def build_table(network, nodes, services):
    """
    Lay out one network's results as a node x service matrix.

    Args:
        network (str): Network name for the table title.
        nodes (dict): {node: [ProbeResult, ...]} for this network and category.
        services (list[str]): Column order, usually every service seen in the category.

    Returns:
        MatrixTable
    """
    rows = []
    for node in sorted(nodes):
        by_service = {}
        for result in nodes[node]:
            by_service.setdefault(result.service, result)

        cells = []
        for service in services:
            result = by_service.get(service)
            if result is None:
                cells.append(MatrixCell(text=table_cell(""), success=None))
            else:
                cells.append(MatrixCell(text=table_cell(result.detail), success=result.success))
        rows.append(MatrixRow(node=node, label=shorten_node_name(node), cells=cells))

    return MatrixTable(
        network=network,
        services=list(services),
        headers=[table_cell(shorten_service_name(s)) for s in services],
        rows=rows,
    )


def render_table(table):
    """Render a MatrixTable to Text lines; labels are padded so columns line up."""
    label_width = max([4] + [len(row.label) for row in table.rows])
    lines = [Text(f"Network: {table.network}"), Text("")]
    lines.append(Text(" " * label_width + CELL_SEPARATOR + CELL_SEPARATOR.join(table.headers)))

    for row in table.rows:
        line = Text()
        line.append(row.label.ljust(label_width), style=LABEL_STYLE)
        for cell in row.cells:
            line.append(CELL_SEPARATOR)
            if cell.success is None:
                line.append(cell.text)
            else:
                line.append(cell.text, style=SUCCESS_STYLE if cell.success else FAILURE_STYLE)
        lines.append(line)

    lines.append(Text(""))
    return lines


def render_section(title, grouped, networks, stuck=None):
    """One underlined section with a table per monitored network, in configured order."""
    stuck = stuck or {}
    services = distinct_services(grouped)
    lines = [Text(""), Text(title, style=TITLE_STYLE)]

    for network in networks:
        if network in stuck:
            terminal, expected = stuck[network]
            lines.append(Text(f"[stuck: {terminal}/{expected} tasks terminal] {network}", style=WARNING_STYLE))
        nodes = grouped.get(network)
        if not nodes:
            lines.extend([Text(f"Network: {network}"), Text(""), Text("(no results)"), Text("")])
            continue
        lines.extend(render_table(build_table(network, nodes, services)))

    return lines


def render_report(dns_grouped, get_grouped, networks, timestamp, stuck=None):
    """
    Full cycle report: timestamp header, then the DNS and GET sections.

    Args:
        stuck (dict): {network: (terminal_tasks, expected_nodes)} for groups that timed out.
    """
    lines = [
        Text(""),
        Text(HEADER_RULE),
        Text(f"Report Time: {timestamp.strftime('%Y-%m-%d %H:%M:%S')}"),
        Text(HEADER_RULE),
    ]
    lines.extend(render_section(DNS_TITLE, dns_grouped, networks, stuck))
    lines.extend(render_section(GET_TITLE, get_grouped, networks, stuck))
    return lines


def print_report(lines, stream, color=False):
    """Write rendered lines to a stream; ANSI styling only when color is set."""
    console = Console(
        file=stream,
        force_terminal=color,
        color_system="standard" if color else None,
        no_color=not color,
        highlight=False,
        soft_wrap=True,
        emoji=False,
    )
    for line in lines:
        console.print(line)
