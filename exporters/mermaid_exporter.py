"""Mermaid flowchart exporter for dependency graphs."""

import re
from typing import Dict, List

from graph.model import DependencyGraph, Node


# File type -> (class name, fill colour)
TYPE_CLASSES: Dict[str, tuple] = {
    ".ts": ("typescript", "#3178c6"),
    ".tsx": ("typescript", "#3178c6"),
    ".js": ("javascript", "#f7df1e"),
    ".jsx": ("javascript", "#f7df1e"),
    ".css": ("css", "#563d7c"),
    ".scss": ("scss", "#c6538c"),
    ".html": ("html", "#e34c26"),
    ".json": ("json", "#cbcb41"),
    ".py": ("python", "#3776ab"),
    ".md": ("markdown", "#083fa1"),
}
OTHER_CLASS = ("other", "#888888")


def to_mermaid(
    graph: DependencyGraph,
    orientation: str = "LR",
    group_by_directory: bool = False,
    show_all: bool = False,
) -> str:
    """
    Convert a dependency graph to Mermaid flowchart syntax.

    Args:
        graph: The dependency graph to export.
        orientation: Flowchart orientation (LR, TD, TB, RL, BT).
        group_by_directory: If True, group nodes by top-level directory.
        show_all: If True, include files with no links. Default False.

    Returns:
        Mermaid flowchart string.
    """
    graph = graph.without_dangling()
    nodes = graph.nodes if show_all else graph.get_connected_nodes()

    lines = [f"flowchart {orientation}"]

    # Build node ID mapping
    node_ids: Dict[str, str] = {}
    used: Dict[str, int] = {}
    for node in nodes:
        node_ids[node.id] = _unique_id(_sanitize_id(node.id), used)

    if group_by_directory:
        lines.extend(_generate_grouped_nodes(nodes, node_ids))
    else:
        for node in nodes:
            lines.append(_node_line(node, node_ids, "    "))

    # Add edges
    lines.append("")
    for source, target in graph.iter_links():
        lines.append(f"    {node_ids[source]} --> {node_ids[target]}")

    lines.extend(_class_lines(nodes, node_ids))

    return "\n".join(lines)


def _generate_grouped_nodes(nodes: List[Node], node_ids: Dict[str, str]) -> List[str]:
    """Generate node definitions in subgraphs grouped by top-level directory."""
    lines = []

    groups: Dict[str, List[Node]] = {}
    for node in nodes:
        parts = node.id.split("/")
        top_dir = parts[0] if len(parts) > 1 else "root"
        groups.setdefault(top_dir, []).append(node)

    for group_name in sorted(groups):
        subgraph_id = "dir_" + _sanitize_id(group_name)
        lines.append(f'    subgraph {subgraph_id}["{group_name}"]')
        for node in groups[group_name]:
            lines.append(_node_line(node, node_ids, "        "))
        lines.append("    end")

    return lines


def _node_line(node: Node, node_ids: Dict[str, str], indent: str) -> str:
    label = node.id.replace('"', "#quot;")
    return f'{indent}{node_ids[node.id]}["{label}"]'


def _class_lines(nodes: List[Node], node_ids: Dict[str, str]) -> List[str]:
    """Generate classDef and class assignments colouring nodes by file type."""
    members: Dict[str, List[str]] = {}
    colours: Dict[str, str] = {}
    for node in nodes:
        class_name, colour = TYPE_CLASSES.get(node.type, OTHER_CLASS)
        members.setdefault(class_name, []).append(node_ids[node.id])
        colours[class_name] = colour

    if not members:
        return []

    lines = [""]
    for class_name in sorted(members):
        lines.append(f"    classDef {class_name} fill:{colours[class_name]}")
    for class_name in sorted(members):
        lines.append(f"    class {','.join(members[class_name])} {class_name}")
    return lines


def _sanitize_id(value: str) -> str:
    """
    Convert a file path to a valid Mermaid node ID.

    Mermaid IDs can only contain letters, digits, and underscores.
    """
    # Replace path separators and dots with underscores
    sanitized = re.sub(r"[/\\.\-]", "_", value)
    # Remove any remaining invalid characters
    sanitized = re.sub(r"[^a-zA-Z0-9_]", "", sanitized)
    # Ensure it starts with a letter
    if sanitized and not sanitized[0].isalpha():
        sanitized = "n_" + sanitized
    return sanitized or "unknown"


def _unique_id(candidate: str, used: Dict[str, int]) -> str:
    """Disambiguate IDs that sanitize to the same string (a-b.ts vs a_b.ts)."""
    count = used.get(candidate, 0)
    used[candidate] = count + 1
    return candidate if count == 0 else f"{candidate}_{count}"
