"""JSON exporter for dependency graphs (machine-friendly format)."""

import json
from typing import Any, Dict, Optional

from graph.model import DependencyGraph


def to_json(
    graph: DependencyGraph,
    indent: Optional[int] = 2,
    include_dangling: bool = False,
    include_preview: bool = True,
) -> str:
    """
    Convert a dependency graph to JSON format.

    The output has the shape renderers consume:
    ``{"nodes": [{id, name, type, size, preview}], "links": [{source, target}]}``.

    Args:
        graph: The dependency graph to export.
        indent: JSON indentation level (None for compact output).
        include_dangling: If True, keep links whose target is not a node.
        include_preview: If False, omit the preview text from nodes.

    Returns:
        JSON string representation of the graph.
    """
    if not include_dangling:
        graph = graph.without_dangling()

    data: Dict[str, Any] = graph.to_dict()

    if not include_preview:
        for node in data["nodes"]:
            node.pop("preview", None)

    return json.dumps(data, indent=indent)
