"""Graph data model for storing file dependency relationships."""

from dataclasses import dataclass, asdict
from typing import Dict, Iterator, List, Optional, Set, Tuple


@dataclass(frozen=True)
class Node:
    """
    One scanned source file.

    Attributes:
        id: Path relative to the scan root, forward-slash separated.
        name: Base file name, for display.
        type: Lower-cased extension including the leading dot.
        size: Byte length of the file at scan time.
        preview: The first lines of the file, newline-joined.
    """

    id: str
    name: str
    type: str
    size: int
    preview: str

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


@dataclass(frozen=True)
class Link:
    """A directed edge: the source file's content references the target file."""

    source: str
    target: str

    def to_dict(self) -> Dict[str, str]:
        return {"source": self.source, "target": self.target}


class DependencyGraph:
    """
    A directed graph of file dependencies for one complete scan.

    Nodes and links are kept in discovery order. When ``dedupe`` is True,
    links sharing a ``(source, target)`` pair collapse to the first one seen;
    otherwise every resolved import is kept.
    """

    def __init__(self, dedupe: bool = True):
        self.dedupe = dedupe
        self._nodes: List[Node] = []
        self._node_index: Dict[str, Node] = {}
        self._links: List[Link] = []
        self._link_keys: Set[Tuple[str, str]] = set()

    @property
    def nodes(self) -> List[Node]:
        """Return all nodes in discovery order."""
        return list(self._nodes)

    @property
    def links(self) -> List[Link]:
        """Return all links in discovery order."""
        return list(self._links)

    @property
    def node_ids(self) -> Set[str]:
        return set(self._node_index)

    def add_node(self, node: Node) -> None:
        """
        Add a node to the graph.

        Raises:
            ValueError: If a node with the same id was already added.
        """
        if node.id in self._node_index:
            raise ValueError(f"Duplicate node id: {node.id}")
        self._nodes.append(node)
        self._node_index[node.id] = node

    def add_link(self, source: str, target: str) -> bool:
        """
        Add a directed link from source to target.

        Returns:
            True if the link was appended, False if it was collapsed into an
            earlier link with the same endpoints.
        """
        key = (source, target)
        if self.dedupe and key in self._link_keys:
            return False
        self._link_keys.add(key)
        self._links.append(Link(source=source, target=target))
        return True

    def get_node(self, node_id: str) -> Optional[Node]:
        return self._node_index.get(node_id)

    def get_targets(self, source: str) -> List[str]:
        """Get the ids referenced by the source file, in link order."""
        targets: List[str] = []
        for link in self._links:
            if link.source == source and link.target not in targets:
                targets.append(link.target)
        return targets

    def get_sources(self, target: str) -> List[str]:
        """Get the ids of all files that reference the target file."""
        sources: List[str] = []
        for link in self._links:
            if link.target == target and link.source not in sources:
                sources.append(link.source)
        return sources

    def get_roots(self) -> List[str]:
        """
        Get node ids that are never referenced by another node.

        These are entry files: they may reference others but nothing
        references them.
        """
        all_targets = {link.target for link in self._links}
        return [node.id for node in self._nodes if node.id not in all_targets]

    def get_connected_nodes(self) -> List[Node]:
        """
        Get nodes that take part in at least one link, as source or target.
        """
        connected: Set[str] = set()
        for link in self._links:
            connected.add(link.source)
            connected.add(link.target)
        return [node for node in self._nodes if node.id in connected]

    def dangling_links(self) -> List[Link]:
        """Links whose source or target is not a node of this graph."""
        return [
            link for link in self._links
            if link.source not in self._node_index or link.target not in self._node_index
        ]

    def without_dangling(self) -> "DependencyGraph":
        """Return a copy of this graph with dangling links removed."""
        pruned = DependencyGraph(dedupe=self.dedupe)
        for node in self._nodes:
            pruned.add_node(node)
        for link in self._links:
            if link.source in self._node_index and link.target in self._node_index:
                pruned.add_link(link.source, link.target)
        return pruned

    def iter_links(self) -> Iterator[Tuple[str, str]]:
        """Iterate over all links as (source, target) tuples."""
        for link in self._links:
            yield link.source, link.target

    def to_dict(self) -> Dict[str, list]:
        """Return the ``{"nodes": [...], "links": [...]}`` shape consumed by renderers."""
        return {
            "nodes": [node.to_dict() for node in self._nodes],
            "links": [link.to_dict() for link in self._links],
        }

    def __len__(self) -> int:
        """Return the number of nodes in the graph."""
        return len(self._nodes)

    def __contains__(self, node_id: str) -> bool:
        """Check if a node id is in the graph."""
        return node_id in self._node_index

    def __repr__(self) -> str:
        return f"DependencyGraph(nodes={len(self._nodes)}, links={len(self._links)}, dangling={len(self.dangling_links())})"
