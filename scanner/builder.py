"""Graph builder that orchestrates scanning and graph construction."""

import asyncio
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

from graph.model import DependencyGraph, Node
from .config import ScanConfig
from .discovery import DiscoveredFile, file_extension, iter_files
from .errors import RootAccessError
from .ignore import IgnoreMatcher
from .parser import extract_imports, language_for
from .resolver import resolve_import


logger = logging.getLogger(__name__)

PREVIEW_LINES = 10


@dataclass
class FileResult:
    """A processed file: its node and the ids it imports, in source order."""

    node: Node
    targets: List[str] = field(default_factory=list)


@dataclass
class SkippedFile:
    """A file that could not be stat'd or read and contributes nothing."""

    relative_id: str
    reason: str


ProcessedFile = Union[FileResult, SkippedFile]


def make_preview(content: str, max_lines: int = PREVIEW_LINES) -> str:
    """Return the first ``max_lines`` lines of content, newline-joined."""
    return "\n".join(content.split("\n")[:max_lines])


def _read_source(path: Path) -> Tuple[int, str]:
    """Stat and read a file. Returns (size in bytes, decoded text)."""
    size = os.stat(path).st_size
    with open(path, "r", encoding="utf-8", errors="replace", newline="") as f:
        content = f.read()
    return size, content


def process_file(discovered: DiscoveredFile, root: Path) -> ProcessedFile:
    """
    Run the per-file pipeline: stat, read, extract imports, resolve them.

    An I/O failure skips the file. A failure after the read keeps the node
    and drops its links.
    """
    path, relative_id = discovered

    try:
        size, content = _read_source(path)
    except OSError as e:
        logger.warning("Skipping %s: %s", relative_id, e)
        return SkippedFile(relative_id, str(e))

    extension = file_extension(path.name)
    node = Node(
        id=relative_id,
        name=path.name,
        type=extension,
        size=size,
        preview=make_preview(content),
    )

    targets: List[str] = []
    try:
        language = language_for(extension)
        for raw in extract_imports(content, language):
            resolved = resolve_import(raw, relative_id, language, root)
            if resolved is not None and resolved != relative_id:
                targets.append(resolved)
    except Exception as e:
        logger.warning("Could not resolve imports in %s: %s", relative_id, e)
        targets = []

    return FileResult(node, targets)


def check_root(root: Union[str, Path]) -> Path:
    """
    Validate the scan root and return it as an absolute path.

    Raises:
        RootAccessError: If the root cannot be listed as a directory.
    """
    root = Path(root)
    try:
        resolved = root.resolve()
        if not resolved.exists():
            raise RootAccessError(root, "no such directory")
        if not resolved.is_dir():
            raise RootAccessError(root, "not a directory")
        with os.scandir(resolved):
            pass
    except OSError as e:
        raise RootAccessError(root, e.strerror or str(e)) from e
    return resolved


async def scan_files(
    root: Union[str, Path],
    config: Optional[ScanConfig] = None,
) -> Tuple[DependencyGraph, List[SkippedFile]]:
    """
    Scan a source tree and build its dependency graph.

    Files are processed concurrently, at most ``config.max_workers`` at a
    time. Nodes and links are still added in discovery order.

    Args:
        root: Scan root directory.
        config: Scan settings (default: ScanConfig()).

    Returns:
        The graph and the files skipped because they could not be read.

    Raises:
        RootAccessError: If the root cannot be scanned.
    """
    config = config or ScanConfig()
    root = check_root(root)
    logger.info("Scanning %s", root)

    matcher = IgnoreMatcher.from_root(
        root,
        exclude_dirs=config.exclude_dirs,
        respect_gitignore=config.respect_gitignore,
    )

    def _discover() -> List[DiscoveredFile]:
        return list(iter_files(
            root=root,
            matcher=matcher,
            include_ext=config.extensions,
            max_depth=config.max_depth,
        ))

    discovered = await asyncio.to_thread(_discover)

    semaphore = asyncio.Semaphore(config.max_workers)

    async def _process(item: DiscoveredFile) -> ProcessedFile:
        async with semaphore:
            return await asyncio.to_thread(process_file, item, root)

    results = await asyncio.gather(*(_process(item) for item in discovered))

    graph = DependencyGraph(dedupe=config.dedupe_links)
    skipped: List[SkippedFile] = []
    for result in results:
        if isinstance(result, SkippedFile):
            skipped.append(result)
            continue
        graph.add_node(result.node)
        for target in result.targets:
            graph.add_link(result.node.id, target)

    logger.info(
        "Scan finished: %d files, %d links, %d skipped",
        len(graph), len(graph.links), len(skipped),
    )
    return graph, skipped


async def scan(
    root: Union[str, Path],
    config: Optional[ScanConfig] = None,
) -> DependencyGraph:
    """Scan a source tree and return its dependency graph."""
    graph, _ = await scan_files(root, config)
    return graph


def build_graph(
    root: Union[str, Path],
    config: Optional[ScanConfig] = None,
) -> DependencyGraph:
    """
    Scan a repository and build a dependency graph.

    Synchronous wrapper around scan() for callers without an event loop.
    """
    return asyncio.run(scan(root, config))
