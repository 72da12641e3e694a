"""File discovery utilities for scanning source trees."""

import logging
import os
from pathlib import Path
from typing import Iterator, NamedTuple, Optional, Set

from .config import DEFAULT_EXTENSIONS
from .ignore import IgnoreMatcher


logger = logging.getLogger(__name__)


class DiscoveredFile(NamedTuple):
    """An accepted file: its absolute path and its root-relative id."""

    path: Path
    relative_id: str


def iter_files(
    root: Path,
    matcher: Optional[IgnoreMatcher] = None,
    include_ext: Optional[Set[str]] = None,
    max_depth: Optional[int] = None,
) -> Iterator[DiscoveredFile]:
    """
    Iterate over accepted files in a directory tree, depth first.

    Entries are visited in the order the directory listing reports them.
    Symlinks are not followed. A directory or entry that cannot be read is
    logged and skipped; the walk goes on.

    Args:
        root: Root directory to scan.
        matcher: Ignore rules. If None, only the structural rules apply.
        include_ext: Set of file extensions to include (e.g., {'.ts', '.py'}).
                    If None, uses DEFAULT_EXTENSIONS.
        max_depth: Maximum depth to descend. None means unlimited.

    Yields:
        DiscoveredFile tuples for matching files.
    """
    if include_ext is None:
        include_ext = DEFAULT_EXTENSIONS
    if matcher is None:
        matcher = IgnoreMatcher()

    root = root.resolve()

    def _walk(current: Path, rel_dir: str, depth: int) -> Iterator[DiscoveredFile]:
        if max_depth is not None and depth > max_depth:
            return

        try:
            with os.scandir(current) as it:
                entries = list(it)
        except OSError as e:
            logger.warning("Skipping unreadable directory %s: %s", current, e)
            return

        for entry in entries:
            rel_path = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = not is_dir and entry.is_file(follow_symlinks=False)
            except OSError as e:
                logger.warning("Skipping %s: %s", rel_path, e)
                continue

            if not (is_dir or is_file):
                continue
            if matcher.should_skip(entry.name, rel_path, is_dir):
                continue

            if is_dir:
                yield from _walk(Path(entry.path), rel_path, depth + 1)
            elif file_extension(entry.name) in include_ext:
                yield DiscoveredFile(Path(entry.path), rel_path)

    yield from _walk(root, "", 0)


def file_extension(name: str) -> str:
    """Lower-cased extension with the leading dot, or '' if there is none."""
    return os.path.splitext(name)[1].lower()
