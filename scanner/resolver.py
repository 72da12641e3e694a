"""Path resolution utilities for mapping raw import strings to files in the tree."""

import logging
import posixpath
from pathlib import Path
from typing import List, Optional

from .parser import PYTHON


logger = logging.getLogger(__name__)

# Tried in order when a relative import does not name a file exactly
RESOLUTION_SUFFIXES = (
    ".ts", ".tsx", ".js", ".jsx", ".css", ".scss",
    "/index.ts", "/index.js",
)


def is_relative_import(raw: str) -> bool:
    """Check if an import string is a relative reference ('./x', '../x')."""
    return raw.startswith(".")


def resolve_import(
    raw: str,
    source_id: str,
    language: Optional[str],
    root: Path,
) -> Optional[str]:
    """
    Resolve a raw import string to the id of an existing file under root.

    Python imports are always treated as local-module candidates. For every
    other language only relative imports are resolved; bare imports are
    external and are not probed.

    Args:
        raw: The import string as written in the source.
        source_id: Root-relative id of the importing file.
        language: Language class of the importing file.
        root: The scan root directory.

    Returns:
        Root-relative id of the target file, or None if the import is
        external, unresolved or points outside the root.
    """
    if not raw:
        return None

    if language == PYTHON:
        resolved = _resolve_python(raw, source_id, root)
    elif is_relative_import(raw):
        resolved = _resolve_relative(raw, source_id, root)
    else:
        return None

    if resolved is None:
        logger.debug("Unresolved import %r in %s", raw, source_id)
    return resolved


def candidate_paths(raw: str, source_id: str) -> List[str]:
    """
    List the root-relative paths probed for a relative import, in order.

    The exact path comes first, then each RESOLUTION_SUFFIXES variant.
    """
    source_dir = posixpath.dirname(source_id)
    base = posixpath.join(source_dir, raw.replace("\\", "/"))
    return [posixpath.normpath(base)] + [
        posixpath.normpath(base + suffix) for suffix in RESOLUTION_SUFFIXES
    ]


def _resolve_relative(raw: str, source_id: str, root: Path) -> Optional[str]:
    for candidate in candidate_paths(raw, source_id):
        if _escapes_root(candidate):
            return None
        if _is_file(root, candidate):
            return candidate
    return None


def _resolve_python(raw: str, source_id: str, root: Path) -> Optional[str]:
    """
    Map a Python module name to a ``.py`` file.

    ``pkg.sub`` becomes ``pkg/sub.py`` at the root. With leading dots the
    lookup starts in the importing file's directory, one level up per extra
    dot; ``from . import x`` names no module and is not resolved.
    """
    module = raw.lstrip(".")
    level = len(raw) - len(module)
    if not module:
        return None

    module_path = module.replace(".", "/") + ".py"
    if level == 0:
        candidate = posixpath.normpath(module_path)
    else:
        base = posixpath.dirname(source_id)
        parents = [".."] * (level - 1)
        candidate = posixpath.normpath(posixpath.join(base, *parents, module_path))

    if _escapes_root(candidate) or not _is_file(root, candidate):
        return None
    return candidate


def _escapes_root(relative_path: str) -> bool:
    """Check if a normalized relative path points outside the root."""
    return (
        relative_path == ".."
        or relative_path.startswith("../")
        or posixpath.isabs(relative_path)
    )


def _is_file(root: Path, relative_path: str) -> bool:
    try:
        return (root / relative_path).is_file()
    except (OSError, ValueError):
        return False
