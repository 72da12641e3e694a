"""Ignore rules: .gitignore patterns plus structural exclusions."""

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Set

import pathspec


logger = logging.getLogger(__name__)

GITIGNORE_NAME = ".gitignore"

# Build, dependency and output directories that are never scanned
DEFAULT_EXCLUDE_DIRS = frozenset({
    "node_modules", "dist", "out", "build", "target", "vendor",
})


class IgnoreMatcher:
    """
    Decide whether a path under the scan root must be skipped.

    Two independent rule sets apply:

    - gitignore patterns loaded from ``<root>/.gitignore`` (glob segments,
      ``**``, negation, directory-only patterns and anchoring);
    - structural rules that no ignore file can override: dot-named entries
      (except ``.gitignore`` itself) and the directory denylist.
    """

    def __init__(
        self,
        patterns: Iterable[str] = (),
        exclude_dirs: Optional[Iterable[str]] = None,
    ):
        self.exclude_dirs: Set[str] = set(DEFAULT_EXCLUDE_DIRS)
        if exclude_dirs:
            self.exclude_dirs.update(exclude_dirs)
        self._lines = _valid_lines(patterns)
        self._spec = pathspec.GitIgnoreSpec.from_lines(self._lines)

    @classmethod
    def from_root(
        cls,
        root: Path,
        exclude_dirs: Optional[Iterable[str]] = None,
        respect_gitignore: bool = True,
    ) -> "IgnoreMatcher":
        """
        Build a matcher from the .gitignore at the scan root.

        A missing or unreadable .gitignore means no pattern rules are active.
        """
        patterns: List[str] = []
        gitignore = root / GITIGNORE_NAME
        if respect_gitignore and gitignore.is_file():
            try:
                patterns = gitignore.read_text(encoding="utf-8", errors="replace").splitlines()
            except OSError as e:
                logger.warning("Could not read %s: %s", gitignore, e)
        return cls(patterns, exclude_dirs=exclude_dirs)

    @property
    def pattern_count(self) -> int:
        return len(self._lines)

    def ignores(self, relative_path: str, is_dir: bool = False) -> bool:
        """Apply the gitignore patterns to a root-relative path."""
        normalized = relative_path.replace("\\", "/").strip("/")
        if not normalized or not self._lines:
            return False
        if is_dir:
            normalized += "/"
        return self._spec.match_file(normalized)

    def is_hidden(self, name: str, is_dir: bool = False) -> bool:
        """Dot-named entries are skipped, except the .gitignore file."""
        if not name.startswith("."):
            return False
        return is_dir or name != GITIGNORE_NAME

    def is_denied_dir(self, name: str) -> bool:
        return name in self.exclude_dirs

    def should_skip(self, name: str, relative_path: str, is_dir: bool) -> bool:
        """
        Check every rule for one directory entry.

        Args:
            name: The entry's base name.
            relative_path: The entry's path relative to the scan root.
            is_dir: Whether the entry is a directory.

        Returns:
            True if any rule rejects the entry.
        """
        if self.is_hidden(name, is_dir):
            return True
        if is_dir and self.is_denied_dir(name):
            return True
        return self.ignores(relative_path, is_dir)


def _valid_lines(patterns: Iterable[str]) -> List[str]:
    """Keep the lines pathspec accepts, in order; drop the rest."""
    valid: List[str] = []
    for line in patterns:
        try:
            pathspec.GitIgnoreSpec.from_lines([line])
        except (ValueError, TypeError, re.error) as e:
            logger.debug("Dropping malformed ignore pattern %r: %s", line, e)
            continue
        valid.append(line)
    return valid
