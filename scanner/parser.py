"""Pattern-based import extraction for source files.

Extraction is textual, not a parse: an import-looking line inside a comment
or a string literal is picked up like a real one.
"""

import logging
import re
from typing import Callable, Dict, List, Optional


logger = logging.getLogger(__name__)


# Language classes
ECMASCRIPT = "ecmascript"
STYLESHEET = "stylesheet"
PYTHON = "python"

LANGUAGE_EXTENSIONS: Dict[str, str] = {
    ".js": ECMASCRIPT,
    ".jsx": ECMASCRIPT,
    ".ts": ECMASCRIPT,
    ".tsx": ECMASCRIPT,
    ".css": STYLESHEET,
    ".scss": STYLESHEET,
    ".py": PYTHON,
}

# import x from "X" | require("X") | import("X")
ECMASCRIPT_IMPORT_RE = re.compile(
    r"""import\s+.*?from\s+['"](.*?)['"]"""
    r"""|require\(['"](.*?)['"]\)"""
    r"""|import\(['"](.*?)['"]\)"""
)

# @import "X" | url("X")
STYLESHEET_IMPORT_RE = re.compile(
    r"""@import\s+['"](.*?)['"]"""
    r"""|url\(['"](.*?)['"]\)"""
)

# import X (first component only) | from X import ... (dotted, leading dots allowed)
PYTHON_IMPORT_RE = re.compile(
    r"^[ \t]*import\s+(\w+)"
    r"|^[ \t]*from\s+(\.*[\w.]*)\s+import\b",
    re.MULTILINE,
)


def language_for(extension: str) -> Optional[str]:
    """Return the language class for a file extension, or None if it has no rules."""
    return LANGUAGE_EXTENSIONS.get(extension.lower())


def _first_groups(pattern: re.Pattern, content: str) -> List[str]:
    """Collect the first non-empty capture group of every match, in order."""
    found: List[str] = []
    for match in pattern.finditer(content):
        value = next((group for group in match.groups() if group), None)
        if value:
            found.append(value)
    return found


def extract_ecmascript(content: str) -> List[str]:
    return _first_groups(ECMASCRIPT_IMPORT_RE, content)


def extract_stylesheet(content: str) -> List[str]:
    return _first_groups(STYLESHEET_IMPORT_RE, content)


def extract_python(content: str) -> List[str]:
    return _first_groups(PYTHON_IMPORT_RE, content)


EXTRACTORS: Dict[str, Callable[[str], List[str]]] = {
    ECMASCRIPT: extract_ecmascript,
    STYLESHEET: extract_stylesheet,
    PYTHON: extract_python,
}


def extract_imports(content: str, language: Optional[str]) -> List[str]:
    """
    Extract raw import strings from file content.

    Args:
        content: The file's text.
        language: Language class from language_for(); None means no rules.

    Returns:
        Raw import strings in source order, duplicates included. Empty if the
        language has no rules or extraction fails.
    """
    extractor = EXTRACTORS.get(language) if language else None
    if extractor is None:
        return []

    try:
        return extractor(content)
    except Exception as e:
        logger.warning("Import extraction failed for %s content: %s", language, e)
        return []
