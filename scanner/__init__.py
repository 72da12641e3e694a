"""Scanner module for file discovery, import extraction and resolution."""

from .builder import build_graph, scan, scan_files
from .config import ScanConfig, load_config
from .discovery import iter_files
from .errors import ConfigError, RootAccessError, ScanError
from .ignore import IgnoreMatcher
from .parser import extract_imports, language_for
from .resolver import resolve_import

__all__ = [
    "build_graph",
    "scan",
    "scan_files",
    "ScanConfig",
    "load_config",
    "iter_files",
    "ConfigError",
    "RootAccessError",
    "ScanError",
    "IgnoreMatcher",
    "extract_imports",
    "language_for",
    "resolve_import",
]
