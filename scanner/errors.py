"""Exceptions raised by the scanner."""

from pathlib import Path
from typing import Union


class ScanError(Exception):
    """Base class for errors that abort a scan."""


class RootAccessError(ScanError):
    """The scan root does not exist or cannot be listed as a directory."""

    def __init__(self, root: Union[str, Path], reason: str):
        self.root = Path(root)
        self.reason = reason
        super().__init__(f"Cannot scan '{root}': {reason}")


class ConfigError(ScanError):
    """A configuration file could not be read or holds invalid settings."""
