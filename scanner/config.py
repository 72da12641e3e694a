"""Scan configuration and config-file loading."""

import json
import tomllib
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional

import yaml

from .errors import ConfigError


DEFAULT_EXTENSIONS = frozenset({
    ".ts", ".tsx", ".js", ".jsx",
    ".css", ".scss", ".html",
    ".py", ".java", ".c", ".cpp", ".h",
    ".json", ".md", ".go", ".rs", ".php",
})

DEFAULT_MAX_WORKERS = 8

# Table holding the settings inside a pyproject-style TOML file
TOML_SECTION = ("tool", "constellation")


@dataclass(frozen=True)
class ScanConfig:
    """
    Settings for one scan.

    Attributes:
        extensions: File extensions accepted as nodes (lower-case, with dot).
        exclude_dirs: Directory names skipped in addition to the fixed denylist.
        respect_gitignore: Load patterns from the root .gitignore.
        max_depth: Maximum directory depth below the root. None means unlimited.
        dedupe_links: Collapse links with the same (source, target) pair.
        max_workers: Upper bound on files processed concurrently.
    """

    extensions: FrozenSet[str] = DEFAULT_EXTENSIONS
    exclude_dirs: FrozenSet[str] = field(default_factory=frozenset)
    respect_gitignore: bool = True
    max_depth: Optional[int] = None
    dedupe_links: bool = True
    max_workers: int = DEFAULT_MAX_WORKERS

    def __post_init__(self):
        if self.max_workers < 1:
            raise ConfigError(f"max_workers must be at least 1, got {self.max_workers}")
        if self.max_depth is not None and self.max_depth < 0:
            raise ConfigError(f"max_depth must not be negative, got {self.max_depth}")

    def merged(self, **overrides: Any) -> "ScanConfig":
        """Return a copy with the given settings replaced; None values are ignored."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **_coerce(changes))


def normalize_extension(ext: str) -> str:
    ext = ext.strip().lower()
    if not ext.startswith("."):
        ext = "." + ext
    return ext


def load_config(config_path: Path, base: Optional[ScanConfig] = None) -> ScanConfig:
    """
    Load scan settings from a YAML, TOML or JSON file.

    A TOML file may keep the settings at top level or under
    ``[tool.constellation]``.

    Args:
        config_path: Path to the configuration file.
        base: Settings to start from (default: ScanConfig()).

    Returns:
        The merged ScanConfig.

    Raises:
        ConfigError: If the file cannot be read or parsed, or holds unknown
            keys or values of the wrong type.
    """
    base = base or ScanConfig()
    data = _parse_config_file(config_path)

    if data is None:
        return base
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path}: expected a mapping at top level")

    known = {f.name for f in fields(ScanConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"{config_path}: unknown setting(s): {', '.join(unknown)}")

    try:
        return base.merged(**data)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{config_path}: {e}") from e


def _parse_config_file(config_path: Path) -> Optional[Any]:
    suffix = config_path.suffix.lower()

    try:
        content = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}") from e

    try:
        if suffix in {".yaml", ".yml"}:
            return yaml.safe_load(content)

        elif suffix == ".toml":
            data = tomllib.loads(content)
            section: Any = data
            for key in TOML_SECTION:
                if not isinstance(section, dict) or key not in section:
                    return data
                section = section[key]
            return section

        elif suffix == ".json":
            return json.loads(content)

        else:
            raise ConfigError(f"Unsupported config file type: {config_path.name}")

    except (yaml.YAMLError, tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot parse config file {config_path}: {e}") from e


def _coerce(values: Dict[str, Any]) -> Dict[str, Any]:
    """Convert loosely typed values (lists, ints) to the ScanConfig field types."""
    coerced = dict(values)

    if "extensions" in coerced:
        coerced["extensions"] = frozenset(
            normalize_extension(ext) for ext in _as_str_list("extensions", coerced["extensions"])
        )
    if "exclude_dirs" in coerced:
        coerced["exclude_dirs"] = frozenset(_as_str_list("exclude_dirs", coerced["exclude_dirs"]))

    for name in ("respect_gitignore", "dedupe_links"):
        if name in coerced and not isinstance(coerced[name], bool):
            raise TypeError(f"{name} must be true or false")

    for name in ("max_depth", "max_workers"):
        if name in coerced and (isinstance(coerced[name], bool) or not isinstance(coerced[name], int)):
            raise TypeError(f"{name} must be an integer")

    return coerced


def _as_str_list(name: str, value: Any) -> list:
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple, set, frozenset)) and all(isinstance(v, str) for v in value):
        return list(value)
    raise TypeError(f"{name} must be a list of strings")
