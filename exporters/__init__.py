"""Exporters for converting graph to various output formats."""

from .mermaid_exporter import to_mermaid
from .json_exporter import to_json

__all__ = ["to_mermaid", "to_json"]
