"""Graph data model for dependency scans."""

from .model import DependencyGraph, Link, Node

__all__ = ["DependencyGraph", "Link", "Node"]
