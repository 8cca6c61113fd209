from __future__ import annotations

from specproxy.models.source import GitSource, PathSource, RegistrySource
from specproxy.models.specification import Dependency, Specification

__all__ = [
    # specification
    "Dependency",
    "Specification",
    # sources
    "GitSource",
    "PathSource",
    "RegistrySource",
]
