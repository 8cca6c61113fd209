from __future__ import annotations

from specproxy.capabilities import Capabilities, default_capabilities
from specproxy.errors import DescriptorError, ErrorCode, SpecProxyError
from specproxy.layout import InstallLayout
from specproxy.loader import DescriptorLoader
from specproxy.models import Dependency, GitSource, PathSource, RegistrySource, Specification
from specproxy.proxy import SpecificationProxy, from_stub, proxy_class
from specproxy.registry import LoadedRegistry
from specproxy.repository import Repository
from specproxy.stub import Stub

__all__ = [
    # core
    "SpecificationProxy",
    "from_stub",
    "proxy_class",
    "Capabilities",
    "default_capabilities",
    # collaborators
    "Stub",
    "DescriptorLoader",
    "LoadedRegistry",
    "Repository",
    "InstallLayout",
    # models
    "Specification",
    "Dependency",
    "GitSource",
    "PathSource",
    "RegistrySource",
    # errors
    "ErrorCode",
    "SpecProxyError",
    "DescriptorError",
]
