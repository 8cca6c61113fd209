"""Capability set of the host package-manager runtime.

Some stub operations only exist on newer runtimes. The set is computed once
from the runtime version and then baked into the proxy type, so an
unsupported operation is simply absent rather than failing when called.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

import structlog
from packaging.specifiers import SpecifierSet
from packaging.version import Version

from specproxy.config import get_settings

log = structlog.get_logger()

# Runtime requirement for each optional operation.
EXTENSION_DIR_REQUIREMENT = ">=2.2.0"
FULL_REQUIRE_PATHS_REQUIREMENT = ">=2.2.0"
MISSING_EXTENSIONS_REQUIREMENT = ">=2.3"
STUB_GLOBBING_REQUIREMENT = ">=2.7.0"


def provides(runtime_version: str | Version, requirement: str) -> bool:
    """Return True if ``runtime_version`` satisfies ``requirement``.

    Pre-releases count, so a 2.4.0rc1 runtime provides ``>=2.3``.
    """
    version = runtime_version if isinstance(runtime_version, Version) else Version(runtime_version)
    return SpecifierSet(requirement).contains(version, prereleases=True)


@dataclass(frozen=True)
class Capabilities:
    """Optional operations the host runtime supports."""

    extension_dir: bool = False
    full_require_paths: bool = False
    missing_extensions: bool = False
    stub_globbing: bool = False

    @classmethod
    def detect(cls, runtime_version: str | Version) -> Capabilities:
        return cls(
            extension_dir=provides(runtime_version, EXTENSION_DIR_REQUIREMENT),
            full_require_paths=provides(runtime_version, FULL_REQUIRE_PATHS_REQUIREMENT),
            missing_extensions=provides(runtime_version, MISSING_EXTENSIONS_REQUIREMENT),
            stub_globbing=provides(runtime_version, STUB_GLOBBING_REQUIREMENT),
        )

    @classmethod
    def legacy(cls) -> Capabilities:
        return cls()

    @classmethod
    def full(cls) -> Capabilities:
        return cls(
            extension_dir=True,
            full_require_paths=True,
            missing_extensions=True,
            stub_globbing=True,
        )


@lru_cache(maxsize=1)
def default_capabilities() -> Capabilities:
    """Capabilities of the configured runtime, detected once per process."""
    runtime_version = get_settings().runtime_version
    capabilities = Capabilities.detect(runtime_version)
    log.debug("capabilities_detected", runtime_version=runtime_version, capabilities=capabilities)
    return capabilities
