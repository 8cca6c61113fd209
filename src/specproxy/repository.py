"""Enumeration of installed packages.

The repository builds one stub per descriptor found under the install root
and hands out one proxy per stub. Descriptors whose header cannot be read are
skipped and logged; enumeration never fails because of a single broken file.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from packaging.version import Version

from specproxy.capabilities import Capabilities, default_capabilities
from specproxy.errors import DescriptorError, ErrorCode, SpecProxyError
from specproxy.layout import DESCRIPTOR_SUFFIX, InstallLayout
from specproxy.loader import DescriptorLoader
from specproxy.proxy import SpecificationProxy, from_stub
from specproxy.registry import LoadedRegistry
from specproxy.stub import Stub

if TYPE_CHECKING:
    from pathlib import Path

    from specproxy.config import Settings

log = structlog.get_logger()


class Repository:
    """Installed packages under one install root."""

    def __init__(
        self,
        layout: InstallLayout,
        *,
        registry: LoadedRegistry | None = None,
        loader: DescriptorLoader | None = None,
        capabilities: Capabilities | None = None,
    ) -> None:
        self.layout = layout
        self.registry = registry if registry is not None else LoadedRegistry()
        self.loader = loader if loader is not None else DescriptorLoader(layout)
        self.capabilities = capabilities if capabilities is not None else default_capabilities()
        self._stubs: list[Stub] | None = None
        self._specs: list[SpecificationProxy] | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> Repository:
        return cls(
            InstallLayout.at(settings.install.root),
            capabilities=Capabilities.detect(settings.runtime_version),
        )

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def _descriptor_paths(self) -> list[tuple[Path, bool]]:
        found: list[tuple[Path, bool]] = []
        for directory, default_gem in (
            (self.layout.default_specifications_dir, True),
            (self.layout.specifications_dir, False),
        ):
            if not directory.is_dir():
                continue
            found.extend(
                (path, default_gem) for path in sorted(directory.glob(f"*{DESCRIPTOR_SUFFIX}"))
            )
        return found

    def stubs(self) -> list[Stub]:
        if self._stubs is None:
            stubs: list[Stub] = []
            for path, default_gem in self._descriptor_paths():
                try:
                    stub = Stub.from_file(
                        path,
                        layout=self.layout,
                        registry=self.registry,
                        loader=self.loader,
                        default_gem=default_gem,
                    )
                except DescriptorError:
                    log.warning("stub_header_skipped", path=str(path), exc_info=True)
                    continue
                stubs.append(stub)
            log.info("stubs_enumerated", root=str(self.layout.root), count=len(stubs))
            self._stubs = stubs
        return self._stubs

    def specifications(self) -> list[SpecificationProxy]:
        """One proxy per installed package, sorted by name then version."""
        if self._specs is None:
            specs = [from_stub(stub, self.capabilities) for stub in self.stubs()]
            specs.sort(key=lambda spec: (spec.name, spec.version))
            self._specs = specs
        return self._specs

    def find(self, name: str, version: str | Version | None = None) -> SpecificationProxy | None:
        """Highest installed version of ``name``, or exactly ``version`` if given."""
        wanted = Version(version) if isinstance(version, str) else version
        candidates = [
            spec
            for spec in self.specifications()
            if spec.name == name and (wanted is None or spec.version == wanted)
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda spec: spec.version)

    def activate(self, name: str, version: str | Version | None = None) -> SpecificationProxy:
        """Mark a package activated and register it as the loaded spec for its name."""
        spec = self.find(name, version)
        if spec is None:
            wanted = f"{name} {version}" if version is not None else name
            raise SpecProxyError(
                ErrorCode.PACKAGE_NOT_FOUND,
                f"Package {wanted} is not installed under {self.layout.root}",
                suggestion="Install the package or check the install root setting.",
            )
        spec.activated = True
        self.registry.register(spec)
        log.info("package_activated", full_name=spec.full_name)
        return spec

    def reset(self) -> None:
        """Forget enumerated stubs and proxies; the next call rescans the root."""
        self._stubs = None
        self._specs = None
