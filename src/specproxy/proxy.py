"""Lazy specification proxies over stubs.

Every installed package gets a :class:`SpecificationProxy` wrapping its
:class:`~specproxy.stub.Stub`. Queries the stub can answer never touch the
full descriptor; anything else resolves the full :class:`Specification` once
and delegates to it.

Resolution has one trap. ``stub.to_spec()`` prefers the registry's loaded
entry for the package name, and that entry can be this very proxy. Trusting
it would make the proxy delegate to itself forever, so resolution compares
the result by identity and, on a match, parses the descriptor directly and
repoints the stub at the fresh record.

Optional operations depend on the host runtime's capabilities. Each capability
set gets its own proxy subclass (see :func:`proxy_class`); operations outside
the set do not exist on that type.
"""

from __future__ import annotations

import os
import threading
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

import structlog

from specproxy.capabilities import Capabilities, default_capabilities
from specproxy.errors import DescriptorError, ErrorCode

if TYPE_CHECKING:
    from packaging.version import Version

    from specproxy.models.specification import Specification
    from specproxy.stub import Stub

log = structlog.get_logger()

# Optional operation → capability flag that enables it.
GATED_OPERATIONS: dict[str, str] = {
    "missing_extensions": "missing_extensions",
    "full_require_paths": "full_require_paths",
    "load_paths": "full_require_paths",
    "matches_for_glob": "stub_globbing",
}


class SpecificationProxy:
    """A specification answered from a stub until the full record is needed."""

    capabilities: ClassVar[Capabilities] = Capabilities.legacy()

    def __init__(self, stub: Stub) -> None:
        self._name = stub.name
        self._version = stub.version
        self._platform = stub.platform
        self._stub = stub
        self._source: Any = None
        self._full: Specification | None = None
        self._lock = threading.RLock()
        # Annotation for consumers; the proxy never reads it.
        self.ignored = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def version(self) -> Version:
        return self._version

    @property
    def platform(self) -> str:
        return self._platform

    @property
    def full_name(self) -> str:
        return self._stub.full_name

    # ------------------------------------------------------------------
    # Source
    # ------------------------------------------------------------------

    @property
    def source(self) -> Any:
        return self._source

    @source.setter
    def source(self, source: Any) -> None:
        self._set_source(source)

    def _set_source(self, source: Any) -> None:
        self._source = source
        if self._full is not None:
            self._full.source = source

    # ------------------------------------------------------------------
    # Stub delegates
    # ------------------------------------------------------------------

    @property
    def stub(self) -> Stub:
        return self._stub

    def _checked_stub(self) -> Stub:
        """The stub, made safe to call ``to_spec()`` on.

        If the stub's cached link or the registry's loaded entry for this name
        is this proxy, the stub's ``to_spec()`` would hand us back to
        ourselves. Resolving first repoints the stub at the parsed record.
        """
        stub = self._stub
        if stub.spec is self or (self._full is None and stub.registry.get(self._name) is self):
            full = self._resolve()
            # Already resolved through another path; the link still points here.
            if stub.spec is self:
                stub.registry.attach_spec(stub, full)
        return stub

    @property
    def activated(self) -> bool:
        return self._stub.activated

    @activated.setter
    def activated(self, activated: bool) -> None:
        # The stub owns activation state.
        self._stub.activated = activated

    @property
    def default_gem(self) -> bool:
        return self._stub.default_gem

    @property
    def full_gem_path(self) -> Path | None:
        # Removed packages have no directory left; the full record still knows
        # where it used to live.
        return self._stub.full_gem_path or self._resolve().full_gem_path

    @property
    def loaded_from(self) -> Path:
        return self._stub.loaded_from

    @property
    def raw_require_paths(self) -> list[str]:
        return self._stub.raw_require_paths

    # ------------------------------------------------------------------
    # Full record
    # ------------------------------------------------------------------

    def to_yaml(self) -> str:
        return self._resolve().to_yaml()

    def _resolve(self) -> Specification:
        full = self._full
        if full is not None:
            return full

        with self._lock:
            if self._full is not None:
                return self._full

            stub = self._stub
            spec = stub.to_spec()
            if spec is self:
                log.debug("spec_alias_detected", full_name=self.full_name)
                spec = stub.loader.load(stub.loaded_from)
                if spec is not None:
                    stub.registry.attach_spec(stub, spec)

            if spec is None:
                log.warning(
                    "spec_resolution_failed",
                    full_name=self.full_name,
                    loaded_from=str(stub.loaded_from),
                )
                raise DescriptorError(
                    ErrorCode.DESCRIPTOR_MISSING,
                    f"The descriptor for {self.full_name} at {stub.loaded_from} "
                    "was missing or broken.",
                    suggestion=(
                        f"Try reinstalling {self._name} {self._version} "
                        "to fix the cached descriptor."
                    ),
                )

            spec.source = self._source
            self._full = spec
            log.debug("spec_resolved", full_name=self.full_name)
            return spec

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails.
        if name.startswith("_") or name in GATED_OPERATIONS:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")
        return getattr(self._resolve(), name)

    def __repr__(self) -> str:
        state = "resolved" if self._full is not None else "stub"
        return f"<SpecificationProxy {self.full_name} ({state})>"


# ----------------------------------------------------------------------
# Capability-gated operations
# ----------------------------------------------------------------------


class _ExtensionDirMixin:
    def _set_source(self, source: Any) -> None:
        super()._set_source(source)  # type: ignore[misc]
        # Stubs know nothing about sources, so the extension dir of a
        # git-sourced package is wrong until the source names it.
        extension_dir_name = getattr(source, "extension_dir_name", None)
        if not callable(extension_dir_name):
            return
        stub = self._stub  # type: ignore[attr-defined]
        path = os.path.join(stub.extensions_dir, extension_dir_name())
        stub.extension_dir = Path(os.path.abspath(path))


class _FullRequirePathsMixin:
    @property
    def full_require_paths(self) -> list[Path]:
        return self._stub.full_require_paths  # type: ignore[attr-defined]

    @property
    def load_paths(self) -> list[Path]:
        return self.full_require_paths


class _MissingExtensionsMixin:
    def missing_extensions(self) -> bool:
        # Answered by the stub so that checking extensions for every installed
        # package does not parse every descriptor.
        return self._checked_stub().missing_extensions()  # type: ignore[attr-defined]


class _StubGlobbingMixin:
    def matches_for_glob(self, pattern: str) -> list[str]:
        return self._stub.matches_for_glob(pattern)  # type: ignore[attr-defined]


_MIXINS: list[tuple[str, type]] = [
    ("extension_dir", _ExtensionDirMixin),
    ("full_require_paths", _FullRequirePathsMixin),
    ("missing_extensions", _MissingExtensionsMixin),
    ("stub_globbing", _StubGlobbingMixin),
]


@lru_cache(maxsize=None)
def proxy_class(capabilities: Capabilities) -> type[SpecificationProxy]:
    """Proxy type exposing exactly the operations ``capabilities`` supports."""
    bases = tuple(mixin for flag, mixin in _MIXINS if getattr(capabilities, flag))
    if not bases:
        return SpecificationProxy
    return type(
        "SpecificationProxy",
        (*bases, SpecificationProxy),
        {"capabilities": capabilities, "__module__": __name__},
    )


def from_stub(
    stub: Stub | SpecificationProxy,
    capabilities: Capabilities | None = None,
) -> SpecificationProxy:
    """Wrap ``stub`` in a proxy; an existing proxy is returned unchanged.

    Raw stubs are not deduplicated: wrapping the same stub twice gives two
    proxies, each resolving on its own. :meth:`Repository.specifications`
    keeps one proxy per stub.
    """
    if isinstance(stub, SpecificationProxy):
        return stub
    if capabilities is None:
        capabilities = default_capabilities()
    return proxy_class(capabilities)(stub)
