"""Registry of currently loaded package specifications.

One entry per package name. Entries may be full :class:`Specification`
records or proxies; looking a name up can therefore hand a proxy back to
itself, which the proxy detects during resolution.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from collections.abc import Iterator

    from specproxy.models.specification import Specification
    from specproxy.stub import Stub

log = structlog.get_logger()


class LoadedRegistry:
    """Explicit handle on the loaded-package mapping.

    Constructed by whoever owns the process state (a repository, a test) and
    passed down, so separate registries never share entries.
    """

    def __init__(self) -> None:
        # package name → spec or proxy currently considered loaded
        self._loaded: dict[str, Any] = {}

    def get(self, name: str) -> Any | None:
        return self._loaded.get(name)

    def register(self, spec: Any) -> None:
        previous = self._loaded.get(spec.name)
        self._loaded[spec.name] = spec
        if previous is not None and previous is not spec:
            log.info("loaded_spec_replaced", name=spec.name, version=str(spec.version))
        else:
            log.debug("loaded_spec_registered", name=spec.name, version=str(spec.version))

    def unregister(self, name: str) -> None:
        self._loaded.pop(name, None)

    def attach_spec(self, stub: Stub, spec: Specification) -> None:
        """Point ``stub``'s cached link at ``spec``; the mapping is not touched."""
        stub.spec = spec

    def __contains__(self, name: object) -> bool:
        return name in self._loaded

    def __len__(self) -> int:
        return len(self._loaded)

    def __iter__(self) -> Iterator[str]:
        return iter(self._loaded)
