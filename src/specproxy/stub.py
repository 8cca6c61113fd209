"""Cheap per-package summary records.

A stub is built from the leading ``# stub:`` comment lines of a descriptor,
so enumerating every installed package never parses a full descriptor:

    # stub: rack 3.0.8 any lib
    # stub: ext/rack/extconf.rb
    name: rack
    ...

The second header line (declared extensions) is optional. Require paths and
extensions are comma separated.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from packaging.version import InvalidVersion, Version

from specproxy.errors import DescriptorError, ErrorCode
from specproxy.layout import InstallLayout, full_name_for

if TYPE_CHECKING:
    from specproxy.loader import DescriptorLoader
    from specproxy.registry import LoadedRegistry

STUB_PREFIX = "# stub: "

# Only this many leading lines are inspected for the header.
_HEADER_LINES = 3


def _split_list(value: str) -> list[str]:
    return [item for item in value.split(",") if item]


def _read_header(path: Path) -> list[str]:
    lines: list[str] = []
    with path.open(encoding="utf-8") as fh:
        for _ in range(_HEADER_LINES):
            line = fh.readline()
            if not line.startswith("#"):
                break
            if line.startswith(STUB_PREFIX):
                lines.append(line[len(STUB_PREFIX) :].strip())
    return lines


class Stub:
    """Lightweight record for one installed package."""

    def __init__(
        self,
        name: str,
        version: str | Version,
        platform: str = "any",
        require_paths: list[str] | None = None,
        *,
        loaded_from: Path,
        layout: InstallLayout,
        registry: LoadedRegistry,
        loader: DescriptorLoader,
        extensions: list[str] | None = None,
        default_gem: bool = False,
    ) -> None:
        self._name = name
        self._version = version if isinstance(version, Version) else Version(version)
        self._platform = platform
        self.raw_require_paths = list(require_paths) if require_paths is not None else ["lib"]
        self.extensions = list(extensions or [])
        self.loaded_from = Path(loaded_from)
        self.default_gem = default_gem
        self.registry = registry
        self._layout = layout
        self.loader = loader

        self.extension_dir = layout.extension_dir(self.full_name)
        self.activated = False
        # Cached result of to_spec(); may be repointed by LoadedRegistry.attach_spec.
        self.spec: Any = None

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        *,
        layout: InstallLayout,
        registry: LoadedRegistry,
        loader: DescriptorLoader,
        default_gem: bool = False,
    ) -> Stub:
        """Build a stub from a descriptor's header lines only."""
        path = Path(path)
        try:
            header = _read_header(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise DescriptorError(
                ErrorCode.STUB_HEADER_INVALID,
                f"Could not read stub header from {path}",
            ) from exc

        fields = header[0].split(" ") if header else []
        if len(fields) != 4:
            raise DescriptorError(
                ErrorCode.STUB_HEADER_INVALID,
                f"Descriptor at {path} has no valid '# stub:' header",
                suggestion="Expected '# stub: <name> <version> <platform> <require_paths>'.",
            )
        name, version, platform, require_paths = fields
        try:
            parsed_version = Version(version)
        except InvalidVersion as exc:
            raise DescriptorError(
                ErrorCode.STUB_HEADER_INVALID,
                f"Descriptor at {path} has an invalid version in its stub header: {version!r}",
            ) from exc

        return cls(
            name,
            parsed_version,
            platform,
            _split_list(require_paths),
            loaded_from=path,
            layout=layout,
            registry=registry,
            loader=loader,
            extensions=_split_list(header[1]) if len(header) > 1 else [],
            default_gem=default_gem,
        )

    # Identity is fixed at construction.

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
        return full_name_for(self._name, self._version, self._platform)

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    @property
    def full_gem_path(self) -> Path | None:
        """Package directory, or ``None`` once it has been removed from disk."""
        path = self._layout.gem_dir(self.full_name)
        return path if path.is_dir() else None

    @property
    def extensions_dir(self) -> Path:
        return self._layout.extensions_dir

    @property
    def full_require_paths(self) -> list[Path]:
        base = self._layout.gem_dir(self.full_name)
        paths = [base / require_path for require_path in self.raw_require_paths]
        if self.extensions:
            paths.append(self.extension_dir)
        return paths

    def matches_for_glob(self, pattern: str) -> list[str]:
        base = self.full_gem_path
        if base is None:
            return []
        matches: set[str] = set()
        for require_path in self.raw_require_paths:
            matches.update(str(p) for p in (base / require_path).glob(pattern))
        return sorted(matches)

    def missing_extensions(self) -> bool:
        if self.default_gem or not self.extensions:
            return False
        if InstallLayout.build_complete_marker(self.extension_dir).exists():
            return False
        spec = self.to_spec()
        return spec.missing_extensions() if spec is not None else True

    # ------------------------------------------------------------------
    # Full record
    # ------------------------------------------------------------------

    def to_spec(self) -> Any:
        """Return the full record for this package, or ``None`` if it cannot be found.

        The currently loaded entry for this name wins when its version matches,
        which may be a proxy wrapping this very stub.
        """
        if self.spec is None:
            loaded = self.registry.get(self._name)
            if loaded is not None and loaded.version == self._version:
                self.spec = loaded
        if self.spec is None:
            self.spec = self.loader.load(self.loaded_from)
        return self.spec

    def __repr__(self) -> str:
        return f"<Stub {self.full_name} loaded_from={str(self.loaded_from)!r}>"
