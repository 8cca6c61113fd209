from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DESCRIPTOR_SUFFIX = ".spec.yaml"
BUILD_COMPLETE_MARKER = "gem.build_complete"


@dataclass(frozen=True)
class InstallLayout:
    """Directory layout of an install root.

    root/
      specifications/            <full_name>.spec.yaml descriptors
      specifications/default/    descriptors of packages shipped with the runtime
      gems/<full_name>/          unpacked package contents
      extensions/<full_name>/    built native extensions
    """

    root: Path

    @classmethod
    def at(cls, root: str | Path) -> InstallLayout:
        return cls(Path(root).expanduser().resolve())

    @property
    def specifications_dir(self) -> Path:
        return self.root / "specifications"

    @property
    def default_specifications_dir(self) -> Path:
        return self.specifications_dir / "default"

    @property
    def gems_dir(self) -> Path:
        return self.root / "gems"

    @property
    def extensions_dir(self) -> Path:
        return self.root / "extensions"

    def gem_dir(self, full_name: str) -> Path:
        return self.gems_dir / full_name

    def extension_dir(self, full_name: str) -> Path:
        return self.extensions_dir / full_name

    def descriptor_path(self, full_name: str, *, default: bool = False) -> Path:
        base = self.default_specifications_dir if default else self.specifications_dir
        return base / f"{full_name}{DESCRIPTOR_SUFFIX}"

    @staticmethod
    def build_complete_marker(extension_dir: Path) -> Path:
        return extension_dir / BUILD_COMPLETE_MARKER


def full_name_for(name: str, version: object, platform: str) -> str:
    """``name-version``, suffixed with ``-platform`` for platform-specific packages."""
    if platform == "any":
        return f"{name}-{version}"
    return f"{name}-{version}-{platform}"
