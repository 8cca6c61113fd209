from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from specproxy.layout import InstallLayout, full_name_for


class Dependency(BaseModel):
    """A declared dependency on another package."""

    name: str
    requirement: str = ""  # PEP 440 specifier string, "" means any version
    kind: Literal["runtime", "development"] = "runtime"

    @field_validator("requirement")
    @classmethod
    def validate_requirement(cls, v: str) -> str:
        v = v.strip()
        try:
            SpecifierSet(v)
        except InvalidSpecifier as exc:
            raise ValueError(f"Invalid requirement: {v!r}") from exc
        return v

    @property
    def specifier(self) -> SpecifierSet:
        return SpecifierSet(self.requirement)


class Specification(BaseModel):
    """Complete metadata record parsed from a package descriptor."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    version: Version
    platform: str = "any"
    summary: str = ""
    authors: list[str] = []
    homepage: str | None = None
    licenses: list[str] = []
    dependencies: list[Dependency] = []
    extensions: list[str] = []
    require_paths: list[str] = ["lib"]
    files: list[str] = []
    metadata: dict[str, str] = {}

    # Install-time state, never written back to a descriptor.
    loaded_from: Path | None = Field(default=None, exclude=True)
    full_gem_path: Path | None = Field(default=None, exclude=True)
    extension_dir: Path | None = Field(default=None, exclude=True)
    default_gem: bool = Field(default=False, exclude=True)
    activated: bool = Field(default=False, exclude=True)
    source: Any = Field(default=None, exclude=True)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v or any(ch.isspace() for ch in v):
            raise ValueError(f"Invalid package name: {v!r}")
        return v

    @field_validator("version", mode="before")
    @classmethod
    def parse_version(cls, v: Any) -> Version:
        if isinstance(v, Version):
            return v
        try:
            return Version(str(v))
        except InvalidVersion as exc:
            raise ValueError(f"Invalid version: {v!r}") from exc

    @field_serializer("version")
    def serialize_version(self, v: Version) -> str:
        return str(v)

    @property
    def full_name(self) -> str:
        return full_name_for(self.name, self.version, self.platform)

    @property
    def runtime_dependencies(self) -> list[Dependency]:
        return [dep for dep in self.dependencies if dep.kind == "runtime"]

    def missing_extensions(self) -> bool:
        if self.default_gem or not self.extensions:
            return False
        if self.extension_dir is None:
            return True
        return not InstallLayout.build_complete_marker(self.extension_dir).exists()

    def to_yaml(self) -> str:
        """Render the descriptor document for this record."""
        return yaml.safe_dump(self.model_dump(mode="json"), sort_keys=False)
