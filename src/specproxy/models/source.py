"""Where an installed package came from.

Only sources that cannot be derived from the install layout alone expose
``extension_dir_name()``; callers probe for it instead of checking types.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, field_validator


class RegistrySource(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str = "https://rubygems.org"


class PathSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str


class GitSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    uri: str
    revision: str
    name: str | None = None

    @field_validator("revision")
    @classmethod
    def validate_revision(cls, v: str) -> str:
        v = v.strip()
        if not re.fullmatch(r"[0-9a-f]{7,40}", v):
            raise ValueError(f"Invalid git revision: {v!r}")
        return v

    @property
    def base_name(self) -> str:
        if self.name:
            return self.name
        # Handles both URLs and scp-style "git@host:org/repo.git"
        return re.split(r"[/:]", self.uri.rstrip("/"))[-1].removesuffix(".git")

    def extension_dir_name(self) -> str:
        return f"{self.base_name}-{self.revision[:12]}"
