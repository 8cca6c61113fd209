"""Unit tests for specproxy.models."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
import yaml
from packaging.version import Version
from pydantic import ValidationError

from specproxy.models import Dependency, GitSource, PathSource, RegistrySource, Specification

if TYPE_CHECKING:
    from pathlib import Path


class TestDependency:
    def test_defaults(self) -> None:
        dep = Dependency(name="rack")
        assert dep.requirement == ""
        assert dep.kind == "runtime"
        assert "9.9.9" in dep.specifier

    def test_requirement_is_validated(self) -> None:
        with pytest.raises(ValidationError):
            Dependency(name="rack", requirement="not a specifier")

    def test_specifier(self) -> None:
        dep = Dependency(name="rack", requirement=">=2.2,<4")
        assert "3.0.8" in dep.specifier
        assert "4.0" not in dep.specifier


class TestSpecification:
    def test_version_parsed(self) -> None:
        spec = Specification(name="rack", version="3.0.8")
        assert spec.version == Version("3.0.8")
        assert spec.full_name == "rack-3.0.8"

    def test_platform_in_full_name(self) -> None:
        spec = Specification(name="nokogiri", version="1.15.4", platform="arm64-darwin")
        assert spec.full_name == "nokogiri-1.15.4-arm64-darwin"

    def test_invalid_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Specification(name="two words", version="1.0")

    def test_invalid_version_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Specification(name="rack", version="one")

    def test_to_yaml_excludes_install_state(self, tmp_path: Path) -> None:
        spec = Specification(
            name="rack",
            version="3.0.8",
            dependencies=[Dependency(name="base64", requirement=">=0.1")],
            loaded_from=tmp_path / "rack-3.0.8.spec.yaml",
            source=RegistrySource(),
        )
        document = yaml.safe_load(spec.to_yaml())
        assert document["name"] == "rack"
        assert document["version"] == "3.0.8"
        assert document["dependencies"] == [
            {"name": "base64", "requirement": ">=0.1", "kind": "runtime"}
        ]
        assert "loaded_from" not in document
        assert "source" not in document

    def test_to_yaml_loads_back(self) -> None:
        spec = Specification(name="rack", version="3.0.8", licenses=["MIT"])
        assert Specification.model_validate(yaml.safe_load(spec.to_yaml())) == spec

    def test_missing_extensions(self, tmp_path: Path) -> None:
        spec = Specification(name="x", version="1", extensions=["ext/x/extconf.rb"])
        assert spec.missing_extensions() is True

        spec.extension_dir = tmp_path
        assert spec.missing_extensions() is True
        (tmp_path / "gem.build_complete").touch()
        assert spec.missing_extensions() is False

        spec.default_gem = True
        spec.extension_dir = None
        assert spec.missing_extensions() is False


class TestSources:
    def test_git_extension_dir_name(self) -> None:
        source = GitSource(
            uri="https://github.com/rails/rails.git",
            revision="deadbeefcafe0123456789abcdef0123456789ab",
        )
        assert source.extension_dir_name() == "rails-deadbeefcafe"

    def test_git_scp_uri(self) -> None:
        source = GitSource(uri="git@github.com:rails/rails.git", revision="abcdef1")
        assert source.extension_dir_name() == "rails-abcdef1"

    def test_git_explicit_name(self) -> None:
        source = GitSource(uri="https://example.com/x.git", revision="abcdef1", name="rails")
        assert source.extension_dir_name() == "rails-abcdef1"

    def test_git_revision_validated(self) -> None:
        with pytest.raises(ValidationError):
            GitSource(uri="https://example.com/x.git", revision="main")

    def test_other_sources_have_no_extension_dir_name(self) -> None:
        assert not hasattr(RegistrySource(), "extension_dir_name")
        assert not hasattr(PathSource(path="/src/rack"), "extension_dir_name")
