"""Shared fixtures: a throwaway install root with helpers to populate it."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
import yaml

from specproxy.layout import InstallLayout
from specproxy.loader import DescriptorLoader
from specproxy.registry import LoadedRegistry
from specproxy.stub import Stub

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


def descriptor_text(
    name: str,
    version: str,
    *,
    platform: str = "any",
    require_paths: tuple[str, ...] = ("lib",),
    extensions: tuple[str, ...] = (),
    dependencies: tuple[dict[str, Any], ...] = (),
    summary: str = "",
) -> str:
    header = f"# stub: {name} {version} {platform} {','.join(require_paths)}\n"
    if extensions:
        header += f"# stub: {','.join(extensions)}\n"
    body = {
        "name": name,
        "version": version,
        "platform": platform,
        "summary": summary or f"The {name} package",
        "dependencies": list(dependencies),
        "extensions": list(extensions),
        "require_paths": list(require_paths),
    }
    return header + yaml.safe_dump(body, sort_keys=False)


@pytest.fixture()
def layout(tmp_path: Path) -> InstallLayout:
    root = tmp_path / "install"
    root.mkdir()
    return InstallLayout.at(root)


@pytest.fixture()
def registry() -> LoadedRegistry:
    return LoadedRegistry()


@pytest.fixture()
def loader(layout: InstallLayout) -> DescriptorLoader:
    return DescriptorLoader(layout)


@pytest.fixture()
def make_package(layout: InstallLayout) -> Callable[..., Path]:
    """Write a descriptor (and, unless ``installed=False``, the package dir)."""

    def _make(
        name: str,
        version: str = "1.0.0",
        *,
        platform: str = "any",
        extensions: tuple[str, ...] = (),
        dependencies: tuple[dict[str, Any], ...] = (),
        default: bool = False,
        installed: bool = True,
    ) -> Path:
        full_name = name + "-" + version + ("" if platform == "any" else "-" + platform)
        path = layout.descriptor_path(full_name, default=default)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            descriptor_text(
                name,
                version,
                platform=platform,
                extensions=extensions,
                dependencies=dependencies,
            ),
            encoding="utf-8",
        )
        if installed:
            lib = layout.gem_dir(full_name) / "lib"
            lib.mkdir(parents=True)
            (lib / f"{name}.rb").write_text("# entry point\n", encoding="utf-8")
        return path

    return _make


@pytest.fixture()
def make_stub(
    make_package: Callable[..., Path],
    layout: InstallLayout,
    registry: LoadedRegistry,
    loader: DescriptorLoader,
) -> Callable[..., Stub]:
    """Write a package and return a stub read from its descriptor header."""

    def _make(name: str, version: str = "1.0.0", **kwargs: Any) -> Stub:
        path = make_package(name, version, **kwargs)
        return Stub.from_file(
            path,
            layout=layout,
            registry=registry,
            loader=loader,
            default_gem=kwargs.get("default", False),
        )

    return _make
