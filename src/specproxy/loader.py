"""Full descriptor loading.

Parsing a descriptor is the expensive path that proxies try to avoid. A
descriptor that does not exist yields ``None`` (the package was probably
uninstalled); one that exists but cannot be parsed raises
:class:`DescriptorError` with the underlying cause chained.
"""

from __future__ import annotations

from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from specproxy.errors import DescriptorError, ErrorCode
from specproxy.layout import InstallLayout
from specproxy.models.specification import Specification

log = structlog.get_logger()


class DescriptorLoader:
    """Parses ``*.spec.yaml`` descriptors into :class:`Specification` records."""

    def __init__(self, layout: InstallLayout) -> None:
        self._layout = layout
        self.load_count = 0

    def load(self, path: str | Path) -> Specification | None:
        path = Path(path)
        self.load_count += 1

        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            log.debug("descriptor_not_found", path=str(path))
            return None
        except OSError as exc:
            raise DescriptorError(
                ErrorCode.DESCRIPTOR_MALFORMED,
                f"Could not read descriptor at {path}: {exc.strerror or exc}",
            ) from exc

        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise DescriptorError(
                ErrorCode.DESCRIPTOR_MALFORMED,
                f"Descriptor at {path} is not valid YAML",
            ) from exc

        if not isinstance(document, dict):
            raise DescriptorError(
                ErrorCode.DESCRIPTOR_MALFORMED,
                f"Descriptor at {path} must be a mapping, got {type(document).__name__}",
            )

        try:
            spec = Specification.model_validate(document)
        except ValidationError as exc:
            raise DescriptorError(
                ErrorCode.DESCRIPTOR_MALFORMED,
                f"Descriptor at {path} failed validation: {exc.error_count()} error(s)",
            ) from exc

        spec.loaded_from = path
        spec.full_gem_path = self._layout.gem_dir(spec.full_name)
        spec.extension_dir = self._layout.extension_dir(spec.full_name)
        spec.default_gem = path.parent == self._layout.default_specifications_dir
        log.debug("descriptor_loaded", path=str(path), full_name=spec.full_name)
        return spec
