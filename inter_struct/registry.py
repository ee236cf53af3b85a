"""
Schema registry: every schema of a source tree, keyed by dotted path.

The registry ingests the tree once, so resolving a target is a dictionary
lookup instead of a walk over the disk. Schemas can also be registered
explicitly under any path, which covers modules that have no file of their own.
"""

import logging
import re
from pathlib import Path
from typing import Iterator, Optional

from .errors import Diagnostic, ErrorKind, Location
from .locator import PACKAGE_ENTRY, check_root
from .parser import TargetPath, parse_target_path, parse_unit
from .schema import RecordSchema
from .settings import DEFAULT_ROOT_MARKER
from .types import Err, Ok

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SchemaRegistry:
    """Mapping of dotted path to record schema."""

    def __init__(self, root_marker: str = DEFAULT_ROOT_MARKER):
        self.root_marker = root_marker
        self._schemas: dict[str, RecordSchema] = {}
        self._units: dict[str, Optional[Path]] = {}
        self._broken: dict[str, Diagnostic] = {}

    @classmethod
    def from_source_root(
        cls, src_root: Path, root_marker: str = DEFAULT_ROOT_MARKER
    ) -> "SchemaRegistry":
        registry = cls(root_marker)
        registry.ingest(src_root)
        return registry

    def ingest(self, src_root: Path) -> None:
        """Register every top-level class of every unit below ``src_root``."""
        src_root = Path(src_root)
        units: dict[str, Path] = {}

        for file in sorted(src_root.rglob("*.py")):
            module = self._module_path(src_root, file)
            if module is None:
                continue
            # A package directory wins over a file of the same name.
            if file.name != PACKAGE_ENTRY and file.with_suffix("").is_dir():
                continue
            existing = units.get(module)
            if existing is not None and existing.name == PACKAGE_ENTRY:
                continue
            units[module] = file

        for module, file in units.items():
            self._units[module] = file
            parsed = parse_unit(file)
            if isinstance(parsed, Err):
                logger.warning("Skipping unit %s: %s", file, parsed.error.message)
                self._broken[module] = parsed.error
                continue
            for schema in parsed.value.schemas():
                self._schemas.setdefault(f"{module}.{schema.identifier}", schema)

        logger.info(
            "Registered %d schemas from %d units below %s",
            len(self._schemas),
            len(units),
            src_root,
        )

    def register(self, path: str | TargetPath, schema: RecordSchema) -> None:
        """Register a schema under an explicit path."""
        target = parse_target_path(path) if isinstance(path, str) else path
        self._schemas[str(target)] = schema
        self._units.setdefault(target.module_path, schema.file)
        self._broken.pop(target.module_path, None)

    def resolve(
        self, path: TargetPath, location: Location = Location()
    ) -> Ok[RecordSchema] | Err[Diagnostic]:
        rejected = check_root(path, self.root_marker, location)
        if rejected is not None:
            return rejected

        module = path.module_path
        if module in self._broken:
            broken = self._broken[module]
            return Err(Diagnostic(broken.kind, broken.message, location))

        if module not in self._units:
            return Err(
                Diagnostic(
                    ErrorKind.PATH_RESOLUTION,
                    f"Failed to open file: no source unit for module {module!r} "
                    f"while resolving {str(path)!r}",
                    location,
                )
            )

        schema = self._schemas.get(str(path))
        if schema is None:
            unit = self._units[module]
            where = str(unit) if unit is not None else module
            return Err(
                Diagnostic(
                    ErrorKind.PATH_RESOLUTION,
                    f"Didn't find schema {path.identifier} in file {where!r}",
                    location,
                )
            )
        return Ok(schema)

    def _module_path(self, src_root: Path, file: Path) -> Optional[str]:
        parts = file.relative_to(src_root).with_suffix("").parts
        if parts and parts[-1] == "__init__":
            parts = parts[:-1]
        if not all(_IDENTIFIER.match(part) for part in parts):
            return None
        return ".".join((self.root_marker, *parts))

    def __contains__(self, path: str) -> bool:
        return str(parse_target_path(path)) in self._schemas

    def __iter__(self) -> Iterator[str]:
        return iter(self._schemas)

    def __len__(self) -> int:
        return len(self._schemas)
