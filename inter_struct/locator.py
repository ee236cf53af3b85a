"""
Resolve target paths to record schemas by walking the source tree.

There is no real module resolution at this stage. A path such as
``crate.models.user.User`` is looked up like this:

- ``crate`` must be the root marker and stands for the source root.
- ``models`` is a directory below the root, or else ``models.py``.
- ``user`` the same, below ``models``.
- ``User`` is the class to find. If the last location is a directory, its
  ``__init__.py`` is searched.

Every call walks the disk again; nothing is cached.
"""

import logging
from pathlib import Path
from typing import Protocol

from .errors import Diagnostic, ErrorKind, Location
from .parser import TargetPath, parse_unit
from .schema import RecordSchema
from .settings import DEFAULT_ROOT_MARKER
from .types import Err, Ok

logger = logging.getLogger(__name__)

PACKAGE_ENTRY = "__init__.py"


class SchemaLocator(Protocol):
    """Anything that can turn a target path into a record schema."""

    root_marker: str

    def resolve(
        self, path: TargetPath, location: Location = Location()
    ) -> Ok[RecordSchema] | Err[Diagnostic]: ...


def check_root(
    path: TargetPath, root_marker: str, location: Location
) -> Err[Diagnostic] | None:
    """Reject paths that don't start at the source root."""
    if path.root == root_marker:
        return None
    return Err(
        Diagnostic(
            ErrorKind.PATH_RESOLUTION,
            f"inter_struct only supports paths in the current '{root_marker}.' "
            f"space for now, got {str(path)!r}.",
            location,
        )
    )


class FileSystemLocator:
    """Walks directories and files below the source root for every lookup."""

    def __init__(self, src_root: Path, root_marker: str = DEFAULT_ROOT_MARKER):
        self.src_root = Path(src_root)
        self.root_marker = root_marker

    def unit_path(
        self, path: TargetPath, location: Location = Location()
    ) -> Ok[Path] | Err[Diagnostic]:
        """Find the file that should contain the schema named by ``path``."""
        file_path = self.src_root

        for segment in path.modules:
            if file_path.is_file():
                # Modules declared inside a file can't be resolved.
                return Err(_not_found(file_path / segment, path, location))

            candidate = file_path / segment
            if candidate.is_dir():
                file_path = candidate
                continue

            unit = file_path / f"{segment}.py"
            if unit.is_file():
                file_path = unit
                continue

            return Err(_not_found(unit, path, location))

        if file_path.is_dir():
            file_path = file_path / PACKAGE_ENTRY

        return Ok(file_path)

    def resolve(
        self, path: TargetPath, location: Location = Location()
    ) -> Ok[RecordSchema] | Err[Diagnostic]:
        rejected = check_root(path, self.root_marker, location)
        if rejected is not None:
            return rejected

        found = self.unit_path(path, location)
        if isinstance(found, Err):
            logger.warning("Couldn't locate %s: %s", path, found.error.message)
            return found
        file_path = found.value

        parsed = parse_unit(file_path, location)
        if isinstance(parsed, Err):
            return parsed

        schema = parsed.value.find(path.identifier)
        if schema is None:
            return Err(
                Diagnostic(
                    ErrorKind.PATH_RESOLUTION,
                    f"Didn't find schema {path.identifier} in file {str(file_path)!r}",
                    location,
                )
            )

        logger.debug("Resolved %s to %s", path, file_path)
        return Ok(schema)


def _not_found(file_path: Path, path: TargetPath, location: Location) -> Diagnostic:
    return Diagnostic(
        ErrorKind.PATH_RESOLUTION,
        f"Failed to open file: {str(file_path)!r} while resolving {str(path)!r}",
        location,
    )
