"""
Parsers for target paths, source units and mode annotations.

Target paths:
- Dotted form: "crate.models.user.User"
- Rust-style separators are accepted: "crate::models::user::User"

Mode annotations are class decorators taking a single path or a list of paths:
- @merge("crate.models.Base")
- @into(["crate.a.Target", "crate.b.Other"])
"""

import ast
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import Diagnostic, ErrorKind, Location
from .modes import ANNOTATIONS, Mode
from .schema import RecordSchema
from .types import Err, Ok

logger = logging.getLogger(__name__)

PACKAGE_NAME = "inter_struct"


@dataclass(frozen=True)
class TargetPath:
    """A parsed dotted path: root marker, module segments, schema identifier."""

    segments: tuple[str, ...]

    @property
    def root(self) -> str:
        return self.segments[0]

    @property
    def modules(self) -> tuple[str, ...]:
        return self.segments[1:-1]

    @property
    def identifier(self) -> str:
        return self.segments[-1]

    @property
    def module_path(self) -> str:
        """Dotted path of the unit holding the schema, e.g. ``crate.models``."""
        return ".".join(self.segments[:-1])

    def __str__(self) -> str:
        return ".".join(self.segments)


class PathParser:
    """Parser for target path strings."""

    SEGMENT_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

    def parse(self, path_str: str) -> TargetPath:
        """Parse a path string into a TargetPath."""
        if not path_str or not path_str.strip():
            raise ValueError("Empty path")

        normalized = path_str.strip().replace("::", ".")
        segments = tuple(normalized.split("."))

        for segment in segments:
            if not self.SEGMENT_PATTERN.match(segment):
                raise ValueError(f"Invalid path segment {segment!r} in {path_str!r}")

        if len(segments) < 2:
            raise ValueError(
                f"Path {path_str!r} needs a root segment and a schema identifier"
            )

        return TargetPath(segments)


def parse_target_path(path_str: str) -> TargetPath:
    """Convenience function to parse a path string."""
    parser = PathParser()
    return parser.parse(path_str)


@dataclass
class SourceUnit:
    """A parsed source file."""

    path: Path
    module: ast.Module

    @property
    def classes(self) -> list[ast.ClassDef]:
        return [node for node in self.module.body if isinstance(node, ast.ClassDef)]

    def schemas(self) -> list[RecordSchema]:
        return [RecordSchema.from_class(node, self.path) for node in self.classes]

    def find(self, identifier: str) -> Optional[RecordSchema]:
        """Linear scan of the top-level classes."""
        for node in self.classes:
            if node.name == identifier:
                return RecordSchema.from_class(node, self.path)
        return None


def parse_unit(
    path: Path,
    location: Location = Location(),
    kind: ErrorKind = ErrorKind.PATH_RESOLUTION,
) -> Ok[SourceUnit] | Err[Diagnostic]:
    """Read and parse a source file."""
    try:
        content = Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        return Err(Diagnostic(kind, f"Failed to parse file {str(path)!r}: {e}", location))
    except OSError as e:
        return Err(Diagnostic(kind, f"Failed to open file: {str(path)!r} ({e})", location))

    try:
        module = ast.parse(content, filename=str(path))
    except (SyntaxError, ValueError) as e:
        # ValueError: null bytes in the source
        return Err(Diagnostic(kind, f"Failed to parse file {str(path)!r}: {e}", location))

    logger.debug("Parsed %s", path)
    return Ok(SourceUnit(Path(path), module))


@dataclass(frozen=True)
class ModeAnnotation:
    """One mode decorator and the target paths it names, in declaration order."""

    mode: Mode
    paths: tuple[TargetPath, ...]
    location: Location = Location()


def parse_annotations(
    schema: RecordSchema,
) -> tuple[list[ModeAnnotation], list[Diagnostic]]:
    """
    Extract the mode annotations of a schema.

    Decorators that aren't inter_struct annotations are ignored.
    A malformed path only drops that path; the rest of the annotation is kept.
    """
    annotations: list[ModeAnnotation] = []
    diagnostics: list[Diagnostic] = []
    parser = PathParser()

    for decorator in schema.decorators:
        call = decorator if isinstance(decorator, ast.Call) else None
        mode = _annotation_mode(call.func if call is not None else decorator)
        if mode is None:
            continue
        location = Location.of(decorator, schema.file)

        # A bare `@merge` names no targets.
        if call is None or len(call.args) != 1 or call.keywords:
            diagnostics.append(_usage_error(location))
            continue

        argument = call.args[0]
        if isinstance(argument, ast.Constant):
            elements = [argument]
        elif isinstance(argument, (ast.List, ast.Tuple)):
            elements = list(argument.elts)
        else:
            diagnostics.append(_usage_error(location))
            continue

        paths = []
        for element in elements:
            element_location = Location.of(element, schema.file)
            if not (isinstance(element, ast.Constant) and isinstance(element.value, str)):
                diagnostics.append(
                    Diagnostic(
                        ErrorKind.CONFIGURATION,
                        "Only paths are allowed in inter_struct's annotations.",
                        element_location,
                    )
                )
                continue
            try:
                paths.append(parser.parse(element.value))
            except ValueError as e:
                diagnostics.append(
                    Diagnostic(
                        ErrorKind.CONFIGURATION,
                        f"Only paths are allowed in inter_struct's annotations: {e}",
                        element_location,
                    )
                )

        annotations.append(ModeAnnotation(mode, tuple(paths), location))

    return annotations, diagnostics


def _annotation_mode(name: ast.expr) -> Optional[Mode]:
    if isinstance(name, ast.Name):
        return ANNOTATIONS.get(name.id)
    # Only `inter_struct.merge`; other dotted decorators belong to someone else.
    if (
        isinstance(name, ast.Attribute)
        and isinstance(name.value, ast.Name)
        and name.value.id == PACKAGE_NAME
    ):
        return ANNOTATIONS.get(name.attr)
    return None


def _usage_error(location: Location) -> Diagnostic:
    return Diagnostic(
        ErrorKind.CONFIGURATION,
        "inter_struct's annotation parameters should be either a single path "
        "or a list of paths as str, such as '[\"crate.your.path\"]'.",
        location,
    )
