"""
Diagnostics for inter_struct.

Every failure found while resolving targets or synthesizing plans becomes a
Diagnostic. Diagnostics are collected, never raised, so one bad field or one
bad target path does not hide the problems in the others. Callers that want an
exception convert the collected list with ``raise_if_errors``.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator, Optional


class ErrorKind(Enum):
    """Diagnostic categories."""

    CONFIGURATION = "configuration"  # Fatal for the whole invocation
    PATH_RESOLUTION = "path-resolution"  # Fatal for one target path
    SCHEMA_SHAPE = "schema-shape"  # Fatal for one (source, target) pair
    FIELD_TYPE = "field-type"  # Localized to one field
    TYPE_MISMATCH = "type-mismatch"
    OPTIONAL_DOWNGRADE = "optional-downgrade"
    INCOMPLETE_CONSTRUCTION = "incomplete-construction"  # Reported by the emitter


@dataclass(frozen=True, slots=True)
class Location:
    """Source position a diagnostic is anchored at."""

    file: Optional[Path] = None
    line: int = 0
    column: int = 0
    field: Optional[str] = None

    @classmethod
    def of(
        cls, node: ast.AST | None, file: Optional[Path] = None, field: str | None = None
    ) -> "Location":
        """Build a location from an AST node (1-based columns)."""
        if node is None:
            return cls(file=file, field=field)
        line = getattr(node, "lineno", 0)
        column = getattr(node, "col_offset", -1) + 1
        return cls(file=file, line=line, column=column, field=field)

    def __str__(self) -> str:
        name = str(self.file) if self.file is not None else "<unknown>"
        return f"{name}:{self.line}:{self.column}"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single user-facing error."""

    kind: ErrorKind
    message: str
    location: Location = Location()

    def __str__(self) -> str:
        return f"{self.location}: error[{self.kind.value}]: {self.message}"


class InterStructError(Exception):
    """Raised when a caller asks for a result that carries diagnostics."""

    def __init__(self, diagnostics: Iterable[Diagnostic]):
        self.diagnostics = list(diagnostics)
        messages = "; ".join(str(d) for d in self.diagnostics)
        super().__init__(f"inter_struct errors: {messages}")


class ConfigurationError(Exception):
    """Invalid settings (raised by ``load_settings``)."""


class Diagnostics:
    """Ordered collection of distinct diagnostics; adding never raises."""

    def __init__(self, items: Optional[Iterable[Diagnostic]] = None):
        self._items: list[Diagnostic] = []
        self.extend(items or [])

    def add(self, diagnostic: Diagnostic) -> None:
        # The hard and soft plans of one target report the same field twice
        if diagnostic not in self._items:
            self._items.append(diagnostic)

    def error(self, kind: ErrorKind, message: str, location: Location = Location()) -> Diagnostic:
        diagnostic = Diagnostic(kind, message, location)
        self.add(diagnostic)
        return diagnostic

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        for diagnostic in diagnostics:
            self.add(diagnostic)

    def of_kind(self, kind: ErrorKind) -> list[Diagnostic]:
        return [d for d in self._items if d.kind is kind]

    @property
    def has_errors(self) -> bool:
        return len(self._items) > 0

    def raise_if_errors(self) -> None:
        """Raise an InterStructError if anything was collected."""
        if self.has_errors:
            raise InterStructError(self._items)

    def as_list(self) -> list[Diagnostic]:
        return list(self._items)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return self.has_errors
