"""
Record schemas as read from source units.

A record schema is a top-level class whose body declares its fields as
annotated names. Only the written annotation is kept; nothing is imported or
evaluated.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .errors import Diagnostic, ErrorKind, Location


@dataclass(frozen=True)
class TypeExpr:
    """
    A declared type, compared by its rendered source text.

    Two expressions that mean the same type but are spelled differently
    (an alias, ``typing.List`` vs ``List``) are different TypeExprs.
    """

    text: str
    node: ast.expr = field(compare=False, repr=False)

    @classmethod
    def from_node(cls, node: ast.expr) -> "TypeExpr":
        return cls(ast.unparse(node), node)

    @classmethod
    def parse(cls, source: str) -> "TypeExpr":
        """Parse a type written as source text, e.g. ``"Optional[str]"``."""
        return cls.from_node(ast.parse(source, mode="eval").body)

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class FieldDescriptor:
    """A named, typed field of a record schema."""

    name: str
    type: TypeExpr
    has_default: bool = False
    location: Location = field(default=Location(), compare=False, repr=False)

    @classmethod
    def of(cls, name: str, type_source: str, has_default: bool = False) -> "FieldDescriptor":
        return cls(name, TypeExpr.parse(type_source), has_default)


@dataclass(frozen=True)
class RecordSchema:
    """
    A class declaration seen as a flat set of named fields.

    ``shape_problem`` is set when the class is not a named-field record
    (no annotated fields, or a field declared through a non-name target).
    Such schemas are rejected before any field mapping happens.
    """

    identifier: str
    fields: tuple[FieldDescriptor, ...]
    shape_problem: Optional[str] = None
    file: Optional[Path] = field(default=None, compare=False)
    location: Location = field(default=Location(), compare=False, repr=False)
    decorators: tuple[ast.expr, ...] = field(default=(), compare=False, repr=False)

    @classmethod
    def from_class(cls, node: ast.ClassDef, file: Optional[Path] = None) -> "RecordSchema":
        """Read the fields of a class definition."""
        fields: list[FieldDescriptor] = []
        problem = None

        for statement in node.body:
            if not isinstance(statement, ast.AnnAssign):
                continue
            if not isinstance(statement.target, ast.Name):
                problem = (
                    f"'{ast.unparse(statement.target)}' isn't a named field; "
                    "inter_struct only works on classes with named fields."
                )
                continue
            name = statement.target.id
            fields.append(
                FieldDescriptor(
                    name=name,
                    type=TypeExpr.from_node(statement.annotation),
                    has_default=statement.value is not None,
                    location=Location.of(statement, file, name),
                )
            )

        if not fields and problem is None:
            problem = (
                f"{node.name} declares no fields; "
                "inter_struct only works on classes with named fields."
            )

        return cls(
            identifier=node.name,
            fields=tuple(fields),
            shape_problem=problem,
            file=file,
            location=Location.of(node, file),
            decorators=tuple(node.decorator_list),
        )

    @classmethod
    def from_source(cls, source: str, identifier: Optional[str] = None) -> "RecordSchema":
        """Build a schema from class source text (the first class, or the named one)."""
        module = ast.parse(source)
        for node in module.body:
            if isinstance(node, ast.ClassDef) and identifier in (None, node.name):
                return cls.from_class(node)
        raise ValueError(f"No class {identifier or ''} found in source")

    @property
    def is_named(self) -> bool:
        return self.shape_problem is None

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def get(self, name: str) -> Optional[FieldDescriptor]:
        for candidate in self.fields:
            if candidate.name == name:
                return candidate
        return None

    def shape_error(self, location: Optional[Location] = None) -> Optional[Diagnostic]:
        if self.shape_problem is None:
            return None
        return Diagnostic(ErrorKind.SCHEMA_SHAPE, self.shape_problem, location or self.location)
