"""
Field type classification and type equality.

A field is either ``Plain(T)`` or ``Optional(inner=T, outer=Optional[T])``.
Classification looks at the literal annotation only: ``Optional`` must be
written as a single bare name. Aliases of ``Optional``, ``typing.Optional[T]``
and ``Union[T, None]`` are all treated as plain types.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass

from .errors import Diagnostic, ErrorKind, Location
from .schema import TypeExpr

WRAPPER = "Optional"


@dataclass(frozen=True)
class Plain:
    type: TypeExpr


@dataclass(frozen=True)
class Optional:
    inner: TypeExpr
    # Kept so a value can be re-wrapped as a whole
    outer: TypeExpr


@dataclass(frozen=True)
class Invalid:
    diagnostic: Diagnostic


Classification = Plain | Optional | Invalid


def classify(ty: TypeExpr, location: Location = Location()) -> Classification:
    """
    Determine whether a type is ``Optional[T]`` or just ``T``.

    Unsupported or malformed shapes classify as ``Invalid`` and carry the
    diagnostic to report for the field.
    """
    node = ty.node

    # Multi-segment paths can't be the wrapper.
    if isinstance(node, ast.Attribute):
        return Plain(ty)

    if isinstance(node, ast.Name):
        if node.id != WRAPPER:
            return Plain(ty)
        return _invalid("Optional doesn't have a type argument.", location)

    if isinstance(node, ast.Subscript):
        value = node.value
        if isinstance(value, ast.Attribute):
            return Plain(ty)
        if not isinstance(value, ast.Name):
            return _unsupported(ty, location)
        if value.id != WRAPPER:
            return Plain(ty)

        argument = node.slice
        if isinstance(argument, ast.Tuple):
            if not argument.elts:
                return _invalid("Optional doesn't have a type argument.", location)
            argument = argument.elts[0]

        if not _is_type(argument):
            return _invalid("Optional argument isn't a type.", location)

        return Optional(inner=TypeExpr.from_node(argument), outer=ty)

    return _unsupported(ty, location)


def types_equal(a: TypeExpr, b: TypeExpr) -> bool:
    """
    Compare two types by their rendered text.

    This is crude, but there is no type information at this stage. Anything
    it misses is caught when the generated code runs against real types.
    """
    return a.text == b.text


def _is_type(node: ast.expr) -> bool:
    if isinstance(node, (ast.Name, ast.Attribute, ast.Subscript)):
        return True
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
        return _is_type(node.left) and _is_type(node.right)
    if isinstance(node, ast.Constant):
        # None, or a string forward reference
        return node.value is None or isinstance(node.value, str)
    return False


def _unsupported(ty: TypeExpr, location: Location) -> Invalid:
    return _invalid(
        f"Found a non-path type '{ty}'. This isn't supported by inter_struct.",
        location,
    )


def _invalid(message: str, location: Location) -> Invalid:
    return Invalid(Diagnostic(ErrorKind.FIELD_TYPE, message, location))
