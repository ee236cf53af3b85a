from .classify import classify, types_equal
from .declare import declared_targets, into, into_default, merge, merge_ref
from .errors import Diagnostic, Diagnostics, ErrorKind, InterStructError
from .expand import Expansion, expand
from .locator import FileSystemLocator
from .mapper import ActionKind, FieldAction, FieldPair, map_field
from .modes import Mode
from .registry import SchemaRegistry
from .render import render_module, render_plan
from .runtime import convert, merge_into
from .schema import FieldDescriptor, RecordSchema, TypeExpr
from .settings import InterStructSettings, load_settings
from .synthesize import MappingPlan, synthesize

__all__ = [
    "classify",
    "types_equal",
    "into",
    "into_default",
    "merge",
    "merge_ref",
    "declared_targets",
    "Diagnostic",
    "Diagnostics",
    "ErrorKind",
    "InterStructError",
    "Expansion",
    "expand",
    "FileSystemLocator",
    "SchemaRegistry",
    "ActionKind",
    "FieldAction",
    "FieldPair",
    "map_field",
    "Mode",
    "render_module",
    "render_plan",
    "convert",
    "merge_into",
    "FieldDescriptor",
    "RecordSchema",
    "TypeExpr",
    "InterStructSettings",
    "load_settings",
    "MappingPlan",
    "synthesize",
]
