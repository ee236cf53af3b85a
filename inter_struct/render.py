"""
Render mapping plans as Python source.

One function per plan:

- Into:          ``into_<target>(source)`` returns a new target.
- IntoDefault:   ``into_default_<target>(source)``; uncovered fields are left
                 to the target's own defaults.
- Merge:         ``merge_into_<target>[_soft](source, target)`` updates the
                 target in place with the source's values.
- MergeRef:      ``merge_into_ref_<target>[_soft](source, target)`` does the
                 same with copies of the source's values.

Targets are referenced by their class name; the caller provides it in the
namespace the code runs in.
"""

from typing import Iterable, Optional

from .errors import Diagnostic, ErrorKind, Location
from .lib.naming import snake_case
from .mapper import ActionKind, FieldAction
from .modes import Mode
from .synthesize import MappingPlan

INDENT = "    "

_PREFIXES = {
    Mode.INTO: "into",
    Mode.INTO_DEFAULT: "into_default",
    Mode.MERGE: "merge_into",
    Mode.MERGE_REF: "merge_into_ref",
}


def function_name(plan: MappingPlan) -> str:
    name = f"{_PREFIXES[plan.mode]}_{snake_case(plan.target.identifier)}"
    return f"{name}_soft" if plan.soft else name


def check_completeness(
    plan: MappingPlan, location: Optional[Location] = None
) -> list[Diagnostic]:
    """
    Into must initialize every target field.

    Only target fields without a same-named source field are reported here;
    fields that failed to map already carry their own error.
    """
    if plan.mode is not Mode.INTO or not plan.shape_valid:
        return []
    return [
        Diagnostic(
            ErrorKind.INCOMPLETE_CONSTRUCTION,
            f"Missing field '{name}' in initializer of '{plan.target.identifier}': "
            f"{plan.source.identifier} has no field of that name.",
            location or plan.source.location,
        )
        for name in plan.unmatched
    ]


def render_plan(plan: MappingPlan) -> str:
    """Render one plan as a function definition."""
    header = [f"# {plan}"]
    header.extend(f"# {diagnostic}" for diagnostic in plan.errors)

    if not plan.shape_valid:
        return "\n".join(header) + "\n"

    if plan.mode.is_merge:
        body = _merge_body(plan)
        signature = f"def {function_name(plan)}(source, target):"
    else:
        body = _into_body(plan)
        signature = f"def {function_name(plan)}(source):"

    return "\n".join([*header, signature, *body]) + "\n"


def render_module(plans: Iterable[MappingPlan]) -> str:
    """Render several plans as one module."""
    plans = list(plans)
    parts = []
    if any(action.clone for plan in plans for action in plan.actions):
        parts.append("import copy\n")
    parts.extend(render_plan(plan) for plan in plans)
    return "\n\n".join(parts)


def render_diagnostic(diagnostic: Diagnostic) -> str:
    return str(diagnostic)


def _into_body(plan: MappingPlan) -> list[str]:
    lines = []
    if plan.mode is Mode.INTO_DEFAULT and plan.uncovered:
        lines.append(
            f"{INDENT}# Left to {plan.target.identifier}'s defaults: "
            + ", ".join(plan.uncovered)
        )
    lines.append(f"{INDENT}return {plan.target.identifier}(")
    for action in plan.actions:
        lines.append(f"{INDENT * 2}{action.target}=source.{action.source},")
    lines.append(f"{INDENT})")
    return lines


def _merge_body(plan: MappingPlan) -> list[str]:
    lines: list[str] = []
    for action in plan.actions:
        lines.extend(_merge_statement(action))
    return lines or [f"{INDENT}pass"]


def _value(action: FieldAction) -> str:
    if action.clone:
        return f"copy.deepcopy(source.{action.source})"
    return f"source.{action.source}"


def _merge_statement(action: FieldAction) -> list[str]:
    target = f"target.{action.target}"
    conditions = []
    if action.only_if_absent:
        conditions.append(f"{target} is None")
    if action.kind is ActionKind.UNWRAP_IF_PRESENT:
        conditions.append(f"source.{action.source} is not None")

    if action.eager_clone:
        # The copy is made whether or not it ends up being used.
        return [
            f"{INDENT}value = {_value(action)}",
            f"{INDENT}if {' and '.join(conditions)}:",
            f"{INDENT * 2}{target} = value",
        ]

    if not conditions:
        return [f"{INDENT}{target} = {_value(action)}"]
    return [
        f"{INDENT}if {' and '.join(conditions)}:",
        f"{INDENT * 2}{target} = {_value(action)}",
    ]
