"""
Apply mapping plans to live objects.

The executor follows the plan exactly as the rendered code would, so a plan
can be checked without generating and importing source. Sources and targets
may be plain classes, dataclasses, pydantic models or dicts.
"""

import copy
from typing import Any, Type, TypeVar

from .errors import InterStructError
from .lib.model_helpers import build, get_value, set_value
from .mapper import ActionKind, FieldAction
from .render import check_completeness
from .synthesize import MappingPlan

_Target = TypeVar("_Target")


def ensure_valid(plan: MappingPlan) -> None:
    """Raise if the plan, or the code rendered from it, would be in error."""
    problems = list(plan.errors) + check_completeness(plan)
    if problems:
        raise InterStructError(problems)


def convert(plan: MappingPlan, source: Any, target_cls: Type[_Target]) -> _Target:
    """
    Build a new target from ``source`` (Into and IntoDefault plans).

    Uncovered fields of an IntoDefault plan are left to the target's defaults.
    """
    if plan.mode.is_merge:
        raise ValueError(f"convert() needs an Into plan, got {plan.mode.title}")
    ensure_valid(plan)

    values = {action.target: get_value(source, action.source) for action in plan.actions}
    return build(target_cls, values)


def merge_into(plan: MappingPlan, source: Any, target: _Target) -> _Target:
    """Update ``target`` in place from ``source`` (Merge and MergeRef plans)."""
    if not plan.mode.is_merge:
        raise ValueError(f"merge_into() needs a merge plan, got {plan.mode.title}")
    ensure_valid(plan)

    for action in plan.actions:
        apply_action(action, source, target)
    return target


def apply_action(action: FieldAction, source: Any, target: Any) -> None:
    """Perform one merge step."""
    value = get_value(source, action.source)

    if action.eager_clone:
        value = copy.deepcopy(value)

    if action.only_if_absent and get_value(target, action.target) is not None:
        return
    if action.kind is ActionKind.UNWRAP_IF_PRESENT and value is None:
        return

    if action.clone and not action.eager_clone:
        value = copy.deepcopy(value)
    # ASSIGN, WRAP and PASS_THROUGH all store the value as it is; a wrapped
    # value and a present optional look the same at runtime.
    set_value(target, action.target, value)
