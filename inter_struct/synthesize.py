"""
Mapping Plan synthesis.

A plan covers one (source, target, mode) triple. Fields are matched by name;
fields that exist on only one side are left out of the plan. A bad field never
stops the loop, so every problem of a pair is reported in one go.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .errors import Diagnostic, Location
from .mapper import FieldAction, FieldPair, map_field
from .modes import Mode
from .parser import TargetPath
from .schema import RecordSchema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MappingPlan:
    """Ordered field actions and diagnostics for one source/target pair."""

    source: RecordSchema
    target: RecordSchema
    mode: Mode
    soft: bool = False
    target_path: Optional[TargetPath] = None
    actions: tuple[FieldAction, ...] = ()
    errors: tuple[Diagnostic, ...] = ()
    # Target fields without a same-named source field
    unmatched: tuple[str, ...] = ()
    # Target fields no action writes to (unmatched, skipped or failed)
    uncovered: tuple[str, ...] = ()

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def shape_valid(self) -> bool:
        return self.source.is_named and self.target.is_named

    def action_for(self, target_field: str) -> Optional[FieldAction]:
        for action in self.actions:
            if action.target == target_field:
                return action
        return None

    def __str__(self) -> str:
        variant = " (soft)" if self.soft else ""
        target = self.target_path or self.target.identifier
        return f"{self.source.identifier} -> {target} [{self.mode.title}{variant}]"


def match_fields(source: RecordSchema, target: RecordSchema) -> list[FieldPair]:
    """Name-intersection of two schemas, in source field order."""
    pairs = []
    for src_field in source.fields:
        target_field = target.get(src_field.name)
        if target_field is not None:
            pairs.append(FieldPair(src_field, target_field))
    return pairs


def synthesize(
    source: RecordSchema,
    target: RecordSchema,
    mode: Mode,
    soft: bool = False,
    target_path: Optional[TargetPath] = None,
    location: Optional[Location] = None,
) -> MappingPlan:
    """
    Build the mapping plan for one source and one target.

    Args:
        source: Schema values are read from
        target: Schema values are written to
        mode: Transformation mode
        soft: Soft merge variant
        target_path: Path the target was resolved from, kept for rendering
        location: Where the target was requested; anchors target shape errors

    Returns:
        MappingPlan. Schema shape errors short-circuit into a plan with a
        single error and no actions.
    """
    if soft and not mode.is_merge:
        raise ValueError(f"{mode.title} has no soft variant")

    plan = dict(source=source, target=target, mode=mode, soft=soft, target_path=target_path)

    shape_error = source.shape_error() or target.shape_error(location)
    if shape_error is not None:
        return MappingPlan(**plan, errors=(shape_error,))

    pairs = match_fields(source, target)
    actions: list[FieldAction] = []
    errors: list[Diagnostic] = []

    for pair in pairs:
        outcome = map_field(pair, mode, soft)
        if outcome.action is not None:
            actions.append(outcome.action)
        errors.extend(outcome.errors)

    matched = {pair.target.name for pair in pairs}
    written = {action.target for action in actions}
    unmatched = tuple(name for name in target.field_names if name not in matched)
    uncovered = tuple(name for name in target.field_names if name not in written)

    result = MappingPlan(
        **plan,
        actions=tuple(actions),
        errors=tuple(errors),
        unmatched=unmatched,
        uncovered=uncovered,
    )
    logger.info(
        "Synthesized %s: %d actions, %d errors", result, len(actions), len(errors)
    )
    return result
