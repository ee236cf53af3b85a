"""
Field Mapper - decides how one source field turns into one target field.

For a pair of same-named fields the decision depends on the mode and on
whether each side is ``T`` or ``Optional[T]``:

- Same plain type: assign the value.
- Plain into optional: wrap the value (elevation is always safe).
- Optional into optional with the same inner type: pass the value through.
- Optional into plain: an error, since it would need an unwrap nobody asked
  for. Under IntoDefault the field is left uncovered instead, so the target's
  default fills it.
- ``Optional[Optional[T]]`` into ``Optional[T]``: like optional into plain for
  Into and Merge. MergeRef and the soft merges take the inner value only
  when it is present.
- ``Optional[T]`` into ``Optional[Optional[T]]``: wrap the optional as a whole.

Soft merges only touch optional target fields that are currently absent
(None). Plain target fields are never touched by a soft merge.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional as TypingOptional

from .classify import Invalid, Optional, Plain, classify, types_equal
from .errors import Diagnostic, ErrorKind
from .modes import Mode
from .schema import FieldDescriptor, TypeExpr

logger = logging.getLogger(__name__)


class ActionKind(Enum):
    """What happens to one target field."""

    ASSIGN = "assign"  # target = source
    WRAP = "wrap"  # target = Some(source), the identity on Python values
    PASS_THROUGH = "pass-through"  # optional to optional, no re-wrap
    UNWRAP_IF_PRESENT = "unwrap-if-present"  # target = source only if source is present


@dataclass(frozen=True)
class FieldPair:
    """Two fields sharing a name, one per schema."""

    source: FieldDescriptor
    target: FieldDescriptor

    @property
    def name(self) -> str:
        return self.source.name


@dataclass(frozen=True)
class FieldAction:
    """A single step of a mapping plan."""

    source: str
    target: str
    kind: ActionKind
    clone: bool = False  # copy the source value (MergeRef)
    only_if_absent: bool = False  # soft merge: only when the target is None
    # Clone before checking the target. Only for the MergeRef soft wrap of a
    # whole optional; the copy is thrown away when the target is present.
    eager_clone: bool = False


@dataclass(frozen=True)
class FieldOutcome:
    """Result of mapping one pair: an action, errors, or neither (skipped)."""

    action: TypingOptional[FieldAction] = None
    errors: tuple[Diagnostic, ...] = ()

    @property
    def skipped(self) -> bool:
        return self.action is None and not self.errors


SKIP = FieldOutcome()


def map_field(pair: FieldPair, mode: Mode, soft: bool = False) -> FieldOutcome:
    """
    Decide the action for one matched field pair.

    Args:
        pair: Source and target field with the same name
        mode: Transformation mode
        soft: Soft variant; only valid for the merge modes

    Returns:
        FieldOutcome holding an action, the diagnostics for this field, or
        nothing when the field is deliberately left alone.
    """
    if soft and not mode.is_merge:
        raise ValueError(f"{mode.title} has no soft variant")

    src = classify(pair.source.type, pair.source.location)
    target = classify(pair.target.type, pair.target.location)

    # Skip anything where either of the fields is invalid.
    invalid = tuple(c.diagnostic for c in (src, target) if isinstance(c, Invalid))
    if invalid:
        return FieldOutcome(errors=invalid)

    def act(kind: ActionKind, eager: bool = False) -> FieldOutcome:
        clone = mode.clones
        return FieldOutcome(
            FieldAction(
                source=pair.source.name,
                target=pair.target.name,
                kind=kind,
                clone=clone,
                only_if_absent=soft,
                eager_clone=eager and clone and soft,
            )
        )

    match (src, target):
        # Both fields are plain.
        case (Plain(type=src_type), Plain(type=target_type)):
            if not types_equal(src_type, target_type):
                return _mismatch(pair, mode, src_type, target_type)
            if soft:
                return SKIP
            return act(ActionKind.ASSIGN)

        # The source is optional, the target isn't.
        case (Optional(), Plain()):
            if soft:
                return SKIP
            if mode is Mode.INTO_DEFAULT:
                return SKIP
            return _downgrade(pair, mode)

        # The target is optional and the value gets wrapped.
        case (Plain(type=src_type), Optional(inner=target_inner)):
            if not types_equal(src_type, target_inner):
                return _mismatch(pair, mode, src_type, pair.target.type)
            return act(ActionKind.WRAP)

        # Both are optional. It can be either of these:
        # - (Optional[T], Optional[T])
        # - (Optional[Optional[T]], Optional[T])
        # - (Optional[T], Optional[Optional[T]])
        case (Optional(inner=src_inner, outer=src_outer), Optional(inner=target_inner, outer=target_outer)):
            if types_equal(src_inner, target_inner):
                return act(ActionKind.PASS_THROUGH)
            if types_equal(src_inner, target_outer):
                if soft or mode is Mode.MERGE_REF:
                    return act(ActionKind.UNWRAP_IF_PRESENT)
                if mode is Mode.INTO_DEFAULT:
                    return SKIP
                return _downgrade(pair, mode)
            if types_equal(src_outer, target_inner):
                return act(ActionKind.WRAP, eager=True)
            return _mismatch(pair, mode, src_outer, target_outer)

    raise AssertionError(f"Unhandled classification pair: {src!r}, {target!r}")


def _verb(mode: Mode) -> str:
    return "merged" if mode.is_merge else "converted"


def _mismatch(
    pair: FieldPair, mode: Mode, src_type: TypeExpr, target_type: TypeExpr
) -> FieldOutcome:
    logger.debug("Type mismatch on field %s: %s vs %s", pair.name, src_type, target_type)
    return FieldOutcome(
        errors=(
            Diagnostic(
                ErrorKind.TYPE_MISMATCH,
                f"Type '{src_type}' cannot be {_verb(mode)} into field "
                f"'{pair.target.name}' of type '{target_type}'.",
                pair.source.location,
            ),
        )
    )


def _downgrade(pair: FieldPair, mode: Mode) -> FieldOutcome:
    return FieldOutcome(
        errors=(
            Diagnostic(
                ErrorKind.OPTIONAL_DOWNGRADE,
                f"inter_struct cannot put an optional into a non-optional value "
                f"({mode.title}): '{pair.source.name}: {pair.source.type}' into "
                f"'{pair.target.name}: {pair.target.type}'.",
                pair.source.location,
            ),
        )
    )
