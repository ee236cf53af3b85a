"""
Transformation modes and the decorator names that request them.
"""

from enum import Enum


class Mode(Enum):
    """What the generated code does with a source value."""

    INTO = "into"  # Build a new target, every target field must be covered
    INTO_DEFAULT = "into_default"  # Build a new target, uncovered fields use defaults
    MERGE = "merge"  # Update a target in place, consuming the source
    MERGE_REF = "merge_ref"  # Update a target in place, cloning from the source

    @property
    def annotation(self) -> str:
        """Name of the class decorator carrying this mode's target paths."""
        return self.value

    @property
    def title(self) -> str:
        return "".join(part.capitalize() for part in self.value.split("_"))

    @property
    def is_merge(self) -> bool:
        return self in (Mode.MERGE, Mode.MERGE_REF)

    @property
    def clones(self) -> bool:
        return self is Mode.MERGE_REF

    @classmethod
    def parse(cls, name: str) -> "Mode":
        """Accept ``merge_ref``, ``merge-ref`` or ``MergeRef``."""
        normalized = name.strip().replace("-", "_")
        for mode in cls:
            if normalized.lower() in (mode.value, mode.title.lower()):
                return mode
        raise ValueError(
            f"Unknown mode {name!r}, expected one of: "
            + ", ".join(mode.value for mode in cls)
        )


ANNOTATIONS = {mode.annotation: mode for mode in Mode}
