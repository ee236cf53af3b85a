"""
Expansion of one annotated source class.

This is the driver tying the pieces together for a single invocation:

1. Read the source unit and find the annotated class.
2. Locate the source root (a configuration error stops everything).
3. Read the mode annotations and check every requested mode has one.
4. Resolve each target path; a failing path only drops that target.
5. Synthesize a plan per target and mode (merges get a hard and a soft plan).

All problems end up in one Diagnostics list; nothing raises on bad input.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from .errors import Diagnostics, ErrorKind, Location
from .locator import FileSystemLocator, SchemaLocator
from .modes import Mode
from .parser import parse_annotations, parse_unit
from .registry import SchemaRegistry
from .render import check_completeness, render_module
from .schema import RecordSchema
from .settings import InterStructSettings, load_settings, source_root
from .synthesize import MappingPlan, synthesize
from .types import Err

logger = logging.getLogger(__name__)


@dataclass
class Expansion:
    """Plans and diagnostics produced for one source class."""

    source: Optional[RecordSchema]
    plans: list[MappingPlan] = field(default_factory=list)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    @property
    def has_errors(self) -> bool:
        return self.diagnostics.has_errors

    def raise_if_errors(self) -> None:
        """Raise an exception if there are diagnostics."""
        self.diagnostics.raise_if_errors()

    def plans_for(self, mode: Mode, soft: bool = False) -> list[MappingPlan]:
        return [p for p in self.plans if p.mode is mode and p.soft == soft]

    def plan(self, target: str, mode: Mode, soft: bool = False) -> MappingPlan:
        """Look up a plan by target path or target class name."""
        for candidate in self.plans_for(mode, soft):
            if target in (str(candidate.target_path), candidate.target.identifier):
                return candidate
        raise KeyError(f"No {mode.title} plan for {target!r}")

    def render(self) -> str:
        return render_module(self.plans)


def build_locator(settings: InterStructSettings, src_root: Path) -> SchemaLocator:
    if settings.resolver == "filesystem":
        return FileSystemLocator(src_root, settings.root_marker)
    return SchemaRegistry.from_source_root(src_root, settings.root_marker)


def expand(
    source_file: Path | str,
    class_name: str,
    modes: Optional[Sequence[Mode | str]] = None,
    settings: Optional[InterStructSettings] = None,
    locator: Optional[SchemaLocator] = None,
) -> Expansion:
    """
    Synthesize every requested plan for one annotated class.

    Args:
        source_file: File declaring the source class
        class_name: Name of the source class
        modes: Modes to generate; defaults to every mode the class is annotated with
        settings: Settings; loaded from the environment when omitted
        locator: Schema locator; built from the settings when omitted

    Returns:
        Expansion with the plans in annotation order and all diagnostics.
    """
    settings = settings or load_settings()
    diagnostics = Diagnostics()

    parsed = parse_unit(Path(source_file), kind=ErrorKind.CONFIGURATION)
    if isinstance(parsed, Err):
        diagnostics.add(parsed.error)
        return Expansion(None, diagnostics=diagnostics)

    schema = parsed.value.find(class_name)
    if schema is None:
        diagnostics.error(
            ErrorKind.CONFIGURATION,
            f"Didn't find class {class_name} in file {str(source_file)!r}",
            Location(file=Path(source_file)),
        )
        return Expansion(None, diagnostics=diagnostics)

    if locator is None:
        root = source_root(settings, schema.location)
        if isinstance(root, Err):
            diagnostics.add(root.error)
            return Expansion(schema, diagnostics=diagnostics)
        locator = build_locator(settings, root.value)

    annotations, annotation_errors = parse_annotations(schema)
    diagnostics.extend(annotation_errors)

    if modes is None:
        requested = list(dict.fromkeys(a.mode for a in annotations))
    else:
        requested = [Mode.parse(m) if isinstance(m, str) else m for m in modes]

    annotated = {a.mode for a in annotations}
    for mode in requested:
        if mode not in annotated:
            diagnostics.error(
                ErrorKind.CONFIGURATION,
                f"{mode.title} requires the '{mode.annotation}' annotation.",
                schema.location,
            )

    plans: list[MappingPlan] = []
    for annotation in annotations:
        if annotation.mode not in requested:
            continue
        mode = annotation.mode

        for path in annotation.paths:
            resolved = locator.resolve(path, annotation.location)
            if isinstance(resolved, Err):
                diagnostics.add(resolved.error)
                continue

            for soft in (False, True) if mode.is_merge else (False,):
                plan = synthesize(
                    schema, resolved.value, mode, soft, path, annotation.location
                )
                diagnostics.extend(plan.errors)
                diagnostics.extend(check_completeness(plan, annotation.location))
                plans.append(plan)

    logger.info(
        "Expanded %s: %d plans, %d diagnostics",
        class_name,
        len(plans),
        len(diagnostics),
    )
    return Expansion(schema, plans, diagnostics)
