"""
Class decorators declaring inter_struct targets.

The decorators only record their target paths on the class, so annotated
source files import cleanly. The paths are read back from the source text by
the expander; nothing here resolves them.

    @merge("crate.models.Base")
    @into(["crate.a.Target", "crate.b.Other"])
    class Update:
        name: str
        email: Optional[str]
"""

from typing import Callable, Sequence, TypeVar

from .modes import Mode
from .parser import parse_target_path

_Cls = TypeVar("_Cls", bound=type)

ATTRIBUTE = "__inter_struct__"


def _declare(mode: Mode) -> Callable[[str | Sequence[str]], Callable[[_Cls], _Cls]]:
    def annotation(paths: str | Sequence[str]) -> Callable[[_Cls], _Cls]:
        if isinstance(paths, str):
            paths = [paths]
        elif not isinstance(paths, (list, tuple)):
            raise TypeError(
                f"{mode.annotation}() expects a path or a list of paths, "
                f"got {type(paths).__name__}"
            )
        for path in paths:
            if not isinstance(path, str):
                raise TypeError("Only paths are allowed in inter_struct's annotations.")
            parse_target_path(path)

        def decorator(cls: _Cls) -> _Cls:
            # Copy so subclasses don't write into their parent's record
            declared = dict(cls.__dict__.get(ATTRIBUTE, {}))
            declared[mode] = declared.get(mode, ()) + tuple(paths)
            setattr(cls, ATTRIBUTE, declared)
            return cls

        return decorator

    annotation.__name__ = mode.annotation
    annotation.__doc__ = f"Declare {mode.title} targets for the decorated class."
    return annotation


into = _declare(Mode.INTO)
into_default = _declare(Mode.INTO_DEFAULT)
merge = _declare(Mode.MERGE)
merge_ref = _declare(Mode.MERGE_REF)


def declared_targets(cls: type) -> dict[Mode, tuple[str, ...]]:
    """Return the target paths recorded on a class by the decorators."""
    return dict(getattr(cls, ATTRIBUTE, {}))
