"""Configuration for locating the source tree of the current project.

:class:`InterStructSettings` is a ``pydantic-settings`` model. Values come
from keyword overrides first and from ``INTER_STRUCT_*`` environment variables
second. The project root plays the part of the manifest directory: schema
paths starting with the root marker are resolved below ``root_dir/source_dir``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError, Diagnostic, ErrorKind, Location
from .types import Err, Ok

logger = logging.getLogger(__name__)

DEFAULT_ROOT_MARKER = "crate"


class InterStructSettings(BaseSettings):
    """Settings for one inter_struct invocation."""

    root_dir: Optional[Path] = Field(
        None, description="Project root directory (the directory holding the sources)."
    )
    source_dir: str = Field("src", description="Source subdirectory below the root.")
    root_marker: str = Field(
        DEFAULT_ROOT_MARKER,
        min_length=1,
        description="First segment of every target path; stands for the source root.",
    )
    resolver: Literal["registry", "filesystem"] = Field(
        "registry", description="How target paths are turned into schemas."
    )
    log_level: str = Field("WARNING", description="Logging verbosity level.")

    model_config = SettingsConfigDict(env_prefix="INTER_STRUCT_", extra="ignore")


def load_settings(**overrides: Any) -> InterStructSettings:
    """Load and validate settings.

    Keyword overrides win over environment variables. ``None`` overrides are
    ignored so that unset CLI options fall through to the environment.

    Raises:
        ConfigurationError: If a value fails validation.
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return InterStructSettings(**values)
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(map(str, error['loc']))}: {error['msg']}"
            for error in exc.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {details}") from exc


def source_root(
    settings: InterStructSettings, location: Location = Location()
) -> Ok[Path] | Err[Diagnostic]:
    """Return ``root_dir/source_dir`` or a configuration diagnostic."""
    if settings.root_dir is None:
        return Err(
            Diagnostic(
                ErrorKind.CONFIGURATION,
                "Couldn't read the project root: set INTER_STRUCT_ROOT_DIR "
                "or pass a root directory.",
                location,
            )
        )

    root = Path(settings.root_dir)
    if not root.exists():
        return Err(
            Diagnostic(
                ErrorKind.CONFIGURATION,
                f"Project root path doesn't exist: {str(root)!r}",
                location,
            )
        )

    src = root / settings.source_dir
    if not src.is_dir():
        return Err(
            Diagnostic(
                ErrorKind.CONFIGURATION,
                f"inter_struct expects the sources to be located in "
                f"{str(src)!r}, which doesn't exist.",
                location,
            )
        )

    logger.debug("Using source root %s", src)
    return Ok(src)
