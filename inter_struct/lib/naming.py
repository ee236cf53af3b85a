"""
Naming helpers for rendered code.
"""

import re

_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def snake_case(identifier: str) -> str:
    """``IntoDefaultStruct`` -> ``into_default_struct``."""
    return _BOUNDARY.sub("_", identifier).lower()
