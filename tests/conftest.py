"""Shared fixtures: a small project tree with annotated source classes."""

import textwrap
from pathlib import Path

import pytest

from inter_struct import load_settings

ROOT_UNIT = '''
class RootLevelFile:
    field: str
'''

MERGE_TEST = '''
from typing import Optional

from inter_struct import merge, merge_ref


class Base:
    normal: str
    optional: Optional[str]
    ignored: str


@merge("crate.merge_test.Base")
@merge_ref("crate.merge_test.Base")
class Identical:
    normal: str
    optional: Optional[str]


@merge("crate.merge_test.Base")
@merge_ref("crate.merge_test.Base")
class OptionalFields:
    normal: Optional[str]
    optional: Optional[Optional[str]]


@merge("crate.merge_test.Base")
@merge_ref("crate.merge_test.Base")
class Mixed:
    normal: str
    optional: Optional[Optional[str]]
'''

INTO_TEST = '''
from dataclasses import dataclass
from typing import Optional

from inter_struct import into, into_default


class IntoStruct:
    normal: str
    optional: Optional[str]


@dataclass
class IntoDefaultStruct:
    normal: str = ""
    optional: Optional[str] = None
    normal_additional: str = ""
    optional_additional: Optional[str] = None


@into("crate.into_test.IntoStruct")
@into_default("crate.into_test.IntoDefaultStruct")
class FromStruct:
    normal: str
    optional: Optional[str]
    ignored_field: str
    another_ignored_field: Optional[str]


@into("crate.into_test.IntoStruct")
class Incomplete:
    normal: str


@into(["crate.missing.Thing", "crate.into_test.IntoStruct"])
class PartlyMissing:
    normal: str
    optional: Optional[str]


@into("crate.into_test.IntoStruct")
class OptionalIntoNonOptional:
    normal: Optional[str]
    optional: Optional[Optional[str]]


@into("crate.into_test.IntoStruct")
class IncompatibleType:
    normal: int
    optional: Optional[int]


class NoAnnotations:
    normal: str
'''

PATH_INIT = '''
from inter_struct import into


class InModFile:
    field: str


@into(["crate.RootLevelFile", "crate.path.InModFile", "crate.path.file.InNormalFile"])
class TestStruct:
    field: str
'''

PATH_FILE = '''
class InNormalFile:
    field: str


class UnitLike:
    """No fields at all."""
'''

PROJECT_FILES = {
    "src/__init__.py": ROOT_UNIT,
    "src/merge_test/__init__.py": MERGE_TEST,
    "src/into_test/__init__.py": INTO_TEST,
    "src/path/__init__.py": PATH_INIT,
    "src/path/file.py": PATH_FILE,
    "src/broken.py": "class Broken(:\n    pass\n",
}


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Write ``files`` (relative path -> source) below ``root``."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content), encoding="utf-8")
    return root


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Project root holding the standard source tree."""
    return write_tree(tmp_path / "project", PROJECT_FILES)


@pytest.fixture
def src_root(project: Path) -> Path:
    return project / "src"


@pytest.fixture
def settings(project: Path):
    return load_settings(root_dir=project)


@pytest.fixture
def fs_settings(project: Path):
    return load_settings(root_dir=project, resolver="filesystem")
