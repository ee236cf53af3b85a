"""Tests for expanding annotated source classes end to end."""

from pathlib import Path

import pytest

from inter_struct import (
    ActionKind,
    ErrorKind,
    InterStructError,
    Mode,
    RecordSchema,
    SchemaRegistry,
    expand,
    load_settings,
)
from inter_struct.errors import ConfigurationError


def into_test(src_root: Path) -> Path:
    return src_root / "into_test" / "__init__.py"


def merge_test(src_root: Path) -> Path:
    return src_root / "merge_test" / "__init__.py"


class TestInto:
    def test_into_and_into_default(self, src_root: Path, settings) -> None:
        expansion = expand(into_test(src_root), "FromStruct", settings=settings)
        assert not expansion.has_errors
        assert [(str(p.target_path), p.mode) for p in expansion.plans] == [
            ("crate.into_test.IntoStruct", Mode.INTO),
            ("crate.into_test.IntoDefaultStruct", Mode.INTO_DEFAULT),
        ]
        into_default = expansion.plan("IntoDefaultStruct", Mode.INTO_DEFAULT)
        assert into_default.uncovered == ("normal_additional", "optional_additional")

    def test_incomplete(self, src_root: Path, settings) -> None:
        expansion = expand(into_test(src_root), "Incomplete", settings=settings)
        (diagnostic,) = expansion.diagnostics
        assert diagnostic.kind is ErrorKind.INCOMPLETE_CONSTRUCTION
        assert "'optional'" in diagnostic.message
        assert diagnostic.location.file == into_test(src_root)

    def test_optional_into_non_optional(self, src_root: Path, settings) -> None:
        expansion = expand(into_test(src_root), "OptionalIntoNonOptional", settings=settings)
        assert [d.kind for d in expansion.diagnostics] == [ErrorKind.OPTIONAL_DOWNGRADE] * 2
        assert [d.location.field for d in expansion.diagnostics] == ["normal", "optional"]

    def test_incompatible_type(self, src_root: Path, settings) -> None:
        expansion = expand(into_test(src_root), "IncompatibleType", settings=settings)
        assert [d.kind for d in expansion.diagnostics] == [ErrorKind.TYPE_MISMATCH] * 2
        with pytest.raises(InterStructError):
            expansion.raise_if_errors()

    def test_missing_target_keeps_other_targets(self, src_root: Path, settings) -> None:
        expansion = expand(into_test(src_root), "PartlyMissing", settings=settings)
        (diagnostic,) = expansion.diagnostics
        assert diagnostic.kind is ErrorKind.PATH_RESOLUTION
        assert diagnostic.message.startswith("Failed to open file")
        assert [str(p.target_path) for p in expansion.plans] == ["crate.into_test.IntoStruct"]
        assert not expansion.plans[0].has_errors


class TestMerge:
    def test_hard_and_soft_plans(self, src_root: Path, settings) -> None:
        expansion = expand(merge_test(src_root), "Identical", settings=settings)
        assert not expansion.has_errors
        assert [(p.mode, p.soft) for p in expansion.plans] == [
            (Mode.MERGE, False),
            (Mode.MERGE, True),
            (Mode.MERGE_REF, False),
            (Mode.MERGE_REF, True),
        ]
        soft = expansion.plan("crate.merge_test.Base", Mode.MERGE, soft=True)
        assert [a.target for a in soft.actions] == ["optional"]

    def test_optional_fields(self, src_root: Path, settings) -> None:
        expansion = expand(merge_test(src_root), "OptionalFields", settings=settings)
        downgrades = expansion.diagnostics.of_kind(ErrorKind.OPTIONAL_DOWNGRADE)
        assert len(downgrades) == 3
        soft = expansion.plan("Base", Mode.MERGE_REF, soft=True)
        assert [(a.target, a.kind) for a in soft.actions] == [
            ("optional", ActionKind.UNWRAP_IF_PRESENT)
        ]
        hard = expansion.plan("Base", Mode.MERGE_REF)
        assert [(a.target, a.kind, a.clone) for a in hard.actions] == [
            ("optional", ActionKind.UNWRAP_IF_PRESENT, True)
        ]

    def test_single_mode(self, src_root: Path, settings) -> None:
        expansion = expand(merge_test(src_root), "Mixed", modes=["merge-ref"], settings=settings)
        assert {p.mode for p in expansion.plans} == {Mode.MERGE_REF}
        assert not expansion.has_errors

    def test_render(self, src_root: Path, settings) -> None:
        code = expand(merge_test(src_root), "Identical", settings=settings).render()
        assert code.startswith("import copy")
        for name in ("merge_into_base", "merge_into_base_soft", "merge_into_ref_base"):
            assert f"def {name}(source, target):" in code


class TestPaths:
    def test_all_path_forms(self, src_root: Path, settings) -> None:
        expansion = expand(src_root / "path" / "__init__.py", "TestStruct", settings=settings)
        assert not expansion.has_errors
        assert [p.target.identifier for p in expansion.plans] == [
            "RootLevelFile",
            "InModFile",
            "InNormalFile",
        ]

    def test_resolvers_agree(self, src_root: Path, settings, fs_settings) -> None:
        for file, name in [
            (merge_test(src_root), "Mixed"),
            (into_test(src_root), "PartlyMissing"),
            (src_root / "path" / "__init__.py", "TestStruct"),
        ]:
            registry = expand(file, name, settings=settings)
            walk = expand(file, name, settings=fs_settings)
            assert registry.plans == walk.plans
            assert [(d.kind, d.location) for d in registry.diagnostics] == [
                (d.kind, d.location) for d in walk.diagnostics
            ]

    def test_explicit_locator(self, tmp_path: Path) -> None:
        source = tmp_path / "source.py"
        source.write_text(
            "@merge('crate.virtual.Target')\nclass Source:\n    value: str\n", encoding="utf-8"
        )
        registry = SchemaRegistry()
        registry.register(
            "crate.virtual.Target", RecordSchema.from_source("class Target:\n    value: Optional[str]\n")
        )
        expansion = expand(source, "Source", locator=registry)
        assert not expansion.has_errors
        assert expansion.plan("Target", Mode.MERGE).actions[0].kind is ActionKind.WRAP


class TestConfiguration:
    def test_missing_root(self, src_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("INTER_STRUCT_ROOT_DIR", raising=False)
        expansion = expand(into_test(src_root), "FromStruct", settings=load_settings())
        (diagnostic,) = expansion.diagnostics
        assert diagnostic.kind is ErrorKind.CONFIGURATION
        assert expansion.plans == []
        assert diagnostic.location.line > 0

    def test_root_from_environment(self, project: Path, src_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INTER_STRUCT_ROOT_DIR", str(project))
        expansion = expand(into_test(src_root), "FromStruct")
        assert not expansion.has_errors

    def test_nonexistent_root(self, src_root: Path, tmp_path: Path) -> None:
        settings = load_settings(root_dir=tmp_path / "nowhere")
        (diagnostic,) = expand(into_test(src_root), "FromStruct", settings=settings).diagnostics
        assert "doesn't exist" in diagnostic.message

    def test_missing_source_dir(self, src_root: Path, tmp_path: Path) -> None:
        settings = load_settings(root_dir=tmp_path)
        (diagnostic,) = expand(into_test(src_root), "FromStruct", settings=settings).diagnostics
        assert diagnostic.kind is ErrorKind.CONFIGURATION
        assert "expects the sources" in diagnostic.message

    def test_missing_annotation(self, src_root: Path, settings) -> None:
        expansion = expand(into_test(src_root), "NoAnnotations", modes=[Mode.INTO], settings=settings)
        (diagnostic,) = expansion.diagnostics
        assert diagnostic.kind is ErrorKind.CONFIGURATION
        assert diagnostic.message == "Into requires the 'into' annotation."

    def test_missing_annotation_for_one_mode(self, src_root: Path, settings) -> None:
        expansion = expand(
            into_test(src_root), "Incomplete", modes=["into_default", "into"], settings=settings
        )
        assert [d.kind for d in expansion.diagnostics] == [
            ErrorKind.CONFIGURATION,
            ErrorKind.INCOMPLETE_CONSTRUCTION,
        ]
        assert [p.mode for p in expansion.plans] == [Mode.INTO]

    def test_no_annotations_no_plans(self, src_root: Path, settings) -> None:
        expansion = expand(into_test(src_root), "NoAnnotations", settings=settings)
        assert expansion.plans == []
        assert not expansion.has_errors

    def test_missing_class(self, src_root: Path, settings) -> None:
        (diagnostic,) = expand(into_test(src_root), "Nope", settings=settings).diagnostics
        assert diagnostic.kind is ErrorKind.CONFIGURATION

    def test_unreadable_source(self, src_root: Path, settings) -> None:
        (diagnostic,) = expand(src_root / "broken.py", "Broken", settings=settings).diagnostics
        assert diagnostic.kind is ErrorKind.CONFIGURATION

    def test_unknown_mode(self, src_root: Path, settings) -> None:
        with pytest.raises(ValueError):
            expand(into_test(src_root), "FromStruct", modes=["sideways"], settings=settings)

    def test_invalid_settings(self) -> None:
        with pytest.raises(ConfigurationError):
            load_settings(resolver="guess")


class TestUnreadableTree:
    def test_undecodable_unit_keeps_other_targets(self, tmp_path: Path) -> None:
        src = tmp_path / "src"
        src.mkdir()
        (src / "good.py").write_text("class Target:\n    x: int\n", encoding="utf-8")
        (src / "latin.py").write_bytes(b"# caf\xe9\n")
        update = src / "update.py"
        update.write_text(
            "@into(['crate.good.Target', 'crate.latin.Other'])\nclass Update:\n    x: int\n",
            encoding="utf-8",
        )

        for resolver in ("registry", "filesystem"):
            settings = load_settings(root_dir=tmp_path, resolver=resolver)
            expansion = expand(update, "Update", settings=settings)
            assert [p.target.identifier for p in expansion.plans] == ["Target"]
            (diagnostic,) = expansion.diagnostics
            assert diagnostic.kind is ErrorKind.PATH_RESOLUTION
            assert diagnostic.message.startswith("Failed to parse file")
