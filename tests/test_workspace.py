"""Tests for usage_skills.workspace -- file sources and staged changes."""

from __future__ import annotations

from pathlib import Path

import pytest

from usage_skills.models import ChangeStatus
from usage_skills.workspace import (
    LocalFileSource,
    MemoryFileSource,
    Workspace,
    join_path,
    normalize_path,
)


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


class TestPaths:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("./deps//ash/", "deps/ash"),
            ("deps/ash/../jason", "deps/jason"),
            ("deps\\ash\\usage-rules.md", "deps/ash/usage-rules.md"),
            (".", ""),
            ("", ""),
        ],
    )
    def test_normalize_path(self, raw: str, expected: str) -> None:
        assert normalize_path(raw) == expected

    def test_join_path(self) -> None:
        assert join_path("apps/web", "..", "core") == "apps/core"
        assert join_path("", "mix.exs") == "mix.exs"


# ---------------------------------------------------------------------------
# MemoryFileSource
# ---------------------------------------------------------------------------


class TestMemoryFileSource:
    @pytest.fixture()
    def files(self) -> MemoryFileSource:
        return MemoryFileSource(
            {
                "mix.exs": "defmodule X do end",
                "deps/ash/usage-rules.md": "ash",
                "deps/ash/lib/ash.ex": "",
                "deps/jason/mix.exs": "",
            }
        )

    def test_exists_for_files_and_implied_directories(self, files: MemoryFileSource) -> None:
        assert files.exists("deps/ash/usage-rules.md")
        assert files.exists("deps/ash")
        assert files.exists("deps")
        assert not files.exists("deps/phoenix")
        assert not files.exists("dep")

    def test_is_file(self, files: MemoryFileSource) -> None:
        assert files.is_file("mix.exs")
        assert not files.is_file("deps/ash")

    def test_read_missing_raises_file_not_found(self, files: MemoryFileSource) -> None:
        with pytest.raises(FileNotFoundError):
            files.read("deps/phoenix/usage-rules.md")

    def test_list_dir(self, files: MemoryFileSource) -> None:
        assert files.list_dir("deps") == ["ash", "jason"]
        assert files.list_dir("") == ["deps", "mix.exs"]
        assert files.list_dir("missing") == []

    def test_glob_star_stays_within_one_segment(self, files: MemoryFileSource) -> None:
        files.write("deps/ash/nested/x/usage-rules.md", "nested")
        assert files.glob("deps/*/usage-rules.md") == ["deps/ash/usage-rules.md"]

    def test_write_normalises_path(self, files: MemoryFileSource) -> None:
        files.write("./out//a.md", "A")
        assert files.files["out/a.md"] == "A"


# ---------------------------------------------------------------------------
# LocalFileSource
# ---------------------------------------------------------------------------


class TestLocalFileSource:
    def test_read_write_roundtrip_under_root(self, tmp_path: Path) -> None:
        files = LocalFileSource(tmp_path)
        files.write(".claude/skills/ash/SKILL.md", "content\r\n")

        target = tmp_path / ".claude" / "skills" / "ash" / "SKILL.md"
        assert target.read_bytes() == b"content\r\n"
        assert files.read(".claude/skills/ash/SKILL.md") == "content\r\n"

    def test_missing_paths_do_not_raise(self, tmp_path: Path) -> None:
        files = LocalFileSource(tmp_path)
        assert not files.exists("deps/ash")
        assert not files.is_file("deps/ash/usage-rules.md")
        assert files.list_dir("deps") == []
        assert files.glob("deps/*/usage-rules.md") == []

    def test_glob_returns_relative_posix_paths(self, tmp_path: Path) -> None:
        for name in ("ash", "jason"):
            (tmp_path / "deps" / name).mkdir(parents=True)
        (tmp_path / "deps" / "ash" / "usage-rules.md").write_text("x")

        files = LocalFileSource(tmp_path)
        assert files.glob("deps/*/usage-rules.md") == ["deps/ash/usage-rules.md"]
        assert files.list_dir("deps") == ["ash", "jason"]

    def test_glob_under_absolute_directory(self, tmp_path: Path) -> None:
        vendor = tmp_path / "vendor"
        (vendor / "ash").mkdir(parents=True)
        (vendor / "ash" / "usage-rules.md").write_text("x")

        files = LocalFileSource(tmp_path / "project")
        pattern = f"{vendor.as_posix()}/*/usage-rules.md"
        assert files.glob(pattern) == [f"{vendor.as_posix()}/ash/usage-rules.md"]

    def test_non_utf8_bytes_survive_read_and_write(self, tmp_path: Path) -> None:
        raw = b"caf\xe9 rules\r\n"
        (tmp_path / "rules.md").write_bytes(raw)

        files = LocalFileSource(tmp_path)
        files.write("copy.md", files.read("rules.md"))

        assert (tmp_path / "copy.md").read_bytes() == raw


# ---------------------------------------------------------------------------
# Workspace
# ---------------------------------------------------------------------------


class TestWorkspace:
    def test_create_new_file(self) -> None:
        workspace = Workspace(MemoryFileSource())
        change = workspace.create_or_update("out/a.md", "A")
        assert change.status == ChangeStatus.CREATED
        assert workspace.is_staged("out/a.md")

    def test_update_existing_file(self) -> None:
        workspace = Workspace(MemoryFileSource({"out/a.md": "old"}))
        change = workspace.create_or_update("out/a.md", "new")
        assert change.status == ChangeStatus.UPDATED

    def test_identical_content_is_unchanged(self) -> None:
        workspace = Workspace(MemoryFileSource({"out/a.md": "same"}))
        change = workspace.create_or_update("out/a.md", "same")
        assert change.status == ChangeStatus.UNCHANGED

    def test_nothing_written_before_apply(self) -> None:
        files = MemoryFileSource()
        workspace = Workspace(files)
        workspace.create_or_update("out/a.md", "A")
        assert files.files == {}

    def test_apply_writes_changed_files_only(self) -> None:
        files = MemoryFileSource({"same.md": "same", "old.md": "old"})
        workspace = Workspace(files)
        workspace.create_or_update("same.md", "same")
        workspace.create_or_update("old.md", "new")
        workspace.create_or_update("fresh.md", "fresh")

        written = workspace.apply()

        assert [c.path for c in written] == ["old.md", "fresh.md"]
        assert files.files == {"same.md": "same", "old.md": "new", "fresh.md": "fresh"}

    def test_apply_warns_on_write_failure_and_keeps_going(self) -> None:
        class _ReadOnlyDir(MemoryFileSource):
            def write(self, path: str, content: str) -> None:
                if path.startswith("locked/"):
                    raise PermissionError(13, "Permission denied", path)
                super().write(path, content)

        files = _ReadOnlyDir()
        workspace = Workspace(files)
        workspace.create_or_update("locked/a.md", "A")
        workspace.create_or_update("open/b.md", "B")

        written = workspace.apply()

        assert [c.path for c in written] == ["open/b.md"]
        assert files.files == {"open/b.md": "B"}
        assert workspace.warnings == ["Failed to write locked/a.md: Permission denied"]

    def test_read_prefers_staged_content(self) -> None:
        workspace = Workspace(MemoryFileSource({"deps/ash/usage-rules.md": "on disk"}))
        workspace.create_or_update("deps/ash/usage-rules.md", "staged")
        assert workspace.read("deps/ash/usage-rules.md") == "staged"

    def test_exists_includes_staged_paths(self) -> None:
        workspace = Workspace(MemoryFileSource())
        assert not workspace.exists("new.md")
        workspace.create_or_update("new.md", "x")
        assert workspace.exists("new.md")

    def test_restaging_a_created_file_stays_created(self) -> None:
        workspace = Workspace(MemoryFileSource())
        workspace.create_or_update("a.md", "one")
        change = workspace.create_or_update("a.md", "two")
        assert change.status == ChangeStatus.CREATED
        assert len(workspace.changes) == 1
        assert workspace.read("a.md") == "two"

    def test_notices_and_warnings_are_collected_in_order(self) -> None:
        workspace = Workspace(MemoryFileSource())
        workspace.add_notice("first")
        workspace.add_warning("careful")
        workspace.add_notice("second")
        assert workspace.notices == ["first", "second"]
        assert workspace.warnings == ["careful"]
