"""Tests for usage_skills.project.sources -- dependency source adapters."""

from __future__ import annotations

import pytest

from usage_skills.models import Dependency, GlobalConfig
from usage_skills.project.sources import (
    MixProjectSource,
    UmbrellaProjectSource,
    VendoredDepsSource,
    default_sources,
)
from usage_skills.workspace import MemoryFileSource


UMBRELLA_ROOT = """\
defmodule Shop.Umbrella.MixProject do
  use Mix.Project

  def project do
    [apps_path: "apps", deps: deps()]
  end

  defp deps do
    []
  end
end
"""

WEB_APP = """\
defmodule Web.MixProject do
  def project do
    [app: :web, deps_path: "../../deps", deps: deps()]
  end

  defp deps do
    [
      {:phoenix_live_view, "~> 1.0"},
      {:core, in_umbrella: true},
      {:ash, "~> 3.0"}
    ]
  end
end
"""

CORE_APP = """\
defmodule Core.MixProject do
  def project do
    [app: :core, deps_path: "../../deps", deps: deps()]
  end

  defp deps do
    [{:ash, "~> 3.0"}, {:ecto, "~> 3.11"}]
  end
end
"""


@pytest.fixture()
def umbrella_files() -> MemoryFileSource:
    return MemoryFileSource(
        {
            "mix.exs": UMBRELLA_ROOT,
            "apps/web/mix.exs": WEB_APP,
            "apps/core/mix.exs": CORE_APP,
            "apps/core/usage-rules.md": "core rules",
            "apps/README.md": "not an app",
            "deps/ash/usage-rules.md": "ash rules",
            "deps/phoenix_live_view/usage-rules.md": "lv rules",
            "deps/ecto/mix.exs": "",
        }
    )


# ---------------------------------------------------------------------------
# MixProjectSource
# ---------------------------------------------------------------------------


class TestMixProjectSource:
    def test_declared_dependencies_resolve_into_deps_dir(
        self, simple_project_files: dict[str, str]
    ) -> None:
        source = MixProjectSource(MemoryFileSource(simple_project_files))
        assert source.list_dependencies() == [
            Dependency(name="ash", path="deps/ash"),
            Dependency(name="phoenix_live_view", path="deps/phoenix_live_view"),
            Dependency(name="jason", path="deps/jason"),
        ]

    def test_unfetched_dependency_has_empty_path(self) -> None:
        files = MemoryFileSource({"mix.exs": 'defp deps do\n  [{:ash, "~> 3.0"}]\nend'})
        assert MixProjectSource(files).list_dependencies() == [Dependency(name="ash")]

    def test_transitive_dependencies_are_not_listed(
        self, simple_project_files: dict[str, str]
    ) -> None:
        files = dict(simple_project_files)
        files["deps/spark/usage-rules.md"] = "spark"
        source = MixProjectSource(MemoryFileSource(files))
        assert "spark" not in [d.name for d in source.list_dependencies()]
        assert "spark" in source.dependency_paths()

    def test_path_dependency_resolves_relative_to_project(self) -> None:
        files = MemoryFileSource(
            {"mix.exs": 'defp deps do\n  [{:local, path: "vendor/local"}]\nend'}
        )
        assert MixProjectSource(files).list_dependencies() == [
            Dependency(name="local", path="vendor/local")
        ]

    def test_custom_deps_dir(self) -> None:
        files = MemoryFileSource(
            {
                "mix.exs": 'defp deps do\n  [{:ash, "~> 3.0"}]\nend',
                "vendor/deps/ash/usage-rules.md": "",
            }
        )
        source = MixProjectSource(files, deps_dir="vendor/deps")
        assert source.list_dependencies() == [Dependency(name="ash", path="vendor/deps/ash")]

    def test_no_manifest_lists_nothing(self) -> None:
        source = MixProjectSource(MemoryFileSource({"deps/ash/usage-rules.md": ""}))
        assert source.manifest is None
        assert source.list_dependencies() == []


# ---------------------------------------------------------------------------
# UmbrellaProjectSource
# ---------------------------------------------------------------------------


class TestUmbrellaProjectSource:
    def test_projects_are_children_with_a_manifest(self, umbrella_files: MemoryFileSource) -> None:
        projects = UmbrellaProjectSource(umbrella_files).projects()
        assert [p.project_dir for p in projects] == ["apps/core", "apps/web"]

    def test_union_of_child_dependencies(self, umbrella_files: MemoryFileSource) -> None:
        deps = UmbrellaProjectSource(umbrella_files).list_dependencies()
        by_name = {d.name: d.path for d in deps}

        assert sorted(by_name) == ["ash", "core", "ecto", "phoenix_live_view"]
        assert len(deps) == 4
        assert by_name["ash"] == "deps/ash"
        assert by_name["phoenix_live_view"] == "deps/phoenix_live_view"
        assert by_name["core"] == "apps/core"

    def test_not_an_umbrella(self, simple_project_files: dict[str, str]) -> None:
        source = UmbrellaProjectSource(MemoryFileSource(simple_project_files))
        assert source.projects() == []
        assert source.list_dependencies() == []


# ---------------------------------------------------------------------------
# VendoredDepsSource
# ---------------------------------------------------------------------------


class TestVendoredDepsSource:
    def test_one_dependency_per_matching_directory(self) -> None:
        files = MemoryFileSource(
            {
                "deps/ash/usage-rules.md": "",
                "deps/igniter/usage-rules.md": "",
                "deps/jason/mix.exs": "",
                "deps/ash/docs/usage-rules.md": "",
                "lib/usage-rules.md": "",
            }
        )
        assert VendoredDepsSource(files).list_dependencies() == [
            Dependency(name="ash", path="deps/ash"),
            Dependency(name="igniter", path="deps/igniter"),
        ]

    def test_custom_deps_dir(self) -> None:
        files = MemoryFileSource({"_build/deps/ash/usage-rules.md": ""})
        deps = VendoredDepsSource(files, deps_dir="_build/deps").list_dependencies()
        assert deps == [Dependency(name="ash", path="_build/deps/ash")]


# ---------------------------------------------------------------------------
# default_sources
# ---------------------------------------------------------------------------


class TestDefaultSources:
    def test_simple_project(self, simple_project_files: dict[str, str]) -> None:
        sources = default_sources(MemoryFileSource(simple_project_files))
        assert [type(s) for s in sources] == [MixProjectSource]

    def test_umbrella_project(self, umbrella_files: MemoryFileSource) -> None:
        sources = default_sources(umbrella_files)
        assert [type(s) for s in sources] == [MixProjectSource, UmbrellaProjectSource]

    def test_no_manifest_scans_deps_dir(self) -> None:
        sources = default_sources(MemoryFileSource({"deps/ash/usage-rules.md": ""}))
        assert [type(s) for s in sources] == [VendoredDepsSource]

    def test_scan_deps_dir_adds_vendored_source(
        self, simple_project_files: dict[str, str]
    ) -> None:
        sources = default_sources(
            MemoryFileSource(simple_project_files), GlobalConfig(scan_deps_dir=True)
        )
        assert [type(s) for s in sources] == [MixProjectSource, VendoredDepsSource]
