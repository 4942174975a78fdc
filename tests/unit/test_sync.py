"""Tests for the sync planner and plan executor."""

from pathlib import Path

import pytest

from mayorwest.sync import (
    SetupMode,
    WritePlanEntry,
    entry_status,
    execute_plan,
    filesystem_oracle,
    is_scaffolded,
    partition_scaffold,
    plan_sync,
    remove_scaffold,
    select_paths,
)
from mayorwest.remote import RepositoryIdentity
from mayorwest.templates import MergeStrategy, RenderOptions, TemplateRegistry, UnknownTemplateError

SETTINGS = ".vscode/settings.json"
AGENT = ".github/agents/mayor-west-mode.md"


def nothing_exists(path: str) -> bool:
    return False


class TestSelectPaths:
    def test_full(self, registry: TemplateRegistry) -> None:
        assert select_paths(registry, SetupMode.FULL) == registry.paths()

    def test_minimal(self, registry: TemplateRegistry) -> None:
        assert select_paths(registry, SetupMode.MINIMAL) == [d.path for d in registry.filter_critical()]

    def test_custom_keeps_registry_order(self, registry: TemplateRegistry) -> None:
        selected = select_paths(registry, SetupMode.CUSTOM, ["CHANGELOG.md", SETTINGS])
        assert selected == [SETTINGS, "CHANGELOG.md"]

    def test_custom_empty(self, registry: TemplateRegistry) -> None:
        assert select_paths(registry, SetupMode.CUSTOM, []) == []
        assert select_paths(registry, SetupMode.CUSTOM) == []

    def test_custom_unknown(self, registry: TemplateRegistry) -> None:
        with pytest.raises(UnknownTemplateError):
            select_paths(registry, SetupMode.CUSTOM, ["nope.txt"])


class TestPlanSync:
    def test_two_new_files(self, registry: TemplateRegistry, options: RenderOptions) -> None:
        plan = plan_sync([SETTINGS, AGENT], options, nothing_exists, registry)
        assert [e.path for e in plan] == [SETTINGS, AGENT]
        assert all(not e.already_exists for e in plan)
        assert plan[0].content == registry.generate(SETTINGS, options)

    def test_follows_selection_order(self, registry: TemplateRegistry, options: RenderOptions) -> None:
        plan = plan_sync([AGENT, SETTINGS], options, nothing_exists, registry)
        assert [e.path for e in plan] == [AGENT, SETTINGS]

    def test_duplicates_keep_first_position(self, registry: TemplateRegistry, options: RenderOptions) -> None:
        plan = plan_sync([AGENT, SETTINGS, AGENT], options, nothing_exists, registry)
        assert [e.path for e in plan] == [AGENT, SETTINGS]

    def test_uses_oracle(self, registry: TemplateRegistry, options: RenderOptions) -> None:
        plan = plan_sync([SETTINGS, AGENT], options, lambda p: p == SETTINGS, registry)
        assert [e.already_exists for e in plan] == [True, False]

    def test_empty_selection(self, registry: TemplateRegistry, options: RenderOptions) -> None:
        assert plan_sync([], options, nothing_exists, registry) == []

    def test_unknown_path(self, registry: TemplateRegistry, options: RenderOptions) -> None:
        with pytest.raises(UnknownTemplateError):
            plan_sync(["nope.txt"], options, nothing_exists, registry)

    def test_filesystem_oracle(self, tmp_path: Path) -> None:
        (tmp_path / "a.txt").write_text("x")
        exists = filesystem_oracle(tmp_path)
        assert exists("a.txt") is True
        assert exists("b/c.txt") is False


class TestExecutePlan:
    def test_creates_files_and_directories(
        self, tmp_path: Path, registry: TemplateRegistry, options: RenderOptions
    ) -> None:
        plan = plan_sync([SETTINGS, AGENT], options, nothing_exists, registry)
        report = execute_plan(plan, tmp_path)

        assert report.created == 2
        assert report.failed == []
        assert report.ok
        assert (tmp_path / SETTINGS).read_text(encoding="utf-8") == plan[0].content
        assert (tmp_path / AGENT).is_file()

    def test_idempotent(self, tmp_path: Path, registry: TemplateRegistry, options: RenderOptions) -> None:
        paths = registry.paths()
        execute_plan(plan_sync(paths, options, nothing_exists, registry), tmp_path)
        first = {p: (tmp_path / p).read_bytes() for p in paths}

        plan = plan_sync(paths, options, filesystem_oracle(tmp_path), registry)
        assert all(e.already_exists for e in plan)
        report = execute_plan(plan, tmp_path)

        assert report.created == len(paths)
        assert {p: (tmp_path / p).read_bytes() for p in paths} == first

    def test_overwrites_existing(self, tmp_path: Path) -> None:
        (tmp_path / "a.txt").write_text("old")
        report = execute_plan([WritePlanEntry("a.txt", True, "new\n")], tmp_path)
        assert report.created == 1
        assert (tmp_path / "a.txt").read_text() == "new\n"

    def test_failure_does_not_stop_other_writes(self, tmp_path: Path) -> None:
        # A regular file where a directory is needed
        (tmp_path / ".github").write_text("not a directory")
        plan = [
            WritePlanEntry(AGENT, False, "agent\n"),
            WritePlanEntry(SETTINGS, False, "{}\n"),
        ]
        report = execute_plan(plan, tmp_path)

        assert report.created == 1
        assert [f.path for f in report.failed] == [AGENT]
        assert report.failed[0].error
        assert not report.ok
        assert (tmp_path / SETTINGS).read_text() == "{}\n"

    def test_on_result_callback(self, tmp_path: Path) -> None:
        (tmp_path / ".github").write_text("x")
        seen = []
        plan = [
            WritePlanEntry("ok.txt", False, "ok\n"),
            WritePlanEntry(".github/bad.txt", False, "bad\n"),
        ]
        execute_plan(plan, tmp_path, on_result=lambda entry, error: seen.append((entry.path, error is None)))
        assert seen == [("ok.txt", True), (".github/bad.txt", False)]

    def test_empty_plan(self, tmp_path: Path) -> None:
        report = execute_plan([], tmp_path)
        assert report.created == 0
        assert report.ok


class TestEntryStatus:
    def test_create(self, tmp_path: Path) -> None:
        assert entry_status(WritePlanEntry("a.txt", False, "x"), tmp_path) == "create"

    def test_unchanged(self, tmp_path: Path) -> None:
        (tmp_path / "a.txt").write_text("same\n", encoding="utf-8")
        assert entry_status(WritePlanEntry("a.txt", True, "same\n"), tmp_path) == "unchanged"

    def test_overwrite(self, tmp_path: Path) -> None:
        (tmp_path / "a.txt").write_text("old\n", encoding="utf-8")
        assert entry_status(WritePlanEntry("a.txt", True, "new\n"), tmp_path) == "overwrite"


class TestRemoveScaffold:
    def test_removes_files_and_empty_dirs(self, tmp_path: Path) -> None:
        (tmp_path / ".github" / "agents").mkdir(parents=True)
        (tmp_path / AGENT).write_text("x")
        (tmp_path / ".github" / "keep.md").write_text("mine")

        report = remove_scaffold([AGENT, SETTINGS], tmp_path)

        assert report.removed == 1
        assert report.missing == 1
        assert report.ok
        assert not (tmp_path / ".github" / "agents").exists()
        # Still holds a user file
        assert (tmp_path / ".github").is_dir()
        assert tmp_path.is_dir()

    def test_prunes_up_to_root(self, tmp_path: Path) -> None:
        (tmp_path / ".vscode").mkdir()
        (tmp_path / SETTINGS).write_text("{}")
        remove_scaffold([SETTINGS], tmp_path)
        assert not (tmp_path / ".vscode").exists()
        assert tmp_path.exists()

    def test_callback_only_for_existing(self, tmp_path: Path) -> None:
        (tmp_path / "CHANGELOG.md").write_text("x")
        seen = []
        remove_scaffold(["CHANGELOG.md", "missing.md"], tmp_path, on_result=lambda p, e: seen.append((p, e)))
        assert seen == [("CHANGELOG.md", None)]


class TestIsScaffolded:
    IDENTITY = RepositoryIdentity("octo", "app")

    def write(self, root: Path, path: str, text: str) -> None:
        target = root / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")

    def test_marked_file(self, tmp_path: Path, registry: TemplateRegistry, options: RenderOptions) -> None:
        self.write(tmp_path, AGENT, registry.generate(AGENT, options) + "\nLocal notes\n")
        assert is_scaffolded(AGENT, tmp_path, registry)

    def test_unmarked_generated_json(self, tmp_path: Path, registry: TemplateRegistry) -> None:
        options = RenderOptions(owner="octo", repo="app", iteration_limit=3, merge_strategy=MergeStrategy.MERGE)
        self.write(tmp_path, SETTINGS, registry.generate(SETTINGS, options))
        assert is_scaffolded(SETTINGS, tmp_path, registry, self.IDENTITY)

    def test_unmarked_needs_identity(self, tmp_path: Path, registry: TemplateRegistry, options: RenderOptions) -> None:
        self.write(tmp_path, SETTINGS, registry.generate(SETTINGS, options))
        assert not is_scaffolded(SETTINGS, tmp_path, registry)

    def test_other_repository(self, tmp_path: Path, registry: TemplateRegistry) -> None:
        self.write(tmp_path, "CHANGELOG.md", registry.generate("CHANGELOG.md", RenderOptions(owner="x", repo="other")))
        assert not is_scaffolded("CHANGELOG.md", tmp_path, registry, self.IDENTITY)

    def test_user_file(self, tmp_path: Path, registry: TemplateRegistry) -> None:
        self.write(tmp_path, "CHANGELOG.md", "# Changelog\n")
        assert not is_scaffolded("CHANGELOG.md", tmp_path, registry, self.IDENTITY)

    def test_missing_file(self, tmp_path: Path, registry: TemplateRegistry) -> None:
        assert not is_scaffolded(SETTINGS, tmp_path, registry, self.IDENTITY)

    def test_partition(self, tmp_path: Path, registry: TemplateRegistry, options: RenderOptions) -> None:
        self.write(tmp_path, AGENT, registry.generate(AGENT, options))
        self.write(tmp_path, "CHANGELOG.md", "# Changelog\n")

        owned, foreign = partition_scaffold(registry.paths(), tmp_path, registry, self.IDENTITY)

        assert owned == [AGENT]
        assert foreign == ["CHANGELOG.md"]
