"""Plan and apply scaffold writes.

The planner is pure: it reads existence through an injected oracle and asks
the registry for content. The executor does the filesystem work and keeps
going when a single entry fails, collecting failures in a report.
"""

import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple

from mayorwest.remote import RepositoryIdentity
from mayorwest.templates import (
    GENERATED_MARKER,
    MAX_ITERATION_LIMIT,
    MIN_ITERATION_LIMIT,
    MergeStrategy,
    RenderOptions,
    TemplateRegistry,
    UnknownTemplateError,
)

log = logging.getLogger("mayorwest.sync")

ENCODING = "utf-8"


class SetupMode(str, Enum):
    """Which templates setup writes."""

    FULL = "full"
    MINIMAL = "minimal"
    CUSTOM = "custom"


@dataclass
class WritePlanEntry:
    """One file to write."""

    path: str
    already_exists: bool
    content: str


@dataclass
class FailedWrite:
    path: str
    error: str


@dataclass
class SyncReport:
    """Outcome of applying a write plan."""

    created: int = 0
    failed: List[FailedWrite] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass
class RemovalReport:
    """Outcome of removing scaffold files."""

    removed: int = 0
    missing: int = 0
    failed: List[FailedWrite] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def select_paths(
    registry: TemplateRegistry,
    mode: SetupMode,
    custom_paths: Optional[Iterable[str]] = None,
) -> List[str]:
    """Resolve a setup mode to the list of template paths to write.

    Args:
        registry: Template registry
        mode: full, minimal or custom
        custom_paths: Paths chosen by the user (custom mode only)

    Returns:
        Paths in registry order

    Raises:
        UnknownTemplateError: If a custom path isn't registered
    """
    if mode == SetupMode.FULL:
        return registry.paths()
    if mode == SetupMode.MINIMAL:
        return [d.path for d in registry.filter_critical()]

    chosen = set(custom_paths or [])
    for path in chosen:
        if path not in registry:
            raise UnknownTemplateError(path)
    return [path for path in registry.paths() if path in chosen]


def plan_sync(
    selected_paths: Sequence[str],
    options: RenderOptions,
    exists: Callable[[str], bool],
    registry: TemplateRegistry,
) -> List[WritePlanEntry]:
    """Build the ordered write plan for the selected templates.

    Order follows selected_paths exactly; a repeated path keeps its first
    position.

    Args:
        selected_paths: Template paths to write
        options: Render options passed to each generator
        exists: Existence oracle for a repository-relative path
        registry: Template registry

    Returns:
        List of WritePlanEntry

    Raises:
        UnknownTemplateError: If a path isn't registered
    """
    plan: List[WritePlanEntry] = []
    seen = set()
    for path in selected_paths:
        if path in seen:
            continue
        seen.add(path)
        content = registry.generate(path, options)
        plan.append(WritePlanEntry(path=path, already_exists=exists(path), content=content))
    return plan


def filesystem_oracle(root: Path) -> Callable[[str], bool]:
    """Existence oracle backed by the real filesystem under root."""
    def exists(path: str) -> bool:
        return (root / path).exists()
    return exists


def entry_status(entry: WritePlanEntry, root: Path) -> str:
    """Describe what executing an entry would do: create, overwrite or unchanged."""
    if not entry.already_exists:
        return "create"
    try:
        current = (root / entry.path).read_text(encoding=ENCODING)
    except (OSError, UnicodeDecodeError):
        return "overwrite"
    return "unchanged" if current == entry.content else "overwrite"


def execute_plan(
    plan: Sequence[WritePlanEntry],
    root: Path,
    on_result: Optional[Callable[[WritePlanEntry, Optional[str]], None]] = None,
) -> SyncReport:
    """Write every plan entry under root.

    Parent directories are created as needed and existing files are
    overwritten. A failing entry is recorded and the rest still run.

    Args:
        plan: Entries from plan_sync
        root: Repository root
        on_result: Called with (entry, error message or None) after each entry

    Returns:
        SyncReport with the number of files written and the failures
    """
    report = SyncReport()
    for entry in plan:
        target = root / entry.path
        error: Optional[str] = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(entry.content, encoding=ENCODING)
        except OSError as e:
            error = str(e)
            log.warning("Failed to write %s: %s", entry.path, e)
            report.failed.append(FailedWrite(path=entry.path, error=error))
        else:
            report.created += 1
            log.debug("Wrote %s (%d bytes)", entry.path, len(entry.content))
        if on_result is not None:
            on_result(entry, error)
    return report


def _prune_empty_dirs(start: Path, root: Path) -> None:
    root = root.resolve()
    current = start.resolve()
    while current != root and root in current.parents:
        try:
            current.rmdir()
        except OSError:
            # Not empty (or not removable); stop climbing
            return
        log.debug("Removed empty directory %s", current)
        current = current.parent


def remove_scaffold(
    paths: Sequence[str],
    root: Path,
    on_result: Optional[Callable[[str, Optional[str]], None]] = None,
) -> RemovalReport:
    """Delete scaffolded files and any directories left empty.

    Missing files are counted, not treated as failures. The root itself is
    never removed.

    Args:
        paths: Repository-relative paths to delete
        root: Repository root
        on_result: Called with (path, error message or None) for each existing file

    Returns:
        RemovalReport
    """
    report = RemovalReport()
    for path in paths:
        target = root / path
        if not target.exists():
            report.missing += 1
            continue
        error: Optional[str] = None
        try:
            target.unlink()
        except OSError as e:
            error = str(e)
            log.warning("Failed to remove %s: %s", path, e)
            report.failed.append(FailedWrite(path=path, error=error))
        else:
            report.removed += 1
            _prune_empty_dirs(target.parent, root)
        if on_result is not None:
            on_result(path, error)
    return report


def _render_variants(identity: RepositoryIdentity) -> Iterator[RenderOptions]:
    """Every option combination setup can render for a repository."""
    for limit, strategy, auto_merge in itertools.product(
        range(MIN_ITERATION_LIMIT, MAX_ITERATION_LIMIT + 1), MergeStrategy, (True, False)
    ):
        yield RenderOptions(
            owner=identity.owner,
            repo=identity.repo,
            iteration_limit=limit,
            merge_strategy=strategy,
            auto_merge=auto_merge,
        )


def is_scaffolded(
    path: str,
    root: Path,
    registry: TemplateRegistry,
    identity: Optional[RepositoryIdentity] = None,
) -> bool:
    """Check whether the file at path was written by setup.

    A file counts as scaffolded if it carries the generated marker, or if it
    is byte-for-byte what setup would write for identity with some set of
    options (for formats like JSON that can't hold a comment). Files the
    user has edited or written themselves are not scaffolded.

    Args:
        path: Registered template path
        root: Repository root
        registry: Template registry
        identity: Repository the files were generated for; without it only
            the marker is checked
    """
    try:
        current = (root / path).read_text(encoding=ENCODING)
    except (OSError, UnicodeDecodeError):
        return False

    if GENERATED_MARKER in current:
        return True
    if identity is None:
        return False

    seen = set()
    for options in _render_variants(identity):
        rendered = registry.generate(path, options)
        if rendered in seen:
            continue
        if rendered == current:
            return True
        seen.add(rendered)
    return False


def partition_scaffold(
    paths: Sequence[str],
    root: Path,
    registry: TemplateRegistry,
    identity: Optional[RepositoryIdentity] = None,
) -> Tuple[List[str], List[str]]:
    """Split existing files at template paths into (scaffolded, user-owned).

    Paths with no file are left out of both lists.
    """
    owned: List[str] = []
    foreign: List[str] = []
    for path in paths:
        if not (root / path).is_file():
            continue
        if is_scaffolded(path, root, registry, identity):
            owned.append(path)
        else:
            foreign.append(path)
    return owned, foreign
