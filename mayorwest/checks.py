"""Verification checks for a Mayor West setup.

`mayor-west verify` builds a CheckRegistry for the current repository and
prints the results as a scorecard. Checks only read state: files on disk,
git configuration and GitHub settings through gh.

Usage:
    from mayorwest.checks import build_verify_checks
    from mayorwest.templates import default_registry

    results = build_verify_checks(Path.cwd(), default_registry()).run_all()
    passed = sum(1 for r in results if r.passed)
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

import yaml

from mayorwest import github
from mayorwest.config import SECURITY_CONFIG_PATH, ConfigError, SecurityConfig, parse_security_config
from mayorwest.content import (
    AGENT_LOGIN,
    AGENT_TOKEN_SECRET,
    ITERATION_LIMIT_KEY,
    SETTINGS_PATH,
)
from mayorwest.git_utils import get_default_branch, get_remote_url, is_git_repository
from mayorwest.remote import RepositoryIdentity, parse_github_url
from mayorwest.templates import MAX_ITERATION_LIMIT, MIN_ITERATION_LIMIT, TemplateRegistry

log = logging.getLogger("mayorwest.checks")

TERMINAL_RULES_KEY = "chat.tools.terminal.autoApprove"


@dataclass
class CheckResult:
    """Result of a single verification check.

    Attributes:
        name: Label shown in the scorecard
        passed: Whether the check passed
        message: Short detail about the outcome
        fix_hint: How to fix a failure
    """

    name: str
    passed: bool
    message: str = ""
    fix_hint: Optional[str] = None


class Check(ABC):
    """Base class for verification checks.

    Subclasses implement check(); a check that yields several scorecard
    lines overrides run() instead.
    """

    name: str = ""

    @abstractmethod
    def check(self) -> CheckResult:
        pass

    def run(self) -> List[CheckResult]:
        return [self.check()]


class FunctionCheck(Check):
    """Check backed by a plain callable returning a CheckResult."""

    def __init__(self, name: str, fn: Callable[[], CheckResult]) -> None:
        self.name = name
        self.fn = fn

    def check(self) -> CheckResult:
        return self.fn()


class GroupCheck(Check):
    """Check backed by a callable returning several results."""

    def __init__(self, name: str, fn: Callable[[], List[CheckResult]]) -> None:
        self.name = name
        self.fn = fn

    def check(self) -> CheckResult:
        results = self.run()
        failed = [r for r in results if not r.passed]
        return failed[0] if failed else CheckResult(name=self.name, passed=True)

    def run(self) -> List[CheckResult]:
        return self.fn()


class CheckRegistry:
    """Ordered collection of checks."""

    def __init__(self) -> None:
        self.checks: List[Check] = []

    def register(self, check: Check) -> None:
        self.checks.append(check)

    def add(self, name: str, fn: Callable[[], CheckResult]) -> None:
        self.register(FunctionCheck(name, fn))

    def add_group(self, name: str, fn: Callable[[], List[CheckResult]]) -> None:
        self.register(GroupCheck(name, fn))

    def run_all(self) -> List[CheckResult]:
        """Run every check, in order.

        A check that raises is reported as a failure and the rest still run.
        """
        results: List[CheckResult] = []
        for check in self.checks:
            try:
                results.extend(check.run())
            except Exception as e:
                log.warning("Check %s raised: %s", check.name, e)
                results.append(
                    CheckResult(
                        name=check.name,
                        passed=False,
                        message=f"Check error: {e}",
                        fix_hint="Run with --verbose for details",
                    )
                )
        return results


def _result(name: str, passed: bool, fix_hint: str, message: str = "") -> CheckResult:
    return CheckResult(name=name, passed=passed, message=message, fix_hint=None if passed else fix_hint)


def _probe_result(name: str, probe: github.ProbeResult, fix_hint: str) -> CheckResult:
    if not probe.ok:
        return CheckResult(name=name, passed=False, message=f"Could not check: {probe.reason}", fix_hint=fix_hint)
    return _result(name, bool(probe.value), fix_hint)


def _add_github_checks(registry: CheckRegistry, identity: RepositoryIdentity, branch: str) -> None:
    slug = identity.slug

    registry.add("Auto-merge enabled", lambda: _probe_result(
        "Auto-merge enabled",
        github.probe_auto_merge(identity),
        "Settings -> General -> Pull Requests -> Allow auto-merge\n"
        f"Or run: gh api repos/{slug} -X PATCH -F allow_auto_merge=true",
    ))
    registry.add("Workflow permissions (read-write)", lambda: _probe_result(
        "Workflow permissions (read-write)",
        github.probe_workflow_permissions(identity),
        "Settings -> Actions -> General -> Workflow permissions -> Read and write\n"
        f"Or run: gh api repos/{slug}/actions/permissions/workflow -X PUT -f default_workflow_permissions=write",
    ))
    registry.add(f"Branch protection ({branch})", lambda: _probe_result(
        f"Branch protection ({branch})",
        github.probe_branch_protection(identity, branch),
        f"Settings -> Branches -> Add rule for '{branch}'\nOr run: mayor-west configure",
    ))
    registry.add(f"{AGENT_TOKEN_SECRET} secret", lambda: _probe_result(
        f"{AGENT_TOKEN_SECRET} secret",
        github.probe_secret(identity, AGENT_TOKEN_SECRET),
        "Create a fine-grained PAT at https://github.com/settings/personal-access-tokens/new\n"
        f"Then run: gh secret set {AGENT_TOKEN_SECRET}",
    ))
    registry.add("Copilot coding agent available", lambda: _probe_result(
        "Copilot coding agent available",
        github.probe_agent_assignable(identity, AGENT_LOGIN),
        f"{AGENT_LOGIN} can't be assigned in this repository. Ensure GitHub Copilot is enabled.",
    ))


def security_config_results(root: Path) -> List[CheckResult]:
    """Checks for .github/mayor-west.yml.

    Returns a single failing result if the file is missing or can't be parsed.
    """
    config_file = root / SECURITY_CONFIG_PATH
    if not config_file.exists():
        return [_result(
            "Security config exists", False,
            f"Security config missing: {SECURITY_CONFIG_PATH}. Run: mayor-west setup",
        )]

    try:
        text = config_file.read_text(encoding="utf-8")
        config: SecurityConfig = parse_security_config(text)
    except (OSError, ConfigError) as e:
        return [_result("Security config readable", False, f"Could not read security config: {e}")]

    raw = yaml.safe_load(text) or {}
    protects_workflows = config.protects(".github/workflows/**") or config.protects(".github/workflows/*")

    return [
        _result("Security config exists", True, ""),
        _result("Security config: enabled flag present", "enabled" in raw,
                'Add "enabled: true" (or false) to the security config'),
        _result("Security config: protected paths defined", bool(config.protected_paths),
                "No protected_paths in security config"),
        _result("Security config: workflows protected", protects_workflows,
                'Add ".github/workflows/**" to protected_paths'),
        _result("Security config: package.json protected", config.protects("package.json"),
                'Add "package.json" to protected_paths'),
        _result("Security config: settings section present", "settings" in raw,
                "No settings section in security config"),
    ]


def editor_settings_results(root: Path) -> List[CheckResult]:
    """Checks for .vscode/settings.json; empty if the file is absent."""
    settings_file = root / SETTINGS_PATH
    if not settings_file.exists():
        return []

    try:
        settings = json.loads(settings_file.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        return [_result("Agent settings readable", False, f"Could not parse {SETTINGS_PATH}: {e}")]
    if not isinstance(settings, dict):
        return [_result("Agent settings readable", False, f"{SETTINGS_PATH} must be a JSON object")]

    rules = settings.get(TERMINAL_RULES_KEY) or {}

    def blocks(command: str) -> bool:
        return isinstance(rules, dict) and rules.get(command) is False

    limit = settings.get(ITERATION_LIMIT_KEY)
    limit_ok = isinstance(limit, int) and not isinstance(limit, bool) and (
        MIN_ITERATION_LIMIT <= limit <= MAX_ITERATION_LIMIT
    )

    return [
        _result("Agent settings: blocks destructive commands", blocks("rm") and blocks("kill"),
                f'{SETTINGS_PATH} should deny "rm" and "kill" in {TERMINAL_RULES_KEY}'),
        _result("Agent settings: iteration limit set", limit_ok,
                f"Set {ITERATION_LIMIT_KEY} to a value between {MIN_ITERATION_LIMIT} and {MAX_ITERATION_LIMIT}"),
    ]


def build_verify_checks(root: Path, registry: TemplateRegistry) -> CheckRegistry:
    """Build the ordered list of checks for `verify`.

    GitHub settings are only queried when gh is installed and authenticated
    and origin points at GitHub.

    Args:
        root: Repository root
        registry: Template registry (one presence check per template)

    Returns:
        CheckRegistry ready to run
    """
    checks = CheckRegistry()

    checks.add("Git repository", lambda: _result(
        "Git repository", is_git_repository(root), "Not a git repository. Run: git init",
    ))

    for descriptor in registry.list_all():
        checks.add(descriptor.display_name, lambda d=descriptor: _result(
            d.display_name, (root / d.path).exists(),
            f"File missing: {d.path}. Run: mayor-west setup",
        ))

    remote_url = get_remote_url(root)
    identity = parse_github_url(remote_url) if remote_url else None
    checks.add("GitHub remote", lambda: _result(
        "GitHub remote", identity is not None,
        "No GitHub remote found. Run: git remote add origin <url>",
    ))

    gh_installed = github.is_gh_installed()
    checks.add("GitHub CLI (gh) installed", lambda: _result(
        "GitHub CLI (gh) installed", gh_installed, github.GH_CLI_INSTALL_INSTRUCTIONS,
    ))

    gh_authenticated = False
    if gh_installed:
        gh_authenticated = github.is_gh_authenticated()
        checks.add("GitHub CLI authenticated", lambda: _result(
            "GitHub CLI authenticated", gh_authenticated, "Run: gh auth login",
        ))

    if gh_authenticated and identity is not None:
        _add_github_checks(checks, identity, get_default_branch(root))

    checks.add_group("Security config", lambda: security_config_results(root))
    checks.add_group("Agent settings", lambda: editor_settings_results(root))

    return checks