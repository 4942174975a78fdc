"""Policy system for Mayor West (.github/mayor-west-policies.yml).

Policies describe which agent changes may be merged without a human:
file patterns, change size limits, commit message format and bypass labels.

Usage:
    from mayorwest.policy import parse_policy_file, validate_files, ChangedFile

    policy = parse_policy_file(Path(".github/mayor-west-policies.yml"))
    result = validate_files([ChangedFile("src/app.py", additions=12)], policy)
    if not result.passed:
        for violation in result.violations:
            print(violation)
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

POLICY_FILE_PATH = ".github/mayor-west-policies.yml"
POLICY_SCHEMA_VERSION = "1.0"

STRICT_BLOCKED_PATTERNS = [
    ".github/workflows/**",
    "package.json",
    "**/*.sql",
    "**/migrations/**",
]


class PolicyError(Exception):
    """Raised when a policy file is missing or invalid."""


class FilePolicy(BaseModel):
    allowed_patterns: List[str] = Field(default_factory=lambda: ["**/*"])
    blocked_patterns: List[str] = Field(default_factory=list)
    max_files_per_pr: Optional[int] = 100
    max_lines_per_file: Optional[int] = 1000


class MessageRule(BaseModel):
    """A regex rule for commit messages, with an example for error output."""

    pattern: str
    example: Optional[str] = None

    @field_validator("pattern")
    @classmethod
    def _compile(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid regex: {e}") from e
        return value


class CommitPolicy(BaseModel):
    format: Optional[MessageRule] = None
    required_trailer: Optional[MessageRule] = None


class PartialBypass(BaseModel):
    label: str
    bypasses: List[str] = Field(default_factory=list)


class Overrides(BaseModel):
    bypass_labels: List[str] = Field(default_factory=list)
    partial_bypass: List[PartialBypass] = Field(default_factory=list)


class Policies(BaseModel):
    """Policy categories; a category left out of the file is not enforced."""

    files: Optional[FilePolicy] = None
    commits: Optional[CommitPolicy] = None


class Policy(BaseModel):
    """A parsed policy document."""

    version: str = POLICY_SCHEMA_VERSION
    enabled: bool = True
    policies: Policies = Field(default_factory=Policies)
    overrides: Overrides = Field(default_factory=Overrides)

    @field_validator("version", mode="before")
    @classmethod
    def _check_version(cls, value: object) -> str:
        value = str(value)
        if value != POLICY_SCHEMA_VERSION:
            raise ValueError(f"unsupported policy version {value}, expected {POLICY_SCHEMA_VERSION}")
        return value

    @field_validator("enabled", mode="before")
    @classmethod
    def _strict_bool(cls, value: object) -> object:
        if not isinstance(value, bool):
            raise ValueError('"enabled" must be a boolean')
        return value


@dataclass
class ChangedFile:
    """A file touched by a pull request."""

    filename: str
    additions: int = 0
    deletions: int = 0


@dataclass
class PolicyResult:
    passed: bool
    violations: List[str] = field(default_factory=list)
    reason: Optional[str] = None


@dataclass
class BypassResult:
    has_bypass: bool
    bypass_type: Optional[str] = None  # "full" or "partial"
    bypasses: List[str] = field(default_factory=list)


def parse_policy(content: str) -> Policy:
    """Parse and validate policy YAML text.

    Raises:
        PolicyError: If the YAML is invalid or doesn't match the schema
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise PolicyError(f"Invalid YAML syntax: {e}") from e

    if not isinstance(data, dict):
        raise PolicyError("Policy file must contain a mapping")
    if "version" not in data:
        raise PolicyError("Missing required field: version")
    if "policies" not in data or not isinstance(data["policies"], dict):
        raise PolicyError('Missing or invalid "policies" object')
    if "enabled" not in data:
        raise PolicyError("Missing required field: enabled")

    try:
        return Policy(**data)
    except ValidationError as e:
        raise PolicyError(f"Invalid policy: {e}") from e


def parse_policy_file(path: Path) -> Policy:
    """Read and validate a policy file.

    Raises:
        PolicyError: If the file doesn't exist or is invalid
    """
    if not path.exists():
        raise PolicyError(f"Policy file not found: {path}")
    return parse_policy(path.read_text(encoding="utf-8"))


def _glob_to_regex(pattern: str) -> str:
    out = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif ch == "*":
            out.append("[^/]*")
            i += 1
        elif ch == "?":
            out.append("[^/]")
            i += 1
        else:
            out.append(re.escape(ch))
            i += 1
    return "^" + "".join(out) + "$"


def matches_pattern(filename: str, pattern: str) -> bool:
    """Check if a repository path matches a glob pattern.

    `*` matches within one path segment, `**` matches across segments and
    `**/` also matches zero directories.
    """
    return re.match(_glob_to_regex(pattern), filename) is not None


def validate_files(files: Sequence[ChangedFile], policy: Policy) -> PolicyResult:
    """Validate changed files against the file policy."""
    if not policy.enabled:
        return PolicyResult(passed=True, reason="Policies disabled")

    file_policy = policy.policies.files
    if file_policy is None:
        return PolicyResult(passed=True, reason="No file policies defined")

    violations: List[str] = []

    if file_policy.max_files_per_pr and len(files) > file_policy.max_files_per_pr:
        violations.append(f"Too many files changed: {len(files)} > {file_policy.max_files_per_pr}")

    for changed in files:
        # Blocked patterns take precedence; one violation per file
        for pattern in file_policy.blocked_patterns:
            if matches_pattern(changed.filename, pattern):
                violations.append(f"File {changed.filename} matches blocked pattern: {pattern}")
                break

        if file_policy.allowed_patterns and not any(
            matches_pattern(changed.filename, p) for p in file_policy.allowed_patterns
        ):
            violations.append(f"File {changed.filename} not in allowed patterns")

        if file_policy.max_lines_per_file:
            lines_changed = changed.additions + changed.deletions
            if lines_changed > file_policy.max_lines_per_file:
                violations.append(
                    f"File {changed.filename} has too many changes: "
                    f"{lines_changed} > {file_policy.max_lines_per_file}"
                )

    return PolicyResult(passed=not violations, violations=violations)


def validate_commit_message(message: str, policy: Policy) -> PolicyResult:
    """Validate a commit message against the commit policy."""
    if not policy.enabled:
        return PolicyResult(passed=True, reason="Policies disabled")

    commit_policy = policy.policies.commits
    if commit_policy is None:
        return PolicyResult(passed=True, reason="No commit policies defined")

    violations: List[str] = []

    if commit_policy.format and not re.search(commit_policy.format.pattern, message):
        expected = commit_policy.format.example or commit_policy.format.pattern
        violations.append(f"Commit message doesn't match required format: {expected}")

    if commit_policy.required_trailer:
        last_line = message.rstrip("\n").split("\n")[-1].strip()
        if not re.search(commit_policy.required_trailer.pattern, last_line):
            expected = commit_policy.required_trailer.example or commit_policy.required_trailer.pattern
            violations.append(f"Commit message missing required trailer: {expected}")

    return PolicyResult(passed=not violations, violations=violations)


def check_bypass(labels: Sequence[str], policy: Policy) -> BypassResult:
    """Check whether issue labels bypass all or some policies."""
    overrides = policy.overrides

    if any(label in labels for label in overrides.bypass_labels):
        return BypassResult(has_bypass=True, bypass_type="full", bypasses=["all"])

    bypasses: List[str] = []
    for partial in overrides.partial_bypass:
        if partial.label in labels:
            bypasses.extend(partial.bypasses)
    if bypasses:
        return BypassResult(has_bypass=True, bypass_type="partial", bypasses=bypasses)

    return BypassResult(has_bypass=False)


def default_policy(strict: bool = False, categories: Optional[Sequence[str]] = None) -> Policy:
    """Build the default policy, optionally strict or limited to categories."""
    policy = Policy(
        policies=Policies(
            files=FilePolicy(),
            commits=CommitPolicy(
                format=MessageRule(
                    pattern=r"^\[MAYOR\]\s+.{10,100}$",
                    example="[MAYOR] Add feature description",
                )
            ),
        ),
        overrides=Overrides(bypass_labels=["emergency", "hotfix"]),
    )

    if strict and policy.policies.files is not None:
        policy.policies.files.max_files_per_pr = 10
        policy.policies.files.blocked_patterns = list(STRICT_BLOCKED_PATTERNS)

    if categories is not None:
        wanted = set(categories)
        for name in Policies.model_fields:
            if name not in wanted:
                setattr(policy.policies, name, None)

    return policy


def generate_default_policy(strict: bool = False, categories: Optional[Sequence[str]] = None) -> str:
    """Render the default policy as YAML text."""
    data: Dict[str, object] = default_policy(strict, categories).model_dump(mode="json", exclude_none=True)
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False, width=100)
