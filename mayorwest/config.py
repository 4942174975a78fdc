"""Security configuration for Mayor West (.github/mayor-west.yml).

The generated workflows read this file at run time; the CLI reads and
rewrites it for pause/resume/configure/status.
"""

import logging
import re
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mayorwest.templates import GENERATED_MARKER

log = logging.getLogger("mayorwest.config")

SECURITY_CONFIG_PATH = ".github/mayor-west.yml"

SECURITY_CONFIG_HEADER = f"""\
# Mayor West Mode security configuration
# {GENERATED_MARKER}
# Controls autonomous merge behavior for agent pull requests.
# Set `enabled: false` (or run `mayor-west pause`) to stop all auto-merges.
# Pull requests touching `protected_paths` always require human review.
"""

DEFAULT_PROTECTED_PATHS = [
    ".github/workflows/**",
    ".github/mayor-west.yml",
    "package.json",
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "**/.env*",
    "**/secrets/**",
    "**/*.pem",
    "**/*.key",
]

# Extra patterns offered by `configure`
OPTIONAL_PROTECTED_PATHS = {
    "Dockerfile": "Dockerfile",
    "docker-compose": "docker-compose*.yml",
    "ci": ".circleci/**",
    "k8s": "k8s/**",
    "terraform": "**/*.tf",
    "migrations": "**/migrations/**",
    "security-policy": "SECURITY.md",
}


class ConfigError(Exception):
    """Raised when the security config can't be parsed."""


class MergeMethod(str, Enum):
    SQUASH = "squash"
    MERGE = "merge"
    REBASE = "rebase"


class MergeSettings(BaseModel):
    """Auto-merge behavior."""

    model_config = ConfigDict(extra="allow")

    merge_method: MergeMethod = MergeMethod.SQUASH
    delete_branch: bool = True
    require_status_checks: bool = True
    audit_comments: bool = True


class AuditSettings(BaseModel):
    """Audit trail settings."""

    model_config = ConfigDict(extra="allow")

    log_to_file: bool = False
    log_path: str = ".github/mayor-west-audit.log"
    comment_on_merge: bool = True


class SecurityConfig(BaseModel):
    """Mayor West security configuration."""

    model_config = ConfigDict(extra="allow")

    enabled: bool = True
    protected_paths: List[str] = Field(default_factory=lambda: list(DEFAULT_PROTECTED_PATHS))
    settings: MergeSettings = Field(default_factory=MergeSettings)
    audit: AuditSettings = Field(default_factory=AuditSettings)

    def protects(self, pattern: str) -> bool:
        """Check whether a pattern is listed verbatim in protected_paths."""
        return pattern in self.protected_paths

    def add_protected_paths(self, patterns: List[str]) -> List[str]:
        """Append patterns that aren't already protected.

        Returns:
            The patterns that were actually added
        """
        added = [p for p in patterns if p not in self.protected_paths]
        self.protected_paths.extend(added)
        return added

    def to_yaml(self) -> str:
        """Render the config as YAML with the explanatory header."""
        body = yaml.safe_dump(
            self.model_dump(mode="json"),
            default_flow_style=False,
            sort_keys=False,
        )
        return SECURITY_CONFIG_HEADER + "\n" + body


_ENABLED_LINE = re.compile(r"^enabled:[^\n#]*", re.MULTILINE)


def parse_raw_security_config(content: str) -> Dict[str, Any]:
    """Parse security config YAML into a plain mapping, without schema checks.

    Raises:
        ConfigError: If the YAML is invalid or isn't a mapping
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in security config: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Security config must be a mapping")
    return data


def parse_security_config(content: str) -> SecurityConfig:
    """Parse security config YAML text.

    Keys the model doesn't know are kept, so a load/save round trip
    doesn't drop them.

    Raises:
        ConfigError: If the YAML is invalid or doesn't match the schema
    """
    data = parse_raw_security_config(content)
    try:
        return SecurityConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid security config: {e}") from e


def set_enabled_flag(content: str, enabled: bool) -> str:
    """Return the config text with the top-level ``enabled`` flag set.

    Only the ``enabled:`` line is touched (or a new one inserted after the
    leading comments), so comments, unknown keys and values the schema
    would reject all survive. Trailing comments on the line are kept.

    Raises:
        ConfigError: If the text isn't a YAML mapping, or the edit didn't
            produce the requested value
    """
    parse_raw_security_config(content)
    value = "true" if enabled else "false"

    match = _ENABLED_LINE.search(content)
    if match:
        updated = content[: match.start()] + f"enabled: {value}" + _trailing_space(match.group(0)) + content[match.end():]
    else:
        lines = content.splitlines(keepends=True)
        index = 0
        while index < len(lines) and (not lines[index].strip() or lines[index].lstrip().startswith("#")):
            index += 1
        if lines and not lines[-1].endswith("\n"):
            lines[-1] += "\n"
        lines.insert(index, f"enabled: {value}\n")
        updated = "".join(lines)

    if parse_raw_security_config(updated).get("enabled") is not enabled:
        raise ConfigError("Could not update the enabled flag in the security config")
    return updated


def _trailing_space(line: str) -> str:
    # Keep the gap before a trailing comment
    stripped = line.rstrip()
    return line[len(stripped):]


def load_security_config(root: Optional[Path] = None) -> Optional[SecurityConfig]:
    """Load .github/mayor-west.yml from a repository root.

    Args:
        root: Repository root (default: current directory)

    Returns:
        Loaded configuration, or None if the file doesn't exist

    Raises:
        ConfigError: If the file exists but is malformed
    """
    if root is None:
        root = Path.cwd()

    config_file = root / SECURITY_CONFIG_PATH
    if not config_file.exists():
        return None

    return parse_security_config(config_file.read_text(encoding="utf-8"))


def save_security_config(config: SecurityConfig, root: Optional[Path] = None) -> Path:
    """Write the security config back to disk.

    Returns:
        Path of the written file
    """
    if root is None:
        root = Path.cwd()

    config_file = root / SECURITY_CONFIG_PATH
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(config.to_yaml(), encoding="utf-8")
    log.debug("Wrote security config to %s", config_file)
    return config_file


def set_security_config_enabled(enabled: bool, root: Optional[Path] = None) -> Optional[bool]:
    """Flip the enabled flag in .github/mayor-west.yml in place.

    The rest of the file isn't validated, so pausing works even when some
    other setting is out of range.

    Returns:
        None if the file doesn't exist, False if the flag already had the
        requested value, True if the file was rewritten

    Raises:
        ConfigError: If the file isn't a YAML mapping
    """
    if root is None:
        root = Path.cwd()

    config_file = root / SECURITY_CONFIG_PATH
    if not config_file.exists():
        return None

    content = config_file.read_text(encoding="utf-8")
    if parse_raw_security_config(content).get("enabled") is enabled:
        return False

    config_file.write_text(set_enabled_flag(content, enabled), encoding="utf-8")
    log.debug("Set enabled=%s in %s", enabled, config_file)
    return True
