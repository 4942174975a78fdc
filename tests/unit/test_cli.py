"""Tests for CLI commands."""

from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from mayorwest import __version__
from mayorwest.cli import main
from mayorwest.config import SECURITY_CONFIG_PATH, SecurityConfig, load_security_config, save_security_config
from mayorwest.github import ProbeResult
from mayorwest.policy import POLICY_FILE_PATH, parse_policy_file
from mayorwest.sync import execute_plan, plan_sync
from mayorwest.templates import RenderOptions, TemplateRegistry


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def scaffolded(git_repo: Path, registry: TemplateRegistry, options: RenderOptions) -> Path:
    """git_repo with every template written."""
    execute_plan(plan_sync(registry.paths(), options, lambda p: False, registry), git_repo)
    return git_repo


class TestMain:
    """Tests for the command group."""

    def test_no_command_shows_help(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(main, [])
        assert result.exit_code == 0
        assert "Commands:" in result.output
        assert "mayor-west <command> [options]" in result.output

    def test_unknown_command(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(main, ["frobnicate"])
        assert result.exit_code == 1
        assert "Unknown command: frobnicate" in result.output
        assert "Commands:" in result.output

    @pytest.mark.parametrize("flag", ["--version", "-v"])
    def test_version_flag(self, cli_runner: CliRunner, flag: str) -> None:
        result = cli_runner.invoke(main, [flag])
        assert result.exit_code == 0
        assert result.output.strip() == __version__

    def test_help_command(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(main, ["help"])
        assert result.exit_code == 0
        for name in ("setup", "verify", "pause", "resume", "policy"):
            assert name in result.output

    def test_version_command(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(main, ["version"])
        assert result.exit_code == 0
        assert "mayor-west-mode" in result.output
        assert __version__ in result.output

    def test_examples(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(main, ["examples"])
        assert result.exit_code == 0
        assert "[MAYOR] Fix login button styling" in result.output
        assert "- [ ] Add toggle button in settings" in result.output
        assert "Best Practices" in result.output

    def test_unexpected_error_exits_1(self, cli_runner: CliRunner, workdir: Path) -> None:
        with patch("mayorwest.cli.verify.build_verify_checks", side_effect=ValueError("boom")):
            result = cli_runner.invoke(main, ["verify"])
        assert result.exit_code == 1
        assert "Error: boom" in result.output


class TestPauseResume:
    def test_pause(self, cli_runner: CliRunner, workdir: Path) -> None:
        save_security_config(SecurityConfig(), workdir)

        result = cli_runner.invoke(main, ["pause", "--no-commit"])

        assert result.exit_code == 0
        assert "Mayor West Mode paused" in result.output
        assert load_security_config(workdir).enabled is False

    def test_resume(self, cli_runner: CliRunner, workdir: Path) -> None:
        save_security_config(SecurityConfig(enabled=False), workdir)

        result = cli_runner.invoke(main, ["resume", "--no-commit"])

        assert result.exit_code == 0
        assert "Mayor West Mode resumed" in result.output
        assert load_security_config(workdir).enabled is True

    def test_already_paused(self, cli_runner: CliRunner, workdir: Path) -> None:
        save_security_config(SecurityConfig(enabled=False), workdir)
        before = (workdir / SECURITY_CONFIG_PATH).read_text()

        result = cli_runner.invoke(main, ["pause"])

        assert result.exit_code == 0
        assert "already paused" in result.output
        assert (workdir / SECURITY_CONFIG_PATH).read_text() == before

    def test_keeps_other_settings(self, cli_runner: CliRunner, workdir: Path) -> None:
        save_security_config(SecurityConfig(protected_paths=["Dockerfile"]), workdir)
        cli_runner.invoke(main, ["pause", "--no-commit"])
        assert load_security_config(workdir).protected_paths == ["Dockerfile"]

    def test_pause_with_off_schema_setting(self, cli_runner: CliRunner, workdir: Path) -> None:
        target = workdir / SECURITY_CONFIG_PATH
        target.parent.mkdir(parents=True)
        target.write_text("enabled: true\nsettings:\n  merge_method: fast-forward\n")

        result = cli_runner.invoke(main, ["pause", "--no-commit"])

        assert result.exit_code == 0
        assert "Mayor West Mode paused" in result.output
        data = yaml.safe_load(target.read_text())
        assert data["enabled"] is False
        assert data["settings"]["merge_method"] == "fast-forward"

    def test_keeps_unknown_keys_and_comments(self, cli_runner: CliRunner, workdir: Path) -> None:
        save_security_config(SecurityConfig(), workdir)
        target = workdir / SECURITY_CONFIG_PATH
        target.write_text(target.read_text() + "# on-call rota below\nteam_notes: ping @ops\n")

        cli_runner.invoke(main, ["pause", "--no-commit"])

        text = target.read_text()
        assert "# on-call rota below" in text
        assert "team_notes: ping @ops" in text
        assert yaml.safe_load(text)["enabled"] is False

    def test_prompts_for_commit(self, cli_runner: CliRunner, workdir: Path) -> None:
        save_security_config(SecurityConfig(), workdir)
        with patch("mayorwest.cli.configure.commit_files") as mock_commit:
            result = cli_runner.invoke(main, ["pause"], input="y\n")
        assert result.exit_code == 0
        mock_commit.assert_called_once_with(workdir, [SECURITY_CONFIG_PATH], "[MAYOR] Pause autonomous mode")

    def test_missing_config(self, cli_runner: CliRunner, workdir: Path) -> None:
        result = cli_runner.invoke(main, ["pause"])
        assert result.exit_code == 1
        assert "config not found" in result.output

    def test_malformed_config(self, cli_runner: CliRunner, workdir: Path) -> None:
        target = workdir / SECURITY_CONFIG_PATH
        target.parent.mkdir(parents=True)
        target.write_text("enabled: [")
        result = cli_runner.invoke(main, ["resume"])
        assert result.exit_code == 1
        assert "Error" in result.output


class TestStatus:
    def test_outside_repository(self, cli_runner: CliRunner, workdir: Path) -> None:
        with patch("mayorwest.cli.verify.is_git_repository", return_value=False), \
                patch("mayorwest.cli.verify.get_remote_url", return_value=None):
            result = cli_runner.invoke(main, ["status"])
        assert result.exit_code == 0
        assert "Remote URL: N/A" in result.output
        assert "No security config" in result.output

    def test_scaffolded(self, cli_runner: CliRunner, scaffolded: Path) -> None:
        result = cli_runner.invoke(main, ["status"])
        assert result.exit_code == 0
        assert "https://github.com/octo/app.git" in result.output
        assert "Autonomous mode: ACTIVE" in result.output
        assert "10 patterns defined" in result.output
        assert "Merge method: squash" in result.output

    def test_remote_url_printed_verbatim(self, cli_runner: CliRunner, workdir: Path) -> None:
        with patch("mayorwest.cli.verify.get_remote_url", return_value="https://github.com/octo/[bold]app.git"):
            result = cli_runner.invoke(main, ["status"])
        assert result.exit_code == 0
        assert "https://github.com/octo/[bold]app.git" in result.output

    def test_paused(self, cli_runner: CliRunner, workdir: Path) -> None:
        save_security_config(SecurityConfig(enabled=False), workdir)
        result = cli_runner.invoke(main, ["status"])
        assert "Autonomous mode: PAUSED" in result.output


class TestVerify:
    @patch("mayorwest.cli.verify.is_gh_installed", return_value=False)
    @patch("mayorwest.github.is_gh_installed", return_value=False)
    def test_without_gh(self, _installed, _note, cli_runner: CliRunner, scaffolded: Path) -> None:
        result = cli_runner.invoke(main, ["verify"])
        assert result.exit_code == 0
        assert "Result: 22/23 checks passed" in result.output
        assert "GitHub CLI (gh) installed" in result.output
        assert "Install and authenticate the GitHub CLI" in result.output

    @patch("mayorwest.github.probe_agent_assignable", return_value=ProbeResult.success(True))
    @patch("mayorwest.github.probe_secret", return_value=ProbeResult.success(True))
    @patch("mayorwest.github.probe_branch_protection", return_value=ProbeResult.success(True))
    @patch("mayorwest.github.probe_workflow_permissions", return_value=ProbeResult.success(True))
    @patch("mayorwest.github.probe_auto_merge", return_value=ProbeResult.success(True))
    @patch("mayorwest.github.is_gh_authenticated", return_value=True)
    @patch("mayorwest.github.is_gh_installed", return_value=True)
    def test_all_pass(
        self, _installed, _authenticated, _auto_merge, _permissions, _protection, _secret, _agent,
        cli_runner: CliRunner, scaffolded: Path,
    ) -> None:
        result = cli_runner.invoke(main, ["verify"])
        assert result.exit_code == 0
        assert "Result: 29/29 checks passed" in result.output
        assert "All systems go!" in result.output

    @patch("mayorwest.github.is_gh_installed", return_value=False)
    def test_empty_directory(self, _installed, cli_runner: CliRunner, workdir: Path) -> None:
        with patch("mayorwest.checks.is_git_repository", return_value=False), \
                patch("mayorwest.checks.get_remote_url", return_value=None):
            result = cli_runner.invoke(main, ["verify"])
        assert result.exit_code == 0
        assert "Not a git repository" in result.output
        assert "Some checks failed" in result.output


class TestConfigure:
    @pytest.fixture(autouse=True)
    def gh_ready(self):
        with patch("mayorwest.dependencies.is_gh_installed", return_value=True), \
                patch("mayorwest.dependencies.is_gh_authenticated", return_value=True):
            yield

    @patch("mayorwest.github.probe_secret", return_value=ProbeResult.success(True))
    @patch("mayorwest.github.set_branch_protection")
    @patch("mayorwest.github.set_workflow_permissions")
    @patch("mayorwest.github.enable_auto_merge")
    def test_no_input(self, mock_auto, mock_perms, mock_protect, _secret, cli_runner: CliRunner, scaffolded: Path) -> None:
        result = cli_runner.invoke(main, ["configure", "--no-input"])

        assert result.exit_code == 0
        assert "Configuration complete" in result.output
        assert "secret already set" in result.output
        mock_auto.assert_called_once()
        mock_perms.assert_called_once()
        assert mock_protect.call_args[0][1] == "main"

    @patch("mayorwest.github.probe_secret", return_value=ProbeResult.success(False))
    @patch("mayorwest.github.set_branch_protection", side_effect=RuntimeError("HTTP 403"))
    @patch("mayorwest.github.set_workflow_permissions")
    @patch("mayorwest.github.enable_auto_merge")
    def test_failed_step_continues(self, mock_auto, mock_perms, _protect, _secret, cli_runner: CliRunner, scaffolded: Path) -> None:
        result = cli_runner.invoke(main, ["configure", "--no-input"])

        assert result.exit_code == 0
        assert "HTTP 403" in result.output
        assert "gh secret set GH_AW_AGENT_TOKEN" in result.output
        assert "Configuration complete" in result.output

    @patch("mayorwest.github.set_secret")
    @patch("mayorwest.github.probe_secret", return_value=ProbeResult.success(False))
    @patch("mayorwest.github.set_branch_protection")
    @patch("mayorwest.github.set_workflow_permissions")
    @patch("mayorwest.github.enable_auto_merge")
    def test_interactive(
        self, _auto, _perms, _protect, _secret, mock_set_secret, cli_runner: CliRunner, scaffolded: Path
    ) -> None:
        answers = [
            "y",  # configure security settings
            "rebase",  # merge method
            "n",  # audit comments
            "y",  # delete branch
            "y",  # protect Dockerfile
            "n", "n", "n", "n", "n", "n",  # remaining optional paths
            "y",  # store secret
            "tok3n",
        ]
        result = cli_runner.invoke(main, ["configure"], input="\n".join(answers) + "\n")

        assert result.exit_code == 0, result.output
        config = load_security_config(scaffolded)
        assert config.settings.merge_method.value == "rebase"
        assert config.settings.audit_comments is False
        assert "Dockerfile" in config.protected_paths
        assert mock_set_secret.call_args[0][1:] == ("GH_AW_AGENT_TOKEN", "tok3n")

    def test_requires_gh(self, cli_runner: CliRunner, git_repo: Path) -> None:
        with patch("mayorwest.dependencies.is_gh_installed", return_value=False):
            result = cli_runner.invoke(main, ["configure"])
        assert result.exit_code == 1
        assert "GitHub CLI not installed" in result.output


class TestPolicyCommands:
    def test_init(self, cli_runner: CliRunner, workdir: Path) -> None:
        result = cli_runner.invoke(main, ["policy", "init"])

        assert result.exit_code == 0
        path = workdir / POLICY_FILE_PATH
        assert path.read_text().startswith("# Mayor West policies")
        assert parse_policy_file(path).policies.files.max_files_per_pr == 100

    def test_init_existing(self, cli_runner: CliRunner, workdir: Path) -> None:
        cli_runner.invoke(main, ["policy", "init"])
        result = cli_runner.invoke(main, ["policy", "init", "--strict"])
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_init_force_strict_category(self, cli_runner: CliRunner, workdir: Path) -> None:
        cli_runner.invoke(main, ["policy", "init"])
        result = cli_runner.invoke(main, ["policy", "init", "--force", "--strict", "--category", "files"])
        assert result.exit_code == 0
        policy = parse_policy_file(workdir / POLICY_FILE_PATH)
        assert policy.policies.files.max_files_per_pr == 10
        assert policy.policies.commits is None

    def test_validate(self, cli_runner: CliRunner, workdir: Path) -> None:
        cli_runner.invoke(main, ["policy", "init", "--category", "commits"])
        result = cli_runner.invoke(main, ["policy", "validate"])
        assert result.exit_code == 0
        assert "is valid" in result.output
        assert "files: not set" in result.output
        assert "commits: defined" in result.output

    def test_validate_invalid(self, cli_runner: CliRunner, workdir: Path) -> None:
        bad = workdir / "bad.yml"
        bad.write_text("version: '9'\nenabled: true\npolicies: {}\n")
        result = cli_runner.invoke(main, ["policy", "validate", str(bad)])
        assert result.exit_code == 1
        assert "Invalid policy" in result.output

    def test_validate_missing(self, cli_runner: CliRunner, workdir: Path) -> None:
        result = cli_runner.invoke(main, ["policy", "validate"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_check_passes(self, cli_runner: CliRunner, workdir: Path) -> None:
        cli_runner.invoke(main, ["policy", "init"])
        result = cli_runner.invoke(
            main, ["policy", "check", "--file", "src/app.py:10:2", "-m", "[MAYOR] Fix the login form"]
        )
        assert result.exit_code == 0
        assert "All policy checks passed" in result.output

    def test_check_violations(self, cli_runner: CliRunner, workdir: Path) -> None:
        cli_runner.invoke(main, ["policy", "init", "--strict"])
        result = cli_runner.invoke(
            main, ["policy", "check", "--file", ".github/workflows/ci.yml", "-m", "oops"]
        )
        assert result.exit_code == 1
        assert "matches blocked pattern" in result.output
        assert "required format" in result.output

    def test_check_full_bypass(self, cli_runner: CliRunner, workdir: Path) -> None:
        cli_runner.invoke(main, ["policy", "init", "--strict"])
        result = cli_runner.invoke(
            main, ["policy", "check", "--file", ".github/workflows/ci.yml", "--label", "hotfix"]
        )
        assert result.exit_code == 0
        assert "bypassed by label" in result.output
