"""Content generators for scaffolded files.

Every generator is a pure function of RenderOptions. JSON and YAML files are
built as Python objects and serialized, so quoting and escaping are left to
json/PyYAML. Embedded github-script code is passed through as block literals.
"""

import json
import textwrap
from typing import Any, Dict, List, Optional, Tuple

import yaml

from mayorwest.config import SECURITY_CONFIG_PATH, MergeMethod, MergeSettings, SecurityConfig
from mayorwest.policy import POLICY_FILE_PATH as POLICY_PATH, generate_default_policy
from mayorwest.templates import GENERATED_MARKER, Category, ContentGenerator, RenderOptions, TemplateDescriptor

TASK_LABEL = "mayor-task"
AGENT_LOGIN = "copilot-swe-agent"
AGENT_PR_AUTHORS = ["copilot", "Copilot", "copilot[bot]", "copilot-swe-agent[bot]"]
AGENT_TOKEN_SECRET = "GH_AW_AGENT_TOKEN"
GITHUB_SCRIPT_ACTION = "actions/github-script@v7"
CHECKOUT_ACTION = "actions/checkout@v4"

SETTINGS_PATH = ".vscode/settings.json"
AGENT_INSTRUCTIONS_PATH = ".github/agents/mayor-west-mode.md"
AUTO_MERGE_WORKFLOW_PATH = ".github/workflows/mayor-west-auto-merge.yml"
ORCHESTRATOR_WORKFLOW_PATH = ".github/workflows/mayor-west-orchestrator.yml"
ISSUE_TEMPLATE_PATH = ".github/ISSUE_TEMPLATE/mayor-task.md"
CODEOWNERS_PATH = ".github/CODEOWNERS"
COPILOT_INSTRUCTIONS_PATH = ".github/copilot-instructions.md"
CHANGELOG_PATH = "CHANGELOG.md"
VERSIONRC_PATH = ".versionrc.json"
RELEASE_WORKFLOW_PATH = ".github/workflows/mayor-west-release.yml"

ITERATION_LIMIT_KEY = "chat.agent.iterationLimit"
BLOCKED_TERMINAL_COMMANDS = ["rm", "rm -rf", "kill", "git reset --hard", "git push --force"]
MARKDOWN_MARKER = f"<!-- {GENERATED_MARKER} -->\n"


class _BlockDumper(yaml.SafeDumper):
    """SafeDumper that indents sequences and never emits anchors."""

    def ignore_aliases(self, data: Any) -> bool:
        return True

    def increase_indent(self, flow: bool = False, indentless: bool = False) -> None:
        return super().increase_indent(flow, False)


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


_BlockDumper.add_representer(str, _represent_str)


def dump_yaml(document: Dict[str, Any], header: Optional[str] = None) -> str:
    """Serialize a document as block-style YAML, keeping key order."""
    body = yaml.dump(
        document,
        Dumper=_BlockDumper,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        width=4096,
    )
    if header:
        return header.rstrip("\n") + "\n\n" + body
    return body


def dump_json(document: Any) -> str:
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def _script(source: str) -> str:
    return textwrap.dedent(source).lstrip("\n")


def _agent_author_condition() -> str:
    return " || ".join(
        f"github.event.pull_request.user.login == '{login}'" for login in AGENT_PR_AUTHORS
    )


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


def render_vscode_settings(options: RenderOptions) -> str:
    terminal_rules: Dict[str, bool] = {
        r"/^git\s+(status|diff|log|add|commit|push)\b/": True,
        r"/^(npm|pnpm|yarn)\s+(test|lint|build)\b/": True,
        r"/^(npm|pnpm|yarn)\s+run\s+(test|lint|format)\b/": True,
        r"/^(python\s+-m\s+)?pytest\b/": True,
    }
    for command in BLOCKED_TERMINAL_COMMANDS:
        terminal_rules[command] = False

    return dump_json(
        {
            "chat.tools.autoApprove": True,
            "chat.tools.terminal.autoApprove": terminal_rules,
            ITERATION_LIMIT_KEY: options.iteration_limit,
            "chat.agent.maxTokensPerIteration": 4000,
            "chat.agent.slowMode": False,
        }
    )


# ---------------------------------------------------------------------------
# Agent instructions
# ---------------------------------------------------------------------------


def render_agent_instructions(options: RenderOptions) -> str:
    return f"""\
# Mayor West Mode - Agent Protocol for {options.display_name}

You are operating in **Mayor West Mode**: confident, autonomous, careful.

## Your Mission

When you are assigned an issue labelled `{TASK_LABEL}` in `{options.slug}`:

1. **Understand** the task by reading the whole issue
2. **Implement** every acceptance criterion
3. **Test** with the project's test suite
4. **Commit** with a clear, descriptive message
5. **Open** a pull request that closes the issue

## Operating Principles

### Read the issue completely
- Extract every acceptance criterion (numbered list or checklist)
- Note testing requirements and technical constraints

### Implement with autonomy
- Follow the code style and patterns already in the repository
- Infer intent from context instead of asking for clarification
- Iterate on your own output when a first attempt fails

### Test before committing
- Run the project's tests (`npm test`, `pytest`, or equivalent)
- Never commit code with failing tests

### Commit with clear messages
- Format: `[MAYOR] <issue title>: <specific change>`
- Reference the issue: `Closes #<number>`

### Pull requests
- One pull request per issue; only one of your pull requests is merged per
  orchestrator run
- Pull requests are merged with the `{options.merge_strategy.value}` method
  once all required checks pass
- Changes to protected paths (see `{SECURITY_CONFIG_PATH}`) wait for a human

## Failure Recovery

1. **Test failure**: read the error, fix the code, re-run the tests
2. **Type or lint errors**: fix them, run the formatter, re-run the tests
3. **Merge conflict**: rebase onto the default branch and resolve

**You have {options.iteration_limit} iterations maximum.** Use them wisely.

## Safety Constraints

- **Never** run `rm -rf` or other destructive commands
- **Never** force-push to `main` or `master`
- **Never** edit workflows or `{SECURITY_CONFIG_PATH}` unless the issue asks for it
- **Always** run the tests before committing
- **Always** work through pull requests, never push to the default branch

{MARKDOWN_MARKER}"""


def render_copilot_instructions(options: RenderOptions) -> str:
    return f"""\
# Repository instructions for coding agents

This repository ({options.slug}) uses Mayor West Mode. Issues labelled
`{TASK_LABEL}` are assigned to the coding agent automatically and its pull
requests are merged once checks pass.

- Full protocol: `{AGENT_INSTRUCTIONS_PATH}`
- Security and merge settings: `{SECURITY_CONFIG_PATH}`
- Merge policies: `{POLICY_PATH}`

Keep each pull request scoped to a single issue, keep the test suite green,
and prefix commit messages with `[MAYOR]`.

{MARKDOWN_MARKER}"""


# ---------------------------------------------------------------------------
# Workflows
# ---------------------------------------------------------------------------

_AUTO_MERGE_SCRIPT = _script(
    r"""
    if (process.env.AUTO_MERGE !== 'true') {
      core.info('Auto-merge was disabled during setup; nothing to do.');
      return;
    }

    const mutation = `
      mutation($pullRequestId: ID!, $mergeMethod: PullRequestMergeMethod!) {
        enablePullRequestAutoMerge(input: {pullRequestId: $pullRequestId, mergeMethod: $mergeMethod}) {
          pullRequest {
            number
            autoMergeRequest { enabledAt mergeMethod }
          }
        }
      }
    `;

    try {
      await github.graphql(mutation, {
        pullRequestId: context.payload.pull_request.node_id,
        mergeMethod: process.env.MERGE_METHOD,
      });
      core.info(`Auto-merge enabled for PR #${context.issue.number}`);
    } catch (error) {
      core.warning(`Auto-merge could not be enabled: ${error.message}`);
      core.info('Check that "Allow auto-merge" is enabled and the default branch is protected.');
    }
    """
)


def render_auto_merge_workflow(options: RenderOptions) -> str:
    workflow = {
        "name": "Mayor West Auto-Merge",
        "on": {
            "pull_request": {
                "types": ["opened", "synchronize", "reopened", "ready_for_review"],
            },
        },
        "permissions": {
            "contents": "write",
            "pull-requests": "write",
        },
        "jobs": {
            "auto-merge": {
                "runs-on": "ubuntu-latest",
                "if": _agent_author_condition(),
                "steps": [
                    {
                        "name": "Enable auto-merge",
                        "uses": GITHUB_SCRIPT_ACTION,
                        "env": {
                            "AUTO_MERGE": "true" if options.auto_merge else "false",
                            "MERGE_METHOD": options.merge_strategy.value,
                        },
                        "with": {
                            "github-token": "${{ secrets.GITHUB_TOKEN }}",
                            "script": _AUTO_MERGE_SCRIPT,
                        },
                    },
                ],
            },
        },
    }
    return dump_yaml(workflow, header=f"# {GENERATED_MARKER}. Enables auto-merge on agent pull requests.")


_CHECK_OPEN_PRS_SCRIPT = _script(
    r"""
    const authors = JSON.parse(process.env.AGENT_AUTHORS);
    const prs = await github.paginate(github.rest.pulls.list, {
      owner: context.repo.owner,
      repo: context.repo.repo,
      state: 'open',
      per_page: 100,
    });
    const open = prs.filter(pr => authors.includes(pr.user.login));
    if (open.length > 0) {
      core.info(`Agent already has open PR #${open[0].number}; not assigning new work.`);
    }
    core.setOutput('busy', open.length > 0 ? 'true' : 'false');
    """
)

_FIND_TASK_SCRIPT = _script(
    r"""
    const { data: issues } = await github.rest.issues.listForRepo({
      owner: context.repo.owner,
      repo: context.repo.repo,
      labels: process.env.TASK_LABEL,
      state: 'open',
      assignee: 'none',
      sort: 'created',
      direction: 'asc',
      per_page: 1,
    });

    if (issues.length === 0) {
      core.info('No unassigned tasks found');
      core.setOutput('found', 'false');
      return;
    }

    const task = issues[0];
    core.info(`Found task #${task.number}: ${task.title}`);
    core.setOutput('task_number', String(task.number));
    core.setOutput('found', 'true');
    """
)

_ASSIGN_AGENT_SCRIPT = _script(
    r"""
    const owner = context.repo.owner;
    const repo = context.repo.repo;
    const taskNumber = Number(process.env.TASK_NUMBER);

    const actorsQuery = `
      query($owner: String!, $repo: String!) {
        repository(owner: $owner, name: $repo) {
          suggestedActors(first: 100, capabilities: CAN_BE_ASSIGNED) {
            nodes { ... on Bot { id login } }
          }
        }
      }
    `;
    const actorsResponse = await github.graphql(actorsQuery, { owner, repo });
    const actors = actorsResponse.repository.suggestedActors.nodes;
    const agent = actors.find(actor => actor.login === process.env.AGENT_LOGIN);
    if (!agent) {
      core.info(`Assignable actors: ${actors.map(a => a.login).join(', ')}`);
      core.setFailed(`${process.env.AGENT_LOGIN} is not available for this repository`);
      return;
    }

    const issueQuery = `
      query($owner: String!, $repo: String!, $number: Int!) {
        repository(owner: $owner, name: $repo) {
          issue(number: $number) {
            id
            assignees(first: 100) { nodes { id } }
          }
        }
      }
    `;
    const issueResponse = await github.graphql(issueQuery, { owner, repo, number: taskNumber });
    const issue = issueResponse.repository.issue;
    const actorIds = [...issue.assignees.nodes.map(a => a.id), agent.id];

    const assignMutation = `
      mutation($assignableId: ID!, $actorIds: [ID!]!) {
        replaceActorsForAssignable(input: {assignableId: $assignableId, actorIds: $actorIds}) {
          assignable { ... on Issue { number } }
        }
      }
    `;
    await github.graphql(assignMutation, { assignableId: issue.id, actorIds });
    core.info(`Assigned ${process.env.AGENT_LOGIN} to issue #${taskNumber}`);
    """
)

_READ_CONFIG_RUN = _script(
    r"""
    CONFIG=.github/mayor-west.yml
    if [ -f "$CONFIG" ]; then
      echo "enabled=$(yq '.enabled' "$CONFIG")" >> "$GITHUB_OUTPUT"
      echo "protected_paths=$(yq -o=json -I=0 '.protected_paths // []' "$CONFIG")" >> "$GITHUB_OUTPUT"
      echo "merge_method=$(yq '.settings.merge_method // "squash"' "$CONFIG")" >> "$GITHUB_OUTPUT"
      echo "delete_branch=$(yq '.settings.delete_branch' "$CONFIG")" >> "$GITHUB_OUTPUT"
      echo "audit_comments=$(yq '.settings.audit_comments' "$CONFIG")" >> "$GITHUB_OUTPUT"
    else
      echo "enabled=true" >> "$GITHUB_OUTPUT"
      echo "protected_paths=$DEFAULT_PROTECTED_PATHS" >> "$GITHUB_OUTPUT"
      echo "merge_method=$DEFAULT_MERGE_METHOD" >> "$GITHUB_OUTPUT"
      echo "delete_branch=true" >> "$GITHUB_OUTPUT"
      echo "audit_comments=true" >> "$GITHUB_OUTPUT"
    fi
    """
)

_MERGE_PRS_SCRIPT = _script(
    r"""
    const owner = context.repo.owner;
    const repo = context.repo.repo;
    const authors = JSON.parse(process.env.AGENT_AUTHORS);
    const protectedPaths = JSON.parse(process.env.PROTECTED_PATHS || '[]');
    const mergeMethod = process.env.MERGE_METHOD || 'squash';

    function globToRegExp(pattern) {
      let out = '';
      for (let i = 0; i < pattern.length; i++) {
        const ch = pattern[i];
        if (pattern.startsWith('**/', i)) {
          out += '(?:.*/)?';
          i += 2;
        } else if (pattern.startsWith('**', i)) {
          out += '.*';
          i += 1;
        } else if (ch === '*') {
          out += '[^/]*';
        } else if (ch === '?') {
          out += '[^/]';
        } else {
          out += ch.replace(/[.+^${}()|[\]\\]/g, '\\$&');
        }
      }
      return new RegExp(`^${out}$`);
    }
    const protectedRegexps = protectedPaths.map(globToRegExp);
    const isProtected = file => protectedRegexps.some(re => re.test(file));

    const prs = await github.paginate(github.rest.pulls.list, {
      owner, repo, state: 'open', sort: 'created', direction: 'asc', per_page: 100,
    });
    const agentPRs = prs.filter(pr => authors.includes(pr.user.login) && !pr.draft);
    core.info(`Found ${agentPRs.length} agent PR(s)`);

    for (const pr of agentPRs) {
      const files = await github.paginate(github.rest.pulls.listFiles, {
        owner, repo, pull_number: pr.number, per_page: 100,
      });
      const changed = files.map(f => f.filename);
      const touched = changed.filter(isProtected);

      if (touched.length > 0) {
        core.info(`PR #${pr.number} touches protected paths; leaving it for human review`);
        await github.rest.issues.createComment({
          owner, repo, issue_number: pr.number,
          body: [
            '## Mayor West: human review required',
            '',
            'This pull request touches protected paths:',
            '',
            ...touched.map(f => `- \`${f}\``),
            '',
            'Protected paths are listed in `.github/mayor-west.yml`.',
          ].join('\n'),
        });
        continue;
      }

      const { data: details } = await github.rest.pulls.get({ owner, repo, pull_number: pr.number });
      if (details.mergeable_state !== 'clean') {
        core.info(`PR #${pr.number} is not mergeable yet (${details.mergeable_state})`);
        continue;
      }

      try {
        await github.rest.pulls.merge({
          owner, repo, pull_number: pr.number,
          merge_method: mergeMethod,
          commit_title: `[MAYOR] ${pr.title} (#${pr.number})`,
        });
      } catch (error) {
        core.warning(`Failed to merge PR #${pr.number}: ${error.message}`);
        continue;
      }
      core.info(`Merged PR #${pr.number}`);

      if (process.env.DELETE_BRANCH !== 'false' && details.head.repo && details.head.repo.full_name === `${owner}/${repo}`) {
        await github.rest.git.deleteRef({ owner, repo, ref: `heads/${details.head.ref}` }).catch(() => {});
      }
      if (process.env.AUDIT_COMMENTS !== 'false') {
        await github.rest.issues.createComment({
          owner, repo, issue_number: pr.number,
          body: `## Mayor West auto-merged\n\n**Changed files:** ${changed.length}\n**Method:** ${mergeMethod}`,
        });
      }
      // One merge per run
      break;
    }
    """
)


def render_orchestrator_workflow(options: RenderOptions) -> str:
    agent_authors = json.dumps(AGENT_PR_AUTHORS)
    defaults = SecurityConfig()
    workflow = {
        "name": "Mayor West Orchestrator",
        "on": {
            "workflow_dispatch": {},
            "pull_request": {"types": ["closed"]},
            "schedule": [{"cron": "*/15 * * * *"}],
        },
        "permissions": {
            "contents": "write",
            "issues": "write",
            "pull-requests": "write",
        },
        "concurrency": {
            "group": "mayor-west-orchestrator",
            "cancel-in-progress": False,
        },
        "jobs": {
            "orchestrate": {
                "runs-on": "ubuntu-latest",
                "steps": [
                    {
                        "name": "Check for open agent pull requests",
                        "id": "open_prs",
                        "uses": GITHUB_SCRIPT_ACTION,
                        "env": {"AGENT_AUTHORS": agent_authors},
                        "with": {"script": _CHECK_OPEN_PRS_SCRIPT},
                    },
                    {
                        "name": "Find next unassigned task",
                        "id": "find_task",
                        "if": "steps.open_prs.outputs.busy != 'true'",
                        "uses": GITHUB_SCRIPT_ACTION,
                        "env": {"TASK_LABEL": TASK_LABEL},
                        "with": {"script": _FIND_TASK_SCRIPT},
                    },
                    {
                        "name": "Assign agent to task",
                        "if": "steps.find_task.outputs.found == 'true'",
                        "uses": GITHUB_SCRIPT_ACTION,
                        "env": {
                            "TASK_NUMBER": "${{ steps.find_task.outputs.task_number }}",
                            "AGENT_LOGIN": AGENT_LOGIN,
                        },
                        "with": {
                            "github-token": f"${{{{ secrets.{AGENT_TOKEN_SECRET} || secrets.GITHUB_TOKEN }}}}",
                            "script": _ASSIGN_AGENT_SCRIPT,
                        },
                    },
                ],
            },
            "merge-agent-prs": {
                "runs-on": "ubuntu-latest",
                "steps": [
                    {"name": "Checkout repository", "uses": CHECKOUT_ACTION},
                    {
                        "name": "Read security config",
                        "id": "config",
                        "env": {
                            "DEFAULT_PROTECTED_PATHS": json.dumps(defaults.protected_paths),
                            "DEFAULT_MERGE_METHOD": options.merge_strategy.value.lower(),
                        },
                        "run": _READ_CONFIG_RUN,
                    },
                    {
                        "name": "Merge ready agent pull requests",
                        "if": "steps.config.outputs.enabled != 'false'",
                        "uses": GITHUB_SCRIPT_ACTION,
                        "env": {
                            "AGENT_AUTHORS": agent_authors,
                            "PROTECTED_PATHS": "${{ steps.config.outputs.protected_paths }}",
                            "MERGE_METHOD": "${{ steps.config.outputs.merge_method }}",
                            "DELETE_BRANCH": "${{ steps.config.outputs.delete_branch }}",
                            "AUDIT_COMMENTS": "${{ steps.config.outputs.audit_comments }}",
                        },
                        "with": {
                            "github-token": f"${{{{ secrets.{AGENT_TOKEN_SECRET} || secrets.GITHUB_TOKEN }}}}",
                            "script": _MERGE_PRS_SCRIPT,
                        },
                    },
                ],
            },
        },
    }
    return dump_yaml(workflow, header=f"# {GENERATED_MARKER}. Assigns tasks to the agent and merges its pull requests.")


_RELEASE_RUN = _script(
    """
    gh release create "$GITHUB_REF_NAME" \\
      --title "$GITHUB_REF_NAME" \\
      --generate-notes \\
      --verify-tag
    """
)


def render_release_workflow(options: RenderOptions) -> str:
    workflow = {
        "name": "Mayor West Release",
        "on": {"push": {"tags": ["v*.*.*"]}},
        "permissions": {"contents": "write"},
        "jobs": {
            "release": {
                "runs-on": "ubuntu-latest",
                "steps": [
                    {"name": "Checkout repository", "uses": CHECKOUT_ACTION, "with": {"fetch-depth": 0}},
                    {
                        "name": "Create GitHub release",
                        "env": {"GH_TOKEN": "${{ secrets.GITHUB_TOKEN }}"},
                        "run": _RELEASE_RUN,
                    },
                ],
            },
        },
    }
    return dump_yaml(workflow, header=f"# {GENERATED_MARKER}. Publishes a release for {options.slug} on version tags.")


# ---------------------------------------------------------------------------
# Issue template
# ---------------------------------------------------------------------------


def render_issue_template(options: RenderOptions) -> str:
    front_matter = yaml.safe_dump(
        {
            "name": "Mayor Task",
            "about": "Create a task for autonomous execution",
            "title": "[MAYOR] ",
            "labels": [TASK_LABEL],
        },
        default_flow_style=False,
        sort_keys=False,
    )
    body = """\
# [MAYOR] Brief description of the task

**Summary**: One sentence describing what needs to be done.

## Context

Why is this task needed? What problem does it solve?

## Acceptance Criteria

List specific, testable requirements. The agent implements all of them.

- [ ] First requirement
- [ ] Second requirement
- [ ] Tests cover the new behavior

## Technical Constraints

Architectural guidance: existing modules to reuse, conventions to follow,
dependencies that must not be added.

## Testing Requirements

- Unit tests for new logic
- The full test suite passes

## Files Likely to Change

- `path/to/file` - what changes there

## Definition of Done

- [ ] All acceptance criteria implemented
- [ ] All tests pass
- [ ] Linting passes
- [ ] Pull request opened and ready to merge
"""
    return f"---\n{front_matter}---\n\n{body}\n{MARKDOWN_MARKER}"


# ---------------------------------------------------------------------------
# Security
# ---------------------------------------------------------------------------


def render_security_config(options: RenderOptions) -> str:
    config = SecurityConfig(
        enabled=options.auto_merge,
        settings=MergeSettings(merge_method=MergeMethod(options.merge_strategy.value.lower())),
    )
    return config.to_yaml()


POLICY_HEADER = (
    "# Mayor West policies: which agent changes may merge without a human.\n"
    "# Validate with: mayor-west policy validate\n"
    f"# {GENERATED_MARKER}\n"
    "\n"
)


def render_policy_file(options: RenderOptions) -> str:
    return POLICY_HEADER + generate_default_policy()


def render_codeowners(options: RenderOptions) -> str:
    owner = f"@{options.owner}"
    lines = [
        f"# Code owners for {options.slug}",
        "# Automation and security configuration need an owner's review.",
        f"# {GENERATED_MARKER}",
        f"/.github/workflows/ {owner}",
        f"/{SECURITY_CONFIG_PATH} {owner}",
        f"/{POLICY_PATH} {owner}",
        f"/{CODEOWNERS_PATH} {owner}",
    ]
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Versioning
# ---------------------------------------------------------------------------


def render_changelog(options: RenderOptions) -> str:
    return f"""\
# Changelog

All notable changes to {options.display_name} are documented in this file.

The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.1.0/),
and this project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0.html).

## [Unreleased]

### Added

- Mayor West Mode autonomous workflows
"""


def render_versionrc(options: RenderOptions) -> str:
    base_url = f"https://github.com/{options.slug}"
    return dump_json(
        {
            "types": [
                {"type": "feat", "section": "Features"},
                {"type": "fix", "section": "Bug Fixes"},
                {"type": "perf", "section": "Performance"},
                {"type": "refactor", "hidden": True},
                {"type": "docs", "hidden": True},
                {"type": "test", "hidden": True},
                {"type": "chore", "hidden": True},
            ],
            "tagPrefix": "v",
            "releaseCommitMessageFormat": "chore(release): {{currentTag}}",
            "commitUrlFormat": base_url + "/commit/{{hash}}",
            "compareUrlFormat": base_url + "/compare/{{previousTag}}...{{currentTag}}",
            "issueUrlFormat": base_url + "/issues/{{id}}",
        }
    )


BUILTIN_TEMPLATES: List[Tuple[TemplateDescriptor, ContentGenerator]] = [
    (
        TemplateDescriptor(SETTINGS_PATH, "VS Code agent settings", Category.CONFIGURATION, critical=True),
        render_vscode_settings,
    ),
    (
        TemplateDescriptor(AGENT_INSTRUCTIONS_PATH, "Agent instructions", Category.AGENT, critical=True),
        render_agent_instructions,
    ),
    (
        TemplateDescriptor(AUTO_MERGE_WORKFLOW_PATH, "Auto-merge workflow", Category.WORKFLOW, critical=True),
        render_auto_merge_workflow,
    ),
    (
        TemplateDescriptor(ORCHESTRATOR_WORKFLOW_PATH, "Orchestrator workflow", Category.WORKFLOW, critical=True),
        render_orchestrator_workflow,
    ),
    (
        TemplateDescriptor(ISSUE_TEMPLATE_PATH, "Task issue template", Category.TEMPLATE),
        render_issue_template,
    ),
    (
        TemplateDescriptor(SECURITY_CONFIG_PATH, "Security config", Category.SECURITY, critical=True),
        render_security_config,
    ),
    (
        TemplateDescriptor(POLICY_PATH, "Policy file", Category.SECURITY),
        render_policy_file,
    ),
    (
        TemplateDescriptor(CODEOWNERS_PATH, "Code owners", Category.SECURITY),
        render_codeowners,
    ),
    (
        TemplateDescriptor(COPILOT_INSTRUCTIONS_PATH, "Repository agent instructions", Category.COPILOT),
        render_copilot_instructions,
    ),
    (
        TemplateDescriptor(CHANGELOG_PATH, "Changelog", Category.VERSIONING),
        render_changelog,
    ),
    (
        TemplateDescriptor(VERSIONRC_PATH, "Semantic version config", Category.VERSIONING),
        render_versionrc,
    ),
    (
        TemplateDescriptor(RELEASE_WORKFLOW_PATH, "Release workflow", Category.VERSIONING),
        render_release_workflow,
    ),
]
