"""Template registry for scaffolded files.

Each registered path pairs a TemplateDescriptor (what the file is) with a
pure content generator (how to render it). The planner works with
descriptors and only asks the registry for content when it builds a plan.

Usage:
    from mayorwest.templates import default_registry, RenderOptions

    registry = default_registry()
    options = RenderOptions(owner="octo", repo="app")
    for descriptor in registry.filter_critical():
        content = registry.generate(descriptor.path, options)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class Category(str, Enum):
    """Kind of scaffolded file."""

    CONFIGURATION = "configuration"
    AGENT = "agent"
    WORKFLOW = "workflow"
    TEMPLATE = "template"
    SECURITY = "security"
    COPILOT = "copilot"
    VERSIONING = "versioning"


class MergeStrategy(str, Enum):
    """Pull request merge method used by the auto-merge workflow."""

    SQUASH = "SQUASH"
    MERGE = "MERGE"
    REBASE = "REBASE"


MIN_ITERATION_LIMIT = 1
MAX_ITERATION_LIMIT = 50
DEFAULT_ITERATION_LIMIT = 15

# Present in every generated file whose format allows a comment
GENERATED_MARKER = "Generated by mayor-west"


class RenderOptions(BaseModel):
    """Inputs for content generators."""

    model_config = ConfigDict(frozen=True)

    owner: str = Field(min_length=1)
    repo: str = Field(min_length=1)
    project_name: Optional[str] = None
    iteration_limit: int = Field(
        default=DEFAULT_ITERATION_LIMIT, ge=MIN_ITERATION_LIMIT, le=MAX_ITERATION_LIMIT
    )
    merge_strategy: MergeStrategy = MergeStrategy.SQUASH
    auto_merge: bool = True

    @property
    def display_name(self) -> str:
        return self.project_name or self.repo

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"


ContentGenerator = Callable[[RenderOptions], str]


@dataclass(frozen=True)
class TemplateDescriptor:
    """Metadata for one scaffolded file.

    Attributes:
        path: Repository-relative, slash-separated path (registry key)
        display_name: Human label for output
        category: Kind of file
        critical: Included even in minimal setup
    """

    path: str
    display_name: str
    category: Category
    critical: bool = False


class UnknownTemplateError(LookupError):
    """Raised when a path isn't registered. Indicates a selection bug."""

    def __init__(self, path: str) -> None:
        super().__init__(f"No template registered for path: {path}")
        self.path = path


class TemplateRegistry:
    """Registry of scaffold templates, keyed by path."""

    def __init__(self) -> None:
        self._entries: Dict[str, Tuple[TemplateDescriptor, ContentGenerator]] = {}

    def register(self, descriptor: TemplateDescriptor, generator: ContentGenerator) -> None:
        """Register a template.

        Raises:
            ValueError: If the path is already registered
        """
        if descriptor.path in self._entries:
            raise ValueError(f"Template already registered: {descriptor.path}")
        self._entries[descriptor.path] = (descriptor, generator)

    def list_all(self) -> List[TemplateDescriptor]:
        """All descriptors in registration order."""
        return [descriptor for descriptor, _ in self._entries.values()]

    def filter_critical(self) -> List[TemplateDescriptor]:
        """Descriptors that minimal setup must include."""
        return [d for d in self.list_all() if d.critical]

    def paths(self) -> List[str]:
        return list(self._entries)

    def get(self, path: str) -> TemplateDescriptor:
        """Look up a descriptor.

        Raises:
            UnknownTemplateError: If path isn't registered
        """
        try:
            return self._entries[path][0]
        except KeyError:
            raise UnknownTemplateError(path) from None

    def generate(self, path: str, options: RenderOptions) -> str:
        """Render the content for a registered path.

        Raises:
            UnknownTemplateError: If path isn't registered
        """
        try:
            _, generator = self._entries[path]
        except KeyError:
            raise UnknownTemplateError(path) from None
        return generator(options)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TemplateDescriptor]:
        return iter(self.list_all())


def default_registry() -> TemplateRegistry:
    """Get a registry with the built-in Mayor West templates.

    Returns:
        TemplateRegistry populated with every scaffold file
    """
    from mayorwest import content

    registry = TemplateRegistry()
    for descriptor, generator in content.BUILTIN_TEMPLATES:
        registry.register(descriptor, generator)
    return registry
