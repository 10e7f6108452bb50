from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Action(str, Enum):
    """Primary action requested by an intent."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    FIX = "fix"
    REFACTOR = "refactor"
    DOCUMENT = "document"
    TEST = "test"


class InclusionMode(str, Enum):
    """How a special context document (history, latest commit) is handled."""
    ALWAYS = "always"
    AUTO = "auto"      # Decided by task type and relevance
    NEVER = "never"


class OutputFormat(str, Enum):
    """Final encoding of the assembled prompt."""
    MARKDOWN = "markdown"
    PLAIN = "plain"     # Headings, bold and backticks stripped
    JSON = "json"       # {"prompt": <markdown>}


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# =============================================================================
# Context documents
# =============================================================================

class ContextMetadata(BaseModel):
    """Frontmatter of a context document."""
    model_config = ConfigDict(frozen=True)

    type: str | None = None
    priority: Priority = Priority.MEDIUM
    tags: tuple[str, ...] = ()

    # Set on derived copies produced by history filtering
    filtered: bool = False
    relevant_items: int | None = None
    total_items: int | None = None


class ContextDocument(BaseModel):
    """One loaded context note (persona, standards, history, ...)."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Unique key, the file stem")
    metadata: ContextMetadata = Field(default_factory=ContextMetadata)
    body: str = Field(default="", description="Markdown body, frontmatter stripped")
    path: str | None = None

    def with_body(self, body: str, **metadata: Any) -> "ContextDocument":
        """Return a derived copy with a replaced body; the original is untouched."""
        return self.model_copy(update={
            "body": body,
            "metadata": self.metadata.model_copy(update=metadata),
        })


# =============================================================================
# Schema documents and variables
# =============================================================================

class LiteralVariable(BaseModel):
    """A variable declared as a bare value: `primary: "#3B82F6"`."""
    model_config = ConfigDict(frozen=True)

    value: Any


class DescribedVariable(BaseModel):
    """A variable declared as a record: `primary: {value: "#3B82F6", type: color}`."""
    model_config = ConfigDict(frozen=True)

    value: Any = None
    type: str | None = None
    description: str | None = None


Variable = LiteralVariable | DescribedVariable


def to_variable(node: Any) -> Variable | None:
    """
    Normalize a raw variable node.

    Mappings carrying a `value` key become DescribedVariable, scalars and lists
    become LiteralVariable. Any other mapping is a variable group and yields None.
    """
    if isinstance(node, dict):
        if "value" in node:
            return DescribedVariable(
                value=node["value"],
                type=node.get("type"),
                description=node.get("description"),
            )
        return None
    return LiteralVariable(value=node)


class SchemaDocument(BaseModel):
    """One loaded variable-definition file."""
    model_config = ConfigDict(frozen=True)

    name: str
    variables: dict[str, Any] = Field(default_factory=dict)
    raw: dict[str, Any] = Field(default_factory=dict, description="Full parsed document")
    path: str | None = None


# =============================================================================
# Prompt templates
# =============================================================================

class TemplateVariable(BaseModel):
    """Declared template placeholder."""
    default: Any = None
    enum: list[Any] | None = None
    description: str = ""


class TemplateSection(BaseModel):
    """A named, prioritized block of template text."""
    template: str | None = None
    content: str | None = None
    priority: float | str | None = None
    conditional: bool = False

    @property
    def text(self) -> str:
        return self.template if self.template is not None else (self.content or "")

    @property
    def order(self) -> float:
        """Numeric priority; non-numeric values sort last."""
        if isinstance(self.priority, (int, float)):
            return float(self.priority)
        return 10.0


class PromptTemplate(BaseModel):
    """
    JSON template descriptor.

    A section mapped to `false` switches off the built-in section of the same
    name (context, design, requirements, files, constraints, output). A bare
    string is shorthand for a section with literal content.
    """
    name: str
    extends: str | None = None
    description: str = ""
    variables: dict[str, TemplateVariable] = Field(default_factory=dict)
    sections: dict[str, TemplateSection | bool] = Field(default_factory=dict)

    @field_validator("sections", mode="before")
    @classmethod
    def _expand_shorthand(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {k: {"content": v} if isinstance(v, str) else v for k, v in value.items()}

    @property
    def disabled_sections(self) -> set[str]:
        return {name for name, section in self.sections.items() if section is False}

    @property
    def content_sections(self) -> dict[str, TemplateSection]:
        return {name: s for name, s in self.sections.items() if isinstance(s, TemplateSection)}


# =============================================================================
# Classification and suggestions
# =============================================================================

class Requirement(BaseModel):
    """Per-component requirement derived from an intent."""
    model_config = ConfigDict(frozen=True)

    type: str
    action: Action
    component: str | None = None
    description: str


class TaskTypeConfig(BaseModel):
    """Static definition of one task category."""
    model_config = ConfigDict(frozen=True)

    name: str
    patterns: tuple[str, ...] = ()
    relevant_dirs: tuple[str, ...] = ()
    relevant_files: tuple[str, ...] = ()
    requirements: tuple[str, ...] = ()
    exclude_context: tuple[str, ...] = ()
    priority: tuple[str, ...] = ("project", "standards", "persona")


class TaskTypeMatch(BaseModel):
    """Result of task-type classification."""
    model_config = ConfigDict(frozen=True)

    type: str = "general"
    confidence: float = 0.0
    config: TaskTypeConfig


class FileSuggestion(BaseModel):
    """A directory or file recommended for the task."""
    path: str
    name: str
    score: float = 0.5
    pattern: str | None = None


class FileSuggestions(BaseModel):
    directories: list[FileSuggestion] = Field(default_factory=list)
    files: list[FileSuggestion] = Field(default_factory=list)


# =============================================================================
# Generated prompt
# =============================================================================

class IntentInfo(BaseModel):
    """Parsed intent summary carried in prompt metadata."""
    action: str
    components: list[str] = Field(default_factory=list)
    types: list[str] = Field(default_factory=list)
    confidence: float = 0.0
    summary: str = ""


class PromptMetadata(BaseModel):
    template_used: str | None = None
    target: str = "claude"
    format: OutputFormat = OutputFormat.MARKDOWN
    intent: IntentInfo | None = None
    task_type: str = "general"
    task_confidence: float = 0.0
    context_used: list[str] = Field(default_factory=list)
    schemas_used: list[str] = Field(default_factory=list)
    estimated_tokens: int = 0
    generated_at: str | None = Field(default=None, description="UTC ISO timestamp")
    errors: list[str] = Field(default_factory=list)


class GeneratedPrompt(BaseModel):
    """Final artifact of one invocation."""
    model_config = ConfigDict(frozen=True)

    content: str | None = Field(..., description="Assembled text, None when generation was impossible")
    metadata: PromptMetadata = Field(default_factory=PromptMetadata)
    warnings: list[str] = Field(default_factory=list)
