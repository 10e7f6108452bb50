"""
Prompt assembler - composes the final prompt from built-in and template sections.

Built-in sections and their priorities:
    title 1, context 2, design 2.5, requirements 3, files 3.5,
    constraints 4, output 5

Template sections are merged in by numeric priority (built-ins first on
ties) and the Task section always closes the prompt. Schema placeholders
are resolved after concatenation, then the target tweak and the output
encoding are applied. Nothing time-dependent goes into the body.
"""
import json
import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from create_prompt.prompts import (
    CONSTRAINTS_BY_TYPE,
    CONTENT_TRUNCATED_NOTE,
    CURSOR_OUTPUT_NOTE,
    DEFAULT_CONSTRAINTS,
    OUTPUT_EXPECTATIONS,
)
from create_prompt.schemas import (
    ContextDocument,
    FileSuggestions,
    GeneratedPrompt,
    OutputFormat,
    PromptMetadata,
    PromptTemplate,
    SchemaDocument,
    TaskTypeMatch,
    to_variable,
)
from create_prompt.services.file_suggestions import format_file_suggestions
from create_prompt.services.intent import Intent, to_intent_info
from create_prompt.services.requirements import (
    detect_sub_types,
    format_requirements_section,
    get_requirements,
)
from create_prompt.services.schema_resolver import extract_variables, referenced_schemas, resolve_all
from create_prompt.services.templates import render_sections, resolve_variables

logger = logging.getLogger(__name__)


# =============================================================================
# Targets
# =============================================================================

@dataclass(frozen=True)
class TargetConfig:
    name: str
    max_tokens: int | None


TARGET_CONFIGS: dict[str, TargetConfig] = {
    "claude": TargetConfig(name="Claude", max_tokens=200000),
    "cursor": TargetConfig(name="Cursor", max_tokens=128000),
    "gpt": TargetConfig(name="GPT-4", max_tokens=128000),
    "antigravity": TargetConfig(name="Antigravity", max_tokens=100000),
    "generic": TargetConfig(name="Generic", max_tokens=None),
}

GENERIC_TARGET = "generic"
CURSOR_TARGET = "cursor"

# Built-in section priorities
TITLE_PRIORITY = 1
CONTEXT_PRIORITY = 2
DESIGN_PRIORITY = 2.5
REQUIREMENTS_PRIORITY = 3
FILES_PRIORITY = 3.5
CONSTRAINTS_PRIORITY = 4
OUTPUT_PRIORITY = 5

DEFAULT_MAX_CONTEXT_CHARS = 2000

_HEADING = re.compile(r"^(#+)(?=\s)", re.MULTILINE)
_SUB_HEADING = re.compile(r"^(#{2,})(?=\s)", re.MULTILINE)
_PLAIN_HEADING = re.compile(r"^#+\s+", re.MULTILINE)


@dataclass(frozen=True)
class PromptSection:
    name: str
    text: str
    order: float


# =============================================================================
# Section builders
# =============================================================================

def relevel_headings(text: str) -> str:
    """Push every markdown heading one level deeper."""
    return _HEADING.sub(lambda m: m.group(1) + "#", text)


def display_name(name: str) -> str:
    return name.replace("_", " ").capitalize()


def build_title(intent: Intent) -> str:
    subject = " and ".join(intent.components) if intent.components else "implementation"
    return f"# {intent.action.value.capitalize()} {subject}"


def build_context_section(documents: list[ContextDocument], max_chars: int = DEFAULT_MAX_CONTEXT_CHARS) -> str:
    if not documents:
        return ""

    blocks = ["## Context"]
    for document in documents:
        body = relevel_headings(document.body)
        if len(body) > max_chars:
            body = body[:max_chars].rstrip() + "\n\n" + CONTENT_TRUNCATED_NOTE
        blocks.append(f"### {display_name(document.name)}")
        if body:
            blocks.append(body)
    return "\n\n".join(blocks)


COLORS_SCHEMA = "colors"
SPECS_SCHEMA = "specs"


def _listed_variables(schema_name: str, schema: SchemaDocument, scalars_only: bool = False) -> list[str]:
    """One `- Name: {{schema.<schema>.<name>}}` line per top-level variable with a value."""
    lines = []
    for name, node in schema.variables.items():
        variable = to_variable(node)
        if variable is None or not variable.value:
            continue
        if scalars_only and isinstance(variable.value, (dict, list)):
            continue
        lines.append(f"- {name.capitalize()}: {{{{schema.{schema_name}.{name}}}}}")
    return lines


def build_design_section(intent: Intent, schemas: dict[str, SchemaDocument]) -> str:
    """
    Loaded colors, scalar UI specs, then placeholders for every referenced
    path whose schema is loaded.
    """
    blocks = []
    for schema_name, title, scalars_only in (
        (COLORS_SCHEMA, "### Colors", False),
        (SPECS_SCHEMA, "### UI Specifications", True),
    ):
        schema = schemas.get(schema_name)
        lines = _listed_variables(schema_name, schema, scalars_only) if schema else []
        if lines:
            blocks.append(title + "\n\n" + "\n".join(lines))

    references = [
        f"- {ref}: {{{{schema.{ref}}}}}"
        for ref in intent.schema_references
        if ref.split(".", 1)[0] in schemas
    ]
    if references:
        blocks.append("\n".join(references))

    if not blocks:
        return ""
    return "## Design Specifications\n\n" + "\n\n".join(blocks)


def collect_requirements(intent: Intent, task: TaskTypeMatch) -> list[str]:
    """Task checklist followed by detected sub-type requirements not already listed."""
    items = list(task.config.requirements)
    sub_types = detect_sub_types(intent.raw, task.type)
    if sub_types:
        items.extend(get_requirements(task.type, sub_types))
    return list(dict.fromkeys(items))


def build_requirements_section(intent: Intent, task: TaskTypeMatch) -> str:
    if task.type != "general":
        return format_requirements_section(
            collect_requirements(intent, task),
            title=f"{task.config.name} Requirements",
        )

    descriptions = [r.description for r in intent.requirements if r.description.strip()]
    items = [d[0].upper() + d[1:] for d in dict.fromkeys(descriptions)]
    return format_requirements_section(items, title="Requirements")


def build_files_section(suggestions: FileSuggestions | None, task: TaskTypeMatch) -> str:
    if suggestions is None:
        return ""
    body = format_file_suggestions(suggestions, task.type)
    if not body:
        return ""
    return "## Relevant Files\n\n" + body


def build_constraints_section(intent: Intent) -> str:
    constraints: list[str] = []
    for type_name, items in CONSTRAINTS_BY_TYPE.items():
        if type_name in intent.types:
            constraints.extend(items)
    if not constraints:
        constraints = list(DEFAULT_CONSTRAINTS)
    return "## Constraints\n\n" + "\n".join(f"- {c}" for c in constraints)


def build_output_section(target: str) -> str:
    if target == CURSOR_TARGET:
        return f"{OUTPUT_EXPECTATIONS}\n\n{CURSOR_OUTPUT_NOTE}"
    return OUTPUT_EXPECTATIONS


def build_task_section(intent: Intent) -> str:
    return f"## Task\n\n{intent.raw}"


# =============================================================================
# Post-processing
# =============================================================================

def optimize_for_target(content: str, target: str) -> str:
    """Cursor expects shallower prompts: every heading below the title moves down one level."""
    if target == CURSOR_TARGET:
        return _SUB_HEADING.sub(lambda m: m.group(1) + "#", content)
    return content


def format_output(content: str, output_format: OutputFormat) -> str:
    content = content.strip()
    if output_format == OutputFormat.PLAIN:
        content = _PLAIN_HEADING.sub("", content)
        return content.replace("**", "").replace("`", "").strip()
    if output_format == OutputFormat.JSON:
        return json.dumps({"prompt": content}, indent=2)
    return content


def estimate_tokens(text: str) -> int:
    """Rough estimate at four characters per token."""
    return math.ceil(len(text) / 4)


def check_token_limits(content: str, target: str) -> tuple[bool, int, int | None]:
    """
    Returns:
        (fits, estimated tokens, target limit or None)
    """
    config = TARGET_CONFIGS.get(target, TARGET_CONFIGS[GENERIC_TARGET])
    tokens = estimate_tokens(content)
    fits = config.max_tokens is None or tokens < config.max_tokens
    return fits, tokens, config.max_tokens


# =============================================================================
# Assembly
# =============================================================================

def assemble(
    intent: Intent,
    task: TaskTypeMatch,
    context: list[ContextDocument],
    schemas: dict[str, SchemaDocument],
    template: PromptTemplate | None = None,
    file_suggestions: FileSuggestions | None = None,
    target: str = "claude",
    output_format: OutputFormat = OutputFormat.MARKDOWN,
    template_values: dict[str, Any] | None = None,
    schema_overrides: dict[str, Any] | None = None,
    inject_requirements: bool = True,
    max_context_chars: int = DEFAULT_MAX_CONTEXT_CHARS,
) -> GeneratedPrompt:
    """
    Compose one prompt.

    Args:
        context: Documents in selector order
        template: Already merged with its parents
        template_values: Caller values for the template's `{{name}}` placeholders
        schema_overrides: Values keyed by dotted path, ahead of loaded schemas

    Returns:
        GeneratedPrompt whose warnings list every non-fatal problem met
    """
    warnings: list[str] = []

    if target not in TARGET_CONFIGS:
        warnings.append(f"Unknown target '{target}', using generic")
        target = GENERIC_TARGET

    disabled = template.disabled_sections if template else set()

    builders = (
        ("title", TITLE_PRIORITY, lambda: build_title(intent)),
        ("context", CONTEXT_PRIORITY, lambda: build_context_section(context, max_context_chars)),
        ("design", DESIGN_PRIORITY, lambda: build_design_section(intent, schemas)),
        ("requirements", REQUIREMENTS_PRIORITY,
         lambda: build_requirements_section(intent, task) if inject_requirements else ""),
        ("files", FILES_PRIORITY, lambda: build_files_section(file_suggestions, task)),
        ("constraints", CONSTRAINTS_PRIORITY, lambda: build_constraints_section(intent)),
        ("output", OUTPUT_PRIORITY, lambda: build_output_section(target)),
    )

    sections = []
    for name, order, build in builders:
        if name in disabled:
            logger.debug(f"Section '{name}' disabled by template")
            continue
        text = build()
        if text:
            sections.append(PromptSection(name=name, text=text, order=order))

    if template is not None:
        values, variable_warnings = resolve_variables(template, template_values)
        warnings.extend(variable_warnings)
        for rendered in render_sections(template, values):
            sections.append(PromptSection(name=rendered.name, text=rendered.text, order=rendered.order))

    # Stable: built-ins stay ahead of template sections with the same priority
    sections.sort(key=lambda s: s.order)
    sections.append(PromptSection(name="task", text=build_task_section(intent), order=math.inf))

    content = "\n\n".join(s.text for s in sections)

    placeholders = extract_variables(content)
    content, unresolved = resolve_all(content, schemas, schema_overrides)
    for path in unresolved:
        warnings.append(f"Unresolved schema variable: {path}")
    resolved_paths = [p for p in placeholders if p not in unresolved]

    content = optimize_for_target(content, target)
    content = format_output(content, output_format)

    fits, tokens, limit = check_token_limits(content, target)
    if not fits:
        warnings.append(f"Prompt is ~{tokens} tokens, over the {limit} token limit for {target}")

    metadata = PromptMetadata(
        template_used=template.name if template else None,
        target=target,
        format=output_format,
        intent=to_intent_info(intent),
        task_type=task.type,
        task_confidence=task.confidence,
        context_used=[d.name for d in context] if "context" not in disabled else [],
        schemas_used=referenced_schemas(resolved_paths, schemas),
        estimated_tokens=tokens,
        generated_at=datetime.now(timezone.utc).isoformat(),
    )

    logger.info(f"Assembled {len(sections)} section(s), ~{tokens} tokens for {target}")
    return GeneratedPrompt(content=content, metadata=metadata, warnings=warnings)
