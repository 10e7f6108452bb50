"""
End-to-end prompt generation: load, parse, classify, select, assemble.

This is the one entry point the CLI calls. It never raises for a missing or
malformed optional resource; problems come back as warnings, or as
`metadata.errors` with no content when the workspace itself is missing.
"""
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from create_prompt.config import CONFIG_FILE_NAME, SelectionOptions, Settings
from create_prompt.prompts import (
    BASE_TEMPLATE,
    DEFAULT_CONFIG,
    DEFAULT_CONTEXT,
    DEFAULT_SCHEMAS,
    DEFAULT_TEMPLATES,
)
from create_prompt.schemas import GeneratedPrompt, OutputFormat, PromptMetadata, PromptTemplate
from create_prompt.services.assembler import assemble
from create_prompt.services.context_selector import ContextSelection, select_context
from create_prompt.services.file_suggestions import suggest_files
from create_prompt.services.intent import BASE_TEMPLATE as BASE_TEMPLATE_NAME
from create_prompt.services.intent import Intent, intent_summary, match_template, parse_intent
from create_prompt.services.loader import (
    CONTEXT_DIR,
    PROMPTS_DIR,
    SCHEMAS_DIR,
    Workspace,
    load_workspace,
)
from create_prompt.services.task_types import GENERAL, classify
from create_prompt.services.templates import resolve_template

logger = logging.getLogger(__name__)


def builtin_templates() -> dict[str, PromptTemplate]:
    template = PromptTemplate(**BASE_TEMPLATE)
    return {template.name: template}


def split_variables(variables: dict[str, Any] | None) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Separate caller variables into template values and schema overrides.

    Dotted keys (`colors.primary`, `schema.colors.primary`) override schema
    paths; plain keys fill template placeholders.

    Returns:
        (template_values, schema_overrides)
    """
    template_values: dict[str, Any] = {}
    schema_overrides: dict[str, Any] = {}
    for key, value in (variables or {}).items():
        if "." in key:
            schema_overrides[key] = value
        else:
            template_values[key] = value
    return template_values, schema_overrides


def choose_template(
    intent: Intent,
    templates: dict[str, PromptTemplate],
    requested: str | None,
    default_name: str,
) -> tuple[str | None, list[str]]:
    """Explicit request, else a type-specific match, else the configured default."""
    warnings = []
    available = list(templates)

    if requested:
        if requested in templates:
            return requested, warnings
        fallback = BASE_TEMPLATE_NAME if BASE_TEMPLATE_NAME in templates else (available[0] if available else None)
        warnings.append(f"Template '{requested}' not found, using '{fallback}'")
        return fallback, warnings

    name = match_template(intent, available)
    if name == BASE_TEMPLATE_NAME and default_name in templates:
        name = default_name
    return name, warnings


def generate_prompt(
    text: str,
    workspace_root: Path,
    template_name: str | None = None,
    target: str | None = None,
    output_format: OutputFormat | None = None,
    force_context: list[str] | None = None,
    variables: dict[str, Any] | None = None,
    include_context: bool = True,
    project_root: Path | None = None,
    settings: Settings | None = None,
) -> GeneratedPrompt:
    """
    Build a prompt for a free-text request from the files in a workspace.

    Args:
        text: The request as typed by the user
        workspace_root: Directory holding prompts/, context/, schemas/
        force_context: Context names to include regardless of relevance
        variables: Template values and dotted schema overrides
        project_root: Tree scanned for file suggestions, defaults to the
            workspace's parent directory
    """
    if not workspace_root.is_dir():
        error = f"Workspace directory not found: {workspace_root}"
        logger.warning(error)
        return GeneratedPrompt(content=None, metadata=PromptMetadata(errors=[error]))

    workspace = load_workspace(workspace_root, settings)
    settings = workspace.settings
    warnings = list(workspace.warnings)

    target = target or settings.default_target
    output_format = output_format or settings.default_format

    intent = parse_intent(text)
    logger.info(f"Intent: {intent_summary(intent)}")

    task = classify(intent, settings.detection_threshold)
    logger.info(f"Task type: {task.type} ({task.confidence:.0%})")

    templates = workspace.templates
    if not templates:
        warnings.append("No templates found, using built-in base template")
        templates = builtin_templates()

    name, template_warnings = choose_template(intent, templates, template_name, settings.default_template)
    warnings.extend(template_warnings)
    template, inheritance_warnings = resolve_template(name, templates) if name else (None, [])
    warnings.extend(inheritance_warnings)
    logger.info(f"Template: {name}")

    selection = ContextSelection()
    if include_context:
        options = SelectionOptions.from_settings(settings, force_include=force_context)
        selection = select_context(intent, task, workspace.context, options)
        warnings.extend(selection.warnings)

    suggestions = None
    if settings.suggest_files and task.type != GENERAL:
        suggestions = suggest_files(
            task.type,
            project_root or workspace_root.resolve().parent,
            list(intent.keywords),
            max_dirs=settings.max_suggested_dirs,
            max_files=settings.max_suggested_files,
        )

    template_values, schema_overrides = split_variables(variables)

    prompt = assemble(
        intent,
        task,
        selection.documents,
        workspace.schemas,
        template=template,
        file_suggestions=suggestions,
        target=target,
        output_format=output_format,
        template_values=template_values,
        schema_overrides=schema_overrides,
        inject_requirements=settings.inject_requirements,
        max_context_chars=settings.max_context_chars,
    )

    for warning in warnings + prompt.warnings:
        logger.warning(warning)

    metadata = prompt.metadata.model_copy(update={"errors": list(workspace.errors)})
    return prompt.model_copy(update={"metadata": metadata, "warnings": warnings + prompt.warnings})


# =============================================================================
# Workspace management
# =============================================================================

@dataclass
class InitResult:
    written: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def _write(path: Path, content: str, force: bool, result: InitResult, root: Path) -> None:
    relative = path.relative_to(root).as_posix()
    if path.exists() and not force:
        result.skipped.append(relative)
        return
    path.write_text(content, encoding="utf-8")
    result.written.append(relative)


def init_workspace(root: Path, force: bool = False, minimal: bool = False) -> InitResult:
    """
    Scaffold a workspace with the bundled defaults.

    Existing files are kept unless `force`; `minimal` writes only the
    templates and config.json.
    """
    result = InitResult()
    for subdir in (PROMPTS_DIR, CONTEXT_DIR, SCHEMAS_DIR):
        (root / subdir).mkdir(parents=True, exist_ok=True)

    for template in DEFAULT_TEMPLATES:
        path = root / PROMPTS_DIR / f"{template['name']}.json"
        _write(path, json.dumps(template, indent=2) + "\n", force, result, root)

    if not minimal:
        for filename, content in DEFAULT_CONTEXT.items():
            _write(root / CONTEXT_DIR / filename, content, force, result, root)
        for filename, content in DEFAULT_SCHEMAS.items():
            _write(root / SCHEMAS_DIR / filename, content, force, result, root)

    _write(root / CONFIG_FILE_NAME, json.dumps(DEFAULT_CONFIG, indent=2) + "\n", force, result, root)

    logger.info(f"Initialized {root}: {len(result.written)} written, {len(result.skipped)} kept")
    return result


def describe_workspace(workspace: Workspace) -> dict[str, list[str]]:
    """One display line per template, context document and schema."""
    templates = [
        f"{t.name}" + (f" (extends {t.extends})" if t.extends else "") + (f" - {t.description}" if t.description else "")
        for t in workspace.templates.values()
    ]
    context = [
        f"{d.name} [{d.metadata.type or 'untyped'}, {d.metadata.priority.value}]"
        for d in workspace.context.values()
    ]
    schemas = [
        f"{s.name} ({len(s.variables)} variable{'s' if len(s.variables) != 1 else ''})"
        for s in workspace.schemas.values()
    ]
    return {"templates": templates, "context": context, "schemas": schemas}
