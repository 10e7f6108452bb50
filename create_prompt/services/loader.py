"""
Workspace loader - reads templates, context notes and schema files from disk.

Layout:
    <workspace>/prompts/*.json             prompt templates
    <workspace>/context/*.md, *.txt        context notes with optional frontmatter
    <workspace>/schemas/*.json|yaml|yml    variable definitions
    <workspace>/config.json                settings overrides

Nothing here raises for a bad file: parse failures become error strings on the
LoadResult and the offending document is skipped, its siblings still load.
"""
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Generic, TypeVar

import yaml
from pydantic import ValidationError

from create_prompt.config import Settings, load_settings
from create_prompt.schemas import (
    ContextDocument,
    ContextMetadata,
    Priority,
    PromptTemplate,
    SchemaDocument,
)
from create_prompt.services.schema_resolver import validate_schema
from create_prompt.services.templates import validate_templates

logger = logging.getLogger(__name__)

T = TypeVar("T")

PROMPTS_DIR = "prompts"
CONTEXT_DIR = "context"
SCHEMAS_DIR = "schemas"
SUBDIRECTORIES = (PROMPTS_DIR, CONTEXT_DIR, SCHEMAS_DIR)

CONTEXT_EXTENSIONS = (".md", ".txt")
SCHEMA_EXTENSIONS = (".json", ".yaml", ".yml")
TEMPLATE_EXTENSIONS = (".json",)

FRONTMATTER_DELIMITER = "---"
PLACEHOLDER_MARKER = "[Describe"


@dataclass
class LoadResult(Generic[T]):
    """Documents keyed by name plus everything that went wrong loading them."""
    items: dict[str, T] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add(self, name: str, item: T, source: str) -> None:
        if name in self.items:
            self.warnings.append(f"Duplicate name '{name}' in {source}, later file wins")
        self.items[name] = item


@dataclass
class Workspace:
    """Everything one invocation reads from the workspace directory."""
    root: Path
    settings: Settings
    templates: dict[str, PromptTemplate] = field(default_factory=dict)
    context: dict[str, ContextDocument] = field(default_factory=dict)
    schemas: dict[str, SchemaDocument] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class ValidationReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


# =============================================================================
# Frontmatter
# =============================================================================

def parse_frontmatter_value(value: str) -> str | list[str]:
    """`[a, b]` becomes a list, surrounding quotes are removed, anything else is kept."""
    value = value.strip()
    if value.startswith("[") and value.endswith("]"):
        return [item.strip() for item in value[1:-1].split(",") if item.strip()]
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_frontmatter(text: str) -> tuple[dict[str, str | list[str]], str]:
    """
    Split a leading `---` block of `key: value` lines from a markdown body.

    Returns:
        (fields, body) with the body stripped; fields is empty when the text
        has no frontmatter block
    """
    text = text.replace("\r\n", "\n")
    opening = FRONTMATTER_DELIMITER + "\n"
    closing = "\n" + FRONTMATTER_DELIMITER + "\n"

    if not text.startswith(opening):
        return {}, text.strip()

    end = text.find(closing, len(opening) - 1)
    if end == -1:
        return {}, text.strip()

    block = text[len(opening):end]
    body = text[end + len(closing):]

    fields: dict[str, str | list[str]] = {}
    for line in block.split("\n"):
        key, sep, value = line.partition(":")
        if not sep or not key.strip():
            continue
        fields[key.strip()] = parse_frontmatter_value(value)

    return fields, body.strip()


def build_metadata(fields: dict[str, Any], source: str = "") -> tuple[ContextMetadata, list[str]]:
    """Map frontmatter fields onto ContextMetadata; unknown keys are ignored."""
    warnings = []

    priority = Priority.MEDIUM
    raw_priority = fields.get("priority")
    if isinstance(raw_priority, str) and raw_priority:
        try:
            priority = Priority(raw_priority.lower())
        except ValueError:
            warnings.append(f"{source}: unknown priority '{raw_priority}', using medium")

    tags = fields.get("tags") or []
    if isinstance(tags, str):
        tags = [t.strip() for t in tags.split(",") if t.strip()]

    doc_type = fields.get("type")
    metadata = ContextMetadata(
        type=doc_type if isinstance(doc_type, str) and doc_type else None,
        priority=priority,
        tags=tuple(tags),
    )
    return metadata, warnings


# =============================================================================
# Per-kind loaders
# =============================================================================

def _iter_files(directory: Path, extensions: tuple[str, ...]):
    """Files with a supported extension, in name order."""
    for path in sorted(directory.iterdir()):
        if path.is_file() and path.suffix.lower() in extensions:
            yield path


def _too_large(path: Path, max_bytes: int) -> bool:
    return path.stat().st_size > max_bytes


def load_context_document(path: Path) -> tuple[ContextDocument, list[str]]:
    text = path.read_text(encoding="utf-8")
    fields, body = parse_frontmatter(text)
    metadata, warnings = build_metadata(fields, path.name)
    document = ContextDocument(name=path.stem, metadata=metadata, body=body, path=str(path))
    return document, warnings


def load_context_dir(workspace: Path, max_bytes: int = 512 * 1024) -> LoadResult[ContextDocument]:
    result: LoadResult[ContextDocument] = LoadResult()
    directory = workspace / CONTEXT_DIR

    if not directory.is_dir():
        result.warnings.append(f"Context directory not found: {directory}")
        return result

    try:
        for path in _iter_files(directory, CONTEXT_EXTENSIONS):
            if _too_large(path, max_bytes):
                result.warnings.append(f"Context file too large (>{max_bytes // 1024}KB): {path.name}")
                continue
            try:
                document, warnings = load_context_document(path)
            except (OSError, UnicodeDecodeError) as e:
                result.errors.append(f"Failed to read context {path.name}: {e}")
                continue
            result.warnings.extend(warnings)
            result.add(document.name, document, CONTEXT_DIR)
    except OSError as e:
        result.errors.append(f"Failed to read context directory: {e}")

    logger.debug(f"Loaded {len(result.items)} context document(s) from {directory}")
    return result


def parse_schema_text(text: str, suffix: str) -> Any:
    if suffix == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def load_schema_file(path: Path) -> SchemaDocument:
    """
    Load one schema document.

    Raises:
        OSError, json.JSONDecodeError, yaml.YAMLError, ValueError
    """
    data = parse_schema_text(path.read_text(encoding="utf-8"), path.suffix.lower())
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("top level must be a mapping")

    variables = data.get("variables") or {}
    if not isinstance(variables, dict):
        raise ValueError("'variables' must be a mapping")

    return SchemaDocument(
        name=str(data.get("name") or path.stem),
        variables=variables,
        raw=data,
        path=str(path),
    )


def load_schema_dir(workspace: Path, max_bytes: int = 1024 * 1024) -> LoadResult[SchemaDocument]:
    result: LoadResult[SchemaDocument] = LoadResult()
    directory = workspace / SCHEMAS_DIR

    if not directory.is_dir():
        result.warnings.append(f"Schemas directory not found: {directory}")
        return result

    try:
        for path in _iter_files(directory, SCHEMA_EXTENSIONS):
            if _too_large(path, max_bytes):
                result.warnings.append(f"Schema file too large (>{max_bytes // (1024 * 1024)}MB): {path.name}")
                continue
            try:
                schema = load_schema_file(path)
            except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError, ValueError) as e:
                result.errors.append(f"Failed to parse schema {path.name}: {e}")
                continue
            result.add(schema.name, schema, SCHEMAS_DIR)
    except OSError as e:
        result.errors.append(f"Failed to read schemas directory: {e}")

    logger.debug(f"Loaded {len(result.items)} schema(s) from {directory}")
    return result


def read_template_data(path: Path) -> dict[str, Any]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("top level must be a JSON object")
    return data


def load_template_dir(workspace: Path) -> LoadResult[PromptTemplate]:
    result: LoadResult[PromptTemplate] = LoadResult()
    directory = workspace / PROMPTS_DIR

    if not directory.is_dir():
        result.warnings.append(f"Prompts directory not found: {directory}")
        return result

    try:
        for path in _iter_files(directory, TEMPLATE_EXTENSIONS):
            try:
                data = read_template_data(path)
                template = PromptTemplate(**{**data, "name": data.get("name") or path.stem})
            except ValidationError as e:
                result.errors.append(f"Invalid template {path.name}: {e.error_count()} error(s)")
                continue
            except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValueError) as e:
                result.errors.append(f"Failed to parse template {path.name}: {e}")
                continue
            result.add(template.name, template, PROMPTS_DIR)
    except OSError as e:
        result.errors.append(f"Failed to read prompts directory: {e}")

    logger.debug(f"Loaded {len(result.items)} template(s) from {directory}")
    return result


# =============================================================================
# Whole workspace
# =============================================================================

def load_workspace(root: Path, settings: Settings | None = None) -> Workspace:
    """
    Load every document kind from a workspace.

    The caller checks that the directory exists; settings default to the
    workspace's config.json layered over environment and defaults.
    """
    settings = settings or load_settings(root)
    workspace = Workspace(root=root, settings=settings)

    templates = load_template_dir(root)
    context = load_context_dir(root, settings.max_context_file_bytes)
    schemas = load_schema_dir(root, settings.max_schema_file_bytes)

    for loaded in (templates, context, schemas):
        workspace.errors.extend(loaded.errors)
        workspace.warnings.extend(loaded.warnings)

    workspace.templates = templates.items
    workspace.context = context.items
    workspace.schemas = schemas.items

    logger.info(
        f"Workspace {root}: {len(workspace.templates)} template(s), "
        f"{len(workspace.context)} context document(s), {len(workspace.schemas)} schema(s)"
    )
    return workspace


def validate_context_documents(documents: dict[str, ContextDocument]) -> list[str]:
    warnings = []
    for name, document in documents.items():
        if not document.body.strip():
            warnings.append(f"Context '{name}' is empty")
        elif PLACEHOLDER_MARKER in document.body:
            warnings.append(f"Context '{name}' still contains placeholder text")
    return warnings


def validate_workspace(root: Path) -> ValidationReport:
    """Check layout, template structure, schema variables and context notes."""
    report = ValidationReport()

    if not root.is_dir():
        report.errors.append(f"Workspace directory not found: {root}")
        return report

    for subdir in SUBDIRECTORIES:
        if not (root / subdir).is_dir():
            report.warnings.append(f"Subdirectory not found: {subdir}/")

    prompts_dir = root / PROMPTS_DIR
    if prompts_dir.is_dir():
        raw_templates: dict[str, dict[str, Any]] = {}
        for path in _iter_files(prompts_dir, TEMPLATE_EXTENSIONS):
            try:
                raw_templates[path.name] = read_template_data(path)
            except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValueError) as e:
                report.errors.append(f"Invalid JSON in {path.name}: {e}")
        errors, warnings = validate_templates(raw_templates)
        report.errors.extend(errors)
        report.warnings.extend(warnings)

    schemas = load_schema_dir(root)
    report.errors.extend(schemas.errors)
    for name, schema in schemas.items.items():
        issues = validate_schema(schema)
        if issues:
            report.warnings.append(f"Schema '{name}' has issues: {', '.join(issues)}")

    context = load_context_dir(root)
    report.errors.extend(context.errors)
    report.warnings.extend(validate_context_documents(context.items))

    return report
