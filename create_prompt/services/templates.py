"""
Prompt templates - inheritance, variables and section rendering.
"""
import logging
import re
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any

from create_prompt.schemas import PromptTemplate

logger = logging.getLogger(__name__)

# {{name}} or {{group.name}}; schema placeholders are left for the resolver
VARIABLE_PATTERN = re.compile(r"\{\{(\w+(?:\.\w+)*)\}\}")
OPTIONAL_VARIABLE_PATTERN = re.compile(r"\{\{\?(\w+(?:\.\w+)*)\}\}")
SCHEMA_NAMESPACE = "schema"


@dataclass(frozen=True)
class RenderedSection:
    name: str
    text: str
    order: float


# =============================================================================
# Inheritance
# =============================================================================

def resolve_template(
    name: str,
    templates: dict[str, PromptTemplate],
) -> tuple[PromptTemplate | None, list[str]]:
    """
    Merge a template with its `extends` chain.

    Parent sections come first and a child overrides them by section name;
    child variables override parent variables. A missing parent or a cycle
    stops the chain with a warning.

    Returns:
        (merged template or None if `name` is unknown, warnings)
    """
    warnings: list[str] = []
    template = templates.get(name)
    if template is None:
        return None, warnings

    chain = [template]
    seen = {template.name}
    current = template
    while current.extends:
        parent = templates.get(current.extends)
        if parent is None:
            warnings.append(f"Template '{current.name}' extends unknown template '{current.extends}'")
            break
        if parent.name in seen:
            warnings.append(f"Template inheritance cycle at '{parent.name}', ignoring further parents")
            break
        seen.add(parent.name)
        chain.append(parent)
        current = parent

    if len(chain) == 1:
        return template, warnings

    variables: dict[str, Any] = {}
    sections: dict[str, Any] = {}
    for link in reversed(chain):
        variables.update(link.variables)
        sections.update(link.sections)

    merged = template.model_copy(update={"variables": variables, "sections": sections})
    logger.debug(f"Resolved template '{name}' through {' -> '.join(t.name for t in chain)}")
    return merged, warnings


# =============================================================================
# Variables
# =============================================================================

def resolve_variables(
    template: PromptTemplate,
    overrides: dict[str, Any] | None = None,
) -> tuple[dict[str, Any], list[str]]:
    """
    Declared defaults with caller overrides applied.

    An override outside a declared enum is rejected with a warning and the
    default is kept. Overrides for undeclared names pass through.
    """
    warnings: list[str] = []
    values = {name: spec.default for name, spec in template.variables.items() if spec.default is not None}

    for name, value in (overrides or {}).items():
        spec = template.variables.get(name)
        if spec is not None and spec.enum and value not in spec.enum:
            allowed = ", ".join(str(v) for v in spec.enum)
            warnings.append(f"Variable '{name}' must be one of: {allowed}; keeping default")
            continue
        values[name] = value

    return values, warnings


def get_nested_value(values: dict[str, Any], path: str) -> Any | None:
    node: Any = values
    for key in path.split("."):
        if not isinstance(node, dict) or node.get(key) is None:
            return None
        node = node[key]
    return node


def apply_variables(text: str, values: dict[str, Any]) -> str:
    """
    Substitute `{{name}}` and `{{?name}}` placeholders.

    Missing required names stay verbatim, missing optional ones are removed.
    `{{schema.*}}` is never touched here.
    """
    def required(match: re.Match) -> str:
        path = match.group(1)
        if path.split(".", 1)[0] == SCHEMA_NAMESPACE:
            return match.group(0)
        value = get_nested_value(values, path)
        return match.group(0) if value is None else str(value)

    def optional(match: re.Match) -> str:
        value = get_nested_value(values, match.group(1))
        return "" if value is None else str(value)

    text = VARIABLE_PATTERN.sub(required, text)
    return OPTIONAL_VARIABLE_PATTERN.sub(optional, text)


def render_sections(template: PromptTemplate, values: dict[str, Any]) -> list[RenderedSection]:
    """
    Render content sections in declaration order.

    Blank results are dropped. A `conditional` section is also dropped while
    it still holds an unfilled `{{name}}` placeholder.
    """
    rendered = []
    for name, section in template.content_sections.items():
        text = apply_variables(section.text, values).strip()
        if not text:
            continue
        if section.conditional and has_unfilled_variables(text):
            logger.debug(f"Skipping conditional section '{name}' of template '{template.name}'")
            continue
        rendered.append(RenderedSection(name=name, text=text, order=section.order))
    return rendered


def has_unfilled_variables(text: str) -> bool:
    return any(
        match.group(1).split(".", 1)[0] != SCHEMA_NAMESPACE
        for match in VARIABLE_PATTERN.finditer(text)
    )


# =============================================================================
# Validation
# =============================================================================

def validate_template(
    label: str,
    data: dict[str, Any],
    known_names: set[str],
) -> tuple[list[str], list[str]]:
    errors: list[str] = []
    warnings: list[str] = []

    sections = data.get("sections")
    extends = data.get("extends")

    if not sections and not extends:
        errors.append(f"Template '{label}' must declare 'sections' or 'extends'")
    if not data.get("name"):
        warnings.append(f"Template '{label}' has no 'name', the file name is used")
    if extends and extends not in known_names:
        warnings.append(f"Template '{label}' extends unknown template '{extends}'")

    if isinstance(sections, dict):
        for section_name, section in sections.items():
            if section is False or isinstance(section, str):
                continue
            if not isinstance(section, dict):
                errors.append(f"Template '{label}' section '{section_name}' must be an object")
                continue
            text = section.get("template") if section.get("template") is not None else section.get("content")
            if not isinstance(text, str) or not text.strip():
                warnings.append(f"Template '{label}' section '{section_name}' is empty")
            priority = section.get("priority")
            if priority is not None and (isinstance(priority, bool) or not isinstance(priority, (int, float))):
                warnings.append(f"Template '{label}' section '{section_name}' has a non-numeric priority")
    elif sections is not None:
        errors.append(f"Template '{label}' 'sections' must be an object")

    return errors, warnings


def validate_templates(raw_templates: dict[str, dict[str, Any]]) -> tuple[list[str], list[str]]:
    """
    Validate raw template documents keyed by file name.

    Returns:
        (errors, warnings)
    """
    known_names = {data.get("name") or PurePath(label).stem for label, data in raw_templates.items()}
    errors: list[str] = []
    warnings: list[str] = []
    for label, data in raw_templates.items():
        template_errors, template_warnings = validate_template(label, data, known_names)
        errors.extend(template_errors)
        warnings.extend(template_warnings)
    return errors, warnings
