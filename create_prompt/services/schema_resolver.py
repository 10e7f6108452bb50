"""
Schema variable resolution for `{{schema.<path>}}` placeholders.
"""
import json
import logging
import re
from typing import Any, NamedTuple

from create_prompt.schemas import SchemaDocument, to_variable

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{\{schema\.([^}]+)\}\}")
SCHEMA_PREFIX = "schema."

_MISSING = object()


class ResolveResult(NamedTuple):
    result: str
    unresolved: list[str]


def _walk(node: Any, segments: list[str]) -> Any:
    for segment in segments:
        if not isinstance(node, dict) or segment not in node:
            return _MISSING
        node = node[segment]
    return node


def resolve(path: str, schemas: dict[str, SchemaDocument]) -> Any | None:
    """
    Resolve a dotted path like `colors.primary` against loaded schemas.

    The first segment names the schema. The rest is walked through the
    schema's variables; when a segment is missing there, the same remaining
    segments are walked through the raw document instead (palettes and other
    non-variable fields). A variable record is unwrapped to its value.

    Returns:
        The resolved value, or None when the path cannot be resolved
    """
    parts = path.strip().split(".")
    if len(parts) < 2:
        return None

    schema = schemas.get(parts[0])
    if schema is None:
        return None

    segments = parts[1:]
    node = _walk(schema.variables, segments)
    if node is _MISSING:
        node = _walk(schema.raw, segments)
    if node is _MISSING or node is None:
        return None

    variable = to_variable(node)
    if variable is None:
        # A group of variables, returned as-is
        return node
    return variable.value


def stringify(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def normalize_override_key(key: str) -> str:
    key = key.strip()
    return key[len(SCHEMA_PREFIX):] if key.startswith(SCHEMA_PREFIX) else key


def resolve_all(
    template: str,
    schemas: dict[str, SchemaDocument],
    overrides: dict[str, Any] | None = None,
) -> ResolveResult:
    """
    Substitute every `{{schema.<path>}}` placeholder.

    Overrides (keyed by dotted path) win over schema values. Unresolvable
    placeholders are left verbatim and their paths reported once each, in
    order of first appearance.
    """
    overrides = {normalize_override_key(k): v for k, v in (overrides or {}).items()}
    unresolved: list[str] = []

    def substitute(match: re.Match) -> str:
        path = match.group(1)
        if path in overrides:
            return stringify(overrides[path])

        value = resolve(path, schemas)
        if value is None:
            if path not in unresolved:
                unresolved.append(path)
            return match.group(0)
        return stringify(value)

    result = PLACEHOLDER_PATTERN.sub(substitute, template)
    if unresolved:
        logger.debug(f"Unresolved schema paths: {', '.join(unresolved)}")
    return ResolveResult(result, unresolved)


def extract_variables(template: str) -> list[str]:
    """Unique placeholder paths in order of first appearance."""
    return list(dict.fromkeys(PLACEHOLDER_PATTERN.findall(template)))


def validate_schema(schema: SchemaDocument) -> list[str]:
    """Advisory issues: variable records carrying neither `type` nor `value`."""
    issues = []
    if not schema.variables and not schema.raw:
        issues.append('Schema must have "variables" or data properties')

    for key, variable in schema.variables.items():
        if isinstance(variable, dict) and variable.get("type") is None and "value" not in variable:
            issues.append(f'Variable "{key}" should have "type" or "value" property')
    return issues


def _flatten(prefix: str, node: dict[str, Any], flat: dict[str, Any]) -> None:
    for key, value in node.items():
        path = f"{prefix}.{key}"
        variable = to_variable(value)
        if variable is None:
            _flatten(path, value, flat)
        else:
            flat[path] = variable.value


def flatten_variables(schemas: dict[str, SchemaDocument]) -> dict[str, Any]:
    """Every leaf variable keyed by its full dotted path, e.g. `colors.primary`."""
    flat: dict[str, Any] = {}
    for name, schema in schemas.items():
        _flatten(name, schema.variables, flat)
    return flat


def referenced_schemas(paths: list[str], schemas: dict[str, SchemaDocument]) -> list[str]:
    """Names of loaded schemas that the given paths point into, in order."""
    names = (path.split(".", 1)[0] for path in paths)
    return [name for name in dict.fromkeys(names) if name in schemas]
