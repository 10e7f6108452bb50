"""
Intent parser - turns a casual request into a structured Intent record.

Parsing is pure table lookup: an action verb table, a component keyword table
grouped by category, a context hint table, and two small regex scans for
schema references.
"""
import logging
import re
from dataclasses import dataclass

from create_prompt.schemas import Action, IntentInfo, Requirement
from create_prompt.services.keywords import extract_keywords

logger = logging.getLogger(__name__)


# =============================================================================
# Lookup tables
# =============================================================================

# Scanned in this order; the first action whose list contains any word wins
ACTION_KEYWORDS: dict[Action, tuple[str, ...]] = {
    Action.CREATE: ("create", "make", "build", "add", "generate", "new", "implement"),
    Action.UPDATE: ("update", "modify", "change", "edit", "alter", "revise"),
    Action.DELETE: ("delete", "remove", "drop", "clear", "destroy"),
    Action.FIX: ("fix", "repair", "solve", "debug", "resolve", "patch"),
    Action.REFACTOR: ("refactor", "improve", "optimize", "clean", "restructure"),
    Action.DOCUMENT: ("document", "describe", "explain", "annotate"),
    Action.TEST: ("test", "verify", "validate", "check"),
}

DEFAULT_ACTION = Action.CREATE

COMPONENT_KEYWORDS: dict[str, tuple[str, ...]] = {
    "ui": ("button", "form", "input", "modal", "dialog", "card", "list", "table",
           "menu", "navbar", "sidebar", "header", "footer", "layout", "page",
           "component", "widget", "dropdown", "select", "checkbox", "radio"),
    "api": ("api", "endpoint", "route", "controller", "request", "response",
            "rest", "graphql", "webhook", "service"),
    "data": ("database", "schema", "model", "migration", "query", "table",
             "collection", "index", "relation"),
    "auth": ("auth", "authentication", "authorization", "login", "logout",
             "signup", "register", "password", "session", "token", "jwt", "oauth"),
    "workflow": ("workflow", "process", "flow", "pipeline", "automation",
                 "integration", "sync", "job", "task", "cron"),
}

CONTEXT_KEYWORDS: dict[str, tuple[str, ...]] = {
    "project": ("project", "overview", "about"),
    "architecture": ("architecture", "system", "design", "structure"),
    "conventions": ("convention", "standard", "style", "pattern"),
    "api": ("api", "endpoint", "rest", "graphql"),
    "auth": ("auth", "authentication", "security"),
}

TEMPLATE_MAPPING: dict[str, str] = {
    "ui": "ui",
    "api": "api",
    "data": "api",
    "auth": "workflow",
    "workflow": "workflow",
}

BASE_TEMPLATE = "base"

_DOTTED_REFERENCE = re.compile(r"(?:schema\.)?(\w+\.\w+(?:\.\w+)?)", re.IGNORECASE)
_NAMED_REFERENCES = tuple(
    re.compile(rf"(\w+)\s+{noun}", re.IGNORECASE) for noun in ("palette", "color", "theme", "style")
)
_REFERENCE_DETERMINERS = frozenset({"the", "a", "my", "our", "with"})

# Punctuation trimmed from both ends of a whitespace token
_TOKEN_PUNCTUATION = "\"'`.,;:!?()[]{}<>"


# =============================================================================
# Intent record
# =============================================================================

@dataclass(frozen=True)
class Intent:
    """Structured interpretation of one free-text request."""
    raw: str
    action: Action = DEFAULT_ACTION
    components: tuple[str, ...] = ()
    types: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()
    schema_references: tuple[str, ...] = ()
    context_hints: tuple[str, ...] = ()
    requirements: tuple[Requirement, ...] = ()
    suggested_templates: tuple[str, ...] = (BASE_TEMPLATE,)
    confidence: float = 0.3

    @property
    def is_default_action(self) -> bool:
        return self.action == DEFAULT_ACTION


# =============================================================================
# Parsing steps
# =============================================================================

def split_words(text: str) -> list[str]:
    """Lower-case, split on whitespace and trim surrounding punctuation."""
    words = (w.strip(_TOKEN_PUNCTUATION) for w in text.lower().split())
    return [w for w in words if w]


def detect_action(words: list[str]) -> Action:
    for action, verbs in ACTION_KEYWORDS.items():
        for word in words:
            if word in verbs:
                return action
    return DEFAULT_ACTION


def extract_components(words: list[str]) -> tuple[list[str], list[str]]:
    """
    Match words against the component table.

    Components are ordered by category (table order) and then by position in
    the request; a word is listed once even when several categories claim it,
    but every claiming category is recorded in the types.

    Returns:
        (components, types)
    """
    components: list[str] = []
    types: list[str] = []
    taken: set[int] = set()

    for category, category_words in COMPONENT_KEYWORDS.items():
        for index, word in enumerate(words):
            if word not in category_words:
                continue
            if category not in types:
                types.append(category)
            if index not in taken:
                taken.add(index)
                components.append(word)

    return components, types


def extract_schema_references(text: str) -> list[str]:
    """
    Guess dotted schema paths from phrasing.

    Picks up explicit paths (`colors.primary`, `schema.colors.primary`) and
    `<word> palette|color|theme|style` phrases, mapped to `colors.<word>`.
    """
    refs = [m.group(1) for m in _DOTTED_REFERENCE.finditer(text)]

    for pattern in _NAMED_REFERENCES:
        for match in pattern.finditer(text):
            word = match.group(1).lower()
            if word not in _REFERENCE_DETERMINERS:
                refs.append(f"colors.{word}")

    return list(dict.fromkeys(refs))


def extract_context_hints(words: list[str]) -> list[str]:
    hints: list[str] = []
    for word in words:
        for context, context_words in CONTEXT_KEYWORDS.items():
            if word in context_words and context not in hints:
                hints.append(context)
    return hints


def build_requirements(
    action: Action,
    components: list[str],
    types: list[str],
    raw: str,
) -> list[Requirement]:
    """One requirement per component, or a single generic one carrying the raw text."""
    if not components:
        return [Requirement(type="general", action=action, description=raw)]

    requirements = []
    for component in components:
        component_type = next(
            (t for t in types if component in COMPONENT_KEYWORDS.get(t, ())),
            "general",
        )
        requirements.append(Requirement(
            type=component_type,
            action=action,
            component=component,
            description=f"{action.value} {component}",
        ))
    return requirements


def suggest_templates(types: list[str]) -> list[str]:
    templates = [BASE_TEMPLATE]
    for type_name in types:
        template = TEMPLATE_MAPPING.get(type_name)
        if template and template not in templates:
            templates.append(template)
    return templates


def calculate_confidence(action: Action, components: list[str], types: list[str]) -> float:
    score = 0.3
    if action != DEFAULT_ACTION:
        score += 0.2
    if components:
        score += 0.3
    if types:
        score += 0.2
    return min(round(score, 2), 1.0)


def parse_intent(raw: str) -> Intent:
    """
    Parse a free-text request into an Intent.

    Every step works on the same lower-cased word list, so the result depends
    only on the input string.
    """
    raw = raw or ""
    words = split_words(raw)

    action = detect_action(words)
    components, types = extract_components(words)

    intent = Intent(
        raw=raw,
        action=action,
        components=tuple(components),
        types=tuple(types),
        keywords=tuple(extract_keywords(raw)),
        schema_references=tuple(extract_schema_references(raw)),
        context_hints=tuple(extract_context_hints(words)),
        requirements=tuple(build_requirements(action, components, types, raw)),
        suggested_templates=tuple(suggest_templates(types)),
        confidence=calculate_confidence(action, components, types),
    )

    logger.debug(f"Parsed intent: {intent_summary(intent)}")
    return intent


# =============================================================================
# Helpers
# =============================================================================

def match_template(intent: Intent, available: list[str]) -> str | None:
    """First type-specific suggestion that exists, else base, else the first available one."""
    for name in intent.suggested_templates:
        if name != BASE_TEMPLATE and name in available:
            return name
    if BASE_TEMPLATE in available:
        return BASE_TEMPLATE
    return available[0] if available else None


def intent_summary(intent: Intent) -> str:
    parts = [f"Action: {intent.action.value}"]

    if intent.components:
        parts.append(f"Components: {', '.join(intent.components)}")
    if intent.types:
        parts.append(f"Types: {', '.join(intent.types)}")
    if intent.schema_references:
        parts.append(f"Schema refs: {', '.join(intent.schema_references)}")

    parts.append(f"Confidence: {round(intent.confidence * 100)}%")
    return " | ".join(parts)


def to_intent_info(intent: Intent) -> IntentInfo:
    return IntentInfo(
        action=intent.action.value,
        components=list(intent.components),
        types=list(intent.types),
        confidence=intent.confidence,
        summary=intent_summary(intent),
    )
