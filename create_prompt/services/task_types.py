"""
Task type classifier - matches intent text against a fixed catalog of task categories.

Each category carries its pattern strings, candidate directories/files, a
requirement checklist, the context documents it excludes and its context
priority order.
"""
import logging

from create_prompt.schemas import Action, TaskTypeConfig, TaskTypeMatch
from create_prompt.services.intent import Intent, detect_action, split_words

logger = logging.getLogger(__name__)

GENERAL = "general"

# Patterns longer than this definitively identify a category
STRONG_PATTERN_LENGTH = 4
STRONG_BASE_SCORE = 0.7
MULTI_MATCH_BONUS = 0.2
DEFAULT_THRESHOLD = 0.5

# Iteration order matters: the first category reaching the best score wins ties
TASK_TYPES: dict[str, TaskTypeConfig] = {
    "seo": TaskTypeConfig(
        name="SEO & Meta",
        patterns=("seo", "meta", "og:", "open graph", "opengraph", "twitter card", "sitemap",
                  "robots", "canonical", "metadata", "structured data", "schema.org"),
        relevant_dirs=("app/", "pages/", "components/seo", "lib/meta", "src/pages", "views/",
                       "layouts/", "templates/"),
        relevant_files=("layout", "metadata", "seo", "head", "_document", "_app", "base", "master"),
        requirements=(
            "Include all required Open Graph meta tags",
            "Add Twitter Card meta tags",
            "Ensure canonical URL is set correctly",
            "Validate meta tag content lengths",
        ),
        exclude_context=("latest_commit", "history"),
        priority=("project", "standards", "persona"),
    ),
    "api": TaskTypeConfig(
        name="API Development",
        patterns=("api", "endpoint", "route", "rest", "graphql", "backend", "controller",
                  "handler", "middleware", "request", "response"),
        relevant_dirs=("api/", "routes/", "controllers/", "services/", "handlers/", "middleware/",
                       "src/api", "app/Http"),
        relevant_files=("route", "handler", "controller", "middleware", "service", "api"),
        requirements=(
            "Use appropriate HTTP methods (GET, POST, PUT, DELETE)",
            "Return proper status codes",
            "Include error response format",
            "Add request validation",
            "Document API endpoints",
        ),
        priority=("project", "standards", "api", "persona"),
    ),
    "auth": TaskTypeConfig(
        name="Authentication",
        patterns=("auth", "authentication", "authorization", "login", "logout", "signup",
                  "register", "password", "session", "token", "jwt", "oauth", "sso", "credential"),
        relevant_dirs=("auth/", "authentication/", "middleware/", "guards/", "policies/",
                       "app/Auth", "lib/auth"),
        relevant_files=("auth", "login", "session", "token", "middleware", "guard", "policy", "user"),
        requirements=(
            "Implement secure password handling",
            "Use proper session management",
            "Add CSRF protection",
            "Validate credentials securely",
            "Handle authentication errors gracefully",
        ),
        priority=("project", "standards", "auth", "security", "persona"),
    ),
    "ui": TaskTypeConfig(
        name="UI Components",
        patterns=("component", "button", "modal", "form", "layout", "style", "css", "design",
                  "interface", "view", "template", "frontend", "responsive", "animation",
                  "dark mode", "light mode", "theme"),
        relevant_dirs=("components/", "ui/", "views/", "styles/", "css/", "layouts/",
                       "src/components", "app/components"),
        relevant_files=("component", "button", "modal", "form", "layout", "style", "css", "view"),
        requirements=(
            "Follow component design patterns",
            "Ensure accessibility (a11y)",
            "Implement responsive design",
            "Use consistent styling",
        ),
        priority=("project", "standards", "design", "persona"),
    ),
    "database": TaskTypeConfig(
        name="Database",
        patterns=("database", "query", "migration", "model", "schema", "prisma", "mongoose",
                  "sequelize", "sql", "mongodb", "postgres", "mysql", "table", "collection",
                  "index", "relation"),
        relevant_dirs=("models/", "migrations/", "database/", "db/", "prisma/", "schemas/", "entities/"),
        relevant_files=("model", "migration", "schema", "entity", "repository", "query"),
        requirements=(
            "Use parameterized queries to prevent SQL injection",
            "Add proper indexes for performance",
            "Implement database transactions where needed",
            "Handle database errors gracefully",
        ),
        priority=("project", "standards", "database", "persona"),
    ),
    "testing": TaskTypeConfig(
        name="Testing",
        patterns=("test", "spec", "jest", "mocha", "vitest", "cypress", "playwright", "unit test",
                  "integration", "e2e", "coverage", "mock", "stub", "fixture", "write test", "add test"),
        relevant_dirs=("tests/", "test/", "__tests__/", "spec/", "cypress/", "e2e/"),
        relevant_files=("test", "spec", "mock", "fixture", "factory", "helper"),
        requirements=(
            "Write meaningful test descriptions",
            "Cover edge cases",
            "Use appropriate test isolation",
            "Mock external dependencies",
        ),
        exclude_context=("history",),
        priority=("project", "standards", "testing", "persona"),
    ),
    "bugfix": TaskTypeConfig(
        name="Bug Fix",
        patterns=("fix", "bug", "issue", "problem", "error", "crash", "broken", "not working",
                  "fails", "debug", "patch", "hotfix"),
        # Bug fixes can be anywhere
        requirements=(
            "Identify root cause before fixing",
            "Add regression tests",
            "Document the fix",
            "Consider edge cases",
        ),
        priority=("project", "standards", "latest_commit", "history", "persona"),
    ),
    "performance": TaskTypeConfig(
        name="Performance",
        patterns=("performance", "optimize", "speed", "slow", "fast", "cache", "lazy", "bundle",
                  "minify", "compress", "memory", "profile", "benchmark"),
        relevant_dirs=("src/", "lib/", "utils/"),
        relevant_files=("cache", "optimize", "performance", "bundle", "config"),
        requirements=(
            "Measure before and after optimization",
            "Use appropriate caching strategies",
            "Avoid premature optimization",
            "Consider trade-offs",
        ),
        priority=("project", "standards", "architecture", "persona"),
    ),
    "refactor": TaskTypeConfig(
        name="Refactoring",
        patterns=("refactor", "clean", "improve", "restructure", "reorganize", "simplify",
                  "deduplicate", "extract", "rename"),
        requirements=(
            "Ensure tests pass before and after",
            "Make incremental changes",
            "Preserve existing behavior",
            "Document significant changes",
        ),
        priority=("project", "standards", "architecture", "persona"),
    ),
    "deploy": TaskTypeConfig(
        name="Deployment",
        patterns=("deploy", "deployment", "ci", "cd", "pipeline", "docker", "kubernetes", "k8s",
                  "vercel", "netlify", "heroku", "aws", "production", "staging"),
        relevant_dirs=(".github/", "deploy/", "docker/", "k8s/", "scripts/", "infra/"),
        relevant_files=("dockerfile", "docker-compose", "workflow", "pipeline", "deploy", "config"),
        requirements=(
            "Validate environment configuration",
            "Test deployment process",
            "Ensure rollback capability",
            "Check security settings",
        ),
        priority=("project", "standards", "deployment", "persona"),
    ),
}

GENERAL_CONFIG = TaskTypeConfig(name="General")

# A defining action verb makes a multi-pattern match strong for its category
ACTION_CATEGORIES: dict[Action, str] = {
    Action.FIX: "bugfix",
}


def calculate_type_score(text: str, patterns: tuple[str, ...], strong: bool = False) -> float:
    """
    Score text against one category's patterns.

    A match on any pattern longer than four characters sets the base score
    to 0.7, as does `strong` (a defining action verb) once more than one
    pattern matched. Otherwise the base is the fraction of patterns matched.
    More than one match adds 0.2.
    """
    if not patterns:
        return 0.0

    matched = [p for p in patterns if p in text]
    if not matched:
        return 0.0

    if (strong and len(matched) > 1) or any(len(p) > STRONG_PATTERN_LENGTH for p in matched):
        base = STRONG_BASE_SCORE
    else:
        base = len(matched) / len(patterns)

    bonus = MULTI_MATCH_BONUS if len(matched) > 1 else 0.0
    return min(base + bonus, 1.0)


def classify(intent: Intent | str, threshold: float = DEFAULT_THRESHOLD) -> TaskTypeMatch:
    """
    Classify an intent into a task category.

    Categories are scanned in catalog order keeping the best score seen so
    far with a strict comparison, so the first category to reach the maximum
    wins ties. A winner below the threshold yields the `general` type.
    """
    raw = intent.raw if isinstance(intent, Intent) else (intent or "")
    text = raw.lower()
    action = intent.action if isinstance(intent, Intent) else detect_action(split_words(text))
    strong_category = ACTION_CATEGORIES.get(action)

    best_type: str | None = None
    best_score = 0.0

    for type_name, config in TASK_TYPES.items():
        score = calculate_type_score(text, config.patterns, strong=type_name == strong_category)
        if score > best_score:
            best_score = score
            best_type = type_name

    if best_type is not None and best_score >= threshold:
        logger.debug(f"Task type: {best_type} (score={best_score:.2f})")
        return TaskTypeMatch(type=best_type, confidence=best_score, config=TASK_TYPES[best_type])

    logger.debug(f"No task type reached {threshold} (best={best_type}, score={best_score:.2f})")
    return TaskTypeMatch(type=GENERAL, confidence=0.0, config=GENERAL_CONFIG)


def get_task_type_info(type_name: str) -> TaskTypeConfig | None:
    return TASK_TYPES.get(type_name)


def get_task_requirements(type_name: str) -> list[str]:
    config = TASK_TYPES.get(type_name)
    return list(config.requirements) if config else []


def get_relevant_paths(type_name: str) -> tuple[list[str], list[str]]:
    """Candidate (directories, files) fragments for a task type."""
    config = TASK_TYPES.get(type_name)
    if config is None:
        return [], []
    return list(config.relevant_dirs), list(config.relevant_files)


def should_include_context(type_name: str, context_name: str) -> bool:
    config = TASK_TYPES.get(type_name)
    if config is None:
        return True
    return context_name not in config.exclude_context


def get_context_priority(type_name: str) -> list[str]:
    config = TASK_TYPES.get(type_name, GENERAL_CONFIG)
    return list(config.priority)
