"""
Requirements database - sub-typed checklists injected per task type.
"""

GENERAL = "general"
MAX_REQUIREMENTS = 10

REQUIREMENTS_DB: dict[str, dict[str, tuple[str, ...]]] = {
    "seo": {
        "openGraph": (
            "og:title - Page title (max 60 chars)",
            "og:description - Summary (max 155 chars)",
            "og:image - Preview image (1200x630px recommended)",
            "og:url - Canonical URL",
            "og:type - Content type (website, article, product, etc.)",
            "og:site_name - Website name",
            "og:locale - Language/region (e.g., en_US)",
        ),
        "twitterCard": (
            "twitter:card - Card type (summary, summary_large_image)",
            "twitter:site - @username of website",
            "twitter:creator - @username of content creator",
            "twitter:title - Title for card",
            "twitter:description - Description for card",
            "twitter:image - Image URL for card",
        ),
        "general": (
            "title tag - Unique, descriptive (50-60 chars)",
            "meta description - Compelling summary (150-160 chars)",
            "canonical URL - Prevent duplicate content",
            "robots meta - Control indexing behavior",
            "structured data - Schema.org markup",
        ),
    },
    "api": {
        "rest": (
            "Use appropriate HTTP methods (GET, POST, PUT, PATCH, DELETE)",
            "Return proper status codes (200, 201, 400, 401, 403, 404, 500)",
            "Include consistent error response format",
            "Add request body validation",
            "Implement proper error handling",
            "Document endpoints with OpenAPI/Swagger",
        ),
        "security": (
            "Implement authentication (JWT, OAuth, etc.)",
            "Add rate limiting",
            "Validate and sanitize all inputs",
            "Use HTTPS in production",
            "Implement CORS properly",
        ),
        "performance": (
            "Add pagination for list endpoints",
            "Implement caching headers",
            "Use gzip compression",
            "Consider response field filtering",
        ),
    },
    "auth": {
        "password": (
            "Hash passwords with bcrypt or Argon2",
            "Enforce minimum password requirements",
            "Implement account lockout after failed attempts",
            "Use secure password reset flow",
        ),
        "session": (
            "Use secure, HTTP-only cookies",
            "Implement session timeout",
            "Regenerate session ID on login",
            "Invalidate sessions on logout",
        ),
        "jwt": (
            "Use strong secret key",
            "Set appropriate token expiration",
            "Implement refresh token rotation",
            "Store tokens securely (HTTP-only cookies)",
        ),
        "general": (
            "Implement CSRF protection",
            "Log authentication events",
            "Handle authentication errors gracefully",
            "Consider multi-factor authentication",
        ),
    },
    "ui": {
        "accessibility": (
            "Add ARIA labels where needed",
            "Ensure keyboard navigation",
            "Maintain sufficient color contrast",
            "Provide alt text for images",
            "Use semantic HTML elements",
        ),
        "responsive": (
            "Use mobile-first approach",
            "Test on multiple screen sizes",
            "Use relative units (rem, em, %)",
            "Consider touch targets for mobile",
        ),
        "general": (
            "Follow component design patterns",
            "Use consistent styling",
            "Handle loading and error states",
            "Implement proper form validation feedback",
        ),
    },
    "database": {
        "security": (
            "Use parameterized queries (prevent SQL injection)",
            "Encrypt sensitive data at rest",
            "Implement proper access controls",
            "Avoid storing sensitive data unnecessarily",
        ),
        "performance": (
            "Add indexes for frequently queried columns",
            "Use connection pooling",
            "Implement query caching where appropriate",
            "Consider pagination for large result sets",
        ),
        "reliability": (
            "Use database transactions for multi-step operations",
            "Implement proper error handling",
            "Add database migrations for schema changes",
            "Set up regular backups",
        ),
    },
    "testing": {
        "unit": (
            "Test individual functions in isolation",
            "Mock external dependencies",
            "Cover edge cases and error conditions",
            "Aim for meaningful coverage, not 100%",
        ),
        "integration": (
            "Test component interactions",
            "Use realistic test data",
            "Clean up test state after each test",
            "Test error handling paths",
        ),
        "e2e": (
            "Test critical user flows",
            "Use stable selectors (data-testid)",
            "Handle async operations properly",
            "Run in CI/CD pipeline",
        ),
    },
    "performance": {
        "frontend": (
            "Minimize bundle size",
            "Implement code splitting",
            "Use lazy loading for images",
            "Optimize critical rendering path",
            "Cache static assets",
        ),
        "backend": (
            "Profile before optimizing",
            "Implement caching strategies",
            "Optimize database queries",
            "Use async operations where appropriate",
            "Consider horizontal scaling",
        ),
    },
    "deploy": {
        "general": (
            "Use environment variables for configuration",
            "Implement health check endpoints",
            "Set up proper logging",
            "Configure error monitoring",
            "Test rollback procedures",
        ),
        "docker": (
            "Use multi-stage builds",
            "Minimize image size",
            "Run as non-root user",
            "Set resource limits",
            "Use specific version tags",
        ),
        "ci": (
            "Run tests before deployment",
            "Use staging environment",
            "Implement gradual rollouts",
            "Automate deployment process",
        ),
    },
}

SUB_TYPE_PATTERNS: dict[str, dict[str, tuple[str, ...]]] = {
    "seo": {
        "openGraph": ("open graph", "og:", "opengraph", "og tag"),
        "twitterCard": ("twitter card", "twitter:", "tweet card"),
        "general": ("meta", "seo", "search engine"),
    },
    "api": {
        "rest": ("rest", "api", "endpoint", "route"),
        "security": ("auth", "secure", "token", "jwt"),
        "performance": ("cache", "performance", "fast"),
    },
    "auth": {
        "password": ("password", "hash", "bcrypt"),
        "session": ("session", "cookie"),
        "jwt": ("jwt", "token", "bearer"),
    },
    "testing": {
        "unit": ("unit test", "unit"),
        "integration": ("integration", "component test"),
        "e2e": ("e2e", "end to end", "cypress", "playwright"),
    },
}


def detect_sub_types(text: str, task_type: str) -> list[str]:
    """Sub-types of a task type whose patterns occur in the text, in table order."""
    patterns = SUB_TYPE_PATTERNS.get(task_type)
    if not patterns:
        return []

    normalized = text.lower()
    return [
        sub_type for sub_type, keywords in patterns.items()
        if any(keyword in normalized for keyword in keywords)
    ]


def get_requirements(task_type: str, sub_types: list[str] | None = None) -> list[str]:
    """
    Checklist for a task type.

    Without sub-types this is the `general` list, or the first five items
    across all lists when there is none. With sub-types it is the union of
    their lists followed by `general`, duplicates removed.
    """
    lists = REQUIREMENTS_DB.get(task_type)
    if not lists:
        return []

    if not sub_types:
        if GENERAL in lists:
            return list(lists[GENERAL])
        return [item for items in lists.values() for item in items][:5]

    collected: list[str] = []
    for sub_type in sub_types:
        collected.extend(lists.get(sub_type, ()))
    if GENERAL in lists and GENERAL not in sub_types:
        collected.extend(lists[GENERAL])

    return list(dict.fromkeys(collected))


def format_requirements_section(
    requirements: list[str],
    title: str = "Task Requirements",
    max_items: int = MAX_REQUIREMENTS,
    checkboxes: bool = False,
) -> str:
    """Markdown section with a capped bullet list; empty string when there is nothing to list."""
    if not requirements:
        return ""

    prefix = "- [ ] " if checkboxes else "- "
    lines = [prefix + item for item in requirements[:max_items]]

    if len(requirements) > max_items:
        lines.append("")
        lines.append(f"_... and {len(requirements) - max_items} more requirements_")

    return f"## {title}\n\n" + "\n".join(lines)


def requirement_categories() -> dict[str, list[str]]:
    return {task_type: list(lists) for task_type, lists in REQUIREMENTS_DB.items()}
