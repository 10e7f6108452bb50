"""
Fixed text of the built-in prompt sections.

Constraint lists are keyed by intent type; the output block is the same for
every target apart from a one-line note for Cursor.
"""

CONSTRAINTS_BY_TYPE: dict[str, tuple[str, ...]] = {
    "ui": (
        "Must be accessible (WCAG 2.1 AA)",
        "Must be responsive",
        "Follow existing component patterns",
    ),
    "api": (
        "Follow REST conventions",
        "Include proper error handling",
        "Validate all inputs",
    ),
    "auth": (
        "Follow security best practices",
        "Never store plain-text passwords",
        "Use secure session management",
    ),
}

DEFAULT_CONSTRAINTS = (
    "Follow existing codebase patterns",
    "Include error handling",
    "Write clean, maintainable code",
)

OUTPUT_EXPECTATIONS = """## Expected Output

Provide a complete, production-ready implementation with:
1. Full source code
2. Proper types/interfaces (if applicable)
3. Error handling
4. Brief inline comments for complex logic"""

CURSOR_OUTPUT_NOTE = "Note: This will be used in Cursor IDE, so consider file context."

CONTENT_TRUNCATED_NOTE = "[Content truncated...]"
