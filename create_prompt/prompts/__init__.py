"""
Static prompt text.

- sections: fixed text of the built-in prompt sections
- defaults: templates, context notes and schemas written by `init`
"""

from create_prompt.prompts.sections import (
    CONSTRAINTS_BY_TYPE,
    DEFAULT_CONSTRAINTS,
    OUTPUT_EXPECTATIONS,
    CURSOR_OUTPUT_NOTE,
    CONTENT_TRUNCATED_NOTE,
)

from create_prompt.prompts.defaults import (
    BASE_TEMPLATE,
    DEFAULT_TEMPLATES,
    DEFAULT_CONTEXT,
    DEFAULT_SCHEMAS,
    DEFAULT_CONFIG,
)

__all__ = [
    # Built-in sections
    "CONSTRAINTS_BY_TYPE",
    "DEFAULT_CONSTRAINTS",
    "OUTPUT_EXPECTATIONS",
    "CURSOR_OUTPUT_NOTE",
    "CONTENT_TRUNCATED_NOTE",
    # Workspace defaults
    "BASE_TEMPLATE",
    "DEFAULT_TEMPLATES",
    "DEFAULT_CONTEXT",
    "DEFAULT_SCHEMAS",
    "DEFAULT_CONFIG",
]
