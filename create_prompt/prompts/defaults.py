"""
Default workspace content written by `create-prompt init`.

The base template doubles as the built-in fallback when a workspace has no
templates of its own.
"""

BASE_TEMPLATE = {
    "name": "base",
    "description": "General purpose implementation prompt",
    "variables": {
        "detail": {
            "default": "short",
            "enum": ["short", "detailed"],
            "description": "How much explanation to ask for alongside the code",
        },
    },
    "sections": {
        "approach": {
            "template": "## Approach\n\nStart with a {{detail}} summary of the planned changes, then give the code.",
            "priority": 4.5,
        },
        "notes": {
            "template": "## Notes\n\n{{notes}}",
            "priority": 6,
            "conditional": True,
        },
    },
}

UI_TEMPLATE = {
    "name": "ui",
    "extends": "base",
    "description": "User interface components",
    "sections": {
        "design": {
            "template": (
                "## Visual Style\n\n"
                "Match the existing look and feel. Use {{schema.colors.primary}} as the primary color."
            ),
            "priority": 2.6,
        },
    },
}

API_TEMPLATE = {
    "name": "api",
    "extends": "base",
    "description": "Endpoints, services and data access",
    "sections": {
        "contract": {
            "template": "## Contract\n\nDescribe request and response shapes before implementing the handler.",
            "priority": 3.2,
        },
    },
}

WORKFLOW_TEMPLATE = {
    "name": "workflow",
    "extends": "base",
    "description": "Multi-step flows, jobs and authentication",
    "sections": {
        "steps": {
            "template": "## Steps\n\nBreak the work into numbered steps and note the failure handling of each.",
            "priority": 3.2,
        },
    },
}

DEFAULT_TEMPLATES = (BASE_TEMPLATE, UI_TEMPLATE, API_TEMPLATE, WORKFLOW_TEMPLATE)

DEFAULT_CONTEXT: dict[str, str] = {
    "persona.md": """---
type: persona
priority: high
tags: [role, tone]
---
# Persona

[Describe the role the assistant should take, e.g. senior engineer on this codebase]
""",
    "standards.md": """---
type: standards
priority: high
tags: [style, conventions]
---
# Coding Standards

[Describe naming, formatting and testing conventions]
""",
    "project.md": """---
type: project
priority: high
tags: [overview]
---
# Project

[Describe what the project does, its stack and its main modules]
""",
}

DEFAULT_SCHEMAS: dict[str, str] = {
    "colors.yaml": """name: colors
description: Brand color palette
variables:
  primary:
    value: "#3B82F6"
    type: color
    description: Main brand color
  secondary:
    value: "#6B7280"
    type: color
  accent:
    value: "#F59E0B"
    type: color
""",
}

DEFAULT_CONFIG = {
    "version": "1.0",
    "defaults": {
        "template": "base",
        "target": "claude",
        "format": "markdown",
    },
    "min_relevance": 0.3,
    "essential_context": ["persona", "standards", "project"],
    "include_latest_commit": "auto",
    "include_history": "auto",
    "max_history_items": 5,
}
