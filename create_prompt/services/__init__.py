"""
Pipeline components.

- keywords, relevance: text scoring
- intent, task_types, requirements: understanding the request
- loader, history, context_selector: picking workspace documents
- schema_resolver, templates, assembler: building the prompt
- file_suggestions, tree: looking at the project on disk
- pipeline: the end-to-end entry point
"""

from create_prompt.services.pipeline import generate_prompt, init_workspace

__all__ = ["generate_prompt", "init_workspace"]
