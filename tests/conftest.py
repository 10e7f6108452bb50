"""Shared fixtures: in-memory documents and a populated workspace on disk."""

import json
from pathlib import Path

import pytest

from create_prompt.schemas import ContextDocument, ContextMetadata, SchemaDocument


def write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


HISTORY_BODY = """# History

- Fix login redirect loop
- Update footer links
- Bump dependencies"""


@pytest.fixture
def make_doc():
    """Factory for context documents."""
    def factory(name: str, body: str = "", doc_type: str | None = None) -> ContextDocument:
        return ContextDocument(name=name, body=body, metadata=ContextMetadata(type=doc_type))
    return factory


@pytest.fixture
def colors_schema() -> SchemaDocument:
    data = {
        "name": "colors",
        "variables": {
            "primary": {"value": "#3B82F6", "type": "color"},
            "secondary": "#6B7280",
            "brand": {"main": "#111111"},
        },
        "palette": {"dark": "#000000"},
    }
    return SchemaDocument(name="colors", variables=data["variables"], raw=data)


@pytest.fixture
def schemas(colors_schema) -> dict[str, SchemaDocument]:
    return {"colors": colors_schema}


@pytest.fixture
def workspace(tmp_path) -> Path:
    """A workspace with one template, three essential notes, history and a color schema."""
    root = tmp_path / ".create-prompt"

    write(root / "prompts" / "base.json", json.dumps({
        "name": "base",
        "sections": {
            "palette": {"template": "## Palette\n\nPrimary: {{schema.colors.primary}}", "priority": 4.5},
        },
    }))

    write(root / "context" / "persona.md", "---\ntype: persona\npriority: high\n---\n# Persona\n\nSenior engineer.\n")
    write(root / "context" / "standards.md", "# Standards\n\nUse type hints.\n")
    write(root / "context" / "project.md", "# Project\n\nA small web shop.\n")
    write(root / "context" / "history.md", HISTORY_BODY + "\n")

    write(root / "schemas" / "colors.yaml", 'name: colors\nvariables:\n  primary:\n    value: "#3B82F6"\n')
    return root
