"""Test cases for prompt assembly."""

import json

from create_prompt.prompts import CONTENT_TRUNCATED_NOTE, CURSOR_OUTPUT_NOTE
from create_prompt.schemas import FileSuggestions, OutputFormat, PromptTemplate, SchemaDocument
from create_prompt.services.assembler import (
    assemble,
    build_title,
    check_token_limits,
    estimate_tokens,
    optimize_for_target,
    relevel_headings,
)
from create_prompt.services.intent import parse_intent
from create_prompt.services.task_types import classify

SIGNUP = "create a signup button with primary color"


def build(text, context=(), schemas=None, **kwargs):
    intent = parse_intent(text)
    return assemble(intent, classify(intent), list(context), schemas or {}, **kwargs)


def position(content: str, heading: str) -> int:
    index = content.find(heading)
    assert index >= 0, heading
    return index


class TestHeadings:
    """Test cases for heading re-leveling."""

    def test_relevel_headings(self):
        assert relevel_headings("# A\n## B\n#hashtag") == "## A\n### B\n#hashtag"

    def test_context_bodies_one_level_deeper(self, make_doc):
        """Every included body is pushed down exactly one level."""
        context = [make_doc("first", "# A\n## B"), make_doc("second", "# A\n## B")]
        content = build(SIGNUP, context).content
        assert content.count("## A\n### B") == 2
        assert "### First" in content
        assert "### Second" in content

    def test_cursor_demotes_sub_headings(self):
        assert optimize_for_target("# T\n## A\n### B", "cursor") == "# T\n### A\n#### B"
        assert optimize_for_target("# T\n## A", "claude") == "# T\n## A"


class TestSignupScenario:
    """Test cases for the signup button request."""

    def test_title_task_and_design(self, make_doc, schemas):
        prompt = build(SIGNUP, [make_doc("persona", "Senior engineer")], schemas)
        content = prompt.content

        assert content.startswith("# Create button")
        assert content.endswith("## Task\n\n" + SIGNUP)
        assert "- colors.primary: #3B82F6" in content
        assert not any("colors.primary" in w for w in prompt.warnings)

    def test_section_order(self, make_doc, schemas):
        content = build(SIGNUP, [make_doc("persona", "Senior engineer")], schemas).content
        headings = [
            "## Context", "## Design Specifications", "## Authentication Requirements",
            "## Constraints", "## Expected Output", "## Task",
        ]
        positions = [position(content, h) for h in headings]
        assert positions == sorted(positions)

    def test_metadata(self, make_doc, schemas):
        prompt = build(SIGNUP, [make_doc("persona", "Senior engineer")], schemas)
        metadata = prompt.metadata
        assert metadata.task_type == "auth"
        assert metadata.context_used == ["persona"]
        assert metadata.schemas_used == ["colors"]
        assert metadata.estimated_tokens == estimate_tokens(prompt.content)
        assert metadata.generated_at is not None
        assert metadata.intent.components == ["button", "signup"]

    def test_deterministic(self, make_doc, schemas):
        context = [make_doc("persona", "Senior engineer")]
        assert build(SIGNUP, context, schemas).content == build(SIGNUP, context, schemas).content


class TestDesignSection:
    """Test cases for the design specifications section."""

    def test_colors_listed_without_reference(self, schemas):
        """A loaded palette is listed even when the request names no color."""
        prompt = build("create a modal", schemas=schemas)
        assert "## Design Specifications\n\n### Colors\n\n- Primary: #3B82F6\n- Secondary: #6B7280" in prompt.content
        assert "Brand" not in prompt.content
        assert prompt.metadata.schemas_used == ["colors"]

    def test_scalar_specs_listed(self):
        specs = SchemaDocument(
            name="specs",
            variables={
                "radius": "8px",
                "spacing": {"value": "4px", "type": "size"},
                "breakpoints": {"sm": "640px"},
                "fonts": ["Inter"],
            },
        )
        content = build("create a modal", schemas={"specs": specs}).content
        assert "### UI Specifications\n\n- Radius: 8px\n- Spacing: 4px" in content
        assert "Breakpoints" not in content
        assert "Fonts" not in content

    def test_listing_before_references(self, schemas):
        content = build(SIGNUP, schemas=schemas).content
        assert position(content, "- Secondary: #6B7280") < position(content, "- colors.primary: #3B82F6")

    def test_override_applies_to_listing(self, schemas):
        prompt = build("create a modal", schemas=schemas, schema_overrides={"colors.secondary": "#222222"})
        assert "- Secondary: #222222" in prompt.content

    def test_no_schemas_no_section(self):
        assert "Design Specifications" not in build("create a modal").content


class TestRequirementsSection:
    """Test cases for injected requirements."""

    def test_bugfix_checklist(self):
        content = build("fix the login bug").content
        assert "## Bug Fix Requirements" in content
        assert "- Identify root cause before fixing" in content

    def test_sub_type_requirements_appended(self):
        content = build("add jwt login").content
        assert "- Implement secure password handling" in content
        assert "- Use strong secret key" in content

    def test_general_uses_intent_requirements(self):
        assert "## Requirements\n\n- Create widget" in build("create a widget").content

    def test_empty_intent_has_no_requirements(self):
        prompt = build("")
        assert "Requirements" not in prompt.content
        assert prompt.content.startswith("# Create implementation")

    def test_injection_disabled(self):
        assert "Requirements" not in build("fix the login bug", inject_requirements=False).content


class TestTemplates:
    """Test cases for template sections inside the prompt."""

    def test_template_section_by_priority(self, make_doc):
        template = PromptTemplate(name="t", sections={"intro": {"content": "## Intro\n\nHello", "priority": 1.5}})
        content = build(SIGNUP, [make_doc("persona", "x")], template=template).content
        assert position(content, "# Create") < position(content, "## Intro") < position(content, "## Context")

    def test_builtin_first_on_equal_priority(self, make_doc):
        template = PromptTemplate(name="t", sections={"extra": {"content": "## Extra", "priority": 2}})
        content = build(SIGNUP, [make_doc("persona", "x")], template=template).content
        assert position(content, "## Context") < position(content, "## Extra")

    def test_disabled_builtins(self):
        template = PromptTemplate(name="t", sections={"constraints": False, "output": False})
        content = build(SIGNUP, template=template).content
        assert "## Constraints" not in content
        assert "## Expected Output" not in content

    def test_template_values(self):
        template = PromptTemplate(name="t", sections={"hi": "Hello {{who}}"})
        content = build(SIGNUP, template=template, template_values={"who": "Ann"}).content
        assert "Hello Ann" in content

    def test_unresolved_schema_variable(self, schemas):
        template = PromptTemplate(name="t", sections={"s": "Use {{schema.colors.missing}}"})
        prompt = build(SIGNUP, schemas=schemas, template=template)
        assert "Use {{schema.colors.missing}}" in prompt.content
        assert "Unresolved schema variable: colors.missing" in prompt.warnings

    def test_schema_override(self, schemas):
        prompt = build(SIGNUP, schemas=schemas, schema_overrides={"colors.primary": "#000000"})
        assert "- colors.primary: #000000" in prompt.content


class TestTargetsAndFormats:
    """Test cases for targets and output formats."""

    def test_unknown_target(self):
        prompt = build(SIGNUP, target="llama")
        assert prompt.metadata.target == "generic"
        assert "Unknown target 'llama', using generic" in prompt.warnings

    def test_cursor(self, make_doc):
        content = build(SIGNUP, [make_doc("persona", "x")], target="cursor").content
        assert content.startswith("# Create button")
        assert "### Context" in content
        assert "#### Persona" in content
        assert "\n## " not in content
        assert CURSOR_OUTPUT_NOTE in content

    def test_json(self):
        prompt = build(SIGNUP, output_format=OutputFormat.JSON)
        data = json.loads(prompt.content)
        assert data["prompt"].startswith("# Create button")

    def test_plain(self):
        prompt = build(SIGNUP, file_suggestions=FileSuggestions(), output_format=OutputFormat.PLAIN)
        assert "Relevant directories:" in prompt.content
        assert "**" not in prompt.content
        assert "`" not in prompt.content
        assert not any(line.startswith("#") for line in prompt.content.split("\n"))

    def test_context_truncated(self, make_doc):
        content = build(SIGNUP, [make_doc("notes", "x" * 50)], max_context_chars=10).content
        assert CONTENT_TRUNCATED_NOTE in content
        assert "x" * 11 not in content


class TestTokens:
    """Test cases for token estimates and limits."""

    def test_estimate_tokens(self):
        assert estimate_tokens("") == 0
        assert estimate_tokens("abcde") == 2

    def test_check_token_limits(self):
        assert check_token_limits("x" * 399_996, "antigravity") == (True, 99_999, 100_000)
        fits, tokens, limit = check_token_limits("x" * 400_004, "antigravity")
        assert not fits
        assert tokens == 100_001
        assert limit == 100_000
        assert check_token_limits("x" * 400_004, "generic")[0]

    def test_over_limit_warning(self, make_doc):
        context = [make_doc("big", "word " * 100_001)]
        prompt = build(SIGNUP, context, target="antigravity", max_context_chars=10**7)
        assert any("token limit" in w for w in prompt.warnings)

    def test_title_without_components(self):
        assert build_title(parse_intent("")) == "# Create implementation"
