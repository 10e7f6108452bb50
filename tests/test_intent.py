"""Test cases for intent parsing."""

import pytest

from create_prompt.schemas import Action
from create_prompt.services.intent import (
    detect_action,
    extract_components,
    extract_context_hints,
    extract_schema_references,
    intent_summary,
    match_template,
    parse_intent,
    split_words,
    to_intent_info,
)


class TestParsingSteps:
    """Test cases for the individual parsing steps."""

    def test_split_words(self):
        assert split_words("Create a (login) form!") == ["create", "a", "login", "form"]

    @pytest.mark.parametrize("text,expected", [
        ("please repair the header", Action.FIX),
        ("refactor the api", Action.REFACTOR),
        ("hello there", Action.CREATE),
        ("fix then update", Action.UPDATE),
    ])
    def test_detect_action(self, text, expected):
        """The first action in table order with a matching verb wins."""
        assert detect_action(split_words(text)) == expected

    def test_extract_components(self):
        """Category order first, a word claimed by two categories is listed once."""
        components, types = extract_components(split_words("add a table and a login form"))
        assert components == ["table", "form", "login"]
        assert types == ["ui", "data", "auth"]

    def test_extract_schema_references(self):
        refs = extract_schema_references("use schema.colors.primary and the dark theme")
        assert refs == ["colors.primary", "colors.dark"]

    def test_named_reference(self):
        assert extract_schema_references("a button with primary color") == ["colors.primary"]

    def test_determiner_is_not_a_reference(self):
        assert extract_schema_references("pick the color") == []

    def test_extract_context_hints(self):
        assert extract_context_hints(split_words("explain the api architecture")) == ["api", "architecture"]


class TestParseIntent:
    """Test cases for parse_intent."""

    def test_empty_intent(self):
        intent = parse_intent("")
        assert intent.action == Action.CREATE
        assert intent.components == ()
        assert len(intent.requirements) == 1
        assert intent.requirements[0].description == ""
        assert intent.requirements[0].type == "general"
        assert intent.confidence == pytest.approx(0.3)
        assert intent.suggested_templates == ("base",)

    def test_components_and_types(self):
        intent = parse_intent("Create a login form")
        assert intent.action == Action.CREATE
        assert intent.is_default_action
        assert intent.components == ("form", "login")
        assert intent.types == ("ui", "auth")
        assert intent.suggested_templates == ("base", "ui", "workflow")
        assert intent.confidence == pytest.approx(0.8)

    def test_requirements_per_component(self):
        intent = parse_intent("Create a login form")
        assert [(r.type, r.component, r.description) for r in intent.requirements] == [
            ("ui", "form", "create form"),
            ("auth", "login", "create login"),
        ]

    def test_full_confidence(self):
        assert parse_intent("fix the modal").confidence == pytest.approx(1.0)

    def test_signup_scenario(self):
        intent = parse_intent("create a signup button with primary color")
        assert intent.components == ("button", "signup")
        assert intent.schema_references == ("colors.primary",)
        assert intent.keywords == ("create", "signup", "button", "primary", "color")

    def test_deterministic(self):
        assert parse_intent("add a login form") == parse_intent("add a login form")


class TestHelpers:
    """Test cases for template matching and summaries."""

    def test_match_template_prefers_type_specific(self):
        intent = parse_intent("create a modal")
        assert match_template(intent, ["base", "ui"]) == "ui"

    def test_match_template_falls_back_to_base(self):
        intent = parse_intent("create a modal")
        assert match_template(intent, ["base", "api"]) == "base"

    def test_match_template_first_available(self):
        intent = parse_intent("create a modal")
        assert match_template(intent, ["api"]) == "api"
        assert match_template(intent, []) is None

    def test_intent_summary(self):
        summary = intent_summary(parse_intent("fix the modal"))
        assert summary == "Action: fix | Components: modal | Types: ui | Confidence: 100%"

    def test_to_intent_info(self):
        info = to_intent_info(parse_intent("fix the modal"))
        assert info.action == "fix"
        assert info.components == ["modal"]
