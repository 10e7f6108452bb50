"""Test cases for end-to-end prompt generation."""

import json

from conftest import write
from create_prompt.services.loader import load_workspace
from create_prompt.services.pipeline import describe_workspace, generate_prompt, init_workspace, split_variables

SIGNUP = "create a signup button with primary color"


class TestGeneratePrompt:
    """Test cases for generate_prompt."""

    def test_signup_scenario(self, workspace):
        prompt = generate_prompt(SIGNUP, workspace)

        assert prompt.content.startswith("# Create button")
        assert prompt.content.endswith("## Task\n\n" + SIGNUP)
        assert "Primary: #3B82F6" in prompt.content
        assert not any("colors.primary" in w for w in prompt.warnings)
        assert prompt.metadata.template_used == "base"
        assert prompt.metadata.context_used[:3] == ["persona", "standards", "project"]
        assert prompt.metadata.errors == []

    def test_bugfix_scenario(self, workspace):
        prompt = generate_prompt("fix the login bug", workspace)

        assert prompt.metadata.task_type == "bugfix"
        assert "history" in prompt.metadata.context_used
        assert "Identify root cause before fixing" in prompt.content
        assert "Update footer links" in prompt.content

    def test_empty_intent(self, workspace):
        prompt = generate_prompt("", workspace)
        assert prompt.content is not None
        assert prompt.metadata.task_type == "general"
        assert prompt.metadata.intent.confidence == 0.3

    def test_missing_workspace(self, tmp_path):
        prompt = generate_prompt(SIGNUP, tmp_path / "missing")
        assert prompt.content is None
        assert prompt.metadata.errors[0].startswith("Workspace directory not found")

    def test_builtin_template_fallback(self, workspace):
        (workspace / "prompts" / "base.json").unlink()
        prompt = generate_prompt(SIGNUP, workspace)
        assert "No templates found, using built-in base template" in prompt.warnings
        assert prompt.metadata.template_used == "base"
        assert "## Approach" in prompt.content

    def test_unknown_template(self, workspace):
        prompt = generate_prompt(SIGNUP, workspace, template_name="ghost")
        assert "Template 'ghost' not found, using 'base'" in prompt.warnings
        assert prompt.metadata.template_used == "base"

    def test_variables(self, workspace):
        prompt = generate_prompt(SIGNUP, workspace, variables={"colors.primary": "#000000"})
        assert "Primary: #000000" in prompt.content

    def test_without_context(self, workspace):
        prompt = generate_prompt(SIGNUP, workspace, include_context=False)
        assert prompt.metadata.context_used == []
        assert "## Context" not in prompt.content

    def test_missing_forced_context(self, workspace):
        prompt = generate_prompt(SIGNUP, workspace, force_context=["ghost"])
        assert "Context file 'ghost' not found" in prompt.warnings

    def test_config_defaults(self, workspace):
        write(workspace / "config.json", json.dumps({"defaults": {"target": "cursor"}}))
        prompt = generate_prompt(SIGNUP, workspace)
        assert prompt.metadata.target == "cursor"
        assert "### Context" in prompt.content

    def test_load_errors_surface_in_metadata(self, workspace):
        write(workspace / "prompts" / "broken.json", "{")
        prompt = generate_prompt(SIGNUP, workspace)
        assert prompt.content is not None
        assert len(prompt.metadata.errors) == 1

    def test_file_suggestions_from_project(self, workspace):
        write(workspace.parent / "auth" / "login.py", "def login(): ...\n")
        prompt = generate_prompt(SIGNUP, workspace)
        assert "## Relevant Files" in prompt.content
        assert "`auth/`" in prompt.content

    def test_split_variables(self):
        assert split_variables({"detail": "short", "colors.primary": "#000"}) == (
            {"detail": "short"},
            {"colors.primary": "#000"},
        )
        assert split_variables(None) == ({}, {})


class TestInitWorkspace:
    """Test cases for workspace scaffolding."""

    def test_init_writes_defaults(self, tmp_path):
        root = tmp_path / ".create-prompt"
        result = init_workspace(root)
        assert len(result.written) == 9
        assert "prompts/base.json" in result.written
        assert "schemas/colors.yaml" in result.written
        assert (root / "config.json").is_file()

    def test_existing_files_kept(self, tmp_path):
        root = tmp_path / ".create-prompt"
        init_workspace(root)
        (root / "context" / "persona.md").write_text("mine")

        result = init_workspace(root)
        assert result.written == []
        assert len(result.skipped) == 9
        assert (root / "context" / "persona.md").read_text() == "mine"

        result = init_workspace(root, force=True)
        assert len(result.written) == 9
        assert (root / "context" / "persona.md").read_text() != "mine"

    def test_minimal(self, tmp_path):
        result = init_workspace(tmp_path / "ws", minimal=True)
        assert len(result.written) == 5
        assert not any(path.startswith("context/") for path in result.written)

    def test_defaults_produce_a_prompt(self, tmp_path):
        root = tmp_path / ".create-prompt"
        init_workspace(root)

        prompt = generate_prompt(SIGNUP, root)
        assert prompt.metadata.template_used == "ui"
        assert "Use #3B82F6 as the primary color." in prompt.content
        assert not any("colors.primary" in w for w in prompt.warnings)

    def test_describe_workspace(self, tmp_path):
        root = tmp_path / ".create-prompt"
        init_workspace(root)

        listing = describe_workspace(load_workspace(root))
        assert "ui (extends base) - User interface components" in listing["templates"]
        assert "persona [persona, high]" in listing["context"]
        assert listing["schemas"] == ["colors (3 variables)"]
