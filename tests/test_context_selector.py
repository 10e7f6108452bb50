"""Test cases for context selection."""

import pytest

from conftest import HISTORY_BODY
from create_prompt.config import SelectionOptions
from create_prompt.schemas import InclusionMode
from create_prompt.services.context_selector import select_context
from create_prompt.services.intent import parse_intent
from create_prompt.services.task_types import classify


def select(text, available, **options):
    intent = parse_intent(text)
    return select_context(intent, classify(intent), available, SelectionOptions(**options))


@pytest.fixture
def essentials(make_doc):
    return {
        "persona": make_doc("persona", "Unrelated persona notes"),
        "standards": make_doc("standards", "Unrelated standards"),
        "project": make_doc("project", "Unrelated project"),
    }


class TestOrdering:
    """Test cases for selection order."""

    def test_essentials_first_regardless_of_relevance(self, make_doc):
        available = {
            "endpoints": make_doc("endpoints", "login endpoint reference"),
            "auth_notes": make_doc("auth_notes", "login endpoint and session"),
            "routes": make_doc("routes", "endpoint for login"),
            "standards": make_doc("standards", "nothing relevant"),
            "persona": make_doc("persona", "nothing relevant"),
        }
        result = select("add login endpoint", available, essential_context=("persona", "standards"))
        assert result.names[:2] == ["persona", "standards"]
        assert set(result.names[2:]) == {"endpoints", "auth_notes", "routes"}

    def test_rest_sorted_by_score(self, essentials, make_doc):
        available = {
            **essentials,
            "project_structure": make_doc("project_structure", "tree"),
            "architecture": make_doc("architecture", "layers"),
        }
        result = select("explain the architecture", available)
        assert result.names == ["persona", "standards", "project", "project_structure", "architecture"]
        assert result.scores["project_structure"] == 0.9
        assert result.scores["architecture"] == 0.8

    def test_irrelevant_documents_dropped(self, essentials, make_doc):
        available = {**essentials, "deploy": make_doc("deploy", "kubernetes manifests")}
        result = select("create a login form", available)
        assert "deploy" not in result.names

    def test_documents_follow_names(self, essentials):
        result = select("create a login form", essentials)
        assert [d.name for d in result.documents] == result.names


class TestForcedContext:
    """Test cases for caller forced context."""

    def test_forced_document_included(self, essentials, make_doc):
        available = {**essentials, "deploy": make_doc("deploy", "kubernetes manifests")}
        result = select("create a login form", available, force_include=("deploy",))
        assert "deploy" in result.names
        assert result.scores["deploy"] == 1.0

    def test_missing_forced_document_warns(self, essentials):
        result = select("create a login form", essentials, force_include=("ghost",))
        assert result.warnings == ["Context file 'ghost' not found"]


class TestHistory:
    """Test cases for history and latest commit handling."""

    def test_bugfix_always_includes_history(self, essentials, make_doc):
        """Even far below min_relevance, a bug fix gets the history."""
        available = {**essentials, "history": make_doc("history", "- Update footer links")}
        result = select("fix the crash", available, min_relevance=0.9)
        assert "history" in result.names
        assert result.scores["history"] == 0.7
        assert result.documents[result.names.index("history")].body == "- Update footer links"

    def test_never_excludes(self, essentials, make_doc):
        available = {**essentials, "history": make_doc("history", HISTORY_BODY)}
        result = select("fix the login bug", available, include_history=InclusionMode.NEVER)
        assert "history" not in result.names

    def test_always_includes(self, essentials, make_doc):
        available = {**essentials, "latest_commit": make_doc("latest_commit", "abc1234 - Bump deps")}
        result = select("create a modal", available, include_latest_commit=InclusionMode.ALWAYS)
        assert result.scores["latest_commit"] == 0.5

    def test_task_type_exclusion(self, essentials, make_doc):
        """SEO work never pulls history in auto mode."""
        available = {**essentials, "history": make_doc("history", "- Add open graph meta tags")}
        result = select("add open graph meta tags", available)
        assert "history" not in result.names

    def test_relevant_history_is_filtered(self, make_doc):
        available = {"history": make_doc("history", HISTORY_BODY)}
        result = select("login redirect", available)

        assert result.names == ["history"]
        document = result.documents[0]
        assert document.metadata.filtered
        assert document.metadata.relevant_items == 1
        assert "Fix login redirect loop" in document.body
        assert "Update footer links" not in document.body
        assert available["history"].body == HISTORY_BODY

    def test_admitted_history_never_filtered_to_nothing(self, make_doc):
        """Relevant as a whole but no single line reaches the threshold."""
        body = "# History\n\n- login fixed\n- footer updated\n- redirect changed"
        available = {"history": make_doc("history", body)}
        result = select("login redirect footer", available)

        assert result.names == ["history"]
        document = result.documents[0]
        assert document.body == body
        assert "Showing 0" not in document.body
        assert not document.metadata.filtered

    def test_history_threshold_is_relaxed(self, make_doc):
        """Between 0.7 x min_relevance and min_relevance only history is admitted."""
        available = {
            "latest_commit": make_doc("latest_commit", "- zebra"),
            "history": make_doc("history", "- zebra"),
        }
        result = select("zebra quokka", available, min_relevance=0.6, expand_synonyms=False)

        assert result.scores["history"] == pytest.approx(0.5)
        assert "history" in result.names
        assert "latest_commit" not in result.names
