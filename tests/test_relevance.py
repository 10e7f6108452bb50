"""Test cases for relevance scoring."""

import pytest

from create_prompt.services.relevance import (
    expand_keywords,
    filter_by_relevance,
    is_relevant,
    relevance_category,
    score_relevance,
)


class TestScoreRelevance:
    """Test cases for score_relevance."""

    @pytest.mark.parametrize("text,keywords", [
        ("login page with session handling", ["login", "session", "token"]),
        ("nothing in common", ["database"]),
        ("auth auth auth login logout jwt oauth", ["auth"]),
        ("x", ["x", "y", "z"]),
    ])
    def test_score_is_bounded(self, text, keywords):
        """Scores always fall in [0, 1]."""
        score = score_relevance(text, keywords)
        assert 0.0 <= score <= 1.0

    def test_empty_keywords(self):
        assert score_relevance("some text", []) == 0

    def test_empty_text(self):
        assert score_relevance("", ["login"]) == 0

    def test_exact_match_without_expansion(self):
        assert score_relevance("Login page", ["login"], expand_synonyms=False) == 1.0

    def test_expansion_caps_denominator(self):
        """One exact hit out of one keyword with expansion: 3 / (3 + 2)."""
        assert score_relevance("login page", ["login"]) == pytest.approx(0.6)

    def test_synonyms_add_score(self):
        """Related terms found in the text raise the score."""
        plain = score_relevance("auth module", ["auth"])
        related = score_relevance("auth module with jwt and session", ["auth"])
        assert related > plain

    def test_case_insensitive(self):
        assert score_relevance("LOGIN", ["Login"], expand_synonyms=False) == 1.0


class TestExpandKeywords:
    """Test cases for expand_keywords."""

    def test_synonym_term_pulls_category(self):
        expanded = expand_keywords(["jwt"])
        assert expanded[0] == "jwt"
        assert "auth" in expanded
        assert "session" in expanded

    def test_stem_prefix(self):
        """A keyword starting with a stem pulls all of its inflections."""
        expanded = expand_keywords(["optimisation"])
        assert "optimized" in expanded

    def test_deterministic(self):
        assert expand_keywords(["login", "render"]) == expand_keywords(["login", "render"])


class TestFilterByRelevance:
    """Test cases for filter_by_relevance."""

    def test_filters_and_sorts(self):
        items = ["footer links", "login form", "login session token"]
        result = filter_by_relevance(items, ["login"], min_score=0.3)
        assert [item for item, _ in result] == ["login session token", "login form"]

    def test_max_items(self):
        items = ["login a", "login b", "login c"]
        result = filter_by_relevance(items, ["login"], min_score=0.1, max_items=2)
        assert [item for item, _ in result] == ["login a", "login b"]

    def test_text_of(self):
        items = [{"m": "login"}, {"m": "footer"}]
        result = filter_by_relevance(items, ["login"], text_of=lambda i: i["m"])
        assert result[0][0] == {"m": "login"}
        assert len(result) == 1


class TestCategories:
    """Test cases for relevance buckets."""

    @pytest.mark.parametrize("score,expected", [
        (0.9, "high"), (0.7, "high"), (0.5, "medium"), (0.4, "medium"),
        (0.2, "low"), (0.1, "none"), (0.0, "none"),
    ])
    def test_relevance_category(self, score, expected):
        assert relevance_category(score) == expected

    def test_is_relevant(self):
        assert is_relevant("login form", ["login"])
        assert not is_relevant("footer", ["login"])
