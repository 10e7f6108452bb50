"""
Relevance scoring with synonym and stem expansion.

Used by the context selector, history filtering and file suggestions to decide
how strongly a piece of text matches a keyword set.
"""
from typing import Callable, Iterable, TypeVar


T = TypeVar("T")

# Topic -> related terms
SYNONYMS: dict[str, tuple[str, ...]] = {
    "seo": ("meta", "og:", "open graph", "opengraph", "twitter card", "sitemap", "robots",
            "canonical", "metadata", "search engine"),
    "auth": ("login", "logout", "session", "token", "jwt", "oauth", "password", "authentication",
             "authorization", "signin", "signup", "register", "credential"),
    "api": ("endpoint", "route", "rest", "graphql", "fetch", "axios", "request", "response",
            "controller", "handler"),
    "ui": ("component", "button", "modal", "form", "layout", "style", "css", "design",
           "interface", "view", "template", "render"),
    "database": ("query", "migration", "model", "schema", "prisma", "mongoose", "sql", "mongodb",
                 "postgres", "mysql", "table", "collection"),
    "testing": ("test", "spec", "jest", "mocha", "unit", "integration", "e2e", "coverage",
                "assert", "mock"),
    "performance": ("optimize", "cache", "speed", "lazy", "bundle", "minify", "compress",
                    "memory", "profil"),
    "security": ("xss", "csrf", "injection", "sanitize", "escape", "validate", "encrypt",
                 "hash", "secure"),
    "config": ("configuration", "settings", "environment", "env", "dotenv", "options", "setup"),
    "docs": ("documentation", "readme", "comment", "jsdoc", "typedoc", "wiki", "guide"),
    "error": ("bug", "fix", "issue", "problem", "crash", "exception", "throw", "catch", "debug"),
    "deploy": ("deployment", "ci", "cd", "pipeline", "docker", "kubernetes", "vercel",
               "netlify", "heroku"),
}

# Root -> inflections
STEMS: dict[str, tuple[str, ...]] = {
    "authenticat": ("authenticate", "authentication", "authenticating", "authenticated"),
    "optimi": ("optimize", "optimization", "optimizing", "optimized", "optimizer"),
    "valid": ("validate", "validation", "validating", "validated", "validator"),
    "config": ("config", "configure", "configuration", "configuring", "configured"),
    "implement": ("implement", "implementation", "implementing", "implemented"),
    "generat": ("generate", "generation", "generating", "generated", "generator"),
    "creat": ("create", "creation", "creating", "created", "creator"),
    "updat": ("update", "updating", "updated", "updater"),
    "delet": ("delete", "deletion", "deleting", "deleted"),
    "render": ("render", "rendering", "rendered", "renderer"),
}

# Scoring weights
EXACT_WEIGHT = 3
STEM_WEIGHT = 2
RELATED_WEIGHT = 1


def expand_keywords(keywords: Iterable[str]) -> list[str]:
    """
    Expand keywords with synonym categories and stem inflections.

    A keyword pulls in a whole synonym category when it is the category name
    or one of its terms, and all inflections of a stem when it is one of them
    or starts with the stem. The originals come first; order is deterministic.
    """
    keywords = list(keywords)
    expanded = dict.fromkeys(keywords)

    for keyword in keywords:
        for category, synonyms in SYNONYMS.items():
            if keyword == category or keyword in synonyms:
                expanded.update(dict.fromkeys(synonyms))
                expanded[category] = None

        for stem, variations in STEMS.items():
            if keyword in variations or keyword.startswith(stem):
                expanded.update(dict.fromkeys(variations))

    return list(expanded)


def score_relevance(text: str, keywords: Iterable[str], expand_synonyms: bool = True) -> float:
    """
    Score how strongly text matches a keyword set.

    Each keyword found as a case-insensitive substring earns the exact weight.
    With expansion enabled, each expanded term present in the text (and not
    an original keyword) earns the related weight, while the denominator only
    grows by min(expanded * related, keywords * stem) so that synonyms cannot
    dominate the score.

    Returns:
        Score in [0, 1]; 0 for empty text or keywords
    """
    keywords = list(dict.fromkeys(k.lower() for k in keywords if k))
    if not text or not keywords:
        return 0.0

    normalized = text.lower()
    score = 0
    max_score = 0

    for keyword in keywords:
        if keyword in normalized:
            score += EXACT_WEIGHT
        max_score += EXACT_WEIGHT

    if expand_synonyms:
        expanded = expand_keywords(keywords)
        originals = set(keywords)
        for term in expanded:
            if term not in originals and term in normalized:
                score += RELATED_WEIGHT
        max_score += min(len(expanded) * RELATED_WEIGHT, len(keywords) * STEM_WEIGHT)

    if max_score == 0:
        return 0.0
    return min(score / max_score, 1.0)


def filter_by_relevance(
    items: Iterable[T],
    keywords: list[str],
    text_of: Callable[[T], str] = str,
    min_score: float = 0.3,
    max_items: int | None = None,
    expand_synonyms: bool = True,
) -> list[tuple[T, float]]:
    """
    Score items, keep those at or above min_score, best first.

    Sorting is stable so equally scored items keep their input order.
    """
    scored = [(item, score_relevance(text_of(item), keywords, expand_synonyms)) for item in items]
    kept = [pair for pair in scored if pair[1] >= min_score]
    kept.sort(key=lambda pair: pair[1], reverse=True)

    if max_items is not None:
        kept = kept[:max_items]
    return kept


def is_relevant(text: str, keywords: list[str], threshold: float = 0.3) -> bool:
    return score_relevance(text, keywords) >= threshold


def relevance_category(score: float) -> str:
    """Bucket a score into high, medium, low or none."""
    if score >= 0.7:
        return "high"
    if score >= 0.4:
        return "medium"
    if score >= 0.2:
        return "low"
    return "none"
