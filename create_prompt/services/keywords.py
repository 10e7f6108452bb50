"""
Keyword extraction - turns a raw intent sentence into significant words and known phrases.
"""
import re

# Articles, auxiliaries, pronouns and a handful of generic verbs
STOP_WORDS = frozenset({
    "a", "an", "the", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "as", "is", "was", "are", "were", "been",
    "be", "have", "has", "had", "do", "does", "did", "will", "would",
    "could", "should", "may", "might", "must", "that", "this", "these",
    "those", "it", "its", "my", "your", "our", "their", "i", "me", "we", "us",
    "add", "make", "get", "set", "put", "new", "use", "all", "can", "just",
})

KNOWN_PHRASES = (
    "open graph", "twitter card", "meta tags", "dark mode", "light mode",
    "drag and drop", "file upload", "form validation", "error handling",
    "api endpoint", "rest api", "graphql api", "user authentication",
    "password reset", "email verification", "two factor", "2fa",
)

MIN_WORD_LENGTH = 3

_SPLIT_PATTERN = re.compile(r"[\s,.\-_]+")


def is_stop_word(word: str) -> bool:
    return word in STOP_WORDS


def is_significant(word: str) -> bool:
    """A word survives extraction when it is long enough and not a stop word."""
    return len(word) >= MIN_WORD_LENGTH and not is_stop_word(word)


def tokenize(text: str) -> list[str]:
    """Lower-case and split on whitespace and light punctuation."""
    return [t for t in _SPLIT_PATTERN.split(text.lower()) if t]


def extract_phrases(text: str) -> list[str]:
    """Known multi-word phrases appearing verbatim in the lower-cased text."""
    normalized = text.lower()
    return [phrase for phrase in KNOWN_PHRASES if phrase in normalized]


def extract_keywords(text: str) -> list[str]:
    """
    Extract significant words and known phrases from free text.

    Returns a deduplicated list in first-seen order: surviving single words
    followed by matched phrases.
    """
    if not text:
        return []

    words = [w for w in tokenize(text) if is_significant(w)]
    return list(dict.fromkeys(words + extract_phrases(text)))
