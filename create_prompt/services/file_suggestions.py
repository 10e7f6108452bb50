"""
File suggestions - points the assistant at project directories and files that match the task type.
"""
import logging
import os
from itertools import islice
from pathlib import Path
from typing import Iterator

from create_prompt.schemas import FileSuggestion, FileSuggestions
from create_prompt.services.relevance import score_relevance
from create_prompt.services.task_types import get_relevant_paths

logger = logging.getLogger(__name__)

IGNORED_DIRS = frozenset({
    ".git", "node_modules", "vendor", ".create-prompt", "dist", "build",
    "coverage", "__pycache__", ".venv",
})
IGNORED_SUFFIXES = (".lock", ".log", ".map", ".min.js", ".min.css")

MAX_DIR_DEPTH = 3
MAX_FILE_DEPTH = 4
CONTENT_SAMPLE_CHARS = 1000
BASE_FILE_SCORE = 0.5

# Pattern hints listed when nothing on disk matched
QUICK_DIRS = 5
QUICK_FILES = 8


def walk(root: Path, max_depth: int, ignore: frozenset[str] = IGNORED_DIRS) -> Iterator[tuple[os.DirEntry, int]]:
    """
    Yield (entry, depth) for everything under root, depth-first in name order.

    Entries directly under root have depth 0. Ignored names are neither
    yielded nor descended into; unreadable directories are skipped.
    """
    def visit(directory: str, depth: int) -> Iterator[tuple[os.DirEntry, int]]:
        if depth > max_depth:
            return
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            logger.debug(f"Skipping unreadable directory {directory}: {e}")
            return

        for entry in entries:
            if entry.name in ignore:
                continue
            yield entry, depth
            if _is_dir(entry):
                yield from visit(entry.path, depth + 1)

    yield from visit(str(root), 0)


def _is_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError:
        return False


def _is_file(entry: os.DirEntry) -> bool:
    try:
        return entry.is_file(follow_symlinks=False)
    except OSError:
        return False


def _relative(entry: os.DirEntry, root: Path) -> str:
    return Path(entry.path).relative_to(root).as_posix()


def find_directories(root: Path, patterns: list[str], max_results: int = 5) -> list[FileSuggestion]:
    """Directories whose name or relative path contains one of the patterns."""
    normalized = [(p, p.rstrip("/").lower()) for p in patterns if p.rstrip("/")]
    if not normalized:
        return []

    def matches() -> Iterator[FileSuggestion]:
        for entry, _ in walk(root, MAX_DIR_DEPTH):
            if not _is_dir(entry):
                continue
            relative = _relative(entry, root)
            name = entry.name.lower()
            for pattern, needle in normalized:
                if needle in relative.lower() or needle in name:
                    yield FileSuggestion(path=relative, name=entry.name, pattern=pattern)
                    break

    return list(islice(matches(), max_results))


def read_sample(path: str, limit: int = CONTENT_SAMPLE_CHARS) -> str | None:
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            return f.read(limit)
    except OSError as e:
        logger.debug(f"Could not read {path}: {e}")
        return None


def find_files(
    root: Path,
    patterns: list[str],
    keywords: list[str] | None = None,
    max_results: int = 10,
) -> list[FileSuggestion]:
    """
    Files whose name contains one of the patterns, best scored first.

    Without keywords every match scores 0.5; otherwise the first
    1000 characters are scored for relevance. Generated, minified and lock
    files are skipped.
    """
    needles = [p.lower() for p in patterns if p]
    if not needles:
        return []

    def matches() -> Iterator[FileSuggestion]:
        for entry, _ in walk(root, MAX_FILE_DEPTH):
            if not _is_file(entry) or entry.name.endswith(IGNORED_SUFFIXES):
                continue
            name = entry.name.lower()
            if not any(needle in name for needle in needles):
                continue

            score = BASE_FILE_SCORE
            if keywords:
                sample = read_sample(entry.path)
                if sample is None:
                    continue
                score = score_relevance(sample, keywords)
            yield FileSuggestion(path=_relative(entry, root), name=entry.name, score=score)

    # Rank among at most twice the requested number of candidates
    candidates = list(islice(matches(), max_results * 2))
    candidates.sort(key=lambda s: s.score, reverse=True)
    return candidates[:max_results]


def suggest_files(
    task_type: str,
    root: Path,
    keywords: list[str] | None = None,
    max_dirs: int = 5,
    max_files: int = 10,
) -> FileSuggestions:
    dir_patterns, file_patterns = get_relevant_paths(task_type)
    suggestions = FileSuggestions(
        directories=find_directories(root, dir_patterns, max_dirs),
        files=find_files(root, file_patterns, keywords, max_files),
    )
    logger.debug(
        f"File suggestions for '{task_type}': "
        f"{len(suggestions.directories)} dir(s), {len(suggestions.files)} file(s)"
    )
    return suggestions


def quick_suggestions(task_type: str) -> tuple[list[str], list[str]]:
    """Capped path hints straight from the task type definition."""
    dirs, files = get_relevant_paths(task_type)
    return dirs[:QUICK_DIRS], files[:QUICK_FILES]


def format_file_suggestions(
    suggestions: FileSuggestions,
    task_type: str,
    max_dirs: int = QUICK_DIRS,
    max_files: int = QUICK_FILES,
) -> str:
    """
    Markdown body for the file suggestion section.

    Paths found on disk are listed when there are any, otherwise the task
    type's own path hints; returns an empty string when there is neither.
    """
    if suggestions.directories or suggestions.files:
        dirs = [f"`{d.path}/`" for d in suggestions.directories[:max_dirs]]
        files = [f"`{f.path}`" for f in suggestions.files[:max_files]]
    else:
        hint_dirs, hint_files = quick_suggestions(task_type)
        dirs = [f"`{d}`" for d in hint_dirs[:max_dirs]]
        files = [f"`*{f}*`" for f in hint_files[:max_files]]

    parts = []
    if dirs:
        parts.append("**Relevant directories:**\n" + "\n".join(f"- {d}" for d in dirs))
    if files:
        parts.append("**Files to look for:**\n" + "\n".join(f"- {f}" for f in files))
    return "\n\n".join(parts)
