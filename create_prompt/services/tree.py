"""
Project structure rendering for the `project_structure` context document.
"""
import logging
import os
from itertools import islice
from pathlib import Path
from typing import Iterator

from create_prompt.services.file_suggestions import IGNORED_DIRS

logger = logging.getLogger(__name__)

STRUCTURE_DOCUMENT = "project_structure.md"
DEFAULT_MAX_DEPTH = 4
DEFAULT_MAX_LINES = 300

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE = "│   "
SPACE = "    "


def _sorted_entries(directory: Path, ignore: frozenset[str]) -> list[tuple[str, bool]]:
    """(name, is_dir) pairs, directories first, then files, each alphabetical."""
    entries = []
    try:
        with os.scandir(directory) as it:
            for entry in it:
                if entry.name in ignore:
                    continue
                try:
                    is_dir = entry.is_dir(follow_symlinks=False)
                except OSError:
                    is_dir = False
                entries.append((entry.name, is_dir))
    except OSError as e:
        logger.debug(f"Skipping unreadable directory {directory}: {e}")
        return []

    return sorted(entries, key=lambda pair: (not pair[1], pair[0].lower()))


def _tree_lines(directory: Path, prefix: str, depth: int, max_depth: int, ignore: frozenset[str]) -> Iterator[str]:
    entries = _sorted_entries(directory, ignore)
    for index, (name, is_dir) in enumerate(entries):
        last = index == len(entries) - 1
        connector = LAST_BRANCH if last else BRANCH
        if is_dir:
            yield f"{prefix}{connector}{name}/"
            if depth + 1 < max_depth:
                yield from _tree_lines(directory / name, prefix + (SPACE if last else PIPE), depth + 1, max_depth, ignore)
        else:
            yield f"{prefix}{connector}{name}"


def render_tree(
    root: Path,
    max_depth: int = DEFAULT_MAX_DEPTH,
    ignore: frozenset[str] = IGNORED_DIRS,
    max_lines: int = DEFAULT_MAX_LINES,
) -> str:
    """
    Render a directory tree, directories first and alphabetical.

    Output stops after max_lines entries with a `...` marker.
    """
    lines = [f"{root.resolve().name}/"]
    body = list(islice(_tree_lines(root, "", 0, max_depth, ignore), max_lines + 1))
    if len(body) > max_lines:
        body = body[:max_lines] + ["..."]
    return "\n".join(lines + body) + "\n"


def structure_document(root: Path, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    tree = render_tree(root, max_depth)
    return (
        "---\n"
        "type: structure\n"
        "priority: medium\n"
        "tags: [architecture, files]\n"
        "---\n\n"
        "# Project Structure\n\n"
        f"```\n{tree}```\n"
    )


def write_structure(workspace: Path, project_root: Path, max_depth: int = DEFAULT_MAX_DEPTH) -> Path:
    """Write the structure document into the workspace context directory."""
    context_dir = workspace / "context"
    context_dir.mkdir(parents=True, exist_ok=True)
    path = context_dir / STRUCTURE_DOCUMENT
    path.write_text(structure_document(project_root, max_depth), encoding="utf-8")
    logger.info(f"Wrote project structure to {path}")
    return path
