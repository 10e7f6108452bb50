"""
Commit history helpers - parse change logs and keep only the entries relevant to a task.
"""
import logging
import re
from dataclasses import dataclass

from create_prompt.schemas import ContextDocument
from create_prompt.services.relevance import filter_by_relevance, score_relevance

logger = logging.getLogger(__name__)

# "abc1234 - message (2024-01-01)"
FULL_COMMIT = re.compile(r"^([a-f0-9]{7,40})\s*[-–]\s*(.+?)(?:\s*\(([^)]+)\))?$", re.IGNORECASE)
# "abc1234 message"
SIMPLE_COMMIT = re.compile(r"^([a-f0-9]{7,40})\s+(.+)$", re.IGNORECASE)
# "- message" or "* message"
LIST_ENTRY = re.compile(r"^[-*]\s*(.+)$")


@dataclass(frozen=True)
class Commit:
    message: str
    hash: str = ""
    date: str = ""


@dataclass(frozen=True)
class FilteredHistory:
    body: str
    count: int
    total: int


@dataclass(frozen=True)
class LatestCommitCheck:
    relevant: bool
    score: float
    message: str


def parse_commit_line(line: str) -> Commit | None:
    line = line.strip()
    if not line or line.startswith("#"):
        return None

    if match := FULL_COMMIT.match(line):
        return Commit(hash=match.group(1), message=match.group(2).strip(), date=match.group(3) or "")
    if match := SIMPLE_COMMIT.match(line):
        return Commit(hash=match.group(1), message=match.group(2).strip())
    if match := LIST_ENTRY.match(line):
        return Commit(message=match.group(1).strip())
    return Commit(message=line)


def parse_commits(log: str) -> list[Commit]:
    """Parse a commit log in any of the supported line formats; headings are skipped."""
    commits = []
    for line in log.split("\n"):
        commit = parse_commit_line(line)
        if commit is not None:
            commits.append(commit)
    return commits


def relevant_commits(
    log: str,
    keywords: list[str],
    min_score: float = 0.3,
    max_items: int = 5,
) -> list[tuple[Commit, float]]:
    return filter_by_relevance(
        parse_commits(log),
        keywords,
        text_of=lambda commit: commit.message,
        min_score=min_score,
        max_items=max_items,
    )


def filter_history(
    body: str,
    keywords: list[str],
    min_score: float = 0.3,
    max_items: int = 5,
) -> FilteredHistory:
    """
    Keep the header and up to max_items entries scoring at least min_score.

    Header lines are the leading `#` and blank lines. Every later non-blank
    line is an entry; kept entries stay in their original order. A note is
    appended when entries were dropped.
    """
    header: list[str] = []
    kept: list[str] = []
    total = 0
    in_header = True

    for line in body.split("\n"):
        if in_header and (line.startswith("#") or not line.strip()):
            header.append(line)
            continue
        in_header = False
        if not line.strip():
            continue

        total += 1
        if len(kept) < max_items and score_relevance(line, keywords) >= min_score:
            kept.append(line)

    parts = []
    if header:
        parts.append("\n".join(header).rstrip())
    if kept:
        parts.append("\n".join(kept))
    filtered = "\n\n".join(p for p in parts if p)

    if total > len(kept):
        filtered += f"\n\n_Showing {len(kept)} of {total} entries relevant to your task._"

    return FilteredHistory(body=filtered.strip(), count=len(kept), total=total)


def filtered_history_document(
    document: ContextDocument,
    keywords: list[str],
    min_score: float = 0.3,
    max_items: int = 5,
) -> ContextDocument:
    """
    Derived copy of a history document holding only relevant entries.

    The document was admitted on its overall score, so when no single entry
    reaches min_score it is returned unfiltered.
    """
    if not document.body:
        return document

    result = filter_history(document.body, keywords, min_score, max_items)
    if result.count == 0:
        logger.debug(f"History '{document.name}': no entry reached {min_score:.2f}, keeping all {result.total}")
        return document

    logger.debug(f"History '{document.name}': kept {result.count} of {result.total} entries")
    return document.with_body(
        result.body,
        filtered=True,
        relevant_items=result.count,
        total_items=result.total,
    )


def latest_commit_relevance(body: str, keywords: list[str], threshold: float = 0.3) -> LatestCommitCheck:
    if not body or not body.strip():
        return LatestCommitCheck(relevant=False, score=0.0, message="")

    score = score_relevance(body, keywords)
    commits = parse_commits(body)
    message = commits[0].message if commits else body.strip()
    return LatestCommitCheck(relevant=score >= threshold, score=score, message=message)

