"""
Context selector - decides which context documents go into a prompt and in what order.

Selection steps, each skipping names already decided:
    1. essential documents (score 1.0), in configured order
    2. explicitly forced documents (1.0)
    3. project_structure (0.9)
    4. documents named by the intent's context hints (0.8)
    5. documents named by the intent's types (0.7)
    6. latest_commit and history, per their inclusion mode
    7. everything else, by relevance against the intent keywords

Essentials keep their configured order at the front; the rest are sorted by
descending score with ties in insertion order.
"""
import logging
from dataclasses import dataclass, field

from create_prompt.config import SelectionOptions
from create_prompt.schemas import ContextDocument, InclusionMode, TaskTypeMatch
from create_prompt.services.history import filtered_history_document
from create_prompt.services.intent import Intent
from create_prompt.services.relevance import score_relevance
from create_prompt.services.task_types import should_include_context

logger = logging.getLogger(__name__)

PROJECT_STRUCTURE = "project_structure"
LATEST_COMMIT = "latest_commit"
HISTORY = "history"
SPECIAL_DOCUMENTS = (LATEST_COMMIT, HISTORY)

ESSENTIAL_SCORE = 1.0
FORCED_SCORE = 1.0
STRUCTURE_SCORE = 0.9
HINT_SCORE = 0.8
TYPE_SCORE = 0.7
ALWAYS_SCORE = 0.5
BUGFIX_SCORE = 0.7

BUGFIX = "bugfix"

# history is held to a lower bar than other documents
HISTORY_THRESHOLD_FACTOR = 0.7


@dataclass
class ContextSelection:
    """Ordered selection with the score that placed each document."""
    names: list[str] = field(default_factory=list)
    scores: dict[str, float] = field(default_factory=dict)
    documents: list[ContextDocument] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def _threshold_for(name: str, min_relevance: float) -> float:
    if name == HISTORY:
        return min_relevance * HISTORY_THRESHOLD_FACTOR
    return min_relevance


def select_context(
    intent: Intent,
    task: TaskTypeMatch,
    available: dict[str, ContextDocument],
    options: SelectionOptions | None = None,
) -> ContextSelection:
    """
    Choose and order context documents for one request.

    Missing forced documents are reported as warnings, never errors. A
    history document admitted by relevance is replaced by a filtered copy
    holding only its relevant entries; the loaded document is not changed.
    """
    options = options or SelectionOptions()
    keywords = list(intent.keywords)
    selection = ContextSelection()

    essentials: list[str] = []
    ranked: list[tuple[str, float]] = []
    decided: set[str] = set()
    filtered_history = False

    def include(name: str, score: float, essential: bool = False) -> None:
        decided.add(name)
        selection.scores[name] = score
        if essential:
            essentials.append(name)
        else:
            ranked.append((name, score))
        logger.debug(f"Context '{name}' included (score={score:.2f})")

    # 1. Essentials
    for name in options.essential_context:
        if name in available and name not in decided:
            include(name, ESSENTIAL_SCORE, essential=True)

    # 2. Forced by the caller
    for name in options.force_include:
        if name in decided:
            continue
        if name in available:
            include(name, FORCED_SCORE)
        else:
            selection.warnings.append(f"Context file '{name}' not found")

    # 3. Project structure
    if PROJECT_STRUCTURE in available and PROJECT_STRUCTURE not in decided:
        include(PROJECT_STRUCTURE, STRUCTURE_SCORE)

    # 4-5. Hinted by vocabulary, then by component type
    for names, score in ((intent.context_hints, HINT_SCORE), (intent.types, TYPE_SCORE)):
        for name in names:
            if name in decided:
                continue
            if name in available:
                include(name, score)
            else:
                logger.debug(f"Hinted context '{name}' not available")

    # 6. Special documents
    modes = {LATEST_COMMIT: options.include_latest_commit, HISTORY: options.include_history}
    for name in SPECIAL_DOCUMENTS:
        if name not in available or name in decided:
            continue
        decided.add(name)
        mode = modes[name]

        if mode == InclusionMode.NEVER:
            logger.debug(f"Context '{name}' excluded (mode=never)")
            continue
        if mode == InclusionMode.ALWAYS:
            include(name, ALWAYS_SCORE)
            continue
        if task.type == BUGFIX:
            include(name, BUGFIX_SCORE)
            continue
        if not should_include_context(task.type, name):
            logger.debug(f"Context '{name}' excluded by task type '{task.type}'")
            continue

        score = score_relevance(available[name].body, keywords, options.expand_synonyms)
        threshold = _threshold_for(name, options.min_relevance)
        if score >= threshold:
            include(name, score)
            filtered_history = filtered_history or name == HISTORY
        else:
            logger.debug(f"Context '{name}' below threshold ({score:.2f} < {threshold:.2f})")

    # 7. Everything else
    for name, document in available.items():
        if name in decided:
            continue
        decided.add(name)
        if not should_include_context(task.type, name):
            logger.debug(f"Context '{name}' excluded by task type '{task.type}'")
            continue

        score = score_relevance(document.body, keywords, options.expand_synonyms)
        if score >= options.min_relevance:
            include(name, score)
        else:
            logger.debug(f"Context '{name}' below threshold ({score:.2f} < {options.min_relevance:.2f})")

    # Stable: equal scores keep insertion order
    ranked.sort(key=lambda pair: pair[1], reverse=True)
    selection.names = essentials + [name for name, _ in ranked]

    for name in selection.names:
        document = available[name]
        if name == HISTORY and filtered_history:
            document = filtered_history_document(
                document,
                keywords,
                min_score=options.min_relevance,
                max_items=options.max_history_items,
            )
        selection.documents.append(document)

    logger.info(f"Selected context: {', '.join(selection.names) or '(none)'}")
    return selection
