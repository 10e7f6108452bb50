import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from create_prompt.schemas import InclusionMode, OutputFormat

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CREATE_PROMPT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Workspace holding prompts/, context/, schemas/ and config.json
    workspace_dir: str = ".create-prompt"

    # Invocation defaults
    default_template: str = "base"
    default_target: str = "claude"      # claude, cursor, gpt, antigravity, generic
    default_format: OutputFormat = OutputFormat.MARKDOWN

    # Relevance filtering
    min_relevance: float = 0.3
    essential_context: list[str] = ["persona", "standards", "project"]
    include_latest_commit: InclusionMode = InclusionMode.AUTO
    include_history: InclusionMode = InclusionMode.AUTO
    expand_synonyms: bool = True
    max_history_items: int = 5
    max_context_chars: int = 2000       # Per document, longer bodies are truncated

    # Task type detection
    detection_threshold: float = 0.5
    inject_requirements: bool = True
    suggest_files: bool = True
    max_suggested_dirs: int = 5
    max_suggested_files: int = 10

    # Loader limits
    max_context_file_bytes: int = 512 * 1024
    max_schema_file_bytes: int = 1024 * 1024

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()


def load_settings(workspace: Path) -> Settings:
    """
    Build settings for a workspace.

    Values from `<workspace>/config.json` override environment and defaults.
    Both flat setting names and the `defaults` block
    ({"template", "target", "format"}) are recognized; unknown keys are ignored.
    A malformed config file is logged and skipped.
    """
    config_path = workspace / CONFIG_FILE_NAME
    if not config_path.is_file():
        return Settings()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Could not load {config_path}: {e}, using defaults")
        return Settings()

    if not isinstance(data, dict):
        logger.warning(f"{config_path} must contain a JSON object, using defaults")
        return Settings()

    overrides = {k: v for k, v in data.items() if k in Settings.model_fields}
    defaults = data.get("defaults") or {}
    if isinstance(defaults, dict):
        for key in ("template", "target", "format"):
            if key in defaults:
                overrides[f"default_{key}"] = defaults[key]

    try:
        return Settings(**overrides)
    except ValidationError as e:
        logger.warning(f"Invalid values in {config_path}: {e.error_count()} error(s), using defaults")
        return Settings()


@dataclass(frozen=True)
class SelectionOptions:
    """Options consumed by the context selector."""
    min_relevance: float = 0.3
    essential_context: tuple[str, ...] = ("persona", "standards", "project")
    include_latest_commit: InclusionMode = InclusionMode.AUTO
    include_history: InclusionMode = InclusionMode.AUTO
    expand_synonyms: bool = True
    max_history_items: int = 5
    force_include: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_settings(cls, settings: Settings, force_include: list[str] | None = None) -> "SelectionOptions":
        return cls(
            min_relevance=settings.min_relevance,
            essential_context=tuple(settings.essential_context),
            include_latest_commit=settings.include_latest_commit,
            include_history=settings.include_history,
            expand_synonyms=settings.expand_synonyms,
            max_history_items=settings.max_history_items,
            force_include=tuple(force_include or ()),
        )
