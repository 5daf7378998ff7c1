"""Run configuration: a small JSON file validated before anything runs.

Validation works like the first pass of a compiler: collect every
structural problem, then refuse to start if there is at least one.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path

from lectern_core.errors import ConfigError
from lectern_core.persistence import MAX_ATTEMPTS

DEFAULT_CONFIG_PATH = "lectern.json"
MAX_BATCH_SIZE = 500
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}


@dataclass(frozen=True)
class RunConfig:
    corpus_dir: str = "json"
    stopwords_path: str = "stopwords.json"
    database: str = "lectern.db"
    index_collection: str = "search_index"
    versions_collection: str = "versions"
    translations_collection: str = "translations"
    batch_size: int = 100
    pacing_seconds: float = 0.3
    retry_delay_seconds: float = 5.0
    max_attempts: int = 3
    workers: int = 1
    punctuation_splits_words: bool = False
    log_level: str = "INFO"

    @property
    def separator(self) -> str:
        return " " if self.punctuation_splits_words else ""

    def with_overrides(self, **overrides) -> RunConfig:
        """Return a copy with every non-None override applied.

        Overrides go through the same validation as the config file.
        """
        changes = {k: v for k, v in overrides.items() if v is not None}
        errors = validate_syntactic(changes)
        if errors:
            raise ConfigError("Invalid option override", errors)
        return replace(self, **changes)


_STRING_FIELDS = (
    "corpus_dir",
    "stopwords_path",
    "database",
    "index_collection",
    "versions_collection",
    "translations_collection",
)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# ── Syntactic Validation ────────────────────────────────────────────

def validate_syntactic(raw: dict) -> list[str]:
    """Check field names and types.  Returns list of error strings."""
    if not isinstance(raw, dict):
        return ["config must be a JSON object."]

    errors: list[str] = []
    known = {f.name for f in fields(RunConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        errors.append(f"Unknown config fields: {unknown}.")

    for name in _STRING_FIELDS:
        if name in raw and (not isinstance(raw[name], str) or not raw[name]):
            errors.append(f"'{name}' must be a non-empty string.")

    if "batch_size" in raw:
        bs = raw["batch_size"]
        if not _is_int(bs) or bs < 1 or bs > MAX_BATCH_SIZE:
            errors.append(f"'batch_size' must be an integer between 1 and {MAX_BATCH_SIZE}.")

    for name in ("pacing_seconds", "retry_delay_seconds"):
        if name in raw and (not _is_number(raw[name]) or raw[name] < 0):
            errors.append(f"'{name}' must be a non-negative number.")

    if "workers" in raw and (not _is_int(raw["workers"]) or raw["workers"] < 1):
        errors.append("'workers' must be a positive integer.")

    if "max_attempts" in raw:
        ma = raw["max_attempts"]
        if not _is_int(ma) or ma < 1 or ma > MAX_ATTEMPTS:
            errors.append(f"'max_attempts' must be an integer between 1 and {MAX_ATTEMPTS}.")

    if "punctuation_splits_words" in raw and not isinstance(raw["punctuation_splits_words"], bool):
        errors.append("'punctuation_splits_words' must be a boolean.")

    level = raw.get("log_level")
    if level is not None and (not isinstance(level, str) or level.upper() not in VALID_LOG_LEVELS):
        errors.append(f"'log_level' must be one of {sorted(VALID_LOG_LEVELS)}, got '{level}'.")

    return errors


# ── Loading ─────────────────────────────────────────────────────────

def load_config(config_path: str | None = None) -> RunConfig:
    """Read and validate a run config.

    A missing file at the default location yields the defaults; a missing
    file that was asked for explicitly is an error.
    """
    path = Path(config_path or DEFAULT_CONFIG_PATH)
    if not path.exists():
        if config_path is None:
            return RunConfig()
        raise ConfigError(f"Config file not found: {path}")

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e

    errors = validate_syntactic(raw)
    if errors:
        raise ConfigError(f"Invalid config {path}", errors)

    if "log_level" in raw:
        raw["log_level"] = raw["log_level"].upper()
    return RunConfig(**raw)
