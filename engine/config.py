"""Run configs: loading, validation, and building the objects they name.

A run config is a small JSON file:

    {
      "name": "baseline",
      "index": "index.db",
      "model": "cosine",
      "top_k": 10,
      "text": {"stopwords": "stopwords.txt", "stemming": true}
    }

Relative paths are resolved against the config file's directory.
"""

from __future__ import annotations

import json
from pathlib import Path

from engine.errors import ConfigError
from engine.index import IndexReader, InMemoryIndex
from engine.models import MODELS
from engine.store import IndexStore
from engine.text import TextProcessor, identity_stem, porter_stem

DEFAULT_TOP_K = 10


# ── Syntactic Validation ────────────────────────────────────────────

def validate_syntactic(config: dict) -> list[str]:
    """Check required fields and types.  Returns list of error strings."""
    errors: list[str] = []

    if not isinstance(config, dict):
        return ["Config must be a JSON object."]

    if not isinstance(config.get("name"), str) or not config["name"]:
        errors.append("'name' is required and must be a non-empty string.")
    if not isinstance(config.get("index"), str) or not config["index"]:
        errors.append("'index' is required and must be a non-empty string path.")

    model = config.get("model", "cosine")
    if model not in MODELS:
        errors.append(f"'model' must be one of {sorted(MODELS)}, got '{model}'.")

    top_k = config.get("top_k", DEFAULT_TOP_K)
    if not isinstance(top_k, int) or isinstance(top_k, bool) or top_k < 1:
        errors.append("'top_k' must be a positive integer.")

    text = config.get("text", {})
    if not isinstance(text, dict):
        errors.append("'text' must be an object if provided.")
        return errors

    stopwords = text.get("stopwords")
    if stopwords is not None and (not isinstance(stopwords, str) or not stopwords):
        errors.append("'text.stopwords' must be a non-empty string path or null.")
    if not isinstance(text.get("stemming", True), bool):
        errors.append("'text.stemming' must be a boolean.")

    return errors


# ── Semantic Validation ─────────────────────────────────────────────

def validate_paths(config: dict, base_dir: Path) -> list[str]:
    """Check that the files the config points at exist."""
    errors: list[str] = []

    index_path = base_dir / config["index"]
    if not index_path.exists():
        errors.append(f"Index not found: {index_path}")

    stopwords = config.get("text", {}).get("stopwords")
    if stopwords is not None and not (base_dir / stopwords).is_file():
        errors.append(f"Stopword list not found: {base_dir / stopwords}")

    return errors


# ── Top-level validate / load ───────────────────────────────────────

def validate_config(config_path: str) -> tuple[bool, list[str]]:
    """Run syntactic + path validation on a config file.

    Returns (passed, errors).
    """
    path = Path(config_path)
    try:
        config = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        return False, [f"Invalid JSON: {e}"]
    except FileNotFoundError:
        return False, [f"Config file not found: {config_path}"]

    syn_errors = validate_syntactic(config)
    if syn_errors:
        return False, syn_errors

    path_errors = validate_paths(config, path.parent)
    if path_errors:
        return False, path_errors

    return True, []


def load_config(config_path: str) -> dict:
    """Load and validate a config; paths in the result are absolute."""
    passed, errors = validate_config(config_path)
    if not passed:
        raise ConfigError(config_path, errors)

    base_dir = Path(config_path).parent
    config = json.loads(Path(config_path).read_text())
    text = dict(config.get("text", {}))
    if text.get("stopwords") is not None:
        text["stopwords"] = str((base_dir / text["stopwords"]).resolve())
    text.setdefault("stemming", True)

    config["text"] = text
    config["index"] = str((base_dir / config["index"]).resolve())
    config.setdefault("model", "cosine")
    config.setdefault("top_k", DEFAULT_TOP_K)
    return config


def build_processor(config: dict) -> TextProcessor:
    text = config.get("text", {})
    stemmer = porter_stem if text.get("stemming", True) else identity_stem
    return TextProcessor(text.get("stopwords"), stemmer=stemmer)


def open_index(path: str) -> IndexReader:
    """Open a JSON dump in memory, anything else as a read-only SQLite store."""
    if Path(path).suffix.lower() == ".json":
        return InMemoryIndex.from_json(path)
    return IndexStore(path, read_only=True)
