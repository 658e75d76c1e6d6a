"""Environment-driven settings for the memory server."""

from __future__ import annotations

import os
import re
import tempfile
from collections.abc import Iterable, Mapping
from pathlib import Path

from mnemekit.eventlog import new_id

DEFAULT_DATA_DIR = "./mneme-data"
DEFAULT_PORT = 7777
DEFAULT_EMBEDDER = "fastembed"
EMBEDDER_CHOICES = ("mock", "fastembed")
MOCK_DIM = 32

_UNSIGNED = re.compile(r"\+?[0-9]+")


class ConfigError(Exception):
    """Raised when the configuration is invalid or inconsistent."""


def _env(env: Mapping[str, str] | None) -> Mapping[str, str]:
    return os.environ if env is None else env


def _parse_unsigned(value: str | None, maximum: int | None = None) -> int | None:
    if value is None or not _UNSIGNED.fullmatch(value):
        return None
    number = int(value)
    if maximum is not None and number > maximum:
        return None
    return number


def demo_mode_enabled(env: Mapping[str, str] | None = None) -> bool:
    """True when ``MNEME_DEMO`` is ``1`` or ``true`` (any case)."""
    value = _env(env).get("MNEME_DEMO")
    return value is not None and (value == "1" or value.lower() == "true")


def evolution_enabled(env: Mapping[str, str] | None = None) -> bool:
    """On unless ``MNEME_EVOLVE`` is ``off``, ``0``, ``false`` or ``no``."""
    value = _env(env).get("MNEME_EVOLVE")
    if value is None:
        return True
    return value.strip().lower() not in {"off", "0", "false", "no"}


def procedural_enabled(env: Mapping[str, str] | None = None) -> bool:
    """Off unless ``MNEME_PROCEDURAL`` is ``on``, ``1``, ``true`` or ``yes``."""
    value = _env(env).get("MNEME_PROCEDURAL")
    if value is None:
        return False
    return value.strip().lower() in {"on", "1", "true", "yes"}


def llm_backend_name(env: Mapping[str, str] | None = None) -> str:
    """Label of the LLM backend selected by ``MNEME_EVOLVE_LLM``."""
    value = _env(env).get("MNEME_EVOLVE_LLM", "")
    return "ollama" if value.lower() == "ollama" else "demo"


def embedder_choice(env: Mapping[str, str] | None = None) -> str:
    """The embedder named by ``MNEME_EMBEDDER``, lower-cased and validated."""
    choice = _env(env).get("MNEME_EMBEDDER", DEFAULT_EMBEDDER).lower()
    if choice not in EMBEDDER_CHOICES:
        raise ConfigError(
            f"unknown MNEME_EMBEDDER value {choice!r}; expected 'mock' or 'fastembed'"
        )
    return choice


def server_port(env: Mapping[str, str] | None = None) -> int:
    """Port from ``MNEME_PORT``; falls back to the default when unset or invalid."""
    port = _parse_unsigned(_env(env).get("MNEME_PORT"), maximum=0xFFFF)
    return DEFAULT_PORT if port is None else port


def procedural_min_batch(
    env: Mapping[str, str] | None = None, demo_mode: bool = False
) -> int:
    """Outcome batch size that triggers a compile pass."""
    batch = _parse_unsigned(_env(env).get("MNEME_PROCEDURAL_MIN_BATCH"))
    if batch is None:
        return 4 if demo_mode else 32
    return batch


def data_dir(env: Mapping[str, str] | None = None, demo_mode: bool = False) -> Path:
    """Where the event log lives: a fresh temp directory in demo mode."""
    if demo_mode:
        return Path(tempfile.gettempdir()) / f"mneme-demo-{new_id()}"
    return Path(_env(env).get("MNEME_DATA", DEFAULT_DATA_DIR))


def verify_embedder_consistency(recorded_model_ids: Iterable[str], current: str) -> None:
    """Refuse to proceed if any recorded embedding came from another model."""
    for model_id in recorded_model_ids:
        if model_id != current:
            raise ConfigError(
                f"embedder mismatch: the log contains embeddings produced by "
                f"{model_id!r} but the configured embedder is {current!r}. "
                "Either set MNEME_EMBEDDER to match the recorded model, "
                "or clear MNEME_DATA to start fresh."
            )