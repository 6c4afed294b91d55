"""
High Score Storage
==================

Persisted best score under a fixed key. Storage problems are never fatal:
a missing, unreadable or corrupt store reads as 0 and failed writes are
logged and dropped.
"""

from __future__ import annotations

import json
import logging
import math
import os
from pathlib import Path
from typing import Optional, Union

from chroma_rush.core.config_loader import GameConfig, get_config

logger = logging.getLogger(__name__)


class ScoreStore:
    """Interface for high score persistence."""

    def load(self) -> int:
        raise NotImplementedError

    def save(self, score: int) -> None:
        raise NotImplementedError


def _coerce_score(value) -> int:
    """Turn a stored value into a non-negative int, or 0 if it is unusable."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    try:
        score = int(value)
    except (TypeError, ValueError):
        return 0
    return max(0, score)


class MemoryScoreStore(ScoreStore):
    """In-process store for headless runs and tests."""

    def __init__(self, initial: int = 0):
        self._score = _coerce_score(initial)

    def load(self) -> int:
        return self._score

    def save(self, score: int) -> None:
        self._score = _coerce_score(score)


class JsonScoreStore(ScoreStore):
    """
    JSON file store.

    The file holds an object; the score lives under `key` so the file can
    be shared with other settings.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        key: Optional[str] = None,
        config: Optional[GameConfig] = None
    ):
        """
        Initialize JSON score store.

        Args:
            path: File location. Uses storage.path from config if None.
            key: Key inside the JSON object. Uses storage.key from config if None.
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        if path is None:
            path = config.storage.path
        self._path = Path(os.path.expanduser(str(path)))
        self._key = key if key is not None else config.storage.key

    @property
    def path(self) -> Path:
        return self._path

    @property
    def key(self) -> str:
        return self._key

    def _read_all(self) -> dict:
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable score file %s: %s", self._path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring score file %s: expected an object", self._path)
            return {}
        return data

    def load(self) -> int:
        return _coerce_score(self._read_all().get(self._key, 0))

    def save(self, score: int) -> None:
        data = self._read_all()
        data[self._key] = _coerce_score(score)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.warning("Could not save high score to %s: %s", self._path, e)
