"""Bounded, most-recent-first history of analysis results."""

from __future__ import annotations

import json
import logging
from typing import Callable, Iterator, Protocol

from .config import HISTORY_KEY, HISTORY_LIMIT
from .models import AnalysisResult

logger = logging.getLogger(__name__)


class Storage(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...


class HistoryStore:
    """Past results, newest first, persisted as one JSON snapshot.

    Every mutation rewrites the whole snapshot in *storage* under *key*.
    """

    def __init__(
        self,
        storage: Storage,
        *,
        key: str = HISTORY_KEY,
        limit: int = HISTORY_LIMIT,
    ) -> None:
        self._storage = storage
        self._key = key
        self._limit = limit
        self._entries: list[AnalysisResult] = []

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def entries(self) -> list[AnalysisResult]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> AnalysisResult:
        return self._entries[index]

    def __iter__(self) -> Iterator[AnalysisResult]:
        return iter(list(self._entries))

    def load(self) -> list[AnalysisResult]:
        """Restore entries from storage; anything unreadable yields empty."""
        self._entries = []
        raw = self._storage.get_item(self._key)
        if not raw:
            return self.entries

        try:
            items = json.loads(raw)
            if not isinstance(items, list):
                raise ValueError(f"expected a list, got {type(items).__name__}")
            entries = [AnalysisResult.from_dict(item) for item in items]
        except (ValueError, TypeError, AttributeError, OverflowError, OSError):
            logger.warning("failed to parse stored history, starting empty", exc_info=True)
            return self.entries

        self._entries = entries[: self._limit]
        logger.debug("loaded %d history entries", len(self._entries))
        return self.entries

    def append(self, result: AnalysisResult) -> None:
        """Put *result* first, dropping the oldest entries beyond the limit."""
        self._entries = [result, *self._entries][: self._limit]
        self._persist()

    def remove(self, index: int) -> AnalysisResult:
        if not 0 <= index < len(self._entries):
            raise IndexError(f"history index out of range: {index}")
        removed = self._entries.pop(index)
        self._persist()
        return removed

    def clear(self, confirm: Callable[[], bool]) -> bool:
        """Empty the history if *confirm* returns true."""
        if not confirm():
            return False
        self._entries = []
        self._persist()
        return True

    def _persist(self) -> None:
        snapshot = json.dumps(
            [e.to_dict() for e in self._entries], ensure_ascii=False
        )
        self._storage.set_item(self._key, snapshot)
