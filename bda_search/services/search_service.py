# bda_search/services/search_service.py
from __future__ import annotations

import datetime
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from ..utils import data_loader as dl
from ..utils.validators import ensure_dataset
from .ranking_service import IndexedEntry, RankingStrategy, build_index, get_strategy

logger = logging.getLogger(__name__)


class FoodSearchEngine:
    """
    Owns the loaded food dataset, its token index and load metadata.

    States:
      EMPTY  -> load() -> LOADED
      LOADED -> reset() -> EMPTY

    load() is at-most-once while LOADED: later calls (also from other
    threads while a load is running) get the same cached dataset.
    search() and get_meta() fail with NotLoadedError while EMPTY.
    """

    def __init__(
        self,
        strategy: Union[str, RankingStrategy] = "containment",
        source: Optional[Union[str, Path]] = None,
    ) -> None:
        self.strategy: RankingStrategy = (
            strategy if isinstance(strategy, RankingStrategy) else get_strategy(strategy)
        )
        self.default_source = str(source) if source is not None else str(dl.default_source())
        self._lock = threading.Lock()
        self._records: Optional[Tuple[dl.FoodRecord, ...]] = None
        self._index: Optional[Tuple[IndexedEntry, ...]] = None
        self._meta: Optional[Dict[str, Any]] = None

    # ---------- public API ----------

    @property
    def is_loaded(self) -> bool:
        return self._records is not None

    def load(
        self,
        source: Optional[Union[str, Path]] = None,
        raw_text: Optional[str] = None,
        logger: Optional[Callable[[str], None]] = None,
    ) -> Tuple[dl.FoodRecord, ...]:
        """
        Parse, validate and index the dataset, or return the cached one.

        raw_text, when given, is used instead of reading `source`; `source`
        is then only recorded as the dataset's identifier.
        Raises DatasetUnavailableError / DatasetFormatError; on failure
        nothing is cached.
        """
        if self._records is not None:
            return self._records

        with self._lock:
            if self._records is not None:
                return self._records

            src = str(source) if source is not None else self.default_source
            text = raw_text if raw_text is not None else dl.read_source(src)
            size, digest = dl.content_digest(text)
            parsed = ensure_dataset(dl.parse_json(text, src), src)

            records = tuple(dl.FoodRecord.from_dict(item) for item in parsed)
            index = build_index(records)
            meta = {
                "source": src,
                "items": len(records),
                "bytes": size,
                "hash": digest,
                "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            }

            self._index = index
            self._meta = meta
            self._records = records

        self._log_load(meta, logger)
        return records

    def get_meta(self) -> Dict[str, Any]:
        if self._meta is None:
            raise dl.NotLoadedError("Dataset not loaded: call load() first.")
        return dict(self._meta)

    def search(
        self,
        query: Any,
        limit: Optional[int] = None,
        strategy: Optional[Union[str, RankingStrategy]] = None,
    ) -> List[dl.FoodRecord]:
        """
        Records matching every query token, best first.
        Empty or unmatchable queries return []; never raises for bad input.
        `strategy` overrides the engine's strategy for this call only.
        """
        results = [record for _, record in self.search_scored(query, strategy=strategy)]
        if limit is not None and limit > 0:
            results = results[:limit]
        return results

    def search_scored(
        self,
        query: Any,
        strategy: Optional[Union[str, RankingStrategy]] = None,
    ) -> List[Tuple[float, dl.FoodRecord]]:
        """Same as search() but keeps each record's score (debug/UI)."""
        records, index = self._records, self._index
        if records is None or index is None:
            raise dl.NotLoadedError("Dataset not loaded: call load() first.")

        ranker = self.strategy
        if strategy is not None:
            ranker = strategy if isinstance(strategy, RankingStrategy) else get_strategy(strategy)
        text = "" if query is None else str(query)
        return ranker.rank(text, records, index)

    def reset(self) -> None:
        """Back to EMPTY: drop dataset, index and metadata."""
        with self._lock:
            self._records = None
            self._index = None
            self._meta = None

    # ---------- internal helpers ----------

    def _log_load(self, meta: Dict[str, Any], log: Optional[Callable[[str], None]]) -> None:
        line = (
            f"[db] source={meta['source']} items={meta['items']} bytes={meta['bytes']} "
            f"hash={meta['hash']} timestamp={meta['timestamp']}"
        )
        if log is not None:
            log(line)
        else:
            logger.info(line)
