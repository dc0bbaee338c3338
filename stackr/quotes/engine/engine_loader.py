from __future__ import annotations

import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from stackr.core.logging_config import logger

from .quote_engine import QuoteEngine, load_ruleset_file
from .tables import load_tables, table_paths


@dataclass(frozen=True)
class LoadedEngine:
    engine: QuoteEngine
    mtimes: Tuple[int, ...]


class EngineLoader:
    """
    Hot reload of pricing tables + rule set from disk (thread-safe).

    - Keeps last known-good engine active
    - On each get(): checks mtime_ns of every watched file; if any changed -> reload + validate
    - If reload fails: logs error and keeps old active engine
    """

    def __init__(
        self,
        ruleset_path: Path | str,
        tables_dir: Path | str,
        **engine_kwargs: Any,
    ):
        self.ruleset_path = Path(ruleset_path)
        self.tables_dir = Path(tables_dir)
        self.engine_kwargs: Dict[str, Any] = dict(engine_kwargs)
        self._lock = threading.Lock()
        self._loaded: Optional[LoadedEngine] = None

        # eager initial load (fail-fast if missing or invalid)
        self._loaded = self._load_from_disk_or_raise()

    def watched_paths(self) -> Tuple[Path, ...]:
        return (self.ruleset_path, *table_paths(self.tables_dir).values())

    def get(self) -> QuoteEngine:
        """
        Returns the current active (last-known-good) engine.
        Performs cheap mtime check and reloads if needed.
        """
        try:
            current = self._stat_mtimes()
        except FileNotFoundError as e:
            if self._loaded is None:
                raise
            logger.error("tables_reload_failed", error=repr(e), keeping="previous")
            return self._loaded.engine

        loaded = self._loaded
        if loaded is not None and current == loaded.mtimes:
            return loaded.engine

        # Changed -> reload under lock
        with self._lock:
            loaded = self._loaded
            # double-check after acquiring lock
            try:
                current = self._stat_mtimes()
            except FileNotFoundError as e:
                if loaded is None:
                    raise
                logger.error("tables_reload_failed", error=repr(e), keeping="previous")
                return loaded.engine

            if loaded is not None and current == loaded.mtimes:
                return loaded.engine

            try:
                new_loaded = self._load_from_disk_or_raise(expected_mtimes=current)
            except Exception as e:
                # invalid YAML / schema / cross validation -> keep old active
                if loaded is None:
                    raise
                logger.error("tables_reload_failed", error=repr(e), keeping="previous")
                return loaded.engine

            self._loaded = new_loaded
            logger.info(
                "tables_reloaded",
                ruleset=new_loaded.engine.ruleset.rule_set_version,
                tables=new_loaded.engine.tables.version,
            )
            return new_loaded.engine

    # -----------------
    # internals
    # -----------------

    def _stat_mtimes(self) -> Tuple[int, ...]:
        return tuple(os.stat(p).st_mtime_ns for p in self.watched_paths())

    def _load_from_disk_or_raise(
        self, expected_mtimes: Optional[Tuple[int, ...]] = None
    ) -> LoadedEngine:
        if expected_mtimes is None:
            expected_mtimes = self._stat_mtimes()

        engine = QuoteEngine(
            load_tables(self.tables_dir),
            load_ruleset_file(self.ruleset_path),
            **self.engine_kwargs,
        )
        return LoadedEngine(engine=engine, mtimes=expected_mtimes)
