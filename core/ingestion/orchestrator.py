"""
Ingestion Orchestrator.

Drives the per-coordinate pipeline: fetch a forecast batch for each grid
coordinate, then fan out one validate-and-store task per hourly entry onto a
bounded worker pool. The coordinate loop never waits on those tasks; the
pool is drained once, after the traversal ends.

Failures never escape a loop iteration or task:
- ProviderError skips the coordinate (logged as error)
- ValidationError and StoreError drop the entry (logged as warning)
"""

import concurrent.futures
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from core.exceptions import ProviderError, StoreError, ValidationError
from core.forecast.client import OpenWeatherClient
from core.forecast.models import ForecastBatch, ForecastEntry
from core.forecast.validation import ensure_valid
from core.grid.stepper import Coordinate
from core.store.writer import GeoRecordWriter

logger = logging.getLogger(__name__)


@dataclass
class IngestionSummary:
    """
    Counters for one run. Safe to update from worker threads.

    Attributes:
        coordinates_visited: Grid coordinates processed
        fetch_failures: Coordinates whose forecast request failed
        entries_dispatched: Hourly entries handed to the worker pool
        entries_invalid: Entries dropped by validation
        entries_stored: Entries written to the store
        store_failures: Entries dropped because the write failed
    """

    coordinates_visited: int = 0
    fetch_failures: int = 0
    entries_dispatched: int = 0
    entries_invalid: int = 0
    entries_stored: int = 0
    store_failures: int = 0
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def increment(self, counter: str, amount: int = 1) -> None:
        """Atomically add amount to the named counter."""
        with self._lock:
            setattr(self, counter, getattr(self, counter) + amount)

    @property
    def entries_pending(self) -> int:
        """Dispatched entries that have not finished yet."""
        with self._lock:
            done = self.entries_invalid + self.entries_stored + self.store_failures
            return self.entries_dispatched - done

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        with self._lock:
            return {
                "coordinates_visited": self.coordinates_visited,
                "fetch_failures": self.fetch_failures,
                "entries_dispatched": self.entries_dispatched,
                "entries_invalid": self.entries_invalid,
                "entries_stored": self.entries_stored,
                "store_failures": self.store_failures,
            }


class IngestionOrchestrator:
    """
    Runs the fetch, fan-out, validate, store pipeline over a coordinate sequence.

    Args:
        client: Forecast provider client
        writer: Geo record writer
        max_workers: Upper bound on concurrent entry tasks
        wait_for_tasks: Drain in-flight entry tasks before run() returns.
            When False, run() returns as soon as the traversal ends and
            unfinished writes complete in the background.
    """

    def __init__(
        self,
        client: OpenWeatherClient,
        writer: GeoRecordWriter,
        max_workers: int = 10,
        wait_for_tasks: bool = True,
    ):
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.client = client
        self.writer = writer
        self.max_workers = max_workers
        self.wait_for_tasks = wait_for_tasks

    def run(self, coordinates: Iterable[Coordinate]) -> IngestionSummary:
        """
        Ingest forecasts for every coordinate in the sequence.

        Args:
            coordinates: Coordinates to visit, typically a GridWalker

        Returns:
            Run summary. Complete when wait_for_tasks is set; otherwise
            entry counters may still be moving.
        """
        summary = IngestionSummary()
        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix="gridload-entry",
        )

        logger.info("Starting loading process")
        try:
            for coordinate in coordinates:
                summary.increment("coordinates_visited")
                self.ingest_coordinate(coordinate, executor, summary)
        finally:
            executor.shutdown(wait=self.wait_for_tasks)

        logger.info(f"Loading process finished: {summary.to_dict()}")
        return summary

    def ingest_coordinate(
        self,
        coordinate: Coordinate,
        executor: concurrent.futures.Executor,
        summary: IngestionSummary,
    ) -> List[concurrent.futures.Future]:
        """
        Fetch one coordinate's batch and dispatch its entries.

        Returns:
            Futures for the dispatched entry tasks (empty if the fetch failed)
        """
        logger.info(f"Retrieving hourly weather for {coordinate.lat}, {coordinate.lon}")
        try:
            batch = self.client.fetch_forecast(coordinate.lat, coordinate.lon)
        except ProviderError as e:
            logger.error(f"{e} lat={coordinate.lat} lon={coordinate.lon}")
            summary.increment("fetch_failures")
            return []

        return self.dispatch_batch(batch, executor, summary)

    def dispatch_batch(
        self,
        batch: ForecastBatch,
        executor: concurrent.futures.Executor,
        summary: Optional[IngestionSummary] = None,
    ) -> List[concurrent.futures.Future]:
        """Submit one entry task per hourly entry without waiting on them."""
        futures = []
        for entry in batch.hourly:
            futures.append(
                executor.submit(self.process_entry, entry, batch.lat, batch.lon, summary)
            )
        if summary is not None:
            summary.increment("entries_dispatched", len(futures))
        return futures

    def process_entry(
        self,
        entry: ForecastEntry,
        lat: float,
        lon: float,
        summary: Optional[IngestionSummary] = None,
    ) -> bool:
        """
        Validate and store a single entry.

        Returns:
            True if the entry was written, False if it was dropped
        """
        coordinate = f"{lat},{lon}"

        try:
            ensure_valid(entry)
        except ValidationError as e:
            logger.warning(
                f"Invalid hourly data: coordinate={coordinate} "
                f"epoch={entry.timestamp} error={e}"
            )
            self._count(summary, "entries_invalid")
            return False

        try:
            self.writer.write(entry, lat, lon)
        except StoreError as e:
            logger.warning(
                f"Error inserting weather data: coordinate={coordinate} "
                f"epoch={entry.timestamp} error={e}"
            )
            self._count(summary, "store_failures")
            return False
        except Exception as e:
            logger.error(
                f"Unexpected error inserting weather data: coordinate={coordinate} "
                f"epoch={entry.timestamp} error={type(e).__name__}: {e}"
            )
            self._count(summary, "store_failures")
            return False

        self._count(summary, "entries_stored")
        return True

    @staticmethod
    def _count(summary: Optional[IngestionSummary], counter: str) -> None:
        if summary is not None:
            summary.increment(counter)
