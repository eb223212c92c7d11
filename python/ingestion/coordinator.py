"""
Fan-out coordinator

Runs the four list orchestrators concurrently on a thread pool, waits for
every one of them to settle and reports a combined result. Each list writes
its own partition in its own transaction, so one list failing never affects
the others.
"""

import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Callable, List, Optional, Sequence

from config_manager import ConfigManager
from database.models import ListSource, SyncSource, SyncStatus
from database.store import SanctionsStore
from ingestion.base import LoggerLike
from ingestion.orchestrator import SyncOrchestrator, build_orchestrator
from ingestion.records import AggregateSyncResult, SyncResult
from ingestion.registry import FAN_OUT_ORDER, get_definition

logger = logging.getLogger(__name__)

ALL_TRIGGERED_MESSAGE = "All sync processes triggered. See details for status."

OrchestratorFactory = Callable[[ListSource, threading.Event], SyncOrchestrator]


class FanOutCoordinator:
    """Concurrent sync of every list plus the ALL history entry"""

    def __init__(
        self,
        store: SanctionsStore,
        orchestrator_factory: Optional[OrchestratorFactory] = None,
        config: Optional[ConfigManager] = None,
        max_workers: Optional[int] = None,
        logger: Optional[LoggerLike] = None,
        sources: Sequence[ListSource] = FAN_OUT_ORDER
    ):
        """Initialize coordinator

        Args:
            store: Store shared by all orchestrators
            orchestrator_factory: Builds an orchestrator for (source, cancel_event);
                defaults to the configured adapters
            config: Configuration for the default factory and worker count
            max_workers: Thread pool size (defaults to sync.max_workers)
            logger: Logger injected into every orchestrator
            sources: Lists to run, in detail-line order
        """
        self.store = store
        self.sources = tuple(sources)
        self.log = logger or logging.getLogger(__name__)
        if max_workers is None:
            max_workers = config.sync.max_workers if config else len(self.sources)
        self.max_workers = max(1, max_workers)
        self._factory = orchestrator_factory or self._default_factory(store, config, logger)

    @staticmethod
    def _default_factory(
        store: SanctionsStore,
        config: Optional[ConfigManager],
        log: Optional[LoggerLike]
    ) -> OrchestratorFactory:
        def factory(source: ListSource, cancel_event: threading.Event) -> SyncOrchestrator:
            return build_orchestrator(source, store, config=config, logger=log, cancel_event=cancel_event)
        return factory

    def _run_one(self, source: ListSource, cancel_event: threading.Event) -> SyncResult:
        return self._factory(source, cancel_event).run()

    def run_source(self, source: ListSource) -> SyncResult:
        """Run a single list synchronously (CLI and single-list endpoint)"""
        return self._run_one(ListSource(source), threading.Event())

    async def run_all(self) -> AggregateSyncResult:
        """Sync every list concurrently and aggregate the outcomes

        If the awaiting task is cancelled, the shared cancel event is set so
        in-flight lists roll back before committing, and CancelledError is
        re-raised.
        """
        cancel_event = threading.Event()
        loop = asyncio.get_running_loop()
        executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="watchlist-sync")

        self.log.info(f"Starting sync of {len(self.sources)} lists ({self.max_workers} workers)")
        try:
            futures = [
                loop.run_in_executor(executor, partial(self._run_one, source, cancel_event))
                for source in self.sources
            ]
            try:
                outcomes = await asyncio.gather(*futures, return_exceptions=True)
            except asyncio.CancelledError:
                self.log.warning("Sync of all lists cancelled, signalling workers")
                cancel_event.set()
                raise
        finally:
            executor.shutdown(wait=False)

        return self._aggregate(outcomes)

    def run_all_blocking(self) -> AggregateSyncResult:
        """run_all() for callers without an event loop"""
        return asyncio.run(self.run_all())

    def _aggregate(self, outcomes: List[object]) -> AggregateSyncResult:
        details: List[str] = []
        success = True
        total = 0

        for source, outcome in zip(self.sources, outcomes):
            label = get_definition(source).label
            if isinstance(outcome, BaseException):
                success = False
                details.append(f"{label}: Failed to trigger sync. Reason: {outcome}")
                self.log.error(f"✗ {label} sync did not complete: {outcome!r}")
            else:
                success = success and outcome.success
                total += outcome.records_affected
                details.append(f"{label}: {outcome.message}")

        self.store.append_sync_history(
            SyncSource.ALL,
            SyncStatus.SUCCESS if success else SyncStatus.FAILURE,
            "; ".join(details),
            records_affected=total,
        )

        status = "✓" if success else "✗"
        self.log.info(f"{status} All lists processed: {total} records")
        return AggregateSyncResult(
            success=success,
            message=ALL_TRIGGERED_MESSAGE,
            details=details,
            records_affected=total,
        )
