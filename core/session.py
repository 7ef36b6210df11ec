import logging
import threading
from collections.abc import Callable, Sequence
from core.journey import JourneyAssembler, ProgressSink
from core.models import BatchOutcome, Journey
from core.statistics import JourneyStatisticsEngine

logger = logging.getLogger(__name__)


class JourneySession:
    """Application state owning the current journey

    Batches are numbered as they start. Only the most recently started batch
    may commit, so a slow stale batch can never overwrite a newer journey.
    """

    def __init__(self, assembler: JourneyAssembler | None = None, stats_engine: JourneyStatisticsEngine | None = None):
        self.assembler = assembler or JourneyAssembler()
        self.stats_engine = stats_engine or JourneyStatisticsEngine()
        self.journey = Journey()
        self.statistics = self.stats_engine.compute(self.journey)
        self.last_outcome: BatchOutcome | None = None
        self._latest_batch = 0
        self._committed_batch = 0
        self._lock = threading.Lock()

    @property
    def committed_batch(self) -> int:
        return self._committed_batch

    def begin_batch(self) -> int:
        with self._lock:
            self._latest_batch += 1
            return self._latest_batch

    def is_current(self, batch_id: int) -> bool:
        return batch_id == self._latest_batch

    def commit(self, batch_id: int, outcome: BatchOutcome) -> bool:
        """Replace the journey with a finished batch unless a newer batch has started"""
        with self._lock:
            if batch_id != self._latest_batch or outcome.cancelled:
                logger.info(f"Discarding result of stale batch {batch_id} (latest is {self._latest_batch})")
                return False

            self.journey = outcome.journey
            self.statistics = self.stats_engine.compute(outcome.journey)
            self.last_outcome = outcome
            self._committed_batch = batch_id

        if outcome.is_empty:
            logger.warning("No photos with location data found")
        else:
            logger.info(f"Found {outcome.accepted} photos with location data")
        return True

    def process(
        self,
        sources: Sequence,
        extractor,
        time_source: Callable,
        progress: ProgressSink | None = None,
    ) -> tuple[int, BatchOutcome, bool]:
        """
        Run one upload batch end to end

        Returns:
            tuple: (batch_id, outcome, committed)
        """
        batch_id = self.begin_batch()
        logger.info(f"Starting batch {batch_id} with {len(sources)} photos")

        outcome = self.assembler.assemble_sources(
            sources,
            extractor,
            time_source,
            progress=progress,
            should_continue=lambda: self.is_current(batch_id),
        )
        return batch_id, outcome, self.commit(batch_id, outcome)
