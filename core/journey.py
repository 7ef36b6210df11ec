import logging
from collections.abc import Callable, Iterable, Sequence
from core.models import BatchOutcome, Journey, SkippedItem, SkipReason
from core.records import PhotoRecordBuilder
from datetime import datetime

logger = logging.getLogger(__name__)

ProgressSink = Callable[[float, str], None]


class JourneyAssembler:
    """Assemble an upload batch into a chronologically ordered Journey

    Each entry is evaluated on its own; a failure on one entry is recorded as a
    skipped item and never aborts the batch. The journey is only built once the
    whole batch has been processed.
    """

    def __init__(self, builder: PhotoRecordBuilder | None = None):
        self.builder = builder or PhotoRecordBuilder()

    def assemble(self, batch: Iterable[tuple], progress: ProgressSink | None = None) -> BatchOutcome:
        """
        Assemble pre-extracted entries

        Args:
            batch: Iterable of (record, fallback_modified_time, source_ref)
            progress: Optional sink called with (percent, message) after each entry

        Returns:
            BatchOutcome: Ordered journey plus accepted/skipped diagnostics
        """
        entries = list(batch)
        total = len(entries)
        accepted = []
        skipped = []

        for index, (record, fallback_modified_time, source_ref) in enumerate(entries):
            self._evaluate_entry(record, fallback_modified_time, source_ref, accepted, skipped)
            self._report(progress, index + 1, total)

        return self._finish(accepted, skipped, total)

    def assemble_sources(
        self,
        sources: Sequence,
        extractor,
        time_source: Callable[[object], datetime],
        progress: ProgressSink | None = None,
        should_continue: Callable[[], bool] | None = None,
    ) -> BatchOutcome:
        """
        Extract metadata for each source sequentially, then assemble

        Args:
            sources: Photo handles (paths, uploads) in submission order
            extractor: Object with extract(source) -> metadata mapping
            time_source: Callable returning the fallback modified time of a source
            progress: Optional sink called with (percent, message) after each source
            should_continue: Checked before each source; False stops the batch early

        Returns:
            BatchOutcome: Ordered journey plus accepted/skipped diagnostics
        """
        total = len(sources)
        accepted = []
        skipped = []

        for index, source in enumerate(sources):
            if should_continue is not None and not should_continue():
                logger.info(f"Batch superseded after {index}/{total} photos - stopping")
                outcome = self._finish(accepted, skipped, total)
                outcome.cancelled = True
                return outcome

            try:
                record = extractor.extract(source)
                fallback_modified_time = time_source(source)
            except Exception as e:
                logger.warning(f"Could not process {source}: {e}")
                skipped.append(SkippedItem(source, SkipReason.EXTRACTION_FAILED, str(e)))
            else:
                self._evaluate_entry(record, fallback_modified_time, source, accepted, skipped)

            self._report(progress, index + 1, total)

        return self._finish(accepted, skipped, total)

    def _evaluate_entry(self, record, fallback_modified_time, source_ref, accepted: list, skipped: list) -> None:
        try:
            journey_point, reason = self.builder.evaluate(record, fallback_modified_time, source_ref)
        except Exception as e:
            logger.warning(f"Could not evaluate metadata for {source_ref}: {e}")
            skipped.append(SkippedItem(source_ref, SkipReason.EXTRACTION_FAILED, str(e)))
            return

        if journey_point is None:
            logger.debug(f"Skipping {source_ref}: {reason.value}")
            skipped.append(SkippedItem(source_ref, reason))
        else:
            accepted.append(journey_point)

    def _report(self, progress: ProgressSink | None, processed: int, total: int) -> None:
        if progress is None:
            return
        try:
            progress(processed / total * 100, f"Processed {processed} of {total} photos")
        except Exception as e:
            logger.warning(f"Progress callback failed: {e}")

    def _finish(self, accepted: list, skipped: list, total: int) -> BatchOutcome:
        # sorted() is stable, so equal capture times keep batch order
        ordered = sorted(accepted, key=lambda journey_point: journey_point.captured_at)
        outcome = BatchOutcome(journey=Journey(points=tuple(ordered)), total=total, skipped=skipped)

        logger.info(f"Accepted {outcome.accepted}/{total} photos ({outcome.skipped_count} skipped)")
        if outcome.skipped:
            logger.debug(f"Skip reasons: {outcome.skipped_by_reason()}")

        return outcome
