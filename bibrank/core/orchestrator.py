"""
Reconciliation orchestrator
Drives venue classification, source lookups and record merging over a batch
"""

from collections.abc import Iterable

from loguru import logger

from ..bibtex.bibtex_parser import RecordParser
from ..bibtex.fetcher import PageFetcher
from ..utils.config import Config
from ..utils.logging_config import OperationTimer, error_handler
from .errors import ParseError, ReconciliationError
from .lookup_pipeline import NotFound, SourceLookupPipeline
from .record import Record
from .record_merger import RecordMerger
from .record_store import RecordStore
from .report import (
    CONTENT_FETCHING,
    LINK_RESOLVING,
    PARSING,
    RECONCILING,
    LookupOutcome,
    ReconciliationReport,
    ReportBuilder,
    ReportSink,
    Success,
    Unavailable,
    VenueClassification,
)
from .venue_matcher import VenueMatcher, annotate, strip_annotation


class StageFailed(Exception):
    """Internal carrier of a recoverable error and the stage it happened in"""

    def __init__(self, stage: str, error: ReconciliationError, reason: str | None = None):
        self.stage = stage
        self.error = error
        self.reason = reason or str(error)
        super().__init__(self.reason)


class ReconciliationOrchestrator:
    """
    Reconcile a batch of records against the configured sources

    Records are handled one at a time and sources in configuration order.
    A failing (record, source) pair becomes an Unavailable outcome and the
    run moves on.
    """

    def __init__(
        self,
        matcher: VenueMatcher,
        store: RecordStore,
        fetcher: PageFetcher,
        parser: RecordParser,
        config: Config,
        sink: ReportSink | None = None,
        merger: RecordMerger | None = None,
    ):
        self.matcher = matcher
        self.store = store
        self.fetcher = fetcher
        self.parser = parser
        self.config = config
        self.sink = sink
        self.merger = merger or RecordMerger()
        self.pipelines = [
            SourceLookupPipeline(source, fetcher, timeout=config.fetch_timeout)
            for source in config.sources
        ]

    def reconcile(self, records: Iterable[Record]) -> ReconciliationReport:
        """
        Reconcile records

        Args:
            records: Records to reconcile, typically loaded from the store

        Returns:
            Report of updated, unavailable and venue-classified records
        """
        builder = ReportBuilder()

        with OperationTimer("reconciliation"):
            for record in records:
                self.reconcile_record(record, builder)

        report = builder.build()
        logger.info(
            f"Reconciliation finished: {len(report.updated)} updated, "
            f"{len(report.unavailable)} unavailable, {len(report.classified)} classified"
        )

        if self.sink is not None:
            self.sink.show(report)

        return report

    def reconcile_record(self, record: Record, builder: ReportBuilder) -> None:
        """Classify one record and try every source on it"""
        if record.type in self.config.excluded_types:
            logger.debug(f"Skipping {record.type} record: {record.title}")
            return

        self._classify(record, builder, save=True)

        for pipeline in self.pipelines:
            outcome = self.reconcile_with_source(record, pipeline, builder)
            builder.add_outcome(outcome)

    def reconcile_with_source(
        self,
        record: Record,
        pipeline: SourceLookupPipeline,
        builder: ReportBuilder,
    ) -> LookupOutcome:
        """
        Look a record up on one source and merge the result

        Args:
            record: Original record
            pipeline: Lookup pipeline of the source
            builder: Report accumulator for venue classifications

        Returns:
            Success or Unavailable
        """
        title = record.title
        logger.info(f"[{pipeline.name}] Looking up: {title[:60]}")

        try:
            link = self._run_stage(LINK_RESOLVING, pipeline.resolve, title)
            if isinstance(link, NotFound):
                raise StageFailed(LINK_RESOLVING, link.error, link.reason)

            content = self._run_stage(
                CONTENT_FETCHING, self.fetcher.fetch_text, link.url, self.config.fetch_timeout
            )
            candidates = self._run_stage(PARSING, self.parser.parse, content)
            if not candidates:
                raise StageFailed(PARSING, ParseError("No record parsed"))
            candidate = candidates[0]
            self._run_stage(RECONCILING, self._apply_candidate, record, candidate, builder)

        except StageFailed as failure:
            error_handler.log_error(
                failure.error, context=f"[{pipeline.name}] {failure.stage} '{title}'", source=pipeline.name
            )
            return Unavailable(
                title=title,
                reason=failure.reason,
                source=pipeline.name,
                stage=failure.stage,
            )

        logger.info(f"[{pipeline.name}] Updated: {title[:60]}")
        return Success(record=record, source=pipeline.name)

    def _run_stage(self, stage: str, func, *args):
        try:
            return func(*args)
        except ReconciliationError as e:
            raise StageFailed(stage, e) from e

    def _apply_candidate(self, record: Record, candidate: Record, builder: ReportBuilder) -> None:
        """Merge a parsed candidate into the original or a divergent record"""
        if candidate.type == record.type and candidate.title == record.title:
            self.merger.merge(record, candidate, other_priority=False)
        else:
            logger.info(
                f"Candidate differs ({candidate.type} '{candidate.title}'), "
                f"creating a new record next to '{record.title}'"
            )
            self._create_divergent(record, candidate, builder)

        self.store.save(record)

        # The parser may have imported the candidate into the store
        if candidate.id is not None:
            self.store.erase(candidate)

    def _create_divergent(self, record: Record, candidate: Record, builder: ReportBuilder) -> Record:
        new_record = self.merger.create_divergent_record(record, candidate.type)
        self.merger.merge(new_record, candidate, other_priority=True)
        self.merger.merge(new_record, record, other_priority=False)
        # The backfilled annotation describes the original's venue
        new_record.extra = strip_annotation(new_record.extra)
        self._classify(new_record, builder, save=False)

        if record.id is None:
            self.store.save(record)

        new_id = self.store.save(new_record)
        new_record.add_related(record.id)
        record.add_related(new_id)

        moved = self.store.attachments(record.id)
        for attachment_id in moved:
            self.store.reparent_attachment(attachment_id, new_id)

        record.attachments = [a for a in record.attachments if a not in moved]
        new_record.attachments.extend(moved)

        self.store.save(new_record)
        return new_record

    def _classify(self, record: Record, builder: ReportBuilder, save: bool) -> None:
        result = self.matcher.classify(record)
        if result is None:
            return

        if annotate(record, result) and save:
            try:
                self.store.save(record)
            except ReconciliationError as e:
                error_handler.log_warning(f"Venue rank not saved: {e}", context=record.title)

        builder.add_classification(VenueClassification(
            title=record.title,
            rank=result.rank,
            venue=result.matched_name,
            abbreviation=result.matched_abbreviation,
        ))
