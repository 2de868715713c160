"""
Reconciliation outcomes and report
"""

from dataclasses import dataclass, field
from typing import Protocol

from .record import Record

LINK_RESOLVING = "link_resolving"
CONTENT_FETCHING = "content_fetching"
PARSING = "parsing"
RECONCILING = "reconciling"


@dataclass(frozen=True)
class Success:
    """A record updated from one source"""
    record: Record
    source: str

    @property
    def title(self) -> str:
        return self.record.title


@dataclass(frozen=True)
class Unavailable:
    """A (record, source) pair that could not be reconciled"""
    title: str
    reason: str
    source: str
    stage: str = LINK_RESOLVING


LookupOutcome = Success | Unavailable


@dataclass(frozen=True)
class VenueClassification:
    """A record whose venue was found in the ranking list"""
    title: str
    rank: str
    venue: str
    abbreviation: str | None = None


@dataclass(frozen=True)
class ReconciliationReport:
    """Result of one reconciliation run"""
    updated: tuple[Success, ...] = ()
    unavailable: tuple[Unavailable, ...] = ()
    classified: tuple[VenueClassification, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.updated or self.unavailable or self.classified)


@dataclass
class ReportBuilder:
    """Append-only accumulator for a ReconciliationReport"""
    outcomes: list[LookupOutcome] = field(default_factory=list)
    classified: list[VenueClassification] = field(default_factory=list)

    def add_outcome(self, outcome: LookupOutcome) -> None:
        self.outcomes.append(outcome)

    def add_classification(self, classification: VenueClassification) -> None:
        self.classified.append(classification)

    def build(self) -> ReconciliationReport:
        """
        Freeze the report

        A title that was updated from any source is dropped from the
        unavailable list.
        """
        updated = tuple(o for o in self.outcomes if isinstance(o, Success))
        updated_titles = {o.title for o in updated}
        unavailable = tuple(
            o for o in self.outcomes
            if isinstance(o, Unavailable) and o.title not in updated_titles
        )
        return ReconciliationReport(
            updated=updated,
            unavailable=unavailable,
            classified=tuple(self.classified),
        )


class ReportSink(Protocol):
    """Receiver of a finished report"""

    def show(self, report: ReconciliationReport) -> None: ...


def format_report(report: ReconciliationReport) -> str:
    """Render a report as a plain text message"""
    if report.is_empty:
        return "No records were reconciled"

    lines = []

    if report.updated:
        lines.append("Metadata updated for the following records:")
        for outcome in report.updated:
            lines.append(f"source {outcome.source} => {outcome.title}")

    if report.unavailable:
        if lines:
            lines.append("")
        lines.append(
            "The following records could not be updated, possibly due to network "
            "problems or because they are not in the online sources:"
        )
        for outcome in report.unavailable:
            lines.append(f"source {outcome.source} => [error {outcome.reason}] {outcome.title}")

    if report.classified:
        if lines:
            lines.append("")
        lines.append("Venue ranks detected for the following records:")
        for item in report.classified:
            lines.append(f"CCF-{item.rank} => {item.title}")

    return "\n".join(lines)
