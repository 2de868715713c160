"""
Test suite for venue classification and record annotation
"""

from unittest.mock import patch

from bibrank.core.record import Record
from bibrank.core.venue_index import VenueIndex
from bibrank.core.venue_matcher import (
    MatchResult,
    VenueMatcher,
    annotate,
    extract_abbreviations,
    rank_from_extra,
    strip_annotation,
    venue_of,
)


class TestExtractAbbreviations:
    """Test abbreviation candidate extraction"""

    def test_uppercase_tokens(self):
        assert extract_abbreviations("Proc. of KDD and ICML") == ["KDD", "ICML"]

    def test_token_with_year(self):
        assert extract_abbreviations("KDD 2024") == ["KDD 2024"]

    def test_parenthesized_span(self):
        """Test parenthesized spans are kept whole"""
        assert extract_abbreviations("Workshop on Learning (ICML-W)") == ["ICML", "ICML-W"]

    def test_lowercase_parenthesized_span_ignored(self):
        assert extract_abbreviations("Proceedings (online edition)") == []

    def test_order_of_appearance_without_duplicates(self):
        assert extract_abbreviations("TKDE, see TKDE (PRL)") == ["TKDE", "PRL"]

    def test_single_letters_ignored(self):
        assert extract_abbreviations("A Journal") == []


class TestVenueMatcher:
    """Test VenueMatcher strategies"""

    def test_exact_match(self, matcher):
        """Test exact match ignores case and spacing"""
        result = matcher.match("international conference on  machine learning")

        assert result == MatchResult(
            rank="A",
            matched_name="INTERNATIONAL CONFERENCE ON MACHINE LEARNING",
            url="https://dblp.org/db/conf/icml/",
        )

    def test_substring_match(self, matcher):
        """Test venue containing a full name"""
        result = matcher.match("Proceedings of the 40th International Conference on Machine Learning")

        assert result is not None
        assert result.rank == "A"
        assert result.matched_name == "INTERNATIONAL CONFERENCE ON MACHINE LEARNING"
        assert result.matched_abbreviation is None

    def test_substring_match_reverse(self, matcher):
        """Test venue contained in a full name"""
        result = matcher.match("Knowledge Discovery")

        assert result is not None
        assert result.matched_name == "KNOWLEDGE DISCOVERY AND DATA MINING"

    def test_substring_prefers_longest_name(self, matcher):
        """Test longer full names win over their prefixes"""
        result = matcher.match("Pattern Recognition Letters, vol. 12")

        assert result.rank == "C"
        assert result.matched_name == "PATTERN RECOGNITION LETTERS"

    def test_abbreviation_match(self, matcher):
        result = matcher.match("Proc. TKDE")

        assert result is not None
        assert result.rank == "A"
        assert result.matched_name == "IEEE TRANSACTIONS ON KNOWLEDGE AND DATA ENGINEERING"
        assert result.matched_abbreviation == "TKDE"

    def test_abbreviation_with_year(self, matcher):
        """Test trailing year is stripped from a candidate"""
        result = matcher.match("KDD 2024")

        assert result is not None
        assert result.rank == "A"
        assert result.matched_abbreviation == "KDD"

    def test_abbreviation_in_parentheses(self, matcher):
        result = matcher.match("Some Workshop (PRL)")

        assert result.rank == "C"
        assert result.matched_abbreviation == "PRL"

    def test_first_matching_candidate_wins(self, matcher):
        result = matcher.match("XYZ then ICML then KDD")

        assert result.matched_abbreviation == "ICML"

    def test_no_match(self, matcher):
        assert matcher.match("Journal of Obscure Studies") is None

    def test_empty_input(self, matcher):
        assert matcher.match("") is None
        assert matcher.match("   ") is None
        assert matcher.match(None) is None

    def test_internal_error_returns_none(self, matcher):
        """Test lookup failures are logged and swallowed"""
        with patch.object(matcher.index, "lookup_by_full_name", side_effect=RuntimeError("boom")):
            assert matcher.match("International Conference on Machine Learning") is None

    def test_packaged_dataset(self):
        """Test matching against the packaged CCF list"""
        matcher = VenueMatcher(VenueIndex.from_file())

        assert matcher.match("Proceedings of the 40th International Conference on Machine Learning").rank == "A"
        assert matcher.match("WSDM 2024").matched_abbreviation == "WSDM"
        assert matcher.match("WSDM 2024").rank == "B"


class TestRecordClassification:
    """Test record level classification helpers"""

    def test_venue_of_conference_prefers_conference_name(self):
        record = Record(
            type="conferencePaper",
            fields={"conferenceName": "ICML 2023", "proceedingsTitle": "Proceedings of ICML"},
        )

        assert venue_of(record) == "ICML 2023"

    def test_venue_of_conference_falls_back_to_proceedings(self):
        record = Record(type="conferencePaper", fields={"proceedingsTitle": "Proceedings of ICML"})

        assert venue_of(record) == "Proceedings of ICML"

    def test_venue_of_journal(self, journal_record):
        assert venue_of(journal_record) == "Journal of Ranking"

    def test_venue_of_other_types(self):
        record = Record(type="book", fields={"title": "A Book", "publisher": "KDD Press"})

        assert venue_of(record) == ""

    def test_classify(self, matcher):
        record = Record(type="journalArticle", fields={"publicationTitle": "IEEE TKDE"})

        result = matcher.classify(record)

        assert result.rank == "A"
        assert result.matched_abbreviation == "TKDE"

    def test_classify_without_venue(self, matcher):
        assert matcher.classify(Record(type="report", fields={"title": "ICML"})) is None


class TestAnnotate:
    """Test extra field annotation"""

    def test_annotate_empty_extra(self):
        record = Record(type="journalArticle")
        result = MatchResult(rank="A", matched_name="IEEE TKDE", url="u", matched_abbreviation="TKDE")

        assert annotate(record, result) is True
        assert record.extra == "CCF-Rank: A\nCCF-Venue: IEEE TKDE\nCCF-Abbreviation: TKDE\n"

    def test_annotate_without_abbreviation(self):
        record = Record(type="journalArticle")

        annotate(record, MatchResult(rank="B", matched_name="PATTERN RECOGNITION", url="u"))

        assert record.extra == "CCF-Rank: B\nCCF-Venue: PATTERN RECOGNITION\n"

    def test_annotate_appends_to_existing_text(self):
        record = Record(type="journalArticle", fields={"extra": "arXiv: 1234.5678"})

        annotate(record, MatchResult(rank="C", matched_name="PRL", url="u"))

        assert record.extra == "arXiv: 1234.5678\nCCF-Rank: C\nCCF-Venue: PRL\n"

    def test_annotate_is_idempotent(self):
        """Test a second annotation leaves extra untouched"""
        record = Record(type="journalArticle")
        result = MatchResult(rank="A", matched_name="ICML", url="u")

        annotate(record, result)
        first = record.extra

        assert annotate(record, MatchResult(rank="C", matched_name="PRL", url="v")) is False
        assert record.extra == first

    def test_rank_from_extra(self):
        assert rank_from_extra("note\nCCF-Rank: B\nCCF-Venue: X\n") == "B"
        assert rank_from_extra("ccf-rank:a") == "A"
        assert rank_from_extra("nothing here") is None
        assert rank_from_extra(None) is None

    def test_strip_annotation(self):
        extra = "arXiv: 1234.5678\nCCF-Rank: C\nCCF-Venue: PRL\nCCF-Abbreviation: PRL\nnote"

        assert strip_annotation(extra) == "arXiv: 1234.5678\nnote"
        assert strip_annotation("CCF-Rank: A\nCCF-Venue: ICML\n") == ""
        assert strip_annotation(None) == ""

    def test_strip_then_annotate(self):
        """Test a stripped record takes a fresh annotation"""
        record = Record(type="conferencePaper", fields={"extra": "CCF-Rank: C\nCCF-Venue: PRL\n"})

        record.extra = strip_annotation(record.extra)

        assert annotate(record, MatchResult(rank="A", matched_name="ICML", url="u")) is True
        assert record.extra == "CCF-Rank: A\nCCF-Venue: ICML\n"
