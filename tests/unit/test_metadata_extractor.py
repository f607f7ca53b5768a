"""Unit tests for MetadataExtractor: standards, revisions, references and units."""

from __future__ import annotations

import pytest

from clausefinder.services.ingestion.metadata_extractor import ChunkMetadata, MetadataExtractor


@pytest.fixture
def extractor() -> MetadataExtractor:
    return MetadataExtractor()


class TestDetectStandard:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Complies with ISO 9001:2015 requirements", ("ISO9001", "2015")),
            ("Execution class per EN 1090-2", ("EN1090-2", None)),
            ("Seamless pipe to ASTM A106", ("ASTMA106", None)),
            ("Functional safety, IEC 61508-3", ("IEC61508-3", None)),
        ],
    )
    def test_designations(
        self, extractor: MetadataExtractor, text: str, expected: tuple[str, str | None]
    ) -> None:
        assert extractor.detect_standard(text) == expected

    def test_no_standard(self, extractor: MetadataExtractor) -> None:
        assert extractor.detect_standard("General maintenance notes") == (None, None)


class TestDetectRevision:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Rev. B issued for construction", "B"),
            ("Version 2.1 of the manual", "2.1"),
            ("Third edition 3", "3"),
            ("No revision marker here", None),
        ],
    )
    def test_markers(self, extractor: MetadataExtractor, text: str, expected: str | None) -> None:
        assert extractor.detect_revision(text) == expected


class TestReferences:
    def test_clause_and_standard_references(self, extractor: MetadataExtractor) -> None:
        text = "See 5.3.1 and clause 4.2; also § 7 of ISO 14001."
        assert extractor.extract_references(text, clause_id="4.2") == (
            "clause:5.3.1",
            "clause:7",
            "standard:ISO14001",
        )

    def test_deduplicated(self, extractor: MetadataExtractor) -> None:
        text = "As in clause 6.1, and again clause 6.1."
        assert extractor.extract_references(text) == ("clause:6.1",)


class TestUnits:
    def test_units_with_numbers(self, extractor: MetadataExtractor) -> None:
        text = "Tighten to 25 Nm at 10 bar and 20 °C; gap 0.5mm"
        assert extractor.extract_units(text) == ("Nm", "bar", "mm", "°C")

    def test_bare_unit_words_ignored(self, extractor: MetadataExtractor) -> None:
        assert extractor.extract_units("Measure in mm and report in bar") == ()


class TestExtract:
    def test_combined(self, extractor: MetadataExtractor) -> None:
        meta = extractor.extract("Per ISO 9001:2015 clause 8.5, keep 40 mm clearance.", "8.4")
        assert meta == ChunkMetadata(
            standard="ISO9001",
            version="2015",
            references=("clause:8.5", "standard:ISO9001"),
            units=("mm",),
        )

    def test_empty_text(self, extractor: MetadataExtractor) -> None:
        assert extractor.extract("") == ChunkMetadata()


class TestFingerprintHints:
    def test_standard_and_revision_from_file_name(self, extractor: MetadataExtractor) -> None:
        assert extractor.fingerprint_hints("iso_9001_2015_rev_b.pdf") == ("ISO9001", "B")

    def test_year_used_when_no_revision(self, extractor: MetadataExtractor) -> None:
        assert extractor.fingerprint_hints("ISO9001_2015.pdf") == ("ISO9001", "2015")

    def test_plain_name(self, extractor: MetadataExtractor) -> None:
        assert extractor.fingerprint_hints("maintenance_manual.pdf") == (None, None)
