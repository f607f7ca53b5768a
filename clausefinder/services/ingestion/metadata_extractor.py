"""Pattern-based structural metadata detection for chunks and file names.

Industrial documents follow strong typographic conventions: standard
designations (``ISO 9001:2015``, ``EN 1090-2``), revision markers
(``Rev. B``, ``Version 2.1``), cross-references (``see 5.3.1``,
``clause 4.2``, ``§ 7``) and quantities with engineering units
(``25 mm``, ``10 bar``).  Plain regular expressions recover these reliably
enough for filtering and graph linking, deterministically and without any
model call.  Nothing here is mandatory: when a pattern is absent the
corresponding field is simply left empty.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePath

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

_STANDARD_BODIES = (
    "ISO",
    "IEC",
    "EN",
    "DIN",
    "ASTM",
    "ASME",
    "API",
    "IEEE",
    "BS",
    "NFPA",
    "ANSI",
    "UL",
    "SAE",
)

# "ISO 9001:2015", "EN 1090-2", "ASTM A106", "IEC 61508-3 2010"
_STANDARD_RE = re.compile(
    r"\b(" + "|".join(_STANDARD_BODIES) + r")[\s_-]?([A-Z]?\d+(?:[.\-]\d+)*)"
    r"(?:\s*[:\s]\s*((?:19|20)\d{2}))?\b"
)

_REVISION_RE = re.compile(
    r"\b(?i:revision|rev\.?|version|ver\.|edition)\s+([0-9][\w.]*\w|[0-9]|[A-Z])\b"
)

_CLAUSE_REFERENCE_RE = re.compile(
    r"(?:\b(?i:clause|clauses|section|sections|subclause)|§)\s*(\d{1,3}(?:\.\d{1,3})*)"
)
_SEE_REFERENCE_RE = re.compile(r"\b(?i:see|refer\s+to)\s+(\d{1,3}(?:\.\d{1,3})+)")

_UNIT_RE = re.compile(
    r"(?<![\w.])\d+(?:[.,]\d+)?\s?"
    r"(mm|cm|m|in|psi|bar|kPa|MPa|Pa|%|rpm|Hz|°C|Nm|kW|kV|V)(?!\w)"
)


@dataclass(frozen=True)
class ChunkMetadata:
    """Structural fields detected in one piece of text."""

    standard: str | None = None
    version: str | None = None
    references: tuple[str, ...] = ()
    units: tuple[str, ...] = ()


class MetadataExtractor:
    """Detects standards, revisions, references and units with regular expressions.

    All methods are pure functions of their input, so the same text always
    produces the same metadata.
    """

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def extract(self, text: str, clause_id: str | None = None) -> ChunkMetadata:
        """Return the metadata detected in *text*.

        Parameters
        ----------
        text:
            Raw chunk text.
        clause_id:
            The chunk's own clause, excluded from its references.

        Returns
        -------
        ChunkMetadata
            Detected fields; any of them may be empty.
        """
        standard, year = self.detect_standard(text)
        version = self.detect_revision(text) or year
        return ChunkMetadata(
            standard=standard,
            version=version,
            references=self.extract_references(text, clause_id),
            units=self.extract_units(text),
        )

    def detect_standard(self, text: str) -> tuple[str | None, str | None]:
        """Return ``(standard, year)`` for the first designation in *text*.

        The standard is canonicalized without spaces (``ISO 9001`` ->
        ``ISO9001``); the year is the edition after a colon, if present.
        """
        match = _STANDARD_RE.search(text)
        if match is None:
            return None, None
        return f"{match.group(1)}{match.group(2)}", match.group(3)

    def detect_revision(self, text: str) -> str | None:
        """Return the first revision/version/edition marker value in *text*."""
        match = _REVISION_RE.search(text)
        return match.group(1) if match else None

    def extract_references(self, text: str, clause_id: str | None = None) -> tuple[str, ...]:
        """Return sorted, de-duplicated reference targets found in *text*.

        Clause references become ``clause:<number>``; standard designations
        become ``standard:<designation>``.
        """
        targets: set[str] = set()
        for pattern in (_CLAUSE_REFERENCE_RE, _SEE_REFERENCE_RE):
            for match in pattern.finditer(text):
                clause = match.group(1)
                if clause != clause_id:
                    targets.add(f"clause:{clause}")
        for match in _STANDARD_RE.finditer(text):
            targets.add(f"standard:{match.group(1)}{match.group(2)}")
        return tuple(sorted(targets))

    def extract_units(self, text: str) -> tuple[str, ...]:
        """Return the sorted set of engineering unit tokens used with a number."""
        return tuple(sorted({match.group(1) for match in _UNIT_RE.finditer(text)}))

    def fingerprint_hints(self, file_name: str) -> tuple[str | None, str | None]:
        """Detect ``(standard, version)`` from a file name.

        File names tend to use underscores and mixed case
        (``iso_9001_2015_rev_b.pdf``), so the stem is upper-cased and
        underscores become spaces before matching.
        """
        stem = PurePath(file_name).stem.replace("_", " ").upper()
        standard, year = self.detect_standard(stem)
        revision = self.detect_revision(stem)
        return standard, revision or year
