"""Clause-aware chunking with heading detection and bounded windows.

Turns the extracted pages of one document into
:class:`~clausefinder.models.chunk.Chunk` objects sized for retrieval
(at most ``max_chars`` characters each).

The chunking strategy has three design goals:

1. **Clause-aligned** -- Numbered headings (``4.2.1 Control of records``,
   ``Annex B Test methods``) always start a new chunk, and the heading trail
   above every chunk is recorded as ``section_path`` with the innermost
   number as ``clause_id``.  A hit can therefore be cited as "ISO9001,
   clause 4.2.1" rather than "somewhere on page 7".

2. **Paragraph-preserving** -- Between headings, whole paragraphs are packed
   into a chunk until the next one would overflow.  An oversized paragraph
   is split at sentence boundaries with an abbreviation-aware splitter, and
   only a single sentence longer than the window is cut inside, preferably
   at a space.

3. **Gap-free and deterministic** -- Every extracted word lands in a chunk
   and nothing is dropped for being short.  Only a sentence that has to be
   hard-cut repeats text: each continuation opens with the tail of the
   previous piece (``overlap_chars``) so a phrase straddling the cut stays
   findable.  Nothing depends on the clock, randomness or unordered
   iteration, so identical pages give byte-identical chunks and ids.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import structlog

from clausefinder.models.chunk import Chunk, ChunkKind, DocumentFingerprint, PageText, make_chunk_id
from clausefinder.models.options import ChunkingOptions
from clausefinder.services.ingestion.metadata_extractor import MetadataExtractor
from clausefinder.utils.text_normalizer import collapse_whitespace, normalize_text, split_sentences

logger = structlog.get_logger(logger_name=__name__)

# "4 Scope", "4.2.1 Control of records", "7.1(a) General", "A.2 Sampling"
_CLAUSE_HEADING_RE = re.compile(
    r"^\s*((?:[A-Z]|\d{1,3})(?:\.\d{1,3})+|\d{1,3})\.?(\([a-zA-Z0-9]{1,3}\))?\s+([A-Z].{0,100})$"
)
# "Annex B Test methods", "Appendix C (informative) Examples"
_ANNEX_HEADING_RE = re.compile(r"^\s*(?:Annex|Appendix|ANNEX|APPENDIX)\s+([A-Z])\b(.{0,100})$")

_HEADING_TERMINATORS = (".", ",", ";", ":")
_SECTION_SEPARATOR = " > "
_BLOCK_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class _Block:
    """One paragraph or heading line, tagged with its page."""

    text: str
    page: int
    is_heading: bool = False
    number: str | None = None


@dataclass(frozen=True)
class _Section:
    number: str
    heading: str


class ClauseChunker:
    """Splits document pages into clause-aligned chunks.

    Parameters
    ----------
    options:
        Window size controls.
    metadata_extractor:
        Detector for standards, revisions, references and units.
    """

    def __init__(
        self,
        options: ChunkingOptions | None = None,
        metadata_extractor: MetadataExtractor | None = None,
    ) -> None:
        self._options = options or ChunkingOptions()
        self._metadata = metadata_extractor or MetadataExtractor()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def chunk_document(
        self,
        fingerprint: DocumentFingerprint,
        pages: list[PageText],
    ) -> list[Chunk]:
        """Split *pages* of the document described by *fingerprint* into chunks.

        Parameters
        ----------
        fingerprint:
            Identity and provenance of the source document.
        pages:
            Extracted pages; they are processed in page-number order
            whatever order they arrive in.

        Returns
        -------
        list[Chunk]
            Chunks with contiguous ``chunk_index`` values starting at 0.
            Empty when the pages carry no text.
        """
        blocks = self._split_blocks(sorted(pages, key=lambda p: p.page))

        chunks: list[Chunk] = []
        for parts, section in self._accumulate(blocks):
            chunks.append(self._build_chunk(fingerprint, len(chunks), parts, section))

        logger.debug(
            "chunking_complete",
            document_id=fingerprint.document_id[:12],
            pages=len(pages),
            blocks=len(blocks),
            num_chunks=len(chunks),
        )
        return chunks

    # ------------------------------------------------------------------
    # Block splitting
    # ------------------------------------------------------------------

    @staticmethod
    def _match_heading(line: str) -> str | None:
        """Return the clause number if *line* is a heading, else ``None``."""
        stripped = line.strip()
        if not stripped or stripped.endswith(_HEADING_TERMINATORS):
            return None

        match = _CLAUSE_HEADING_RE.match(stripped)
        if match:
            return match.group(1) + (match.group(2) or "")

        match = _ANNEX_HEADING_RE.match(stripped)
        if match:
            return match.group(1)
        return None

    def _split_blocks(self, pages: list[PageText]) -> list[_Block]:
        """Group page lines into heading blocks and whitespace-collapsed paragraphs.

        A bare-number line such as ``1 Remove the cover`` is a procedure step,
        not a heading, when its number does not exceed the current top-level
        clause or when it continues a run of such steps.
        """
        blocks: list[_Block] = []
        top: int | None = None
        step: int | None = None
        for page in pages:
            paragraph: list[str] = []
            for line in page.text.splitlines():
                number = self._match_heading(line)
                if number is not None and number.isdigit():
                    value = int(number)
                    continues_steps = step is not None and value == step + 1
                    if continues_steps or (top is not None and value <= top):
                        step = value
                        number = None
                    else:
                        top, step = value, None
                elif number is not None:
                    head = number.split(".", 1)[0]
                    if head.isdigit():
                        top = max(top or 0, int(head))
                    step = None

                if line.strip() and number is None:
                    paragraph.append(line)
                    continue

                # Blank line or heading: the running paragraph ends here.
                self._append_paragraph(blocks, paragraph, page.page)
                paragraph = []
                if number is not None:
                    blocks.append(
                        _Block(
                            text=collapse_whitespace(line),
                            page=page.page,
                            is_heading=True,
                            number=number,
                        )
                    )
            self._append_paragraph(blocks, paragraph, page.page)
        return blocks

    @staticmethod
    def _append_paragraph(blocks: list[_Block], lines: list[str], page: int) -> None:
        text = collapse_whitespace(" ".join(lines))
        if text:
            blocks.append(_Block(text=text, page=page))

    # ------------------------------------------------------------------
    # Chunk accumulation
    # ------------------------------------------------------------------

    def _accumulate(self, blocks: list[_Block]) -> list[tuple[list[_Block], list[_Section]]]:
        """Pack blocks into windows of at most ``max_chars`` characters.

        Returns each window's pieces with a snapshot of the section stack
        that was in effect when the window opened.
        """
        max_chars = self._options.max_chars
        windows: list[tuple[list[_Block], list[_Section]]] = []
        stack: list[_Section] = []
        current: list[_Block] = []
        current_len = 0

        def flush() -> None:
            nonlocal current, current_len
            if current:
                windows.append((current, list(stack)))
            current = []
            current_len = 0

        for block in blocks:
            if block.is_heading:
                flush()
                stack = self._push_section(stack, block)

            for piece in self._fit(block):
                added = len(piece.text) + (len(_BLOCK_SEPARATOR) if current else 0)
                if current and current_len + added > max_chars:
                    flush()
                    added = len(piece.text)
                current.append(piece)
                current_len += added

        flush()
        return windows

    @staticmethod
    def _push_section(stack: list[_Section], heading: _Block) -> list[_Section]:
        """Return the section stack after entering *heading*.

        Entries that are not numeric ancestors of the new heading are popped,
        so ``5 Operation`` closes ``4.2.1`` and ``4.2`` as well as ``4``.
        """
        number = heading.number or ""
        base = number.split("(", 1)[0]
        ancestors = [
            section
            for section in stack
            if base.startswith(section.number.split("(", 1)[0] + ".")
        ]
        return [*ancestors, _Section(number=number, heading=heading.text)]

    def _fit(self, block: _Block) -> list[_Block]:
        """Return *block* itself or, if too long, sentence-aligned pieces of it."""
        if len(block.text) <= self._options.max_chars:
            return [block]
        return [
            _Block(text=text, page=block.page, is_heading=block.is_heading, number=block.number)
            for text in self._split_long(block.text)
        ]

    def _split_long(self, text: str) -> list[str]:
        """Split text longer than ``max_chars`` at sentence boundaries."""
        max_chars = self._options.max_chars
        pieces: list[str] = []
        current = ""

        for sentence in split_sentences(text):
            if len(sentence) > max_chars:
                if current:
                    pieces.append(current)
                    current = ""
                pieces.extend(self._hard_cut(sentence))
                continue
            candidate = f"{current} {sentence}" if current else sentence
            if len(candidate) > max_chars:
                pieces.append(current)
                current = sentence
            else:
                current = candidate

        if current:
            pieces.append(current)
        return pieces

    def _hard_cut(self, sentence: str) -> list[str]:
        """Cut a sentence longer than the window, preferring the last space.

        The space must lie beyond ``min_cut_ratio * max_chars``; otherwise
        the window is cut at exactly ``max_chars``.  Each continuation starts
        with up to ``overlap_chars`` of the previous piece (whole words after
        a space cut, raw characters after a mid-word cut), never more than
        half of that piece.
        """
        max_chars = self._options.max_chars
        min_cut = int(max_chars * self._options.min_cut_ratio)
        pieces: list[str] = []
        remaining = sentence

        while len(remaining) > max_chars:
            cut = remaining.rfind(" ", 0, max_chars + 1)
            if cut >= min_cut and cut > 0:
                piece = remaining[:cut].rstrip()
                rest = remaining[cut + 1 :].lstrip()
                carry = self._word_tail(piece)
                remaining = f"{carry} {rest}" if carry else rest
            else:
                piece = remaining[:max_chars]
                step = max_chars - min(self._options.overlap_chars, max_chars // 2)
                remaining = remaining[step:].lstrip()
            pieces.append(piece)

        if remaining:
            pieces.append(remaining)
        return pieces

    def _word_tail(self, piece: str) -> str:
        """Return the trailing whole words of *piece* that fit the overlap budget."""
        limit = min(self._options.overlap_chars, len(piece) // 2)
        if limit <= 0:
            return ""
        start = len(piece) - limit
        if piece[start - 1] == " ":
            return piece[start:]
        space = piece.find(" ", start)
        return piece[space + 1 :] if space != -1 else ""

    # ------------------------------------------------------------------
    # Chunk construction
    # ------------------------------------------------------------------

    def _build_chunk(
        self,
        fingerprint: DocumentFingerprint,
        chunk_index: int,
        parts: list[_Block],
        section: list[_Section],
    ) -> Chunk:
        text_raw = _BLOCK_SEPARATOR.join(part.text for part in parts)
        clause_id = section[-1].number if section else None
        metadata = self._metadata.extract(text_raw, clause_id)

        return Chunk(
            chunk_id=make_chunk_id(fingerprint.document_id, chunk_index, text_raw),
            document_id=fingerprint.document_id,
            source_path=fingerprint.source_path,
            title=fingerprint.title,
            text_raw=text_raw,
            text_normalized=normalize_text(text_raw),
            section_path=_SECTION_SEPARATOR.join(s.heading for s in section) or None,
            clause_id=clause_id,
            standard=fingerprint.standard or metadata.standard,
            version=fingerprint.version or metadata.version,
            page_start=min(part.page for part in parts),
            page_end=max(part.page for part in parts),
            chunk_index=chunk_index,
            kind=ChunkKind.HEADING if parts[0].is_heading else ChunkKind.PARAGRAPH,
            references=metadata.references,
            units=metadata.units,
        )
