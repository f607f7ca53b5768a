"""Text normalization utilities for chunk matching and identity.

This module handles three distinct normalization concerns:

1. **Matching form** -- ``normalize_text`` produces the lower-cased,
   whitespace-collapsed form stored as ``text_normalized`` on every chunk and
   used for required/blocked term checks.

2. **Layout cleanup** -- ``collapse_whitespace`` tidies extracted lines
   (non-breaking spaces, tabs, soft hyphens) without changing case, so the
   raw text stays citeable.

3. **Sentence splitting** -- ``split_sentences`` is an abbreviation-aware
   splitter used by the chunker to align windows with sentence boundaries.
   Technical documents are full of "Fig. 3", "No. 12" and "e.g." which must
   not end a sentence.
"""

from __future__ import annotations

import hashlib
import re
import unicodedata

# Abbreviations that should NOT trigger a sentence split.
_ABBREVIATIONS = (
    "approx",
    "cf",
    "e\\.g",
    "eq",
    "etc",
    "fig",
    "i\\.e",
    "incl",
    "max",
    "min",
    "no",
    "nos",
    "para",
    "ref",
    "rev",
    "sect",
    "tab",
    "vol",
    "vs",
)

_ABBREVIATION_RE = re.compile(
    r"\b(" + "|".join(_ABBREVIATIONS) + r")\.", re.IGNORECASE
)
_SENTENCE_END_RE = re.compile(r"[.!?;](?:\s|$)")
_WHITESPACE_RE = re.compile(r"\s+")
_TOKEN_RE = re.compile(r"[\w][\w.\-/]*\w|\w")


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace to single spaces, keeping case."""
    cleaned = text.replace("\u00a0", " ").replace("\u00ad", "").replace("\t", " ")
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def normalize_text(text: str) -> str:
    """Return the matching form of *text*: NFKC, lower-cased, whitespace collapsed.

    Examples
    --------
    >>> normalize_text("  Hydraulic\\u00a0PUMP   failure ")
    'hydraulic pump failure'
    """
    return collapse_whitespace(unicodedata.normalize("NFKC", text)).lower()


def tokenize(text: str) -> list[str]:
    """Split normalized text into match tokens (keeps ``4.2.1`` and ``iso-9001`` whole)."""
    return _TOKEN_RE.findall(normalize_text(text))


def content_hash(text: str) -> str:
    """Return the hex SHA-256 of *text* encoded as UTF-8."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def split_sentences(text: str) -> list[str]:
    """Split *text* at sentence boundaries while respecting abbreviations.

    Handles ``.``, ``!``, ``?`` and ``;`` followed by whitespace or
    end-of-string.  Periods after known abbreviations are masked with
    ``\\x00`` (same length, so indices stay aligned with the original text)
    before boundaries are searched.
    """
    masked = _ABBREVIATION_RE.sub(lambda m: m.group(1) + "\x00", text)

    sentences: list[str] = []
    last = 0
    for match in _SENTENCE_END_RE.finditer(masked):
        end = match.end()
        sentence = text[last:end].strip()
        if sentence:
            sentences.append(sentence)
        last = end

    remainder = text[last:].strip()
    if remainder:
        sentences.append(remainder)

    return sentences if sentences else [text.strip()]
