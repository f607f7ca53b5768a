"""Orchestrator for the best-effort document ingestion pipeline.

Pipeline stages per file: **read -> extract -> chunk -> identity check ->
embed -> store**.

The :class:`IngestionService` coordinates its collaborators (extraction
service, chunker, embedding provider and the keyword, vector and graph
indexes) without any of them knowing about each other.  All dependencies are
injected via the constructor, so a test can hand it in-memory backends and a
deployment can hand it networked ones.

Failure isolation is the central property: every error raised while one file
is processed is caught at that file's boundary, classified, and recorded in
the :class:`~clausefinder.models.ingestion.IngestionReport`.  The batch always
runs to completion.  Store writes are independent of each other; a failed
write to one store is reported as a
:class:`~clausefinder.models.ingestion.StoreFailure` and does not prevent the
other two.
"""

from __future__ import annotations

import asyncio
import hashlib
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from clausefinder.models.chunk import Chunk, DocumentFingerprint, make_document_id
from clausefinder.models.ingestion import (
    IngestionReport,
    IngestionRun,
    IngestionStage,
    SkippedFile,
    StoreFailure,
)
from clausefinder.models.options import IngestionOptions
from clausefinder.services.ingestion.chunker import ClauseChunker
from clausefinder.services.ingestion.metadata_extractor import MetadataExtractor
from clausefinder.utils.concurrency import throttled_gather
from clausefinder.utils.errors import (
    ChunkIdentityError,
    ChunkingError,
    IngestionError,
    UnreadableFileError,
)

if TYPE_CHECKING:
    from clausefinder.interfaces.embedding_provider import IEmbeddingProvider
    from clausefinder.interfaces.graph_index import IGraphIndex
    from clausefinder.interfaces.keyword_index import IKeywordIndex
    from clausefinder.interfaces.vector_index import IVectorIndex
    from clausefinder.services.extraction_service import PageExtractionService

logger = structlog.get_logger(logger_name=__name__)

_IDENTITY_CONFLICT = "chunk identity conflict"
_UNEXPECTED_ERROR = "unexpected error"


def discover_files(root: Path, extensions: tuple[str, ...] = (".pdf",)) -> list[Path]:
    """Return every file under *root* whose suffix is in *extensions*.

    Matching is case-insensitive (``.PDF`` counts as ``.pdf``); the walk is
    recursive and the result is sorted so runs are reproducible.
    """
    wanted = {ext.lower() for ext in extensions}
    return sorted(
        path for path in root.rglob("*") if path.is_file() and path.suffix.lower() in wanted
    )


@dataclass
class _FileOutcome:
    report: IngestionReport
    chunks: list[Chunk] = field(default_factory=list)


class IngestionService:
    """Orchestrates ingestion of a folder (or a single file) into the three stores.

    Parameters
    ----------
    extraction:
        Page extraction with OCR fallback.
    chunker:
        Splits extracted pages into chunks.
    embedding_provider:
        Embeds chunk text for the vector store.
    keyword_index, vector_index, graph_index:
        Store adapters; each receives every successfully chunked file.
    options:
        Discovery and concurrency settings.
    metadata_extractor:
        Used to derive standard/version hints from file names.
    """

    def __init__(
        self,
        extraction: PageExtractionService,
        chunker: ClauseChunker,
        embedding_provider: IEmbeddingProvider,
        keyword_index: IKeywordIndex,
        vector_index: IVectorIndex,
        graph_index: IGraphIndex,
        options: IngestionOptions | None = None,
        metadata_extractor: MetadataExtractor | None = None,
    ) -> None:
        self._extraction = extraction
        self._chunker = chunker
        self._embedding_provider = embedding_provider
        self._keyword_index = keyword_index
        self._vector_index = vector_index
        self._graph_index = graph_index
        self._options = options or IngestionOptions()
        self._metadata = metadata_extractor or MetadataExtractor()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ingest_folder(self, root: str | Path) -> IngestionRun:
        """Ingest every candidate file below *root*.

        Parameters
        ----------
        root:
            Folder to walk recursively.

        Returns
        -------
        IngestionRun
            The merged report plus every chunk produced, ordered by
            ``(source_path, chunk_index)``.

        Raises
        ------
        IngestionError
            If *root* is not a directory.  Per-file problems never raise.
        """
        root_path = Path(root)
        if not root_path.is_dir():
            logger.error("ingest_root_not_found", root=str(root_path))
            raise IngestionError(message=f"Ingestion root is not a directory: {root_path}")

        files = await asyncio.to_thread(discover_files, root_path, self._options.extensions)
        if not files:
            logger.warning(
                "ingest_no_candidate_files",
                root=str(root_path),
                extensions=list(self._options.extensions),
            )
            return IngestionRun()

        start = time.monotonic()
        identities: dict[str, str] = {}
        outcomes = await throttled_gather(
            [self._process_file(path, identities) for path in files],
            limit=self._options.max_workers,
        )
        run = self._combine(outcomes)

        report = run.report
        logger.info(
            "ingestion_complete",
            root=str(root_path),
            files_discovered=report.files_discovered,
            files_chunked=report.files_chunked,
            files_indexed=report.files_indexed,
            files_skipped=report.files_skipped,
            chunks_created=report.chunks_created,
            store_failures=len(report.store_failures),
            elapsed_s=round(time.monotonic() - start, 2),
        )
        return run

    async def ingest_file(self, path: str | Path) -> IngestionRun:
        """Ingest a single file with the same isolation as :meth:`ingest_folder`."""
        file_path = Path(path)
        if not file_path.is_file():
            logger.warning("file_skipped", path=str(file_path), reason="unreadable file")
            return IngestionRun(
                report=IngestionReport(
                    files_discovered=1,
                    skipped_files=(
                        SkippedFile(
                            path=file_path.absolute().as_posix(),
                            stage=IngestionStage.DISCOVER,
                            reason=UnreadableFileError.reason,
                            detail="not a regular file",
                        ),
                    ),
                )
            )
        outcome = await self._process_file(file_path, {})
        return self._combine([outcome])

    # ------------------------------------------------------------------
    # Per-file pipeline
    # ------------------------------------------------------------------

    async def _process_file(self, path: Path, identities: dict[str, str]) -> _FileOutcome:
        """Run one file through every stage; never raises for file-level problems."""
        source_path = path.as_posix()
        stage = IngestionStage.EXTRACT
        try:
            source_path = self._display_path(path)
            data = await self._read(path)
            fingerprint = self._fingerprint(path, source_path, data)
            pages = await self._extraction.extract(source_path, data)

            stage = IngestionStage.CHUNK
            chunks = self._chunker.chunk_document(fingerprint, pages)
            if not chunks:
                raise ChunkingError(message=f"No chunks produced for {source_path}")
            self._register_identities(identities, chunks)
        except ChunkIdentityError as exc:
            logger.error(
                "chunk_identity_conflict",
                path=source_path,
                chunk_id=exc.chunk_id[:12],
                error=str(exc),
            )
            return self._skipped(source_path, stage, _IDENTITY_CONFLICT, str(exc))
        except IngestionError as exc:
            logger.warning(
                "file_skipped",
                path=source_path,
                stage=stage.value,
                reason=exc.reason,
                error=str(exc),
            )
            return self._skipped(source_path, stage, exc.reason, str(exc))
        except Exception as exc:
            detail = f"{type(exc).__name__}: {exc}"
            logger.error(
                "file_skipped",
                path=source_path,
                stage=stage.value,
                reason=_UNEXPECTED_ERROR,
                error=detail,
            )
            return self._skipped(source_path, stage, _UNEXPECTED_ERROR, detail)

        failures = await self._index(source_path, chunks)
        logger.info(
            "file_ingested",
            path=source_path,
            pages=len(pages),
            chunks=len(chunks),
            store_failures=len(failures),
        )
        return _FileOutcome(
            report=IngestionReport(
                files_discovered=1,
                files_chunked=1,
                files_indexed=0 if failures else 1,
                chunks_created=len(chunks),
                store_failures=tuple(failures),
            ),
            chunks=chunks,
        )

    @staticmethod
    async def _read(path: Path) -> bytes:
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            raise UnreadableFileError(message=f"Cannot read {path}: {exc}") from exc

    def _fingerprint(self, path: Path, source_path: str, data: bytes) -> DocumentFingerprint:
        standard, version = self._metadata.fingerprint_hints(path.name)
        return DocumentFingerprint(
            document_id=make_document_id(source_path),
            title=path.name,
            source_path=source_path,
            checksum=hashlib.sha256(data).hexdigest(),
            standard=standard,
            version=version,
        )

    @staticmethod
    def _register_identities(identities: dict[str, str], chunks: list[Chunk]) -> None:
        """Record chunk ids for this run, rejecting an id bound to other content.

        Runs without awaiting, so concurrent workers cannot interleave
        between the check and the insert.
        """
        for chunk in chunks:
            known = identities.get(chunk.chunk_id)
            if known is not None and known != chunk.content_hash:
                raise ChunkIdentityError(
                    chunk_id=chunk.chunk_id,
                    message=f"chunk_id {chunk.chunk_id[:12]} produced twice with different content",
                )
        for chunk in chunks:
            identities[chunk.chunk_id] = chunk.content_hash

    async def _index(self, source_path: str, chunks: list[Chunk]) -> list[StoreFailure]:
        """Write *chunks* to all three stores, each independently of the others."""
        failures: list[StoreFailure] = []

        async def _vector_write() -> int:
            embeddings = await self._embedding_provider.embed([c.text_raw for c in chunks])
            return await self._vector_index.index_chunks(chunks, embeddings)

        stores = ("keyword", "vector", "graph")
        results = await asyncio.gather(
            self._keyword_index.index_chunks(chunks),
            _vector_write(),
            self._graph_index.index_chunks(chunks),
            return_exceptions=True,
        )

        for store, result in zip(stores, results):
            if not isinstance(result, BaseException):
                continue
            if isinstance(result, asyncio.CancelledError):
                raise result
            detail = f"{type(result).__name__}: {result}"
            if isinstance(result, ChunkIdentityError):
                reason = _IDENTITY_CONFLICT
                logger.error(
                    "chunk_identity_conflict",
                    path=source_path,
                    store=store,
                    stage=IngestionStage.INDEX.value,
                    error=str(result),
                )
            else:
                if isinstance(result, IngestionError):
                    reason = result.reason
                else:
                    reason = str(result) or type(result).__name__
                logger.warning(
                    "store_index_failed",
                    path=source_path,
                    store=store,
                    stage=IngestionStage.INDEX.value,
                    reason=reason,
                    error=detail,
                )
            failures.append(
                StoreFailure(path=source_path, store=store, reason=reason, detail=detail)
            )

        return failures

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _display_path(path: Path) -> str:
        try:
            return path.resolve().as_posix()
        except (OSError, RuntimeError) as exc:
            # Symlink loops raise RuntimeError before Python 3.13, OSError after.
            raise UnreadableFileError(message=f"Cannot resolve {path}: {exc}") from exc

    @staticmethod
    def _skipped(source_path: str, stage: IngestionStage, reason: str, detail: str) -> _FileOutcome:
        return _FileOutcome(
            report=IngestionReport(
                files_discovered=1,
                skipped_files=(
                    SkippedFile(path=source_path, stage=stage, reason=reason, detail=detail),
                ),
            )
        )

    @staticmethod
    def _combine(outcomes: list[_FileOutcome]) -> IngestionRun:
        report = IngestionReport.empty()
        chunks: list[Chunk] = []
        for outcome in outcomes:
            report = report.merge(outcome.report)
            chunks.extend(outcome.chunks)
        chunks.sort(key=lambda c: (c.source_path, c.chunk_index))
        return IngestionRun(report=report, chunks=tuple(chunks))
