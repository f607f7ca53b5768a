"""Ingestion outcome models.

An ingestion run produces one :class:`IngestionReport` per file, and the
per-file reports are folded together with :meth:`IngestionReport.merge`.
Merge is associative and commutative (counts add; entry lists are
concatenated and sorted by a total key), so the final report is the same no
matter in which order the worker pool finishes files.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from clausefinder.models.chunk import Chunk


class IngestionStage(str, Enum):
    """Pipeline stage at which a file was given up on."""

    DISCOVER = "discover"
    EXTRACT = "extract"
    CHUNK = "chunk"
    INDEX = "index"


class SkippedFile(BaseModel):
    """A file that produced no chunks in this run."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(description="Source path of the skipped file.")
    stage: IngestionStage
    reason: str = Field(description="Short classification, e.g. 'corrupt document'.")
    detail: str = Field(default="", description="Underlying error message.")

    def sort_key(self) -> tuple[str, str, str, str]:
        return (self.path, self.stage.value, self.reason, self.detail)


class StoreFailure(BaseModel):
    """A store write that failed for one file.

    The file still counts as chunked; it is not counted as indexed.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    store: str = Field(description="Store name: 'keyword', 'vector' or 'graph'.")
    reason: str
    stage: IngestionStage = IngestionStage.INDEX
    detail: str = Field(default="", description="Underlying error, e.g. 'IndexingError: ...'.")

    def sort_key(self) -> tuple[str, str, str, str]:
        return (self.path, self.store, self.reason, self.detail)


# ---------------------------------------------------------------------------
# IngestionReport: aggregate counts and per-file problems.
# ---------------------------------------------------------------------------
class IngestionReport(BaseModel):
    """Summary of one ingestion run (or of one file within a run)."""

    model_config = ConfigDict(frozen=True)

    files_discovered: int = Field(default=0, ge=0)
    files_chunked: int = Field(default=0, ge=0, description="Files that produced at least one chunk.")
    files_indexed: int = Field(
        default=0,
        ge=0,
        description="Files whose chunks were written to every store.",
    )
    chunks_created: int = Field(default=0, ge=0)
    skipped_files: tuple[SkippedFile, ...] = ()
    store_failures: tuple[StoreFailure, ...] = ()

    @property
    def files_skipped(self) -> int:
        return len(self.skipped_files)

    @classmethod
    def empty(cls) -> IngestionReport:
        """Return the identity element for :meth:`merge`."""
        return cls()

    def merge(self, other: IngestionReport) -> IngestionReport:
        """Combine two reports into a new one.

        Parameters
        ----------
        other:
            The report to fold into this one.

        Returns
        -------
        IngestionReport
            A new report whose counts are the sums and whose entry lists are
            the sorted concatenations of both inputs.
        """
        return IngestionReport(
            files_discovered=self.files_discovered + other.files_discovered,
            files_chunked=self.files_chunked + other.files_chunked,
            files_indexed=self.files_indexed + other.files_indexed,
            chunks_created=self.chunks_created + other.chunks_created,
            skipped_files=tuple(
                sorted(
                    (*self.skipped_files, *other.skipped_files),
                    key=SkippedFile.sort_key,
                )
            ),
            store_failures=tuple(
                sorted(
                    (*self.store_failures, *other.store_failures),
                    key=StoreFailure.sort_key,
                )
            ),
        )


class IngestionRun(BaseModel):
    """Result of an ingestion call: the merged report and the chunks produced."""

    model_config = ConfigDict(frozen=True)

    report: IngestionReport = Field(default_factory=IngestionReport.empty)
    chunks: tuple[Chunk, ...] = Field(
        default=(),
        description="Chunks ordered by (source_path, chunk_index).",
    )
