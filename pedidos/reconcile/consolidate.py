"""
Consolidation - Merge several order-line files into one table.

Files are decoded one at a time, in arrival order. The first file that
decodes becomes the schema baseline; every later file must carry exactly
the same header row or it is reported and left out of the merge.
A bad file never stops the batch: each file gets its own outcome.
"""

import logging
from typing import Iterable, Optional, Protocol, Sequence

from .codec import decode_sheet, decode_table
from .errors import DecodeError, SchemaMismatchError
from .models import (
    ConsolidatedBatch,
    FileIngestOutcome,
    OutcomeStatus,
    RawFile,
    Record,
    Table,
)
from .normalizer import normalize_rows
from .schema import ensure_same_columns

logger = logging.getLogger(__name__)


class AsyncFileSource(Protocol):
    """Anything with a filename and an awaitable read(), e.g. an UploadFile."""
    filename: Optional[str]

    async def read(self) -> bytes: ...


class ConsolidationAccumulator:
    """
    Drives per-file decode + normalize + validate for one batch.

    Register every file first (outcomes start as PENDING), then feed the
    contents strictly in registration order with `process`. `finish`
    returns the ConsolidatedBatch; the accumulator is not meant to be
    reused across unrelated file selections.
    """

    def __init__(self, names: Iterable[str] = ()):
        self._outcomes: list[FileIngestOutcome] = []
        self._baseline: Optional[tuple[str, ...]] = None
        self._records: list[Record] = []
        self._next_index = 0
        for name in names:
            self.register(name)

    @property
    def baseline(self) -> Optional[tuple[str, ...]]:
        return self._baseline

    @property
    def outcomes(self) -> tuple[FileIngestOutcome, ...]:
        return tuple(self._outcomes)

    def register(self, name: str) -> int:
        """Register a file and return its position in the batch."""
        self._outcomes.append(FileIngestOutcome.pending(name))
        return len(self._outcomes) - 1

    def process(self, index: int, content: bytes) -> FileIngestOutcome:
        """
        Decode and validate the file at `index`.

        Files must be processed in order: the baseline used for file i is
        the one established by the files before it.
        """
        if index != self._next_index:
            raise ValueError(
                f"Files must be processed in order: expected #{self._next_index}, got #{index}"
            )

        pending = self._outcomes[index]
        total = len(self._outcomes)
        logger.debug(f"Processing file {index + 1}/{total}: {pending.name}")

        try:
            sheet = decode_sheet(content)
        except DecodeError as e:
            return self._complete(
                index,
                pending.failed(f"Error processing file: {e}", OutcomeStatus.DECODE_ERROR),
            )

        table = Table.build(sheet.header, normalize_rows(sheet.header, sheet.rows))

        if self._baseline is None:
            self._baseline = table.columns
        else:
            try:
                ensure_same_columns(self._baseline, table.columns)
            except SchemaMismatchError as e:
                return self._complete(
                    index,
                    pending.failed(str(e), OutcomeStatus.SCHEMA_MISMATCH, table=table),
                )

        self._records.extend(table.records)
        return self._complete(index, pending.succeeded(table))

    def process_error(self, index: int, message: str) -> FileIngestOutcome:
        """Record a failure that happened before decoding (e.g. a read error)."""
        if index != self._next_index:
            raise ValueError(
                f"Files must be processed in order: expected #{self._next_index}, got #{index}"
            )
        pending = self._outcomes[index]
        return self._complete(index, pending.failed(message, OutcomeStatus.DECODE_ERROR))

    def add(self, name: str, content: bytes) -> FileIngestOutcome:
        """Register and process one file."""
        return self.process(self.register(name), content)

    def _complete(self, index: int, outcome: FileIngestOutcome) -> FileIngestOutcome:
        self._outcomes[index] = outcome
        self._next_index = index + 1
        if outcome.error:
            logger.warning(f"Error in {outcome.name}: {outcome.error}")
        return outcome

    def finish(self) -> ConsolidatedBatch:
        """Build the batch. Valid only if every registered file succeeded."""
        unprocessed = [o.name for o in self._outcomes if not o.processed]
        if unprocessed:
            logger.warning(f"{len(unprocessed)} file(s) never processed: {', '.join(unprocessed)}")

        valid = all(o.ok for o in self._outcomes)
        batch = ConsolidatedBatch(
            columns=self._baseline or (),
            records=tuple(self._records),
            valid=valid,
            outcomes=tuple(self._outcomes),
        )

        if valid:
            logger.info(
                f"Consolidation completed: {len(batch.records)} records from {batch.file_count} files"
            )
        else:
            logger.warning(
                f"Consolidation finished with errors: {len(batch.failed_outcomes)} of "
                f"{batch.file_count} files rejected"
            )
        return batch


def consolidate(files: Sequence[RawFile]) -> ConsolidatedBatch:
    """
    Decode, validate and merge order-line files in arrival order.

    Args:
        files: Files in the order they were selected

    Returns:
        ConsolidatedBatch; an empty list gives an empty, valid batch
    """
    accumulator = ConsolidationAccumulator(f.name for f in files)
    for index, raw in enumerate(files):
        accumulator.process(index, raw.content)
    return accumulator.finish()


def ingest_batch(files: Iterable[tuple[str, bytes]]) -> ConsolidatedBatch:
    """Upload boundary for order lines: (name, bytes) pairs -> batch."""
    return consolidate([RawFile(name=name, content=content) for name, content in files])


async def ingest_batch_async(sources: Sequence[AsyncFileSource]) -> ConsolidatedBatch:
    """
    Like `ingest_batch`, reading each source with `await source.read()`.

    Reads happen one after the other; file i is fully decoded and
    validated before file i+1 is read.
    A failed read (I/O error, client disconnect, ...) is recorded on
    that file's outcome and the batch moves on.
    """
    accumulator = ConsolidationAccumulator(s.filename or f"file_{i + 1}" for i, s in enumerate(sources))
    for index, source in enumerate(sources):
        try:
            content = await source.read()
        except Exception as e:
            accumulator.process_error(index, f"Error reading file: {e}")
            continue
        accumulator.process(index, content)
    return accumulator.finish()


def ingest_single(content: bytes, name: str = "") -> Table:
    """
    Upload boundary for the catalog: one workbook -> Table.

    Raises:
        DecodeError: if the bytes are not a readable workbook
    """
    table = decode_table(content)
    logger.info(f"Catalog {name or '(unnamed)'} loaded: {len(table.columns)} columns, {table.row_count} rows")
    logger.debug(f"Catalog columns: {list(table.columns)}")
    return table
