# trip_ingest/transformers/batch_accumulator.py
"""
Grouping of translated records into bounded batches
"""

from typing import Iterable, Iterator, Optional, Tuple

from trip_ingest.config.settings import FieldMapping, MAX_BATCH_SIZE
from trip_ingest.models.trip_record import RawRow, Batch
from trip_ingest.transformers.row_translator import translate_row
from trip_ingest.utils.logger import get_logger
from trip_ingest.utils.exceptions import (
    ConfigurationError, ErrorCollector, TranslationError
)


class BatchAccumulator:
    """
    Pulls raw rows from a one-pass source and builds batches of records

    Empty rows are skipped and counted. Rows that fail translation are
    logged, handed to the error collector and skipped; they never abort
    the batch. Batches never hold more than ``batch_size`` records.
    """

    def __init__(
        self,
        mapping: FieldMapping,
        batch_size: int = MAX_BATCH_SIZE,
        error_collector: Optional[ErrorCollector] = None
    ):
        """
        Initialize batch accumulator

        Args:
            mapping: Column layout used to translate each row
            batch_size: Maximum records per batch (1-1000)
            error_collector: Sink for row translation failures
        """
        if not 1 <= batch_size <= MAX_BATCH_SIZE:
            raise ConfigurationError(
                f"Batch size must be between 1 and {MAX_BATCH_SIZE}",
                context={'batch_size': batch_size}
            )

        self.mapping = mapping
        self.batch_size = batch_size
        self.error_collector = error_collector if error_collector is not None else ErrorCollector()
        self.logger = get_logger(__name__)
        self._row_number = 0

    def read_batch(self, rows: Iterator[RawRow]) -> Tuple[Batch, bool]:
        """
        Fill one batch from the row iterator

        Args:
            rows: Iterator of raw rows; consumed, never rewound

        Returns:
            (batch, exhausted) where exhausted is True once the iterator
            has no more rows. The batch may be empty.
        """
        batch = Batch(capacity=self.batch_size)

        while not batch.is_full:
            try:
                row = next(rows)
            except StopIteration:
                return batch, True

            self._row_number += 1
            batch.rows_read += 1

            if len(row) == 0:
                batch.empty_rows += 1
                continue

            try:
                record = translate_row(row, self.mapping)
            except TranslationError as e:
                batch.failed_rows += 1
                self.logger.warning(f"Failed on row {self._row_number} {list(row)} with error {e}")
                self.error_collector.add_error(e, {'row_number': self._row_number})
                continue

            batch.append(record)

        return batch, False

    def iter_batches(self, rows: Iterable[RawRow]) -> Iterator[Batch]:
        """
        Yield batches until the rows run out

        A full final batch is followed by one empty batch if the source
        ends exactly on a batch boundary.
        """
        row_iterator = iter(rows)
        exhausted = False
        while not exhausted:
            batch, exhausted = self.read_batch(row_iterator)
            self.logger.info(
                f"Accumulated batch with {len(batch)} records "
                f"({batch.rows_read} rows read, {batch.failed_rows} failed, {batch.empty_rows} empty)"
            )
            yield batch
