# trip_ingest/orchestrator/upload_pipeline.py
"""
Main orchestrator for the trip record bulk uploader
"""

import time
from dataclasses import dataclass, asdict, field
from typing import Any, Dict, List, Optional

from trip_ingest.config.settings import Settings
from trip_ingest.extractors.csv_row_source import CsvRowSource
from trip_ingest.loaders.bulk_encoder import BulkEncoder, EncodedPayload
from trip_ingest.loaders.bulk_uploader import BulkUploader
from trip_ingest.models.trip_record import Batch
from trip_ingest.transformers.batch_accumulator import BatchAccumulator
from trip_ingest.utils.logger import get_logger, PerformanceLogger, timed_operation
from trip_ingest.utils.exceptions import ErrorCollector, UploadError


@dataclass
class UploadResult:
    """Results from one upload run"""
    status: str = "completed"
    rows_read: int = 0
    empty_rows: int = 0
    rows_failed: int = 0
    records_translated: int = 0
    records_skipped_encoding: int = 0
    documents_encoded: int = 0
    documents_sent: int = 0
    batches_sent: int = 0
    batches_failed: int = 0
    batches_skipped: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)
    errors_by_type: Dict[str, int] = field(default_factory=dict)
    processing_time_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class UploadPipeline:
    """
    Runs the whole transfer: read rows, translate, batch, encode, upload

    One batch is in flight at a time and batches go out in input order.
    Row, record and batch failures are logged, collected and skipped;
    a failed batch is never resent. Only configuration and input file
    problems stop the run, and those are raised before any batch is sent
    or from the row source mid-run.
    """

    def __init__(self, settings: Settings, uploader: Optional[BulkUploader] = None):
        """
        Initialize the upload pipeline

        Args:
            settings: Loaded settings, passed to every component that needs them
            uploader: Uploader to use instead of one built from the endpoint
        """
        self.settings = settings
        self.logger = get_logger(__name__)
        self.performance_logger = PerformanceLogger(__name__)
        self.error_collector = ErrorCollector()
        self.encoder = BulkEncoder(self.error_collector)
        self._uploader = uploader

        self.logger.info("Upload pipeline initialized")

    def run(self, dry_run: bool = False) -> UploadResult:
        """
        Transfer the configured input file to the configured endpoint

        Args:
            dry_run: Encode batches but do not send them

        Returns:
            UploadResult with counts for the run

        Raises:
            ExtractionError: If the input file or its header cannot be read
        """
        mapping = self.settings.field_mapping
        result = UploadResult()
        start_time = time.monotonic()

        owns_uploader = self._uploader is None
        uploader = self._uploader or BulkUploader(mapping.endpoint)

        accumulator = BatchAccumulator(
            mapping,
            batch_size=self.settings.pipeline.batch_size,
            error_collector=self.error_collector
        )

        self.logger.info(f"Starting upload of {mapping.input_path} to {mapping.endpoint}")

        try:
            with timed_operation("upload_run", self.logger):
                with CsvRowSource(mapping.input_path, mapping.delimiter) as source:
                    for batch_number, batch in enumerate(accumulator.iter_batches(source.rows()), start=1):
                        self._process_batch(batch_number, batch, uploader, result, dry_run)
        finally:
            if owns_uploader:
                uploader.close()

        result.processing_time_seconds = time.monotonic() - start_time
        error_summary = self.error_collector.get_summary()
        result.errors = error_summary['errors']
        result.errors_by_type = error_summary['errors_by_type']
        if self.error_collector.has_errors:
            result.status = "completed_with_errors"

        self.performance_logger.log_data_metrics(
            rows_read=result.rows_read,
            records_translated=result.records_translated,
            documents_sent=result.documents_sent,
            batches_sent=result.batches_sent,
            batches_failed=result.batches_failed,
            errors=error_summary['error_count'],
            processing_time_seconds=result.processing_time_seconds
        )
        self.logger.info(f"Upload run finished: {result.status}")
        return result

    def _process_batch(
        self,
        batch_number: int,
        batch: Batch,
        uploader: BulkUploader,
        result: UploadResult,
        dry_run: bool
    ) -> None:
        """Encode one batch and send it, updating the run counters"""
        result.rows_read += batch.rows_read
        result.empty_rows += batch.empty_rows
        result.rows_failed += batch.failed_rows
        result.records_translated += len(batch)

        payload = self.encoder.encode(batch.records)
        result.records_skipped_encoding += payload.skipped_count
        result.documents_encoded += payload.document_count

        if payload.is_empty:
            self.logger.info(f"Batch {batch_number} has no documents, not sending")
            result.batches_skipped += 1
            return

        self.logger.info(f"Send bulk with {payload.document_count} items.")

        if dry_run:
            self.logger.info(
                f"Dry run: batch {batch_number} would send {len(payload.body)} bytes"
            )
            result.batches_skipped += 1
            return

        if self._send_batch(batch_number, payload, uploader):
            result.batches_sent += 1
            result.documents_sent += payload.document_count
        else:
            result.batches_failed += 1

    def _send_batch(self, batch_number: int, payload: EncodedPayload, uploader: BulkUploader) -> bool:
        """
        Upload one payload; failures are logged and collected, never raised

        Returns:
            True if the endpoint answered with a 2xx status
        """
        with timed_operation(f"upload_batch_{batch_number}", self.logger):
            try:
                response = uploader.upload(payload.body)
            except UploadError as e:
                self.logger.error(f"Failed posting batch {batch_number}: {e}")
                self.error_collector.add_error(e, {'batch': batch_number})
                return False

        if not response.ok:
            self.logger.error(
                f"Batch {batch_number} rejected with status {response.status_code}: {response.body}"
            )
            self.error_collector.add_error(UploadError(
                f"Endpoint returned status {response.status_code}",
                error_code="HTTP_STATUS",
                context={
                    'batch': batch_number,
                    'status_code': response.status_code,
                    'body': response.body[:500]
                }
            ))
            return False

        self.logger.info(f"Batch {batch_number} response: {response.body}")
        return True
