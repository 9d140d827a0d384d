# trip_ingest/loaders/bulk_encoder.py
"""
Serialization of record batches into the bulk-index wire format
"""

import json
from dataclasses import dataclass
from typing import Iterable, Optional

from trip_ingest.models.trip_record import NormalizedRecord
from trip_ingest.utils.logger import get_logger
from trip_ingest.utils.exceptions import EncodingError, ErrorCollector

# Empty index directive: the target index comes from the endpoint URL
ACTION_LINE = '{ "index" :{} }'


@dataclass(frozen=True)
class EncodedPayload:
    """Request body for one bulk call and what went into it"""
    body: bytes
    document_count: int
    skipped_count: int = 0

    @property
    def is_empty(self) -> bool:
        return self.document_count == 0


class BulkEncoder:
    """
    Builds newline-delimited action/document bodies

    Each record becomes two lines: the action directive and the record's
    JSON document. Records are written in the order given. A record that
    cannot be serialized as strict JSON (for example a NaN coordinate) is
    left out and the rest of the batch is still encoded.
    """

    def __init__(self, error_collector: Optional[ErrorCollector] = None):
        self.error_collector = error_collector
        self.logger = get_logger(__name__)

    def encode(self, records: Iterable[NormalizedRecord]) -> EncodedPayload:
        """
        Encode records into a bulk request body

        Args:
            records: Records in batch order

        Returns:
            EncodedPayload with the UTF-8 body and document/skip counts
        """
        action = ACTION_LINE.encode('utf-8') + b"\n"
        parts = []
        document_count = 0
        skipped_count = 0

        for position, record in enumerate(records):
            try:
                document = json.dumps(record.to_dict(), allow_nan=False)
            except (TypeError, ValueError) as e:
                skipped_count += 1
                self.logger.warning(f"Failed marshalling record {position} of batch: {e}")
                if self.error_collector is not None:
                    self.error_collector.add_error(EncodingError(
                        "Record could not be serialized",
                        error_code="ENCODING_ERROR",
                        context={'position': position},
                        cause=e
                    ))
                continue

            parts.append(action)
            parts.append(document.encode('utf-8') + b"\n")
            document_count += 1

        return EncodedPayload(
            body=b"".join(parts),
            document_count=document_count,
            skipped_count=skipped_count
        )


def encode_batch(records: Iterable[NormalizedRecord]) -> bytes:
    """Encode records and return just the request body"""
    return BulkEncoder().encode(records).body
