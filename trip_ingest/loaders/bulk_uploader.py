# trip_ingest/loaders/bulk_uploader.py
"""
HTTP delivery of bulk request bodies to the indexing endpoint
"""

from dataclasses import dataclass
from typing import Optional

import requests

from trip_ingest.utils.logger import get_logger
from trip_ingest.utils.exceptions import UploadError


@dataclass(frozen=True)
class UploadResponse:
    """Status and raw body of one bulk call"""
    status_code: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class BulkUploader:
    """
    Sends one PUT request per encoded batch

    Plain session: no authentication, no retry adapter, no extra headers
    and the client's default timeout. The response body is read in full
    and returned as-is; per-item results inside a bulk response are not
    inspected.
    """

    def __init__(self, endpoint: str, session: Optional[requests.Session] = None):
        """
        Initialize bulk uploader

        Args:
            endpoint: Bulk endpoint URL
            session: HTTP session to reuse (a new one is created if omitted)
        """
        self.endpoint = endpoint
        self.logger = get_logger(__name__)
        self._session = session if session is not None else requests.Session()

    def upload(self, payload: bytes) -> UploadResponse:
        """
        Deliver a bulk body

        Args:
            payload: Encoded bulk request body

        Returns:
            UploadResponse for any HTTP status, success or not

        Raises:
            UploadError: If the request could not be completed
        """
        self.logger.debug(f"Request: {payload.decode('utf-8', errors='replace')}")

        try:
            response = self._session.put(self.endpoint, data=payload)
            body = response.text
        except requests.exceptions.RequestException as e:
            raise UploadError(
                f"Failed posting to {self.endpoint}: {e}",
                error_code="NETWORK_ERROR",
                context={'endpoint': self.endpoint, 'payload_bytes': len(payload)},
                cause=e
            ) from e

        self.logger.info(f"Posted with response code {response.status_code}")
        return UploadResponse(status_code=response.status_code, body=body)

    def close(self) -> None:
        if self._session:
            self._session.close()

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - closes the HTTP session"""
        self.close()
