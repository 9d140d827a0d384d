# tests/unit/test_bulk_uploader.py
"""Tests for BulkUploader."""

from unittest.mock import Mock, patch

import pytest
import requests

from trip_ingest.loaders.bulk_uploader import BulkUploader, UploadResponse
from trip_ingest.utils.exceptions import UploadError


ENDPOINT = "http://localhost:9200/trips/_bulk"


class TestBulkUploader:
    """Test upload behaviour against a mocked session."""

    @pytest.fixture
    def session(self):
        """Mock requests session."""
        session = Mock(spec=requests.Session)
        response = Mock()
        response.status_code = 200
        response.text = '{"took":3,"errors":false}'
        session.put.return_value = response
        return session

    def test_upload_success(self, session):
        """Test a PUT is issued with the payload as body."""
        uploader = BulkUploader(ENDPOINT, session=session)

        result = uploader.upload(b'{ "index" :{} }\n{}\n')

        session.put.assert_called_once_with(ENDPOINT, data=b'{ "index" :{} }\n{}\n')
        assert result == UploadResponse(status_code=200, body='{"took":3,"errors":false}')
        assert result.ok

    def test_no_extra_request_options(self, session):
        """Test no headers, auth or timeout are passed."""
        BulkUploader(ENDPOINT, session=session).upload(b"x")

        _, kwargs = session.put.call_args
        assert set(kwargs) == {'data'}

    def test_non_2xx_returned_not_raised(self, session):
        """Test error statuses come back as responses."""
        session.put.return_value.status_code = 400
        session.put.return_value.text = '{"error":"bad request"}'

        result = BulkUploader(ENDPOINT, session=session).upload(b"x")

        assert result.status_code == 400
        assert result.body == '{"error":"bad request"}'
        assert not result.ok

    def test_bulk_item_errors_not_inspected(self, session):
        """Test a 200 with per-item errors is still a plain success."""
        session.put.return_value.text = '{"errors":true,"items":[{"index":{"status":400}}]}'

        assert BulkUploader(ENDPOINT, session=session).upload(b"x").ok

    @pytest.mark.parametrize('exception', [
        requests.exceptions.ConnectionError("refused"),
        requests.exceptions.Timeout("slow"),
        requests.exceptions.InvalidURL("bad url"),
    ])
    def test_transport_failure(self, session, exception):
        """Test transport errors become UploadError."""
        session.put.side_effect = exception

        with pytest.raises(UploadError) as exc_info:
            BulkUploader(ENDPOINT, session=session).upload(b"abc")

        assert exc_info.value.cause is exception
        assert exc_info.value.context['payload_bytes'] == 3

    def test_single_attempt_only(self, session):
        """Test a failed request is not retried."""
        session.put.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(UploadError):
            BulkUploader(ENDPOINT, session=session).upload(b"x")

        assert session.put.call_count == 1

    def test_creates_session_when_not_given(self):
        """Test a plain requests session is created by default."""
        with patch('trip_ingest.loaders.bulk_uploader.requests.Session') as mock_session_cls:
            uploader = BulkUploader(ENDPOINT)

        mock_session_cls.assert_called_once_with()
        assert uploader._session is mock_session_cls.return_value

    def test_context_manager_closes_session(self, session):
        """Test the session is closed on exit."""
        with BulkUploader(ENDPOINT, session=session) as uploader:
            assert isinstance(uploader, BulkUploader)

        session.close.assert_called_once()


class TestUploadResponse:
    """Test UploadResponse helpers."""

    @pytest.mark.parametrize('status,ok', [(200, True), (201, True), (299, True), (301, False), (404, False), (503, False)])
    def test_ok(self, status, ok):
        """Test ok covers exactly the 2xx range."""
        assert UploadResponse(status_code=status, body="").ok is ok
