# tests/unit/test_cli.py
"""Tests for the command-line entry point."""

import json
from unittest.mock import patch

import pytest

from trip_ingest import cli
from trip_ingest.orchestrator.upload_pipeline import UploadResult
from trip_ingest.utils.exceptions import ExtractionError


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Keep the CLI from reconfiguring the root logger during tests."""
    with patch('trip_ingest.cli.setup_pipeline_logging'), patch('trip_ingest.cli.load_dotenv'):
        yield


class TestParseArguments:
    """Test argument parsing."""

    def test_defaults(self):
        """Test default flag values."""
        args = cli.parse_arguments([])

        assert args.config == './config.json'
        assert args.batch_size is None
        assert args.output_format == 'text'
        assert args.dry_run is False

    def test_config_flag(self):
        """Test --config is read."""
        assert cli.parse_arguments(['--config', 'x.json']).config == 'x.json'


class TestMain:
    """Test main() exit codes and output."""

    def test_validate_config_ok(self, config_file, capsys):
        """Test --validate-config on a good file."""
        assert cli.main(['--config', str(config_file), '--validate-config']) == 0
        assert "valid" in capsys.readouterr().out

    def test_validate_config_bad(self, temp_dir, capsys):
        """Test --validate-config on a missing file."""
        assert cli.main(['--config', str(temp_dir / 'none.json'), '--validate-config']) == 1
        assert "invalid" in capsys.readouterr().out

    def test_missing_config_exit_code(self, temp_dir):
        """Test a missing configuration is fatal with exit code 1."""
        assert cli.main(['--config', str(temp_dir / 'none.json')]) == 1

    def test_completed_with_errors_still_exits_zero(self, config_file, capsys):
        """Test recoverable failures do not change the exit code."""
        result = UploadResult(status="completed_with_errors", rows_read=3, batches_failed=1)

        with patch('trip_ingest.cli.UploadPipeline') as mock_pipeline:
            mock_pipeline.return_value.run.return_value = result
            exit_code = cli.main(['--config', str(config_file)])

        assert exit_code == 0
        mock_pipeline.return_value.run.assert_called_once_with(dry_run=False)
        assert "completed_with_errors" in capsys.readouterr().out

    def test_fatal_input_error_exit_code(self, config_file):
        """Test an unreadable input exits with code 2."""
        with patch('trip_ingest.cli.UploadPipeline') as mock_pipeline:
            mock_pipeline.return_value.run.side_effect = ExtractionError("cannot open")
            assert cli.main(['--config', str(config_file)]) == 2

    def test_json_output(self, config_file, capsys):
        """Test --output-format json prints the result dict."""
        with patch('trip_ingest.cli.UploadPipeline') as mock_pipeline:
            mock_pipeline.return_value.run.return_value = UploadResult(documents_sent=12)
            cli.main(['--config', str(config_file), '--output-format', 'json', '--dry-run'])

        output = json.loads(capsys.readouterr().out)
        assert output['documents_sent'] == 12
        mock_pipeline.return_value.run.assert_called_once_with(dry_run=True)

    def test_batch_size_flag_reaches_settings(self, config_file):
        """Test --batch-size overrides the default."""
        with patch('trip_ingest.cli.UploadPipeline') as mock_pipeline:
            mock_pipeline.return_value.run.return_value = UploadResult()
            cli.main(['--config', str(config_file), '--batch-size', '50'])

        settings = mock_pipeline.call_args[0][0]
        assert settings.pipeline.batch_size == 50

    def test_batch_size_over_limit(self, config_file):
        """Test --batch-size above 1000 is a configuration error."""
        assert cli.main(['--config', str(config_file), '--batch-size', '5000']) == 1
