# tests/unit/conftest.py
"""
Shared pytest fixtures for the trip uploader unit tests
"""

import csv
import json
import tempfile
from pathlib import Path
from unittest.mock import Mock

import pytest

from trip_ingest.config.settings import FieldMapping, PipelineConfig, Settings
from trip_ingest.loaders.bulk_uploader import UploadResponse
from trip_ingest.models.trip_record import NormalizedRecord, Position


HEADER = [
    'pickup_time', 'dropoff_time', 'start_block', 'start_tract', 'start_county',
    'end_block', 'end_tract', 'end_county', 'start_lat', 'start_long', 'end_lat', 'end_long'
]


def make_row(pickup="2021-01-01T08:00:00", dropoff="2021-01-01T08:20:00",
             start_lat="40.1", start_long="-73.9", end_lat="40.2", end_long="-74.0"):
    """Build a data row in the sample column layout"""
    return [pickup, dropoff, "100", "200", "300", "110", "210", "310",
            start_lat, start_long, end_lat, end_long]


def write_csv(path: Path, rows, header=HEADER):
    """Write a header plus rows to a CSV file"""
    with open(path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        if header is not None:
            writer.writerow(header)
        writer.writerows(rows)
    return path


@pytest.fixture
def temp_dir():
    """Temporary directory removed after the test"""
    with tempfile.TemporaryDirectory() as directory:
        yield Path(directory)


@pytest.fixture
def config_dict():
    """Configuration document in the on-disk key format"""
    return {
        'elk-address': 'http://localhost:9200/trips/_bulk',
        'input-address': 'trips.csv',
        'time-format': 'RFC3339',
        'start-time': 0,
        'end-time': 1,
        'start-block': 2,
        'start-tract': 3,
        'start-county': 4,
        'end-block': 5,
        'end-tract': 6,
        'end-county': 7,
        'start-lat': 8,
        'start-long': 9,
        'end-lat': 10,
        'end-long': 11,
    }


@pytest.fixture
def field_mapping(config_dict):
    """Mapping for the sample 12-column layout"""
    return FieldMapping.from_dict(config_dict)


@pytest.fixture
def sample_row():
    """A well-formed row in the sample layout"""
    return make_row()


@pytest.fixture
def sample_record():
    """The record the sample row translates to"""
    return NormalizedRecord(
        dropoff_time="2021-01-01T08:20:00Z",
        pickup_time="2021-01-01T08:00:00Z",
        start_block="100",
        start_tract="200",
        start_county="300",
        end_block="110",
        end_tract="210",
        end_county="310",
        start_coords=Position(40.1, -73.9),
        end_coords=Position(40.2, -74.0),
    )


@pytest.fixture
def config_file(temp_dir, config_dict):
    """Configuration file on disk pointing at trips.csv in the same directory"""
    config_dict['input-address'] = str(temp_dir / 'trips.csv')
    path = temp_dir / 'config.json'
    path.write_text(json.dumps(config_dict))
    return path


@pytest.fixture
def make_settings(temp_dir, config_dict):
    """Factory: write rows to a CSV and return Settings pointing at it"""
    def _make(rows, batch_size=1000, header=HEADER):
        input_path = write_csv(temp_dir / 'trips.csv', rows, header=header)
        mapping = FieldMapping.from_dict({**config_dict, 'input-address': str(input_path)})
        return Settings(field_mapping=mapping, pipeline=PipelineConfig(batch_size=batch_size))
    return _make


@pytest.fixture
def mock_uploader():
    """Uploader stub that accepts every batch"""
    uploader = Mock()
    uploader.upload.return_value = UploadResponse(status_code=200, body='{"errors":false}')
    return uploader
