"""
Configuration management for the trip record bulk uploader
"""

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Dict, Any, Union

from trip_ingest.utils.exceptions import ConfigurationError


# The bulk endpoint is sent at most this many documents per request
MAX_BATCH_SIZE = 1000

DEFAULT_TIME_FORMAT = "RFC3339"

# Config file key -> FieldMapping attribute, for every column index
INDEX_KEYS = {
    'start-time': 'pickup_time',
    'end-time': 'dropoff_time',
    'start-block': 'start_block',
    'start-tract': 'start_tract',
    'start-county': 'start_county',
    'end-block': 'end_block',
    'end-tract': 'end_tract',
    'end-county': 'end_county',
    'start-lat': 'start_lat',
    'start-long': 'start_long',
    'end-lat': 'end_lat',
    'end-long': 'end_long',
}


@dataclass(frozen=True)
class FieldMapping:
    """
    Column layout of the input file and where its records go

    Indices are only checked for being non-negative integers here;
    whether a row is long enough is decided per row at translation time.
    """
    endpoint: str
    input_path: Path
    pickup_time: int
    dropoff_time: int
    start_block: int
    start_tract: int
    start_county: int
    end_block: int
    end_tract: int
    end_county: int
    start_lat: int
    start_long: int
    end_lat: int
    end_long: int
    time_format: str = DEFAULT_TIME_FORMAT
    delimiter: str = ","

    @property
    def indices(self) -> Dict[str, int]:
        """Column index for every mapped field"""
        return {name: getattr(self, name) for name in INDEX_KEYS.values()}

    @property
    def required_columns(self) -> int:
        """Minimum row length that every configured index fits into"""
        return max(self.indices.values()) + 1

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FieldMapping':
        """
        Build a mapping from the parsed configuration document

        Args:
            data: Parsed JSON configuration

        Returns:
            FieldMapping instance

        Raises:
            ConfigurationError: If keys are missing or have the wrong type
        """
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration must be a JSON object")

        missing = [key for key in ['elk-address', 'input-address', *INDEX_KEYS] if key not in data]
        if missing:
            raise ConfigurationError(
                "Missing required configuration keys",
                error_code="MISSING_KEYS",
                context={'missing': missing}
            )

        endpoint = data['elk-address']
        input_path = data['input-address']
        for key, value in (('elk-address', endpoint), ('input-address', input_path)):
            if not isinstance(value, str) or not value.strip():
                raise ConfigurationError(f"'{key}' must be a non-empty string")

        indices = {}
        for key, attr in INDEX_KEYS.items():
            value = data[key]
            # bool is an int subclass, but true/false is never a column
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigurationError(
                    f"'{key}' must be a non-negative integer column index",
                    error_code="INVALID_INDEX",
                    context={'key': key, 'value': value}
                )
            indices[attr] = value

        time_format = data.get('time-format', DEFAULT_TIME_FORMAT)
        if not isinstance(time_format, str) or not time_format:
            raise ConfigurationError("'time-format' must be a non-empty string")

        delimiter = data.get('delimiter', ',')
        if not isinstance(delimiter, str) or len(delimiter) != 1:
            raise ConfigurationError("'delimiter' must be a single character")

        return cls(
            endpoint=endpoint,
            input_path=Path(input_path),
            time_format=time_format,
            delimiter=delimiter,
            **indices
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'FieldMapping':
        """
        Load the mapping from a JSON configuration file

        Raises:
            ConfigurationError: If the file is missing or not valid JSON
        """
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise ConfigurationError(
                f"Configuration file not found: {path}",
                error_code="CONFIG_NOT_FOUND",
                cause=e
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read configuration file: {path}",
                error_code="CONFIG_UNREADABLE",
                cause=e
            ) from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Configuration file is not valid JSON: {path}",
                error_code="CONFIG_INVALID_JSON",
                cause=e
            ) from e

        return cls.from_dict(data)


@dataclass(frozen=True)
class PipelineConfig:
    """Run-level settings that are not part of the field mapping"""
    batch_size: int = MAX_BATCH_SIZE
    log_level: str = "INFO"
    log_dir: Optional[Path] = None

    def __post_init__(self):
        if not 1 <= self.batch_size <= MAX_BATCH_SIZE:
            raise ConfigurationError(
                f"Batch size must be between 1 and {MAX_BATCH_SIZE}",
                context={'batch_size': self.batch_size}
            )
        if self.log_dir is not None:
            object.__setattr__(self, 'log_dir', Path(self.log_dir))

    @classmethod
    def from_env(cls) -> 'PipelineConfig':
        """Load pipeline config from environment variables"""
        try:
            batch_size = int(os.getenv('BATCH_SIZE', str(MAX_BATCH_SIZE)))
        except ValueError as e:
            raise ConfigurationError("BATCH_SIZE must be an integer", cause=e) from e

        return cls(
            batch_size=batch_size,
            log_level=os.getenv('LOG_LEVEL', 'INFO'),
            log_dir=os.getenv('LOG_DIR') or None
        )


@dataclass(frozen=True)
class Settings:
    """
    Everything a run needs, built once at startup and passed explicitly
    """
    field_mapping: FieldMapping
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)

    @classmethod
    def load(cls, config_path: Union[str, Path], **pipeline_overrides) -> 'Settings':
        """
        Load settings from the configuration file and environment

        Args:
            config_path: Path to the JSON field-mapping configuration
            **pipeline_overrides: PipelineConfig fields to override, None values ignored

        Returns:
            Settings instance
        """
        field_mapping = FieldMapping.from_file(config_path)
        pipeline = PipelineConfig.from_env()

        overrides = {k: v for k, v in pipeline_overrides.items() if v is not None}
        if overrides:
            pipeline = replace(pipeline, **overrides)

        return cls(field_mapping=field_mapping, pipeline=pipeline)
