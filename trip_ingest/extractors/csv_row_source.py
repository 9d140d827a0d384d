# trip_ingest/extractors/csv_row_source.py
"""
Delimited input file reading for the trip record uploader
"""

import csv
from pathlib import Path
from typing import Iterator, List, Optional, Union

from trip_ingest.utils.logger import get_logger
from trip_ingest.utils.exceptions import ExtractionError


class CsvRowSource:
    """
    Reads raw rows from a delimited text file, one pass only

    Opening the source reads and discards the header row. ``rows()``
    then yields every following record lazily as a list of strings,
    including blank lines as empty lists. Bytes that are not valid UTF-8
    come through as U+FFFD so a bad row is left to the translator. Any
    problem opening the file, reading the header or parsing a record is
    fatal and raised as ExtractionError.

    Usage:
        with CsvRowSource(path) as source:
            for row in source.rows():
                ...
    """

    def __init__(self, path: Union[str, Path], delimiter: str = ","):
        """
        Initialize row source

        Args:
            path: Input file location
            delimiter: Column separator
        """
        self.path = Path(path)
        self.delimiter = delimiter
        self.header: Optional[List[str]] = None
        self.rows_read = 0

        self.logger = get_logger(__name__)
        self._file = None
        self._reader = None

    def open(self) -> 'CsvRowSource':
        """
        Open the file and consume its header row

        Returns:
            self, ready for ``rows()``

        Raises:
            ExtractionError: If the file cannot be opened or has no header
        """
        try:
            self._file = open(self.path, 'r', encoding='utf-8', errors='replace', newline='')
        except OSError as e:
            self.logger.error(f"Error opening input file {self.path}: {e}")
            raise ExtractionError(
                f"Cannot open input file: {self.path}",
                error_code="INPUT_UNREADABLE",
                cause=e
            ) from e

        self.logger.info(f"Input file opened: {self.path}")
        self._reader = csv.reader(self._file, delimiter=self.delimiter)

        try:
            self.header = next(self._reader)
        except StopIteration:
            self.close()
            raise ExtractionError(
                f"Input file has no header row: {self.path}",
                error_code="MISSING_HEADER"
            )
        except (csv.Error, OSError) as e:
            self.close()
            raise ExtractionError(
                f"Error reading csv headers: {self.path}",
                error_code="HEADER_UNREADABLE",
                cause=e
            ) from e

        self.logger.debug(f"Discarded header row: {self.header}")
        return self

    def rows(self) -> Iterator[List[str]]:
        """
        Yield data rows in file order

        Raises:
            ExtractionError: If the source is not open, or a record cannot be parsed
        """
        if self._reader is None:
            raise ExtractionError("Row source is not open", error_code="SOURCE_NOT_OPEN")

        while True:
            try:
                row = next(self._reader)
            except StopIteration:
                self.logger.info(f"Reached end of input after {self.rows_read} rows")
                return
            except (csv.Error, OSError) as e:
                self.logger.error(f"Error reading in csv: {e}; {self.rows_read} lines read before error")
                raise ExtractionError(
                    f"Error reading input file: {self.path}",
                    error_code="INPUT_CORRUPT",
                    context={'rows_read': self.rows_read, 'line': self._reader.line_num},
                    cause=e
                ) from e

            self.rows_read += 1
            self.logger.debug(f"Read row {row}")
            yield row

    def close(self) -> None:
        """Release the file handle; safe to call more than once"""
        if self._file is not None:
            self._file.close()
            self._file = None
            self._reader = None

    def __enter__(self):
        """Context manager entry - opens the file and reads the header"""
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - releases the file handle"""
        self.close()
