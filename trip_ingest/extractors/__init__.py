"""Input readers"""

from .csv_row_source import CsvRowSource

__all__ = ['CsvRowSource']
