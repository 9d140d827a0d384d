"""Data models"""

from .trip_record import RawRow, Position, NormalizedRecord, Batch

__all__ = ['RawRow', 'Position', 'NormalizedRecord', 'Batch']
