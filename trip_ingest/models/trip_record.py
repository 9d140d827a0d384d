# trip_ingest/models/trip_record.py
"""
Data models for trip records on their way to the search store
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

# One row of the input file, one string per column
RawRow = Sequence[str]


@dataclass(frozen=True)
class Position:
    """A latitude/longitude pair, serialized as a geo point"""
    latitude: float
    longitude: float

    def to_dict(self) -> Dict[str, float]:
        return {'lat': self.latitude, 'lon': self.longitude}


@dataclass(frozen=True)
class NormalizedRecord:
    """
    One translated trip, in the shape the index expects

    Times are canonical timestamp text; the block/tract/county
    identifiers are carried over exactly as they appeared in the input.
    """
    dropoff_time: str
    pickup_time: str
    start_block: str
    start_tract: str
    start_county: str
    end_block: str
    end_tract: str
    end_county: str
    start_coords: Position
    end_coords: Position

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to the document sent to the index"""
        return {
            'dropoff-time': self.dropoff_time,
            'pickup-time': self.pickup_time,
            'start-block': self.start_block,
            'start-tract': self.start_tract,
            'start-county': self.start_county,
            'end-block': self.end_block,
            'end-tract': self.end_tract,
            'end-county': self.end_county,
            'start-coords': self.start_coords.to_dict(),
            'end-coords': self.end_coords.to_dict(),
        }


@dataclass
class Batch:
    """
    An ordered, bounded group of records sent in one bulk request

    The counters describe the raw rows consumed to build it.
    """
    capacity: int
    records: List[NormalizedRecord] = field(default_factory=list)
    rows_read: int = 0
    empty_rows: int = 0
    failed_rows: int = 0

    def __len__(self) -> int:
        return len(self.records)

    @property
    def is_full(self) -> bool:
        return len(self.records) >= self.capacity

    @property
    def is_empty(self) -> bool:
        return not self.records

    def append(self, record: NormalizedRecord) -> None:
        if self.is_full:
            raise OverflowError(f"Batch already holds {self.capacity} records")
        self.records.append(record)
