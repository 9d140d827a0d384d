"""Row translation and batching"""

from .row_translator import translate_row, parse_timestamp, format_canonical_timestamp
from .batch_accumulator import BatchAccumulator

__all__ = ['translate_row', 'parse_timestamp', 'format_canonical_timestamp', 'BatchAccumulator']
