"""Bulk encoding and delivery"""

from .bulk_encoder import BulkEncoder, EncodedPayload, encode_batch, ACTION_LINE
from .bulk_uploader import BulkUploader, UploadResponse

__all__ = ['BulkEncoder', 'EncodedPayload', 'encode_batch', 'ACTION_LINE', 'BulkUploader', 'UploadResponse']
