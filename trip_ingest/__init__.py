"""
Trip Record Bulk Uploader

Reads trip records from a delimited file, maps configured columns onto a
fixed schema and bulk-indexes them into a search store in batches.
"""

__version__ = "1.0.0"
__author__ = "Data Engineering Team"
