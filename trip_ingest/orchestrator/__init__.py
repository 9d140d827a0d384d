"""Pipeline orchestration"""

from .upload_pipeline import UploadPipeline, UploadResult

__all__ = ['UploadPipeline', 'UploadResult']
