"""Configuration management module"""

from .settings import Settings, FieldMapping, PipelineConfig, MAX_BATCH_SIZE

__all__ = ['Settings', 'FieldMapping', 'PipelineConfig', 'MAX_BATCH_SIZE']
