"""Structural ingestion of heterogeneous source trees."""

from .models import Aggregate, ContentCategory, FileRecord, RecordStatus
from .pipeline import Pipeline

__all__ = ["Aggregate", "ContentCategory", "FileRecord", "Pipeline", "RecordStatus"]

__version__ = "0.1.0"
