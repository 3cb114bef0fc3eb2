"""Record storage: output sinks and the record cache."""

from bibexport.storage.cache import CacheEntry, RecordCache
from bibexport.storage.sink import FileSink, Sink, StringSink

__all__ = [
    "CacheEntry",
    "RecordCache",
    "FileSink",
    "Sink",
    "StringSink",
]
