# Licensed under the Apache License, Version 2.0
from .domain import DocumentEntry, DocumentStat, ScanResult, ScanTotals
from .services import DocumentStore, ScanService

__all__ = [
    "DocumentEntry",
    "DocumentStat",
    "DocumentStore",
    "ScanResult",
    "ScanService",
    "ScanTotals",
]
