from .errors import (
    AccessDenied,
    ConfigurationError,
    DirectoryNotEmpty,
    DocstoreError,
    FilesystemError,
    NotFound,
    ScanInvariantViolation,
)
from .models import (
    DocumentEntry,
    DocumentStat,
    ScanOptions,
    ScanResult,
    ScanTotals,
    SortKey,
    SortOrder,
)

__all__ = [
    "AccessDenied",
    "ConfigurationError",
    "DirectoryNotEmpty",
    "DocstoreError",
    "DocumentEntry",
    "DocumentStat",
    "FilesystemError",
    "NotFound",
    "ScanInvariantViolation",
    "ScanOptions",
    "ScanResult",
    "ScanTotals",
    "SortKey",
    "SortOrder",
]
