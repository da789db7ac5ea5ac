from .access_guard import AccessGuard, AccessLevel
from .document_store import DocumentStore
from .path_resolver import PathResolver
from .scan_service import ScanService


__all__ = [
    'AccessGuard',
    'AccessLevel',
    'DocumentStore',
    'PathResolver',
    'ScanService',
]
