class DocstoreError(Exception):
    """Base exception for domain-specific errors."""


class AccessDenied(DocstoreError):
    """A resolved path escapes the configured root."""


class NotFound(DocstoreError):
    """Requested document or directory does not exist."""


class DirectoryNotEmpty(DocstoreError):
    """Drop refused because the directory still has descendants."""


class ScanInvariantViolation(DocstoreError):
    """The walker yielded an entry before its parent directory was emitted."""

    def __init__(self, parent_path: str) -> None:
        super().__init__(f"Directory not found: {parent_path}")
        self.parent_path = parent_path


class FilesystemError(DocstoreError):
    """Unreadable roots, failed enumeration, permission issues, etc."""


class ConfigurationError(DocstoreError):
    """Bad CLI args or unusable options (e.g., unknown sort key)."""
