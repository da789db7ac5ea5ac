from .filesystem import FilesystemPort
from .formats import FormatHandler
from .store import DocumentStorePort

__all__ = ["DocumentStorePort", "FilesystemPort", "FormatHandler"]
