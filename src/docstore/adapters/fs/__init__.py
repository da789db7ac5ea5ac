from .local_fs import LocalFS

__all__ = ["LocalFS"]
