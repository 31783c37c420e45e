from .sqlite import SQLiteSource

__all__ = ["SQLiteSource"]
