from .parquet import ParquetDestination

__all__ = ["ParquetDestination"]
