"""Output storage backends for kb-importer."""

from .base import OutputStorage
from .duckdb_parquet import DuckDBParquetStorage

__all__ = ["OutputStorage", "DuckDBParquetStorage"]
