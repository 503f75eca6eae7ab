"""DuckDB + Parquet storage backend for knowledge-base outputs."""

from __future__ import annotations

import re
from collections.abc import Sequence
from pathlib import Path

import duckdb
import pandas as pd

from kbimporter.models import OUTPUT_TABLE_COLUMNS, KnowledgebaseOutputs
from kbimporter.storage.base import OutputStorage


_TABLE_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


_TABLE_SUFFIXES: dict[str, str] = {
    "knownVariants": "known_variants",
    "actionableVariants": "actionable_variants",
    "actionableCNVs": "actionable_cnvs",
    "actionableFusions": "actionable_fusions",
    "knownFusionPairs": "known_fusion_pairs",
    "promiscuousGenes": "promiscuous_genes",
    "cancerTypes": "cancer_types",
}


class DuckDBParquetStorage(OutputStorage):
    """Write every output table to a DuckDB database and a Parquet file.

    Tables are replaced on each run; rows from all knowledge bases share one
    table and are told apart by a ``kb_source`` column.
    """

    def __init__(
        self,
        *,
        db_path: str | Path,
        parquet_dir: str | Path,
        table_prefix: str = "kb",
    ) -> None:
        if not _TABLE_RE.match(table_prefix):
            raise ValueError(f"Unsafe table prefix: {table_prefix}")

        self.db_path = Path(db_path)
        self.parquet_dir = Path(parquet_dir)
        self.table_prefix = table_prefix

    def table_name(self, output_name: str) -> str:
        return f"{self.table_prefix}_{_TABLE_SUFFIXES[output_name]}"

    def persist(self, outputs: Sequence[KnowledgebaseOutputs]) -> None:
        if not outputs:
            return

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.parquet_dir.mkdir(parents=True, exist_ok=True)

        connection = duckdb.connect(str(self.db_path))
        try:
            for output_name, columns in OUTPUT_TABLE_COLUMNS.items():
                rows = [
                    {"kb_source": item.source, **row}
                    for item in outputs
                    for row in item.tables()[output_name]
                ]
                frame = pd.DataFrame(rows, columns=["kb_source", *columns]).astype(str)
                table_name = self.table_name(output_name)

                connection.register("output_frame", frame)
                connection.execute(
                    f"CREATE OR REPLACE TABLE {table_name} AS SELECT * FROM output_frame"
                )
                connection.unregister("output_frame")

                parquet_path = self.parquet_dir / f"{table_name}.parquet"
                if parquet_path.exists():
                    parquet_path.unlink()

                parquet_target = parquet_path.as_posix().replace("'", "''")
                connection.execute(f"COPY {table_name} TO '{parquet_target}' (FORMAT PARQUET)")
        finally:
            connection.close()
