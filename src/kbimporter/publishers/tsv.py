"""Tab-separated output tables, one file per output and knowledge base."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from kbimporter.models import OUTPUT_TABLE_COLUMNS, KnowledgebaseOutputs
from kbimporter.publishers.base import Publisher

logger = logging.getLogger(__name__)


class TsvOutputPublisher(Publisher):
    """Write ``<output_root>/<source>/<table>.tsv`` for every output table.

    Column order is fixed per table, so empty outputs still get a header row.
    """

    def __init__(self, *, output_root: str | Path) -> None:
        self.output_root = Path(output_root)

    def publish(self, outputs: Sequence[KnowledgebaseOutputs]) -> None:
        for item in outputs:
            source_dir = self.output_root / item.source
            source_dir.mkdir(parents=True, exist_ok=True)

            for table_name, rows in item.tables().items():
                frame = pd.DataFrame(rows, columns=list(OUTPUT_TABLE_COLUMNS[table_name]))
                path = source_dir / f"{table_name}.tsv"
                frame.to_csv(path, sep="\t", index=False)
                logger.info("Wrote %d rows to %s", len(frame), path)
