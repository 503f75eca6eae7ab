"""JSON publisher for the cancer-type mapping and fusion summaries."""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path

from kbimporter.models import KnowledgebaseOutputs
from kbimporter.publishers.base import Publisher


class JsonOutputPublisher(Publisher):
    """Publish ``cancer_types.json`` and ``fusions.json`` per knowledge base."""

    def __init__(self, *, output_root: str | Path, indent: int = 4) -> None:
        self.output_root = Path(output_root)
        self.indent = indent

    def publish(self, outputs: Sequence[KnowledgebaseOutputs]) -> None:
        for item in outputs:
            source_dir = self.output_root / item.source
            source_dir.mkdir(parents=True, exist_ok=True)

            cancer_types = {
                cancer_type: sorted(doids) for cancer_type, doids in item.cancer_types.items()
            }
            with (source_dir / "cancer_types.json").open("w") as stream:
                json.dump(cancer_types, stream, indent=self.indent)

            fusions = {
                "knownFusionPairs": [pair.to_row() for pair in item.known_fusion_pairs],
                "promiscuousGenes": [gene.gene for gene in item.promiscuous_genes],
            }
            with (source_dir / "fusions.json").open("w") as stream:
                json.dump(fusions, stream, indent=self.indent)
