"""Composable kb-importer pipeline orchestrator."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from kbimporter.knowledgebases.base import Knowledgebase
from kbimporter.models import KnowledgebaseOutputs
from kbimporter.publishers.base import Publisher
from kbimporter.storage.base import OutputStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KnowledgebaseSummary:
    """Output counts for one knowledge base."""

    source: str
    known_variants: int
    actionable_variants: int
    actionable_cnvs: int
    actionable_fusions: int
    known_fusion_pairs: int
    promiscuous_genes: int
    cancer_types: int


@dataclass
class ImportRunReport:
    """Execution summary for a pipeline run."""

    knowledgebase_count: int
    summaries: list[KnowledgebaseSummary] = field(default_factory=list)


def collect_outputs(knowledgebase: Knowledgebase) -> KnowledgebaseOutputs:
    """Snapshot a knowledge base's outputs in dependency order."""

    return KnowledgebaseOutputs(
        source=knowledgebase.source,
        known_variants=tuple(knowledgebase.known_variants),
        actionable_variants=tuple(knowledgebase.actionable_variants),
        actionable_cnvs=tuple(knowledgebase.actionable_cnvs),
        actionable_fusions=tuple(knowledgebase.actionable_fusions),
        known_fusion_pairs=tuple(knowledgebase.known_fusion_pairs),
        promiscuous_genes=tuple(knowledgebase.promiscuous_genes),
        cancer_types=dict(knowledgebase.cancer_types),
    )


def summarize(outputs: KnowledgebaseOutputs) -> KnowledgebaseSummary:
    return KnowledgebaseSummary(
        source=outputs.source,
        known_variants=len(outputs.known_variants),
        actionable_variants=len(outputs.actionable_variants),
        actionable_cnvs=len(outputs.actionable_cnvs),
        actionable_fusions=len(outputs.actionable_fusions),
        known_fusion_pairs=len(outputs.known_fusion_pairs),
        promiscuous_genes=len(outputs.promiscuous_genes),
        cancer_types=len(outputs.cancer_types),
    )


class KbImportPipeline:
    """Run knowledge bases, then storage and publication, in order."""

    def __init__(
        self,
        *,
        knowledgebases: list[Knowledgebase],
        storage: OutputStorage | None = None,
        publishers: list[Publisher] | None = None,
    ) -> None:
        self.knowledgebases = knowledgebases
        self.storage = storage
        self.publishers = publishers or []

    def run(self) -> ImportRunReport:
        outputs: list[KnowledgebaseOutputs] = []

        for knowledgebase in self.knowledgebases:
            logger.info("Importing knowledge base %s", knowledgebase.source)
            outputs.append(collect_outputs(knowledgebase))

        if self.storage is not None:
            self.storage.persist(outputs)

        for publisher in self.publishers:
            publisher.publish(outputs)

        report = ImportRunReport(
            knowledgebase_count=len(self.knowledgebases),
            summaries=[summarize(item) for item in outputs],
        )
        for summary in report.summaries:
            logger.info("Finished %s: %s", summary.source, summary)
        return report
