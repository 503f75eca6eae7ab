"""Build and run a kb-importer pipeline from a validated run configuration."""

from __future__ import annotations

import logging
from contextlib import ExitStack

from kbimporter.config import RunConfig
from kbimporter.ontology import DiseaseOntology
from kbimporter.pipeline import ImportRunReport, KbImportPipeline
from kbimporter.publishers import JsonOutputPublisher, Publisher, TsvOutputPublisher
from kbimporter.reference import FastaReference, ReferenceSequence
from kbimporter.registry import (
    KnowledgebasePluginSpec,
    KnowledgebaseRegistry,
    SharedCollaborators,
    build_default_registry,
)
from kbimporter.storage import DuckDBParquetStorage, OutputStorage
from kbimporter.transvar import TransvarCdnaAnalyzer

logger = logging.getLogger(__name__)

PUBLISHERS: dict[str, type[Publisher]] = {
    "tsv": TsvOutputPublisher,
    "json": JsonOutputPublisher,
}

STORAGES: dict[str, type[OutputStorage]] = {
    "duckdb_parquet": DuckDBParquetStorage,
}


def build_registry(config: RunConfig) -> KnowledgebaseRegistry:
    registry = build_default_registry()
    for plugin_raw in config.plugins:
        registry.register_plugin(
            KnowledgebasePluginSpec(
                name=plugin_raw["name"],
                module=plugin_raw["module"],
                class_name=plugin_raw["class_name"],
            )
        )
    return registry


def build_publishers(config: RunConfig) -> list[Publisher]:
    publishers: list[Publisher] = []
    for item in config.publishers:
        if item.name not in PUBLISHERS:
            raise ValueError(f"Unknown publisher: {item.name}")
        publishers.append(PUBLISHERS[item.name](**item.params))
    return publishers


def build_storage(config: RunConfig) -> OutputStorage | None:
    if config.storage is None:
        return None
    if config.storage.name not in STORAGES:
        raise ValueError(f"Unknown storage type: {config.storage.name}")
    return STORAGES[config.storage.name](**config.storage.params)


def build_ontology(config: RunConfig) -> DiseaseOntology:
    if config.ontology_json is None:
        logger.warning("No ontology_json configured; cancer types resolve to their own DOIDs only")
        return DiseaseOntology(labels={})
    return DiseaseOntology.from_obographs_json(config.ontology_json)


def run_from_config(config: RunConfig) -> ImportRunReport:
    """Open shared collaborators, run every configured knowledge base, then close them."""

    registry = build_registry(config)

    with ExitStack() as stack:
        reference: ReferenceSequence = stack.enter_context(FastaReference(config.reference_fasta))
        shared = SharedCollaborators(
            reference=reference,
            cdna_analyzer=TransvarCdnaAnalyzer(reference, **config.transvar),
            disease_ontology=build_ontology(config),
        )
        knowledgebases = [
            registry.create(component, shared) for component in config.knowledgebases
        ]

        return KbImportPipeline(
            knowledgebases=knowledgebases,
            storage=build_storage(config),
            publishers=build_publishers(config),
        ).run()
