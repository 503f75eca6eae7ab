"""Core kb-importer primitives.

This package turns curated knowledge-base exports into canonical known and
actionable variant, copy-number and fusion outputs.
"""

from .config import CivicSettings, ComponentConfig, RunConfig, RunConfigLoader
from .knowledgebases import CivicKnowledgebase, Knowledgebase
from .models import (
    Actionability,
    ActionableCNVOutput,
    ActionableFusionOutput,
    ActionableVariantOutput,
    CnvEvent,
    EventKind,
    FusionPair,
    KnowledgebaseOutputs,
    KnownVariantOutput,
    PromiscuousGene,
    SomaticVariant,
    SomaticVariantEvent,
)
from .pipeline import ImportRunReport, KbImportPipeline, KnowledgebaseSummary
from .registry import (
    KnowledgebasePluginSpec,
    KnowledgebaseRegistry,
    SharedCollaborators,
    build_default_registry,
)

__all__ = [
    "Actionability",
    "ActionableCNVOutput",
    "ActionableFusionOutput",
    "ActionableVariantOutput",
    "CivicKnowledgebase",
    "CivicSettings",
    "CnvEvent",
    "ComponentConfig",
    "EventKind",
    "FusionPair",
    "ImportRunReport",
    "KbImportPipeline",
    "Knowledgebase",
    "KnowledgebaseOutputs",
    "KnowledgebasePluginSpec",
    "KnowledgebaseRegistry",
    "KnowledgebaseSummary",
    "KnownVariantOutput",
    "PromiscuousGene",
    "RunConfig",
    "RunConfigLoader",
    "SomaticVariant",
    "SharedCollaborators",
    "SomaticVariantEvent",
    "build_default_registry",
]
