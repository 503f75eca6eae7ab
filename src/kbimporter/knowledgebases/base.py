"""Base interface for all knowledge-base importers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from kbimporter.models import (
    ActionableCNVOutput,
    ActionableFusionOutput,
    ActionableVariantOutput,
    FusionPair,
    KnownVariantOutput,
    PromiscuousGene,
)


class Knowledgebase(ABC):
    """Knowledge base that exposes canonical known and actionable outputs.

    Implementations compute each output at most once per instance.
    """

    name: str

    @property
    @abstractmethod
    def source(self) -> str:
        """Short source label written to every actionability payload."""

    @property
    @abstractmethod
    def known_variants(self) -> list[KnownVariantOutput]:
        ...

    @property
    @abstractmethod
    def known_fusion_pairs(self) -> list[FusionPair]:
        ...

    @property
    @abstractmethod
    def promiscuous_genes(self) -> list[PromiscuousGene]:
        ...

    @property
    @abstractmethod
    def actionable_variants(self) -> list[ActionableVariantOutput]:
        ...

    @property
    @abstractmethod
    def actionable_cnvs(self) -> list[ActionableCNVOutput]:
        ...

    @property
    @abstractmethod
    def actionable_fusions(self) -> list[ActionableFusionOutput]:
        ...

    @property
    @abstractmethod
    def cancer_types(self) -> dict[str, frozenset[str]]:
        """Map cancer-type labels to Disease Ontology identifiers."""
