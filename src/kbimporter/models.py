"""Canonical in-memory data models used by kb-importer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Union


@dataclass(frozen=True)
class SomaticVariant:
    """Normalized genomic variant with a 1-based, left-anchored position."""

    chromosome: str
    position: int
    ref: str
    alt: str

    def to_row(self) -> dict[str, Any]:
        return {
            "chromosome": self.chromosome,
            "position": self.position,
            "ref": self.ref,
            "alt": self.alt,
        }


@dataclass(frozen=True)
class Actionability:
    """Single drug/response payload attached to an actionable output row."""

    source: str
    drug: str
    drug_type: str
    cancer_type: str
    level: str
    significance: str
    evidence_type: str

    def to_row(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "drug": self.drug,
            "drugsType": self.drug_type,
            "cancerType": self.cancer_type,
            "level": self.level,
            "response": self.significance,
            "evidenceType": self.evidence_type,
        }


class EventKind(str, Enum):
    """Tag describing what an output row's event changed."""

    SOMATIC_VARIANT = "somatic_variant"
    FUSION_PAIR = "fusion_pair"
    PROMISCUOUS_GENE = "promiscuous_gene"
    CNV = "cnv"


@dataclass(frozen=True)
class SomaticVariantEvent:
    gene: str
    variant: SomaticVariant

    kind: ClassVar[EventKind] = EventKind.SOMATIC_VARIANT

    def to_row(self) -> dict[str, Any]:
        return {"gene": self.gene, **self.variant.to_row()}


@dataclass(frozen=True)
class FusionPair:
    five_gene: str
    three_gene: str

    kind: ClassVar[EventKind] = EventKind.FUSION_PAIR

    def to_row(self) -> dict[str, Any]:
        return {"fiveGene": self.five_gene, "threeGene": self.three_gene}


@dataclass(frozen=True)
class PromiscuousGene:
    gene: str

    kind: ClassVar[EventKind] = EventKind.PROMISCUOUS_GENE

    def to_row(self) -> dict[str, Any]:
        return {"gene": self.gene}


@dataclass(frozen=True)
class CnvEvent:
    gene: str
    cnv_type: str

    kind: ClassVar[EventKind] = EventKind.CNV

    def to_row(self) -> dict[str, Any]:
        return {"gene": self.gene, "cnvType": self.cnv_type}


FusionEvent = Union[FusionPair, PromiscuousGene]


@dataclass(frozen=True)
class KnownVariantOutput:
    """Normalized variant known to the knowledge base, with an evidence flag.

    ``additional_info`` is true when the strongest evidence for the record is
    level A, B or C.
    """

    gene: str
    transcript: str
    additional_info: bool
    event: SomaticVariantEvent

    def to_row(self) -> dict[str, Any]:
        return {
            "transcript": self.transcript,
            "additionalInfo": str(self.additional_info).lower(),
            **self.event.to_row(),
        }


@dataclass(frozen=True)
class ActionableVariantOutput:
    gene: str
    event: SomaticVariantEvent
    actionability: Actionability

    def to_row(self) -> dict[str, Any]:
        return {**self.event.to_row(), **self.actionability.to_row()}


@dataclass(frozen=True)
class ActionableCNVOutput:
    event: CnvEvent
    actionability: Actionability

    def to_row(self) -> dict[str, Any]:
        return {**self.event.to_row(), **self.actionability.to_row()}


def fusion_columns(event: FusionEvent) -> dict[str, Any]:
    """Fixed fusion columns for both fusion event kinds."""

    if event.kind is EventKind.FUSION_PAIR:
        return {
            "eventType": event.kind.value,
            "gene": "",
            "fiveGene": event.five_gene,
            "threeGene": event.three_gene,
        }
    return {"eventType": event.kind.value, "gene": event.gene, "fiveGene": "", "threeGene": ""}


@dataclass(frozen=True)
class ActionableFusionOutput:
    event: FusionEvent
    actionability: Actionability

    def to_row(self) -> dict[str, Any]:
        return {**fusion_columns(self.event), **self.actionability.to_row()}


@dataclass(frozen=True)
class CivicEvidence:
    """One clinical evidence item joined to a variant record."""

    evidence_id: str
    level: str
    direction: str
    cancer_type: str
    doid: str
    evidence_type: str = ""
    significance: str = ""
    actionability_items: tuple[Actionability, ...] = ()


@dataclass(frozen=True)
class CivicRecord:
    """Raw variant row from the knowledge base with its joined evidence."""

    variant_id: str
    gene: str
    transcript: str
    variant: str
    variant_types: tuple[str, ...] = ()
    chromosome: str = ""
    start: str = ""
    stop: str = ""
    ref: str = ""
    alt: str = ""
    hgvs: str = ""
    evidence: tuple[CivicEvidence, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class KnowledgebaseOutputs:
    """Snapshot of every output produced by one knowledge base in a run."""

    source: str
    known_variants: tuple[KnownVariantOutput, ...] = ()
    actionable_variants: tuple[ActionableVariantOutput, ...] = ()
    actionable_cnvs: tuple[ActionableCNVOutput, ...] = ()
    actionable_fusions: tuple[ActionableFusionOutput, ...] = ()
    known_fusion_pairs: tuple[FusionPair, ...] = ()
    promiscuous_genes: tuple[PromiscuousGene, ...] = ()
    cancer_types: dict[str, frozenset[str]] = field(default_factory=dict)

    def tables(self) -> dict[str, list[dict[str, Any]]]:
        """Flat rows per output table, in output order."""

        return {
            "knownVariants": [item.to_row() for item in self.known_variants],
            "actionableVariants": [item.to_row() for item in self.actionable_variants],
            "actionableCNVs": [item.to_row() for item in self.actionable_cnvs],
            "actionableFusions": [item.to_row() for item in self.actionable_fusions],
            "knownFusionPairs": [item.to_row() for item in self.known_fusion_pairs],
            "promiscuousGenes": [item.to_row() for item in self.promiscuous_genes],
            "cancerTypes": [
                {"cancerType": cancer_type, "doids": ";".join(sorted(doids))}
                for cancer_type, doids in self.cancer_types.items()
            ],
        }


_ACTIONABILITY_COLUMNS: tuple[str, ...] = (
    "source",
    "drug",
    "drugsType",
    "cancerType",
    "level",
    "response",
    "evidenceType",
)

_VARIANT_COLUMNS: tuple[str, ...] = ("gene", "chromosome", "position", "ref", "alt")

OUTPUT_TABLE_COLUMNS: dict[str, tuple[str, ...]] = {
    "knownVariants": ("transcript", "additionalInfo", *_VARIANT_COLUMNS),
    "actionableVariants": (*_VARIANT_COLUMNS, *_ACTIONABILITY_COLUMNS),
    "actionableCNVs": ("gene", "cnvType", *_ACTIONABILITY_COLUMNS),
    "actionableFusions": ("eventType", "gene", "fiveGene", "threeGene", *_ACTIONABILITY_COLUMNS),
    "knownFusionPairs": ("fiveGene", "threeGene"),
    "promiscuousGenes": ("gene",),
    "cancerTypes": ("cancerType", "doids"),
}
