"""CIViC knowledge-base importer.

Turns the CIViC nightly ``VariantSummaries`` and ``ClinicalEvidenceSummaries``
TSV exports into canonical known/actionable outputs:

* variant rows are corrected, joined to their evidence and split into point
  variant, copy-number and fusion candidates;
* point variants are normalized twice, directly from the row's locus and via
  TransVar from the row's HGVS expression, and the two results are merged;
* evidence that supports its clinical claim is expanded into one output row
  per drug payload.
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from collections.abc import Callable, Iterable, Mapping, Sequence
from contextlib import AbstractContextManager
from dataclasses import dataclass, replace
from functools import cached_property, partial
from pathlib import Path
from typing import Any

from kbimporter.civic_api import CivicApiClient, DrugInteractionSource, StaticDrugInteractions
from kbimporter.config import NO_EVIDENCE_LEVEL, CivicSettings
from kbimporter.fusions import extract_fusion
from kbimporter.knowledgebases.base import Knowledgebase
from kbimporter.knowledgebases.common import TabularKnowledgebaseMixin, read_tsv_records
from kbimporter.models import (
    Actionability,
    ActionableCNVOutput,
    ActionableFusionOutput,
    ActionableVariantOutput,
    CivicEvidence,
    CivicRecord,
    CnvEvent,
    EventKind,
    FusionEvent,
    FusionPair,
    KnownVariantOutput,
    PromiscuousGene,
    SomaticVariant,
    SomaticVariantEvent,
)
from kbimporter.ontology import DiseaseOntologyLookup
from kbimporter.reference import ReferenceSequence
from kbimporter.transvar import CDnaAnnotation, CdnaAnalyzer

logger = logging.getLogger(__name__)

VARIANT_COLUMNS = {
    "variant_id",
    "gene",
    "variant",
    "chromosome",
    "start",
    "stop",
    "reference_bases",
    "variant_bases",
    "representative_transcript",
    "variant_types",
    "hgvs_expressions",
}

EVIDENCE_COLUMNS = {
    "variant_id",
    "evidence_id",
    "evidence_level",
    "evidence_direction",
    "evidence_type",
    "clinical_significance",
    "disease",
    "doid",
    "drugs",
}

COMBINATION_INTERACTION = "COMBINATION"

DrugInteractionClientFactory = Callable[[], AbstractContextManager[DrugInteractionSource]]


@dataclass(frozen=True)
class CorrectionRule:
    """Rewrite ``pattern`` to ``replacement`` in the variant text of one gene."""

    gene: str
    pattern: re.Pattern[str]
    replacement: str

    def matches(self, record: CivicRecord) -> bool:
        return record.gene == self.gene and self.pattern.search(record.variant) is not None

    def apply(self, record: CivicRecord) -> CivicRecord:
        return replace(record, variant=self.pattern.sub(self.replacement, record.variant))


CORRECTION_RULES: tuple[CorrectionRule, ...] = (
    CorrectionRule(gene="KMT2A", pattern=re.compile("MLL-MLLT3"), replacement="KMT2A-MLLT3"),
)


def correct_record(
    record: CivicRecord,
    rules: Sequence[CorrectionRule] = CORRECTION_RULES,
) -> CivicRecord:
    """Apply the first matching correction rule, or return ``record`` unchanged."""

    for rule in rules:
        if rule.matches(record):
            return rule.apply(record)
    return record


def has_variant(record: CivicRecord) -> bool:
    """True when the record has a full locus with an allele, or an HGVS expression."""

    has_locus = bool(
        record.chromosome.strip()
        and record.start.strip()
        and record.stop.strip()
        and (record.ref.strip() or record.alt.strip())
    )
    return has_locus or bool(record.hgvs.strip())


def resolve_direct(record: CivicRecord, reference: ReferenceSequence) -> SomaticVariant | None:
    """Normalize the record's own locus, anchoring indels on the preceding base.

    Insertions (blank ref) are reported at ``start`` with the base at ``start``
    as anchor; deletions (blank alt) are reported at ``start - 1`` with the base
    there as anchor.
    """

    if not record.chromosome or not record.start or not (record.ref or record.alt):
        return None

    try:
        position = int(record.start)
    except ValueError:
        logger.debug(
            "Skipping direct resolution of %s: start %r is not numeric",
            record.variant_id,
            record.start,
        )
        return None

    if not record.ref:
        base = reference.get_base(record.chromosome, position)
        return SomaticVariant(record.chromosome, position, base, base + record.alt)

    if not record.alt:
        base = reference.get_base(record.chromosome, position - 1)
        return SomaticVariant(record.chromosome, position - 1, base + record.ref, base)

    return SomaticVariant(record.chromosome, position, record.ref, record.alt)


def cdna_annotation(record: CivicRecord) -> CDnaAnnotation:
    """Split ``transcript:c.change`` on its first colon, or return the sentinel."""

    transcript, separator, cdna = record.hgvs.partition(":")
    if not separator:
        return CDnaAnnotation.no_information()
    return CDnaAnnotation(transcript, cdna)


def merge_variants(
    direct: SomaticVariant | None,
    inferred: Iterable[SomaticVariant],
) -> list[SomaticVariant]:
    """Direct variant first, then inferred variants that differ from it."""

    merged = [direct] if direct is not None else []
    merged.extend(variant for variant in inferred if variant != direct)
    return merged


def highest_evidence_level(record: CivicRecord) -> str:
    return min((evidence.level for evidence in record.evidence), default=NO_EVIDENCE_LEVEL)


def additional_info(record: CivicRecord, significant_levels: frozenset[str]) -> bool:
    return highest_evidence_level(record) in significant_levels


def extract_cnv(record: CivicRecord) -> CnvEvent:
    if record.variant == "AMPLIFICATION":
        return CnvEvent(record.gene, "Amplification")
    return CnvEvent(record.gene, "Deletion")


def build_actionability_items(
    *,
    source: str,
    drugs: Sequence[str],
    interaction: str,
    cancer_type: str,
    level: str,
    significance: str,
    evidence_type: str,
) -> tuple[Actionability, ...]:
    """One payload for a drug combination, otherwise one payload per drug."""

    if not drugs:
        return ()

    if interaction.upper() == COMBINATION_INTERACTION and len(drugs) > 1:
        therapies = [(" + ".join(drugs), "combination")]
    else:
        therapies = [(drug, "single") for drug in drugs]

    return tuple(
        Actionability(
            source=source,
            drug=drug,
            drug_type=drug_type,
            cancer_type=cancer_type,
            level=level,
            significance=significance,
            evidence_type=evidence_type,
        )
        for drug, drug_type in therapies
    )


class CivicKnowledgebase(Knowledgebase, TabularKnowledgebaseMixin):
    """Import CIViC TSV exports into canonical outputs.

    All outputs are lazily computed and cached; the CIViC API client is opened
    only while the evidence map is built.
    """

    name = "civic"

    def __init__(
        self,
        *,
        variants_path: str | Path,
        evidence_path: str | Path,
        reference: ReferenceSequence,
        cdna_analyzer: CdnaAnalyzer,
        disease_ontology: DiseaseOntologyLookup,
        api_client_factory: DrugInteractionClientFactory = CivicApiClient,
        drug_interactions_path: str | Path | None = None,
        settings: CivicSettings | None = None,
        corrections: Sequence[CorrectionRule] = CORRECTION_RULES,
    ) -> None:
        self.variants_path = Path(variants_path)
        self.evidence_path = Path(evidence_path)
        self.reference = reference
        self.cdna_analyzer = cdna_analyzer
        self.disease_ontology = disease_ontology
        if drug_interactions_path is not None:
            api_client_factory = partial(StaticDrugInteractions, Path(drug_interactions_path))
        self.api_client_factory = api_client_factory
        self.settings = settings or CivicSettings()
        self.corrections = tuple(corrections)

    @property
    def source(self) -> str:
        return self.settings.source

    @cached_property
    def records(self) -> list[CivicRecord]:
        evidence_map = self._read_evidence_map()
        records = [
            correct_record(self._to_record(row, evidence_map), self.corrections)
            for row in read_tsv_records(self.variants_path, columns=VARIANT_COLUMNS)
        ]
        logger.info("Loaded %d CIViC variant records from %s", len(records), self.variants_path)
        return records

    @cached_property
    def civic_variants(self) -> list[tuple[CivicRecord, SomaticVariant]]:
        variant_records = [record for record in self.records if has_variant(record)]
        inferred = self.cdna_analyzer.analyze([cdna_annotation(record) for record in variant_records])

        pairs: list[tuple[CivicRecord, SomaticVariant]] = []
        for record, inferred_variants in zip(variant_records, inferred, strict=True):
            direct = resolve_direct(record, self.reference)
            pairs.extend((record, variant) for variant in merge_variants(direct, inferred_variants))

        logger.info(
            "Normalized %d variants from %d point-variant candidates",
            len(pairs),
            len(variant_records),
        )
        return pairs

    @cached_property
    def known_variants(self) -> list[KnownVariantOutput]:
        return [
            KnownVariantOutput(
                gene=record.gene,
                transcript=record.transcript,
                additional_info=additional_info(record, self.settings.significant_levels),
                event=SomaticVariantEvent(record.gene, variant),
            )
            for record, variant in self.civic_variants
        ]

    @cached_property
    def known_fusion_pairs(self) -> list[FusionPair]:
        events = (output.event for output in self.actionable_fusions)
        return list(
            dict.fromkeys(event for event in events if event.kind is EventKind.FUSION_PAIR)
        )

    @cached_property
    def promiscuous_genes(self) -> list[PromiscuousGene]:
        events = (output.event for output in self.actionable_fusions)
        return list(
            dict.fromkeys(event for event in events if event.kind is EventKind.PROMISCUOUS_GENE)
        )

    @cached_property
    def actionable_variants(self) -> list[ActionableVariantOutput]:
        return [
            ActionableVariantOutput(record.gene, SomaticVariantEvent(record.gene, variant), item)
            for record, variant in self.civic_variants
            for item in self._supported_actionability(record)
        ]

    @cached_property
    def actionable_cnvs(self) -> list[ActionableCNVOutput]:
        return [
            ActionableCNVOutput(extract_cnv(record), item)
            for record in self.records
            if record.variant in self.settings.cnv_variants
            for item in self._supported_actionability(record)
        ]

    @cached_property
    def actionable_fusions(self) -> list[ActionableFusionOutput]:
        outputs: list[ActionableFusionOutput] = []
        for record in self.records:
            if "fusion" not in record.variant_types:
                continue

            fusion: FusionEvent = extract_fusion(
                record.gene, record.variant.strip(), self.settings.fusion_separators
            )
            if fusion in self.settings.fusions_to_filter:
                logger.debug("Dropping filtered fusion %s for variant %s", fusion, record.variant_id)
                continue

            outputs.extend(
                ActionableFusionOutput(fusion, item) for item in self._supported_actionability(record)
            )
        return outputs

    @cached_property
    def cancer_types(self) -> dict[str, frozenset[str]]:
        cancer_types: dict[str, frozenset[str]] = {}
        for record in self.records:
            for evidence in record.evidence:
                doids = frozenset(
                    self.disease_ontology.find_ids_for_cancer_type(evidence.cancer_type)
                    | self.disease_ontology.find_ids_for_ontology_id(evidence.doid)
                )
                previous = cancer_types.get(evidence.cancer_type)
                if previous is not None and previous != doids:
                    logger.warning(
                        "Cancer type %r maps to different DOIDs across evidence; keeping the last (%s)",
                        evidence.cancer_type,
                        ",".join(sorted(doids)),
                    )
                cancer_types[evidence.cancer_type] = doids
        return cancer_types

    def _supported_actionability(self, record: CivicRecord) -> list[Actionability]:
        return [
            item
            for evidence in record.evidence
            if evidence.direction == self.settings.supported_direction
            for item in evidence.actionability_items
        ]

    def _read_evidence_map(self) -> dict[str, list[CivicEvidence]]:
        with self.api_client_factory() as client:
            interactions = client.drug_interaction_map()

        evidence_map: dict[str, list[CivicEvidence]] = defaultdict(list)
        for row in read_tsv_records(self.evidence_path, columns=EVIDENCE_COLUMNS):
            evidence_map[self._to_string(row.get("variant_id"))].append(
                self._to_evidence(row, interactions)
            )

        logger.info(
            "Read %d evidence items for %d variants from %s",
            sum(len(items) for items in evidence_map.values()),
            len(evidence_map),
            self.evidence_path,
        )
        return evidence_map

    def _to_evidence(self, row: Mapping[str, Any], interactions: Mapping[str, str]) -> CivicEvidence:
        evidence_id = self._to_string(row.get("evidence_id"))
        level = self._to_string(row.get("evidence_level"))
        cancer_type = self._to_string(row.get("disease"))
        significance = self._to_string(row.get("clinical_significance"))
        evidence_type = self._to_string(row.get("evidence_type"))

        return CivicEvidence(
            evidence_id=evidence_id,
            level=level,
            direction=self._to_string(row.get("evidence_direction")),
            cancer_type=cancer_type,
            doid=self._to_string(row.get("doid")),
            evidence_type=evidence_type,
            significance=significance,
            actionability_items=build_actionability_items(
                source=self.source,
                drugs=self._split_list(row.get("drugs")),
                interaction=interactions.get(evidence_id, ""),
                cancer_type=cancer_type,
                level=level,
                significance=significance,
                evidence_type=evidence_type,
            ),
        )

    def _to_record(
        self,
        row: Mapping[str, Any],
        evidence_map: Mapping[str, list[CivicEvidence]],
    ) -> CivicRecord:
        variant_id = self._to_string(row.get("variant_id"))
        transcript = self._to_string(row.get("representative_transcript"))

        return CivicRecord(
            variant_id=variant_id,
            gene=self._to_string(row.get("gene")),
            transcript=transcript,
            variant=self._to_string(row.get("variant")),
            variant_types=self._split_list(row.get("variant_types")),
            chromosome=self._to_string(row.get("chromosome")),
            start=self._to_string(row.get("start")),
            stop=self._to_string(row.get("stop")),
            ref=self._to_string(row.get("reference_bases")),
            alt=self._to_string(row.get("variant_bases")),
            hgvs=self._select_hgvs(self._split_list(row.get("hgvs_expressions")), transcript),
            evidence=tuple(evidence_map.get(variant_id, ())),
        )

    @staticmethod
    def _select_hgvs(expressions: Sequence[str], transcript: str) -> str:
        """Pick the cDNA expression on the representative transcript, if any."""

        coding = [expression for expression in expressions if ":c." in expression]
        transcript_id = transcript.split(".", 1)[0]
        if transcript_id:
            for expression in coding:
                if expression.split(":", 1)[0].split(".", 1)[0] == transcript_id:
                    return expression
        return coding[0] if coding else ""
