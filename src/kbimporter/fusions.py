"""Fusion event extraction from free-text variant names."""

from __future__ import annotations

import re
from collections.abc import Sequence

from kbimporter.models import FusionEvent, FusionPair, PromiscuousGene

_GENE_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9.]*$")


def extract_fusion(gene: str, fusion_text: str, separators: Sequence[str]) -> FusionEvent:
    """Return a fusion pair for ``FIVE<sep>THREE`` names, else a promiscuous gene.

    Only the leading token of each side is used, so ``EML4-ALK E6;A20`` gives
    ``EML4``/``ALK``. Text without a separator, such as ``ALK FUSIONS``, marks
    ``gene`` as a promiscuous fusion partner.
    """

    text = fusion_text.strip()
    for separator in separators:
        if separator not in text:
            continue

        parts = text.split(separator)
        if len(parts) != 2:
            break

        five_gene, three_gene = (_leading_token(part) for part in parts)
        if _GENE_RE.match(five_gene) and _GENE_RE.match(three_gene):
            return FusionPair(five_gene.upper(), three_gene.upper())
        break

    return PromiscuousGene(gene)


def _leading_token(value: str) -> str:
    tokens = value.strip().split()
    return tokens[0] if tokens else ""
