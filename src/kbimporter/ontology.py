"""Disease Ontology lookups used to map cancer types to DOID sets."""

from __future__ import annotations

import json
import logging
import re
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)

_DOID_RE = re.compile(r"DOID[_:](?P<number>\d+)$")


class DiseaseOntologyLookup(Protocol):
    def find_ids_for_cancer_type(self, cancer_type: str) -> set[str]:
        ...

    def find_ids_for_ontology_id(self, ontology_id: str) -> set[str]:
        ...


def normalize_doid(value: str | None) -> str | None:
    """Return ``DOID:<n>`` for DOID URIs, CURIEs or bare numbers."""

    if value is None:
        return None

    cleaned = str(value).strip()
    if not cleaned:
        return None
    if cleaned.isdigit():
        return f"DOID:{int(cleaned)}"

    match = _DOID_RE.search(cleaned)
    return f"DOID:{int(match.group('number'))}" if match else None


@dataclass
class DiseaseOntology:
    """In-memory Disease Ontology graph.

    Every lookup returns the matching DOIDs together with all of their
    ``is_a`` descendants, so a broad cancer type also matches its subtypes.
    """

    labels: dict[str, set[str]]
    children: dict[str, set[str]] = field(default_factory=dict)

    @staticmethod
    def normalize_label(value: str | None) -> str:
        if value is None:
            return ""
        return re.sub(r"\s+", " ", str(value).strip()).lower()

    def find_ids_for_cancer_type(self, cancer_type: str) -> set[str]:
        key = self.normalize_label(cancer_type)
        if not key:
            return set()
        return self._with_descendants(self.labels.get(key, set()))

    def find_ids_for_ontology_id(self, ontology_id: str) -> set[str]:
        doid = normalize_doid(ontology_id)
        if doid is None:
            return set()
        return self._with_descendants({doid})

    def _with_descendants(self, roots: set[str]) -> set[str]:
        found: set[str] = set()
        pending = list(roots)
        while pending:
            current = pending.pop()
            if current in found:
                continue
            found.add(current)
            pending.extend(self.children.get(current, ()))
        return found

    @classmethod
    def from_obographs_json(cls, json_path: str | Path) -> "DiseaseOntology":
        """Build the graph from a ``doid.json`` obographs export."""

        path = Path(json_path)
        payload: dict[str, Any] = json.loads(path.read_text())

        labels: dict[str, set[str]] = defaultdict(set)
        children: dict[str, set[str]] = defaultdict(set)

        for graph in payload.get("graphs", []):
            for node in graph.get("nodes", []):
                doid = normalize_doid(node.get("id"))
                if doid is None:
                    continue

                names = [node.get("lbl")]
                names.extend(item.get("val") for item in node.get("meta", {}).get("synonyms", []))
                for name in names:
                    key = cls.normalize_label(name)
                    if key:
                        labels[key].add(doid)

            for edge in graph.get("edges", []):
                if edge.get("pred") != "is_a":
                    continue
                child = normalize_doid(edge.get("sub"))
                parent = normalize_doid(edge.get("obj"))
                if child is not None and parent is not None:
                    children[parent].add(child)

        logger.info("Loaded %d disease labels from %s", len(labels), path)
        return cls(labels=dict(labels), children=dict(children))
