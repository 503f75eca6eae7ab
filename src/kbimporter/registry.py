"""Knowledge-base registry: maps config names to importers and wires their collaborators.

Every importer receives the run's shared reference genome, cDNA analyzer and
disease ontology; component params from the run config supply the rest
(input paths, offline exports, settings).
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from kbimporter.config import ComponentConfig
from kbimporter.errors import ConfigError
from kbimporter.knowledgebases import CivicKnowledgebase, Knowledgebase
from kbimporter.ontology import DiseaseOntologyLookup
from kbimporter.reference import ReferenceSequence
from kbimporter.transvar import CdnaAnalyzer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SharedCollaborators:
    """Run-scoped services handed to every knowledge base."""

    reference: ReferenceSequence
    cdna_analyzer: CdnaAnalyzer
    disease_ontology: DiseaseOntologyLookup

    def as_kwargs(self) -> dict[str, Any]:
        return {
            "reference": self.reference,
            "cdna_analyzer": self.cdna_analyzer,
            "disease_ontology": self.disease_ontology,
        }


@dataclass(frozen=True)
class KnowledgebasePluginSpec:
    """Knowledge base imported from ``module.class_name`` at run time."""

    name: str
    module: str
    class_name: str


class KnowledgebaseRegistry:
    """Knowledge-base classes keyed by their lower-cased config name."""

    def __init__(self) -> None:
        self._classes: dict[str, type[Knowledgebase]] = {}

    def register(self, knowledgebase_cls: type[Knowledgebase], name: str | None = None) -> None:
        key = (name or getattr(knowledgebase_cls, "name", "")).strip().lower()
        if not key:
            raise ValueError(f"{knowledgebase_cls.__name__} has no knowledge-base name")
        if key in self._classes:
            raise ValueError(
                f"'{key}' is already bound to {self._classes[key].__name__}; "
                f"cannot also register {knowledgebase_cls.__name__}"
            )
        self._classes[key] = knowledgebase_cls

    def register_plugin(self, plugin: KnowledgebasePluginSpec) -> None:
        try:
            module = importlib.import_module(plugin.module)
            knowledgebase_cls = getattr(module, plugin.class_name)
        except (ImportError, AttributeError) as exc:
            raise ConfigError(
                f"Cannot load knowledge-base plugin {plugin.module}.{plugin.class_name}: {exc}"
            ) from exc

        if not (isinstance(knowledgebase_cls, type) and issubclass(knowledgebase_cls, Knowledgebase)):
            raise ConfigError(
                f"Plugin {plugin.module}.{plugin.class_name} is not a Knowledgebase subclass"
            )
        self.register(knowledgebase_cls, plugin.name)
        logger.info("Registered knowledge-base plugin %s from %s", plugin.name, plugin.module)

    def create(self, component: ComponentConfig, shared: SharedCollaborators) -> Knowledgebase:
        """Build the configured knowledge base with the run's shared collaborators."""

        knowledgebase_cls = self._classes.get(component.name.strip().lower())
        if knowledgebase_cls is None:
            raise ConfigError(
                f"Unknown knowledge base '{component.name}'; known: {', '.join(self.available())}"
            )

        shared_kwargs = shared.as_kwargs()
        _reject_overrides(component.name, component.params, shared_kwargs)
        return knowledgebase_cls(**shared_kwargs, **component.params)

    def available(self) -> list[str]:
        return sorted(self._classes)


def _reject_overrides(name: str, params: Mapping[str, Any], shared: Mapping[str, Any]) -> None:
    clashing = sorted(set(params) & set(shared))
    if clashing:
        raise ConfigError(
            f"Knowledge base '{name}' params cannot set shared collaborators: {', '.join(clashing)}"
        )


def build_default_registry() -> KnowledgebaseRegistry:
    registry = KnowledgebaseRegistry()
    registry.register(CivicKnowledgebase)
    return registry
