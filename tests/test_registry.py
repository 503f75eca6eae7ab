import importlib
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from kbimporter.config import ComponentConfig  # noqa: E402
from kbimporter.errors import ConfigError  # noqa: E402
from kbimporter.knowledgebases import CivicKnowledgebase, Knowledgebase  # noqa: E402
from kbimporter.registry import (  # noqa: E402
    KnowledgebasePluginSpec,
    KnowledgebaseRegistry,
    SharedCollaborators,
    build_default_registry,
)


class _EmptyKnowledgebase(Knowledgebase):
    name = "empty"
    source = "empty"
    known_variants = []
    known_fusion_pairs = []
    promiscuous_genes = []
    actionable_variants = []
    actionable_cnvs = []
    actionable_fusions = []
    cancer_types = {}

    def __init__(self, **kwargs) -> None:
        self.kwargs = kwargs


def _shared() -> SharedCollaborators:
    return SharedCollaborators(reference=object(), cdna_analyzer=object(), disease_ontology=object())


def test_default_registry_contains_civic() -> None:
    assert build_default_registry().available() == ["civic"]


def test_create_injects_shared_collaborators(tmp_path: Path) -> None:
    shared = _shared()
    component = ComponentConfig(
        "CIViC",
        {"variants_path": tmp_path / "variants.tsv", "evidence_path": tmp_path / "evidence.tsv"},
    )

    knowledgebase = build_default_registry().create(component, shared)

    assert isinstance(knowledgebase, CivicKnowledgebase)
    assert knowledgebase.reference is shared.reference
    assert knowledgebase.cdna_analyzer is shared.cdna_analyzer
    assert knowledgebase.disease_ontology is shared.disease_ontology
    assert knowledgebase.variants_path == tmp_path / "variants.tsv"


def test_create_rejects_params_that_override_shared_collaborators() -> None:
    registry = KnowledgebaseRegistry()
    registry.register(_EmptyKnowledgebase)

    with pytest.raises(ConfigError, match="reference"):
        registry.create(ComponentConfig("empty", {"reference": "hg19.fa", "limit": 3}), _shared())


def test_create_reports_unknown_names() -> None:
    registry = KnowledgebaseRegistry()
    registry.register(_EmptyKnowledgebase)

    with pytest.raises(ConfigError, match="known: empty"):
        registry.create(ComponentConfig("oncokb"), _shared())


def test_register_rejects_duplicate_and_empty_names() -> None:
    registry = KnowledgebaseRegistry()
    registry.register(_EmptyKnowledgebase)

    with pytest.raises(ValueError, match="already bound"):
        registry.register(_EmptyKnowledgebase, " EMPTY ")
    with pytest.raises(ValueError):
        registry.register(_EmptyKnowledgebase, "  ")


def test_registry_plugin_registration(tmp_path: Path) -> None:
    module_path = tmp_path / "plugin_kb.py"
    module_path.write_text(
        "from kbimporter.knowledgebases import Knowledgebase\n"
        "class CustomKnowledgebase(Knowledgebase):\n"
        "    name = 'custom'\n"
        "    source = 'custom'\n"
        "    known_variants = known_fusion_pairs = promiscuous_genes = []\n"
        "    actionable_variants = actionable_cnvs = actionable_fusions = []\n"
        "    cancer_types = {}\n"
        "    def __init__(self, value=0, **shared):\n"
        "        self.value = value\n"
        "        self.shared = shared\n"
        "class NotAKnowledgebase:\n"
        "    pass\n"
    )

    sys.path.insert(0, str(tmp_path))
    try:
        importlib.invalidate_caches()
        registry = KnowledgebaseRegistry()
        registry.register_plugin(
            KnowledgebasePluginSpec(name="custom", module="plugin_kb", class_name="CustomKnowledgebase")
        )

        instance = registry.create(ComponentConfig("custom", {"value": 7}), _shared())
        assert getattr(instance, "value") == 7
        assert set(getattr(instance, "shared")) == {"reference", "cdna_analyzer", "disease_ontology"}

        with pytest.raises(ConfigError, match="not a Knowledgebase"):
            registry.register_plugin(
                KnowledgebasePluginSpec(name="other", module="plugin_kb", class_name="NotAKnowledgebase")
            )
        with pytest.raises(ConfigError, match="Cannot load"):
            registry.register_plugin(
                KnowledgebasePluginSpec(name="missing", module="plugin_kb", class_name="Missing")
            )
    finally:
        sys.path = [path for path in sys.path if path != str(tmp_path)]
        sys.modules.pop("plugin_kb", None)
