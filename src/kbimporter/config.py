"""Configuration contracts for kb-importer runs."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from jsonschema import exceptions as jsex
from jsonschema.validators import validator_for

from kbimporter.errors import ConfigError
from kbimporter.models import FusionPair


DEFAULT_SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "run_config.schema.json"

SUPPORTED_DIRECTION = "Supports"

CNV_VARIANTS: tuple[str, ...] = ("AMPLIFICATION", "DELETION", "LOH")

SIGNIFICANT_LEVELS: frozenset[str] = frozenset({"A", "B", "C"})

NO_EVIDENCE_LEVEL = "N"


@dataclass(frozen=True)
class CivicSettings:
    """Static rules applied while importing CIViC exports."""

    source: str = "civic"
    fusion_separators: tuple[str, ...] = ("-",)
    fusions_to_filter: frozenset[FusionPair] = frozenset({FusionPair("BRAF", "CUL1")})
    cnv_variants: tuple[str, ...] = CNV_VARIANTS
    supported_direction: str = SUPPORTED_DIRECTION
    significant_levels: frozenset[str] = SIGNIFICANT_LEVELS


@dataclass(frozen=True)
class ComponentConfig:
    """Named component plus constructor params, as written in run configs."""

    name: str
    params: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RunConfig:
    """Validated run configuration."""

    knowledgebases: tuple[ComponentConfig, ...]
    reference_fasta: str
    transvar: Mapping[str, Any] = field(default_factory=dict)
    ontology_json: str | None = None
    publishers: tuple[ComponentConfig, ...] = ()
    storage: ComponentConfig | None = None
    plugins: tuple[Mapping[str, str], ...] = ()


class RunConfigLoader:
    """Load a JSON run configuration and validate it against its schema."""

    def __init__(self, schema_path: str | Path | None = None) -> None:
        self.schema_path = Path(schema_path) if schema_path is not None else DEFAULT_SCHEMA_PATH

    def load(self, path: str | Path) -> RunConfig:
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f"Run config not found: {config_path}")

        try:
            payload = json.loads(config_path.read_text())
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Run config {config_path} is not valid JSON: {exc}") from exc

        self.validate(payload)
        return self._parse(payload)

    def validate(self, payload: Mapping[str, Any]) -> None:
        """Raise ``jsonschema.ValidationError`` for the most relevant schema violation."""

        schema = json.loads(self.schema_path.read_text())
        validator_cls = validator_for(schema)
        validator_cls.check_schema(schema)
        validator = validator_cls(schema)

        error = jsex.best_match(validator.iter_errors(payload))
        if error is not None:
            raise error

    def _parse(self, payload: Mapping[str, Any]) -> RunConfig:
        storage_raw = payload.get("storage")
        return RunConfig(
            knowledgebases=tuple(self._component(item) for item in payload["knowledgebases"]),
            reference_fasta=str(payload["reference_fasta"]),
            transvar=dict(payload.get("transvar", {})),
            ontology_json=payload.get("ontology_json"),
            publishers=tuple(self._component(item) for item in payload.get("publishers", [])),
            storage=self._component(storage_raw) if storage_raw else None,
            plugins=tuple(dict(item) for item in payload.get("plugins", [])),
        )

    @staticmethod
    def _component(raw: Mapping[str, Any]) -> ComponentConfig:
        return ComponentConfig(
            name=str(raw["name"]).strip().lower(),
            params=dict(raw.get("params", {})),
        )
