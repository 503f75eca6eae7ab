import csv
import json
import subprocess
import sys
from pathlib import Path

import pysam

FAKE_TRANSVAR = """#!/bin/sh
printf 'input\\ttranscript\\tgene\\tstrand\\tcoordinates(gDNA/cDNA/protein)\\tregion\\tinfo\\n'
printf '0|ENST00000288602.6|c.1799T>A\\tENST00000288602 (protein_coding)\\tBRAF\\t-\\tchr7:g.12G>C/c.1798G>C/p.V600L\\t.\\t.\\n'
"""


def _write_tsv(path: Path, rows: list[dict[str, str]]) -> None:
    with path.open("w", newline="") as stream:
        writer = csv.DictWriter(stream, fieldnames=list(rows[0]), delimiter="\t")
        writer.writeheader()
        writer.writerows(rows)


def _write_inputs(tmp_path: Path) -> dict[str, Path]:
    paths = {
        "variants": tmp_path / "VariantSummaries.tsv",
        "evidence": tmp_path / "ClinicalEvidenceSummaries.tsv",
        "interactions": tmp_path / "interactions.json",
        "fasta": tmp_path / "reference.fa",
        "transvar": tmp_path / "transvar",
    }

    variant_defaults = dict.fromkeys(
        [
            "chromosome",
            "start",
            "stop",
            "reference_bases",
            "variant_bases",
            "representative_transcript",
            "hgvs_expressions",
        ],
        "",
    )
    _write_tsv(
        paths["variants"],
        [
            {
                **variant_defaults,
                "variant_id": "12",
                "gene": "BRAF",
                "variant": "V600E",
                "chromosome": "7",
                "start": "11",
                "stop": "11",
                "reference_bases": "G",
                "variant_bases": "A",
                "representative_transcript": "ENST00000288602.6",
                "variant_types": "missense_variant",
                "hgvs_expressions": "ENST00000288602.6:c.1799T>A",
            },
            {
                **variant_defaults,
                "variant_id": "13",
                "gene": "ALK",
                "variant": "EML4-ALK",
                "variant_types": "transcript_fusion,fusion",
            },
        ],
    )
    _write_tsv(
        paths["evidence"],
        [
            {
                "variant_id": "12",
                "evidence_id": "100",
                "evidence_level": "A",
                "evidence_direction": "Supports",
                "evidence_type": "Predictive",
                "clinical_significance": "Sensitivity/Response",
                "disease": "Melanoma",
                "doid": "1909",
                "drugs": "Dabrafenib,Trametinib",
            },
            {
                "variant_id": "13",
                "evidence_id": "101",
                "evidence_level": "B",
                "evidence_direction": "Supports",
                "evidence_type": "Predictive",
                "clinical_significance": "Sensitivity/Response",
                "disease": "Lung Non-small Cell Carcinoma",
                "doid": "3908",
                "drugs": "Crizotinib",
            },
        ],
    )
    paths["interactions"].write_text(json.dumps({"100": "COMBINATION"}))

    paths["fasta"].write_text(">7\nACGTACGTACGTACGT\n")
    pysam.faidx(str(paths["fasta"]))

    paths["transvar"].write_text(FAKE_TRANSVAR)
    paths["transvar"].chmod(0o755)
    return paths


def test_run_import_script_executes_pipeline(tmp_path: Path) -> None:
    repo_root = Path(__file__).resolve().parents[1]
    paths = _write_inputs(tmp_path)
    output_root = tmp_path / "output"
    config_path = tmp_path / "run.json"

    config_path.write_text(
        json.dumps(
            {
                "knowledgebases": [
                    {
                        "name": "civic",
                        "params": {
                            "variants_path": str(paths["variants"]),
                            "evidence_path": str(paths["evidence"]),
                            "drug_interactions_path": str(paths["interactions"]),
                        },
                    }
                ],
                "reference_fasta": str(paths["fasta"]),
                "transvar": {"executable": str(paths["transvar"])},
                "publishers": [
                    {"name": "tsv", "params": {"output_root": str(output_root)}},
                    {"name": "json", "params": {"output_root": str(output_root)}},
                ],
                "storage": {
                    "name": "duckdb_parquet",
                    "params": {
                        "db_path": str(tmp_path / "kb.duckdb"),
                        "parquet_dir": str(tmp_path / "parquet"),
                    },
                },
            }
        )
    )

    result = subprocess.run(
        [sys.executable, "scripts/run_import.py", "--config", str(config_path)],
        cwd=repo_root,
        text=True,
        capture_output=True,
        check=True,
    )

    payload = json.loads(result.stdout)
    assert payload["knowledgebase_count"] == 1
    summary = payload["knowledgebases"][0]
    assert summary["source"] == "civic"
    assert summary["known_variants"] == 2
    assert summary["actionable_variants"] == 2
    assert summary["actionable_fusions"] == 1
    assert summary["known_fusion_pairs"] == 1
    assert summary["cancer_types"] == 2

    actionable = (output_root / "civic" / "actionableVariants.tsv").read_text().splitlines()
    assert len(actionable) == 3
    assert all("Dabrafenib + Trametinib" in line for line in actionable[1:])

    fusions = json.loads((output_root / "civic" / "fusions.json").read_text())
    assert fusions["knownFusionPairs"] == [{"fiveGene": "EML4", "threeGene": "ALK"}]
    assert (tmp_path / "parquet" / "kb_actionable_fusions.parquet").exists()
