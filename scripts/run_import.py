#!/usr/bin/env python3
"""Run configured knowledge-base imports and print a JSON run summary."""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from kbimporter import RunConfigLoader  # noqa: E402
from kbimporter.runner import run_from_config  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import knowledge-base exports from a JSON config")
    parser.add_argument("--config", required=True, help="Path to run JSON config")
    parser.add_argument("--schema", default=None, help="Override the run config JSON Schema")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logger = logging.getLogger("kbimporter.run_import")

    config = RunConfigLoader(args.schema).load(args.config)
    logger.info("Loaded run config %s with %d knowledge bases", args.config, len(config.knowledgebases))

    report = run_from_config(config)

    payload = {
        "knowledgebase_count": report.knowledgebase_count,
        "knowledgebases": [dataclasses.asdict(summary) for summary in report.summaries],
    }
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
