"""Shared utilities for tabular knowledge-base exports."""

from __future__ import annotations

import csv
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pandas as pd


def read_tsv_records(
    path: str | Path,
    *,
    columns: set[str] | None = None,
    chunksize: int = 100_000,
) -> Iterator[dict[str, Any]]:
    """Yield TSV rows as dicts of strings, keeping blank cells as ``""``."""

    frame_iter = pd.read_csv(
        path,
        sep="\t",
        dtype=str,
        keep_default_na=False,
        quoting=csv.QUOTE_NONE,
        usecols=(lambda col: col in columns) if columns is not None else None,
        chunksize=chunksize,
    )
    for frame in frame_iter:
        yield from frame.to_dict(orient="records")


class TabularKnowledgebaseMixin:
    """Common conversions for TSV-based knowledge-base importers."""

    @staticmethod
    def _to_string(value: Any) -> str:
        if value is None or (not isinstance(value, str) and pd.isna(value)):
            return ""

        cleaned = str(value).strip()
        if cleaned.lower() in {"nan", "none", "null"}:
            return ""

        return cleaned

    @staticmethod
    def _split_list(value: Any, separator: str = ",") -> tuple[str, ...]:
        text = TabularKnowledgebaseMixin._to_string(value)
        if not text:
            return ()
        return tuple(item.strip() for item in text.split(separator) if item.strip())
