"""Transcript-based variant inference through the TransVar command line tool."""

from __future__ import annotations

import logging
import re
import subprocess
import tempfile
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from kbimporter.errors import CdnaAnalyzerError
from kbimporter.models import SomaticVariant
from kbimporter.reference import ReferenceSequence

logger = logging.getLogger(__name__)

NO_INFORMATION = "na"

_GDNA_RE = re.compile(
    r"^(?P<chromosome>[^:\s]+):g\.(?P<start>\d+)(?:_(?P<end>\d+))?(?P<change>\S+)$"
)
_SNV_RE = re.compile(r"^(?P<ref>[ACGTN])>(?P<alt>[ACGTN])$", re.IGNORECASE)
_DELINS_RE = re.compile(r"^del[ACGTN\d]*ins(?P<alt>[ACGTN]+)$", re.IGNORECASE)
_DEL_RE = re.compile(r"^del[ACGTN\d]*$", re.IGNORECASE)
_INS_RE = re.compile(r"^ins(?P<alt>[ACGTN]+)$", re.IGNORECASE)
_DUP_RE = re.compile(r"^dup[ACGTN\d]*$", re.IGNORECASE)


@dataclass(frozen=True)
class CDnaAnnotation:
    """Transcript identifier plus cDNA change, e.g. ``ENST00000288602`` / ``c.1799T>A``."""

    transcript: str
    cdna: str

    @classmethod
    def no_information(cls) -> "CDnaAnnotation":
        return cls(NO_INFORMATION, NO_INFORMATION)

    @property
    def is_sentinel(self) -> bool:
        return self.transcript == NO_INFORMATION and self.cdna == NO_INFORMATION


class CdnaAnalyzer(Protocol):
    """Batch inference of genomic variants from transcript-relative changes."""

    def analyze(self, annotations: Sequence[CDnaAnnotation]) -> list[list[SomaticVariant]]:
        ...


class TransvarCdnaAnalyzer:
    """Run ``transvar canno`` once over a batch of cDNA annotations.

    Results are returned per input in input order. Sentinel annotations are
    not sent to TransVar and always map to an empty result.
    """

    def __init__(
        self,
        reference: ReferenceSequence,
        *,
        executable: str = "transvar",
        reference_version: str = "hg19",
        extra_args: Sequence[str] = ("--ensembl",),
    ) -> None:
        self.reference = reference
        self.executable = executable
        self.reference_version = reference_version
        self.extra_args = tuple(extra_args)

    def analyze(self, annotations: Sequence[CDnaAnnotation]) -> list[list[SomaticVariant]]:
        results: list[list[SomaticVariant]] = [[] for _ in annotations]
        batch = [(index, item) for index, item in enumerate(annotations) if not item.is_sentinel]
        if not batch:
            logger.info("No cDNA annotations to analyze; skipping TransVar")
            return results

        output = self._run(batch)
        for index, coordinates in parse_transvar_output(output, len(annotations)):
            variant = gdna_to_variant(coordinates, self.reference)
            if variant is not None and variant not in results[index]:
                results[index].append(variant)

        logger.info(
            "TransVar inferred %d variants for %d annotations",
            sum(len(items) for items in results),
            len(batch),
        )
        return results

    def _run(self, batch: list[tuple[int, CDnaAnnotation]]) -> str:
        with tempfile.TemporaryDirectory(prefix="kbimporter_transvar_") as workdir:
            input_path = Path(workdir) / "cdna_batch.tsv"
            input_path.write_text(
                "".join(f"{index}\t{item.transcript}\t{item.cdna}\n" for index, item in batch)
            )
            command = [
                self.executable,
                "canno",
                "-l",
                str(input_path),
                "-g",
                "2",
                "-m",
                "3",
                "--refversion",
                self.reference_version,
                *self.extra_args,
            ]
            logger.debug("Running %s", " ".join(command))
            try:
                completed = subprocess.run(command, capture_output=True, text=True, check=False)
            except FileNotFoundError as exc:
                raise CdnaAnalyzerError(f"TransVar executable not found: {self.executable}") from exc

        if completed.returncode != 0:
            raise CdnaAnalyzerError(
                f"TransVar exited with code {completed.returncode}: {completed.stderr.strip()}"
            )
        return completed.stdout


def parse_transvar_output(output: str, batch_size: int) -> list[tuple[int, str]]:
    """Return ``(input index, gDNA coordinates)`` pairs from ``transvar canno`` output.

    Each output line starts with the echoed input columns joined by ``|``
    (``0|ENST00000288602|c.1799T>A``), whose first column is the input index.
    The gDNA part of the ``coordinates(gDNA/cDNA/protein)`` column is returned;
    lines without a gDNA annotation are skipped.
    """

    parsed: list[tuple[int, str]] = []
    for line in output.splitlines():
        fields = line.rstrip("\n").split("\t")
        echoed_index = fields[0].split("|", 1)[0].strip()
        if not echoed_index.isdigit():
            continue

        index = int(echoed_index)
        if index >= batch_size:
            raise CdnaAnalyzerError(
                f"TransVar returned row for input {index}, batch has {batch_size} inputs"
            )

        for value in fields[1:]:
            gdna = value.split("/", 1)[0].strip()
            if _GDNA_RE.match(gdna):
                parsed.append((index, gdna))
                break
    return parsed


def gdna_to_variant(coordinates: str, reference: ReferenceSequence) -> SomaticVariant | None:
    """Convert a gDNA HGVS string to a VCF-style anchored variant."""

    match = _GDNA_RE.match(coordinates)
    if match is None:
        return None

    chromosome = match.group("chromosome").removeprefix("chr")
    start = int(match.group("start"))
    end = int(match.group("end") or start)
    change = match.group("change")

    if (snv := _SNV_RE.match(change)) is not None:
        return SomaticVariant(chromosome, start, snv.group("ref").upper(), snv.group("alt").upper())

    if (delins := _DELINS_RE.match(change)) is not None:
        ref = _bases(reference, chromosome, start, end)
        return SomaticVariant(chromosome, start, ref, delins.group("alt").upper())

    if _DEL_RE.match(change):
        anchor = reference.get_base(chromosome, start - 1)
        deleted = _bases(reference, chromosome, start, end)
        return SomaticVariant(chromosome, start - 1, anchor + deleted, anchor)

    if (insertion := _INS_RE.match(change)) is not None:
        anchor = reference.get_base(chromosome, start)
        return SomaticVariant(chromosome, start, anchor, anchor + insertion.group("alt").upper())

    if _DUP_RE.match(change):
        duplicated = _bases(reference, chromosome, start, end)
        anchor = duplicated[-1]
        return SomaticVariant(chromosome, end, anchor, anchor + duplicated)

    logger.debug("Unsupported gDNA change %s", coordinates)
    return None


def _bases(reference: ReferenceSequence, chromosome: str, start: int, end: int) -> str:
    return "".join(reference.get_base(chromosome, position) for position in range(start, end + 1))
