"""Reference genome access for anchoring insertions and deletions."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

import pysam

from kbimporter.errors import ReferenceSequenceError

logger = logging.getLogger(__name__)


class ReferenceSequence(Protocol):
    """Anything that can return single reference bases by 1-based position."""

    def get_base(self, chromosome: str, position: int) -> str:
        ...


class FastaReference:
    """Indexed FASTA reference backed by ``pysam.FastaFile``.

    Chromosome names are matched with and without a ``chr`` prefix so that
    knowledge-base coordinates resolve against either GRCh37 naming scheme.
    """

    def __init__(self, fasta_path: str | Path) -> None:
        self.fasta_path = Path(fasta_path)
        if not self.fasta_path.exists():
            raise ReferenceSequenceError(f"Reference FASTA not found: {self.fasta_path}")

        try:
            self._fasta = pysam.FastaFile(str(self.fasta_path))
        except (OSError, ValueError) as exc:
            raise ReferenceSequenceError(
                f"Could not open reference FASTA {self.fasta_path}: {exc}"
            ) from exc

        self._contigs = set(self._fasta.references)
        logger.info("Opened reference %s with %d contigs", self.fasta_path, len(self._contigs))

    def get_base(self, chromosome: str, position: int) -> str:
        return self.get_sequence(chromosome, position, position)

    def get_sequence(self, chromosome: str, start: int, end: int) -> str:
        """Return bases ``start..end`` (1-based, inclusive)."""

        contig = self._resolve_contig(chromosome)
        if start < 1 or end < start:
            raise ReferenceSequenceError(f"Invalid reference range {chromosome}:{start}-{end}")

        sequence = self._fasta.fetch(contig, start - 1, end).upper()
        if len(sequence) != end - start + 1:
            raise ReferenceSequenceError(
                f"Reference range {chromosome}:{start}-{end} is outside contig {contig}"
            )
        return sequence

    def close(self) -> None:
        self._fasta.close()

    def __enter__(self) -> "FastaReference":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _resolve_contig(self, chromosome: str) -> str:
        for candidate in (chromosome, f"chr{chromosome}", chromosome.removeprefix("chr")):
            if candidate in self._contigs:
                return candidate
        raise ReferenceSequenceError(
            f"Chromosome {chromosome} not present in reference {self.fasta_path}"
        )
