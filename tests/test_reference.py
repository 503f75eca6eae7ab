import sys
from pathlib import Path

import pysam
import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from kbimporter.errors import ReferenceSequenceError  # noqa: E402
from kbimporter.reference import FastaReference  # noqa: E402


@pytest.fixture
def fasta_path(tmp_path: Path) -> Path:
    path = tmp_path / "reference.fa"
    path.write_text(">chr1\nacgtgacgta\n>2\nTTTTCCCC\n")
    pysam.faidx(str(path))
    return path


def test_get_base_is_one_based_and_uppercase(fasta_path: Path) -> None:
    with FastaReference(fasta_path) as reference:
        assert reference.get_base("chr1", 1) == "A"
        assert reference.get_base("chr1", 10) == "A"
        assert reference.get_sequence("chr1", 3, 5) == "GTG"


def test_chromosome_prefix_is_optional(fasta_path: Path) -> None:
    with FastaReference(fasta_path) as reference:
        assert reference.get_base("1", 2) == "C"
        assert reference.get_base("chr2", 5) == "C"


def test_missing_contig_and_out_of_range_positions_raise(fasta_path: Path) -> None:
    with FastaReference(fasta_path) as reference:
        with pytest.raises(ReferenceSequenceError, match="not present"):
            reference.get_base("X", 1)
        with pytest.raises(ReferenceSequenceError):
            reference.get_base("1", 0)
        with pytest.raises(ReferenceSequenceError, match="outside contig"):
            reference.get_sequence("1", 9, 12)


def test_missing_fasta_raises(tmp_path: Path) -> None:
    with pytest.raises(ReferenceSequenceError, match="not found"):
        FastaReference(tmp_path / "missing.fa")
