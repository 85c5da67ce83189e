"""
Tests for read/reference loaders and output writers.
"""

import csv
import tempfile
import unittest
from pathlib import Path

import pysam
import pytest

from svlocus.alignment.jump_aligner import JumpAligner
from svlocus.io.input import ReadLoader, ReferenceLoader, parse_region
from svlocus.io.output import AlignmentWriter, ContigWriter
from svlocus.models.core import AssembledContig
from svlocus.refine import RefinedContig


def test_read_loader_fasta(sample_reads_fasta):
    path, sequence = sample_reads_fasta
    reads = list(ReadLoader(path, chromosome_id=3))

    assert len(reads) == 4
    assert reads[0].name == "read0"
    assert reads[0].sequence == sequence
    assert reads[0].chromosome_id == 3


def test_read_loader_fastq(temp_dir):
    path = temp_dir / "reads.fq"
    with open(path, "w") as f:
        f.write("@q1\nacgtn\n+\nIIIII\n")
        f.write("@q2\nTTTT\n+\nIIII\n")

    reads = list(ReadLoader(path))

    assert [r.sequence for r in reads] == ["ACGTN", "TTTT"]
    assert [r.name for r in reads] == ["q1", "q2"]


@pytest.mark.parametrize(
    "region,expected",
    [
        ("chr1:101-200", ("chr1", 100, 200)),
        ("2:1-1", ("2", 0, 1)),
        ("chrX:1,001-2,000", ("chrX", 1000, 2000)),
    ],
)
def test_parse_region(region, expected):
    assert parse_region(region) == expected


@pytest.mark.parametrize("region", ["chr1", "chr1:0-10", "chr1:20-10", "chr1:a-b"])
def test_parse_region_invalid(region):
    with pytest.raises(ValueError):
        parse_region(region)


class TestReferenceLoader(unittest.TestCase):
    def setUp(self):
        self.test_dir = tempfile.TemporaryDirectory()
        self.fasta_path = Path(self.test_dir.name) / "ref.fa"
        with open(self.fasta_path, "w") as f:
            f.write(">chr1\nacgtacgtAACCGGTT\n")
            f.write(">chr2\nGGGGCCCC\n")
        pysam.faidx(str(self.fasta_path))

    def tearDown(self):
        self.test_dir.cleanup()

    def test_fetch_is_upper_case(self):
        with ReferenceLoader(self.fasta_path) as reference:
            self.assertEqual(reference.fetch("chr1", 0, 4), "ACGT")

    def test_fetch_region(self):
        with ReferenceLoader(self.fasta_path) as reference:
            interval, seq = reference.fetch_region("chr2:3-6")
        self.assertEqual(seq, "GGCC")
        self.assertEqual((interval.chromosome_id, interval.begin, interval.end), (1, 2, 6))

    def test_fetch_region_clipped_at_chromosome_end(self):
        with ReferenceLoader(self.fasta_path) as reference:
            interval, seq = reference.fetch_region("chr2:5-100")
        self.assertEqual(seq, "CCCC")
        self.assertEqual(interval.end, 8)

    def test_unknown_chromosome(self):
        with ReferenceLoader(self.fasta_path) as reference:
            with self.assertRaises(KeyError):
                reference.chromosome_id("chr9")


def test_contig_writer(temp_dir):
    path = temp_dir / "contigs.fa"
    with ContigWriter(path) as writer:
        writer.write(AssembledContig(sequence="ACGTACGT", supporting_read_count=4, seed_read_count=3))
        writer.write(AssembledContig(sequence="TTTT", supporting_read_count=2, seed_read_count=2))

    lines = path.read_text().splitlines()
    assert lines == [
        ">contig_0 supporting_reads=4 seed_reads=3 length=8",
        "ACGTACGT",
        ">contig_1 supporting_reads=2 seed_reads=2 length=4",
        "TTTT",
    ]
    with pysam.FastxFile(str(path)) as fastx:
        assert [entry.sequence for entry in fastx] == ["ACGTACGT", "TTTT"]


def test_alignment_writer(temp_dir, breakpoint_flanks, spanning_contig):
    ref1, ref2 = breakpoint_flanks
    refined = RefinedContig(
        contig=AssembledContig(sequence=spanning_contig, supporting_read_count=3),
        alignment=JumpAligner().align(spanning_contig, ref1, ref2),
        ref1_offset=100,
        ref2_offset=900,
    )
    plain = RefinedContig(
        contig=AssembledContig(sequence=ref1[:30]),
        alignment=JumpAligner().align(ref1[:30], ref1, ref2),
    )

    path = temp_dir / "alignments.tsv"
    with AlignmentWriter(path) as writer:
        writer.write(refined)
        writer.write(plain)

    with open(path) as f:
        rows = list(csv.DictReader(f, delimiter="\t"))

    assert rows[0]["contig"] == "contig_0"
    assert rows[0]["cigar"] == "40M40M"
    assert rows[0]["is_jump"] == "1"
    assert (rows[0]["breakpoint1"], rows[0]["breakpoint2"]) == ("160", "900")
    assert rows[1]["is_jump"] == "0"
    assert rows[1]["breakpoint1"] == ""
    assert rows[0]["span_begin"] == ""
    assert (rows[1]["span_begin"], rows[1]["span_end"]) == ("0", "30")
