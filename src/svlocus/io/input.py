"""
Input Adapters: reads and reference flanks.

Reads come from FASTA/FASTQ files (optionally gzipped) and reference flanks
from an indexed FASTA, both through pysam.
"""

import logging
import re
from collections.abc import Iterator
from pathlib import Path

import pysam

from ..models.core import GenomeInterval, SVCandidateRead

logger = logging.getLogger(__name__)

_REGION_RE = re.compile(r"^(?P<chrom>[^:\s]+):(?P<start>\d+)-(?P<end>\d+)$")


def parse_region(region: str) -> tuple[str, int, int]:
    """
    Parse ``chrom:start-end`` (1-based, inclusive) into a 0-based half-open range.

    Example:
        "chr1:101-200" -> ("chr1", 100, 200)
    """
    match = _REGION_RE.match(region.replace(",", ""))
    if not match:
        raise ValueError(f"Invalid region: {region}")
    start, end = int(match["start"]), int(match["end"])
    if start < 1 or end < start:
        raise ValueError(f"Invalid region range: {region}")
    return match["chrom"], start - 1, end


class ReadLoader:
    """Reads SV candidate reads from a FASTA or FASTQ file."""

    def __init__(self, path: Path, chromosome_id: int = 0):
        self.path = path
        self.chromosome_id = chromosome_id

    def __iter__(self) -> Iterator[SVCandidateRead]:
        with pysam.FastxFile(str(self.path)) as fastx:
            for entry in fastx:
                if not entry.sequence:
                    logger.debug("Skipping empty read %s", entry.name)
                    continue
                yield SVCandidateRead(
                    sequence=entry.sequence.upper(),
                    name=entry.name or "",
                    chromosome_id=self.chromosome_id,
                )


class ReferenceLoader:
    """Fetches flank sequences from an indexed reference FASTA."""

    def __init__(self, fasta_path: Path):
        self.fasta = pysam.FastaFile(str(fasta_path))

    def __enter__(self) -> "ReferenceLoader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def chromosome_id(self, chrom: str) -> int:
        """Index of ``chrom`` in the FASTA index."""
        try:
            return self.fasta.references.index(chrom)
        except ValueError:
            raise KeyError(f"Chromosome not in reference: {chrom}") from None

    def fetch(self, chrom: str, begin: int, end: int) -> str:
        """Upper-cased reference sequence of the 0-based range [begin, end)."""
        return self.fasta.fetch(chrom, begin, end).upper()

    def fetch_region(self, region: str) -> tuple[GenomeInterval, str]:
        """Fetch a samtools-style region with its interval."""
        chrom, begin, end = parse_region(region)
        seq = self.fetch(chrom, begin, end)
        if not seq:
            raise ValueError(f"Region is empty or outside the reference: {region}")
        # the reference may clip the end of the region
        interval = GenomeInterval(
            chromosome_id=self.chromosome_id(chrom), begin=begin, end=begin + len(seq)
        )
        return interval, seq

    def close(self) -> None:
        self.fasta.close()
