"""
Output Writers: assembled contigs as FASTA and refined alignments as TSV.
"""

import csv
from pathlib import Path
from typing import Any

from ..models.core import AssembledContig
from ..refine import RefinedContig


class OutputWriter:
    """Base class for output writers."""

    def __init__(self, path: Path):
        self.path = path
        self.file = open(path, "w", newline="")

    def __enter__(self) -> "OutputWriter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def write(self, item: Any) -> None:
        raise NotImplementedError

    def close(self) -> None:
        self.file.close()


class ContigWriter(OutputWriter):
    """Writes contigs to a FASTA file, one unwrapped sequence per record."""

    def __init__(self, path: Path, prefix: str = "contig"):
        super().__init__(path)
        self.prefix = prefix
        self._count = 0

    def write(self, contig: AssembledContig) -> None:
        self.file.write(
            f">{self.prefix}_{self._count} supporting_reads={contig.supporting_read_count}"
            f" seed_reads={contig.seed_read_count} length={len(contig.sequence)}\n"
        )
        self.file.write(f"{contig.sequence}\n")
        self._count += 1


class AlignmentWriter(OutputWriter):
    """Writes refined contig alignments to a tab-separated file."""

    FIELDNAMES = [
        "contig",
        "length",
        "supporting_reads",
        "score",
        "cigar",
        "align_start",
        "start_on_ref2",
        "is_jump",
        "query_offset",
        "ref1_end",
        "ref2_begin",
        "breakpoint1",
        "breakpoint2",
        "span_begin",
        "span_end",
    ]

    def __init__(self, path: Path, prefix: str = "contig"):
        super().__init__(path)
        self.prefix = prefix
        self._count = 0
        self.writer = csv.DictWriter(self.file, fieldnames=self.FIELDNAMES, delimiter="\t")
        self.writer.writeheader()

    def write(self, refined: RefinedContig) -> None:
        alignment = refined.alignment
        jump = alignment.jump
        span = refined.flank_span
        self.writer.writerow(
            {
                "contig": f"{self.prefix}_{self._count}",
                "length": len(refined.contig.sequence),
                "supporting_reads": refined.contig.supporting_read_count,
                "score": alignment.score,
                "cigar": alignment.cigar,
                "align_start": alignment.align_start,
                "start_on_ref2": int(alignment.start_on_ref2),
                "is_jump": int(alignment.is_jump),
                "query_offset": "" if jump is None else jump.query_offset,
                "ref1_end": "" if jump is None else jump.ref1_end,
                "ref2_begin": "" if jump is None else jump.ref2_begin,
                "breakpoint1": "" if refined.breakpoint1 is None else refined.breakpoint1,
                "breakpoint2": "" if refined.breakpoint2 is None else refined.breakpoint2,
                "span_begin": "" if span is None else span[0],
                "span_end": "" if span is None else span[1],
            }
        )
        self._count += 1
