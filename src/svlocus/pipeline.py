"""
Pipeline Orchestrator: refine one SV breakpoint from files.

This module handles:
1. Reading the candidate's reads (FASTA/FASTQ).
2. Fetching both breakend flanks from the reference.
3. Assembling contigs and jump-aligning them against the flanks.
4. Writing contigs (FASTA) and alignments (TSV) to the output directory.
"""

import logging

from rich.console import Console

from .alignment.jump_aligner import JumpAligner
from .assembler import ContigAssembler
from .io.input import ReadLoader, ReferenceLoader
from .io.output import AlignmentWriter, ContigWriter
from .models.core import RefineConfig
from .refine import BreakpointRefiner, RefinedContig, best
from .utils.logging import timed

logger = logging.getLogger(__name__)

CONTIGS_FILENAME = "contigs.fa"
ALIGNMENTS_FILENAME = "alignments.tsv"


class RefinePipeline:
    def __init__(self, config: RefineConfig, console: Console | None = None):
        self.config = config
        self.console = console or Console()

    def run(self) -> list[RefinedContig]:
        """Execute the pipeline."""
        config = self.config
        self.console.print("[bold blue]Starting svlocus refinement[/bold blue]")

        with self.console.status("[bold green]Loading reads...[/bold green]"):
            reads = list(ReadLoader(config.reads_file))
        self.console.print(f"Loaded [bold]{len(reads)}[/bold] reads.")

        with ReferenceLoader(config.reference_fasta) as reference:
            interval1, ref1 = reference.fetch_region(config.region1)
            interval2, ref2 = reference.fetch_region(config.region2)
        logger.info("Flanks: %s (%d bp), %s (%d bp)", interval1, len(ref1), interval2, len(ref2))

        refiner = BreakpointRefiner(
            ContigAssembler(config.assembler),
            JumpAligner(config.scores, jump_score=config.jump_score),
        )
        with timed("Refining breakpoint", logger):
            refined = refiner.refine(
                reads, ref1, ref2, ref1_offset=interval1.begin, ref2_offset=interval2.begin
            )

        config.output_dir.mkdir(parents=True, exist_ok=True)
        self._write_output(refined)

        if not refined:
            self.console.print("[yellow]No contigs assembled.[/yellow]")
            return refined

        top = best(refined)
        if top is None:
            self.console.print(
                f"Assembled [bold]{len(refined)}[/bold] contigs; none spans the breakpoint."
            )
        else:
            self.console.print(
                f"Breakpoint: {interval1.chromosome_id}:{top.breakpoint1} -> "
                f"{interval2.chromosome_id}:{top.breakpoint2} "
                f"(score {top.score}, {top.alignment.cigar})"
            )
        self.console.print("[bold green]Pipeline completed successfully.[/bold green]")
        return refined

    def _write_output(self, refined: list[RefinedContig]) -> None:
        output_dir = self.config.output_dir
        with ContigWriter(output_dir / CONTIGS_FILENAME) as contig_writer, AlignmentWriter(
            output_dir / ALIGNMENTS_FILENAME
        ) as alignment_writer:
            for item in refined:
                contig_writer.write(item.contig)
                alignment_writer.write(item)
        logger.info("Wrote %d contigs to %s", len(refined), output_dir)
