"""
Breakpoint refinement: assemble a read cluster and jump-align the contigs.

Each contig assembled from the cluster is aligned against the two reference
flanks of the candidate. A contig whose best alignment jumps from ref1 to
ref2 pins the breakpoint to base-pair resolution on both flanks.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from .alignment.jump_aligner import JumpAligner, JumpAlignmentResult
from .alignment.path import matchify_edge_soft_clip_ref_range
from .assembler import ContigAssembler
from .models.core import AssembledContig, SVCandidateRead

logger = logging.getLogger(__name__)

__all__ = ["BreakpointRefiner", "RefinedContig", "best"]


@dataclass
class RefinedContig:
    """An assembled contig with its jump alignment against both flanks."""

    contig: AssembledContig
    alignment: JumpAlignmentResult
    ref1_offset: int = 0
    ref2_offset: int = 0

    @property
    def score(self) -> int | float:
        return self.alignment.score

    @property
    def breakpoint1(self) -> int | None:
        """Reference position just after the last ref1 base, or None without a jump."""
        jump = self.alignment.jump
        return None if jump is None else self.ref1_offset + jump.ref1_end

    @property
    def breakpoint2(self) -> int | None:
        """Reference position of the first ref2 base, or None without a jump."""
        jump = self.alignment.jump
        return None if jump is None else self.ref2_offset + jump.ref2_begin

    @property
    def flank_span(self) -> tuple[int, int] | None:
        """
        Reference range [begin, end) a jump-free contig covers on its flank,
        counting edge soft-clips as matches. None when the contig jumps.
        """
        if self.alignment.is_jump:
            return None
        offset = self.ref2_offset if self.alignment.start_on_ref2 else self.ref1_offset
        begin, end = matchify_edge_soft_clip_ref_range(self.alignment.alignment)
        return offset + begin, offset + end


class BreakpointRefiner:
    """
    Wire a contig assembler to a jump aligner.

    Both collaborators keep scratch state, so a refiner is single-threaded
    like its parts.
    """

    def __init__(self, assembler: ContigAssembler | None = None, aligner: JumpAligner | None = None):
        self.assembler = assembler or ContigAssembler()
        self.aligner = aligner or JumpAligner()

    def refine(
        self,
        reads: Iterable[SVCandidateRead | str],
        ref1: str,
        ref2: str,
        ref1_offset: int = 0,
        ref2_offset: int = 0,
    ) -> list[RefinedContig]:
        """
        Assemble ``reads`` and align every contig against ``ref1``/``ref2``.

        Args:
            reads: Reads of one SV candidate cluster
            ref1: Sequence of the first breakend flank
            ref2: Sequence of the second breakend flank
            ref1_offset: Reference position of ``ref1[0]``
            ref2_offset: Reference position of ``ref2[0]``

        Returns:
            Refined contigs, best score first. Equal scores keep assembly order.
        """
        contigs = self.assembler.assemble_reads(reads)
        if not contigs:
            logger.debug("No contigs assembled; nothing to refine")
            return []

        refined = [
            RefinedContig(
                contig=contig,
                alignment=self.aligner.align(contig.sequence, ref1.upper(), ref2.upper()),
                ref1_offset=ref1_offset,
                ref2_offset=ref2_offset,
            )
            for contig in contigs
        ]
        refined.sort(key=lambda r: r.score, reverse=True)

        logger.debug(
            "Refined %d contigs, %d spanning the breakpoint",
            len(refined),
            sum(1 for r in refined if r.alignment.is_jump),
        )
        return refined


def best(refined: list[RefinedContig], require_jump: bool = True) -> RefinedContig | None:
    """
    Highest scoring refined contig, or None.

    With ``require_jump`` only contigs whose alignment spans the breakpoint
    are considered.
    """
    for candidate in refined:
        if candidate.alignment.is_jump or not require_jump:
            return candidate
    return None
