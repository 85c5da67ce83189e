"""
Tests for breakpoint refinement (assembly followed by jump alignment).
"""

from svlocus.alignment.jump_aligner import JumpAligner
from svlocus.assembler import ContigAssembler
from svlocus.models.core import AlignmentScores, AssembledContig, SVCandidateRead
from svlocus.refine import BreakpointRefiner, RefinedContig, best


def test_refine_spanning_reads(breakpoint_flanks, spanning_contig):
    ref1, ref2 = breakpoint_flanks
    reads = [SVCandidateRead(sequence=spanning_contig, name=f"r{i}") for i in range(3)]

    refined = BreakpointRefiner().refine(reads, ref1, ref2, ref1_offset=1000, ref2_offset=5000)

    assert len(refined) == 1
    top = refined[0]
    assert top.contig.sequence == spanning_contig
    assert top.contig.supporting_read_count == 3
    assert top.alignment.is_jump
    assert top.score == 80 * 2 - 25
    assert top.breakpoint1 == 1060
    assert top.breakpoint2 == 5000
    assert best(refined) is top


def test_refine_without_contigs(breakpoint_flanks):
    ref1, ref2 = breakpoint_flanks
    assert BreakpointRefiner().refine(["ACGT"], ref1, ref2) == []


def test_refine_sorts_best_first(breakpoint_flanks, random_sequence, spanning_contig):
    ref1, ref2 = breakpoint_flanks
    # assembled first, but aligns poorly to both flanks
    unrelated = random_sequence(80, seed=51)
    reads = [unrelated] * 3 + [spanning_contig] * 2

    refiner = BreakpointRefiner(ContigAssembler(), JumpAligner(AlignmentScores()))
    refined = refiner.refine(reads, ref1, ref2)

    assert [r.contig.sequence for r in refined] == [spanning_contig, unrelated]
    assert refined[0].score > refined[1].score


def test_best_requires_jump():
    contig = AssembledContig(sequence="ACGT")
    no_jump = RefinedContig(
        contig=contig, alignment=JumpAligner().align("ACGT", "ACGTACGT", "TTTT")
    )

    assert not no_jump.alignment.is_jump
    assert no_jump.breakpoint1 is None
    assert best([no_jump]) is None
    assert best([no_jump], require_jump=False) is no_jump
    assert best([]) is None


def test_flank_span_counts_edge_soft_clips(breakpoint_flanks):
    ref1, ref2 = breakpoint_flanks
    query = "GG" + ref1[:30]
    refined = RefinedContig(
        contig=AssembledContig(sequence=query),
        alignment=JumpAligner().align(query, ref1, ref2),
        ref1_offset=1000,
        ref2_offset=5000,
    )

    assert refined.alignment.cigar == "2S30M"
    assert refined.flank_span == (998, 1030)


def test_flank_span_on_ref2(breakpoint_flanks):
    ref1, ref2 = breakpoint_flanks
    refined = RefinedContig(
        contig=AssembledContig(sequence=ref2[12:42]),
        alignment=JumpAligner().align(ref2[12:42], ref1, ref2),
        ref1_offset=1000,
        ref2_offset=5000,
    )

    assert refined.flank_span == (5012, 5042)


def test_flank_span_is_none_for_jump(breakpoint_flanks, spanning_contig):
    ref1, ref2 = breakpoint_flanks
    refined = RefinedContig(
        contig=AssembledContig(sequence=spanning_contig),
        alignment=JumpAligner().align(spanning_contig, ref1, ref2),
    )

    assert refined.flank_span is None
