"""
Jump Aligner: global alignment of a query against two reference segments.

The query is aligned against ref1 followed by ref2 and may switch from ref1
to ref2 at most once. The switch ("jump") costs a fixed ``jump_score``
instead of per-base reference movement, which models a read or contig
spanning an SV breakpoint: one flank aligns to ref1, the rest to ref2.

The DP runs over reference rows (ref1 rows, then ref2 rows) and query
columns with four states per cell:

- MATCH/DELETE/INSERT: standard affine-gap states
- JUMP: the query has left ref1 at this column and has not yet resumed in
  ref2. It travels down the remaining ref1 rows and the leading ref2 rows
  for free, so those bases never appear in the emitted path.

Only the two score rows in flight are kept; predecessor states are packed
into one uint8 per cell for the backtrace. Both buffers grow on demand and
are reused across calls, so an instance must not be shared between threads.
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np

from ..models.core import AlignmentScores
from .path import AlignType, PathSegment, SimpleAlignment, apath_read_length, apath_to_cigar

logger = logging.getLogger(__name__)

__all__ = ["AlignState", "AlignmentError", "JumpAligner", "JumpAlignmentResult", "JumpPoint"]


class AlignState(IntEnum):
    """DP state of a cell. Values double as 2-bit pointer codes."""

    MATCH = 0
    DELETE = 1
    INSERT = 2
    JUMP = 3


class AlignmentError(AssertionError):
    """The aligner was called with invalid input or its DP is inconsistent."""


@dataclass(slots=True)
class ScoreVal:
    match: int | float = 0
    delete: int | float = 0
    insert: int | float = 0
    jump: int | float = 0


@dataclass
class JumpPoint:
    """Where the alignment passes from ref1 to ref2."""

    query_offset: int  # query bases aligned before the jump
    ref1_end: int  # ref1 position just after the last ref1 base used
    ref2_begin: int  # ref2 position of the first ref2 base used
    path_index: int  # index of the first path segment aligned to ref2


@dataclass
class JumpAlignmentResult:
    score: int | float = 0
    align_start: int = 0
    path: list[PathSegment] = field(default_factory=list)
    start_on_ref2: bool = False
    jump: JumpPoint | None = None

    @property
    def cigar(self) -> str:
        return apath_to_cigar(self.path)

    @property
    def is_jump(self) -> bool:
        return self.jump is not None

    @property
    def alignment(self) -> SimpleAlignment:
        """The path placed at ``align_start`` on the reference it begins in."""
        return SimpleAlignment(
            pos=self.align_start, path=[PathSegment(ps.type, ps.length) for ps in self.path]
        )


@dataclass
class _BackTrace:
    max: int | float = 0
    state: AlignState = AlignState.MATCH
    ref_segment: int = 1
    ref_start: int = 0
    query_start: int = 0
    is_init: bool = False

    def update(self, score: int | float, ref_segment: int, ref_start: int, query_start: int) -> None:
        # first-seen optimum wins on ties
        if self.is_init and score <= self.max:
            return
        self.max = score
        self.state = AlignState.MATCH
        self.ref_segment = ref_segment
        self.ref_start = ref_start
        self.query_start = query_start
        self.is_init = True


def _best(*candidates: tuple[int | float, AlignState]) -> tuple[int | float, AlignState]:
    best_score, best_state = candidates[0]
    for score, state in candidates[1:]:
        if score > best_score:
            best_score, best_state = score, state
    return best_score, best_state


def _pack(match: AlignState, delete: AlignState, insert: AlignState, jump: AlignState) -> int:
    return match | (delete << 2) | (insert << 4) | (jump << 6)


def _unpack(ptr: int, state: AlignState) -> AlignState:
    return AlignState((ptr >> (2 * state)) & 3)


class JumpAligner:
    """
    Affine-gap aligner allowing one jump from ref1 to ref2.

    Args:
        scores: Match/mismatch/gap-open/gap-extend scores.
        jump_score: Score added when the alignment jumps from ref1 to ref2.
    """

    def __init__(self, scores: AlignmentScores | None = None, jump_score: int | float = -25):
        self.scores = scores or AlignmentScores()
        self.jump_score = jump_score

        self._score1: list[ScoreVal] = []
        self._score2: list[ScoreVal] = []
        self._ptr1 = np.zeros((0, 0), dtype=np.uint8)
        self._ptr2 = np.zeros((0, 0), dtype=np.uint8)

    def align(self, query: str, ref1: str, ref2: str) -> JumpAlignmentResult:
        """
        Align ``query`` against ``ref1`` and ``ref2``.

        Returns:
            The best scoring alignment. ``align_start`` is on ref1 unless
            ``start_on_ref2`` is set; ``jump`` is None for jump-free paths.

        Raises:
            AlignmentError: If any sequence is empty.
        """
        query_size, ref1_size, ref2_size = len(query), len(ref1), len(ref2)
        if query_size == 0 or ref1_size == 0 or ref2_size == 0:
            raise AlignmentError("Query and both reference segments must be non-empty")

        self._reserve(query_size, ref1_size, ref2_size)
        bad = self._bad_value(query_size + ref1_size + ref2_size)

        sc = self.scores
        jump_score = self.jump_score
        this_sv, prev_sv = self._score1, self._score2

        # global alignment of the query: no start from the insert or delete
        # state. Unaligned leading query bases count as mismatches.
        for query_index in range(query_size + 1):
            val = this_sv[query_index]
            val.match = query_index * sc.mismatch
            val.delete = bad
            val.insert = bad
            val.jump = bad

        bt = _BackTrace()

        ptr1 = self._ptr1
        for ref1_index, ref_base in enumerate(ref1, start=1):
            this_sv, prev_sv = prev_sv, this_sv
            self._init_row(this_sv[0], bad)

            for query_index, query_base in enumerate(query):
                head = this_sv[query_index + 1]

                diag = prev_sv[query_index]
                score, match_ptr = _best(
                    (diag.match, AlignState.MATCH),
                    (diag.delete, AlignState.DELETE),
                    (diag.insert, AlignState.INSERT),
                )
                head.match = score + (sc.match if query_base == ref_base else sc.mismatch)

                up = prev_sv[query_index + 1]
                score, del_ptr = _best(
                    (up.match + sc.open, AlignState.MATCH),
                    (up.delete, AlignState.DELETE),
                    (up.insert, AlignState.INSERT),
                )
                head.delete = score + sc.extend

                # the query must start in MATCH, so no insert opens from column 0
                left = this_sv[query_index]
                score, ins_ptr = _best(
                    (left.match + sc.open if query_index else bad, AlignState.MATCH),
                    (left.delete, AlignState.DELETE),
                    (left.insert, AlignState.INSERT),
                )
                head.insert = score + sc.extend

                # an earlier jump point on the same query column wins ties
                head.jump, jump_ptr = _best(
                    (up.jump, AlignState.JUMP),
                    (head.match + jump_score, AlignState.MATCH),
                    (head.insert + jump_score, AlignState.INSERT),
                )

                ptr1[ref1_index, query_index + 1] = _pack(match_ptr, del_ptr, ins_ptr, jump_ptr)

            bt.update(this_sv[query_size].match, 1, ref1_index, query_size)

        self._fall_off_end(bt, this_sv, query_size, 1, ref1_size)

        # restart against ref2, keeping the jump column carried out of ref1
        for query_index in range(query_size + 1):
            val = this_sv[query_index]
            val.match = query_index * sc.mismatch
            val.delete = bad
            val.insert = bad
        this_sv[0].jump = bad

        ptr2 = self._ptr2
        for ref2_index, ref_base in enumerate(ref2, start=1):
            this_sv, prev_sv = prev_sv, this_sv
            self._init_row(this_sv[0], bad)

            for query_index, query_base in enumerate(query):
                head = this_sv[query_index + 1]

                diag = prev_sv[query_index]
                score, match_ptr = _best(
                    (diag.match, AlignState.MATCH),
                    (diag.delete, AlignState.DELETE),
                    (diag.insert, AlignState.INSERT),
                    (diag.jump, AlignState.JUMP),
                )
                head.match = score + (sc.match if query_base == ref_base else sc.mismatch)

                up = prev_sv[query_index + 1]
                score, del_ptr = _best(
                    (up.match + sc.open, AlignState.MATCH),
                    (up.delete, AlignState.DELETE),
                    (up.insert, AlignState.INSERT),
                )
                head.delete = score + sc.extend

                left = this_sv[query_index]
                score, ins_ptr = _best(
                    (left.match + sc.open if query_index else bad, AlignState.MATCH),
                    (left.delete, AlignState.DELETE),
                    (left.insert, AlignState.INSERT),
                    (left.jump + sc.open, AlignState.JUMP),
                )
                head.insert = score + sc.extend

                head.jump = up.jump

                ptr2[ref2_index, query_index + 1] = _pack(
                    match_ptr, del_ptr, ins_ptr, AlignState.JUMP
                )

            bt.update(this_sv[query_size].match, 2, ref2_index, query_size)

        self._fall_off_end(bt, this_sv, query_size, 2, ref2_size)

        if not bt.is_init:
            raise AlignmentError("No alignment end point was found")

        result = self._backtrace(bt, query_size, ref1_size)
        logger.debug(
            "Jump alignment score %s start %d cigar %s jump %s",
            result.score,
            result.align_start,
            result.cigar,
            result.jump,
        )
        return result

    def _backtrace(self, bt: _BackTrace, query_size: int, ref1_size: int) -> JumpAlignmentResult:
        result = JumpAlignmentResult(score=bt.max)
        apath: list[PathSegment] = []
        ps = PathSegment()

        # trailing soft-clip where the query runs off the end of a reference
        if bt.query_start < query_size:
            ps = PathSegment(AlignType.SOFT_CLIP, query_size - bt.query_start)

        def update_path(segment_type: AlignType) -> PathSegment:
            if ps.type == segment_type:
                return ps
            if ps.type != AlignType.NONE:
                apath.append(ps)
            return PathSegment(segment_type, 0)

        state = bt.state
        segment = bt.ref_segment
        ref_index = bt.ref_start
        query_index = bt.query_start
        jump_ref1_end = jump_ref2_begin = jump_query_offset = None
        segments_after_jump = 0

        while query_index > 0:
            if ref_index == 0:
                if segment == 2 and state == AlignState.JUMP:
                    segment = 1
                    ref_index = ref1_size
                    continue
                break

            ptr_mat = self._ptr1 if segment == 1 else self._ptr2
            next_state = _unpack(int(ptr_mat[ref_index, query_index]), state)

            if state == AlignState.MATCH:
                ps = update_path(AlignType.MATCH)
                ps.length += 1
                ref_index -= 1
                query_index -= 1
            elif state == AlignState.DELETE:
                ps = update_path(AlignType.DELETE)
                ps.length += 1
                ref_index -= 1
            elif state == AlignState.INSERT:
                ps = update_path(AlignType.INSERT)
                ps.length += 1
                query_index -= 1
            elif segment == 2 or next_state == AlignState.JUMP:
                ref_index -= 1
            else:
                # leaving the jump state in ref1: this is the breakpoint
                if ps.type != AlignType.NONE:
                    apath.append(ps)
                ps = PathSegment()
                jump_ref1_end = ref_index
                jump_query_offset = query_index
                segments_after_jump = len(apath)

            if segment == 2 and state != AlignState.JUMP and next_state == AlignState.JUMP:
                jump_ref2_begin = ref_index

            state = next_state

        if state == AlignState.JUMP:
            raise AlignmentError(
                f"Backtrace ended in the jump state at ref{segment}:{ref_index}, query:{query_index}"
            )

        if ps.type != AlignType.NONE:
            apath.append(ps)

        # soft-clip the beginning of the query if we fall off the start of the reference
        if query_index != 0:
            apath.append(PathSegment(AlignType.SOFT_CLIP, query_index))

        apath.reverse()

        if apath_read_length(apath) != query_size:
            raise AlignmentError(
                f"Backtrace consumed {apath_read_length(apath)} of {query_size} query bases"
            )

        result.path = apath
        result.align_start = ref_index
        result.start_on_ref2 = segment == 2
        if jump_query_offset is not None:
            if jump_ref2_begin is None:
                raise AlignmentError("Backtrace crossed the jump without resuming in ref2")
            result.jump = JumpPoint(
                query_offset=jump_query_offset,
                ref1_end=jump_ref1_end,
                ref2_begin=jump_ref2_begin,
                path_index=len(apath) - segments_after_jump,
            )
        return result

    def _fall_off_end(
        self, bt: _BackTrace, last_row: list[ScoreVal], query_size: int, ref_segment: int, ref_size: int
    ) -> None:
        # the query may run off the end of the reference, in which case the
        # remainder is soft-clipped and each clipped base counts as a mismatch
        for query_index in range(query_size + 1):
            score = last_row[query_index].match + (query_size - query_index) * self.scores.mismatch
            bt.update(score, ref_segment, ref_size, query_index)

    @staticmethod
    def _init_row(val: ScoreVal, bad: int | float) -> None:
        # disallow start from the insert or delete state
        val.match = 0
        val.delete = bad
        val.insert = bad
        val.jump = bad

    def _bad_value(self, total_size: int) -> int | float:
        """A score no legitimate path can fall to, nor any disallowed path climb from."""
        sc = self.scores
        step = abs(sc.match) + abs(sc.mismatch) + abs(sc.open) + abs(sc.extend) + abs(self.jump_score) + 1
        return -2 * step * (total_size + 2)

    def _reserve(self, query_size: int, ref1_size: int, ref2_size: int) -> None:
        for score_vec in (self._score1, self._score2):
            while len(score_vec) <= query_size:
                score_vec.append(ScoreVal())

        self._ptr1 = self._grow(self._ptr1, ref1_size + 1, query_size + 1)
        self._ptr2 = self._grow(self._ptr2, ref2_size + 1, query_size + 1)

    @staticmethod
    def _grow(mat: np.ndarray, rows: int, cols: int) -> np.ndarray:
        if mat.shape[0] >= rows and mat.shape[1] >= cols:
            return mat
        return np.zeros((max(rows, mat.shape[0]), max(cols, mat.shape[1])), dtype=np.uint8)
