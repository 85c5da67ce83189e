"""
Local de-novo assembly of SV candidate reads.

**Algorithm:**
1. Build a table of every k-mer in the unused reads.
2. Seed a contig with the most frequent k-mer (first seen wins ties).
3. Extend the seed one base at a time, forward then backward, choosing the
   best supported next k-mer while its support and error rate allow it.
4. Mark every read sharing a k-mer with the contig as used, keep the contig
   if it is long enough, and repeat over the remaining reads.

If the current word length gives no seed, or only a contig shorter than the
minimum contig length, longer words are tried up to the maximum word length.
An empty result means no assembly was possible; it is not an error.

**Usage:**
    from svlocus.assembler import ContigAssembler

    assembler = ContigAssembler()
    contigs = assembler.assemble_sv_locus(candidate_data, candidates)
"""

import logging
from collections.abc import Iterable, Sequence

from .models.core import (
    AssembledContig,
    AssemblerOptions,
    SVCandidate,
    SVCandidateData,
    SVCandidateRead,
)
from .utils.logging import log_call

logger = logging.getLogger(__name__)

BASES = "ACGT"


class ContigAssembler:
    """
    Greedy k-mer extension assembler for a cluster of reads.

    The k-mer tables are scratch state owned by the instance and reused
    across calls; do not share an instance between threads.

    **Attributes:**
        options: Word lengths, coverage and error thresholds
    """

    def __init__(self, options: AssemblerOptions | None = None):
        self.options = options or AssemblerOptions()
        self._word_count: dict[str, int] = {}
        self._word_reads: dict[str, list[int]] = {}

    @log_call()
    def assemble_sv_locus(
        self, candidate_data: SVCandidateData, candidates: Sequence[SVCandidate]
    ) -> list[AssembledContig]:
        """
        Assemble the reads gathered for ``candidates``.

        Args:
            candidate_data: Reads collected per SV candidate
            candidates: Candidates whose reads form the cluster

        Returns:
            Contigs in the order they were assembled (possibly empty)
        """
        reads: list[SVCandidateRead] = []
        for candidate in candidates:
            reads.extend(candidate_data.reads_for(candidate))
        return self.assemble_reads(reads)

    def assemble_reads(self, reads: Iterable[SVCandidateRead | str]) -> list[AssembledContig]:
        """Assemble a plain list of reads or read sequences."""
        opts = self.options
        sequences = [_read_sequence(read) for read in reads]
        used = [False] * len(sequences)
        contigs: list[AssembledContig] = []

        if len(sequences) < opts.min_seed_reads:
            logger.debug(
                "Too few reads to assemble: %d < %d", len(sequences), opts.min_seed_reads
            )
            return contigs

        for iteration in range(opts.max_assembly_iterations):
            unused_reads = used.count(False)
            if unused_reads < opts.min_seed_reads:
                break

            # a longer word is tried when no seed is found or the contig is
            # too short, e.g. because a repeat stopped the extension
            attempt = None
            for word_length in range(
                opts.word_length, opts.max_word_length + 1, opts.word_length_step
            ):
                next_attempt = self._build_contig(sequences, used, word_length)
                if next_attempt is None:
                    continue
                attempt = next_attempt
                if len(attempt[0].sequence) >= opts.min_contig_length:
                    break

            if attempt is None:
                logger.debug("No seed found in %d unused reads", unused_reads)
                break

            contig, support = attempt
            for read_index in support:
                used[read_index] = True

            if len(contig.sequence) >= opts.min_contig_length:
                contigs.append(contig)

            logger.debug(
                "Assembly iteration %d: contig length %d, %d supporting reads, %d reads unused",
                iteration,
                len(contig.sequence),
                contig.supporting_read_count,
                used.count(False),
            )

        return contigs

    def _build_contig(
        self, sequences: list[str], used: list[bool], word_length: int
    ) -> tuple[AssembledContig, set[int]] | None:
        """
        Seed and extend one contig at ``word_length``.

        Returns:
            The contig and the indexes of its supporting reads, or None when
            the unused reads cannot provide a seed.
        """
        opts = self.options
        word_count = self._word_count
        word_reads = self._word_reads
        word_count.clear()
        word_reads.clear()

        contributing_reads = 0
        for read_index, seq in enumerate(sequences):
            if used[read_index] or len(seq) < word_length:
                continue
            contributing_reads += 1
            for pos in range(len(seq) - word_length + 1):
                word = seq[pos : pos + word_length]
                word_count[word] = word_count.get(word, 0) + 1
                readers = word_reads.setdefault(word, [])
                if not readers or readers[-1] != read_index:
                    readers.append(read_index)

        if contributing_reads < opts.min_seed_reads:
            return None

        seed, max_count = "", 0
        for word, count in word_count.items():
            if count > max_count:
                seed, max_count = word, count

        seed_reads = len(word_reads[seed])
        if seed_reads < opts.min_seed_reads:
            return None

        sequence, support = self._walk(seed, word_length)
        contig = AssembledContig(
            sequence=sequence,
            supporting_read_count=len(support),
            seed_read_count=seed_reads,
        )
        return contig, support

    def _walk(self, seed: str, word_length: int) -> tuple[str, set[int]]:
        """Extend ``seed`` forward, then backward, through the k-mer table."""
        opts = self.options
        word_count = self._word_count
        word_reads = self._word_reads

        contig = seed
        seen_words = {seed}
        support = set(word_reads[seed])

        for forward in (True, False):
            while True:
                if forward:
                    end = contig[len(contig) - word_length + 1 :]
                else:
                    end = contig[: word_length - 1]

                best_base, best_count, total_count = "", 0, 0
                for base in BASES:
                    count = word_count.get(end + base if forward else base + end, 0)
                    total_count += count
                    if count > best_count:
                        best_base, best_count = base, count

                if best_count < opts.min_coverage:
                    break
                if 1.0 - best_count / total_count > opts.max_error:
                    break

                word = end + best_base if forward else best_base + end
                if word in seen_words:
                    break
                seen_words.add(word)

                contig = contig + best_base if forward else best_base + contig
                support.update(word_reads[word])

        return contig, support


def _read_sequence(read: SVCandidateRead | str) -> str:
    seq = read.sequence if isinstance(read, SVCandidateRead) else read
    return "".join(seq).upper()
