"""
Parallel processing with joblib.

The assembler and aligner keep per-instance scratch state, so work is only
spread across independent clusters, each task building its own instances.
"""

import logging
import os
from collections.abc import Callable, Sequence
from typing import Any

from joblib import Parallel, delayed
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from .assembler import ContigAssembler
from .models.core import AssembledContig, AssemblerOptions, SVCandidateRead

logger = logging.getLogger(__name__)

__all__ = ["ParallelProcessor", "assemble_clusters", "parallel_map", "parallel_starmap"]


class ParallelProcessor:
    """Map a function over items with joblib, optionally showing a progress bar."""

    def __init__(self, n_jobs: int = -1, backend: str = "loky", verbose: int = 0):
        """
        Initialize parallel processor.

        Args:
            n_jobs: Number of parallel jobs (-1 for all CPUs)
            backend: joblib backend ('loky', 'threading', 'multiprocessing')
            verbose: joblib verbosity level
        """
        self.n_jobs = n_jobs if n_jobs > 0 else os.cpu_count() or 1
        self.backend = backend
        self.verbose = verbose

    def map(
        self,
        func: Callable,
        items: Sequence[Any],
        description: str = "Processing",
        show_progress: bool = True,
    ) -> list[Any]:
        """
        Map function over items in parallel.

        Returns:
            Results in the order of ``items``
        """
        if not show_progress:
            return Parallel(n_jobs=self.n_jobs, backend=self.backend, verbose=self.verbose)(
                delayed(func)(item) for item in items
            )

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
        ) as progress:
            task = progress.add_task(f"[cyan]{description}...", total=len(items))

            results = []
            with Parallel(n_jobs=self.n_jobs, backend=self.backend, verbose=self.verbose) as parallel:
                for result in parallel(delayed(func)(item) for item in items):
                    results.append(result)
                    progress.update(task, advance=1)

            return results

    def starmap(
        self,
        func: Callable,
        items: Sequence[tuple],
        description: str = "Processing",
        show_progress: bool = True,
    ) -> list[Any]:
        """Like :meth:`map`, unpacking each item as positional arguments."""
        return self.map(_Star(func), items, description, show_progress)


class _Star:
    """Picklable ``lambda args: func(*args)``."""

    def __init__(self, func: Callable):
        self.func = func

    def __call__(self, args: tuple) -> Any:
        return self.func(*args)


def parallel_map(
    func: Callable,
    items: Sequence[Any],
    n_jobs: int = -1,
    backend: str = "loky",
    description: str = "Processing",
    show_progress: bool = True,
) -> list[Any]:
    """Convenience function for parallel mapping."""
    return ParallelProcessor(n_jobs=n_jobs, backend=backend).map(
        func, items, description, show_progress
    )


def parallel_starmap(
    func: Callable,
    items: Sequence[tuple],
    n_jobs: int = -1,
    backend: str = "loky",
    description: str = "Processing",
    show_progress: bool = True,
) -> list[Any]:
    """Convenience function for parallel starmapping."""
    return ParallelProcessor(n_jobs=n_jobs, backend=backend).starmap(
        func, items, description, show_progress
    )


def _assemble_cluster(
    reads: Sequence[SVCandidateRead | str], options: AssemblerOptions
) -> list[AssembledContig]:
    return ContigAssembler(options).assemble_reads(reads)


def assemble_clusters(
    clusters: Sequence[Sequence[SVCandidateRead | str]],
    options: AssemblerOptions | None = None,
    n_jobs: int = -1,
    backend: str = "loky",
    show_progress: bool = False,
) -> list[list[AssembledContig]]:
    """
    Assemble independent read clusters in parallel.

    Args:
        clusters: One read list per SV candidate cluster
        options: Assembler settings shared by every task
        n_jobs: Number of parallel jobs (-1 for all CPUs)
        backend: joblib backend
        show_progress: Whether to show a progress bar

    Returns:
        Contig lists in the order of ``clusters``
    """
    options = options or AssemblerOptions()
    logger.info("Assembling %d clusters", len(clusters))
    items = [(list(reads), options) for reads in clusters]
    return parallel_starmap(
        _assemble_cluster,
        items,
        n_jobs=n_jobs,
        backend=backend,
        description="Assembling clusters",
        show_progress=show_progress,
    )
