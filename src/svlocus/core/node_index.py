"""
Interval index over the nodes of one or more locus graphs.

The index subscribes to each graph's notifications and keeps one interval
tree per chromosome in step with node additions, deletions and renumbering.
Graphs are tracked by identity, so a watched graph may change its locus
index (``update_index`` or loading an archive) without losing its entries.
"""

import logging
from functools import partial

from intervaltree import Interval, IntervalTree

from ..models.core import GenomeInterval
from .locus_graph import LocusGraph, LocusGraphError
from .notifier import NodeMoveMessage, NodeObserver

logger = logging.getLogger(__name__)

NodeAddress = tuple[int, int]


def _tree_range(interval: GenomeInterval) -> tuple[int, int]:
    # intervaltree rejects empty ranges; candidates are filtered exactly afterwards
    return interval.begin, max(interval.end, interval.begin + 1)


class NodeIntervalIndex:
    """Find locus nodes by genome interval."""

    def __init__(self) -> None:
        self._watched: dict[int, tuple[LocusGraph, NodeObserver]] = {}
        self._intervals: dict[NodeAddress, GenomeInterval] = {}
        self._trees: dict[int, IntervalTree] = {}

    def __len__(self) -> int:
        return len(self._intervals)

    def __contains__(self, address: NodeAddress) -> bool:
        return address in self._intervals

    def watch(self, graph: LocusGraph) -> None:
        """Start tracking ``graph``, indexing the nodes it already has."""
        if id(graph) in self._watched:
            raise LocusGraphError(f"Locus {graph.locus_index} is already indexed")
        if any(other.locus_index == graph.locus_index for other, _ in self._watched.values()):
            raise LocusGraphError(f"Another graph is indexed as locus {graph.locus_index}")

        observer = partial(self._on_node_move, graph)
        self._watched[id(graph)] = (graph, observer)
        for node_index in range(len(graph)):
            self._add(graph, (graph.locus_index, node_index))
        graph.register_observer(observer)

    def unwatch(self, graph: LocusGraph) -> None:
        _, observer = self._watched.pop(id(graph))
        graph.unregister_observer(observer)
        for address in [a for a in self._intervals if a[0] == graph.locus_index]:
            self._remove(address)

    def interval(self, locus_index: int, node_index: int) -> GenomeInterval:
        return self._intervals[(locus_index, node_index)]

    def find_intersecting(self, interval: GenomeInterval) -> list[NodeAddress]:
        """Addresses of every indexed node intersecting ``interval``, in interval order."""
        tree = self._trees.get(interval.chromosome_id)
        if tree is None:
            return []
        hits = [
            (self._intervals[hit.data].key(), hit.data)
            for hit in tree.overlap(*_tree_range(interval))
            if self._intervals[hit.data].is_intersect(interval)
        ]
        return [address for _, address in sorted(hits)]

    def _on_node_move(self, graph: LocusGraph, message: NodeMoveMessage) -> None:
        address = (message.locus_index, message.node_index)
        if message.is_add:
            self._add(graph, address)
        else:
            self._remove(address)

    def _add(self, graph: LocusGraph, address: NodeAddress) -> None:
        if address in self._intervals:
            raise LocusGraphError(f"Add of already indexed node {address}")
        interval = graph.get_node(address[1]).interval.model_copy()
        self._intervals[address] = interval
        tree = self._trees.setdefault(interval.chromosome_id, IntervalTree())
        tree.add(Interval(*_tree_range(interval), address))

    def _remove(self, address: NodeAddress) -> None:
        interval = self._intervals.pop(address, None)
        if interval is None:
            raise LocusGraphError(f"Delete of unindexed node {address}")
        self._trees[interval.chromosome_id].remove(Interval(*_tree_range(interval), address))
