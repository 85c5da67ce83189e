"""
Locus Graph: a set of regions containing dependent SV evidence.

An SV locus is a region hypothetically containing the breakends of one to
many SVs. It is composed of contiguous genomic regions (nodes) and the
evidence links between them (edges). Each link carries an evidence count.

Nodes live in a dense list and a node's identity is its position, so any
operation that changes a position is announced through the observer channel:

- ``add_node`` / ``copy_locus`` / ``load``: one add message per new node
- ``erase_node``: delete messages for the erased node and for every node
  after it (old indexes), then add messages for the shifted nodes (new indexes)
- ``clear``: one delete message per node
- ``update_index`` / ``load``: nodes held under the old locus index are
  deleted there before any add is sent under the new one
"""

import logging
from collections.abc import Iterator
from pathlib import Path

from pydantic import BaseModel, Field, model_validator

from ..models.core import LocusEdge, LocusNode
from .notifier import NodeMoveMessage, Notifier

logger = logging.getLogger(__name__)

__all__ = ["LocusGraph", "LocusGraphArchive", "LocusGraphError", "MAX_NODE_INDEX"]

# Node indexes are addressed as unsigned 32-bit values.
MAX_NODE_INDEX = 2**32 - 1


class LocusGraphError(AssertionError):
    """A locus graph precondition failed or its edges are inconsistent."""


class LocusGraphArchive(BaseModel):
    """Serialized form of a locus graph."""
    locus_index: int = Field(default=0, ge=0)
    node_count: int = Field(default=0, ge=0)
    nodes: list[LocusNode] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_node_count(self) -> "LocusGraphArchive":
        if self.node_count != len(self.nodes):
            raise ValueError(
                f"Archive node_count ({self.node_count}) does not match stored nodes ({len(self.nodes)})"
            )
        return self


class LocusGraph(Notifier):
    """
    A single SV locus: nodes with symmetric, weighted edges.

    The graph exclusively owns its nodes. The edge relation is stored at
    both endpoints and every mutation here updates both sides together;
    ``check_state`` verifies the relation after bulk operations.
    """

    def __init__(self, locus_index: int = 0):
        super().__init__()
        self._nodes: list[LocusNode] = []
        self._index = locus_index

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[LocusNode]:
        return iter(self._nodes)

    @property
    def empty(self) -> bool:
        return not self._nodes

    @property
    def locus_index(self) -> int:
        return self._index

    def update_index(self, locus_index: int) -> None:
        """Move the graph to a new locus index, re-announcing every node under it."""
        if locus_index == self._index:
            return
        for node_index in range(len(self._nodes)):
            self._notify_delete(node_index)
        self._index = locus_index
        for node_index in range(len(self._nodes)):
            self._notify_add(node_index)

    def get_node(self, node_index: int) -> LocusNode:
        self._check_index(node_index)
        return self._nodes[node_index]

    def add_node(self, chrom: int, begin: int, end: int) -> int:
        """
        Append a node covering [begin, end) on ``chrom``.

        Returns:
            Index of the new node.
        """
        node_index = self._new_node()
        node = self._nodes[node_index]
        node.interval.chromosome_id = chrom
        node.interval.set_range(begin, end)
        node.count += 1
        self._notify_add(node_index)
        return node_index

    def link_nodes(self, index1: int, index2: int) -> None:
        """
        Create a symmetric edge of weight 1 between two nodes.

        No edge may already exist between them in either direction.
        """
        node1 = self.get_node(index1)
        node2 = self.get_node(index2)
        if index2 in node1.edges or index1 in node2.edges:
            raise LocusGraphError(f"Nodes {index1} and {index2} are already linked")
        node1.edges[index2] = LocusEdge(count=1)
        node2.edges[index1] = LocusEdge(count=1)

    def clear_node_edges(self, node_index: int) -> None:
        """Remove every edge touching ``node_index``, in both directions."""
        node = self.get_node(node_index)
        for neighbor_index in node.edges:
            if neighbor_index == node_index:
                continue
            neighbor = self.get_node(neighbor_index)
            if node_index not in neighbor.edges:
                raise LocusGraphError(
                    f"Edge {node_index}->{neighbor_index} has no reverse edge"
                )
            del neighbor.edges[node_index]
        node.edges.clear()

    def copy_locus(self, other: "LocusGraph") -> None:
        """
        Copy every node of ``other`` into this graph.

        Edge targets are offset by the current size of this graph, so the
        copied nodes keep their topology among themselves. This is an
        intermediate step of a locus merge.
        """
        if other is self:
            raise LocusGraphError("Cannot copy a locus into itself")

        offset = len(self._nodes)
        for from_node in other:
            node_index = self._new_node()
            self._nodes[node_index] = from_node.offset_copy(offset)
            self._notify_add(node_index)

    def merge_node(self, from_index: int, to_index: int) -> int:
        """
        Fold the edges of ``from_index`` into ``to_index`` and erase the from node.

        An edge between the two nodes is dropped rather than becoming a self
        edge. Edges to a shared neighbour are summed. The count and interval
        of the to node are left as they are.

        Returns:
            Index of the merged node after the from node has been erased.
        """
        if from_index == to_index:
            raise LocusGraphError(f"Cannot merge node {from_index} into itself")

        from_node = self.get_node(from_index)
        to_node = self.get_node(to_index)

        for neighbor_index, edge in from_node.edges.items():
            if neighbor_index == to_index:
                to_node.edges.pop(from_index, None)
                continue

            if neighbor_index == from_index:
                # self edge on the from node moves onto the to node
                self._merge_into(to_node, to_index, edge)
                continue

            neighbor = self.get_node(neighbor_index)
            reverse_edge = neighbor.edges.pop(from_index, None)
            if reverse_edge is None:
                raise LocusGraphError(
                    f"Edge {from_index}->{neighbor_index} has no reverse edge"
                )
            self._merge_into(neighbor, to_index, reverse_edge)
            self._merge_into(to_node, neighbor_index, edge)

        from_node.edges.clear()
        self.erase_node(from_index)

        return to_index - 1 if to_index > from_index else to_index

    def erase_node(self, node_index: int) -> None:
        """
        Remove a node, shifting every later node down by one index.

        Edges touching the node are removed first. Edge keys referring to
        shifted nodes are rewritten, and every shifted node is announced as
        deleted at its old index and added at its new one.
        """
        self._check_index(node_index)
        self.clear_node_edges(node_index)

        last_index = len(self._nodes) - 1
        self._notify_delete(node_index)
        for moved_index in range(node_index + 1, last_index + 1):
            self._notify_delete(moved_index)

        del self._nodes[node_index]

        for node in self._nodes:
            if any(key > node_index for key in node.edges):
                node.edges = {
                    (key - 1 if key > node_index else key): edge
                    for key, edge in node.edges.items()
                }

        for moved_index in range(node_index, last_index):
            self._notify_add(moved_index)

        logger.debug(
            "Erased node %d:%d, renumbered %d nodes", self._index, node_index, last_index - node_index
        )

    def clear(self) -> None:
        for node_index in range(len(self._nodes)):
            self._notify_delete(node_index)
        self._nodes.clear()

    def check_state(self) -> None:
        """
        Check that the edge relation is consistent.

        Every edge target must exist and every edge must be reciprocated.

        Raises:
            LocusGraphError: On the first violation found.
        """
        size = len(self._nodes)
        for node_index, node in enumerate(self._nodes):
            for neighbor_index in node.edges:
                if not 0 <= neighbor_index < size:
                    raise LocusGraphError(
                        f"Locus {self._index}: node {node_index} has edge to missing node {neighbor_index}"
                    )
                if node_index not in self._nodes[neighbor_index].edges:
                    raise LocusGraphError(
                        f"Locus {self._index}: edge {node_index}->{neighbor_index} is not reciprocated"
                    )

    def to_archive(self) -> LocusGraphArchive:
        return LocusGraphArchive(
            locus_index=self._index,
            node_count=len(self._nodes),
            nodes=[node.model_copy(deep=True) for node in self._nodes],
        )

    def from_archive(self, archive: LocusGraphArchive) -> None:
        """Replace the contents of this graph with an archive."""
        self.clear()
        self._index = archive.locus_index
        for node in archive.nodes:
            node_index = self._new_node()
            self._nodes[node_index] = node.model_copy(deep=True)
            self._notify_add(node_index)

    def dumps(self) -> str:
        return self.to_archive().model_dump_json()

    def loads(self, data: str | bytes) -> None:
        self.from_archive(LocusGraphArchive.model_validate_json(data))

    def save(self, path: Path) -> None:
        Path(path).write_text(self.dumps())

    def load(self, path: Path) -> None:
        self.loads(Path(path).read_text())

    def __str__(self) -> str:
        lines = [f"LOCUS BEGIN INDEX {self._index}"]
        for node_index, node in enumerate(self._nodes):
            edges = " ".join(f"{k}:{e.count}" for k, e in sorted(node.edges.items()))
            lines.append(f"NodeIndex: {node_index} count: {node.count} {node.interval} edges: {edges}")
        lines.append(f"LOCUS END INDEX {self._index}")
        return "\n".join(lines)

    def _merge_into(self, node: LocusNode, target_index: int, edge: LocusEdge) -> None:
        existing = node.edges.get(target_index)
        if existing is None:
            node.edges[target_index] = edge.model_copy()
        else:
            existing.merge_edge(edge)

    def _check_index(self, node_index: int) -> None:
        if not 0 <= node_index < len(self._nodes):
            raise LocusGraphError(
                f"Locus {self._index}: node index {node_index} out of range (size {len(self._nodes)})"
            )

    def _new_node(self) -> int:
        node_index = len(self._nodes)
        if node_index >= MAX_NODE_INDEX:
            raise LocusGraphError(f"Locus {self._index}: node index space exhausted")
        self._nodes.append(LocusNode())
        return node_index

    def _notify_add(self, node_index: int) -> None:
        logger.debug("Add node: %d:%d", self._index, node_index)
        self.notify_observers(NodeMoveMessage(True, self._index, node_index))

    def _notify_delete(self, node_index: int) -> None:
        logger.debug("Delete node: %d:%d", self._index, node_index)
        self.notify_observers(NodeMoveMessage(False, self._index, node_index))
