"""
Core module for svlocus.

Provides the locus graph, its notification channel and an interval index
kept in sync through that channel.
"""

from .locus_graph import LocusGraph, LocusGraphArchive, LocusGraphError
from .node_index import NodeIntervalIndex
from .notifier import NodeMoveMessage, Notifier

__all__ = [
    "LocusGraph",
    "LocusGraphArchive",
    "LocusGraphError",
    "NodeIntervalIndex",
    "NodeMoveMessage",
    "Notifier",
]
