"""
Tests for the interval index kept in sync with locus graphs.
"""

import pytest

from svlocus.core import LocusGraph, LocusGraphError, NodeIntervalIndex
from svlocus.models.core import GenomeInterval


def assert_in_sync(index: NodeIntervalIndex, *graphs: LocusGraph) -> None:
    assert len(index) == sum(len(g) for g in graphs)
    for graph in graphs:
        for node_index, node in enumerate(graph):
            assert index.interval(graph.locus_index, node_index) == node.interval


@pytest.fixture
def graph() -> LocusGraph:
    graph = LocusGraph(0)
    graph.add_node(1, 100, 200)
    graph.add_node(1, 500, 600)
    graph.add_node(2, 100, 200)
    graph.link_nodes(0, 1)
    return graph


def test_watch_indexes_existing_nodes(graph):
    index = NodeIntervalIndex()
    index.watch(graph)

    assert_in_sync(index, graph)
    assert (0, 2) in index


def test_add_node_is_indexed(graph):
    index = NodeIntervalIndex()
    index.watch(graph)

    graph.add_node(1, 150, 160)

    assert_in_sync(index, graph)
    assert index.find_intersecting(GenomeInterval(chromosome_id=1, begin=0, end=1000)) == [
        (0, 0),
        (0, 3),
        (0, 1),
    ]


def test_find_intersecting_respects_chromosome(graph):
    index = NodeIntervalIndex()
    index.watch(graph)

    hits = index.find_intersecting(GenomeInterval(chromosome_id=2, begin=150, end=151))
    assert hits == [(0, 2)]
    assert index.find_intersecting(GenomeInterval(chromosome_id=3, begin=0, end=1000)) == []


def test_half_open_intervals_do_not_touch(graph):
    index = NodeIntervalIndex()
    index.watch(graph)

    assert index.find_intersecting(GenomeInterval(chromosome_id=1, begin=200, end=500)) == []


def test_erase_keeps_index_in_sync(graph):
    index = NodeIntervalIndex()
    index.watch(graph)

    graph.erase_node(0)

    assert_in_sync(index, graph)
    assert (0, 2) not in index
    assert index.interval(0, 0).begin == 500


def test_merge_keeps_index_in_sync(graph):
    index = NodeIntervalIndex()
    index.watch(graph)

    merged = graph.merge_node(0, 2)

    assert merged == 1
    assert_in_sync(index, graph)


def test_clear_and_load_keep_index_in_sync(graph):
    archive = graph.dumps()
    other = LocusGraph(0)
    other.add_node(5, 0, 10)

    index = NodeIntervalIndex()
    index.watch(other)
    other.loads(archive)

    assert_in_sync(index, other)
    assert index.find_intersecting(GenomeInterval(chromosome_id=5, begin=0, end=10)) == []


def test_multiple_graphs(graph):
    second = LocusGraph(1)
    second.add_node(1, 180, 300)

    index = NodeIntervalIndex()
    index.watch(graph)
    index.watch(second)

    hits = index.find_intersecting(GenomeInterval(chromosome_id=1, begin=190, end=195))
    assert hits == [(0, 0), (1, 0)]

    second.erase_node(0)
    assert_in_sync(index, graph, second)


def test_unwatch_stops_tracking(graph):
    index = NodeIntervalIndex()
    index.watch(graph)
    index.unwatch(graph)

    graph.add_node(1, 0, 10)
    assert len(index) == 0


def test_watch_same_locus_twice_fails(graph):
    index = NodeIntervalIndex()
    index.watch(graph)
    with pytest.raises(LocusGraphError):
        index.watch(graph)


def test_indexed_interval_is_a_copy(graph):
    index = NodeIntervalIndex()
    index.watch(graph)

    graph.get_node(0).interval.set_range(0, 1)
    assert index.interval(0, 0).end == 200


def test_load_archive_with_new_locus_index(graph):
    index = NodeIntervalIndex()
    index.watch(graph)

    source = LocusGraph(7)
    source.add_node(3, 10, 20)
    graph.loads(source.dumps())

    assert graph.locus_index == 7
    assert_in_sync(index, graph)
    assert index.find_intersecting(GenomeInterval(chromosome_id=3, begin=0, end=100)) == [(7, 0)]
    assert (0, 0) not in index


def test_update_index_rekeys_nodes(graph):
    index = NodeIntervalIndex()
    index.watch(graph)

    graph.update_index(4)
    graph.add_node(1, 700, 800)

    assert_in_sync(index, graph)
    assert index.find_intersecting(GenomeInterval(chromosome_id=1, begin=0, end=1000)) == [
        (4, 0),
        (4, 1),
        (4, 3),
    ]


def test_watch_second_graph_with_same_locus_fails(graph):
    index = NodeIntervalIndex()
    index.watch(graph)
    with pytest.raises(LocusGraphError):
        index.watch(LocusGraph(graph.locus_index))
