"""
Tests for the weighted undirected graph.

These tests verify:
1. Edge insertion and adjacency bookkeeping
2. Self-loop conventions
3. Input validation
4. Conversions (NetworkX, dict)

Run with: pytest tests/test_graph.py -v
"""

import math

import networkx as nx
import pytest

from graph_ids.exceptions import GraphIDSError, InvalidInputError
from graph_ids.graph_analysis import Graph, Link


# =============================================================================
# TEST FIXTURES
# =============================================================================


@pytest.fixture
def path_graph():
    """0 - 1 - 2 with a self-loop on 2."""
    graph = Graph(3)
    graph.add_edge(0, 1, 1.0)
    graph.add_edge(1, 2, 0.5)
    graph.add_edge(2, 2, 2.0)
    return graph


# =============================================================================
# EDGE INSERTION TESTS
# =============================================================================


class TestEdgeInsertion:
    """Tests for add_edge and the derived queries."""

    def test_empty_graph(self):
        """A new graph has nodes but no weight."""
        graph = Graph(4)

        assert graph.node_count == 4
        assert graph.total_weight == 0.0
        assert graph.edge_count == 0
        assert all(graph.neighbors(n) == [] for n in range(4))

    def test_zero_node_graph(self):
        """A graph may have no nodes at all."""
        graph = Graph(0)

        assert graph.node_count == 0
        assert list(graph.edges()) == []

    def test_edge_stored_on_both_endpoints(self):
        """An edge between distinct nodes appears in both adjacency lists."""
        graph = Graph(2)
        graph.add_edge(0, 1, 0.7)

        assert graph.neighbors(0) == [Link(1, 0.7)]
        assert graph.neighbors(1) == [Link(0, 0.7)]
        assert graph.total_weight == pytest.approx(0.7)
        assert graph.edge_count == 1

    def test_self_loop_stored_once(self):
        """A self-loop is a single adjacency entry, counted once everywhere."""
        graph = Graph(1)
        graph.add_edge(0, 0, 3.0)

        assert graph.neighbors(0) == [Link(0, 3.0)]
        assert graph.total_weight == 3.0
        assert graph.weighted_degree(0) == 3.0
        assert graph.self_loop_weight(0) == 3.0

    def test_weighted_degree(self, path_graph):
        """Weighted degree sums all adjacency entries."""
        assert path_graph.weighted_degree(0) == 1.0
        assert path_graph.weighted_degree(1) == 1.5
        assert path_graph.weighted_degree(2) == 2.5
        assert path_graph.total_weight == 3.5

    def test_self_loop_weight_absent(self, path_graph):
        """Nodes without a self-loop report 0.0."""
        assert path_graph.self_loop_weight(0) == 0.0
        assert path_graph.self_loop_weight(1) == 0.0

    def test_parallel_edges_are_kept(self):
        """The graph is a multigraph: parallel edges are appended."""
        graph = Graph(2)
        graph.add_edge(0, 1, 1.0)
        graph.add_edge(1, 0, 2.0)

        assert graph.neighbors(0) == [Link(1, 1.0), Link(1, 2.0)]
        assert graph.weighted_degree(1) == 3.0
        assert graph.total_weight == 3.0
        assert graph.edge_count == 2

    def test_neighbors_keep_insertion_order(self):
        """Adjacency lists are ordered by insertion."""
        graph = Graph(4)
        graph.add_edge(0, 3, 1.0)
        graph.add_edge(0, 1, 1.0)
        graph.add_edge(2, 0, 1.0)

        assert [link.node for link in graph.neighbors(0)] == [3, 1, 2]

    def test_edges_yield_each_edge_once(self, path_graph):
        """edges() lists inserted edges once with a <= b."""
        assert sorted(path_graph.edges()) == [(0, 1, 1.0), (1, 2, 0.5), (2, 2, 2.0)]

    def test_zero_weight_edge(self):
        """Zero weights are allowed."""
        graph = Graph(2)
        graph.add_edge(0, 1, 0.0)

        assert graph.edge_count == 1
        assert graph.total_weight == 0.0


# =============================================================================
# VALIDATION TESTS
# =============================================================================


class TestValidation:
    """Malformed input fails fast."""

    def test_negative_node_count(self):
        with pytest.raises(InvalidInputError):
            Graph(-1)

    @pytest.mark.parametrize("a, b", [(0, 3), (3, 0), (-1, 0), (0, -1)])
    def test_endpoint_out_of_range(self, a, b):
        """Endpoints must be valid node indices."""
        graph = Graph(3)

        with pytest.raises(InvalidInputError):
            graph.add_edge(a, b, 1.0)

        # Nothing was half-inserted
        assert graph.total_weight == 0.0
        assert all(graph.neighbors(n) == [] for n in range(3))

    @pytest.mark.parametrize("weight", [-0.1, math.nan])
    def test_invalid_weight(self, weight):
        """Weights must be non-negative numbers."""
        graph = Graph(2)

        with pytest.raises(InvalidInputError):
            graph.add_edge(0, 1, weight)
        assert graph.edge_count == 0

    def test_query_out_of_range(self, path_graph):
        with pytest.raises(InvalidInputError):
            path_graph.weighted_degree(5)

    def test_error_hierarchy(self):
        """InvalidInputError is both a package error and a ValueError."""
        assert issubclass(InvalidInputError, GraphIDSError)
        assert issubclass(InvalidInputError, ValueError)


# =============================================================================
# CONVERSION TESTS
# =============================================================================


class TestConversions:
    """Tests for NetworkX and dict conversions."""

    def test_from_edges(self):
        graph = Graph.from_edges(3, [(0, 1, 1.0), (1, 2, 2.0)])

        assert graph.edge_count == 2
        assert graph.total_weight == 3.0

    def test_to_networkx(self, path_graph):
        """Conversion keeps nodes, edges and weights."""
        nx_graph = path_graph.to_networkx()

        assert nx_graph.number_of_nodes() == 3
        assert nx_graph.number_of_edges() == 3
        assert nx_graph.size(weight="weight") == pytest.approx(3.5)

    def test_from_networkx(self):
        """NetworkX nodes are indexed in iteration order."""
        nx_graph = nx.Graph()
        nx_graph.add_edge("users", "orders", weight=2.0)
        nx_graph.add_edge("orders", "items")

        graph = Graph.from_networkx(nx_graph)

        assert graph.node_count == 3
        assert graph.weighted_degree(0) == 2.0
        assert graph.weighted_degree(1) == 3.0
        assert graph.weighted_degree(2) == 1.0

    def test_dict_round_trip(self, path_graph):
        restored = Graph.from_dict(path_graph.to_dict())

        assert restored.node_count == path_graph.node_count
        assert sorted(restored.edges()) == sorted(path_graph.edges())
        assert restored.total_weight == path_graph.total_weight
