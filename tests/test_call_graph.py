"""
Tests for the caller -> callee graph built from sampled stacks.
"""

import networkx as nx

from traceprof.aggregation.call_graph import (
    build_call_graph,
    find_leaf_functions,
    find_root_functions,
    get_call_graph_stats,
)
from traceprof.profile import File
from tests.fixtures.captures import LOC_MAIN, MAIN_B, MAIN_I, RENDER_I, columnar_thread, make_capture


class TestBuildCallGraph:

    def test_nodes(self, basic_thread):
        G = build_call_graph(basic_thread)

        assert isinstance(G, nx.DiGraph)
        assert list(G.nodes()) == ['js::RunScript:0', 'main:10', 'render:42', 'layout:7']
        assert G.nodes['main:10']['location'] == LOC_MAIN
        assert G.nodes['js::RunScript:0']['total_samples'] == 8
        assert G.nodes['js::RunScript:0']['self_samples'] == 1
        assert G.nodes['main:10']['total_samples'] == 7
        assert G.nodes['render:42']['self_samples'] == 4

    def test_edges(self, basic_thread):
        G = build_call_graph(basic_thread)

        assert G.edges['js::RunScript:0', 'main:10']['samples'] == 7
        assert G.edges['main:10', 'render:42']['samples'] == 4
        assert G.edges['main:10', 'layout:7']['samples'] == 1
        assert G.number_of_edges() == 3

    def test_roots_and_leaves(self, basic_thread):
        G = build_call_graph(basic_thread)

        assert find_root_functions(G) == ['js::RunScript:0']
        assert find_leaf_functions(G) == ['render:42', 'layout:7']

    def test_window(self, basic_thread):
        G = build_call_graph(basic_thread, 4.0, 6.0)

        assert set(G.nodes()) == {'js::RunScript:0', 'main:10', 'layout:7'}

    def test_recursion_makes_cycle(self):
        thread = File(make_capture(columnar_thread([(0.0, [MAIN_I, RENDER_I, MAIN_B])]))).threads[0]
        G = build_call_graph(thread)

        assert G.nodes['main:10']['total_samples'] == 1
        assert G.has_edge('render:42', 'main:10')
        assert not nx.is_directed_acyclic_graph(G)


class TestCallGraphStats:

    def test_stats(self, basic_thread):
        stats = get_call_graph_stats(build_call_graph(basic_thread))

        assert stats['node_count'] == 4
        assert stats['edge_count'] == 3
        assert stats['hottest_function'] == 'render:42'
        assert stats['is_dag'] is True

    def test_empty_graph(self):
        stats = get_call_graph_stats(nx.DiGraph())

        assert stats['node_count'] == 0
        assert stats['hottest_function'] is None
        assert stats['root_functions'] == []
