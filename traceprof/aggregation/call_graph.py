"""
Call Graph Builder

Builds a NetworkX directed graph of caller -> callee function keys from the
sampled stacks of a window.

Node attributes:
    - location: raw location of the first frame seen for the key
    - self_samples: samples where the key is the leaf
    - total_samples: samples where the key appears anywhere (counted once)

Edge attributes:
    - samples: samples containing the caller -> callee transition (counted once)

Recursion shows up as self-loops or cycles, so the graph is not always a DAG.
"""

from typing import Optional

import networkx as nx

from ..profile import Thread
from .grouping import function_key, window_samples


def build_call_graph(thread: Thread, start: Optional[float] = None, end: Optional[float] = None) -> nx.DiGraph:
    """
    Build the call graph of a window.

    Args:
        thread: Decoded thread
        start: Window start time (None = first sample)
        end: Window end time (None = after the last sample)

    Returns:
        NetworkX DiGraph keyed by "functionName:line"
    """
    G = nx.DiGraph()

    for sample in window_samples(thread, start, end):
        frames = [f for f in sample.stack.frames() if f is not None]
        keys = []
        for frame in frames:
            key = function_key(frame.location)
            if key not in G:
                G.add_node(key, location=frame.location.original, self_samples=0, total_samples=0)
            keys.append(key)

        for key in set(keys):
            G.nodes[key]['total_samples'] += 1
        G.nodes[keys[-1]]['self_samples'] += 1

        for caller, callee in set(zip(keys, keys[1:])):
            if G.has_edge(caller, callee):
                G.edges[caller, callee]['samples'] += 1
            else:
                G.add_edge(caller, callee, samples=1)

    return G


def find_root_functions(G: nx.DiGraph) -> list[str]:
    """Functions that are never called from another function."""
    return [n for n in G.nodes() if G.in_degree(n) == 0]


def find_leaf_functions(G: nx.DiGraph) -> list[str]:
    """Functions that call nothing else."""
    return [n for n in G.nodes() if G.out_degree(n) == 0]


def get_call_graph_stats(G: nx.DiGraph) -> dict:
    """
    Get basic statistics about the call graph.

    Returns:
        Dict with node_count, edge_count, root_functions, leaf_functions,
        hottest_function (most self samples, None for an empty graph), is_dag
    """
    hottest = None
    if G.number_of_nodes():
        hottest = max(G.nodes(data=True), key=lambda item: item[1]['self_samples'])[0]

    return {
        'node_count': G.number_of_nodes(),
        'edge_count': G.number_of_edges(),
        'root_functions': find_root_functions(G),
        'leaf_functions': find_leaf_functions(G),
        'hottest_function': hottest,
        'is_dag': nx.is_directed_acyclic_graph(G),
    }
