"""
Tests for parent-linked Stack nodes and common-prefix queries.
"""

import random

import pytest

from traceprof.location import parse_location
from traceprof.profile import Frame
from traceprof.stack_tree import Stack


def _frame(name):
    return Frame(parse_location(f"{name} (http://example.com/{name}.js:1:1)"))


@pytest.fixture
def tree():
    """
    root - b - c
             \\ d
         \\ e
    other_root
    """
    root = Stack(None, _frame('root'))
    b = Stack(root, _frame('b'))
    c = Stack(b, _frame('c'))
    d = Stack(b, _frame('d'))
    e = Stack(root, _frame('e'))
    other_root = Stack(None, _frame('other'))
    return {'root': root, 'b': b, 'c': c, 'd': d, 'e': e, 'other_root': other_root}


class TestStackNavigation:

    def test_height_counts_ancestors(self, tree):
        assert tree['root'].get_height() == 0
        assert tree['b'].get_height() == 1
        assert tree['c'].get_height() == 2

    def test_get_prefix(self, tree):
        c = tree['c']
        assert c.get_prefix(0) is c
        assert c.get_prefix(1) is tree['b']
        assert c.get_prefix(2) is tree['root']
        assert c.get_prefix(3) is None

    def test_iter_is_innermost_first(self, tree):
        assert list(tree['c']) == [tree['c'], tree['b'], tree['root']]

    def test_frames_outermost_first(self, tree):
        frames = tree['c'].frames()
        assert [f.location.function_name for f in frames] == ['root', 'b', 'c']

    def test_format_trace(self, tree):
        assert tree['c'].format_trace() == ['c:1', 'b:1', 'root:1']


class TestCommonPrefix:
    """Deepest shared ancestor, including the nodes themselves."""

    def test_siblings(self, tree):
        assert tree['c'].get_common_prefix(tree['d']) is tree['b']

    def test_cousins(self, tree):
        assert tree['c'].get_common_prefix(tree['e']) is tree['root']

    def test_ancestor(self, tree):
        assert tree['c'].get_common_prefix(tree['b']) is tree['b']
        assert tree['b'].get_common_prefix(tree['c']) is tree['b']

    def test_self(self, tree):
        assert tree['c'].get_common_prefix(tree['c']) is tree['c']

    def test_disjoint_roots(self, tree):
        assert tree['c'].get_common_prefix(tree['other_root']) is None

    def test_none_other(self, tree):
        assert tree['c'].get_common_prefix(None) is None

    def test_repeated_calls_leave_no_state(self, tree):
        """1000 interleaved calls always agree with a fresh call."""
        pairs = [
            ('c', 'd', 'b'),
            ('c', 'e', 'root'),
            ('d', 'e', 'root'),
            ('c', 'other_root', None),
            ('e', 'e', 'e'),
            ('b', 'd', 'b'),
        ]
        rng = random.Random(7)
        for _ in range(1000):
            a, b, expected = rng.choice(pairs)
            if rng.random() < 0.5:
                a, b = b, a
            result = tree[a].get_common_prefix(tree[b])
            assert result is (tree[expected] if expected else None)

        # An unrelated query afterwards is unaffected
        assert tree['d'].get_common_prefix(tree['c']) is tree['b']
        assert tree['e'].get_common_prefix(tree['other_root']) is None
