"""
Tests for grouping JIT optimization sites by script URL.
"""

from traceprof.aggregation.optimizations import (
    group_sites_by_url,
    is_successful_outcome,
    last_attempt_successful,
    site_rows,
    site_url,
)
from traceprof.capture_types import OptimizationSite
from tests.fixtures.captures import LOC_LAYOUT, LOC_MAIN, LOC_NATIVE, LOC_RENDER


def _site(location, line, samples=0, outcomes=()):
    return OptimizationSite(
        location=location,
        line=line,
        samples=samples,
        attempts=[{'strategy': f's{i}', 'outcome': o} for i, o in enumerate(outcomes)],
    )


class TestOutcomes:

    def test_successful(self):
        for outcome in ('GenericSuccess', 'Inlined', 'DOM', 'Monomorphic', 'Polymorphic'):
            assert is_successful_outcome(outcome)

    def test_failed(self):
        assert not is_successful_outcome('CantInlineBigCallee')
        assert not is_successful_outcome('inlined')

    def test_last_attempt_decides(self):
        assert last_attempt_successful(_site(LOC_MAIN, 1, outcomes=('NoTypeInfo', 'Inlined')))
        assert last_attempt_successful(_site(LOC_MAIN, 1, outcomes=('Inlined', 'NoTypeInfo'))) is False
        assert last_attempt_successful(_site(LOC_MAIN, 1)) is None


class TestGrouping:

    def test_site_url(self):
        assert site_url(_site(LOC_MAIN, 10)) == 'http://example.com/app.js'
        assert site_url(_site(LOC_NATIVE, 1)) is None
        assert site_url(OptimizationSite()) is None

    def test_grouped_and_sorted_by_line(self):
        sites = [
            _site(LOC_RENDER, 42, samples=2),
            _site(LOC_LAYOUT, 7, samples=1),
            _site(LOC_MAIN, 10, samples=3),
            _site(LOC_NATIVE, 1, samples=9),
        ]
        files = group_sites_by_url(sites)

        assert list(files) == ['http://example.com/app.js', 'http://example.com/lib/layout.js']
        assert [s.line for s in files['http://example.com/app.js']] == [10, 42]

    def test_threshold(self):
        sites = [_site(LOC_RENDER, 42, samples=2), _site(LOC_MAIN, 10, samples=3)]
        files = group_sites_by_url(sites, threshold=3)

        assert [s.line for s in files['http://example.com/app.js']] == [10]

    def test_missing_line_sorts_first(self):
        sites = [_site(LOC_RENDER, 42), _site(LOC_MAIN, None)]
        files = group_sites_by_url(sites)

        assert [s.line for s in files['http://example.com/app.js']] == [None, 42]

    def test_rows(self):
        sites = [
            _site(LOC_RENDER, 42, samples=2, outcomes=('Inlined',)),
            _site(LOC_MAIN, 10, samples=3, outcomes=('CantInlineBigCallee',)),
        ]
        rows = site_rows(sites)

        assert [(r.line, r.samples, r.successful) for r in rows] == [(10, 3, False), (42, 2, True)]
        assert rows[1].attempts[0].strategy == 's0'
        assert rows[1].attempts[0].successful
