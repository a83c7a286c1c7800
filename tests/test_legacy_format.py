"""
Tests for the legacy per-sample frames[] capture shape.
"""

import copy

import pytest

from traceprof.aggregation.grouping import group_by_function
from traceprof.errors import CaptureFormatError, UnknownImplementationError
from traceprof.legacy_format import is_legacy_thread
from traceprof.loader import decode_capture
from traceprof.profile import Implementation
from tests.fixtures.captures import (
    BASIC_SAMPLES,
    LOC_MAIN,
    LOC_RENDER,
    N,
    basic_capture,
    basic_legacy_capture,
    legacy_thread,
    make_capture,
)


OPT_SITES = [
    {
        'line': 42,
        'column': 3,
        'attempts': [
            {'strategy': 'GetProp_InlineAccess', 'outcome': 'Inlined'},
        ],
    },
    {
        'line': 10,
        'attempts': [
            {'strategy': 'Call_Inline', 'outcome': 'CantInlineBigCallee'},
        ],
    },
]


class TestLegacyDecode:

    def test_shape_detection(self):
        assert is_legacy_thread(legacy_thread(BASIC_SAMPLES))
        assert not is_legacy_thread(basic_capture()['profile']['threads'][0])

    def test_matches_columnar(self):
        """Both shapes decode to the same frames, stacks and groupings."""
        columnar = decode_capture(basic_capture()).threads[0]
        legacy = decode_capture(basic_legacy_capture()).threads[0]

        assert len(legacy.samples) == len(columnar.samples)
        assert len(legacy.frames) == len(columnar.frames)
        assert len(legacy.stacks) == len(columnar.stacks)
        assert [s.time for s in legacy.samples] == [s.time for s in columnar.samples]
        assert [s.frame.location.original for s in legacy.samples] == \
            [s.frame.location.original for s in columnar.samples]
        assert [s.frame.implementation for s in legacy.samples] == \
            [s.frame.implementation for s in columnar.samples]

        legacy_groups = [(g.id, len(g)) for g in group_by_function(legacy)]
        columnar_groups = [(g.id, len(g)) for g in group_by_function(columnar)]
        assert legacy_groups == columnar_groups

    def test_stacks_are_shared(self):
        thread = decode_capture(basic_legacy_capture()).threads[0]
        samples = thread.samples

        assert samples[1].stack is samples[2].stack
        assert samples[1].stack.prefix is samples[0].stack

    def test_missing_implementation_is_native(self):
        thread = decode_capture(basic_legacy_capture()).threads[0]
        assert thread.samples[6].frame.implementation == Implementation.NATIVE

    def test_empty_frames_sample(self):
        data = make_capture(legacy_thread([(0.0, []), (1.0, [N])]))
        thread = decode_capture(data).threads[0]

        assert thread.samples[0].stack is None
        assert thread.samples[0].frame is None
        assert thread.samples[1].frame is not None

    def test_null_sample_dropped(self):
        data = basic_legacy_capture()
        data['profile']['threads'][0]['samples'].insert(0, None)

        assert len(decode_capture(data).threads[0].samples) == 8

    def test_unknown_implementation(self):
        data = make_capture(legacy_thread([(0.0, [(LOC_MAIN, 'jit')])]))

        with pytest.raises(UnknownImplementationError):
            decode_capture(data)

    def test_missing_time(self):
        data = basic_legacy_capture()
        del data['profile']['threads'][0]['samples'][0]['time']

        with pytest.raises(CaptureFormatError):
            decode_capture(data)


class TestOptimizationTally:
    """optsIndex back-references tally samples onto sites."""

    def _capture(self):
        render = (LOC_RENDER, 'ion', {'optsIndex': 0})
        main = (LOC_MAIN, 'baseline', {'optsIndex': 1})
        samples = [
            (0.0, [N, main]),
            (1.0, [N, main, render]),
            (2.0, [N, main, render]),
            (3.0, [N]),
        ]
        return make_capture(legacy_thread(samples, optimizations=copy.deepcopy(OPT_SITES)))

    def test_samples_counted(self):
        thread = decode_capture(self._capture()).threads[0]

        assert thread.optimizations[0].samples == 2
        assert thread.optimizations[1].samples == 3

    def test_location_stamped(self):
        thread = decode_capture(self._capture()).threads[0]

        assert thread.optimizations[0].location == LOC_RENDER
        assert thread.optimizations[1].location == LOC_MAIN

    def test_input_untouched(self):
        data = self._capture()
        decode_capture(data)

        sites = data['profile']['threads'][0]['optimizations']
        assert 'samples' not in sites[0]
        assert 'location' not in sites[0]

    def test_frame_keeps_opts_index(self):
        thread = decode_capture(self._capture()).threads[0]
        assert thread.samples[1].frame.optimizations == 0

    def test_out_of_range_index(self):
        bad = (LOC_RENDER, 'ion', {'optsIndex': 5})
        data = make_capture(legacy_thread([(0.0, [bad])], optimizations=copy.deepcopy(OPT_SITES)))

        with pytest.raises(CaptureFormatError):
            decode_capture(data)
