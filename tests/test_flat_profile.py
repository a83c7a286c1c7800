"""
Tests for inclusive / exclusive flat profiles and time buckets.
"""

from traceprof.aggregation.buckets import bucket_function_samples, dominant_tier
from traceprof.aggregation.counters import FunctionTierCounters
from traceprof.aggregation.flat_profile import gather_flat_function_profiles
from traceprof.profile import File
from tests.fixtures.captures import (
    LOC_LAYOUT,
    LOC_MAIN,
    LOC_NATIVE,
    LOC_RENDER,
    MAIN_B,
    MAIN_I,
    RENDER_I,
    columnar_thread,
    make_capture,
)


class TestFlatProfile:

    def test_order_and_totals(self, basic_thread):
        profile = gather_flat_function_profiles(basic_thread)

        assert profile.sample_count == 8
        assert [(f.location, f.inclusive.all) for f in profile.functions] == [
            (LOC_NATIVE, 8),
            (LOC_MAIN, 7),
            (LOC_RENDER, 4),
            (LOC_LAYOUT, 1),
        ]

    def test_inclusive_and_exclusive_tiers(self, basic_thread):
        profile = gather_flat_function_profiles(basic_thread)
        main = profile.find(LOC_MAIN)

        assert main.inclusive == FunctionTierCounters(interpreter=5, baseline=2)
        assert main.exclusive == FunctionTierCounters(interpreter=1, baseline=1)
        assert profile.find(LOC_NATIVE).exclusive == FunctionTierCounters(native=1)
        assert profile.find(LOC_RENDER).exclusive == FunctionTierCounters(interpreter=3, ion=1)

    def test_inclusive_percent(self, basic_thread):
        profile = gather_flat_function_profiles(basic_thread)

        assert profile.inclusive_percent(profile.find(LOC_MAIN)) == 87.5
        assert profile.inclusive_percent(profile.find(LOC_NATIVE)) == 100.0

    def test_content_frames_only(self, basic_thread):
        profile = gather_flat_function_profiles(basic_thread, include_platform_frames=False)

        assert profile.find(LOC_NATIVE) is None
        assert profile.sample_count == 7
        assert profile.inclusive_percent(profile.find(LOC_MAIN)) == 100.0

    def test_recursion_counted_once(self):
        """The outermost occurrence supplies the inclusive tier."""
        thread = File(make_capture(columnar_thread([(0.0, [MAIN_I, RENDER_I, MAIN_B])]))).threads[0]
        main = gather_flat_function_profiles(thread).find(LOC_MAIN)

        assert main.inclusive == FunctionTierCounters(interpreter=1)
        assert main.exclusive == FunctionTierCounters(baseline=1)
        assert len(main.samples) == 1

    def test_window(self, basic_thread):
        profile = gather_flat_function_profiles(basic_thread, 4.0, 6.0)

        assert profile.sample_count == 2
        assert profile.find(LOC_RENDER) is None
        assert profile.find(LOC_MAIN).inclusive == FunctionTierCounters(baseline=2)

    def test_rows(self, basic_thread):
        rows = gather_flat_function_profiles(basic_thread).to_rows()

        assert rows[1].location == LOC_MAIN
        assert rows[1].inclusive.interpreter == 5
        assert rows[1].exclusive_total == 2
        assert rows[1].inclusive_percent == 87.5


class TestDominantTier:

    def test_empty(self):
        assert dominant_tier(FunctionTierCounters()) is None

    def test_any_interpreter_wins(self):
        assert dominant_tier(FunctionTierCounters(interpreter=1, ion=9)) == 'interpreter'

    def test_baseline_must_beat_ion(self):
        assert dominant_tier(FunctionTierCounters(baseline=3, ion=1)) == 'baseline'
        assert dominant_tier(FunctionTierCounters(baseline=2, ion=2)) == 'ion'

    def test_native_only(self):
        assert dominant_tier(FunctionTierCounters(native=3)) == 'native'

    def test_native_ignored_when_compiled(self):
        assert dominant_tier(FunctionTierCounters(native=5, ion=1)) == 'ion'


class TestBuckets:

    def test_render_buckets(self, basic_thread):
        render = gather_flat_function_profiles(basic_thread).find(LOC_RENDER)
        buckets = bucket_function_samples(render, 3)

        assert [b.samples for b in buckets] == [2, 1, 1]
        assert [b.dominant_tier for b in buckets] == ['interpreter', 'ion', 'interpreter']
        assert [(b.start, b.end) for b in buckets] == [(1.0, 3.0), (3.0, 5.0), (5.0, 7.0)]
        assert buckets[0].counts.interpreter == 2

    def test_last_sample_clamped_into_last_bucket(self, basic_thread):
        main = gather_flat_function_profiles(basic_thread).find(LOC_MAIN)
        buckets = bucket_function_samples(main, 2)

        assert [b.samples for b in buckets] == [4, 3]
        assert buckets[1].counts.baseline == 2
        assert buckets[1].dominant_tier == 'interpreter'

    def test_empty_bucket(self, basic_thread):
        render = gather_flat_function_profiles(basic_thread).find(LOC_RENDER)
        buckets = bucket_function_samples(render, 4)

        assert [b.samples for b in buckets] == [2, 1, 0, 1]
        assert buckets[2].dominant_tier is None

    def test_single_sample(self, basic_thread):
        layout = gather_flat_function_profiles(basic_thread).find(LOC_LAYOUT)
        buckets = bucket_function_samples(layout, 5)

        assert len(buckets) == 5
        assert buckets[0].samples == 1
        assert sum(b.samples for b in buckets) == 1
        assert buckets[0].dominant_tier == 'baseline'

    def test_native_bucket(self, basic_thread):
        native = gather_flat_function_profiles(basic_thread).find(LOC_NATIVE)
        buckets = bucket_function_samples(native, 1)

        assert buckets[0].counts.native == 8
        assert buckets[0].dominant_tier == 'native'

    def test_recursive_frames_all_counted(self):
        thread = File(make_capture(columnar_thread([(0.0, [MAIN_I, RENDER_I, MAIN_B])]))).threads[0]
        main = gather_flat_function_profiles(thread).find(LOC_MAIN)
        bucket = bucket_function_samples(main, 1)[0]

        assert bucket.samples == 1
        assert bucket.counts.interpreter == 1
        assert bucket.counts.baseline == 1

    def test_no_buckets(self, basic_thread):
        render = gather_flat_function_profiles(basic_thread).find(LOC_RENDER)
        assert bucket_function_samples(render, 0) == []
