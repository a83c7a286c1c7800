"""
Sample Grouping

Groups the samples of a time window by leaf function or by compilation tier.

All groupings build their groups in first-seen order, then sort by sample
count descending. The sort is stable, so equal counts keep first-seen order
and repeated runs over the same samples give identical output.

The function key is "functionName:line". Two call sites in different columns
of the same line share a key and are counted together.
"""

from typing import Dict, Iterator, List, Optional

from ..location import Location
from ..profile import Implementation, Sample, Thread
from .counters import SampleCounter, SampleGroup


def function_key(location: Location) -> str:
    return f"{location.function_name}:{location.line}"


def window_samples(thread: Thread, start: Optional[float] = None, end: Optional[float] = None) -> Iterator[Sample]:
    """Samples in [start, end) that have a leaf frame."""
    s, e = thread.sample_range(start, end)
    for sample in thread.samples[s:e]:
        if sample.frame is not None:
            yield sample


def count_samples(thread: Thread, start: Optional[float] = None, end: Optional[float] = None) -> List[SampleCounter]:
    """Per-function tier counters over a window, busiest first."""
    by_key: Dict[str, SampleCounter] = {}
    counters: List[SampleCounter] = []
    for sample in window_samples(thread, start, end):
        location = sample.frame.location
        key = function_key(location)
        counter = by_key.get(key)
        if counter is None:
            counter = by_key[key] = SampleCounter(key, location.original)
            counters.append(counter)
        counter.count(sample)
    return sorted(counters, key=lambda c: -c.get_all_counts())


def group_by_function(thread: Thread, start: Optional[float] = None, end: Optional[float] = None) -> List[SampleGroup]:
    """
    Group window samples by leaf function key.

    Args:
        thread: Decoded thread
        start: Window start time (None = first sample)
        end: Window end time (None = after the last sample)

    Returns:
        Groups sorted by sample count descending, ties in first-seen order
    """
    by_key: Dict[str, SampleGroup] = {}
    groups: List[SampleGroup] = []
    for sample in window_samples(thread, start, end):
        location = sample.frame.location
        key = function_key(location)
        group = by_key.get(key)
        if group is None:
            group = by_key[key] = SampleGroup(key, location.original)
            groups.append(group)
        group.count(sample)
    return sorted(groups, key=lambda g: -len(g))


def group_by_implementation(thread: Thread, start: Optional[float] = None, end: Optional[float] = None) -> List[SampleGroup]:
    """Group window samples by the leaf frame's tier. Group ids are Implementation members."""
    by_tier: Dict[Implementation, SampleGroup] = {}
    groups: List[SampleGroup] = []
    for sample in window_samples(thread, start, end):
        tier = sample.frame.implementation
        group = by_tier.get(tier)
        if group is None:
            group = by_tier[tier] = SampleGroup(tier, tier.name.capitalize())
            groups.append(group)
        group.count(sample)
    return sorted(groups, key=lambda g: -len(g))
