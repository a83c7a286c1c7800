"""
Time buckets for one function of a flat profile.
"""

from typing import List, Optional

from ..profile import Sample
from .counters import FunctionTierCounters
from .flat_profile import FlatFunctionProfile
from .types import TierCountsModel, TimeBucket


def dominant_tier(counts: FunctionTierCounters) -> Optional[str]:
    """Any interpreter sample wins, then baseline if it beats ion, else ion."""
    if not counts.all:
        return None
    if counts.interpreter:
        return 'interpreter'
    if not counts.compiled:
        return 'native'
    if counts.baseline > counts.ion:
        return 'baseline'
    return 'ion'


def _count_location(sample: Sample, location: str, counter: FunctionTierCounters) -> None:
    # Every matching frame counts, recursion included
    for frame in sample.stack.frames():
        if frame is not None and frame.location.original == location:
            counter.add(frame.implementation)


def bucket_function_samples(profile: FlatFunctionProfile, bucket_count: int = 80) -> List[TimeBucket]:
    """
    Spread a function's samples over equal slices between its first and last
    sample time.

    Returns:
        `bucket_count` buckets, or none if the function has no samples
    """
    samples = profile.samples
    if not samples or bucket_count < 1:
        return []
    s = samples[0].time
    span = samples[-1].time - s
    width = span / bucket_count

    buckets: List[List[Sample]] = [[] for _ in range(bucket_count)]
    for sample in samples:
        index = int((sample.time - s) / span * bucket_count) if span > 0 else 0
        buckets[min(bucket_count - 1, index)].append(sample)

    result = []
    for i, bucket in enumerate(buckets):
        counter = FunctionTierCounters()
        for sample in bucket:
            _count_location(sample, profile.location, counter)
        result.append(TimeBucket(
            index=i,
            start=s + i * width,
            end=s + (i + 1) * width,
            samples=len(bucket),
            counts=TierCountsModel(**counter.to_dict()),
            dominant_tier=dominant_tier(counter),
        ))
    return result
