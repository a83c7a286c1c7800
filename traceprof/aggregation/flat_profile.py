"""
Flat Function Profile

Inclusive and exclusive tier counts per raw location.

A location is counted inclusively at most once per sample (its outermost
occurrence wins when it recurses), and exclusively when it is the sample's
leaf frame. Percentages are taken against the number of samples that
contributed at least one counted frame.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..profile import Sample, Thread
from .counters import FunctionTierCounters
from .types import FlatFunctionRow, TierCountsModel


@dataclass
class FlatFunctionProfile:
    """Counters and contributing samples for one raw location."""
    location: str
    samples: List[Sample] = field(default_factory=list)
    inclusive: FunctionTierCounters = field(default_factory=FunctionTierCounters)
    exclusive: FunctionTierCounters = field(default_factory=FunctionTierCounters)


@dataclass
class FlatProfile:
    functions: List[FlatFunctionProfile]
    sample_count: int

    def find(self, location: str) -> Optional[FlatFunctionProfile]:
        for function in self.functions:
            if function.location == location:
                return function
        return None

    def inclusive_percent(self, function: FlatFunctionProfile) -> float:
        if not self.sample_count:
            return 0.0
        return function.inclusive.all / self.sample_count * 100

    def to_rows(self) -> List[FlatFunctionRow]:
        return [
            FlatFunctionRow(
                location=f.location,
                inclusive=TierCountsModel(**f.inclusive.to_dict()),
                exclusive=TierCountsModel(**f.exclusive.to_dict()),
                inclusive_total=f.inclusive.all,
                exclusive_total=f.exclusive.all,
                inclusive_percent=self.inclusive_percent(f),
            )
            for f in self.functions
        ]


def gather_flat_function_profiles(
    thread: Thread,
    start: Optional[float] = None,
    end: Optional[float] = None,
    include_platform_frames: bool = True,
) -> FlatProfile:
    """
    Build the flat profile of a window.

    Args:
        thread: Decoded thread
        start: Window start time (None = first sample)
        end: Window end time (None = after the last sample)
        include_platform_frames: If False only content frames are counted

    Returns:
        FlatProfile with functions sorted by inclusive total descending
        (ties in first-seen order)
    """
    by_location: Dict[str, FlatFunctionProfile] = {}
    functions: List[FlatFunctionProfile] = []
    sample_count = 0

    s, e = thread.sample_range(start, end)
    for sample in thread.samples[s:e]:
        if sample.stack is None:
            continue
        frames = sample.stack.frames()
        leaf = len(frames) - 1
        seen = set()
        counted = False
        for k, frame in enumerate(frames):
            if frame is None:
                continue
            if not include_platform_frames and not frame.is_content:
                continue
            counted = True
            location = frame.location.original
            profile = by_location.get(location)
            if profile is None:
                profile = by_location[location] = FlatFunctionProfile(location)
                functions.append(profile)
            if location not in seen:
                seen.add(location)
                profile.inclusive.add(frame.implementation)
                profile.samples.append(sample)
            if k == leaf:
                profile.exclusive.add(frame.implementation)
        if counted:
            sample_count += 1

    functions.sort(key=lambda f: -f.inclusive.all)
    return FlatProfile(functions, sample_count)
