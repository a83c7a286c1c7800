"""
Legacy Capture Shape

Older captures store every sample with its complete frame list instead of
shared frame/stack tables:

    {"samples": [{"frames": [{"location": "...", "implementation": "ion",
                              "line": 12, "optsIndex": 3}, ...],
                  "time": 10.5, "responsiveness": 0}, ...],
     "optimizations": [...]}

Decoding interns frames by their fields and stacks by (prefix, frame), so a
legacy thread ends up with the same shared-prefix Stack tree a columnar
thread has and every downstream query works on either.
"""

from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING

from loguru import logger

from .capture_types import LegacyFrame, LegacyThreadData, OptimizationSite
from .errors import CaptureFormatError
from .location import LocationCache
from .profile import Frame, Sample, Thread, resolve_implementation
from .stack_tree import Stack

if TYPE_CHECKING:
    from .profile import File


def is_legacy_thread(data: Dict[str, Any]) -> bool:
    """Legacy threads carry samples as a plain list rather than a table."""
    return isinstance(data.get('samples'), list)


def _frame_key(raw: LegacyFrame) -> Tuple:
    category = raw.category
    if category is not None and not isinstance(category, (int, float, str)):
        category = repr(category)
    return (raw.location, raw.implementation, raw.line, category, raw.optsIndex)


def _tally_optimization(raw: LegacyFrame, optimizations: List[OptimizationSite]) -> None:
    index = raw.optsIndex
    if index is None:
        return
    if index < 0 or index >= len(optimizations):
        raise CaptureFormatError(f"optsIndex {index} out of range ({len(optimizations)} sites)")
    site = optimizations[index]
    site.location = raw.location
    site.samples += 1


def decode_legacy_thread(
    data: Dict[str, Any],
    location_cache: Optional[LocationCache] = None,
    file: Optional['File'] = None,
) -> Thread:
    """
    Decode one legacy-shaped thread into a Thread.

    Every frame carrying an optsIndex tallies one sample on that optimization
    site and stamps its location onto it. Sites are copied first; the input
    document is left untouched.

    Raises:
        UnknownImplementationError, CaptureFormatError
    """
    if location_cache is None:
        location_cache = LocationCache()
    thread_data = LegacyThreadData.model_validate(data)
    optimizations = [site.model_copy(deep=True) for site in thread_data.optimizations]

    frames: List[Frame] = []
    frames_by_key: Dict[Tuple, Frame] = {}
    stacks: List[Stack] = []
    stacks_by_key: Dict[Tuple[Optional[Stack], Frame], Stack] = {}
    samples: List[Sample] = []

    for raw_sample in thread_data.samples:
        if raw_sample is None:
            continue
        stack = None
        for raw_frame in raw_sample.frames:
            key = _frame_key(raw_frame)
            frame = frames_by_key.get(key)
            if frame is None:
                line = raw_frame.line or 0
                frame = Frame(
                    location=location_cache.get(raw_frame.location, line, -1),
                    implementation=resolve_implementation(raw_frame.implementation),
                    line=line,
                    category=raw_frame.category,
                    optimizations=raw_frame.optsIndex,
                )
                frames_by_key[key] = frame
                frames.append(frame)

            child = stacks_by_key.get((stack, frame))
            if child is None:
                child = Stack(stack, frame)
                stacks_by_key[(stack, frame)] = child
                stacks.append(child)
            stack = child

            _tally_optimization(raw_frame, optimizations)

        samples.append(Sample(
            stack=stack,
            time=raw_sample.time,
            responsiveness=raw_sample.responsiveness,
            rss=raw_sample.rss,
            uss=raw_sample.uss,
            frame_number=raw_sample.frameNumber,
            power=raw_sample.power,
        ))

    logger.debug(
        f"Decoded legacy thread {thread_data.name!r}: {len(frames)} frames, "
        f"{len(stacks)} stacks, {len(samples)} samples"
    )
    return Thread(
        frames=frames,
        stacks=stacks,
        samples=samples,
        optimizations=optimizations,
        name=thread_data.name,
        tid=thread_data.tid,
        file=file,
    )
