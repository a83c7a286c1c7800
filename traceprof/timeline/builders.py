"""
Timeline Builders

Synthesize enter / leave events from a flat per-sample stack sequence.

For each sample the longest common prefix with the previous sample's stack is
kept open; frames past it are left innermost-first, then the new frames are
entered outermost-first. After the last sample every open frame is left.
The result is a well-formed bracket sequence at O(depth) per sample.
"""

from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Sequence, Tuple

from ..errors import CaptureFormatError
from ..location import LocationCache
from ..profile import File, Frame, Thread
from .buffer import TimelineBuffer


def record_stack_transitions(
    buffer: TimelineBuffer,
    timed_stacks: Iterable[Tuple[float, Sequence[Hashable]]],
    name_of: Callable[[Any], str],
) -> TimelineBuffer:
    """
    Record the enter / leave events that turn each stack into the next.

    Args:
        buffer: Buffer to record into
        timed_stacks: (time, outermost-first stack) pairs in time order;
                      stack entries are compared with ==
        name_of: Event name for a stack entry

    Returns:
        The same buffer
    """
    current: Sequence[Hashable] = ()
    time = None
    for time, stack in timed_stacks:
        j = 0
        shared = min(len(stack), len(current))
        while j < shared and stack[j] == current[j]:
            j += 1
        for k in range(len(current) - 1, j - 1, -1):
            buffer.leave(name_of(current[k]), None, time)
        for k in range(j, len(stack)):
            buffer.enter(name_of(stack[k]), None, time)
        current = stack
    for k in range(len(current) - 1, -1, -1):
        buffer.leave(name_of(current[k]), None, time)
    return buffer


def _frame_name(frame: Optional[Frame]) -> str:
    return frame.location.original if frame is not None else ''


def from_thread(thread: Thread, name: Optional[str] = None, size_bits: int = 20) -> TimelineBuffer:
    """
    Build a timeline from a decoded thread.

    Frames are compared by identity at each depth. Times are recorded
    relative to the first sample.
    """
    samples = thread.samples
    start_time = samples[0].time if samples else 0.0
    buffer = TimelineBuffer(name if name is not None else (thread.name or ''), start_time, size_bits)
    timed_stacks = (
        (sample.time, sample.stack.frames() if sample.stack is not None else [])
        for sample in samples
    )
    return record_stack_transitions(buffer, timed_stacks, _frame_name)


def from_firefox_profile(
    capture: Dict[str, Any],
    name: Optional[str] = None,
    thread_index: int = 0,
    location_cache: Optional[LocationCache] = None,
    size_bits: int = 20,
) -> TimelineBuffer:
    """
    Build a timeline for one thread of a raw capture (columnar or legacy).

    Raises:
        ProfileError: If the capture is rejected
    """
    file = File(capture, location_cache)
    if not 0 <= thread_index < len(file.threads):
        raise CaptureFormatError(f"Capture has no thread {thread_index}")
    return from_thread(file.threads[thread_index], name, size_bits)


def _chrome_node_name(node: Dict[str, Any]) -> str:
    name = node.get('functionName')
    if name is None:
        name = (node.get('callFrame') or {}).get('functionName')
    return name or '(anonymous)'


def _chrome_parents(profile: Dict[str, Any]) -> Tuple[Dict[Any, Dict[str, Any]], Dict[Any, Any]]:
    """Node lookup and child -> parent id map for both cpuprofile layouts."""
    nodes: Dict[Any, Dict[str, Any]] = {}
    parents: Dict[Any, Any] = {}
    head = profile.get('head')
    if head is not None:
        pending = [head]
        while pending:
            node = pending.pop()
            nodes[node['id']] = node
            for child in node.get('children') or []:
                parents[child['id']] = node['id']
                pending.append(child)
        return nodes, parents

    if 'nodes' not in profile:
        raise CaptureFormatError("cpuprofile has neither 'head' nor 'nodes'")
    for node in profile['nodes']:
        nodes[node['id']] = node
    for node in profile['nodes']:
        for child_id in node.get('children') or []:
            parents[child_id] = node['id']
    return nodes, parents


def _chrome_timestamps(profile: Dict[str, Any]) -> List[float]:
    timestamps = profile.get('timestamps')
    if timestamps is not None:
        return list(timestamps)
    deltas = profile.get('timeDeltas') or []
    t = profile.get('startTime', 0)
    timestamps = []
    for delta in deltas:
        t += delta
        timestamps.append(t)
    return timestamps


def from_chrome_profile(profile: Dict[str, Any], name: Optional[str] = None, size_bits: int = 20) -> TimelineBuffer:
    """
    Build a timeline from a Chrome `.cpuprofile` document.

    Accepts the nested `head` layout and the flat `nodes` layout. Timestamps
    are microseconds and are recorded as milliseconds. Stack entries are
    compared by node id.
    """
    nodes, parents = _chrome_parents(profile)
    samples = profile.get('samples') or []
    timestamps = _chrome_timestamps(profile)
    if len(timestamps) < len(samples):
        raise CaptureFormatError(
            f"cpuprofile has {len(samples)} samples but {len(timestamps)} timestamps"
        )
    for i, node_id in enumerate(samples):
        if node_id not in nodes:
            raise CaptureFormatError(f"cpuprofile sample {i} references unknown node {node_id!r}")

    stacks: Dict[Any, List[Any]] = {}

    def stack_for(node_id: Any) -> List[Any]:
        stack = stacks.get(node_id)
        if stack is None:
            stack = []
            current = node_id
            while current is not None:
                stack.append(current)
                current = parents.get(current)
            stack.reverse()
            stacks[node_id] = stack
        return stack

    start_time = timestamps[0] / 1000 if timestamps else 0.0
    buffer = TimelineBuffer(name or '', start_time, size_bits)
    timed_stacks = (
        (timestamps[i] / 1000, stack_for(node_id))
        for i, node_id in enumerate(samples)
    )
    return record_stack_transitions(buffer, timed_stacks, lambda node_id: _chrome_node_name(nodes[node_id]))
