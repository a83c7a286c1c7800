"""
Timeline Snapshot

Nested call tree rebuilt from a TimelineBuffer's enter/leave stream.

Frames live in an arena owned by the snapshot and refer to their parent and
children by arena index. The snapshot's root frame (index 0) is synthetic:
depth 0, no kind, no parent.

Invariants once built:
    - children are time-ascending
    - child.depth == parent.depth + 1
    - frame.max_depth == max(frame.depth, child.max_depth for every child)
"""

import math
from typing import Any, Iterator, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .buffer import TimelineItemKind


class TimelineFrame:
    """One reconstructed call: [start_time, end_time] at a given depth."""

    __slots__ = (
        'index', 'parent_index', 'child_indices', 'kind',
        'start_data', 'end_data', 'start_time', 'end_time',
        'depth', 'max_depth', '_arena',
    )

    def __init__(
        self,
        arena: List['TimelineFrame'],
        parent_index: Optional[int],
        kind: Optional['TimelineItemKind'],
        end_data: Any = None,
        start_time: float = math.nan,
        end_time: float = math.nan,
    ):
        self._arena = arena
        self.index = len(arena)
        self.parent_index = parent_index
        self.child_indices: List[int] = []
        self.kind = kind
        self.start_data = None
        self.end_data = end_data
        self.start_time = start_time
        self.end_time = end_time
        self.depth = 0
        self.max_depth = 0
        arena.append(self)

    @property
    def parent(self) -> Optional['TimelineFrame']:
        if self.parent_index is None:
            return None
        return self._arena[self.parent_index]

    @property
    def children(self) -> List['TimelineFrame']:
        return [self._arena[i] for i in self.child_indices]

    @property
    def name(self) -> Optional[str]:
        return self.kind.name if self.kind is not None else None

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    def __repr__(self) -> str:
        return (
            f"TimelineFrame(name={self.name!r}, start={self.start_time}, end={self.end_time}, "
            f"depth={self.depth}, max_depth={self.max_depth})"
        )


def _first_ending_at_or_after(arena: List[TimelineFrame], indices: List[int], time: float) -> int:
    # Siblings never overlap, so end times ascend with start times
    lo, hi = 0, len(indices)
    while lo < hi:
        mid = (lo + hi) // 2
        if arena[indices[mid]].end_time < time:
            lo = mid + 1
        else:
            hi = mid
    return lo


class TimelineBufferSnapshot:
    """
    Immutable call tree built in one pass by TimelineBuffer.create_snapshot().

    Not updated incrementally: create a new snapshot to see new events.
    """

    def __init__(self, name: str = ''):
        self.name = name
        self._frames: List[TimelineFrame] = []
        self.root = TimelineFrame(self._frames, None, None)
        self.start_time = math.nan
        self.end_time = math.nan

    # ------------------------------------------------------------------
    # Construction (used by TimelineBuffer.create_snapshot)
    # ------------------------------------------------------------------

    def _open_frame(self, parent: TimelineFrame, kind, end_data, end_time: float) -> TimelineFrame:
        return TimelineFrame(self._frames, parent.index, kind, end_data, end_time=end_time)

    def _close_frame(self, frame: TimelineFrame, parent: TimelineFrame, start_data, start_time: float, depth: int) -> None:
        """Attach a completed frame under `parent` and propagate max_depth upward."""
        # Replay runs newest-first; child lists are reversed once in _finish()
        parent.child_indices.append(frame.index)
        frame.depth = depth
        frame.start_data = start_data
        frame.start_time = start_time
        node = frame
        while node is not None and node.max_depth < depth:
            node.max_depth = depth
            node = node.parent

    def _finish(self) -> None:
        for frame in self._frames:
            frame.child_indices.reverse()
        if self.root.child_indices:
            self.start_time = self._frames[self.root.child_indices[0]].start_time
            self.end_time = self._frames[self.root.child_indices[-1]].end_time

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def children(self) -> List[TimelineFrame]:
        """Top-level (depth 1) frames."""
        return self.root.children

    @property
    def max_depth(self) -> int:
        return self.root.max_depth

    @property
    def depth(self) -> int:
        return 0

    def get(self, index: int) -> TimelineFrame:
        return self._frames[index]

    def parent_of(self, frame: TimelineFrame) -> Optional[TimelineFrame]:
        return frame.parent

    def children_of(self, frame: TimelineFrame) -> List[TimelineFrame]:
        return frame.children

    def walk(self) -> Iterator[TimelineFrame]:
        """Pre-order traversal of every attached frame, root excluded."""
        stack = list(reversed(self.root.child_indices))
        while stack:
            frame = self._frames[stack.pop()]
            yield frame
            stack.extend(reversed(frame.child_indices))

    @property
    def frame_count(self) -> int:
        return sum(1 for _ in self.walk())

    def query(self, start: float, end: float, max_depth: Optional[int] = None) -> List[TimelineFrame]:
        """
        Frames overlapping [start, end], pre-order.

        Each child list is binary searched for the first frame ending at or
        after `start`, then scanned until frames start after `end`.
        """
        result: List[TimelineFrame] = []
        self._query(self.root, start, end, max_depth, result)
        return result

    def _query(self, parent: TimelineFrame, start: float, end: float, max_depth: Optional[int], result: List[TimelineFrame]) -> None:
        indices = parent.child_indices
        for i in range(_first_ending_at_or_after(self._frames, indices, start), len(indices)):
            child = self._frames[indices[i]]
            if child.start_time > end:
                break
            result.append(child)
            if max_depth is None or child.depth < max_depth:
                self._query(child, start, end, max_depth, result)

    def __repr__(self) -> str:
        return (
            f"TimelineBufferSnapshot(name={self.name!r}, frames={self.frame_count}, "
            f"max_depth={self.max_depth})"
        )
