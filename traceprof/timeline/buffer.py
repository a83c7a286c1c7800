"""
Timeline Buffer

Records enter / leave events in two parallel circular buffers so very long
recordings stay bounded in memory:

    marks: one 32-bit word per event
        bit 31      action (0 = ENTER, 1 = LEAVE)
        bits 16-30  data id (MAX_DATA_ID = no data)
        bits 0-15   kind id (MAX_KIND_ID = overflow kind)
    times: matching float timestamps, relative to the buffer's start time

Event names are interned as kinds. Kind and data tables are capacity
limited; past the limit events map to the sentinel ids instead of failing.
When the ring wraps, the oldest events are overwritten.
"""

import time as _time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from loguru import logger

from .circular_buffer import CircularBuffer
from .snapshot import TimelineBufferSnapshot


@dataclass
class TimelineItemKind:
    """Interned event name."""
    id: int
    name: str
    visible: bool = True


def _now_ms() -> float:
    return _time.perf_counter() * 1000.0


class TimelineBuffer:
    """Enter / leave recorder for one timeline."""

    ENTER = 0 << 31
    LEAVE = 1 << 31
    ACTION_MASK = 0x80000000

    MAX_KIND_ID = 0xffff
    MAX_DATA_ID = 0x7fff

    OVERFLOW_NAME = '[overflow]'

    def __init__(self, name: str = '', start_time: Optional[float] = None, size_bits: int = 20):
        self.name = name or ''
        self._start_time = _now_ms() if start_time is None else start_time
        self._size_bits = size_bits
        self._marks: Optional[CircularBuffer] = None
        self._times: Optional[CircularBuffer] = None
        self._depth = 0
        self._stack: List[int] = []
        self._data: List[Any] = []
        self._kinds: List[TimelineItemKind] = []
        # Owned per buffer; its visibility is not shared
        self.overflow_kind = TimelineItemKind(id=self.MAX_KIND_ID, name=self.OVERFLOW_NAME)
        self._kind_name_map: Dict[str, TimelineItemKind] = {}
        self._kind_overflow_reported = False
        self._data_overflow_reported = False

    def _initialize(self) -> None:
        self._depth = 0
        self._stack = []
        self._data = []
        self._kinds = []
        self._kind_name_map = {}
        self._marks = CircularBuffer('L', self._size_bits)
        self._times = CircularBuffer('d', self._size_bits)

    # ------------------------------------------------------------------
    # Kinds and data
    # ------------------------------------------------------------------

    @property
    def kinds(self) -> List[TimelineItemKind]:
        return list(self._kinds)

    @property
    def depth(self) -> int:
        """Number of currently open frames."""
        return self._depth

    @property
    def start_time(self) -> float:
        return self._start_time

    def get_kind(self, kind_id: int) -> Optional[TimelineItemKind]:
        if kind_id == self.MAX_KIND_ID:
            return self.overflow_kind
        if 0 <= kind_id < len(self._kinds):
            return self._kinds[kind_id]
        return None

    def get_kind_by_name(self, name: str) -> Optional[TimelineItemKind]:
        return self._kind_name_map.get(name)

    def _get_kind_id(self, name: str) -> int:
        kind = self._kind_name_map.get(name)
        if kind is not None:
            return kind.id
        kind_id = len(self._kinds)
        if kind_id >= self.MAX_KIND_ID:
            if not self._kind_overflow_reported:
                logger.warning(
                    f"Timeline {self.name!r}: more than {self.MAX_KIND_ID} kinds, "
                    f"further kinds map to the overflow kind"
                )
                self._kind_overflow_reported = True
            return self.MAX_KIND_ID
        kind = TimelineItemKind(id=kind_id, name=name)
        self._kinds.append(kind)
        self._kind_name_map[name] = kind
        return kind_id

    def _get_mark(self, action: int, kind_id: int, data: Any = None) -> int:
        data_id = self.MAX_DATA_ID
        if data is not None and kind_id != self.MAX_KIND_ID:
            data_id = len(self._data)
            if data_id < self.MAX_DATA_ID:
                self._data.append(data)
            else:
                if not self._data_overflow_reported:
                    logger.warning(
                        f"Timeline {self.name!r}: more than {self.MAX_DATA_ID} data payloads, "
                        f"further payloads are dropped"
                    )
                    self._data_overflow_reported = True
                data_id = self.MAX_DATA_ID
        return action | (data_id << 16) | kind_id

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def enter(self, name: str, data: Any = None, time: Optional[float] = None) -> None:
        time = (_now_ms() if time is None else time) - self._start_time
        if self._marks is None:
            self._initialize()
        self._depth += 1
        kind_id = self._get_kind_id(name)
        self._marks.write(self._get_mark(self.ENTER, kind_id, data))
        self._times.write(time)
        self._stack.append(kind_id)

    def leave(self, name: Optional[str] = None, data: Any = None, time: Optional[float] = None) -> None:
        """
        Close the innermost open frame.

        An explicit `name` overrides the popped kind; it is not checked
        against what was entered. Leaving with nothing open records the
        overflow kind and logs a warning.
        """
        time = (_now_ms() if time is None else time) - self._start_time
        if self._marks is None:
            self._initialize()
        if self._stack:
            kind_id = self._stack.pop()
        else:
            logger.warning(f"Timeline {self.name!r}: leave() with no open frame")
            kind_id = self.MAX_KIND_ID
        if name:
            kind_id = self._get_kind_id(name)
        self._marks.write(self._get_mark(self.LEAVE, kind_id, data))
        self._times.write(time)
        if self._depth > 0:
            self._depth -= 1

    def reset(self, start_time: Optional[float] = None) -> None:
        """Drop recorded events and data. Interned kinds are kept."""
        self._start_time = _now_ms() if start_time is None else start_time
        if self._marks is None:
            self._initialize()
            return
        self._depth = 0
        self._stack = []
        self._data = []
        self._marks.reset()
        self._times.reset()

    def __len__(self) -> int:
        return len(self._marks) if self._marks is not None else 0

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def create_snapshot(self, count: Optional[int] = None) -> Optional[TimelineBufferSnapshot]:
        """
        Rebuild the nested frame tree from the recorded events.

        The streams are replayed newest-first: a LEAVE opens a frame (its end
        time is known), the matching ENTER closes it and attaches it to the
        frame below it on the replay stack.

        Args:
            count: Stop once this many top-level frames have been decoded.
                   Replay is newest-first, so these are the most recent ones.

        Returns:
            Snapshot, or None if nothing was ever recorded. An ENTER with no
            open frame (truncated or wrapped buffer, or frames still open)
            stops the replay and the partial tree is returned.
        """
        if self._marks is None:
            return None
        times = self._times
        datastore = self._data
        snapshot = TimelineBufferSnapshot(self.name)
        stack = [snapshot.root]
        top_level_frame_count = 0

        for i, mark in self._marks.iter_reverse():
            data_id = (mark >> 16) & self.MAX_DATA_ID
            data = datastore[data_id] if data_id < len(datastore) else None
            kind = self.get_kind(mark & self.MAX_KIND_ID)
            if kind is not None and not kind.visible:
                continue
            action = mark & self.ACTION_MASK
            t = times.get(i)
            if action == self.LEAVE:
                if len(stack) == 1:
                    top_level_frame_count += 1
                    if count is not None and top_level_frame_count > count:
                        break
                stack.append(snapshot._open_frame(stack[-1], kind, data, t))
            else:
                if len(stack) == 1:
                    logger.debug(
                        f"Timeline {self.name!r}: ENTER without matching LEAVE, "
                        f"returning partial snapshot"
                    )
                    break
                node = stack.pop()
                snapshot._close_frame(node, stack[-1], data, t, len(stack))

        snapshot._finish()
        return snapshot
