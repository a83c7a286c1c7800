"""
Profile Model

Decodes a columnar profiler capture into object graphs:

1. Validate each table's schema against the fixed column order
2. Decode the frame table (tier tag + parsed location per row)
3. Decode the stack table in row order (prefix rows precede their children)
4. Decode samples and markers against the decoded arrays

A decode either succeeds completely or raises a ProfileError; callers never
see a half-built Thread or File.
"""

import itertools
from enum import IntEnum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from loguru import logger
from pydantic import ValidationError

from .capture_types import Capture, ColumnarTable, GlobalMarkerData, OptimizationSite, ThreadData
from .errors import CaptureFormatError, SchemaMismatchError, StackOrderError, UnknownImplementationError
from .location import Location, LocationCache
from .stack_tree import Stack


# ============================================================================
# Column Schemas
# ============================================================================

FRAME_SCHEMA = ('location', 'implementation', 'optimizations', 'line', 'category')
STACK_SCHEMA = ('prefix', 'frame')
SAMPLE_SCHEMA = ('stack', 'time', 'responsiveness', 'rss', 'uss', 'frameNumber', 'power')
MARKER_SCHEMA = ('name', 'time', 'data')

FRAME_LOCATION, FRAME_IMPLEMENTATION, FRAME_OPTIMIZATIONS, FRAME_LINE, FRAME_CATEGORY = range(5)
STACK_PREFIX, STACK_FRAME = range(2)
SAMPLE_STACK, SAMPLE_TIME, SAMPLE_RESPONSIVENESS, SAMPLE_RSS, SAMPLE_USS, SAMPLE_FRAME_NUMBER, SAMPLE_POWER = range(7)
MARKER_NAME, MARKER_TIME, MARKER_DATA = range(3)


def check_schema(table_name: str, table: ColumnarTable, expected: Sequence[str]) -> None:
    """
    Assert that every expected column sits at its expected index.

    Raises:
        SchemaMismatchError: On the first column out of place
    """
    for index, column in enumerate(expected):
        actual = table.columns.get(column)
        if isinstance(actual, bool) or actual != index:
            raise SchemaMismatchError(table_name, column, index, actual)


def _cell(row: Sequence[Any], index: int) -> Any:
    # Trailing null columns are often trimmed from rows
    return row[index] if index < len(row) else None


def get_string(string_table: Sequence[str], index: Any) -> Optional[str]:
    """Resolve a string-table index. Non-integer indices resolve to None."""
    if not isinstance(index, int) or isinstance(index, bool):
        return None
    if index < 0 or index >= len(string_table):
        raise CaptureFormatError(
            f"String index {index} out of range (table has {len(string_table)} entries)"
        )
    return string_table[index]


# ============================================================================
# Records
# ============================================================================

class Implementation(IntEnum):
    """Compilation tier active for a frame when it was sampled."""
    INTERPRETER = 0
    BASELINE = 1
    ION = 2
    NATIVE = 3


IMPLEMENTATION_TAGS = {
    'interpreter': Implementation.INTERPRETER,
    'baseline': Implementation.BASELINE,
    'ion': Implementation.ION,
}


def resolve_implementation(tag: Optional[str]) -> Implementation:
    """
    Map a capture tier tag to an Implementation.

    Missing tags mean a native (platform) frame.

    Raises:
        UnknownImplementationError: For any tag outside interpreter/baseline/ion
    """
    if not tag:
        return Implementation.NATIVE
    try:
        return IMPLEMENTATION_TAGS[tag]
    except KeyError:
        raise UnknownImplementationError(tag) from None


_frame_ids = itertools.count()


class Frame:
    """Static call site within a thread. Ids are unique within the process."""

    __slots__ = ('id', 'location', 'implementation', 'optimizations', 'line', 'category')

    def __init__(
        self,
        location: Location,
        implementation: Implementation = Implementation.NATIVE,
        line: int = 0,
        category: Any = None,
        optimizations: Optional[int] = None,
    ):
        self.id = next(_frame_ids)
        self.location = location
        self.implementation = implementation
        self.line = line
        self.category = category
        self.optimizations = optimizations

    @property
    def is_content(self) -> bool:
        """Web content frame: content-scheme URL and no platform category."""
        return not self.category and self.location.is_content

    def __repr__(self) -> str:
        return (
            f"Frame(id={self.id}, location={self.location.original!r}, "
            f"implementation={self.implementation.name}, line={self.line})"
        )


class Sample:
    """One observation. `frame` is the leaf frame of `stack`."""

    __slots__ = ('stack', 'time', 'responsiveness', 'rss', 'uss', 'frame_number', 'power', 'frame')

    def __init__(
        self,
        stack: Optional[Stack],
        time: float,
        responsiveness: Optional[float] = None,
        rss: Optional[float] = None,
        uss: Optional[float] = None,
        frame_number: Optional[int] = None,
        power: Optional[float] = None,
    ):
        self.stack = stack
        self.time = time
        self.responsiveness = responsiveness
        self.rss = rss
        self.uss = uss
        self.frame_number = frame_number
        self.power = power
        self.frame = stack.frame if stack is not None else None

    def __repr__(self) -> str:
        return f"Sample(time={self.time}, frame={self.frame!r})"


class Marker:
    """Named instant within a thread."""

    __slots__ = ('name', 'time', 'data')

    def __init__(self, name: Optional[str], time: float, data: Any = None):
        self.name = name
        self.time = time
        self.data = data

    def __repr__(self) -> str:
        return f"Marker(name={self.name!r}, time={self.time})"


class GlobalMarker:
    """Capture-level marker spanning [start, end]."""

    __slots__ = ('name', 'start', 'end', 'stack', 'end_stack')

    def __init__(self, data: GlobalMarkerData):
        self.name = data.name
        self.start = data.start
        self.end = data.end
        self.stack = data.stack
        self.end_stack = data.endStack

    def __repr__(self) -> str:
        return f"GlobalMarker(name={self.name!r}, start={self.start}, end={self.end})"


# ============================================================================
# Table Decoding
# ============================================================================

def decode_frames(
    table: ColumnarTable,
    string_table: Sequence[str],
    location_cache: LocationCache,
) -> List[Optional[Frame]]:
    """Decode frame table rows. Null rows stay None."""
    check_schema('frameTable', table, FRAME_SCHEMA)
    frames: List[Optional[Frame]] = []
    for row in table.data:
        if not row:
            frames.append(None)
            continue
        implementation = resolve_implementation(
            get_string(string_table, _cell(row, FRAME_IMPLEMENTATION))
        )
        line = _cell(row, FRAME_LINE)
        line = int(line) if isinstance(line, (int, float)) and not isinstance(line, bool) else 0
        raw_location = get_string(string_table, _cell(row, FRAME_LOCATION)) or ''
        frames.append(Frame(
            location=location_cache.get(raw_location, line, -1),
            implementation=implementation,
            line=line,
            category=_cell(row, FRAME_CATEGORY),
            optimizations=_cell(row, FRAME_OPTIMIZATIONS),
        ))
    return frames


def _lookup(items: Sequence[Any], index: Any, what: str) -> Any:
    if not isinstance(index, int) or isinstance(index, bool) or index < 0 or index >= len(items):
        raise CaptureFormatError(f"Invalid {what} index: {index!r}")
    return items[index]


def decode_stacks(table: ColumnarTable, frames: Sequence[Optional[Frame]]) -> List[Stack]:
    """
    Decode stack table rows in table order.

    Raises:
        StackOrderError: If a row's prefix is not an earlier row
    """
    check_schema('stackTable', table, STACK_SCHEMA)
    stacks: List[Stack] = []
    for i, row in enumerate(table.data):
        if not row:
            raise CaptureFormatError(f"Empty stack table row {i}")
        prefix_id = _cell(row, STACK_PREFIX)
        prefix = None
        if prefix_id is not None:
            if not isinstance(prefix_id, int) or isinstance(prefix_id, bool):
                raise CaptureFormatError(f"Invalid stack prefix {prefix_id!r} at row {i}")
            if prefix_id < 0 or prefix_id >= i:
                raise StackOrderError(
                    f"Stack row {i} references prefix {prefix_id} which is not decoded yet"
                )
            prefix = stacks[prefix_id]
        frame = _lookup(frames, _cell(row, STACK_FRAME), 'frame')
        stacks.append(Stack(prefix, frame))
    return stacks


def decode_samples(table: ColumnarTable, stacks: Sequence[Stack]) -> List[Sample]:
    """Decode sample rows. Null rows are dropped; a null stack is kept as None."""
    check_schema('samples', table, SAMPLE_SCHEMA)
    samples: List[Sample] = []
    for row in table.data:
        if not row:
            continue
        stack_id = _cell(row, SAMPLE_STACK)
        stack = _lookup(stacks, stack_id, 'stack') if stack_id is not None else None
        time = _cell(row, SAMPLE_TIME)
        if not isinstance(time, (int, float)) or isinstance(time, bool):
            raise CaptureFormatError(f"Sample without a numeric time: {row!r}")
        samples.append(Sample(
            stack=stack,
            time=time,
            responsiveness=_cell(row, SAMPLE_RESPONSIVENESS),
            rss=_cell(row, SAMPLE_RSS),
            uss=_cell(row, SAMPLE_USS),
            frame_number=_cell(row, SAMPLE_FRAME_NUMBER),
            power=_cell(row, SAMPLE_POWER),
        ))
    return samples


def decode_markers(table: Optional[ColumnarTable], string_table: Sequence[str]) -> List[Marker]:
    """Decode a thread marker table. Missing or empty tables give no markers."""
    if table is None or not table.data:
        return []
    check_schema('markers', table, MARKER_SCHEMA)
    markers = []
    for row in table.data:
        if not row:
            continue
        markers.append(Marker(
            name=get_string(string_table, _cell(row, MARKER_NAME)),
            time=_cell(row, MARKER_TIME),
            data=_cell(row, MARKER_DATA),
        ))
    return markers


# ============================================================================
# Thread / File
# ============================================================================

class Thread:
    """
    Decoded frames, stacks, samples and markers of one thread.

    Samples keep capture order, which is time-ascending by construction.
    """

    def __init__(
        self,
        frames: List[Optional[Frame]],
        stacks: List[Stack],
        samples: List[Sample],
        markers: Optional[List[Marker]] = None,
        optimizations: Optional[List[OptimizationSite]] = None,
        string_table: Optional[List[str]] = None,
        name: Optional[str] = None,
        tid: Any = None,
        file: Optional['File'] = None,
    ):
        self.frames = frames
        self.stacks = stacks
        self.samples = samples
        self.markers = markers or []
        self.optimizations = optimizations or []
        self.string_table = string_table or []
        self.name = name
        self.tid = tid
        self._file = file

    @property
    def file(self) -> Optional['File']:
        return self._file

    @property
    def start_time(self) -> Optional[float]:
        """Earliest sample or marker time; None for an empty thread."""
        times = [m.time for m in self.markers if m.time is not None]
        if self.samples:
            times.append(self.samples[0].time)
        return min(times) if times else None

    @property
    def end_time(self) -> Optional[float]:
        """Latest sample or marker time; None for an empty thread."""
        times = [m.time for m in self.markers if m.time is not None]
        if self.samples:
            times.append(self.samples[-1].time)
        return max(times) if times else None

    def get_string(self, index: Any) -> Optional[str]:
        return get_string(self.string_table, index)

    def sample_index_by_time(self, time: float) -> int:
        """
        Index of the sample closest to `time`.

        Scans forward from the first sample and stops as soon as the distance
        stops shrinking. Correct for monotonic sample times; O(n) worst case.
        With non-unimodal distance profiles (clock skew) it can stop early at
        a local minimum.
        """
        samples = self.samples
        if not samples:
            return 0
        c = 0
        d = abs(time - samples[0].time)
        for i in range(1, len(samples)):
            x = abs(time - samples[i].time)
            if x < d:
                c = i
                d = x
            else:
                break
        return c

    def sample_range(self, start: Optional[float] = None, end: Optional[float] = None) -> Tuple[int, int]:
        """
        Half-open [s, e) sample index range for a time window.

        Both ends resolve through sample_index_by_time, so the sample nearest
        `end` is excluded. None leaves that end open: (None, None) covers
        every sample.
        """
        s = 0 if start is None else self.sample_index_by_time(start)
        e = len(self.samples) if end is None else self.sample_index_by_time(end)
        return s, e

    def samples_in_range(self, start: Optional[float] = None, end: Optional[float] = None) -> List[Sample]:
        s, e = self.sample_range(start, end)
        return self.samples[s:e]

    def __repr__(self) -> str:
        return (
            f"Thread(name={self.name!r}, frames={len(self.frames)}, "
            f"stacks={len(self.stacks)}, samples={len(self.samples)})"
        )


def decode_thread(
    data: ThreadData,
    location_cache: Optional[LocationCache] = None,
    file: Optional['File'] = None,
) -> Thread:
    """
    Decode one columnar thread.

    Raises:
        SchemaMismatchError, UnknownImplementationError, StackOrderError,
        CaptureFormatError
    """
    if location_cache is None:
        location_cache = LocationCache()
    strings = data.stringTable
    frames = decode_frames(data.frameTable, strings, location_cache)
    stacks = decode_stacks(data.stackTable, frames)
    samples = decode_samples(data.samples, stacks)
    markers = decode_markers(data.markers, strings)
    logger.debug(
        f"Decoded thread {data.name!r}: {len(frames)} frames, {len(stacks)} stacks, "
        f"{len(samples)} samples, {len(markers)} markers"
    )
    return Thread(
        frames=frames,
        stacks=stacks,
        samples=samples,
        markers=markers,
        optimizations=data.optimizations,
        string_table=strings,
        name=data.name,
        tid=data.tid,
        file=file,
    )


class File:
    """
    One loaded capture: its threads plus capture-level markers and metadata.

    Accepts both the columnar and the legacy thread shape.

    Raises:
        ProfileError: The capture is rejected wholesale on any fatal problem
    """

    def __init__(self, data: Dict[str, Any], location_cache: Optional[LocationCache] = None):
        self.location_cache = location_cache if location_cache is not None else LocationCache()
        try:
            capture = Capture.model_validate(data)
        except ValidationError as e:
            raise CaptureFormatError(f"Invalid capture: {e}") from e
        self.label = capture.label
        self.duration = capture.duration
        self.file_type = capture.fileType
        self.version = capture.version
        self.meta = capture.profile.meta
        self.libs = capture.profile.libs
        self.markers = [GlobalMarker(m) for m in capture.markers]
        self.threads = [self._load_thread(i, t) for i, t in enumerate(capture.profile.threads)]

    def _load_thread(self, index: int, data: Dict[str, Any]) -> Thread:
        from .legacy_format import decode_legacy_thread, is_legacy_thread

        try:
            if 'frameTable' in data:
                return decode_thread(ThreadData.model_validate(data), self.location_cache, self)
            if is_legacy_thread(data):
                return decode_legacy_thread(data, self.location_cache, self)
        except ValidationError as e:
            raise CaptureFormatError(f"Invalid thread {index}: {e}") from e
        raise CaptureFormatError(f"Thread {index} is neither columnar nor legacy shaped")

    @property
    def start_time(self) -> Optional[float]:
        times = [t.start_time for t in self.threads if t.start_time is not None]
        times.extend(m.start for m in self.markers if m.start is not None)
        return min(times) if times else None

    @property
    def end_time(self) -> Optional[float]:
        times = [t.end_time for t in self.threads if t.end_time is not None]
        times.extend(m.end for m in self.markers if m.end is not None)
        return max(times) if times else None

    def __repr__(self) -> str:
        return f"File(label={self.label!r}, threads={len(self.threads)})"
