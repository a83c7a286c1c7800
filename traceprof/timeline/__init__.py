"""
Timeline recording and reconstruction.

TimelineBuffer records enter / leave events into bounded circular storage;
create_snapshot() rebuilds the nested call tree. The builders synthesize
those events from sampled stacks.
"""

from .buffer import TimelineBuffer, TimelineItemKind
from .builders import from_chrome_profile, from_firefox_profile, from_thread, record_stack_transitions
from .circular_buffer import CircularBuffer
from .snapshot import TimelineBufferSnapshot, TimelineFrame

__all__ = [
    'CircularBuffer',
    'TimelineBuffer',
    'TimelineBufferSnapshot',
    'TimelineFrame',
    'TimelineItemKind',
    'from_chrome_profile',
    'from_firefox_profile',
    'from_thread',
    'record_stack_transitions',
]
