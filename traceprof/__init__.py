"""
traceprof: profiler capture decoding, timeline reconstruction and aggregation.
"""

from .errors import (
    ProfileError,
    SchemaMismatchError,
    UnknownImplementationError,
    StackOrderError,
    CaptureFormatError,
)
from .location import Location, LocationCache, parse_location
from .stack_tree import Stack
from .profile import File, Frame, Implementation, Marker, GlobalMarker, Sample, Thread
from .loader import decode_capture, load_capture

__version__ = '0.1.0'

__all__ = [
    # Errors
    'ProfileError',
    'SchemaMismatchError',
    'UnknownImplementationError',
    'StackOrderError',
    'CaptureFormatError',
    # Model
    'Location',
    'LocationCache',
    'parse_location',
    'Stack',
    'File',
    'Frame',
    'Implementation',
    'Marker',
    'GlobalMarker',
    'Sample',
    'Thread',
    # Loading
    'decode_capture',
    'load_capture',
]
