"""
Stack Tree

Parent-linked (cactus) stack nodes. Many stacks share the same prefix chain,
so a decoded stack table forms a tree rooted at the outermost frames.

Nodes are immutable once decoded. Queries never mutate the nodes, so they are
safe to call repeatedly and in any interleaving.
"""

from typing import Iterator, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .profile import Frame


class Stack:
    """One stack node: a frame plus a reference to the caller's stack node."""

    __slots__ = ('prefix', 'frame')

    def __init__(self, prefix: Optional['Stack'], frame: Optional['Frame']):
        self.prefix = prefix
        self.frame = frame

    def __iter__(self) -> Iterator['Stack']:
        """Iterate from this node up to the root (innermost first)."""
        s = self
        while s is not None:
            yield s
            s = s.prefix

    def get_height(self) -> int:
        """Number of ancestors above this node (a root has height 0)."""
        h = 0
        s = self.prefix
        while s is not None:
            h += 1
            s = s.prefix
        return h

    def get_prefix(self, n: int) -> Optional['Stack']:
        """Walk up `n` ancestors. Returns None when walking past the root."""
        s = self
        while s is not None and n > 0:
            s = s.prefix
            n -= 1
        return s

    def get_common_prefix(self, other: Optional['Stack']) -> Optional['Stack']:
        """
        Deepest node shared by this stack's and `other`'s ancestor chains.

        Both chains include the nodes themselves. Returns None when the
        stacks have no common root.
        """
        ancestors = set(self)
        s = other
        while s is not None:
            if s in ancestors:
                return s
            s = s.prefix
        return None

    def frames(self) -> List['Frame']:
        """Frames from the outermost caller down to this node's frame."""
        frames = [s.frame for s in self]
        frames.reverse()
        return frames

    def format_trace(self) -> List[str]:
        """One line per frame location, innermost first."""
        return [str(s.frame.location) if s.frame is not None else '<unknown>' for s in self]

    def __repr__(self) -> str:
        frame = self.frame.location.original if self.frame is not None else None
        return f"Stack(frame={frame!r}, height={self.get_height()})"
