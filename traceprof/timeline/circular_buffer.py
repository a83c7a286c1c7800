"""
Circular Buffer

Fixed-capacity ring of typed values backed by an `array.array`.
Writing into a full ring overwrites the oldest value.
"""

from array import array
from typing import Iterator, Tuple, Union


class CircularBuffer:
    """
    Ring of 2**size_bits slots. One slot always stays free to tell a full
    ring from an empty one, so at most 2**size_bits - 1 values are retained.
    """

    def __init__(self, typecode: str, size_bits: int = 12):
        self._size = 1 << size_bits
        self._mask = self._size - 1
        self.array = array(typecode, bytes(array(typecode).itemsize * self._size))
        self.index = 0
        self.start = 0

    @property
    def capacity(self) -> int:
        return self._size - 1

    def get(self, i: int) -> Union[int, float]:
        return self.array[i]

    def write(self, value: Union[int, float]) -> None:
        self.array[self.index] = value
        self.index = (self.index + 1) & self._mask
        if self.index == self.start:
            self.start = (self.start + 1) & self._mask

    def is_empty(self) -> bool:
        return self.index == self.start

    def is_full(self) -> bool:
        return ((self.index + 1) & self._mask) == self.start

    def iter_reverse(self) -> Iterator[Tuple[int, Union[int, float]]]:
        """Yield (slot, value) from the newest value back to the oldest."""
        i = self.index
        while i != self.start:
            i = (i - 1) & self._mask
            yield i, self.array[i]

    def reset(self) -> None:
        self.index = 0
        self.start = 0

    def __len__(self) -> int:
        return (self.index - self.start) & self._mask
