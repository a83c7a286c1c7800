"""
Tier counters shared by the aggregate views.
"""

from typing import Any, List

from ..profile import Implementation, Sample


TIER_COUNT = len(Implementation)


class TierCounts:
    """Fixed 4-wide sample counts indexed by Implementation."""

    __slots__ = ('counts',)

    def __init__(self):
        self.counts: List[int] = [0] * TIER_COUNT

    def add(self, implementation: Implementation, n: int = 1) -> None:
        self.counts[implementation] += n

    def __getitem__(self, implementation: Implementation) -> int:
        return self.counts[implementation]

    def get_all_counts(self) -> int:
        return sum(self.counts)

    def share(self, implementation: Implementation) -> float:
        """Fraction of all counted samples in one tier; 0.0 when empty."""
        total = self.get_all_counts()
        return self.counts[implementation] / total if total else 0.0


class SampleCounter(TierCounts):
    """Per-function tier counts over a sample window."""

    __slots__ = ('id', 'original')

    def __init__(self, id: str, original: str):
        super().__init__()
        self.id = id
        self.original = original

    def count(self, sample: Sample) -> None:
        self.counts[sample.frame.implementation] += 1

    def __repr__(self) -> str:
        return f"SampleCounter(id={self.id!r}, counts={self.counts})"


class SampleGroup:
    """Samples sharing a grouping key, kept in window order."""

    __slots__ = ('id', 'original', 'samples')

    def __init__(self, id: Any, original: str):
        self.id = id
        self.original = original
        self.samples: List[Sample] = []

    def count(self, sample: Sample) -> None:
        self.samples.append(sample)

    def tier_counts(self) -> TierCounts:
        """Tier counts of the leaf frames of this group's samples."""
        counts = TierCounts()
        for sample in self.samples:
            counts.add(sample.frame.implementation)
        return counts

    def __len__(self) -> int:
        return len(self.samples)

    def __repr__(self) -> str:
        return f"SampleGroup(id={self.id!r}, samples={len(self.samples)})"


class FunctionTierCounters:
    """Named tier counters used by the flat profile and time buckets."""

    __slots__ = ('interpreter', 'baseline', 'ion', 'native')

    _FIELDS = {
        Implementation.INTERPRETER: 'interpreter',
        Implementation.BASELINE: 'baseline',
        Implementation.ION: 'ion',
        Implementation.NATIVE: 'native',
    }

    def __init__(self, interpreter: int = 0, baseline: int = 0, ion: int = 0, native: int = 0):
        self.interpreter = interpreter
        self.baseline = baseline
        self.ion = ion
        self.native = native

    def add(self, implementation: Implementation, n: int = 1) -> None:
        name = self._FIELDS[implementation]
        setattr(self, name, getattr(self, name) + n)

    @property
    def all(self) -> int:
        return self.interpreter + self.baseline + self.ion + self.native

    @property
    def compiled(self) -> int:
        return self.baseline + self.ion

    def to_dict(self) -> dict:
        return {
            'interpreter': self.interpreter,
            'baseline': self.baseline,
            'ion': self.ion,
            'native': self.native,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FunctionTierCounters):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return (
            f"FunctionTierCounters(interpreter={self.interpreter}, baseline={self.baseline}, "
            f"ion={self.ion}, native={self.native})"
        )
