"""
Profile Table Classification

Turns function groups into profile table rows and flags rows that spend most
of their time in the slower tiers.

Flags (all strict comparisons):
    interpreter_critical   share > cell_share and interpreter share > tier_dominance
    baseline_warning       share > cell_share and baseline share > tier_dominance
    critical               share > critical_share and interpreter share > tier_dominance

`share` is the row's fraction of the window's samples. Rows whose fraction of
the whole thread is not above min_visible_share are dropped.
"""

from typing import List, Optional

from ..profile import Implementation, Thread
from .counters import SampleGroup
from .grouping import group_by_function
from .settings import ClassificationSettings
from .types import ProfileTableRow


def classify_group(group: SampleGroup, window_samples: int, settings: ClassificationSettings) -> ProfileTableRow:
    """Build one table row. `window_samples` is the denominator for `share`."""
    count = len(group)
    counts = group.tier_counts()
    share = count / window_samples if window_samples else 0.0
    interpreter = counts.share(Implementation.INTERPRETER)
    baseline = counts.share(Implementation.BASELINE)

    flag_cells = share > settings.cell_share
    return ProfileTableRow(
        function_key=group.id,
        location=group.original,
        samples=count,
        share=share,
        interpreter_share=interpreter,
        baseline_share=baseline,
        ion_share=counts.share(Implementation.ION),
        native_share=counts.share(Implementation.NATIVE),
        interpreter_critical=flag_cells and interpreter > settings.tier_dominance,
        baseline_warning=flag_cells and baseline > settings.tier_dominance,
        critical=share > settings.critical_share and interpreter > settings.tier_dominance,
    )


def build_profile_table(
    thread: Thread,
    start: Optional[float] = None,
    end: Optional[float] = None,
    settings: Optional[ClassificationSettings] = None,
) -> List[ProfileTableRow]:
    """
    Profile table for a window, busiest function first.

    Args:
        thread: Decoded thread
        start: Window start time (None = first sample)
        end: Window end time (None = after the last sample)
        settings: Thresholds (defaults if None)

    Returns:
        Visible rows in group order
    """
    if settings is None:
        settings = ClassificationSettings()
    groups = group_by_function(thread, start, end)
    window_samples = sum(len(g) for g in groups)
    thread_samples = len(thread.samples)

    rows = []
    for group in groups:
        if not thread_samples or len(group) / thread_samples <= settings.min_visible_share:
            continue
        rows.append(classify_group(group, window_samples, settings))
    return rows
