"""
Report CLI

Prints per-thread tier counters for one or more captures:

    traceprof capture.json [more.json.gz ...] [--functions] [--optimizations]
              [--settings FILE] [--width N] [-v]

Exit status is 1 if any capture failed to load, 2 if the settings file is
unusable.
"""

import argparse
import sys
from typing import List, Optional

from loguru import logger

from .aggregation.flat_profile import gather_flat_function_profiles
from .aggregation.grouping import count_samples
from .aggregation.optimizations import site_rows
from .aggregation.settings import ClassificationSettings, load_settings
from .errors import ProfileError
from .loader import load_capture
from .location import LocationCache
from .profile import Thread


COUNT_WIDTH = 8


def _shrink(s: str, width: int) -> str:
    """Keep both ends of an over-long string."""
    if len(s) <= width:
        return s
    half = (width - 3) // 2
    return s[:half] + '...' + s[len(s) - (width - 3 - half):]


def format_counter_table(thread: Thread, width: int = 120) -> List[str]:
    """Function | Int | Bsl | Ion | Nat rows, busiest first."""
    name_width = max(10, width - 4 * COUNT_WIDTH)
    lines = [
        f"{'Function':<{name_width}}" + ''.join(f"{h:>{COUNT_WIDTH}}" for h in ('Int', 'Bsl', 'Ion', 'Nat')),
    ]
    for counter in count_samples(thread):
        lines.append(
            f"{_shrink(counter.id, name_width):<{name_width}}"
            + ''.join(f"{c:>{COUNT_WIDTH}}" for c in counter.counts)
        )
    return lines


def format_flat_profile(thread: Thread, settings: ClassificationSettings, width: int = 120) -> List[str]:
    """Inclusive / exclusive tier counts per location, busiest first."""
    profile = gather_flat_function_profiles(
        thread, include_platform_frames=settings.include_platform_frames
    )
    headers = ('INT', 'BSL', 'ION', 'NAT', 'INT', 'BSL', 'ION', 'NAT', 'INC', '%INC', 'EXC')
    kinds = ('INC',) * 4 + ('EXC',) * 4 + ('', '', '')
    cell = 6
    name_width = max(10, width - len(headers) * cell)
    lines = [
        ''.join(f"{h:>{cell}}" for h in headers),
        ''.join(f"{k:>{cell}}" for k in kinds) + '  Function',
    ]
    for f in profile.functions:
        values = [
            f.inclusive.interpreter, f.inclusive.baseline, f.inclusive.ion, f.inclusive.native,
            f.exclusive.interpreter, f.exclusive.baseline, f.exclusive.ion, f.exclusive.native,
            f.inclusive.all, f"{profile.inclusive_percent(f):.2f}", f.exclusive.all,
        ]
        lines.append(''.join(f"{v:>{cell}}" for v in values) + '  ' + _shrink(f.location, name_width))
    return lines


def format_optimization_sites(thread: Thread, settings: ClassificationSettings, location_cache: LocationCache) -> List[str]:
    lines = []
    url = None
    for row in site_rows(thread.optimizations, settings.optimization_sample_threshold, location_cache):
        if row.url != url:
            url = row.url
            lines.append(f"File: {url}")
        marker = '<' if row.successful else '>'
        lines.append(f"{row.samples:>6}:{marker} line {row.line}")
        for attempt in row.attempts:
            lines.append(f"         - {attempt.strategy} -> {attempt.outcome}")
    return lines


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='traceprof',
        description='Summarise sampled profiler captures by function and compilation tier.',
    )
    parser.add_argument('captures', nargs='+', help='Capture files (.json or .json.gz)')
    parser.add_argument('--functions', action='store_true', help='Also print the flat inclusive/exclusive profile')
    parser.add_argument('--optimizations', action='store_true', help='Also print JIT optimization sites')
    parser.add_argument('--settings', default=None, help='YAML file overriding classification thresholds')
    parser.add_argument('--width', type=int, default=120, help='Table width in characters')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level='DEBUG' if args.verbose else 'WARNING')

    try:
        settings = load_settings(args.settings) if args.settings else ClassificationSettings()
    except (OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    location_cache = LocationCache()
    status = 0
    for path in args.captures:
        print(f"Profile: {path}")
        try:
            file = load_capture(path, location_cache)
        except (OSError, ProfileError) as e:
            print(f"error: {path}: {e}", file=sys.stderr)
            status = 1
            continue

        for i, thread in enumerate(file.threads):
            print(f"Thread: {i}" + (f" ({thread.name})" if thread.name else ''))
            for line in format_counter_table(thread, args.width):
                print(line)
            if args.functions:
                print()
                for line in format_flat_profile(thread, settings, args.width):
                    print(line)
            if args.optimizations:
                print()
                for line in format_optimization_sites(thread, settings, location_cache):
                    print(line)
    return status


if __name__ == '__main__':
    sys.exit(main())
