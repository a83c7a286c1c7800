"""
Main Analyzer

Orchestrates one aggregate request:
1. Decode the capture
2. Pick the thread
3. Look up the view definition
4. Run the view's runner
5. Return rows

analyze() is the boundary presentation code calls: it never raises.
"""

from typing import Any, Callable, Dict, List, Tuple

from loguru import logger

from ..loader import decode_capture
from ..profile import Implementation, Thread
from .buckets import bucket_function_samples
from .call_graph import build_call_graph, get_call_graph_stats
from .classification import build_profile_table
from .flat_profile import gather_flat_function_profiles
from .grouping import count_samples, group_by_implementation
from .optimizations import site_rows
from .settings import ClassificationSettings, settings_from_dict
from .types import ProfileRequest, ProfileResponse, ProfileResult, SampleCounterRow, TierCountsModel
from .views import get_registry


RunnerResult = Tuple[List[Dict[str, Any]], Dict[str, Any]]


def analyze(request: ProfileRequest) -> ProfileResponse:
    """
    Main analysis entry point.

    Args:
        request: ProfileRequest with the capture and view id

    Returns:
        ProfileResponse; on failure success=False and error carries
        error_type and message
    """
    try:
        return ProfileResponse(success=True, result=analyze_thread(request))
    except Exception as e:
        logger.warning(f"analyze({request.view!r}) failed: {type(e).__name__}: {e}")
        return ProfileResponse(
            success=False,
            error={
                'error_type': type(e).__name__,
                'message': str(e),
            },
        )


def analyze_thread(request: ProfileRequest) -> ProfileResult:
    """
    Run one view. Raises on any failure; see analyze() for the safe wrapper.
    """
    view = get_registry().get(request.view)
    if view.requires_location and not request.location:
        raise ValueError(f"View {view.id!r} requires a location")

    file = decode_capture(request.capture)
    if request.thread_index >= len(file.threads):
        raise ValueError(
            f"Thread index {request.thread_index} out of range ({len(file.threads)} threads)"
        )
    thread = file.threads[request.thread_index]
    settings = settings_from_dict(request.settings)

    runner = get_runner(view.runner)
    if runner is None:
        raise ValueError(f"Unknown runner: {view.runner}")

    logger.debug(f"Running {view.runner} on thread {thread.name!r}")
    data, metadata = runner(thread, request, settings)
    return ProfileResult(
        view=view.id,
        view_name=view.name,
        view_description=view.description,
        thread_name=thread.name,
        metadata=metadata,
        data=data,
    )


def get_available_views() -> list[dict]:
    return get_registry().list_views()


# ============================================================================
# Runners
# ============================================================================

def run_profile_table(thread: Thread, request: ProfileRequest, settings: ClassificationSettings) -> RunnerResult:
    rows = build_profile_table(thread, request.start, request.end, settings)
    return [r.model_dump() for r in rows], {'settings': settings.to_dict()}


def run_sample_counts(thread: Thread, request: ProfileRequest, settings: ClassificationSettings) -> RunnerResult:
    data = []
    for counter in count_samples(thread, request.start, request.end):
        row = SampleCounterRow(
            function_key=counter.id,
            location=counter.original,
            counts=TierCountsModel(
                interpreter=counter[Implementation.INTERPRETER],
                baseline=counter[Implementation.BASELINE],
                ion=counter[Implementation.ION],
                native=counter[Implementation.NATIVE],
            ),
            total=counter.get_all_counts(),
        )
        data.append(row.model_dump())
    return data, {}


def run_implementations(thread: Thread, request: ProfileRequest, settings: ClassificationSettings) -> RunnerResult:
    groups = group_by_implementation(thread, request.start, request.end)
    total = sum(len(g) for g in groups)
    data = [
        {
            'implementation': g.original,
            'samples': len(g),
            'share': len(g) / total if total else 0.0,
        }
        for g in groups
    ]
    return data, {'sample_count': total}


def run_flat_profile(thread: Thread, request: ProfileRequest, settings: ClassificationSettings) -> RunnerResult:
    profile = gather_flat_function_profiles(
        thread, request.start, request.end, settings.include_platform_frames
    )
    return [r.model_dump() for r in profile.to_rows()], {'sample_count': profile.sample_count}


def run_time_buckets(thread: Thread, request: ProfileRequest, settings: ClassificationSettings) -> RunnerResult:
    profile = gather_flat_function_profiles(
        thread, request.start, request.end, settings.include_platform_frames
    )
    function = profile.find(request.location)
    if function is None:
        raise ValueError(f"Location not sampled in window: {request.location!r}")
    buckets = bucket_function_samples(function, settings.bucket_count)
    return [b.model_dump() for b in buckets], {'location': function.location}


def run_optimization_sites(thread: Thread, request: ProfileRequest, settings: ClassificationSettings) -> RunnerResult:
    rows = site_rows(thread.optimizations, settings.optimization_sample_threshold)
    return [r.model_dump() for r in rows], {'threshold': settings.optimization_sample_threshold}


def run_call_graph(thread: Thread, request: ProfileRequest, settings: ClassificationSettings) -> RunnerResult:
    G = build_call_graph(thread, request.start, request.end)
    data = [
        {'caller': u, 'callee': v, 'samples': d['samples']}
        for u, v, d in G.edges(data=True)
    ]
    return data, get_call_graph_stats(G)


RUNNERS: Dict[str, Callable[[Thread, ProfileRequest, ClassificationSettings], RunnerResult]] = {
    'profile_table_runner': run_profile_table,
    'sample_counts_runner': run_sample_counts,
    'implementation_runner': run_implementations,
    'flat_profile_runner': run_flat_profile,
    'time_buckets_runner': run_time_buckets,
    'optimization_sites_runner': run_optimization_sites,
    'call_graph_runner': run_call_graph,
}


def get_runner(runner_name: str):
    """Get runner function by name."""
    return RUNNERS.get(runner_name)
