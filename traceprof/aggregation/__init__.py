"""
Aggregation Package

Grouped and counted views over a decoded thread.
"""

from .types import (
    TierCountsModel,
    SampleCounterRow,
    ProfileTableRow,
    FlatFunctionRow,
    TimeBucket,
    OptimizationSiteRow,
    ProfileRequest,
    ProfileResult,
    ProfileResponse,
)

from .analyzer import analyze, analyze_thread, get_available_views
from .buckets import bucket_function_samples, dominant_tier
from .call_graph import build_call_graph, get_call_graph_stats
from .classification import build_profile_table, classify_group
from .counters import FunctionTierCounters, SampleCounter, SampleGroup, TierCounts
from .flat_profile import FlatFunctionProfile, FlatProfile, gather_flat_function_profiles
from .grouping import count_samples, function_key, group_by_function, group_by_implementation
from .optimizations import group_sites_by_url, is_successful_outcome
from .settings import ClassificationSettings, load_settings, settings_from_dict

__all__ = [
    # Types
    'TierCountsModel',
    'SampleCounterRow',
    'ProfileTableRow',
    'FlatFunctionRow',
    'TimeBucket',
    'OptimizationSiteRow',
    'ProfileRequest',
    'ProfileResult',
    'ProfileResponse',
    # Counters
    'TierCounts',
    'SampleCounter',
    'SampleGroup',
    'FunctionTierCounters',
    'FlatFunctionProfile',
    'FlatProfile',
    # Settings
    'ClassificationSettings',
    'settings_from_dict',
    'load_settings',
    # Functions
    'analyze',
    'analyze_thread',
    'get_available_views',
    'function_key',
    'count_samples',
    'group_by_function',
    'group_by_implementation',
    'build_profile_table',
    'classify_group',
    'gather_flat_function_profiles',
    'bucket_function_samples',
    'dominant_tier',
    'group_sites_by_url',
    'is_successful_outcome',
    'build_call_graph',
    'get_call_graph_stats',
]
