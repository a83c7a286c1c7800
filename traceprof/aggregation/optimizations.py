"""
Optimization Sites

Groups a thread's JIT optimization sites by the script they belong to.
A site's script URL comes from the location the decoder stamped onto it;
sites without a scripted location are skipped.
"""

from typing import Dict, List, Optional

from ..capture_types import OptimizationSite
from ..location import LocationCache
from .types import OptimizationAttemptRow, OptimizationSiteRow


SUCCESSFUL_OUTCOMES = frozenset([
    "GenericSuccess", "Inlined", "DOM", "Monomorphic", "Polymorphic",
])


def is_successful_outcome(outcome: str) -> bool:
    return outcome in SUCCESSFUL_OUTCOMES


def site_url(site: OptimizationSite, location_cache: Optional[LocationCache] = None) -> Optional[str]:
    """Script URL of the site's owning frame, or None."""
    if not site.location:
        return None
    if location_cache is None:
        location_cache = LocationCache()
    location = location_cache.get(site.location)
    return location.url if location.is_scripted else None


def group_sites_by_url(
    sites: List[OptimizationSite],
    threshold: int = 0,
    location_cache: Optional[LocationCache] = None,
) -> Dict[str, List[OptimizationSite]]:
    """
    Sites with at least `threshold` samples, keyed by script URL.

    URLs keep first-seen order; sites within a URL are sorted by line.
    """
    if location_cache is None:
        location_cache = LocationCache()
    files: Dict[str, List[OptimizationSite]] = {}
    for site in sites:
        url = site_url(site, location_cache)
        if url and site.samples >= threshold:
            files.setdefault(url, []).append(site)
    for url_sites in files.values():
        url_sites.sort(key=lambda site: site.line if site.line is not None else 0)
    return files


def last_attempt_successful(site: OptimizationSite) -> Optional[bool]:
    if not site.attempts:
        return None
    return is_successful_outcome(site.attempts[-1].outcome)


def site_rows(
    sites: List[OptimizationSite],
    threshold: int = 0,
    location_cache: Optional[LocationCache] = None,
) -> List[OptimizationSiteRow]:
    """Flattened rows of group_sites_by_url, URL by URL."""
    rows = []
    for url, url_sites in group_sites_by_url(sites, threshold, location_cache).items():
        for site in url_sites:
            rows.append(OptimizationSiteRow(
                url=url,
                line=site.line,
                column=site.column,
                samples=site.samples,
                successful=last_attempt_successful(site),
                attempts=[
                    OptimizationAttemptRow(
                        strategy=a.strategy,
                        outcome=a.outcome,
                        successful=is_successful_outcome(a.outcome),
                    )
                    for a in site.attempts
                ],
            ))
    return rows
