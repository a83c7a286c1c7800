"""
Aggregation Types

Pydantic models for aggregate rows and the analyze() request/response.
"""

from typing import Optional, Any
from pydantic import BaseModel, Field


# ============================================================================
# Rows
# ============================================================================

class TierCountsModel(BaseModel):
    """Sample counts per compilation tier."""
    interpreter: int = 0
    baseline: int = 0
    ion: int = 0
    native: int = 0


class SampleCounterRow(BaseModel):
    """Leaf-frame tier counts for one function key."""
    function_key: str = Field(description="functionName:line")
    location: str = Field(description="Raw location of the first sample seen")
    counts: TierCountsModel
    total: int


class ProfileTableRow(BaseModel):
    """One row of the profile table, with classification flags."""
    function_key: str = Field(description="functionName:line")
    location: str = Field(description="Raw location of the first sample seen")
    samples: int = Field(description="Samples whose leaf is this function")
    share: float = Field(description="Fraction of the window's samples")
    interpreter_share: float = 0.0
    baseline_share: float = 0.0
    ion_share: float = 0.0
    native_share: float = 0.0
    interpreter_critical: bool = Field(default=False, description="Interpreter cell flag")
    baseline_warning: bool = Field(default=False, description="Baseline cell flag")
    critical: bool = Field(default=False, description="Whole-row flag")


class FlatFunctionRow(BaseModel):
    """Inclusive / exclusive tier counts for one raw location."""
    location: str
    inclusive: TierCountsModel
    exclusive: TierCountsModel
    inclusive_total: int
    exclusive_total: int
    inclusive_percent: float = Field(description="Inclusive samples as a percentage of counted samples")


class TimeBucket(BaseModel):
    """Tier counts of one function within one time slice."""
    index: int
    start: float
    end: float
    samples: int = Field(description="Samples containing the function in this slice")
    counts: TierCountsModel
    dominant_tier: Optional[str] = Field(default=None, description="interpreter, baseline, ion, native, or None when empty")


class OptimizationAttemptRow(BaseModel):
    strategy: str
    outcome: str
    successful: bool


class OptimizationSiteRow(BaseModel):
    """One optimization site, grouped under its script URL."""
    url: str
    line: Optional[int] = None
    column: Optional[int] = None
    samples: int = 0
    successful: Optional[bool] = Field(default=None, description="Outcome of the final attempt; None without attempts")
    attempts: list[OptimizationAttemptRow] = Field(default_factory=list)


# ============================================================================
# Request / Response
# ============================================================================

class ProfileRequest(BaseModel):
    """Request to compute one aggregate view over one thread of a capture."""
    capture: dict[str, Any] = Field(description="Raw capture JSON (columnar or legacy)")
    view: str = Field(default="profile_table", description="View id from views.yaml")
    thread_index: int = Field(default=0, ge=0)
    start: Optional[float] = Field(default=None, description="Window start time")
    end: Optional[float] = Field(default=None, description="Window end time")
    location: Optional[str] = Field(default=None, description="Raw location, for per-function views")
    settings: dict[str, Any] = Field(default_factory=dict, description="ClassificationSettings overrides")


class ProfileResult(BaseModel):
    """Rows of one aggregate view."""
    view: str = Field(description="View id")
    view_name: str
    view_description: str = ""
    thread_name: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    data: list[dict[str, Any]] = Field(default_factory=list)


class ProfileResponse(BaseModel):
    """Response from analyze()."""
    success: bool = Field(default=True)
    result: Optional[ProfileResult] = None
    error: Optional[dict[str, Any]] = Field(
        default=None,
        description="{'error_type', 'message'} if success=False"
    )
