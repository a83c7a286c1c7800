"""
Capture wire types using Pydantic

Models for the raw profiler capture JSON, in both shapes seen in the wild:

- Columnar: each thread carries frameTable / stackTable / samples tables,
  each {schema: column-name -> index, data: rows}, plus a string table.
- Legacy: each thread carries a flat list of samples, each with its own
  frames[] array and optsIndex back-references into the optimizations list.

These models only validate shape. Column order, string resolution and object
graph construction happen in profile.py / legacy_format.py.
"""

from typing import List, Dict, Any, Optional, Union
from pydantic import BaseModel, Field, ConfigDict


# ============================================================================
# Optimization Sites
# ============================================================================

class OptimizationTypeInfo(BaseModel):
    """Observed type at an optimization site."""
    model_config = ConfigDict(extra='allow')

    keyedBy: Optional[str] = None
    name: Optional[str] = None
    location: Optional[str] = None
    line: Optional[int] = None


class OptimizationType(BaseModel):
    """Type information collected for one site operand."""
    model_config = ConfigDict(extra='allow')

    types: List[OptimizationTypeInfo] = Field(default_factory=list)
    site: Optional[str] = None
    mirType: Optional[str] = None


class OptimizationAttempt(BaseModel):
    """One optimization strategy tried by the JIT and its outcome."""
    model_config = ConfigDict(extra='allow')

    strategy: str
    outcome: str


class OptimizationSite(BaseModel):
    """
    Raw optimization site record.

    `samples` and `location` may be absent in the capture; the legacy decoder
    fills them in by tallying frames that reference the site.
    """
    model_config = ConfigDict(extra='allow')

    types: List[OptimizationType] = Field(default_factory=list)
    attempts: List[OptimizationAttempt] = Field(default_factory=list)
    samples: int = Field(0, ge=0, description="Number of samples hitting this site")
    location: Optional[str] = Field(None, description="Raw location of the frame owning this site")
    line: Optional[int] = None
    column: Optional[int] = None


# ============================================================================
# Columnar Shape
# ============================================================================

class ColumnarTable(BaseModel):
    """Schema-indexed table: `schema` maps column name to row index."""
    model_config = ConfigDict(populate_by_name=True, extra='allow')

    columns: Dict[str, Any] = Field(..., alias='schema', description="Column name -> index within each row")
    data: List[Optional[List[Any]]] = Field(default_factory=list)


class ThreadData(BaseModel):
    """One thread of a columnar capture."""
    model_config = ConfigDict(extra='allow')

    name: Optional[str] = None
    tid: Optional[Union[int, str]] = None
    frameTable: ColumnarTable
    stackTable: ColumnarTable
    stringTable: List[str] = Field(default_factory=list)
    samples: ColumnarTable
    optimizations: List[OptimizationSite] = Field(default_factory=list)
    markers: Optional[ColumnarTable] = None


# ============================================================================
# Legacy Shape
# ============================================================================

class LegacyFrame(BaseModel):
    """A frame embedded directly in a legacy sample."""
    model_config = ConfigDict(extra='allow')

    location: str
    implementation: Optional[str] = None
    line: Optional[int] = None
    category: Optional[Any] = None
    optsIndex: Optional[int] = None


class LegacySample(BaseModel):
    """A legacy sample: full outermost-first frame list plus metrics."""
    model_config = ConfigDict(extra='allow')

    frames: List[LegacyFrame] = Field(default_factory=list)
    time: float
    responsiveness: Optional[float] = None
    rss: Optional[float] = None
    uss: Optional[float] = None
    frameNumber: Optional[int] = None
    power: Optional[float] = None


class LegacyThreadData(BaseModel):
    """One thread of a legacy capture."""
    model_config = ConfigDict(extra='allow')

    name: Optional[str] = None
    tid: Optional[Union[int, str]] = None
    samples: List[Optional[LegacySample]] = Field(default_factory=list)
    optimizations: List[OptimizationSite] = Field(default_factory=list)


# ============================================================================
# Capture
# ============================================================================

class GlobalMarkerData(BaseModel):
    """Capture-level marker spanning [start, end]."""
    model_config = ConfigDict(extra='allow')

    name: Optional[str] = None
    start: Optional[float] = None
    end: Optional[float] = None
    stack: Optional[Any] = None
    endStack: Optional[Any] = None


class ProfileSection(BaseModel):
    """The `profile` object. Threads stay raw until their shape is known."""
    model_config = ConfigDict(extra='allow')

    threads: List[Dict[str, Any]] = Field(default_factory=list)
    libs: Optional[Any] = None
    meta: Optional[Any] = None


class Capture(BaseModel):
    """Complete profiler capture document."""
    model_config = ConfigDict(extra='allow')

    profile: ProfileSection
    markers: List[GlobalMarkerData] = Field(default_factory=list)
    allocations: Optional[Dict[str, Any]] = None
    label: Optional[str] = None
    duration: Optional[float] = None
    fileType: Optional[str] = None
    version: Optional[Union[int, float, str]] = None
