"""
Pydantic models for request/response validation.
These define the exact contract between client and API.
"""
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List


class DiffRequest(BaseModel):
    """Baseline vs candidate outputs to compare."""
    baseline_output: Any = Field(..., description="Reference output (any JSON value)")
    candidate_output: Any = Field(..., description="Output under test (any JSON value)")
    contract: Optional[Dict[str, Any]] = Field(
        None,
        description="Comparison contract: rules of type ignore, approx, unordered keyed by dotted path"
    )
    api_version: str = Field("1.0", description="Client-declared API version")


class Difference(BaseModel):
    """One differing leaf."""
    path: str = Field(..., description="Full path, e.g. {dict}['metrics']['revenue']")
    field_path: str = Field(..., description="Simplified path (record field names only)")
    old: str = Field(..., description="Rendered baseline value, or <non-existent>")
    new: str = Field(..., description="Rendered candidate value, or <non-existent>")


class DiffSummary(BaseModel):
    """Counts over the visited leaves."""
    total_leaves: int = Field(..., ge=0, description="Leaves visited")
    differ_leaves: int = Field(..., ge=0, description="Leaves that differ")
    ignored_leaves: int = Field(..., ge=0, description="Leaves skipped by ignore rules")


class DiffResponse(BaseModel):
    """Comparison outcome with a textual report and structured differences."""
    trace_id: str = Field(..., description="Unique request ID for audit trail")
    request_id: Optional[str] = Field(None, description="Echo of X-Request-ID header for tracing")
    status: str = Field(..., description="Always 'ok' on success")
    equal: bool = Field(..., description="True when no leaf differs")
    summary: DiffSummary
    diff: str = Field(..., description="Textual report, empty when equal (may be truncated)")
    differences: List[Difference] = Field(default_factory=list, description="Structured differences (capped)")
    baseline_hash: str = Field(..., description="SHA256 hash of baseline output")
    candidate_hash: str = Field(..., description="SHA256 hash of candidate output")


class ErrorResponse(BaseModel):
    """Error response (never leaks internals)."""
    trace_id: Optional[str] = Field(None, description="Request ID for debugging")
    status: str = Field("error", description="Always 'error'")
    error: Dict[str, Any] = Field(..., description="Error code, message and taxonomy details")


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(..., description="'ok' or 'degraded'")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="API version")
    commit: str = Field(..., description="Deployed build commit")
    timestamp: str = Field(..., description="ISO8601 UTC timestamp")
