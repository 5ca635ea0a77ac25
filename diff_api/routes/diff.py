"""
Structural diff endpoint.

Compares a baseline output with a candidate output under an optional JSON
contract and returns a path-annotated report. Inputs are echoed back as
hashes only.
"""
import hashlib
import json
import logging
import uuid

from fastapi import APIRouter, HTTPException, Request, status

from diff_api.schemas import DiffRequest, DiffResponse, DiffSummary, Difference
from diff_api.settings import settings
from structdiff import ComparisonError, ComparisonErrorTaxonomy, DiffReporter, compile_contract, report
from structdiff.report import DIFFER, IGNORED

router = APIRouter(tags=["diff"])
logger = logging.getLogger(__name__)


def compute_hash(data) -> str:
    """Compute SHA256 hash of a JSON value."""
    data_str = json.dumps(data, sort_keys=True, default=str)
    return "sha256:" + hashlib.sha256(data_str.encode()).hexdigest()[:12]


@router.post("/v1/diff", response_model=DiffResponse)
def diff_outputs(request: Request, body: DiffRequest) -> DiffResponse:
    """
    Compare candidate_output against baseline_output.

    Contract and comparison errors are returned as 422 with the error
    taxonomy entry for the failure.
    """
    trace_id = getattr(request.state, "trace_id", None) or str(uuid.uuid4())

    try:
        rules = compile_contract(body.contract) if body.contract is not None else []
        records = report(body.baseline_output, body.candidate_output, rules)
    except ComparisonError as exc:
        info = ComparisonErrorTaxonomy.classify_error(exc)
        logger.warning("comparison failed: code=%s severity=%s", exc.code, info["severity"])
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=info)

    reporter = DiffReporter(max_lines=settings.diff_max_lines, max_bytes=settings.diff_max_bytes)
    for record in records:
        reporter.report(record)

    differing = [r for r in records if r.kind == DIFFER]
    summary = DiffSummary(
        total_leaves=len(records),
        differ_leaves=len(differing),
        ignored_leaves=sum(1 for r in records if r.kind == IGNORED),
    )
    logger.info("diff computed: leaves=%d differ=%d ignored=%d",
                summary.total_leaves, summary.differ_leaves, summary.ignored_leaves)

    return DiffResponse(
        trace_id=trace_id,
        request_id=request.headers.get("X-Request-ID"),
        status="ok",
        equal=not differing,
        summary=summary,
        diff=str(reporter),
        differences=[
            Difference(path=r.path.render(), field_path=str(r.path), old=r.old, new=r.new)
            for r in differing[:settings.max_differences]
        ],
        baseline_hash=compute_hash(body.baseline_output),
        candidate_hash=compute_hash(body.candidate_output),
    )
