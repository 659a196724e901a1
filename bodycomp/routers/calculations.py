"""
Calculations Router
====================
Stateless HTTP access to the body-composition calculator.

Endpoints:
  POST /calculations/compute  - Compute a CalculationResult for one measurement

Nothing is stored: the host application persists the measurement and keeps the
returned result next to it, recomputing it whenever the measurement is edited.
"""

import logging

from fastapi import APIRouter

from bodycomp.schemas import CalculationResult, ComputeRequest
from bodycomp.services.calculator import compute

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/calculations", tags=["Calculations"])


@router.post("/compute", response_model=CalculationResult)
async def compute_endpoint(request: ComputeRequest):
    """
    Run the ISAK 2 calculation pipeline.

    Only the measured sites are required; every formula whose inputs are missing
    returns null and is listed in `not_computable`. Out-of-range values still
    produce a result, annotated in `warnings` (e.g. AGE_OUT_OF_RANGE,
    BODYFAT_OUT_OF_RANGE, COMPONENT_SUM_MISMATCH).

    Malformed measurements (negative sizes, zero weight, non-numeric values) are
    rejected with 422 before the calculator runs.
    """
    result = compute(request.measurement, request.subject, request.objective)
    logger.info(
        f"Computed measurement for patient {request.measurement.patient_id}: "
        f"{len(result.warnings)} warning(s)"
    )
    return result
