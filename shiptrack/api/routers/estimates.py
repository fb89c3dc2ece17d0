"""Ad-hoc travel estimates between two place names."""

from fastapi import APIRouter, Depends

from shiptrack.api.dependencies import get_estimator
from shiptrack.common.errors import ValidationError
from shiptrack.integrations.route_estimator import RouteEstimator
from shiptrack.models.requests import EstimateRequest

router = APIRouter()


@router.post("/estimate")
def estimate_travel(
    request: EstimateRequest,
    estimator: RouteEstimator = Depends(get_estimator),
):
    """Estimate travel time and distance between ``startLocation`` and ``endLocation``."""
    if not request.start_location or not request.end_location:
        raise ValidationError("startLocation and endLocation are required")

    estimate = estimator.estimate(request.start_location, request.end_location, request.mode)
    return estimate.to_dict()
