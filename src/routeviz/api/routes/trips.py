"""Trip planner endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Response, status

from ...schemas.trips import TripPlanRequest, TripPlanResponse
from ...services.outputs.formatter import tour_to_csv
from ...services.trips.models import StaleResultError
from ...services.trips.service import locations_from_request, plan_trip, plan_trip_response

router = APIRouter(prefix="/trips", tags=["trips"])


@router.post("/plan", response_model=TripPlanResponse, status_code=status.HTTP_200_OK)
def plan(payload: TripPlanRequest) -> TripPlanResponse:
    try:
        return plan_trip_response(payload)
    except StaleResultError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error planning trip: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to plan trip: {str(exc)}",
        ) from exc


@router.post("/plan.csv", status_code=status.HTTP_200_OK)
def plan_csv(payload: TripPlanRequest) -> Response:
    """Segment-by-segment route analysis as CSV."""
    try:
        trip = plan_trip(locations_from_request(payload), payload.start_id, session_id=payload.session_id)
    except StaleResultError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error exporting trip plan: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to export trip plan: {str(exc)}",
        ) from exc
    return Response(
        content=tour_to_csv(trip.tour),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="trip.csv"'},
    )
