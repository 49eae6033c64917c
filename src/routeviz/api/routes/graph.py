"""Graph visualizer endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.graph import GraphModel, ShortestPathRequest, ShortestPathResponse
from ...services.graph.models import GraphError, NodeNotFoundError
from ...services.graph.service import demo_graph, run_shortest_path

router = APIRouter(prefix="/graph", tags=["graph"])


@router.get("/demo", response_model=GraphModel, status_code=status.HTTP_200_OK)
def get_demo_graph() -> GraphModel:
    return demo_graph()


@router.post("/shortest-path", response_model=ShortestPathResponse, status_code=status.HTTP_200_OK)
def shortest_path(payload: ShortestPathRequest) -> ShortestPathResponse:
    try:
        return run_shortest_path(payload)
    except NodeNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except GraphError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error computing shortest path: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to compute shortest path: {str(exc)}",
        ) from exc
