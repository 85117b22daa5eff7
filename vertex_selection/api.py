from __future__ import annotations

"""
FastAPI application for vertex selection.

POST /select takes one event (candidates + hits) and returns the selected
vertex together with the per-candidate scores and the gated shortlist.
"""

from typing import Dict, List

import pandas as pd
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from .algorithm import VertexSelectionAlgorithm
from .config import (
    HealthResponse,
    SelectionRequest,
    SelectionResponse,
    VertexIn,
    VertexScoreOut,
    build_settings,
)
from .errors import ConfigurationError, ConsistencyError
from .event_io import build_event_store, clusters_from_frame, vertices_from_frame
from .pipeline_types import CandidateVertex, VertexScore
from .projection import WireAngleProjection

DEFAULT_LIST_NAMES: Dict[str, str] = {
    "InputClusterListNameU": "ClustersU",
    "InputClusterListNameV": "ClustersV",
    "InputClusterListNameW": "ClustersW",
    "OutputVertexListName": "SelectedVertices",
}


def _scores_out(entries: List[VertexScore], candidates: List[CandidateVertex]) -> List[VertexScoreOut]:
    return [VertexScoreOut(vertex_id=candidates[e.index].vertex_id, score=e.score) for e in entries]


def run_selection(req: SelectionRequest) -> SelectionResponse:
    settings = build_settings({**DEFAULT_LIST_NAMES, **req.settings})

    vertices = vertices_from_frame(pd.DataFrame([v.model_dump() for v in req.vertices], columns=["vertex_id", "x", "y", "z"]))
    hits_df = pd.DataFrame(
        [h.model_dump(mode="json") for h in req.hits], columns=["hit_id", "cluster_id", "view", "x", "z"]
    )
    store = build_event_store(vertices, clusters_from_frame(hits_df), settings)

    result = VertexSelectionAlgorithm(settings, WireAngleProjection()).run(store)

    selected = None
    if result.selected is not None:
        v = result.selected
        selected = VertexIn(vertex_id=v.vertex_id, x=v.x, y=v.y, z=v.z)

    ranked = sorted(result.scores, key=lambda e: (-e.score, e.index))
    return SelectionResponse(
        selected_vertex=selected,
        scores=_scores_out(ranked, vertices),
        shortlist=_scores_out(result.shortlist, vertices),
    )


# -----------------------
# FastAPI app
# -----------------------

app = FastAPI()
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="healthy")


@app.post("/select", response_model=SelectionResponse)
def select(req: SelectionRequest):
    try:
        response = run_selection(req)
    except ConfigurationError as e:
        logger.warning("Rejected settings: {}", e)
        raise HTTPException(status_code=422, detail=str(e))
    except ConsistencyError as e:
        logger.warning("Inconsistent event: {}", e)
        raise HTTPException(status_code=422, detail=str(e))
    return response
