from __future__ import annotations

import json
import math
import sys
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import ConfigurationError
from .pipeline_types import View


# ---------------------------
# Collection names
# ---------------------------

DEFAULT_INPUT_VERTEX_LIST_NAME = "CandidateVertices3D"


# ---------------------------
# Angular histogram
# ---------------------------

HISTOGRAM_N_PHI_BINS = 200
HISTOGRAM_PHI_MIN = -1.1 * math.pi
HISTOGRAM_PHI_MAX = +1.1 * math.pi


# ---------------------------
# Hit weighting
# ---------------------------

MAX_HIT_VERTEX_DISPLACEMENT = sys.float_info.max  # effectively unbounded
MAX_ON_HIT_DISPLACEMENT = 1.0
MIN_HIT_VERTEX_DISPLACEMENT = 0.01  # clamp so a coincident hit has finite weight
HIT_DEWEIGHTING_POWER = -0.5


# ---------------------------
# Candidate selection
# ---------------------------

MAX_TOP_SCORE_CANDIDATES = 5
MIN_CANDIDATE_DISPLACEMENT = 2.0
MIN_CANDIDATE_SCORE_FRACTION = 0.9


# ---------------------------
# Wire-plane projection (radians from vertical)
# ---------------------------

WIRE_ANGLE_U = math.pi / 3.0
WIRE_ANGLE_V = math.pi / 3.0


# ---------------------------
# Settings model
# ---------------------------

class VertexSelectionSettings(BaseModel):
    """
    Validated settings for the vertex selection algorithm.

    Field aliases match the keys of the framework's XML settings block, so a
    block such as ``{"InputClusterListNameU": "ClustersU", ...}`` loads as-is.
    Snake-case names are accepted too. Unknown keys are rejected.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    input_cluster_list_name_u: str = Field(alias="InputClusterListNameU", min_length=1)
    input_cluster_list_name_v: str = Field(alias="InputClusterListNameV", min_length=1)
    input_cluster_list_name_w: str = Field(alias="InputClusterListNameW", min_length=1)
    output_vertex_list_name: str = Field(alias="OutputVertexListName", min_length=1)

    replace_current_vertex_list: bool = Field(True, alias="ReplaceCurrentVertexList")

    histogram_n_phi_bins: int = Field(HISTOGRAM_N_PHI_BINS, alias="HistogramNPhiBins", gt=0)
    histogram_phi_min: float = Field(HISTOGRAM_PHI_MIN, alias="HistogramPhiMin", allow_inf_nan=False)
    histogram_phi_max: float = Field(HISTOGRAM_PHI_MAX, alias="HistogramPhiMax", allow_inf_nan=False)

    max_hit_vertex_displacement: float = Field(
        MAX_HIT_VERTEX_DISPLACEMENT, alias="MaxHitVertexDisplacement", ge=0.0
    )
    max_on_hit_displacement: float = Field(MAX_ON_HIT_DISPLACEMENT, alias="MaxOnHitDisplacement", ge=0.0)
    min_hit_vertex_displacement: float = Field(
        MIN_HIT_VERTEX_DISPLACEMENT, alias="MinHitVertexDisplacement", gt=0.0, allow_inf_nan=False
    )
    hit_deweighting_power: float = Field(HIT_DEWEIGHTING_POWER, alias="HitDeweightingPower", allow_inf_nan=False)

    max_top_score_candidates: int = Field(MAX_TOP_SCORE_CANDIDATES, alias="MaxTopScoreCandidates", ge=0)
    min_candidate_displacement: float = Field(
        MIN_CANDIDATE_DISPLACEMENT, alias="MinCandidateDisplacement", ge=0.0
    )
    min_candidate_score_fraction: float = Field(
        MIN_CANDIDATE_SCORE_FRACTION, alias="MinCandidateScoreFraction", ge=0.0, allow_inf_nan=False
    )

    @model_validator(mode="after")
    def _check_consistency(self) -> "VertexSelectionSettings":
        if self.histogram_phi_min >= self.histogram_phi_max:
            raise ValueError(
                f"HistogramPhiMin ({self.histogram_phi_min}) must be below HistogramPhiMax ({self.histogram_phi_max})"
            )
        names = [self.input_cluster_list_name_u, self.input_cluster_list_name_v, self.input_cluster_list_name_w]
        if len(set(names)) != len(names):
            raise ValueError(f"Input cluster list names must be distinct, got {names}")
        if self.output_vertex_list_name in names:
            raise ValueError(f"OutputVertexListName '{self.output_vertex_list_name}' clashes with an input cluster list")
        if self.hit_deweighting_power < 0.0:
            # largest weight any hit can get is the clamp distance raised to the power
            try:
                max_weight = self.min_hit_vertex_displacement ** self.hit_deweighting_power
            except OverflowError:
                max_weight = math.inf
            if not math.isfinite(max_weight * max_weight):
                raise ValueError(
                    f"HitDeweightingPower {self.hit_deweighting_power} overflows at "
                    f"MinHitVertexDisplacement {self.min_hit_vertex_displacement}"
                )
        return self

    def cluster_list_names(self) -> Dict[View, str]:
        """Map each view to its input cluster list name."""
        return {
            View.U: self.input_cluster_list_name_u,
            View.V: self.input_cluster_list_name_v,
            View.W: self.input_cluster_list_name_w,
        }


def build_settings(raw: Dict[str, object]) -> VertexSelectionSettings:
    """Validate a raw settings mapping, raising ConfigurationError on failure."""
    try:
        return VertexSelectionSettings.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid vertex selection settings: {e}") from e


def load_settings(path: Path) -> VertexSelectionSettings:
    """
    Load settings from a JSON file. The file holds a single object whose keys
    are either the XML-style aliases or the snake-case field names.
    """
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Settings file {path} is not valid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Settings file {path} must hold a JSON object, got {type(raw).__name__}")
    return build_settings(raw)


# ---------------------------
# Pydantic models shared around the app
# ---------------------------

class VertexIn(BaseModel):
    vertex_id: int
    x: float = Field(allow_inf_nan=False)
    y: float = Field(allow_inf_nan=False)
    z: float = Field(allow_inf_nan=False)


class HitIn(BaseModel):
    hit_id: int
    cluster_id: int = 0
    view: View
    x: float = Field(allow_inf_nan=False)
    z: float = Field(allow_inf_nan=False)


class SelectionRequest(BaseModel):
    """
    Request body for POST /select.

    Hits are grouped into the U/V/W cluster lists by their ``view`` tag.
    ``settings`` overrides the tunables; list names default to ClustersU/V/W.
    """

    vertices: List[VertexIn]
    hits: List[HitIn]
    settings: Dict[str, object] = Field(default_factory=dict)


class VertexScoreOut(BaseModel):
    vertex_id: int
    score: float


class SelectionResponse(BaseModel):
    """
    Response body for POST /select.
    """

    selected_vertex: Optional[VertexIn]
    scores: List[VertexScoreOut]
    shortlist: List[VertexScoreOut]


class HealthResponse(BaseModel):
    """
    Response body for GET /health.
    """

    status: str
