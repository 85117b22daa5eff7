from __future__ import annotations

import math
from typing import Dict, Iterable, Optional, Sequence

import numpy as np
from loguru import logger

from .config import VertexSelectionSettings
from .errors import ConfigurationError, ConsistencyError
from .histogram import Histogram
from .pipeline_types import CandidateVertex, Cluster, Position2D, View
from .projection import ProjectionService


# ---------------------------
# Per-view angular histogram
# ---------------------------

def new_histogram(settings: VertexSelectionSettings) -> Histogram:
    return Histogram(settings.histogram_n_phi_bins, settings.histogram_phi_min, settings.histogram_phi_max)


def fill_histogram_from_hits(
    vertex_position_2d: Position2D,
    cluster: Cluster,
    view: View,
    histogram: Histogram,
    settings: VertexSelectionSettings,
) -> bool:
    """
    Fill ``histogram`` with the bearing of every relevant hit of ``cluster`` as
    seen from the projected vertex, weighted by distance**power.

    Returns True if any hit lies within the on-hit distance of the vertex.
    """
    vx, vz = vertex_position_2d
    is_vertex_on_hit = False

    for hit in cluster.hits:
        if hit.view != view:
            raise ConsistencyError(
                f"Hit {hit.hit_id} in cluster {cluster.cluster_id} is tagged {View(hit.view).value}, "
                f"expected {view.value}",
                expected_view=view.value,
                found_view=View(hit.view).value,
            )

        dx, dz = hit.x - vx, hit.z - vz
        magnitude = math.hypot(dx, dz)

        if magnitude > settings.max_hit_vertex_displacement:
            continue

        if magnitude < settings.max_on_hit_displacement:
            is_vertex_on_hit = True

        phi = math.atan2(dz, dx)
        try:
            weight = max(magnitude, settings.min_hit_vertex_displacement) ** settings.hit_deweighting_power
        except OverflowError as e:
            raise ConfigurationError(
                f"HitDeweightingPower {settings.hit_deweighting_power} overflows at hit distance {magnitude:.6g}"
            ) from e
        histogram.fill(phi, weight)

    return is_vertex_on_hit


def fill_histogram(
    vertex: CandidateVertex,
    view: View,
    clusters: Iterable[Cluster],
    histogram: Histogram,
    settings: VertexSelectionSettings,
    projection: ProjectionService,
) -> bool:
    """Score one candidate in one view; True if the vertex lies on a hit there."""
    vertex_position_2d = projection.project((vertex.x, vertex.y, vertex.z), view)
    is_vertex_on_hit = False

    for cluster in clusters:
        # no short-circuit: every cluster must be checked and histogrammed
        is_vertex_on_hit |= fill_histogram_from_hits(vertex_position_2d, cluster, view, histogram, settings)

    return is_vertex_on_hit


# ---------------------------
# Figure of merit
# ---------------------------

def figure_of_merit(histogram: Histogram) -> float:
    """Sum of squared bin contents: peaked angular distributions score high."""
    contents = histogram.contents()
    return float(np.dot(contents, contents))


def combined_figure_of_merit(histograms: Sequence[Histogram]) -> float:
    """Unweighted sum of the per-view figures of merit."""
    return float(sum(figure_of_merit(h) for h in histograms))


def score_vertex(
    vertex: CandidateVertex,
    clusters_by_view: Dict[View, Sequence[Cluster]],
    settings: VertexSelectionSettings,
    projection: ProjectionService,
) -> Optional[float]:
    """
    Score a candidate across the U, V and W views.

    Returns None if the vertex is not on a hit in every view.
    """
    histograms = []
    on_hit = []
    for view in (View.U, View.V, View.W):
        histogram = new_histogram(settings)
        on_hit.append(fill_histogram(vertex, view, clusters_by_view.get(view, []), histogram, settings, projection))
        histograms.append(histogram)

    if not all(on_hit):
        logger.debug(
            "Vertex {} rejected: on-hit U={} V={} W={}", vertex.vertex_id, on_hit[0], on_hit[1], on_hit[2]
        )
        return None

    score = combined_figure_of_merit(histograms)
    logger.debug("Vertex {} scored {:.6g}", vertex.vertex_id, score)
    return score
