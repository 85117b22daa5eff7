from __future__ import annotations

"""
Vertex selection: score every candidate vertex against the U/V/W hits and
commit the single best one.

Pipeline:
- per view, an angular histogram of hit bearings around the projected vertex
- candidates not on a hit in all three views are dropped
- figure of merit = sum over views of the squared bin contents
- shortlist gated by minimum separation and minimum score fraction
- the maximum-score candidate is written to the output vertex list
"""

from typing import Dict, List, Optional, Sequence

from loguru import logger

from .config import VertexSelectionSettings
from .errors import ConfigurationError
from .event_store import EventStore
from .pipeline_types import CandidateVertex, Cluster, SelectionResult, VertexScore, View
from .projection import ProjectionService, WireAngleProjection
from .scoring import score_vertex
from .selection import select_best


def select_vertex(
    candidates: Sequence[CandidateVertex],
    clusters_by_view: Dict[View, Sequence[Cluster]],
    settings: VertexSelectionSettings,
    projection: ProjectionService,
) -> SelectionResult:
    """Score and select without touching any event store."""
    scores: List[VertexScore] = []

    for index, vertex in enumerate(candidates):
        score = score_vertex(vertex, clusters_by_view, settings, projection)
        if score is None:
            continue
        scores.append(VertexScore(score=score, index=index))

    shortlist, best = select_best(scores, candidates, settings)
    selected = candidates[best.index] if best is not None else None

    logger.info(
        "Scored {}/{} candidates, shortlisted {}, selected {}",
        len(scores),
        len(candidates),
        len(shortlist),
        selected.vertex_id if selected is not None else None,
    )
    return SelectionResult(scores=scores, shortlist=shortlist, selected=selected)


class VertexSelectionAlgorithm:
    def __init__(self, settings: VertexSelectionSettings, projection: Optional[ProjectionService] = None):
        self.settings = settings
        self.projection = projection if projection is not None else WireAngleProjection()

    def run(self, store: EventStore) -> SelectionResult:
        if store.has_vertex_list(self.settings.output_vertex_list_name):
            raise ConfigurationError(
                f"OutputVertexListName '{self.settings.output_vertex_list_name}' already names a vertex list"
            )

        candidates = store.get_current_vertices()
        clusters_by_view = {
            view: store.get_clusters(name) for view, name in self.settings.cluster_list_names().items()
        }

        result = select_vertex(candidates, clusters_by_view, self.settings, self.projection)

        store.save_vertices(self.settings.output_vertex_list_name, result.selected_vertices)

        if result.selected is None:
            # output list stays empty and the current list is left alone
            logger.warning("No vertex selected from {} candidates", len(candidates))
            return result

        if self.settings.replace_current_vertex_list:
            store.replace_current_vertex_list(self.settings.output_vertex_list_name)

        return result
