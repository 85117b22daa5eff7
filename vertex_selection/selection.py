from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import numpy as np
from loguru import logger

from .config import VertexSelectionSettings
from .pipeline_types import CandidateVertex, VertexScore


def accept_vertex_location(
    vertex: CandidateVertex,
    candidates: Sequence[CandidateVertex],
    shortlist: Sequence[VertexScore],
    min_displacement: float,
) -> bool:
    """False if ``vertex`` is closer than ``min_displacement`` to any shortlisted vertex."""
    position = vertex.position
    for entry in shortlist:
        displacement = float(np.linalg.norm(position - candidates[entry.index].position))
        if displacement < min_displacement:
            return False
    return True


def accept_vertex_score(score: float, shortlist: Sequence[VertexScore], min_score_fraction: float) -> bool:
    """False if ``score`` is below ``min_score_fraction`` of any shortlisted score."""
    for entry in shortlist:
        if score < min_score_fraction * entry.score:
            return False
    return True


def rank_scores(scores: Sequence[VertexScore]) -> List[VertexScore]:
    """Natural (ascending) ordering; stable for equal scores."""
    return sorted(scores)


def build_shortlist(
    ranked: Sequence[VertexScore],
    candidates: Sequence[CandidateVertex],
    settings: VertexSelectionSettings,
) -> List[VertexScore]:
    """
    Walk ``ranked`` in order, considering at most ``max_top_score_candidates``
    entries (rejected ones count), and keep those passing both the spatial
    exclusion and the score fraction gates against everything kept so far.

    Parameters
    ----------
    ranked :
        Scores in traversal order, as returned by :func:`rank_scores`.
    candidates :
        The full candidate list; ``VertexScore.index`` points into it.
    settings :
        Supplies the cap, the minimum separation and the minimum score fraction.

    Returns
    -------
    List[VertexScore]
        Accepted entries in the order they were accepted.
    """
    shortlist: List[VertexScore] = []

    for n_considered, entry in enumerate(ranked, start=1):
        if n_considered > settings.max_top_score_candidates:
            break

        vertex = candidates[entry.index]

        if shortlist and not accept_vertex_location(
            vertex, candidates, shortlist, settings.min_candidate_displacement
        ):
            logger.debug("Vertex {} rejected: too close to a shortlisted vertex", vertex.vertex_id)
            continue

        if shortlist and not accept_vertex_score(entry.score, shortlist, settings.min_candidate_score_fraction):
            logger.debug("Vertex {} rejected: score {:.6g} below fraction", vertex.vertex_id, entry.score)
            continue

        shortlist.append(entry)

    return shortlist


def best_score(scores: Sequence[VertexScore]) -> Optional[VertexScore]:
    """Highest score in ``scores``; the earliest candidate wins ties."""
    best: Optional[VertexScore] = None
    for entry in scores:
        if best is None or entry.score > best.score or (entry.score == best.score and entry.index < best.index):
            best = entry
    return best


def select_best(
    scores: Sequence[VertexScore],
    candidates: Sequence[CandidateVertex],
    settings: VertexSelectionSettings,
) -> Tuple[List[VertexScore], Optional[VertexScore]]:
    """
    Build the shortlist and pick the winner.

    The shortlist is gated walking the natural score order, but the winner is
    always the maximum-score entry of the full scored set, and is only emitted
    when the shortlist is non-empty.
    """
    ranked = rank_scores(scores)
    shortlist = build_shortlist(ranked, candidates, settings)
    if not shortlist:
        return shortlist, None
    return shortlist, best_score(ranked)
