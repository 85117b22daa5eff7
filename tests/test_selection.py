from vertex_selection.config import VertexSelectionSettings
from vertex_selection.pipeline_types import CandidateVertex, VertexScore
from vertex_selection.selection import (
    accept_vertex_location,
    accept_vertex_score,
    best_score,
    build_shortlist,
    rank_scores,
    select_best,
)


def make_settings(**overrides):
    raw = {
        "InputClusterListNameU": "ClustersU",
        "InputClusterListNameV": "ClustersV",
        "InputClusterListNameW": "ClustersW",
        "OutputVertexListName": "SelectedVertices",
    }
    raw.update(overrides)
    return VertexSelectionSettings(**raw)


def line_candidates(n, spacing):
    return [CandidateVertex(100 + i, i * spacing, 0.0, 0.0) for i in range(n)]


def test_rank_scores_is_ascending_and_stable():
    scores = [VertexScore(3.0, 0), VertexScore(1.0, 1), VertexScore(3.0, 2), VertexScore(2.0, 3)]
    ranked = rank_scores(scores)
    assert [e.index for e in ranked] == [1, 3, 0, 2]


def test_location_gate():
    cands = [CandidateVertex(0, 0.0, 0.0, 0.0), CandidateVertex(1, 1.0, 1.0, 1.0)]
    shortlist = [VertexScore(1.0, 0)]
    assert not accept_vertex_location(cands[1], cands, shortlist, 2.0)  # |d| = sqrt(3)
    assert accept_vertex_location(cands[1], cands, shortlist, 1.5)


def test_score_gate():
    shortlist = [VertexScore(10.0, 0), VertexScore(4.0, 1)]
    assert not accept_vertex_score(8.9, shortlist, 0.9)
    assert accept_vertex_score(9.0, shortlist, 0.9)
    assert accept_vertex_score(0.0, [], 0.9)


def test_spatial_exclusion_is_monotonic():
    cands = line_candidates(5, 1.0)
    scores = [VertexScore(float(i + 1), i) for i in range(5)]
    sizes = []
    for sep in (0.0, 0.5, 1.5, 2.5, 10.0):
        settings = make_settings(MinCandidateDisplacement=sep, MinCandidateScoreFraction=0.0)
        sizes.append(len(build_shortlist(rank_scores(scores), cands, settings)))
    assert sizes == [5, 5, 3, 2, 1]
    assert sizes == sorted(sizes, reverse=True)


def test_score_fraction_is_monotonic():
    cands = line_candidates(5, 100.0)
    scores = [VertexScore(float(i + 1), i) for i in range(5)]
    sizes = []
    for frac in (0.0, 1.0, 1.5, 2.0, 3.0, 10.0):
        settings = make_settings(MinCandidateDisplacement=2.0, MinCandidateScoreFraction=frac)
        sizes.append(len(build_shortlist(rank_scores(scores), cands, settings)))
    assert sizes == [5, 5, 4, 3, 2, 1]


def test_cap_counts_rejected_entries():
    cands = [
        CandidateVertex(0, 0.0, 0.0, 0.0),
        CandidateVertex(1, 0.5, 0.0, 0.0),
        CandidateVertex(2, 50.0, 0.0, 0.0),
    ]
    scores = [VertexScore(1.0, 0), VertexScore(2.0, 1), VertexScore(3.0, 2)]

    capped = build_shortlist(rank_scores(scores), cands, make_settings(MaxTopScoreCandidates=2))
    assert [e.index for e in capped] == [0]

    wider = build_shortlist(rank_scores(scores), cands, make_settings(MaxTopScoreCandidates=3))
    assert [e.index for e in wider] == [0, 2]

    none = build_shortlist(rank_scores(scores), cands, make_settings(MaxTopScoreCandidates=0))
    assert none == []


def test_winner_is_global_maximum_not_last_shortlisted():
    cands = [
        CandidateVertex(0, 0.0, 0.0, 0.0),
        CandidateVertex(1, 0.5, 0.0, 0.0),
    ]
    scores = [VertexScore(9.0, 0), VertexScore(5.0, 1)]
    shortlist, best = select_best(scores, cands, make_settings())
    # weak end is gated first, so the stronger nearby candidate is excluded from the shortlist
    assert [e.index for e in shortlist] == [1]
    assert best.index == 0


def test_best_score_prefers_earliest_on_ties():
    assert best_score([VertexScore(2.0, 4), VertexScore(2.0, 1), VertexScore(1.0, 0)]).index == 1
    assert best_score([]) is None


def test_select_best_empty():
    shortlist, best = select_best([], [], make_settings())
    assert shortlist == []
    assert best is None
