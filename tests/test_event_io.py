import pandas as pd
import pytest

from vertex_selection.algorithm import VertexSelectionAlgorithm
from vertex_selection.config import VertexSelectionSettings
from vertex_selection.errors import ConfigurationError
from vertex_selection.event_io import (
    build_event_store,
    clusters_from_frame,
    load_event,
    vertices_from_frame,
    write_vertices,
)
from vertex_selection.pipeline_types import CandidateVertex, View
from vertex_selection.projection import WireAngleProjection

SETTINGS = VertexSelectionSettings(
    InputClusterListNameU="ClustersU",
    InputClusterListNameV="ClustersV",
    InputClusterListNameW="ClustersW",
    OutputVertexListName="SelectedVertices",
)


def test_clusters_grouped_by_view_and_cluster_id():
    df = pd.DataFrame(
        {
            "hit_id": [1, 2, 3, 4],
            "cluster_id": [7, 7, 8, 7],
            "view": ["u", "U", "U", "W"],
            "x": [0.0, 1.0, 2.0, 3.0],
            "z": [0.0, 0.0, 0.0, 0.0],
        }
    )
    clusters = clusters_from_frame(df)
    assert [c.cluster_id for c in clusters[View.U]] == [7, 8]
    assert len(clusters[View.U][0].hits) == 2
    assert clusters[View.V] == []
    assert clusters[View.W][0].hits[0].view == View.W


def test_missing_cluster_id_column_means_one_cluster_per_view():
    df = pd.DataFrame({"hit_id": [1, 2], "view": ["V", "V"], "x": [0.0, 1.0], "z": [0.0, 1.0]})
    clusters = clusters_from_frame(df)
    assert len(clusters[View.V]) == 1
    assert len(clusters[View.V][0].hits) == 2


def test_unknown_view_is_rejected():
    df = pd.DataFrame({"hit_id": [1], "cluster_id": [0], "view": ["Q"], "x": [0.0], "z": [0.0]})
    with pytest.raises(ValueError):
        clusters_from_frame(df)


def test_missing_vertex_columns_are_rejected():
    with pytest.raises(ValueError):
        vertices_from_frame(pd.DataFrame({"vertex_id": [1], "x": [0.0]}))


def test_csv_round_trip_through_algorithm(tmp_path):
    vertices_path = tmp_path / "vertices.csv"
    hits_path = tmp_path / "hits.csv"
    out_path = tmp_path / "out" / "selected.csv"

    pd.DataFrame({"Vertex_ID": [5, 6], "X": [0.0, 40.0], "Y": [0.0, 0.0], "Z": [0.0, 0.0]}).to_csv(
        vertices_path, index=False
    )
    pd.DataFrame(
        {
            "hit_id": [1, 2, 3],
            "cluster_id": [0, 0, 0],
            "view": ["U", "V", "W"],
            "x": [0.0, 0.0, 0.0],
            "z": [0.0, 0.0, 0.0],
        }
    ).to_csv(hits_path, index=False)

    store = load_event(vertices_path, hits_path, SETTINGS)
    result = VertexSelectionAlgorithm(SETTINGS, WireAngleProjection()).run(store)
    assert result.selected == CandidateVertex(5, 0.0, 0.0, 0.0)

    write_vertices(result.selected_vertices, out_path)
    written = pd.read_csv(out_path)
    assert written["vertex_id"].tolist() == [5]


def test_load_event_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_event(tmp_path / "nope.csv", tmp_path / "hits.csv", SETTINGS)


def test_output_name_clashing_with_input_vertex_list_is_rejected():
    settings = VertexSelectionSettings(
        InputClusterListNameU="ClustersU",
        InputClusterListNameV="ClustersV",
        InputClusterListNameW="ClustersW",
        OutputVertexListName="CandidateVertices3D",
    )
    with pytest.raises(ConfigurationError):
        build_event_store([CandidateVertex(1, 0.0, 0.0, 0.0)], {}, settings)


def test_non_finite_coordinates_are_rejected(tmp_path):
    vertices_path = tmp_path / "vertices.csv"
    vertices_path.write_text("vertex_id,x,y,z\n1,0.0,0.0,0.0\n2,nan,0.0,0.0\n", encoding="utf-8")
    hits_path = tmp_path / "hits.csv"
    hits_path.write_text("hit_id,cluster_id,view,x,z\n1,0,U,0.0,inf\n", encoding="utf-8")

    with pytest.raises(ValueError, match="vertex_id"):
        load_event(vertices_path, hits_path, SETTINGS)

    vertices_path.write_text("vertex_id,x,y,z\n1,0.0,0.0,0.0\n", encoding="utf-8")
    with pytest.raises(ValueError, match="hit_id"):
        load_event(vertices_path, hits_path, SETTINGS)


def test_blank_coordinate_is_rejected():
    df = pd.DataFrame({"hit_id": [4], "cluster_id": [0], "view": ["W"], "x": [None], "z": [1.0]})
    with pytest.raises(ValueError):
        clusters_from_frame(df)
