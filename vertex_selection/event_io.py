from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Sequence

import numpy as np
import pandas as pd
from loguru import logger

from .config import DEFAULT_INPUT_VERTEX_LIST_NAME, VertexSelectionSettings
from .errors import ConfigurationError
from .event_store import EventStore
from .pipeline_types import CandidateVertex, Cluster, Hit, View


VERTEX_COLUMNS: List[str] = ["vertex_id", "x", "y", "z"]
HIT_COLUMNS: List[str] = ["hit_id", "cluster_id", "view", "x", "z"]


# ---------------------------
# Readers
# ---------------------------

def _read_table(path: Path) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    ext = path.suffix.lower()
    if ext in [".parquet", ".pq"]:
        df = pd.read_parquet(path)
    else:
        df = pd.read_csv(path, encoding="utf-8")
    df.columns = [str(c).strip().lower() for c in df.columns]
    logger.info("Loaded {} rows from {}", len(df), path)
    return df


def _require_columns(df: pd.DataFrame, required: Sequence[str], what: str) -> None:
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"{what} table is missing columns {missing}. Found: {list(df.columns)}")


def _require_finite(df: pd.DataFrame, columns: Sequence[str], what: str, id_column: str) -> None:
    values = df[list(columns)].apply(pd.to_numeric, errors="coerce")
    bad = ~np.isfinite(values.to_numpy(dtype="float64")).all(axis=1)
    if bad.any():
        ids = df.loc[bad, id_column].tolist()
        raise ValueError(f"{what} rows with missing or non-finite coordinates: {id_column}={ids}")


def vertices_from_frame(df: pd.DataFrame) -> List[CandidateVertex]:
    _require_columns(df, VERTEX_COLUMNS, "Vertex")
    _require_finite(df, ["x", "y", "z"], "Vertex", "vertex_id")
    return [
        CandidateVertex(vertex_id=int(vid), x=float(x), y=float(y), z=float(z))
        for vid, x, y, z in df[VERTEX_COLUMNS].itertuples(index=False, name=None)
    ]


def clusters_from_frame(df: pd.DataFrame) -> Dict[View, List[Cluster]]:
    """
    Group hit rows into clusters per view. A missing ``cluster_id`` column
    puts every hit of a view into one cluster.
    """
    if "cluster_id" not in df.columns:
        df = df.assign(cluster_id=0)
    _require_columns(df, HIT_COLUMNS, "Hit")
    _require_finite(df, ["x", "z"], "Hit", "hit_id")

    out: Dict[View, List[Cluster]] = {View.U: [], View.V: [], View.W: []}
    by_key: Dict[tuple, Cluster] = {}

    for hid, cid, view_raw, x, z in df[HIT_COLUMNS].itertuples(index=False, name=None):
        try:
            view = View(str(view_raw).strip().upper())
        except ValueError as e:
            raise ValueError(f"Hit {hid} has unknown view {view_raw!r}") from e
        key = (view, int(cid))
        cluster = by_key.get(key)
        if cluster is None:
            cluster = Cluster(cluster_id=int(cid))
            by_key[key] = cluster
            out[view].append(cluster)
        cluster.hits.append(Hit(hit_id=int(hid), view=view, x=float(x), z=float(z)))

    logger.info(
        "Built clusters: U={} V={} W={}", len(out[View.U]), len(out[View.V]), len(out[View.W])
    )
    return out


def build_event_store(
    vertices: Sequence[CandidateVertex],
    clusters_by_view: Dict[View, List[Cluster]],
    settings: VertexSelectionSettings,
    input_vertex_list_name: str = DEFAULT_INPUT_VERTEX_LIST_NAME,
) -> EventStore:
    """Register candidates as the current vertex list and clusters under the configured names."""
    if settings.output_vertex_list_name == input_vertex_list_name:
        raise ConfigurationError(
            f"OutputVertexListName '{settings.output_vertex_list_name}' clashes with the input vertex list"
        )
    store = EventStore()
    store.add_vertex_list(input_vertex_list_name, vertices, make_current=True)
    for view, name in settings.cluster_list_names().items():
        store.add_cluster_list(name, clusters_by_view.get(view, []))
    return store


def load_event(vertices_path: Path, hits_path: Path, settings: VertexSelectionSettings) -> EventStore:
    vertices = vertices_from_frame(_read_table(vertices_path))
    clusters = clusters_from_frame(_read_table(hits_path))
    return build_event_store(vertices, clusters, settings)


# ---------------------------
# Writer
# ---------------------------

def write_vertices(vertices: Sequence[CandidateVertex], path: Path) -> Path:
    rows = [{"vertex_id": v.vertex_id, "x": v.x, "y": v.y, "z": v.z} for v in vertices]
    df = pd.DataFrame(rows, columns=VERTEX_COLUMNS)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False, encoding="utf-8")
    logger.info("Wrote {} vertices to {}", len(df), path)
    return path
