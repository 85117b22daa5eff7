from __future__ import annotations

import argparse
from pathlib import Path

from .algorithm import VertexSelectionAlgorithm
from .config import load_settings
from .event_io import load_event, write_vertices
from .projection import WireAngleProjection


def main(argv=None):
    ap = argparse.ArgumentParser(description="Select the best interaction vertex from 3D candidates.")
    ap.add_argument("--vertices", type=Path, required=True,
                    help="Candidate vertices (CSV or Parquet: vertex_id,x,y,z)")
    ap.add_argument("--hits", type=Path, required=True,
                    help="Clustered hits (CSV or Parquet: hit_id,cluster_id,view,x,z)")
    ap.add_argument("--settings", type=Path, required=True,
                    help="JSON settings file")
    ap.add_argument("--output", type=Path, default=None,
                    help="Where to write the selected vertex list (CSV)")
    ap.add_argument("--u-angle", type=float, default=None)
    ap.add_argument("--v-angle", type=float, default=None)
    args = ap.parse_args(argv)

    settings = load_settings(args.settings)
    projection = WireAngleProjection()
    if args.u_angle is not None or args.v_angle is not None:
        projection = WireAngleProjection(
            u_angle=args.u_angle if args.u_angle is not None else projection.u_angle,
            v_angle=args.v_angle if args.v_angle is not None else projection.v_angle,
        )

    store = load_event(args.vertices, args.hits, settings)
    result = VertexSelectionAlgorithm(settings, projection).run(store)

    if args.output is not None:
        write_vertices(result.selected_vertices, args.output)

    if result.selected is None:
        print("No vertex selected.")
    else:
        v = result.selected
        print(f"Selected vertex {v.vertex_id}: ({v.x:.3f}, {v.y:.3f}, {v.z:.3f})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
