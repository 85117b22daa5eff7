from __future__ import annotations

"""
Projection of 3D positions onto the 2D wire-plane views.

The selection core only needs something with a ``project(position, view)``
method; :class:`WireAngleProjection` is the standard three-plane LArTPC
geometry and is what the CLI and HTTP surfaces use.
"""

import math
from typing import Protocol, Sequence

from .config import WIRE_ANGLE_U, WIRE_ANGLE_V
from .pipeline_types import Position2D, View


class ProjectionService(Protocol):
    def project(self, position: Sequence[float], view: View) -> Position2D:
        """Return the ``(x, wire coordinate)`` of a 3D ``(x, y, z)`` position in ``view``."""
        ...


class WireAngleProjection:
    """
    Induction planes U and V are rotated by ``u_angle`` / ``v_angle`` from the
    collection plane W, whose wire coordinate is ``z``. The drift coordinate
    ``x`` is common to all views.
    """

    def __init__(self, u_angle: float = WIRE_ANGLE_U, v_angle: float = WIRE_ANGLE_V):
        self.u_angle = float(u_angle)
        self.v_angle = float(v_angle)
        self._cos_u, self._sin_u = math.cos(self.u_angle), math.sin(self.u_angle)
        self._cos_v, self._sin_v = math.cos(self.v_angle), math.sin(self.v_angle)

    def yz_to_u(self, y: float, z: float) -> float:
        return z * self._cos_u - y * self._sin_u

    def yz_to_v(self, y: float, z: float) -> float:
        return z * self._cos_v + y * self._sin_v

    def project(self, position: Sequence[float], view: View) -> Position2D:
        x, y, z = (float(c) for c in position)
        if view == View.U:
            return x, self.yz_to_u(y, z)
        if view == View.V:
            return x, self.yz_to_v(y, z)
        if view == View.W:
            return x, z
        raise ValueError(f"Unknown view: {view!r}")
