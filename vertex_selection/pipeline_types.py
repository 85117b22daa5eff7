"""Typed containers shared across pipeline modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np


class View(str, Enum):
    """The three 2D wire-plane views of the detector."""

    U = "U"
    V = "V"
    W = "W"


@dataclass(frozen=True)
class CandidateVertex:
    """A proposed 3D interaction point."""

    vertex_id: int
    x: float
    y: float
    z: float

    @property
    def position(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype="float64")


@dataclass(frozen=True)
class Hit:
    """A 2D hit in one view: drift coordinate ``x`` and wire coordinate ``z``."""

    hit_id: int
    view: View
    x: float
    z: float


@dataclass
class Cluster:
    cluster_id: int
    hits: List[Hit] = field(default_factory=list)


@dataclass(frozen=True, order=True)
class VertexScore:
    """
    Score of one candidate, keyed by its index into the candidate list.

    Natural ordering is ascending by score (ties broken by index).
    """

    score: float
    index: int


@dataclass
class SelectionResult:
    """Everything one run produces: the ranked scores, the gated shortlist and the winner."""

    scores: List[VertexScore] = field(default_factory=list)
    shortlist: List[VertexScore] = field(default_factory=list)
    selected: Optional[CandidateVertex] = None

    @property
    def selected_vertices(self) -> List[CandidateVertex]:
        return [self.selected] if self.selected is not None else []


Position2D = Tuple[float, float]
