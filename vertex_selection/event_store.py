from __future__ import annotations

"""
In-memory stand-in for the host framework's named collections.

Vertex lists and cluster lists are looked up by name; one vertex list is the
"current" list, which is where the algorithm reads its candidates from.
"""

from typing import Dict, List, Optional, Sequence

from loguru import logger

from .errors import CollectionNotFoundError
from .pipeline_types import CandidateVertex, Cluster


class EventStore:
    def __init__(self) -> None:
        self._vertex_lists: Dict[str, List[CandidateVertex]] = {}
        self._cluster_lists: Dict[str, List[Cluster]] = {}
        self._current_vertex_list_name: Optional[str] = None

    # ---- vertices ----

    def add_vertex_list(self, name: str, vertices: Sequence[CandidateVertex], make_current: bool = False) -> None:
        if name in self._vertex_lists:
            raise ValueError(f"Vertex list '{name}' already exists")
        self._vertex_lists[name] = list(vertices)
        if make_current:
            self._current_vertex_list_name = name

    def has_vertex_list(self, name: str) -> bool:
        return name in self._vertex_lists

    def get_vertices(self, name: str) -> List[CandidateVertex]:
        if name not in self._vertex_lists:
            raise CollectionNotFoundError(name)
        return list(self._vertex_lists[name])

    @property
    def current_vertex_list_name(self) -> Optional[str]:
        return self._current_vertex_list_name

    def get_current_vertices(self) -> List[CandidateVertex]:
        if self._current_vertex_list_name is None:
            raise CollectionNotFoundError("<current vertex list>")
        return self.get_vertices(self._current_vertex_list_name)

    def save_vertices(self, name: str, vertices: Sequence[CandidateVertex]) -> None:
        logger.info("Saving vertex list '{}' with {} vertices", name, len(vertices))
        self.add_vertex_list(name, vertices)

    def replace_current_vertex_list(self, name: str) -> None:
        if name not in self._vertex_lists:
            raise CollectionNotFoundError(name)
        logger.info("Current vertex list: '{}' -> '{}'", self._current_vertex_list_name, name)
        self._current_vertex_list_name = name

    # ---- clusters ----

    def add_cluster_list(self, name: str, clusters: Sequence[Cluster]) -> None:
        if name in self._cluster_lists:
            raise ValueError(f"Cluster list '{name}' already exists")
        self._cluster_lists[name] = list(clusters)

    def get_clusters(self, name: str) -> List[Cluster]:
        if name not in self._cluster_lists:
            raise CollectionNotFoundError(name)
        return list(self._cluster_lists[name])
