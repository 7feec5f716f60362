"""Queries over the scene graph: ancestor distances, reachability, dead ends."""

from __future__ import annotations

from collections import deque

import networkx as nx

from vnforge.graph.builder import build_scene_graph
from vnforge.story.models import Story


def ancestor_distances(graph: nx.DiGraph, target_id: str) -> dict[str, int]:
    """Minimum hop count from every ancestor of ``target_id`` to it.

    Breadth-first search from the target along reversed edges. The target
    itself has distance 0; scenes that cannot reach the target are absent.
    Cycles are tolerated since every scene is visited at most once.
    """
    if not graph.has_node(target_id):
        return {}

    distances: dict[str, int] = {target_id: 0}
    queue: deque[str] = deque([target_id])

    while queue:
        current = queue.popleft()
        depth = distances[current]
        for parent in graph.predecessors(current):
            if parent not in distances:
                distances[parent] = depth + 1
                queue.append(parent)

    return distances


class SceneGraphQuery:
    """Query engine for a story's scene graph."""

    def __init__(self, story: Story, graph: nx.DiGraph | None = None) -> None:
        self.story = story
        self.graph = graph if graph is not None else build_scene_graph(story)

    def ancestor_distances(self, target_id: str) -> dict[str, int]:
        return ancestor_distances(self.graph, target_id)

    def parents(self, scene_id: str) -> list[str]:
        """Scenes with a direct edge into ``scene_id``."""
        if not self.graph.has_node(scene_id):
            return []
        return sorted(self.graph.predecessors(scene_id))

    def reachable_from_start(self) -> set[str]:
        start = self.story.start_scene_id
        if not start or not self.graph.has_node(start):
            return set()
        return nx.descendants(self.graph, start) | {start}

    def unreachable_scenes(self) -> list[str]:
        """Authored scenes that cannot be reached from the start scene."""
        reachable = self.reachable_from_start()
        return sorted(sid for sid in self.story.scenes if sid not in reachable)

    def dead_ends(self) -> list[str]:
        """Scenes with no way forward and no explicit story ending."""
        results = []
        for node_id, data in self.graph.nodes(data=True):
            if data.get("missing") or data.get("ends_story"):
                continue
            if self.graph.out_degree(node_id) == 0:
                results.append(node_id)
        return sorted(results)

    def missing_targets(self) -> list[str]:
        """Successor ids that point at scenes the story does not define."""
        return sorted(n for n, d in self.graph.nodes(data=True) if d.get("missing"))
