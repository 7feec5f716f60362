"""Build a directed scene graph from a story."""

from __future__ import annotations

import networkx as nx

from vnforge.story.models import CHOICE, TRANSITION, Story


class SceneGraphBuilder:
    """Builds the scene graph of a story.

    Nodes are scene ids. An edge ``u -> v`` exists when scene ``u`` has a
    transition or a choice option leading to ``v``. Successor ids that do
    not name a scene are still added as nodes, flagged ``missing=True``.

    The graph is rebuilt from scratch on every call; nothing is cached
    between builds.
    """

    def __init__(self) -> None:
        self.graph = nx.DiGraph()
        self._skipped = 0

    def build(self, story: Story) -> nx.DiGraph:
        """Build the graph for ``story``, replacing any previous build."""
        self.graph = nx.DiGraph()
        self._skipped = 0

        for scene_id, scene in story.scenes.items():
            self.graph.add_node(
                scene_id,
                name=scene.name,
                is_checkpoint=scene.is_checkpoint,
                ends_story=scene.ends_story(),
                missing=False,
            )

        for scene_id, scene in story.scenes.items():
            for item in scene.dialogue:
                if item.type == TRANSITION:
                    if item.next_scene_id:
                        self._add_edge(scene_id, item.next_scene_id, TRANSITION)
                    else:
                        self._skipped += 1
                elif item.type == CHOICE:
                    for choice in item.choices or []:
                        if choice is None or not choice.next_scene_id:
                            self._skipped += 1
                            continue
                        self._add_edge(scene_id, choice.next_scene_id, CHOICE)

        return self.graph

    def _add_edge(self, source: str, target: str, kind: str) -> None:
        if not self.graph.has_node(target):
            self.graph.add_node(target, missing=True)
        self.graph.add_edge(source, target, kind=kind)

    def get_stats(self) -> dict:
        """Get graph statistics."""
        edge_types: dict[str, int] = {}
        for _, _, data in self.graph.edges(data=True):
            kind = data.get("kind", "unknown")
            edge_types[kind] = edge_types.get(kind, 0) + 1

        nodes = self.graph.nodes(data=True)
        return {
            "scenes": sum(1 for _, d in nodes if not d.get("missing")),
            "missing_targets": sum(1 for _, d in nodes if d.get("missing")),
            "checkpoints": sum(1 for _, d in nodes if d.get("is_checkpoint")),
            "total_edges": self.graph.number_of_edges(),
            "edge_types": edge_types,
            "skipped_items": self._skipped,
            "has_cycles": not nx.is_directed_acyclic_graph(self.graph),
        }


def build_scene_graph(story: Story) -> nx.DiGraph:
    """Shortcut for ``SceneGraphBuilder().build(story)``."""
    return SceneGraphBuilder().build(story)
