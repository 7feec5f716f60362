"""Scene graph construction and traversal."""

from vnforge.graph.builder import SceneGraphBuilder, build_scene_graph
from vnforge.graph.query import SceneGraphQuery, ancestor_distances

__all__ = ["SceneGraphBuilder", "SceneGraphQuery", "ancestor_distances", "build_scene_graph"]
