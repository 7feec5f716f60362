"""Tests for the scene graph module."""

from __future__ import annotations

from vnforge.graph.builder import SceneGraphBuilder, build_scene_graph
from vnforge.graph.query import SceneGraphQuery, ancestor_distances
from vnforge.story.models import Story


class TestSceneGraphBuilder:
    def test_build_nodes_and_edges(self, story: Story):
        graph = build_scene_graph(story)
        assert set(story.scenes) <= set(graph.nodes)
        assert graph.has_edge("start", "meet_friend")
        assert graph.has_edge("meet_friend", "adventure_yes")
        assert graph.has_edge("meet_friend", "adventure_no")
        assert graph.has_edge("adventure_yes", "camp")

    def test_edge_kinds(self, story: Story):
        graph = build_scene_graph(story)
        assert graph.edges["start", "meet_friend"]["kind"] == "transition"
        assert graph.edges["meet_friend", "adventure_no"]["kind"] == "choice"

    def test_malformed_choices_skipped(self, story: Story):
        builder = SceneGraphBuilder()
        graph = builder.build(story)
        assert graph.out_degree("meet_friend") == 2
        assert builder.get_stats()["skipped_items"] == 2

    def test_missing_target_added_as_bare_node(self):
        story = Story.model_validate({
            "scenes": {"a": {"id": "a", "dialogue": [
                {"type": "transition", "nextSceneId": "ghost"},
            ]}},
        })
        graph = build_scene_graph(story)
        assert graph.nodes["ghost"]["missing"] is True

    def test_stats(self, story: Story):
        builder = SceneGraphBuilder()
        builder.build(story)
        stats = builder.get_stats()
        assert stats["scenes"] == 6
        assert stats["checkpoints"] == 3
        assert stats["total_edges"] == 4
        assert stats["edge_types"] == {"transition": 2, "choice": 2}
        assert stats["has_cycles"] is False

    def test_rebuild_resets_state(self, story: Story, cyclic_story: Story):
        builder = SceneGraphBuilder()
        builder.build(story)
        graph = builder.build(cyclic_story)
        assert "start" not in graph
        assert builder.get_stats()["has_cycles"] is True


class TestAncestorDistances:
    def test_target_is_zero(self, story: Story):
        graph = build_scene_graph(story)
        for scene_id in story.scenes:
            assert ancestor_distances(graph, scene_id)[scene_id] == 0

    def test_acyclic_distances(self, story: Story):
        distances = ancestor_distances(build_scene_graph(story), "camp")
        assert distances == {
            "camp": 0,
            "adventure_yes": 1,
            "meet_friend": 2,
            "start": 3,
        }

    def test_unreachable_scenes_absent(self, story: Story):
        distances = ancestor_distances(build_scene_graph(story), "camp")
        assert "side_quest" not in distances
        assert "adventure_no" not in distances

    def test_cycle_through_target(self, cyclic_story: Story):
        distances = ancestor_distances(build_scene_graph(cyclic_story), "a")
        assert distances == {"a": 0, "c": 1, "b": 2, "d": 3}

    def test_cycle_shortest_path(self, cyclic_story: Story):
        distances = ancestor_distances(build_scene_graph(cyclic_story), "b")
        assert distances == {"b": 0, "a": 1, "d": 1, "c": 2}
        assert "e" not in distances

    def test_unknown_target(self, story: Story):
        assert ancestor_distances(build_scene_graph(story), "nowhere") == {}

    def test_shortest_of_several_paths(self):
        # a -> b -> c -> d and a -> d: a is one hop from d
        story = Story.model_validate({"scenes": {
            "a": {"id": "a", "dialogue": [{"type": "choice", "choices": [
                {"nextSceneId": "b"}, {"nextSceneId": "d"},
            ]}]},
            "b": {"id": "b", "dialogue": [{"type": "transition", "nextSceneId": "c"}]},
            "c": {"id": "c", "dialogue": [{"type": "transition", "nextSceneId": "d"}]},
            "d": {"id": "d"},
        }})
        distances = ancestor_distances(build_scene_graph(story), "d")
        assert distances == {"d": 0, "a": 1, "c": 1, "b": 2}


class TestSceneGraphQuery:
    def test_parents(self, story: Story):
        query = SceneGraphQuery(story)
        assert query.parents("meet_friend") == ["start"]
        assert query.parents("start") == []

    def test_unreachable_scenes(self, story: Story):
        query = SceneGraphQuery(story)
        assert query.unreachable_scenes() == ["side_quest"]

    def test_dead_ends(self, story: Story):
        query = SceneGraphQuery(story)
        # camp and adventure_no end explicitly; side_quest just stops
        assert query.dead_ends() == ["side_quest"]

    def test_missing_targets(self, story: Story):
        assert SceneGraphQuery(story).missing_targets() == []

    def test_cyclic_reachability(self, cyclic_story: Story):
        query = SceneGraphQuery(cyclic_story)
        assert query.reachable_from_start() == {"a", "b", "c"}
        assert query.unreachable_scenes() == ["d", "e"]
