#!/usr/bin/env python3
"""Demo: Using vnforge as a Python library.

Generates a skeleton, realizes it as a story, then gathers budgeted
context for one of its scenes and walks a state through two deltas.
"""

from vnforge.context import ContextAssembler
from vnforge.graph.builder import SceneGraphBuilder
from vnforge.graph.query import SceneGraphQuery
from vnforge.scheduler.models import SchedulerConfig
from vnforge.scheduler.skeleton import (
    generate_story_skeleton,
    skeleton_to_story,
    validate_skeleton,
)
from vnforge.state.delta import apply_state_delta, render_state_to_text
from vnforge.state.models import StateDelta, StoryState
from vnforge.story.models import CheckpointSummary


def main():
    # 1. Schedule a skeleton
    print("Scheduling story skeleton...")
    config = SchedulerConfig(main_branch_size=8, split_probability=0.3, seed=7)
    nodes = generate_story_skeleton(config)
    for node in nodes:
        indent = "    " if node.branch_of is not None else "  "
        print(f"{indent}{node.name} -> {', '.join(node.successor_ids) or 'end'}")

    report = validate_skeleton(nodes)
    print(f"  Valid: {report.is_valid} ({report.node_count} nodes)")

    # 2. Realize it and inspect the scene graph
    story = skeleton_to_story(nodes, name="Demo Story")
    builder = SceneGraphBuilder()
    builder.build(story)
    stats = builder.get_stats()
    print(f"\n  Scenes: {stats['scenes']}")
    print(f"  Edges: {stats['total_edges']}")

    # Mark a couple of scenes as checkpoints with summaries
    for scene_id in ("node_main_1", "node_main_3"):
        story.scenes[scene_id].is_checkpoint = True
        story.checkpoint_summaries[scene_id] = CheckpointSummary(
            text=f"Summary of {scene_id}.", tokens=6
        )

    # 3. Select context for the last main-chain scene
    target = "node_main_7"
    query = SceneGraphQuery(story)
    print(f"\n--- Ancestors of {target} ---")
    for scene_id, distance in sorted(query.ancestor_distances(target).items(), key=lambda x: x[1]):
        print(f"  {distance}: {scene_id}")

    package = ContextAssembler(story).assemble(target, budgets={"local": 50, "story": 20})
    print()
    print(package.summary())
    print()
    print(package.render())

    # 4. Track story state
    state = StoryState(current_faction="Wanderers")
    for delta in (
        StateDelta.model_validate({"flags": [{"key": "found_map", "value": True}]}),
        StateDelta.model_validate({"chapterChange": 2, "promises": [{"id": "p1", "description": "Return the map"}]}),
    ):
        state = apply_state_delta(state, delta)
    print(render_state_to_text(state))


if __name__ == "__main__":
    main()
