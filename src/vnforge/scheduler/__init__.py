"""Procedural branching story skeletons."""

from vnforge.scheduler.models import NodeType, SchedulerConfig, SkeletonNode
from vnforge.scheduler.skeleton import (
    SkeletonReport,
    generate_story_skeleton,
    generate_sub_branch,
    skeleton_to_graph,
    skeleton_to_story,
    validate_skeleton,
)

__all__ = [
    "NodeType",
    "SchedulerConfig",
    "SkeletonNode",
    "SkeletonReport",
    "generate_story_skeleton",
    "generate_sub_branch",
    "skeleton_to_graph",
    "skeleton_to_story",
    "validate_skeleton",
]
