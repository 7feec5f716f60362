"""Procedural story skeleton scheduling.

Produces a static branching graph of typed nodes before any prose exists:

  1. Allocate ``main_branch_size`` main-chain nodes, all Linear, the last
     one Terminal.
  2. Draw once per internal node: below ``split_probability`` -> Split,
     else below ``split_probability + decision_probability`` -> Decision.
  3. If splitting was requested and the chain has at least 4 nodes but no
     Split was drawn, force one at ``main_branch_size // 2``.
  4. Materialize outcomes. Each Split spawns a sub-branch that either
     rejoins the main chain further on or ends on its own Terminal.

Decision nodes point both options at the same successor. They exist for
player agency and state effects; structural branching is the job of Split.

Every random draw goes through one ``random.Random`` so a seed fixes the
whole shape.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

import networkx as nx

from vnforge.scheduler.models import (
    NodeType,
    SchedulerConfig,
    SkeletonChoice,
    SkeletonNode,
    SkeletonOutcome,
)
from vnforge.story.models import CHOICE, END_STORY, TRANSITION, Story

logger = logging.getLogger("vnforge.scheduler")

MIN_FORCED_SPLIT_SIZE = 4
RECONNECT_THRESHOLD = 0.5
SUB_DECISION_PROBABILITY = 0.3


# ---------------------------------------------------------------------------
# Node factories
# ---------------------------------------------------------------------------

def _linear(node_id: str, next_id: str, label: str, branch_of: int | None = None) -> SkeletonNode:
    return SkeletonNode(
        id=node_id,
        type=NodeType.LINEAR,
        label=label,
        outcome=SkeletonOutcome(type=TRANSITION, next_scene_id=next_id),
        branch_of=branch_of,
    )


def _decision(node_id: str, next_id: str, label: str, branch_of: int | None = None) -> SkeletonNode:
    return SkeletonNode(
        id=node_id,
        type=NodeType.DECISION,
        label=label,
        outcome=SkeletonOutcome(
            type=CHOICE,
            choices=[
                SkeletonChoice(text="Option A", next_scene_id=next_id),
                SkeletonChoice(text="Option B", next_scene_id=next_id),
            ],
        ),
        branch_of=branch_of,
    )


def _split(node_id: str, main_id: str, branch_id: str, label: str) -> SkeletonNode:
    return SkeletonNode(
        id=node_id,
        type=NodeType.SPLIT,
        label=label,
        outcome=SkeletonOutcome(
            type=CHOICE,
            choices=[
                SkeletonChoice(text="Follow Main Path", next_scene_id=main_id),
                SkeletonChoice(text="Take Divergent Path", next_scene_id=branch_id),
            ],
        ),
    )


def _terminal(node_id: str, label: str, branch_of: int | None = None) -> SkeletonNode:
    return SkeletonNode(
        id=node_id,
        type=NodeType.TERMINAL,
        label=label,
        outcome=SkeletonOutcome(type=END_STORY),
        branch_of=branch_of,
    )


# ---------------------------------------------------------------------------
# Scheduling
# ---------------------------------------------------------------------------

def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def normalize_config(config: SchedulerConfig) -> SchedulerConfig:
    """Clamp out-of-range settings instead of failing generation."""
    fixed = {
        "main_branch_size": max(1, config.main_branch_size),
        "split_branch_size": max(1, config.split_branch_size),
        "split_probability": _clamp(config.split_probability, 0.0, 1.0),
        "decision_probability": _clamp(config.decision_probability, 0.0, 1.0),
    }
    changed = {k: v for k, v in fixed.items() if getattr(config, k) != v}
    if changed:
        logger.warning("Clamped scheduler settings: %s", changed)
        return config.model_copy(update=changed)
    return config


def _main_id(index: int) -> str:
    return f"node_main_{index}"


def generate_sub_branch(
    start_id: str,
    length: int,
    parent_index: int,
    rng: random.Random,
    reconnect_id: str = "",
) -> list[SkeletonNode]:
    """Generate the nodes of one sub-branch hanging off a Split.

    Internal nodes are Linear, each with an independent chance of being a
    flavor Decision. Sub-branches never split again. The last node rejoins
    ``reconnect_id`` when given, otherwise it is a Terminal.
    """
    ids = [
        start_id if k == 0 else f"node_sub_{parent_index}_{k}"
        for k in range(length)
    ]
    nodes: list[SkeletonNode] = []

    for k, node_id in enumerate(ids):
        if k == length - 1:
            if reconnect_id:
                nodes.append(_linear(
                    node_id, reconnect_id, f"Sub-Rejoin {parent_index}", parent_index
                ))
            else:
                nodes.append(_terminal(node_id, f"Sub-Ending {parent_index}", parent_index))
        elif rng.random() < SUB_DECISION_PROBABILITY:
            nodes.append(_decision(
                node_id, ids[k + 1], f"Sub-Decision {parent_index}-{k}", parent_index
            ))
        else:
            nodes.append(_linear(
                node_id, ids[k + 1], f"Sub-Linear {parent_index}-{k}", parent_index
            ))

    return nodes


def assign_main_types(
    size: int,
    split_probability: float,
    decision_probability: float,
    rng: random.Random,
) -> list[NodeType]:
    """Type every main-chain node. Split is checked before Decision on one draw."""
    types = [NodeType.LINEAR] * size
    types[-1] = NodeType.TERMINAL

    for i in range(1, size - 1):
        roll = rng.random()
        if roll < split_probability:
            types[i] = NodeType.SPLIT
        elif roll < split_probability + decision_probability:
            types[i] = NodeType.DECISION

    if (
        split_probability > 0
        and size >= MIN_FORCED_SPLIT_SIZE
        and NodeType.SPLIT not in types
    ):
        types[size // 2] = NodeType.SPLIT

    return types


def generate_story_skeleton(
    config: SchedulerConfig,
    rng: random.Random | None = None,
) -> list[SkeletonNode]:
    """Generate a flattened branching skeleton.

    Args:
        config: Structural parameters. Out-of-range values are clamped.
        rng: Random source. Defaults to ``random.Random(config.seed)``.

    Returns:
        Main-chain nodes in order, each Split followed directly by the nodes
        of its sub-branch. The first node is the entry point.
    """
    config = normalize_config(config)
    rng = rng or random.Random(config.seed)
    size = config.main_branch_size
    branch_size = config.split_branch_size

    types = assign_main_types(
        size, config.split_probability, config.decision_probability, rng
    )
    nodes: list[SkeletonNode] = []

    for i, node_type in enumerate(types):
        node_id = _main_id(i)
        next_id = _main_id(i + 1) if i < size - 1 else ""

        if node_type == NodeType.LINEAR:
            nodes.append(_linear(node_id, next_id, f"Linear Node {i}"))
        elif node_type == NodeType.TERMINAL:
            nodes.append(_terminal(node_id, f"Ending Node {i}"))
        elif node_type == NodeType.DECISION:
            nodes.append(_decision(node_id, next_id, f"Decision Node {i}"))
        else:
            branch_start = f"node_split_{i}_branch_start"
            can_reconnect = branch_size < size - 1 - i
            reconnect_id = ""
            if can_reconnect and rng.random() > RECONNECT_THRESHOLD:
                reconnect_id = _main_id(min(size - 1, i + max(1, branch_size)))

            nodes.append(_split(node_id, next_id, branch_start, f"Split Node {i}"))
            nodes.extend(generate_sub_branch(branch_start, branch_size, i, rng, reconnect_id))

    logger.debug(
        "Scheduled %d nodes (%d main, %d splits)",
        len(nodes), size, types.count(NodeType.SPLIT),
    )
    return nodes


# ---------------------------------------------------------------------------
# Validation and realization
# ---------------------------------------------------------------------------

def skeleton_to_graph(nodes: list[SkeletonNode]) -> nx.DiGraph:
    """Directed graph of a skeleton; dangling successors become bare nodes."""
    graph = nx.DiGraph()
    for node in nodes:
        graph.add_node(node.id, type=node.type.value, label=node.label)
    for node in nodes:
        for succ in node.successor_ids:
            graph.add_edge(node.id, succ)
    return graph


@dataclass
class SkeletonReport:
    """Structural checks for a generated skeleton."""

    node_count: int = 0
    type_counts: dict[str, int] = field(default_factory=dict)
    unreachable: list[str] = field(default_factory=list)
    dangling: list[str] = field(default_factory=list)  # Successors with no node
    non_terminating: list[str] = field(default_factory=list)  # Cannot reach a Terminal

    @property
    def is_valid(self) -> bool:
        return not (self.unreachable or self.dangling or self.non_terminating)


def validate_skeleton(nodes: list[SkeletonNode]) -> SkeletonReport:
    """Check connectivity and termination of a skeleton."""
    report = SkeletonReport(node_count=len(nodes))
    if not nodes:
        return report

    for node in nodes:
        report.type_counts[node.type.value] = report.type_counts.get(node.type.value, 0) + 1

    graph = skeleton_to_graph(nodes)
    known = {node.id for node in nodes}
    report.dangling = sorted(n for n in graph.nodes if n not in known)

    entry = nodes[0].id
    reachable = nx.descendants(graph, entry) | {entry}
    report.unreachable = sorted(known - reachable)

    finishing: set[str] = set()
    for node in nodes:
        if node.type == NodeType.TERMINAL:
            finishing |= nx.ancestors(graph, node.id) | {node.id}
    report.non_terminating = sorted(known - finishing)

    return report


def skeleton_to_story(nodes: list[SkeletonNode], name: str = "") -> Story:
    """Realize a skeleton as a story of placeholder scenes."""
    scenes = {node.id: node.to_scene() for node in nodes}
    return Story(
        id=name.lower().replace(" ", "_"),
        name=name,
        scenes=scenes,
        start_scene_id=nodes[0].id if nodes else "",
    )
