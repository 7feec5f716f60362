"""Budgeted narrative context selection.

Formulation:
  Given a scene graph G, a target scene t and per-type token budgets B_k:

  1. Index: d(s) = shortest ancestor distance from scene s to t (BFS over
     reversed edges). Scenes with no path to t take no part.
  2. Build: emit candidate chunks (recent dialogue of t, checkpoint
     summaries of ancestors, facts about the cast of t).
  3. Select: within each type k, rank chunks by relevance per token and
     greedily accept every chunk that still fits in B_k.

The greedy pass skips a chunk that does not fit and keeps going, so a
smaller, lower-ranked chunk can still use the remaining budget. It is not
an optimal knapsack; ``select_context_knapsack`` is the exact variant.

Copyright (c) 2025 vnforge Contributors. MIT License.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping

from vnforge.context.models import (
    ChunkType,
    ContextBudgets,
    ContextChunk,
    ContextConfig,
    ContextPackage,
    ContextWeights,
    TokenEstimator,
)
from vnforge.context.scoring import compute_node_importance, score_chunk
from vnforge.graph.builder import build_scene_graph
from vnforge.graph.query import ancestor_distances
from vnforge.story.models import CheckpointSummary, Story

logger = logging.getLogger("vnforge.context")

LOCAL_WINDOW = 5
DEFAULT_IMPORTANCE = 0.2

Budgets = ContextBudgets | Mapping[ChunkType | str, int | None]


# ---------------------------------------------------------------------------
# Chunk building
# ---------------------------------------------------------------------------

def jaccard(a: set[str], b: set[str]) -> float:
    """Jaccard similarity of two sets; 0.0 when both are empty."""
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def build_context_chunks(
    story: Story,
    target_scene_id: str,
    checkpoint_summaries: Mapping[str, CheckpointSummary] | None = None,
    similarities: Mapping[str, float] | None = None,
    local_window: int = LOCAL_WINDOW,
    default_importance: float = DEFAULT_IMPORTANCE,
) -> list[ContextChunk]:
    """Assemble every candidate chunk for ``target_scene_id``.

    Args:
        story: The story whose scene graph is searched.
        target_scene_id: Scene that context is being gathered for.
        checkpoint_summaries: Overrides ``story.checkpoint_summaries``.
        similarities: External semantic similarity per chunk id.
        local_window: How many trailing dialogue lines become local chunks.
        default_importance: Importance of scenes without authored factors.

    Returns:
        Candidate chunks; empty when the target scene does not exist.
    """
    target = story.scenes.get(target_scene_id)
    if target is None:
        return []

    summaries = (
        checkpoint_summaries if checkpoint_summaries is not None
        else story.checkpoint_summaries
    )
    sims = similarities or {}

    distances = ancestor_distances(build_scene_graph(story), target_scene_id)
    target_chars = target.character_ids()
    chunks: list[ContextChunk] = []

    for scene_id, scene in story.scenes.items():
        distance = distances.get(scene_id)
        if distance is None:
            continue

        importance = (
            compute_node_importance(scene.importance)
            if scene.importance is not None
            else default_importance
        )

        if scene_id == target_scene_id:
            lines = scene.text_lines()[-local_window:] if local_window > 0 else []
            for i, line in enumerate(lines):
                chunk_id = f"{scene_id}-local-{i}"
                text = f"{story.character_name(line.character_id)}: {line.text}"
                chunks.append(ContextChunk(
                    id=chunk_id,
                    text=text,
                    type=ChunkType.LOCAL,
                    graph_distance=0,
                    time_distance=len(lines) - i,
                    char_overlap=1.0,
                    embed_sim=sims.get(chunk_id, 0.0),
                    node_importance=importance,
                    tokens=TokenEstimator.estimate(text),
                    source_scene_id=scene_id,
                ))

        summary = summaries.get(scene_id)
        if scene.is_checkpoint and summary is not None:
            chunk_id = f"{scene_id}-summary"
            chunks.append(ContextChunk(
                id=chunk_id,
                text=summary.text,
                type=ChunkType.STORY,
                graph_distance=distance,
                time_distance=0,
                char_overlap=jaccard(target_chars, scene.character_ids()),
                embed_sim=sims.get(chunk_id, 0.0),
                node_importance=importance,
                tokens=summary.tokens,
                source_scene_id=scene_id,
            ))

    for char_id, character in story.characters.items():
        if char_id not in target_chars:
            continue
        chunk_id = f"char-{char_id}"
        text = (
            f"Character: {character.name}. Appearance: {character.appearance}. "
            f"Talking style: {character.talking_style}."
        )
        chunks.append(ContextChunk(
            id=chunk_id,
            text=text,
            type=ChunkType.CHARACTER,
            graph_distance=0,
            time_distance=0,
            char_overlap=1.0,
            embed_sim=sims.get(chunk_id, 0.0),
            node_importance=1.0,  # Character facts are never demoted
            tokens=TokenEstimator.estimate(text),
            source_scene_id=target_scene_id,
        ))

    logger.debug(
        "Built %d chunks for %s from %d ancestor scenes",
        len(chunks), target_scene_id, len(distances),
    )
    return chunks


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

def _budget_for(budgets: Budgets, chunk_type: ChunkType) -> int | None:
    """Token allowance for a type; None when the type is excluded."""
    if isinstance(budgets, ContextBudgets):
        budget = budgets.get(chunk_type)
    elif chunk_type in budgets:
        budget = budgets[chunk_type]
    else:
        budget = budgets.get(chunk_type.value)
    if budget is None or budget <= 0:
        return None
    return budget


def _buckets(chunks: list[ContextChunk]) -> dict[ChunkType, list[ContextChunk]]:
    by_type: dict[ChunkType, list[ContextChunk]] = {t: [] for t in ChunkType}
    for chunk in chunks:
        by_type[chunk.type].append(chunk)
    return by_type


def select_context(
    chunks: list[ContextChunk],
    budgets: Budgets,
    weights: ContextWeights,
) -> list[ContextChunk]:
    """Greedy per-type selection under hard token ceilings.

    For each type with a budget, chunks are ranked by ``score_chunk``
    (descending, stable) and accepted while ``used + tokens <= budget``.
    A chunk that does not fit is skipped; lower-ranked chunks are still
    considered. Types without a budget contribute nothing.
    """
    selected: list[ContextChunk] = []

    for chunk_type, bucket in _buckets(chunks).items():
        budget = _budget_for(budgets, chunk_type)
        if budget is None or not bucket:
            continue

        ranked = sorted(bucket, key=lambda c: score_chunk(c, weights), reverse=True)

        used = 0
        for chunk in ranked:
            if used + chunk.tokens > budget:
                logger.debug(
                    "Skipping %s (%d tokens, %d/%d used)",
                    chunk.id, chunk.tokens, used, budget,
                )
                continue
            selected.append(chunk)
            used += chunk.tokens

    return selected


def select_context_knapsack(
    chunks: list[ContextChunk],
    budgets: Budgets,
    weights: ContextWeights,
) -> list[ContextChunk]:
    """Exact 0/1 knapsack per type, maximizing the summed score.

    Dynamic programming over integer token counts: O(n * budget) per type.
    Use when budget utilization matters more than speed.
    """
    selected: list[ContextChunk] = []

    for chunk_type, bucket in _buckets(chunks).items():
        budget = _budget_for(budgets, chunk_type)
        if budget is None or not bucket:
            continue

        scores = [score_chunk(c, weights) for c in bucket]
        best = [0.0] * (budget + 1)
        keep = [[False] * (budget + 1) for _ in bucket]

        for i, chunk in enumerate(bucket):
            cost = chunk.tokens
            if cost > budget:
                continue
            for capacity in range(budget, cost - 1, -1):
                candidate = best[capacity - cost] + scores[i]
                if candidate > best[capacity]:
                    best[capacity] = candidate
                    keep[i][capacity] = True

        capacity = budget
        chosen: list[ContextChunk] = []
        for i in range(len(bucket) - 1, -1, -1):
            if keep[i][capacity]:
                chosen.append(bucket[i])
                capacity -= bucket[i].tokens
        selected.extend(reversed(chosen))

    return selected


# ---------------------------------------------------------------------------
# Assembler
# ---------------------------------------------------------------------------

class ContextAssembler:
    """Builds and selects narrative context for scenes of one story.

    Usage:
        assembler = ContextAssembler(story)
        package = assembler.assemble("meet_friend")
        prompt_material = package.render()
    """

    def __init__(self, story: Story, config: ContextConfig | None = None) -> None:
        self.story = story
        self.config = config or ContextConfig()

    def assemble(
        self,
        target_scene_id: str,
        budgets: Budgets | None = None,
        weights: ContextWeights | None = None,
        similarities: Mapping[str, float] | None = None,
        exact: bool = False,
    ) -> ContextPackage:
        """Assemble a budgeted context package for ``target_scene_id``."""
        start_time = time.time()
        budgets = budgets if budgets is not None else self.config.budgets
        weights = weights or self.config.weights

        candidates = build_context_chunks(
            self.story,
            target_scene_id,
            similarities=similarities,
            local_window=self.config.local_window,
            default_importance=self.config.default_importance,
        )
        select = select_context_knapsack if exact else select_context
        chosen = select(candidates, budgets, weights)

        elapsed_ms = (time.time() - start_time) * 1000
        return ContextPackage(
            target_scene_id=target_scene_id,
            chunks=chosen,
            scores={c.id: round(score_chunk(c, weights), 6) for c in chosen},
            budgets={t.value: _budget_for(budgets, t) for t in ChunkType},
            chunks_available=len(candidates),
            assembly_time_ms=round(elapsed_ms, 1),
        )
