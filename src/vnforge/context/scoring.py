"""Relevance scoring for context chunks and scene importance.

Chunk score:

    f_graph = exp(-lambda * graph_distance)
    f_time  = exp(-mu * time_distance)
    R       = alpha*f_graph + beta*f_time + gamma*char_overlap
              + delta*embed_sim + eta*TYPE_BONUS[type] + kappa*node_importance
    score   = R / (tokens + EPSILON) ** p

The denominator makes selection budget-aware: with larger ``p`` a verbose
chunk needs proportionally more raw relevance to outrank a terse one.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from vnforge.context.models import ChunkType, ContextChunk, ContextWeights
from vnforge.story.models import NodeImportanceFactors

TYPE_BONUS: dict[ChunkType, float] = {
    ChunkType.LOCAL: 1.0,
    ChunkType.CHARACTER: 0.8,
    ChunkType.STORY: 0.7,
    ChunkType.GLOBAL: 0.6,
}

EPSILON = 1e-6


@dataclass(frozen=True)
class ImportanceWeights:
    """Linear weights for the four importance factors (sum to 1.0)."""

    decision: float = 0.35
    payoff: float = 0.25
    emotional: float = 0.25
    lore: float = 0.15


def compute_node_importance(
    factors: NodeImportanceFactors, weights: ImportanceWeights | None = None
) -> float:
    """Weighted sum of a scene's importance factors.

    The result is not clamped; factors outside [0, 1] are the author's
    responsibility.
    """
    w = weights or ImportanceWeights()
    return (
        w.decision * factors.decision_weight
        + w.payoff * factors.payoff_weight
        + w.emotional * factors.emotional_intensity
        + w.lore * factors.lore_density
    )


def score_chunk(chunk: ContextChunk, weights: ContextWeights) -> float:
    """Relevance of one chunk per unit of token cost."""
    f_graph = math.exp(-weights.lambda_ * chunk.graph_distance)
    f_time = math.exp(-weights.mu * chunk.time_distance)

    raw = (
        weights.alpha * f_graph
        + weights.beta * f_time
        + weights.gamma * chunk.char_overlap
        + weights.delta * chunk.embed_sim
        + weights.eta * TYPE_BONUS[chunk.type]
        + weights.kappa * chunk.node_importance
    )
    return raw / math.pow(chunk.tokens + EPSILON, weights.p)
