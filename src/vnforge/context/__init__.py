"""Budgeted narrative context selection.

Ranks prior narrative material (recent dialogue, checkpoint summaries,
character facts) for a target scene and packs it under per-type token
budgets.

Usage:
    from vnforge.context import ContextAssembler

    assembler = ContextAssembler(story)
    package = assembler.assemble("meet_friend")
    print(package.render())
"""

from vnforge.context.engine import (
    ContextAssembler,
    build_context_chunks,
    select_context,
    select_context_knapsack,
)
from vnforge.context.models import (
    ChunkType,
    ContextBudgets,
    ContextChunk,
    ContextConfig,
    ContextPackage,
    ContextWeights,
)
from vnforge.context.scoring import ImportanceWeights, compute_node_importance, score_chunk

__all__ = [
    "ChunkType",
    "ContextAssembler",
    "ContextBudgets",
    "ContextChunk",
    "ContextConfig",
    "ContextPackage",
    "ContextWeights",
    "ImportanceWeights",
    "build_context_chunks",
    "compute_node_importance",
    "score_chunk",
    "select_context",
    "select_context_knapsack",
]
