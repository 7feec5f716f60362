"""Data models for budgeted narrative context selection."""

from __future__ import annotations

import math
from collections.abc import Mapping
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ChunkType(str, Enum):
    """Category of a context chunk. Each category has its own budget."""

    LOCAL = "local"  # Recent dialogue of the target scene
    CHARACTER = "character"  # Facts about characters present in the target
    STORY = "story"  # Checkpoint summaries from ancestor scenes
    GLOBAL = "global"  # Caller-supplied world material


class ContextChunk(BaseModel):
    """A candidate unit of narrative material."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    type: ChunkType
    graph_distance: int = Field(default=0, ge=0)  # Ancestor hops to the target scene
    time_distance: float = 0.0  # Lines back within a scene
    char_overlap: float = 0.0  # Jaccard similarity of cast sets
    embed_sim: float = 0.0  # Externally supplied semantic similarity
    node_importance: float = 0.0
    tokens: int = Field(default=0, ge=0)
    source_scene_id: str = ""


class ContextWeights(BaseModel):
    """Scoring configuration for ``score_chunk``."""

    model_config = ConfigDict(populate_by_name=True)

    lambda_: float = Field(default=0.5, alias="lambda")  # Graph distance decay
    mu: float = 0.3  # Time distance decay
    alpha: float = 1.0  # Graph proximity
    beta: float = 1.0  # Recency
    gamma: float = 0.5  # Cast overlap
    delta: float = 0.5  # Semantic similarity
    eta: float = 0.5  # Type bonus
    kappa: float = 1.0  # Node importance
    p: float = 0.5  # Token cost exponent


class ContextBudgets(BaseModel):
    """Token allowance per chunk type. ``None`` or 0 excludes the category."""

    model_config = ConfigDict(populate_by_name=True)

    local: int | None = Field(default=600, ge=0)
    character: int | None = Field(default=400, ge=0)
    story: int | None = Field(default=800, ge=0)
    global_: int | None = Field(default=None, ge=0, alias="global")

    def get(self, chunk_type: ChunkType | str) -> int | None:
        key = ChunkType(chunk_type).value
        return getattr(self, "global_" if key == "global" else key)

    @classmethod
    def from_mapping(cls, budgets: Mapping[ChunkType | str, int | None]) -> ContextBudgets:
        """Build budgets from a partial mapping; unnamed types are excluded."""
        values = {ChunkType(k).value: v for k, v in budgets.items()}
        return cls(**{t.value: values.get(t.value) for t in ChunkType})

    def as_dict(self) -> dict[str, int | None]:
        return {t.value: self.get(t) for t in ChunkType}


# Render order for packages: long-range material first, recent dialogue last
_RENDER_ORDER = [ChunkType.GLOBAL, ChunkType.STORY, ChunkType.CHARACTER, ChunkType.LOCAL]

_SECTION_TITLES = {
    ChunkType.GLOBAL: "World",
    ChunkType.STORY: "Story so far",
    ChunkType.CHARACTER: "Characters",
    ChunkType.LOCAL: "Recent dialogue",
}


class ContextPackage(BaseModel):
    """Selected context for one target scene, ready for prompt assembly."""

    target_scene_id: str
    chunks: list[ContextChunk] = Field(default_factory=list)
    scores: dict[str, float] = Field(default_factory=dict)
    budgets: dict[str, int | None] = Field(default_factory=dict)
    chunks_available: int = 0  # Candidates before the budget cut
    assembly_time_ms: float = 0.0

    @property
    def total_tokens(self) -> int:
        return sum(c.tokens for c in self.chunks)

    def tokens_by_type(self) -> dict[str, int]:
        used: dict[str, int] = {}
        for chunk in self.chunks:
            used[chunk.type.value] = used.get(chunk.type.value, 0) + chunk.tokens
        return used

    def chunks_of(self, chunk_type: ChunkType) -> list[ContextChunk]:
        return [c for c in self.chunks if c.type == chunk_type]

    def render(self, include_metadata: bool = True) -> str:
        """Render the package as prompt material.

        Sections follow a fixed order. Local dialogue keeps its original
        line order so the excerpt reads chronologically.
        """
        sections: list[str] = []

        if include_metadata:
            sections.append(f"# Narrative context for scene: {self.target_scene_id}")
            sections.append(
                f"# {len(self.chunks)} of {self.chunks_available} chunks "
                f"(~{self.total_tokens:,} tokens)"
            )
            sections.append("")

        for chunk_type in _RENDER_ORDER:
            chunks = self.chunks_of(chunk_type)
            if not chunks:
                continue
            if chunk_type == ChunkType.LOCAL:
                chunks = sorted(chunks, key=lambda c: c.time_distance, reverse=True)

            sections.append(f"## {_SECTION_TITLES[chunk_type]}")
            for chunk in chunks:
                if include_metadata and chunk.id in self.scores:
                    sections.append(
                        f"# [{chunk.id}] score={self.scores[chunk.id]:.3f} "
                        f"distance={chunk.graph_distance}"
                    )
                sections.append(chunk.text)
            sections.append("")

        return "\n".join(sections)

    def summary(self) -> str:
        """Human-readable summary of what was selected."""
        used = self.tokens_by_type()
        lines = [
            f"Context package for scene: {self.target_scene_id}",
            f"Chunks: {len(self.chunks)} selected, {self.chunks_available} candidates",
            f"Tokens: {self.total_tokens:,}",
            f"Assembly time: {self.assembly_time_ms:.1f}ms",
            "",
            "Budget usage:",
        ]
        for chunk_type in ChunkType:
            budget = self.budgets.get(chunk_type.value)
            if not budget:
                lines.append(f"  {chunk_type.value}: excluded")
                continue
            lines.append(f"  {chunk_type.value}: {used.get(chunk_type.value, 0)} / {budget}")
        return "\n".join(lines)


class TokenEstimator:
    """Estimate token counts for narrative text."""

    # Rough heuristic: 1 token ≈ 4 characters of prose
    CHARS_PER_TOKEN = 4

    @classmethod
    def estimate(cls, text: str) -> int:
        """Estimate token count for a string, rounding up."""
        return math.ceil(len(text) / cls.CHARS_PER_TOKEN)


class ContextConfig(BaseModel):
    """Context selection settings stored in the project config."""

    weights: ContextWeights = Field(default_factory=ContextWeights)
    budgets: ContextBudgets = Field(default_factory=ContextBudgets)
    local_window: int = 5  # Trailing dialogue lines taken from the target scene
    default_importance: float = 0.2  # For scenes without authored factors
