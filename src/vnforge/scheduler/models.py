"""Data models for procedurally scheduled story skeletons."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from vnforge.story.models import (
    CHOICE,
    END_STORY,
    TEXT,
    TRANSITION,
    Choice,
    DialogueItem,
    Scene,
)


class NodeType(str, Enum):
    """Structural role of a skeleton node."""

    LINEAR = "linear"  # One transition onward
    DECISION = "decision"  # Two options, same successor (state effects only)
    SPLIT = "split"  # Two options, main line or a sub-branch
    TERMINAL = "terminal"  # Story end

    @property
    def code(self) -> str:
        return self.value[0].upper()


_DESCRIPTIONS = {
    NodeType.LINEAR: "A linear progression scene.",
    NodeType.DECISION: "A moment of choice.",
    NodeType.SPLIT: "The path diverges here.",
    NodeType.TERMINAL: "The story ends here.",
}

_PLACEHOLDER_LINES = {
    NodeType.LINEAR: "The story continues...",
    NodeType.DECISION: "A decision must be made.",
    NodeType.SPLIT: "The path splits before you.",
    NodeType.TERMINAL: "The End.",
}


class SkeletonChoice(BaseModel):
    """A labeled option of a decision or split node."""

    text: str
    next_scene_id: str


class SkeletonOutcome(BaseModel):
    """How a skeleton node continues: transition, choice or end_story."""

    type: str
    next_scene_id: str | None = None
    choices: list[SkeletonChoice] = Field(default_factory=list)


class SkeletonNode(BaseModel):
    """A content-free scene placeholder in a generated skeleton."""

    id: str
    type: NodeType
    label: str
    outcome: SkeletonOutcome
    branch_of: int | None = None  # Main-chain index of the spawning split

    @property
    def name(self) -> str:
        return f"[{self.type.code}] {self.label}"

    @property
    def successor_ids(self) -> list[str]:
        if self.outcome.type == TRANSITION and self.outcome.next_scene_id:
            return [self.outcome.next_scene_id]
        return [c.next_scene_id for c in self.outcome.choices]

    def to_scene(self) -> Scene:
        """Realize this node as a scene with placeholder dialogue."""
        dialogue = [DialogueItem(type=TEXT, text=_PLACEHOLDER_LINES[self.type])]
        if self.outcome.type == TRANSITION:
            dialogue.append(
                DialogueItem(type=TRANSITION, next_scene_id=self.outcome.next_scene_id)
            )
        elif self.outcome.type == CHOICE:
            dialogue.append(DialogueItem(
                type=CHOICE,
                choices=[
                    Choice(text=c.text, next_scene_id=c.next_scene_id)
                    for c in self.outcome.choices
                ],
            ))
        else:
            dialogue.append(DialogueItem(type=END_STORY))

        return Scene(
            id=self.id,
            name=self.name,
            description=_DESCRIPTIONS[self.type],
            dialogue=dialogue,
        )


class SchedulerConfig(BaseModel):
    """Structural parameters for skeleton generation."""

    main_branch_size: int = 8
    split_branch_size: int = 3
    split_probability: float = 0.15
    decision_probability: float = 0.15
    prompt: str = ""  # Passed through to content filling, unused here
    seed: int | None = None
