"""Data models for stories, scenes, and narrative items.

Models accept both the camelCase keys written by the authoring app
(``nextSceneId``, ``isCheckpoint``) and snake_case field names.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Narrative item types that carry successor scene ids
TRANSITION = "transition"
CHOICE = "choice"
TEXT = "text"
END_STORY = "end_story"


class StoryModel(BaseModel):
    """Base model for app-shaped story data."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Character(StoryModel):
    """A cast member."""

    id: str
    name: str
    appearance: str = ""
    talking_style: str = ""


class SceneCharacter(StoryModel):
    """A character placed in a scene."""

    character_id: str
    sprite_id: str = ""
    position: str = "center"


class Choice(StoryModel):
    """One option of a choice item."""

    text: str = ""
    next_scene_id: str | None = None


class DialogueItem(StoryModel):
    """A single narrative item inside a scene.

    One model covers every item type the editor produces; only
    ``text``, ``transition`` and ``choice`` matter for context selection.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    type: str
    character_id: str | None = None
    text: str = ""
    next_scene_id: str | None = None
    choices: list[Choice | None] | None = None


class NodeImportanceFactors(StoryModel):
    """Authored narrative weight of a scene, each factor in [0, 1]."""

    decision_weight: float = 0.0
    payoff_weight: float = 0.0
    emotional_intensity: float = 0.0
    lore_density: float = 0.0


class Scene(StoryModel):
    """A node in the narrative graph."""

    id: str
    name: str = ""
    description: str = ""
    characters: list[SceneCharacter] = Field(default_factory=list)
    dialogue: list[DialogueItem] = Field(default_factory=list)
    is_checkpoint: bool = False
    importance: NodeImportanceFactors | None = None

    def character_ids(self) -> set[str]:
        return {c.character_id for c in self.characters}

    def text_lines(self) -> list[DialogueItem]:
        return [item for item in self.dialogue if item.type == TEXT]

    def successor_ids(self) -> list[str]:
        """Successor scene ids in item order, skipping malformed entries."""
        successors: list[str] = []
        for item in self.dialogue:
            if item.type == TRANSITION and item.next_scene_id:
                successors.append(item.next_scene_id)
            elif item.type == CHOICE and item.choices:
                for choice in item.choices:
                    if choice is not None and choice.next_scene_id:
                        successors.append(choice.next_scene_id)
        return successors

    def ends_story(self) -> bool:
        return any(item.type == END_STORY for item in self.dialogue)


class CheckpointSummary(StoryModel):
    """Precomputed summary attached to a checkpoint scene."""

    text: str
    tokens: int = Field(ge=0)


class Story(StoryModel):
    """A branching story: cast, scenes, and checkpoint summaries."""

    id: str = ""
    name: str = ""
    characters: dict[str, Character] = Field(default_factory=dict)
    scenes: dict[str, Scene] = Field(default_factory=dict)
    start_scene_id: str = ""
    checkpoint_summaries: dict[str, CheckpointSummary] = Field(default_factory=dict)

    def character_name(self, character_id: str | None) -> str:
        character = self.characters.get(character_id or "")
        return character.name if character else "Narrator"
