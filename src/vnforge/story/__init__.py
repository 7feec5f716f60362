"""Story data model: scenes, narrative items, cast."""

from vnforge.story.loader import load_story, save_story
from vnforge.story.models import (
    CheckpointSummary,
    Character,
    Choice,
    DialogueItem,
    NodeImportanceFactors,
    Scene,
    SceneCharacter,
    Story,
)

__all__ = [
    "Character",
    "CheckpointSummary",
    "Choice",
    "DialogueItem",
    "NodeImportanceFactors",
    "Scene",
    "SceneCharacter",
    "Story",
    "load_story",
    "save_story",
]
